from django.apps import apps
from django.contrib.auth.models import Group
from django.contrib.auth.models import Permission
from django.contrib.contenttypes.models import ContentType
from django.core.management.base import BaseCommand
from django.utils.translation import gettext as _

from sales_audit.employees.api.permissions import ROLE_ADMIN
from sales_audit.employees.api.permissions import ROLE_BRANCH_MANAGER
from sales_audit.employees.api.permissions import ROLE_OWNER

FULL_ACTIONS = ("add", "change", "delete", "view")
MANAGE_ACTIONS = ("add", "change", "view")
READ_ACTIONS = ("view",)

# Admin receives every permission of the apps below.
ROLE_APP_ACTIONS = {
    ROLE_OWNER: {
        "audits": MANAGE_ACTIONS,
        "employees": FULL_ACTIONS,
        "imports": MANAGE_ACTIONS,
        "org": FULL_ACTIONS,
        "activity": READ_ACTIONS,
    },
    ROLE_BRANCH_MANAGER: {
        "audits": MANAGE_ACTIONS,
        "employees": READ_ACTIONS,
        "imports": MANAGE_ACTIONS,
        "org": READ_ACTIONS,
        "activity": READ_ACTIONS,
    },
}
ADMIN_APPS = ("activity", "audits", "employees", "imports", "org", "users")


class Command(BaseCommand):
    help = _("Create the Admin, Owner and Branch Manager groups with permissions")

    def handle(self, *args, **options):
        self._ensure_group(ROLE_ADMIN, self._permissions_for(dict.fromkeys(ADMIN_APPS, FULL_ACTIONS)))
        for role_name, rules in ROLE_APP_ACTIONS.items():
            self._ensure_group(role_name, self._permissions_for(rules))
        self.stdout.write(self.style.SUCCESS("RBAC setup complete"))

    def _permissions_for(self, app_actions: dict[str, tuple[str, ...]]) -> list[Permission]:
        perms: list[Permission] = []
        for label, actions in app_actions.items():
            try:
                app_config = apps.get_app_config(label)
            except LookupError:
                continue
            for model in app_config.get_models():
                ct = ContentType.objects.get_for_model(model)
                codenames = [f"{action}_{model._meta.model_name}" for action in actions]  # noqa: SLF001
                perms.extend(Permission.objects.filter(content_type=ct, codename__in=codenames))
        return perms

    def _ensure_group(self, role_name: str, perms: list[Permission]) -> None:
        group, _created = Group.objects.get_or_create(name=role_name)
        group.permissions.set(perms)
        msg = f"Ensured group '{role_name}' with permissions ({len(perms)})"
        self.stdout.write(self.style.SUCCESS(msg))
