import importlib

from django.apps import AppConfig


class ActivityConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "sales_audit.activity"

    def ready(self) -> None:  # pragma: no cover
        importlib.import_module("sales_audit.activity.signals")
        return super().ready()
