"""Role and hierarchy permissions shared by the API apps."""

from collections.abc import Iterable

from rest_framework.permissions import SAFE_METHODS
from rest_framework.permissions import BasePermission

from sales_audit.audits.repository import get_walker

ROLE_ADMIN = "Admin"
ROLE_OWNER = "Owner"
ROLE_BRANCH_MANAGER = "Branch Manager"
RBAC_GROUPS = (ROLE_ADMIN, ROLE_OWNER, ROLE_BRANCH_MANAGER)


def _user_in_groups(user, names: Iterable[str]) -> bool:
    groups = getattr(user, "groups", None)
    names_list = list(names)
    if not groups or not names_list:
        return False
    return groups.filter(name__in=names_list).exists()


def _is_staff_or_role(user, roles: Iterable[str]) -> bool:
    return bool(getattr(user, "is_staff", False)) or _user_in_groups(user, roles)


def has_global_scope(user) -> bool:
    """Admins and owners see and act on the whole organization."""
    return bool(getattr(user, "is_superuser", False)) or _is_staff_or_role(
        user, [ROLE_ADMIN, ROLE_OWNER]
    )


def requester_employee(user):
    return getattr(user, "employee", None) if user else None


def can_manage_employee(user, employee) -> bool:
    """Global roles, or the requester sits above ``employee`` in the tree."""
    if has_global_scope(user):
        return True
    me = requester_employee(user)
    if me is None or employee is None:
        return False
    return get_walker().can_manage(me.pk, employee.pk)


def managed_employee_ids(user) -> set[int] | None:
    """Employee ids visible to ``user``; ``None`` means no restriction."""
    if has_global_scope(user):
        return None
    me = requester_employee(user)
    if me is None:
        return set()
    ids = {rec.id for rec in get_walker().all_subordinates_recursive(me.pk)}
    ids.add(me.pk)
    return ids


class _RolePermission(BasePermission):
    """Base helper to gate access by role names."""

    allowed_roles: tuple[str, ...] = ()
    allow_staff: bool = True

    def has_permission(self, request, view) -> bool:
        user = getattr(request, "user", None)
        if not (user and getattr(user, "is_authenticated", False)):
            return False
        if self.allow_staff and getattr(user, "is_staff", False):
            return True
        return _user_in_groups(user, self.allowed_roles)


class IsAdmin(_RolePermission):
    allowed_roles = (ROLE_ADMIN,)


class CanImport(_RolePermission):
    allowed_roles = (ROLE_ADMIN, ROLE_OWNER, ROLE_BRANCH_MANAGER)


class IsAdminCanWrite(BasePermission):
    """Read for any authenticated user; writes for Admin/Owner only."""

    def has_permission(self, request, view):
        u = request.user
        if not (u and getattr(u, "is_authenticated", False)):
            return False
        if request.method in SAFE_METHODS:
            return True
        return _is_staff_or_role(u, [ROLE_ADMIN, ROLE_OWNER])
