"""Write-time checks for manager links.

A manager must outrank the employee (strictly lower position level) and
must not already sit below the employee, otherwise the reporting forest
would gain a cycle.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sales_audit.audits.exceptions import HierarchyViolationError
from sales_audit.audits.repository import get_walker
from sales_audit.hierarchy.repository import HierarchyError

if TYPE_CHECKING:
    from sales_audit.employees.models import Employee
    from sales_audit.org.models import Position

logger = logging.getLogger(__name__)


def validate_manager_assignment(
    *,
    manager: Employee | None,
    position: Position,
    employee: Employee | None = None,
) -> None:
    """Raise ``HierarchyViolationError`` when ``manager`` cannot manage the employee.

    ``employee`` is None for a not-yet-created employee; only the rank check
    applies then.
    """
    if manager is None:
        return
    if employee is not None and employee.pk == manager.pk:
        msg = "An employee cannot be their own manager"
        raise HierarchyViolationError(msg)
    if manager.position.level >= position.level:
        msg = (
            f"Manager {manager.employee_code} ({manager.position.code}, level "
            f"{manager.position.level}) must outrank position {position.code} "
            f"(level {position.level})"
        )
        raise HierarchyViolationError(msg)
    if employee is None or employee.pk is None:
        return
    try:
        below = get_walker().can_manage(employee.pk, manager.pk)
    except HierarchyError as exc:
        logger.error("Hierarchy walk failed for employee %s: %s", employee.pk, exc)
        raise HierarchyViolationError(str(exc)) from exc
    if below:
        msg = (
            f"{manager.employee_code} reports to {employee.employee_code}; "
            "assigning them as manager would create a circular chain"
        )
        raise HierarchyViolationError(msg)


def ensure_deletable(employee: Employee) -> None:
    if employee.subordinates.exists():
        count = employee.subordinates.count()
        msg = (
            f"{employee.employee_code} still manages {count} employee(s); "
            "reassign them first"
        )
        raise HierarchyViolationError(msg)
    if employee.audits.exists():
        msg = f"{employee.employee_code} has audits and cannot be deleted"
        raise HierarchyViolationError(msg)


def validate_position_change(employee: Employee, position: Position) -> None:
    """A new position must still outrank every direct report."""
    if employee.pk is None or employee.position_id == position.pk:
        return
    blocked = employee.subordinates.filter(position__level__lte=position.level)
    if blocked.exists():
        codes = ", ".join(blocked.values_list("employee_code", flat=True)[:5])
        msg = (
            f"Position {position.code} (level {position.level}) does not outrank "
            f"current subordinates: {codes}"
        )
        raise HierarchyViolationError(msg)
