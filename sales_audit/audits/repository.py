from __future__ import annotations

from typing import TYPE_CHECKING

from sales_audit.audits.models import Audit
from sales_audit.employees.models import Employee
from sales_audit.hierarchy.records import AuditFigures
from sales_audit.hierarchy.records import EmployeeRecord
from sales_audit.hierarchy.repository import HierarchyRepository
from sales_audit.hierarchy.walker import SubordinateTreeWalker
from sales_audit.policies import hierarchy_max_depth

if TYPE_CHECKING:
    from collections.abc import Iterable

_EMPLOYEE_FIELDS = (
    "id",
    "employee_code",
    "full_name",
    "manager_id",
    "position__code",
    "position__name",
    "position__level",
)


def _record(row: dict) -> EmployeeRecord:
    return EmployeeRecord(
        id=row["id"],
        employee_code=row["employee_code"],
        full_name=row["full_name"],
        manager_id=row["manager_id"],
        position_code=row["position__code"] or "",
        position_name=row["position__name"] or "",
        position_level=row["position__level"],
    )


class DjangoHierarchyRepository(HierarchyRepository):
    """ORM-backed repository. Soft-deleted audits count as missing."""

    def get_employee(self, employee_id):
        row = Employee.objects.filter(pk=employee_id).values(*_EMPLOYEE_FIELDS).first()
        return _record(row) if row else None

    def direct_subordinates(self, manager_id):
        return self.direct_subordinates_many([manager_id])

    def direct_subordinates_many(self, manager_ids: Iterable[int]):
        qs = (
            Employee.objects.filter(manager_id__in=list(manager_ids))
            .order_by("full_name", "id")
            .values(*_EMPLOYEE_FIELDS)
        )
        return [_record(row) for row in qs]

    def audits_for_period(self, employee_ids, year, quarter):
        rows = (
            Audit.objects.active()
            .for_period(year, quarter)
            .filter(employee_id__in=list(employee_ids))
            .values(
                "employee_id",
                "margin_personal_q",
                "margin_team_q",
                "na_personal_q",
                "na_team_q",
            )
        )
        return {
            row["employee_id"]: AuditFigures(
                employee_id=row["employee_id"],
                margin_personal=row["margin_personal_q"],
                margin_team=row["margin_team_q"],
                na_personal=row["na_personal_q"],
                na_team=row["na_team_q"],
            )
            for row in rows
        }


def get_walker() -> SubordinateTreeWalker:
    return SubordinateTreeWalker(DjangoHierarchyRepository(), max_depth=hierarchy_max_depth())
