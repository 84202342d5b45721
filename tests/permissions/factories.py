from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group

from sales_audit.audits.pillars import PILLARS
from sales_audit.employees.models import Employee
from sales_audit.employees.models import MonthlyPerformance
from sales_audit.employees.models import months_for_quarter
from sales_audit.org.positions import ensure_default_positions

if TYPE_CHECKING:
    from collections.abc import Iterable

User = get_user_model()

TEST_PASSWORD = "TestPass123!"  # noqa: S105 - test credentials only


@dataclass
class RoleContext:
    user: User
    employee: Employee | None


def ensure_groups(names: Iterable[str]) -> None:
    for name in names:
        Group.objects.get_or_create(name=name)


def create_employee(  # noqa: PLR0913
    code: str,
    position_code: str = "BC",
    *,
    manager: Employee | None = None,
    user=None,
    name: str | None = None,
    join_date=None,
    branch=None,
) -> Employee:
    positions = ensure_default_positions()
    return Employee.objects.create(
        employee_code=code,
        full_name=name or f"Employee {code}",
        position=positions[position_code],
        manager=manager,
        user=user,
        join_date=join_date,
        branch=branch,
    )


def create_user_with_role(
    username: str,
    *,
    groups: Iterable[str] | None = None,
    is_staff: bool = False,
    employee: Employee | None = None,
) -> RoleContext:
    ensure_groups(groups or [])
    user = User.objects.create_user(
        username=username,
        email=f"{username}@example.com",
        password=TEST_PASSWORD,
    )
    if is_staff:
        user.is_staff = True
        user.save(update_fields=["is_staff"])
    for group_name in groups or []:
        user.groups.add(Group.objects.get(name=group_name))
    if employee is not None:
        employee.user = user
        employee.save(update_fields=["user", "updated_at"])
    return RoleContext(user=user, employee=employee)


def add_quarter_performance(
    employee: Employee,
    year: int,
    quarter: int,
    *,
    margins=(100, 200, 300),
    nas=(1, 2, 3),
) -> list[MonthlyPerformance]:
    rows = []
    for month, margin, na in zip(months_for_quarter(quarter), margins, nas, strict=False):
        rows.append(
            MonthlyPerformance.objects.create(
                employee=employee,
                year=year,
                month=month,
                margin_personal=Decimal(str(margin)),
                na_personal=na,
            )
        )
    return rows


def pillar_answers(score: int = 3, overrides: dict[int, int] | None = None) -> list[dict]:
    overrides = overrides or {}
    return [
        {
            "pillar_id": p.id,
            "category": p.category,
            "score": overrides.get(p.id, score),
            "notes": "",
        }
        for p in PILLARS
    ]
