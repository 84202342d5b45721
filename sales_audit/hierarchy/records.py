from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from typing import Any


@dataclass(frozen=True)
class EmployeeRecord:
    """Minimal view of an employee as the hierarchy engine needs it."""

    id: int
    employee_code: str
    full_name: str
    manager_id: int | None = None
    position_code: str = ""
    position_name: str = ""
    position_level: int | None = None


@dataclass(frozen=True)
class AuditFigures:
    """Quarterly figures stored on a subordinate's audit.

    Values are kept as they were stored (strings, Decimals or numbers);
    the aggregator normalizes them.
    """

    employee_id: int
    margin_personal: Any = 0
    margin_team: Any = 0
    na_personal: Any = 0
    na_team: Any = 0


@dataclass
class TreeNode:
    employee: EmployeeRecord
    children: list[TreeNode] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.employee.id,
            "employee_code": self.employee.employee_code,
            "full_name": self.employee.full_name,
            "position_code": self.employee.position_code,
            "position_name": self.employee.position_name,
            "children": [child.as_dict() for child in self.children],
        }
