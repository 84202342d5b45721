from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .records import AuditFigures
    from .records import EmployeeRecord


class HierarchyError(Exception):
    """Base class for reporting-tree integrity failures."""


class HierarchyCycleError(HierarchyError):
    def __init__(self, employee_id: int, chain: list[int] | None = None):
        self.employee_id = employee_id
        self.chain = list(chain or [])
        msg = f"Circular reporting chain detected at employee {employee_id}"
        super().__init__(msg)


class HierarchyDepthError(HierarchyError):
    def __init__(self, employee_id: int, max_depth: int):
        self.employee_id = employee_id
        self.max_depth = max_depth
        msg = (
            f"Reporting chain below employee {employee_id} exceeds "
            f"the maximum depth of {max_depth}"
        )
        super().__init__(msg)


class HierarchyRepository:
    """Storage-agnostic source of employees and their audits.

    The engine only ever asks for one level of the tree at a time; closures
    are composed on top of these calls by ``SubordinateTreeWalker``.
    Implementations must return subordinates ordered by full name.
    """

    def get_employee(self, employee_id: int) -> EmployeeRecord | None:
        raise NotImplementedError

    def direct_subordinates(self, manager_id: int) -> list[EmployeeRecord]:
        raise NotImplementedError

    def direct_subordinates_many(
        self, manager_ids: Iterable[int]
    ) -> list[EmployeeRecord]:
        """Subordinates of every id in ``manager_ids`` (one tree level).

        The default issues one query per manager; storage backends override
        it with a single ``IN`` query.
        """
        rows: list[EmployeeRecord] = []
        for manager_id in manager_ids:
            rows.extend(self.direct_subordinates(manager_id))
        return rows

    def audits_for_period(
        self, employee_ids: Iterable[int], year: int, quarter: int
    ) -> dict[int, AuditFigures]:
        """Audits for (year, quarter) keyed by employee id; missing ids are absent."""
        raise NotImplementedError
