"""Team roll-up of subordinate quarterly figures.

Only direct subordinates are read. Each audited subordinate contributes its
own personal figure plus the team figure already rolled up into its audit,
so totals telescope up the chain one level at a time:

    team_margin(M) = sum(personal(S) + team(S) for S audited under M)

A manager with no subordinates is vacuously fully covered (100%).
"""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from decimal import ROUND_HALF_UP
from decimal import Decimal
from typing import TYPE_CHECKING
from typing import Any

from .decimals import CENTS
from .decimals import ZERO
from .decimals import parse_decimal

if TYPE_CHECKING:
    from .records import EmployeeRecord
    from .repository import HierarchyRepository


@dataclass
class TeamAggregation:
    team_margin: Decimal = Decimal("0.00")
    team_count: int = 0
    structure: dict[str, Any] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)
    pending_subordinates: list[dict[str, Any]] = field(default_factory=list)

    @property
    def coverage_pct(self) -> int:
        return int(self.structure.get("coverage_pct", 100))

    def as_dict(self) -> dict[str, Any]:
        return {
            "team_margin": str(self.team_margin),
            "team_count": self.team_count,
            "structure": self.structure,
            "warnings": list(self.warnings),
            "pending_subordinates": list(self.pending_subordinates),
        }


def coverage_percent(audited: int, total: int) -> int:
    if total <= 0:
        return 100
    pct = Decimal(audited) * 100 / Decimal(total)
    return int(pct.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _group_by_position(
    subordinates: list[EmployeeRecord], audited_ids: set[int]
) -> list[dict[str, Any]]:
    groups: dict[str, dict[str, Any]] = {}
    for sub in subordinates:
        code = sub.position_code or "-"
        entry = groups.setdefault(
            code,
            {
                "position_code": code,
                "position_name": sub.position_name,
                "count": 0,
                "audited_count": 0,
            },
        )
        entry["count"] += 1
        if sub.id in audited_ids:
            entry["audited_count"] += 1
    return [groups[code] for code in sorted(groups)]


class TeamAggregator:
    def __init__(self, repository: HierarchyRepository):
        self.repository = repository

    def aggregate(self, manager_id: int, year: int, quarter: int) -> TeamAggregation:
        subordinates = list(self.repository.direct_subordinates(manager_id))
        total = len(subordinates)
        if total == 0:
            return TeamAggregation(
                structure={
                    "total_subordinates": 0,
                    "audited_subordinates": 0,
                    "coverage_pct": 100,
                    "by_position": [],
                },
            )

        audits = self.repository.audits_for_period(
            [s.id for s in subordinates], year, quarter
        )
        warnings: list[str] = []
        margin = ZERO
        count = ZERO
        pending: list[dict[str, Any]] = []

        for sub in subordinates:
            audit = audits.get(sub.id)
            if audit is None:
                pending.append(
                    {
                        "id": sub.id,
                        "employee_code": sub.employee_code,
                        "full_name": sub.full_name,
                        "position_name": sub.position_name,
                    }
                )
                continue
            for label, raw in (
                ("personal margin", audit.margin_personal),
                ("team margin", audit.margin_team),
                ("personal NA", audit.na_personal),
                ("team NA", audit.na_team),
            ):
                parsed = parse_decimal(raw)
                if not parsed.ok:
                    warnings.append(
                        f"{sub.employee_code}: {label} value {raw!r} is not a number; counted as 0"
                    )
                if "margin" in label:
                    margin += parsed.value
                else:
                    count += parsed.value

        audited = total - len(pending)
        coverage = coverage_percent(audited, total)
        if audited == 0:
            warnings.insert(0, "No subordinate has been audited for this period")
        elif pending:
            warnings.insert(
                0,
                f"{len(pending)} of {total} subordinates not audited "
                f"({coverage}% coverage)",
            )

        return TeamAggregation(
            team_margin=margin.quantize(CENTS),
            team_count=int(count),
            structure={
                "total_subordinates": total,
                "audited_subordinates": audited,
                "coverage_pct": coverage,
                "by_position": _group_by_position(subordinates, set(audits)),
            },
            warnings=warnings,
            pending_subordinates=pending,
        )
