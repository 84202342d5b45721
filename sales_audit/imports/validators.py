"""Read-only validation of a spreadsheet batch before anything is written.

Rows are numbered the way the spreadsheet shows them: the header is row 1,
so the first data row is row 2.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field
from typing import Any

from rest_framework import serializers

from sales_audit.employees.api.fields import NormalizedDecimalField
from sales_audit.org.positions import DEFAULT_POSITIONS
from sales_audit.policies import import_max_rows

logger = logging.getLogger(__name__)

FIRST_DATA_ROW = 2
POSITION_LEVELS: dict[str, int] = {code: level for code, _, level in DEFAULT_POSITIONS}


class ImportRowSerializer(serializers.Serializer):
    employee_code = serializers.CharField(max_length=20)
    nama = serializers.CharField(max_length=200)
    posisi = serializers.CharField(max_length=50)
    atasan_code = serializers.CharField(
        max_length=20, required=False, allow_null=True, allow_blank=True, default=None
    )
    tgl_lahir = serializers.DateField(input_formats=["%Y-%m-%d"])
    margin = NormalizedDecimalField(max_digits=15, decimal_places=2, min_value=0)
    na = serializers.IntegerField(min_value=0)
    email = serializers.EmailField(required=False, allow_null=True, allow_blank=True)

    def validate_employee_code(self, value: str) -> str:
        return value.strip().upper()

    def validate_atasan_code(self, value):
        value = (value or "").strip().upper()
        return value or None

    def validate_posisi(self, value: str) -> str:
        value = value.strip()
        if value not in POSITION_LEVELS:
            msg = f"Invalid position: {value}. Must be one of: {', '.join(POSITION_LEVELS)}"
            raise serializers.ValidationError(msg)
        return value


@dataclass(frozen=True)
class RowError:
    row: int
    field: str
    error: str
    value: Any = None

    def as_dict(self) -> dict[str, Any]:
        data = {"row": self.row, "field": self.field, "error": self.error}
        if self.value is not None:
            data["value"] = self.value
        return data


@dataclass(frozen=True)
class CircularReference:
    employee_code: str
    chain: tuple[str, ...]

    def as_dict(self) -> dict[str, Any]:
        return {"employee_code": self.employee_code, "chain": list(self.chain)}


@dataclass
class ImportValidation:
    total_rows: int
    errors: list[RowError] = field(default_factory=list)
    circular_references: list[CircularReference] = field(default_factory=list)
    valid_rows: list[dict[str, Any]] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors and not self.circular_references

    @property
    def invalid_row_numbers(self) -> set[int]:
        return {e.row for e in self.errors if e.row >= FIRST_DATA_ROW}

    def as_dict(self) -> dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "total_rows": self.total_rows,
            "valid_count": len(self.valid_rows),
            "invalid_count": len(self.invalid_row_numbers),
            "errors": [e.as_dict() for e in self.errors],
            "circular_references": [c.as_dict() for c in self.circular_references],
        }


def _json_safe(value):
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


def find_circular_chains(manager_of: Mapping[str, str | None]) -> list[CircularReference]:
    """Report each manager cycle in ``manager_of`` once.

    Every code is walked at most once across all starting points: a walk
    stops as soon as it reaches a code already settled by an earlier walk.
    """
    settled: set[str] = set()
    cycles: list[CircularReference] = []
    for start in manager_of:
        if start in settled:
            continue
        path: list[str] = []
        on_path: dict[str, int] = {}
        current: str | None = start
        while current is not None and current in manager_of and current not in settled:
            if current in on_path:
                loop = path[on_path[current] :]
                cycles.append(CircularReference(loop[0], (*loop, current)))
                break
            on_path[current] = len(path)
            path.append(current)
            current = manager_of[current]
        settled.update(path)
    return cycles


class BulkImportValidator:
    """Validate import rows against each other and the persisted employees.

    ``known_employees`` maps already persisted employee codes to their
    position code. When omitted, the database is queried for the manager
    codes the batch references.
    """

    def __init__(
        self,
        *,
        known_employees: Mapping[str, str] | None = None,
        max_rows: int | None = None,
    ):
        self.known_employees = known_employees
        self.max_rows = max_rows if max_rows is not None else import_max_rows()

    def _lookup_persisted(self, codes: set[str]) -> dict[str, str]:
        if not codes:
            return {}
        if self.known_employees is not None:
            return {c: self.known_employees[c] for c in codes if c in self.known_employees}
        from sales_audit.employees.models import Employee  # noqa: PLC0415

        return dict(
            Employee.objects.filter(employee_code__in=codes).values_list(
                "employee_code", "position__code"
            )
        )

    def validate(self, rows: list[Mapping[str, Any]]) -> ImportValidation:  # noqa: C901
        result = ImportValidation(total_rows=len(rows))
        if len(rows) > self.max_rows:
            result.errors.append(
                RowError(0, "rows", f"Batch has {len(rows)} rows; the limit is {self.max_rows}")
            )
            return result

        parsed: list[dict[str, Any]] = []
        rejected: dict[str, int] = {}
        for idx, raw in enumerate(rows):
            row_num = idx + FIRST_DATA_ROW
            serializer = ImportRowSerializer(data=dict(raw))
            if not serializer.is_valid():
                raw_code = str(raw.get("employee_code") or "").strip().upper()
                if raw_code:
                    rejected.setdefault(raw_code, row_num)
                for name, messages in serializer.errors.items():
                    result.errors.append(
                        RowError(row_num, name, str(messages[0]), _json_safe(raw.get(name)))
                    )
                continue
            parsed.append({"row": row_num, **serializer.validated_data})

        batch: dict[str, dict[str, Any]] = {}
        for row in parsed:
            code = row["employee_code"]
            if code in batch:
                result.errors.append(
                    RowError(
                        row["row"],
                        "employee_code",
                        f"Duplicate employee code: {code} (first seen on row {batch[code]['row']})",
                        code,
                    )
                )
                continue
            batch[code] = row

        referenced = {
            r["atasan_code"] for r in batch.values() if r["atasan_code"] is not None
        }
        persisted = self._lookup_persisted(referenced - set(batch))

        for code, row in batch.items():
            manager_code = row["atasan_code"]
            if manager_code is None or manager_code == code:
                continue
            if manager_code in batch:
                manager_position = batch[manager_code]["posisi"]
            elif manager_code in persisted:
                manager_position = persisted[manager_code]
            elif manager_code in rejected:
                result.errors.append(
                    RowError(
                        row["row"],
                        "atasan_code",
                        f"Manager {manager_code} is on row {rejected[manager_code]}, which is invalid",
                        manager_code,
                    )
                )
                continue
            else:
                result.errors.append(
                    RowError(
                        row["row"],
                        "atasan_code",
                        f"Manager {manager_code} not found in upload or database",
                        manager_code,
                    )
                )
                continue
            manager_level = POSITION_LEVELS.get(manager_position)
            if manager_level is not None and manager_level >= POSITION_LEVELS[row["posisi"]]:
                result.errors.append(
                    RowError(
                        row["row"],
                        "atasan_code",
                        f"Manager {manager_code} ({manager_position}) must outrank {row['posisi']}",
                        manager_code,
                    )
                )

        cycles = find_circular_chains({c: r["atasan_code"] for c, r in batch.items()})
        for cycle in cycles:
            result.circular_references.append(cycle)
            result.errors.append(
                RowError(
                    batch[cycle.employee_code]["row"],
                    "atasan_code",
                    "Circular reference detected: " + " -> ".join(cycle.chain),
                    batch[cycle.employee_code]["atasan_code"],
                )
            )
        in_cycle = {code for cycle in cycles for code in cycle.chain}

        invalid = result.invalid_row_numbers
        result.valid_rows = [
            row
            for code, row in batch.items()
            if row["row"] not in invalid and code not in in_cycle
        ]
        if not result.is_valid:
            logger.info(
                "Import validation failed: %d error(s), %d cycle(s) in %d rows",
                len(result.errors),
                len(result.circular_references),
                len(rows),
            )
        return result
