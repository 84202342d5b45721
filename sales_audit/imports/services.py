"""Two-pass commit of a validated import batch.

Pass 1 creates or updates every employee without touching manager links
and upserts the period's monthly performance. Pass 2 resolves manager
links by code, so row order inside the batch never matters.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from dataclasses import field
from typing import Any

from django.db import transaction
from django.utils import timezone

from sales_audit.activity.utils import log_action
from sales_audit.audits.exceptions import HierarchyViolationError
from sales_audit.employees.models import Employee
from sales_audit.employees.models import MonthlyPerformance
from sales_audit.employees.services.hierarchy import validate_manager_assignment
from sales_audit.employees.services.hierarchy import validate_position_change
from sales_audit.imports.models import UploadLog
from sales_audit.imports.validators import BulkImportValidator
from sales_audit.imports.validators import ImportValidation
from sales_audit.imports.validators import RowError
from sales_audit.org.models import Position

logger = logging.getLogger(__name__)

PERIOD_RE = re.compile(r"^(\d{4})-(\d{2})$")


class ImportAborted(Exception):  # noqa: N818
    def __init__(self, error: RowError):
        super().__init__(error.error)
        self.error = error


@dataclass
class ImportCommitResult:
    upload_log: UploadLog
    validation: ImportValidation
    employees_created: int = 0
    employees_updated: int = 0
    performance_rows: int = 0
    managers_linked: int = 0
    errors: list[RowError] = field(default_factory=list)

    @property
    def committed(self) -> bool:
        return self.upload_log.status != UploadLog.Status.FAILED

    def as_dict(self) -> dict[str, Any]:
        return {
            "committed": self.committed,
            "upload_log_id": self.upload_log.pk,
            "status": self.upload_log.status,
            "employees_created": self.employees_created,
            "employees_updated": self.employees_updated,
            "performance_rows": self.performance_rows,
            "managers_linked": self.managers_linked,
            "validation": self.validation.as_dict(),
            "errors": [e.as_dict() for e in self.errors],
        }


def parse_period(period: str) -> tuple[int, int]:
    match = PERIOD_RE.match((period or "").strip())
    if not match:
        msg = "Period must use the YYYY-MM format"
        raise ValueError(msg)
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:  # noqa: PLR2004
        msg = f"Month {month:02d} is out of range"
        raise ValueError(msg)
    return year, month


def _upsert_employee(
    row: dict[str, Any], position: Position, branch
) -> tuple[Employee, bool, bool]:
    """Create or update the row's employee.

    Returns ``(employee, created, position_changed)``. Manager links are left
    to the second pass.
    """
    employee = Employee.objects.select_related("position").filter(
        employee_code=row["employee_code"]
    ).first()
    if employee is None:
        employee = Employee.objects.create(
            employee_code=row["employee_code"],
            full_name=row["nama"],
            position=position,
            date_of_birth=row["tgl_lahir"],
            email=row.get("email") or "",
            branch=branch,
            company=getattr(branch, "company", None),
            join_date=timezone.localdate(),
        )
        return employee, True, False
    position_changed = employee.position_id != position.pk
    try:
        validate_position_change(employee, position)
    except HierarchyViolationError as exc:
        raise ImportAborted(RowError(row["row"], "posisi", exc.message, row["posisi"])) from exc
    employee.full_name = row["nama"]
    employee.position = position
    employee.date_of_birth = row["tgl_lahir"]
    if row.get("email"):
        employee.email = row["email"]
    if branch is not None:
        employee.branch = branch
    employee.save()
    return employee, False, position_changed


def _check_link(
    row: dict[str, Any], manager: Employee, employee: Employee, *, field_name: str
) -> None:
    try:
        validate_manager_assignment(
            manager=manager, position=employee.position, employee=employee
        )
    except HierarchyViolationError as exc:
        raise ImportAborted(
            RowError(row["row"], field_name, exc.message, row[field_name])
        ) from exc


def commit_import(  # noqa: PLR0913
    rows: list[dict[str, Any]],
    *,
    period: str,
    branch=None,
    actor=None,
    file_name: str = "",
    allow_partial: bool = False,
) -> ImportCommitResult:
    """Validate ``rows`` and, when acceptable, write them for ``period``.

    Circular chains always reject the batch. Other row errors reject it
    unless ``allow_partial`` is set, in which case only valid rows are
    written and the log is marked partial.
    """
    year, month = parse_period(period)
    validation = BulkImportValidator().validate(rows)
    uploader = actor if getattr(actor, "is_authenticated", False) else None
    log_fields = {
        "period": f"{year:04d}-{month:02d}",
        "branch": branch,
        "uploaded_by": uploader,
        "file_name": file_name,
        "total_rows": len(rows),
    }

    acceptable = validation.is_valid or (
        allow_partial and not validation.circular_references and validation.valid_rows
    )
    if not acceptable:
        upload_log = UploadLog.objects.create(
            **log_fields,
            success_rows=0,
            error_rows=len(rows),
            status=UploadLog.Status.FAILED,
            errors=[e.as_dict() for e in validation.errors],
        )
        log_action(
            "imports.upload.rejected",
            actor=actor,
            model_name="UploadLog",
            record_id=upload_log.pk,
            after={"errors": len(validation.errors)},
        )
        return ImportCommitResult(upload_log=upload_log, validation=validation)

    result_counts = {"created": 0, "updated": 0, "performance": 0, "linked": 0}
    try:
        with transaction.atomic():
            positions = {p.code: p for p in Position.objects.all()}
            committed: dict[str, Employee] = {}
            repositioned: set[str] = set()
            for row in validation.valid_rows:
                employee, created, position_changed = _upsert_employee(
                    row, positions[row["posisi"]], branch
                )
                committed[employee.employee_code] = employee
                if position_changed:
                    repositioned.add(employee.employee_code)
                result_counts["created" if created else "updated"] += 1
                MonthlyPerformance.objects.update_or_create(
                    employee=employee,
                    year=year,
                    month=month,
                    defaults={
                        "margin_personal": row["margin"],
                        "na_personal": row["na"],
                    },
                )
                result_counts["performance"] += 1

            manager_codes = {
                r["atasan_code"] for r in validation.valid_rows if r["atasan_code"]
            }
            managers = {
                e.employee_code: e
                for e in Employee.objects.select_related("position").filter(
                    employee_code__in=manager_codes
                )
            }
            for row in validation.valid_rows:
                employee = committed[row["employee_code"]]
                if not row["atasan_code"]:
                    # Kept link: a new position must still sit below the current manager.
                    if employee.manager_id and employee.employee_code in repositioned:
                        current = Employee.objects.select_related("position").get(
                            pk=employee.manager_id
                        )
                        _check_link(row, current, employee, field_name="posisi")
                    continue
                manager = managers.get(row["atasan_code"])
                if manager is None:
                    raise ImportAborted(
                        RowError(
                            row["row"],
                            "atasan_code",
                            f"Manager {row['atasan_code']} was not imported",
                            row["atasan_code"],
                        )
                    )
                if employee.manager_id == manager.pk:
                    if employee.employee_code in repositioned:
                        _check_link(row, manager, employee, field_name="posisi")
                    continue
                _check_link(row, manager, employee, field_name="atasan_code")
                employee.manager = manager
                employee.save(update_fields=["manager", "updated_at"])
                result_counts["linked"] += 1
    except ImportAborted as exc:
        logger.warning("Import for %s rolled back: %s", log_fields["period"], exc)
        upload_log = UploadLog.objects.create(
            **log_fields,
            success_rows=0,
            error_rows=len(rows),
            status=UploadLog.Status.FAILED,
            errors=[*(e.as_dict() for e in validation.errors), exc.error.as_dict()],
        )
        return ImportCommitResult(
            upload_log=upload_log, validation=validation, errors=[exc.error]
        )

    success_rows = len(validation.valid_rows)
    upload_log = UploadLog.objects.create(
        **log_fields,
        success_rows=success_rows,
        error_rows=len(rows) - success_rows,
        employees_created=result_counts["created"],
        employees_updated=result_counts["updated"],
        performance_rows=result_counts["performance"],
        status=UploadLog.Status.SUCCESS if validation.is_valid else UploadLog.Status.PARTIAL,
        errors=[e.as_dict() for e in validation.errors],
    )
    logger.info(
        "Import %s committed: %d created, %d updated, %d manager links",
        upload_log.period,
        result_counts["created"],
        result_counts["updated"],
        result_counts["linked"],
    )
    log_action(
        "imports.upload.commit",
        actor=actor,
        model_name="UploadLog",
        record_id=upload_log.pk,
        after={
            "period": upload_log.period,
            "status": upload_log.status,
            "employees_created": result_counts["created"],
            "employees_updated": result_counts["updated"],
        },
    )
    return ImportCommitResult(
        upload_log=upload_log,
        validation=validation,
        employees_created=result_counts["created"],
        employees_updated=result_counts["updated"],
        performance_rows=result_counts["performance"],
        managers_linked=result_counts["linked"],
    )
