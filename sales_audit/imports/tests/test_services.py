from decimal import Decimal

import pytest

from sales_audit.activity.models import ActivityLog
from sales_audit.employees.models import Employee
from sales_audit.employees.models import MonthlyPerformance
from sales_audit.imports.models import UploadLog
from sales_audit.imports.services import commit_import
from sales_audit.imports.services import parse_period
from tests.permissions.factories import create_employee

pytestmark = pytest.mark.django_db


def _row(code, posisi="BC", atasan=None, **extra):
    row = {
        "employee_code": code,
        "nama": f"Name {code}",
        "posisi": posisi,
        "atasan_code": atasan,
        "tgl_lahir": "1991-02-03",
        "margin": "1000",
        "na": 2,
    }
    row.update(extra)
    return row


@pytest.mark.parametrize(("period", "expected"), [("2025-01", (2025, 1)), (" 2024-12 ", (2024, 12))])
def test_parse_period(period, expected):
    assert parse_period(period) == expected


@pytest.mark.parametrize("period", ["2025-1", "2025-00", "2025-13", "Jan 2025", ""])
def test_parse_period_rejects(period):
    with pytest.raises(ValueError):  # noqa: PT011
        parse_period(period)


def test_row_order_does_not_matter():
    rows = [
        _row("BC001", "BC", "BM001"),
        _row("BM001", "BsM", "SV001"),
        _row("SV001", "SVBM"),
    ]
    result = commit_import(rows, period="2025-01")
    assert result.committed
    assert result.employees_created == 3
    assert result.managers_linked == 2
    bc = Employee.objects.select_related("manager__manager").get(employee_code="BC001")
    assert bc.manager.employee_code == "BM001"
    assert bc.manager.manager.employee_code == "SV001"
    assert MonthlyPerformance.objects.filter(year=2025, month=1).count() == 3
    assert ActivityLog.objects.filter(action="imports.upload.commit").count() == 1


def test_reimport_updates_without_duplicates():
    commit_import([_row("SV001", "SVBM"), _row("BC001", "BC", "SV001")], period="2025-01")
    result = commit_import(
        [_row("BC001", "BC", "SV001", nama="Renamed", margin="2500", na=4)],
        period="2025-01",
    )
    assert result.employees_created == 0
    assert result.employees_updated == 1
    assert result.managers_linked == 0
    bc = Employee.objects.get(employee_code="BC001")
    assert bc.full_name == "Renamed"
    perf = MonthlyPerformance.objects.get(employee=bc, year=2025, month=1)
    assert perf.margin_personal == Decimal("2500.00")
    assert perf.na_personal == 4


def test_existing_link_is_kept_when_manager_code_is_blank():
    sv = create_employee("SV001", "SVBM")
    create_employee("BC001", "BC", manager=sv)
    commit_import([_row("BC001", "BC", None)], period="2025-02")
    assert Employee.objects.get(employee_code="BC001").manager_id == sv.pk


def test_promotion_above_kept_manager_is_rejected():
    commit_import([_row("M1", "SVBM"), _row("E1", "BsM", "M1")], period="2025-01")
    result = commit_import([_row("E1", "CEO", None)], period="2025-02")
    assert not result.committed
    assert result.errors[0].field == "posisi"
    assert "must outrank" in result.errors[0].error
    e1 = Employee.objects.select_related("position", "manager__position").get(employee_code="E1")
    assert e1.position.code == "BsM"
    assert e1.manager.position.level < e1.position.level
    assert not MonthlyPerformance.objects.filter(year=2025, month=2).exists()


def test_promotion_to_manager_rank_is_rejected_when_link_is_repeated():
    commit_import([_row("M1", "SVBM"), _row("E1", "BsM", "M1")], period="2025-01")
    result = commit_import([_row("E1", "SVBM", "M1")], period="2025-02")
    assert not result.committed
    assert [e.field for e in result.validation.errors] == ["atasan_code"]
    assert Employee.objects.get(employee_code="E1").position.code == "BsM"


def test_kept_manager_promoted_in_same_batch_allows_promotion():
    commit_import([_row("M1", "SVBM"), _row("E1", "BsM", "M1")], period="2025-01")
    result = commit_import(
        [_row("E1", "SVBM", None), _row("M1", "CEO")], period="2025-02"
    )
    assert result.committed
    e1 = Employee.objects.select_related("position", "manager").get(employee_code="E1")
    assert e1.position.code == "SVBM"
    assert e1.manager.employee_code == "M1"


def test_invalid_batch_writes_nothing_but_logs_failure():
    result = commit_import(
        [_row("SV001", "SVBM"), _row("BC001", "BC", "NOPE")], period="2025-01"
    )
    assert not result.committed
    assert not Employee.objects.exists()
    log = UploadLog.objects.get()
    assert log.status == UploadLog.Status.FAILED
    assert log.error_rows == 2
    assert log.errors[0]["row"] == 3


def test_partial_commit_writes_valid_rows_only():
    result = commit_import(
        [_row("SV001", "SVBM"), _row("BC001", "BC", "NOPE")],
        period="2025-01",
        allow_partial=True,
    )
    assert result.committed
    assert result.upload_log.status == UploadLog.Status.PARTIAL
    assert result.upload_log.success_rows == 1
    assert result.upload_log.error_rows == 1
    assert list(Employee.objects.values_list("employee_code", flat=True)) == ["SV001"]


def test_demotion_below_reports_rolls_back_everything():
    sv = create_employee("SV001", "SVBM")
    create_employee("BM001", "BsM", manager=sv)
    result = commit_import(
        [_row("NEW01", "SVBM"), _row("SV001", "BC")],
        period="2025-01",
    )
    assert not result.committed
    assert result.errors[0].field == "posisi"
    assert not Employee.objects.filter(employee_code="NEW01").exists()
    assert Employee.objects.get(employee_code="SV001").position.code == "SVBM"
    assert UploadLog.objects.get().status == UploadLog.Status.FAILED
