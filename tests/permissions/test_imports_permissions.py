from __future__ import annotations

from sales_audit.employees.models import Employee
from sales_audit.employees.models import MonthlyPerformance
from sales_audit.imports.models import UploadLog
from tests.permissions.mixins import ROLE_ADMIN
from tests.permissions.mixins import ROLE_BRANCH_MANAGER
from tests.permissions.mixins import ROLE_OWNER
from tests.permissions.mixins import ROLE_SALES
from tests.permissions.mixins import RoleAPITestCase


def _row(code, posisi, atasan=None, **extra):
    row = {
        "employee_code": code,
        "nama": f"Imported {code}",
        "posisi": posisi,
        "atasan_code": atasan,
        "tgl_lahir": "1990-05-17",
        "margin": "1.500,00",
        "na": 3,
    }
    row.update(extra)
    return row


class TestImportPermissions(RoleAPITestCase):
    def test_sales_user_cannot_import(self):
        res = self.post(
            "api_v1:imports:validate",
            role=ROLE_SALES,
            payload={"rows": [_row("BC100", "BC", "BM001")]},
        )
        self.assert_denied(res)

    def test_validate_reports_without_writing(self):
        rows = [
            _row("BC100", "BC", "BM001"),
            _row("BC101", "BC", "NOPE"),
            _row("BC102", "Boss"),
        ]
        res = self.post("api_v1:imports:validate", role=ROLE_BRANCH_MANAGER, payload={"rows": rows})
        self.assert_http_status(res, 200)
        assert res.data["is_valid"] is False
        assert res.data["total_rows"] == 3
        assert res.data["valid_count"] == 1
        assert res.data["invalid_count"] == 2
        fields = {(e["row"], e["field"]) for e in res.data["errors"]}
        assert fields == {(3, "atasan_code"), (4, "posisi")}
        assert not Employee.objects.filter(employee_code__startswith="BC1").exists()

    def test_commit_creates_and_links_in_any_order(self):
        rows = [
            _row("BC200", "BC", "BM200"),
            _row("BM200", "BsM", "SV001"),
        ]
        res = self.post(
            "api_v1:imports:commit",
            role=ROLE_BRANCH_MANAGER,
            payload={
                "rows": rows,
                "period": "2025-02",
                "branch_id": self.branches["north"].pk,
                "file_name": "feb.xlsx",
            },
        )
        self.assert_http_status(res, 201)
        assert res.data["status"] == UploadLog.Status.SUCCESS
        assert res.data["employees_created"] == 2
        assert res.data["managers_linked"] == 2

        bc = Employee.objects.get(employee_code="BC200")
        assert bc.manager.employee_code == "BM200"
        assert bc.manager.manager_id == self.employees["SV001"].pk
        assert bc.branch_id == self.branches["north"].pk
        perf = MonthlyPerformance.objects.get(employee=bc, year=2025, month=2)
        assert str(perf.margin_personal) == "1500.00"
        assert perf.quarter == 1

        log = UploadLog.objects.get(pk=res.data["upload_log_id"])
        assert log.uploaded_by == self.roles[ROLE_BRANCH_MANAGER].user
        assert log.file_name == "feb.xlsx"

    def test_commit_rejects_cycle_and_logs_failure(self):
        rows = [
            _row("BM300", "BsM", "BM301"),
            _row("BM301", "BsM", "BM300"),
        ]
        res = self.post(
            "api_v1:imports:commit",
            role=ROLE_OWNER,
            payload={"rows": rows, "period": "2025-03", "allow_partial": True},
        )
        self.assert_http_status(res, 400)
        assert res.data["committed"] is False
        assert res.data["validation"]["circular_references"]
        assert UploadLog.objects.get().status == UploadLog.Status.FAILED
        assert not Employee.objects.filter(employee_code__in=["BM300", "BM301"]).exists()

    def test_bad_period_is_rejected(self):
        res = self.post(
            "api_v1:imports:commit",
            role=ROLE_ADMIN,
            payload={"rows": [_row("BC400", "BC")], "period": "2025-13"},
        )
        self.assert_http_status(res, 400)
        assert "period" in res.data

    def test_upload_history_filters_by_status(self):
        self.post(
            "api_v1:imports:commit",
            role=ROLE_ADMIN,
            payload={"rows": [_row("BC500", "BC", "BM001")], "period": "2025-01"},
        )
        self.post(
            "api_v1:imports:commit",
            role=ROLE_ADMIN,
            payload={"rows": [_row("BC501", "BC", "MISSING")], "period": "2025-01"},
        )
        res = self.get("api_v1:imports:logs", role=ROLE_BRANCH_MANAGER)
        self.assert_http_status(res, 200)
        assert len(self.extract_results(res)) == 2

        failed = self.get(
            "api_v1:imports:logs", role=ROLE_BRANCH_MANAGER, data={"status": "failed"}
        )
        rows = self.extract_results(failed)
        assert len(rows) == 1
        assert rows[0]["errors"][0]["field"] == "atasan_code"
