from __future__ import annotations

from django.urls import reverse

from sales_audit.audits.models import Audit
from tests.permissions.factories import add_quarter_performance
from tests.permissions.factories import pillar_answers
from tests.permissions.mixins import ROLE_ADMIN
from tests.permissions.mixins import ROLE_BRANCH_MANAGER
from tests.permissions.mixins import ROLE_OWNER
from tests.permissions.mixins import ROLE_SALES
from tests.permissions.mixins import RoleAPITestCase

LIST_URL = "api_v1:audits-list"


class TestAuditPermissions(RoleAPITestCase):
    def setUp(self):
        super().setUp()
        for code in ("BM001", "BC001", "BM002"):
            add_quarter_performance(self.employees[code], 2025, 1)

    def _payload(self, code: str, **overrides):
        payload = {
            "employee_id": self.employees[code].pk,
            "year": 2025,
            "quarter": 1,
            "pillar_answers": pillar_answers(),
        }
        payload.update(overrides)
        return payload

    def _create(self, code: str, role: str = ROLE_ADMIN):
        res = self.post(LIST_URL, role=role, payload=self._payload(code))
        self.assert_http_status(res, 201)
        return Audit.objects.get(pk=res.data["audit"]["id"])

    def test_branch_manager_audits_own_subtree(self):
        res = self.post(LIST_URL, role=ROLE_BRANCH_MANAGER, payload=self._payload("BM001"))
        self.assert_http_status(res, 201)
        audit = res.data["audit"]
        assert audit["employee_code"] == "BM001"
        assert audit["total_self_score"] == 54
        assert res.data["pending_subordinates"][0]["employee_code"] == "BC001"
        assert res.data["warnings"] == ["No subordinate has been audited for this period"]

    def test_branch_manager_cannot_audit_other_tree(self):
        res = self.post(LIST_URL, role=ROLE_BRANCH_MANAGER, payload=self._payload("BM002"))
        self.assert_denied(res)
        assert res.data["code"] == "forbidden"
        assert not Audit.objects.exists()

    def test_sales_user_cannot_audit_own_manager(self):
        res = self.post(LIST_URL, role=ROLE_SALES, payload=self._payload("BM001"))
        self.assert_denied(res)

    def test_owner_audits_any_tree(self):
        res = self.post(LIST_URL, role=ROLE_OWNER, payload=self._payload("BM002"))
        self.assert_http_status(res, 201)

    def test_duplicate_period_conflicts(self):
        self._create("BM001")
        res = self.post(LIST_URL, role=ROLE_ADMIN, payload=self._payload("BM001"))
        self.assert_http_status(res, 409)
        assert res.data["code"] == "duplicate_audit"

    def test_missing_month_is_rejected(self):
        res = self.post(
            LIST_URL, role=ROLE_ADMIN, payload=self._payload("SV001", quarter=1)
        )
        self.assert_http_status(res, 400)
        assert res.data["code"] == "incomplete_data"
        assert res.data["errors"] == {"missing_months": [1, 2, 3]}

    def test_incomplete_pillars_are_rejected(self):
        payload = self._payload("BM001", pillar_answers=pillar_answers()[:17])
        res = self.post(LIST_URL, role=ROLE_ADMIN, payload=payload)
        self.assert_http_status(res, 400)
        assert res.data["code"] == "incomplete_data"
        assert "Missing answers for pillar(s): 18" in res.data["errors"]

    def test_team_figures_roll_up_from_subordinate_audit(self):
        self._create("BC001")
        audit = self._create("BM001")
        assert audit.margin_team_q == 600
        assert audit.na_team_q == 6
        assert audit.team_structure["coverage_pct"] == 100

    def test_list_is_scoped_to_subtree(self):
        self._create("BM001")
        self._create("BM002")

        admin = self.get(LIST_URL, role=ROLE_ADMIN)
        self.assert_http_status(admin, 200)
        assert {r["employee_code"] for r in self.extract_results(admin)} == {"BM001", "BM002"}

        mine = self.get(LIST_URL, role=ROLE_BRANCH_MANAGER)
        assert [r["employee_code"] for r in self.extract_results(mine)] == ["BM001"]

        sales = self.get(LIST_URL, role=ROLE_SALES)
        assert self.extract_results(sales) == []

    def test_hard_delete_is_admin_only(self):
        audit = self._create("BM001")
        denied = self.delete(
            "api_v1:audits-detail", role=ROLE_BRANCH_MANAGER, reverse_kwargs={"pk": audit.pk}
        )
        self.assert_denied(denied)
        allowed = self.delete(
            "api_v1:audits-detail", role=ROLE_ADMIN, reverse_kwargs={"pk": audit.pk}
        )
        self.assert_http_status(allowed, 204)
        assert not Audit.objects.filter(pk=audit.pk).exists()

    def test_soft_delete_requires_reason_and_hides_audit(self):
        audit = self._create("BM001")
        kwargs = {"pk": audit.pk}

        missing = self.post(
            "api_v1:audits-soft-delete", role=ROLE_BRANCH_MANAGER, reverse_kwargs=kwargs
        )
        self.assert_http_status(missing, 400)

        res = self.post(
            "api_v1:audits-soft-delete",
            role=ROLE_BRANCH_MANAGER,
            payload={"reason": "Entered for the wrong quarter"},
            reverse_kwargs=kwargs,
        )
        self.assert_http_status(res, 200)
        assert res.data["is_deleted"] is True

        listed = self.get(LIST_URL, role=ROLE_ADMIN)
        assert self.extract_results(listed) == []
        with_deleted = self.get(LIST_URL, role=ROLE_ADMIN, data={"include_deleted": "true"})
        assert len(self.extract_results(with_deleted)) == 1

        detail = self.get("api_v1:audits-detail", role=ROLE_ADMIN, reverse_kwargs=kwargs)
        self.assert_http_status(detail, 200)
        assert detail.data["delete_reason"] == "Entered for the wrong quarter"

        again = self.post(
            "api_v1:audits-soft-delete",
            role=ROLE_ADMIN,
            payload={"reason": "again"},
            reverse_kwargs=kwargs,
        )
        self.assert_http_status(again, 400)

    def test_soft_deleted_audit_still_blocks_its_period(self):
        audit = self._create("BM001")
        self.post(
            "api_v1:audits-soft-delete",
            role=ROLE_ADMIN,
            payload={"reason": "duplicate entry"},
            reverse_kwargs={"pk": audit.pk},
        )
        res = self.post(LIST_URL, role=ROLE_ADMIN, payload=self._payload("BM001"))
        self.assert_http_status(res, 409)

    def test_by_period_lookup(self):
        audit = self._create("BM001")
        params = {"employee": self.employees["BM001"].pk, "year": 2025, "quarter": 1}

        res = self.get("api_v1:audits-by-period", role=ROLE_BRANCH_MANAGER, data=params)
        self.assert_http_status(res, 200)
        assert res.data["id"] == audit.pk

        other = self.get(
            "api_v1:audits-by-period",
            role=ROLE_ADMIN,
            data={**params, "quarter": 2},
        )
        self.assert_http_status(other, 404)

        bad = self.get("api_v1:audits-by-period", role=ROLE_ADMIN, data={"employee": "x"})
        self.assert_http_status(bad, 400)

    def test_refresh_and_regenerate_respect_hierarchy(self):
        audit = self._create("BM002")
        kwargs = {"pk": audit.pk}
        # Out of scope audits are not even visible to the branch manager.
        hidden = self.patch(
            "api_v1:audits-refresh-aggregation",
            role=ROLE_BRANCH_MANAGER,
            reverse_kwargs=kwargs,
        )
        self.assert_http_status(hidden, 404)

        other_bm = self.others["branch_manager"].user
        self.client.force_authenticate(user=other_bm)
        res = self.client.patch(reverse("api_v1:audits-refresh-aggregation", kwargs=kwargs))
        self.assert_http_status(res, 200)
        assert res.data["aggregation"]["team_margin"] == "0.00"

        res = self.client.patch(reverse("api_v1:audits-regenerate-report", kwargs=kwargs))
        self.assert_http_status(res, 200)
        assert res.data["zona_final"] == audit.zona_final

    def test_summary_is_scoped_and_skips_deleted_audits(self):
        self._create("BM001")
        self._create("BC001")
        removed = self._create("BM002")
        self.post(
            "api_v1:audits-soft-delete",
            role=ROLE_ADMIN,
            payload={"reason": "test data"},
            reverse_kwargs={"pk": removed.pk},
        )

        admin = self.get("api_v1:audits-summary", role=ROLE_ADMIN)
        self.assert_http_status(admin, 200)
        assert admin.data["total_audits"] == 2
        assert admin.data["employees_audited"] == 2
        assert sum(admin.data["by_zona_final"].values()) == 2
        assert set(admin.data["by_zona_final"]) == {"success", "warning", "critical"}
        assert {a["employee_code"] for a in admin.data["latest"]} == {"BM001", "BC001"}

        mine = self.get("api_v1:audits-summary", role=ROLE_BRANCH_MANAGER, data={"quarter": 1})
        assert mine.data["total_audits"] == 2

        other = self.others["branch_manager"].user
        self.client.force_authenticate(user=other)
        res = self.client.get(reverse("api_v1:audits-summary"))
        self.assert_http_status(res, 200)
        assert res.data["total_audits"] == 0
        assert res.data["success_percentage"] == "0.0"
        assert res.data["latest"] == []

    def test_summary_reports_success_share(self):
        audit = self._create("BM001")
        self._create("BM002")
        Audit.objects.filter(pk=audit.pk).update(zona_final="success")
        res = self.get("api_v1:audits-summary", role=ROLE_OWNER)
        assert res.data["by_zona_final"]["success"] == 1
        assert res.data["success_percentage"] == "50.0"
        assert len(res.data["latest"]) == 2

    def test_summary_latest_is_capped_at_three(self):
        for code in ("BM001", "BC001", "BM002", "SV001", "SV002"):
            add_quarter_performance(self.employees[code], 2025, 2)
            self.post(
                LIST_URL, role=ROLE_ADMIN, payload=self._payload(code, quarter=2)
            )
        res = self.get("api_v1:audits-summary", role=ROLE_ADMIN, data={"quarter": 2})
        assert res.data["total_audits"] == 5
        assert len(res.data["latest"]) == 3
