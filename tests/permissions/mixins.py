from __future__ import annotations

from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from sales_audit.org.models import Branch
from tests.permissions.factories import RoleContext
from tests.permissions.factories import create_employee
from tests.permissions.factories import create_user_with_role
from tests.permissions.factories import ensure_groups

User = get_user_model()

ROLE_ADMIN = "Admin"
ROLE_OWNER = "Owner"
ROLE_BRANCH_MANAGER = "Branch Manager"
# Not a group: a sales employee with a login but no elevated role.
ROLE_SALES = "Sales"
RBAC_GROUPS = [ROLE_ADMIN, ROLE_OWNER, ROLE_BRANCH_MANAGER]


class RoleAPITestCase(APITestCase):
    """Base test case with one role per user and two small sales trees.

    Tree "north": SV001 (SVBM) -> BM001 (BsM) -> BC001 (BC).
    Tree "south": SV002 (SVBM) -> BM002 (BsM).
    The Branch Manager user is SV001; the Sales user is BC001.
    """

    def setUp(self):
        super().setUp()
        ensure_groups(RBAC_GROUPS)
        self.branches = {
            "north": Branch.objects.create(code="N01", name="North"),
            "south": Branch.objects.create(code="S01", name="South"),
        }
        north = self.branches["north"]
        south = self.branches["south"]
        self.employees = {}
        self.employees["SV001"] = create_employee("SV001", "SVBM", branch=north)
        self.employees["BM001"] = create_employee(
            "BM001", "BsM", manager=self.employees["SV001"], branch=north
        )
        self.employees["BC001"] = create_employee(
            "BC001", "BC", manager=self.employees["BM001"], branch=north
        )
        self.employees["SV002"] = create_employee("SV002", "SVBM", branch=south)
        self.employees["BM002"] = create_employee(
            "BM002", "BsM", manager=self.employees["SV002"], branch=south
        )

        self.roles: dict[str, RoleContext] = {}
        self.roles[ROLE_ADMIN] = create_user_with_role(
            "admin", groups=[ROLE_ADMIN], is_staff=True
        )
        self.roles[ROLE_OWNER] = create_user_with_role("owner", groups=[ROLE_OWNER])
        self.roles[ROLE_BRANCH_MANAGER] = create_user_with_role(
            "branchmgr",
            groups=[ROLE_BRANCH_MANAGER],
            employee=self.employees["SV001"],
        )
        self.roles[ROLE_SALES] = create_user_with_role(
            "sales", employee=self.employees["BC001"]
        )
        self.others = {
            "branch_manager": create_user_with_role(
                "otherbm",
                groups=[ROLE_BRANCH_MANAGER],
                employee=self.employees["SV002"],
            )
        }

    # Utilities -------------------------------------------------------------
    def authenticate(self, role: str):
        self.client.force_authenticate(user=self.roles[role].user)

    def assert_http_status(self, response, expected_status: int):
        msg = getattr(response, "data", response)
        assert response.status_code == expected_status, msg

    def get(self, url_name: str, *, role: str, reverse_kwargs=None, **kwargs):
        self.authenticate(role)
        url = reverse(url_name, kwargs=reverse_kwargs)
        return self.client.get(url, **kwargs)

    def post(
        self, url_name: str, *, role: str, payload=None, reverse_kwargs=None, **kwargs
    ):
        self.authenticate(role)
        url = reverse(url_name, kwargs=reverse_kwargs)
        return self.client.post(url, data=payload or {}, format="json", **kwargs)

    def patch(
        self, url_name: str, *, role: str, payload=None, reverse_kwargs=None, **kwargs
    ):
        self.authenticate(role)
        url = reverse(url_name, kwargs=reverse_kwargs)
        return self.client.patch(url, data=payload or {}, format="json", **kwargs)

    def delete(self, url_name: str, *, role: str, reverse_kwargs=None, **kwargs):
        self.authenticate(role)
        url = reverse(url_name, kwargs=reverse_kwargs)
        return self.client.delete(url, **kwargs)

    def assert_allowed(self, response):
        assert response.status_code in (
            status.HTTP_200_OK,
            status.HTTP_201_CREATED,
            status.HTTP_204_NO_CONTENT,
        ), response.data

    def assert_denied(self, response, code=status.HTTP_403_FORBIDDEN):
        assert response.status_code == code, response.data

    def extract_results(self, response):
        data = response.data
        if isinstance(data, dict) and "results" in data:
            return data["results"]
        return data if isinstance(data, list) else []
