import pytest
from django.urls import reverse
from rest_framework.test import APIClient

from sales_audit.org.models import Branch
from sales_audit.org.models import Position
from sales_audit.org.positions import DEFAULT_POSITIONS
from sales_audit.org.positions import ensure_default_positions
from tests.permissions.factories import create_user_with_role

pytestmark = pytest.mark.django_db


def test_positions_are_seeded_by_migration():
    levels = dict(Position.objects.values_list("code", "level"))
    assert levels == {code: level for code, _, level in DEFAULT_POSITIONS}


def test_ensure_default_positions_is_idempotent():
    before = Position.objects.count()
    positions = ensure_default_positions()
    assert Position.objects.count() == before
    assert positions["CEO"].outranks(positions["BC"])
    assert not positions["BsM"].outranks(positions["BsM"])


def test_position_list_is_ordered_by_authority():
    client = APIClient()
    client.force_authenticate(create_user_with_role("viewer").user)
    res = client.get(reverse("api_v1:position-list"))
    assert res.status_code == 200
    assert [p["code"] for p in res.data][:3] == ["CEO", "CBO", "BrM"]


def test_branch_list_hides_inactive():
    Branch.objects.create(code="N01", name="North")
    Branch.objects.create(code="X01", name="Closed", is_active=False)
    client = APIClient()
    client.force_authenticate(create_user_with_role("viewer").user)
    res = client.get(reverse("api_v1:branch-list"))
    assert res.status_code == 200
    assert [b["code"] for b in res.data["results"]] == ["N01"]


def test_anonymous_is_rejected():
    res = APIClient().get(reverse("api_v1:position-list"))
    assert res.status_code == 401
