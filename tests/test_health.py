from __future__ import annotations

from unittest import mock

import pytest
from django.urls import reverse

from sales_audit.org.models import Position

pytestmark = pytest.mark.django_db


def test_health_ok_when_all_components_pass(client):
    with mock.patch("config.health.check_redis", return_value={"ok": True}):
        res = client.get(reverse("health"))
    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "ok"
    assert set(body["components"]) == {"db", "redis", "positions"}


def test_health_degraded_without_redis(client):
    with mock.patch(
        "config.health.check_redis", return_value={"ok": False, "error": "refused"}
    ):
        res = client.get(reverse("health"))
    assert res.status_code == 503
    assert res.json()["status"] == "degraded"


def test_health_reports_missing_positions(client):
    Position.objects.filter(code="BC").delete()
    with mock.patch("config.health.check_redis", return_value={"ok": True}):
        res = client.get(reverse("health"))
    body = res.json()
    assert res.status_code == 503
    assert body["components"]["positions"] == {"ok": False, "error": "missing positions: BC"}
