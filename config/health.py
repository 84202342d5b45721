"""Liveness endpoint reporting the database, Redis broker and seed data."""

from __future__ import annotations

from typing import Any

import redis
from django.conf import settings
from django.db import connection
from django.http import JsonResponse

from sales_audit.org.positions import DEFAULT_POSITIONS


def check_db() -> dict[str, Any]:
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1;")
            cursor.fetchone()
    except Exception as exc:  # noqa: BLE001 - health must degrade, not crash
        return {"ok": False, "error": str(exc)}
    else:
        return {"ok": True}


def check_redis() -> dict[str, Any]:
    url = getattr(settings, "REDIS_URL", None)
    if not url:
        return {"ok": False, "error": "REDIS_URL not configured"}
    try:
        redis.Redis.from_url(
            url, socket_timeout=0.5, socket_connect_timeout=0.5
        ).ping()
    except Exception as exc:  # noqa: BLE001 - health must degrade, not crash
        return {"ok": False, "error": str(exc)}
    else:
        return {"ok": True}


def check_positions() -> dict[str, Any]:
    """Rank checks need every default position to be seeded."""
    from sales_audit.org.models import Position  # noqa: PLC0415

    try:
        present = set(Position.objects.values_list("code", flat=True))
    except Exception as exc:  # noqa: BLE001 - health must degrade, not crash
        return {"ok": False, "error": str(exc)}
    missing = [code for code, _, _ in DEFAULT_POSITIONS if code not in present]
    if missing:
        return {"ok": False, "error": f"missing positions: {', '.join(missing)}"}
    return {"ok": True}


def health(request):
    components = {
        "db": check_db(),
        "redis": check_redis(),
        "positions": check_positions(),
    }
    oks = [c.get("ok", False) for c in components.values()]
    if all(oks):
        status = "ok"
    elif any(oks):
        status = "degraded"
    else:
        status = "down"
    return JsonResponse(
        {"status": status, "components": components},
        status=200 if status == "ok" else 503,
    )
