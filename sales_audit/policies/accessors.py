from __future__ import annotations

from decimal import Decimal

from sales_audit.hierarchy.decimals import parse_decimal

from .service import get_policy_document


def _int_setting(section: str, key: str, default: int) -> int:
    value = get_policy_document().get(section, {}).get(key, default)
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def default_margin_target() -> Decimal:
    """Baseline margin target for employees without prior-quarter data (default: 100)."""

    raw = get_policy_document().get("targets", {}).get("defaultMargin", "100")
    parsed = parse_decimal(raw)
    return parsed.value if parsed.ok and parsed.value > 0 else Decimal("100")


def default_na_target() -> int:
    """Baseline NA target for employees without prior-quarter data (default: 5)."""

    value = _int_setting("targets", "defaultNa", 5)
    return value if value > 0 else 5


def hierarchy_max_depth() -> int:
    return max(1, _int_setting("hierarchy", "maxDepth", 64))


def import_max_rows() -> int:
    return max(1, _int_setting("imports", "maxRows", 1000))


def default_tenure_months() -> int:
    """Tenure assumed when an employee has no join date (default: 12)."""

    return _int_setting("audits", "defaultTenureMonths", 12)


def cascade_refresh_enabled() -> bool:
    return bool(get_policy_document().get("audits", {}).get("cascadeRefresh", True))
