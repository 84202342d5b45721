from __future__ import annotations

import copy
from typing import Any

from django.conf import settings

from sales_audit.policies.defaults import get_default_policy_document


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep-merge override into base (dict-only), returning a new dict."""

    out: dict[str, Any] = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if key in out and isinstance(out[key], dict) and isinstance(value, dict):
            out[key] = _deep_merge(out[key], value)
        else:
            out[key] = value
    return out


def get_policy_document() -> dict[str, Any]:
    """Return the audit policy: defaults overlaid with ``settings.AUDIT_POLICY``."""

    defaults = get_default_policy_document()
    override = getattr(settings, "AUDIT_POLICY", None)
    if not isinstance(override, dict):
        return defaults
    return _deep_merge(defaults, override)
