from __future__ import annotations

import copy
from typing import Any

_DEFAULT_POLICY: dict[str, Any] = {
    "targets": {
        # Used when no prior-quarter actuals exist, or they are zero.
        "defaultMargin": "100",
        "defaultNa": 5,
    },
    "hierarchy": {
        "maxDepth": 64,
    },
    "imports": {
        "maxRows": 1000,
    },
    "audits": {
        "defaultTenureMonths": 12,
        "cascadeRefresh": True,
    },
}


def get_default_policy_document() -> dict[str, Any]:
    return copy.deepcopy(_DEFAULT_POLICY)
