"""Standalone policy module.

Audit and import defaults live here; apps read them through the accessors
instead of embedding constants locally. Deployments override values with
the ``AUDIT_POLICY`` setting, which is deep-merged over the defaults.
"""

from .accessors import cascade_refresh_enabled
from .accessors import default_margin_target
from .accessors import default_na_target
from .accessors import default_tenure_months
from .accessors import hierarchy_max_depth
from .accessors import import_max_rows
from .defaults import get_default_policy_document
from .service import get_policy_document

__all__ = [
    "cascade_refresh_enabled",
    "default_margin_target",
    "default_na_target",
    "default_tenure_months",
    "get_default_policy_document",
    "get_policy_document",
    "hierarchy_max_depth",
    "import_max_rows",
]
