"""Storage-independent hierarchy engine.

Nothing in this package imports Django; the Django-backed repository lives
in ``sales_audit.audits.repository``.
"""

from .aggregation import TeamAggregation
from .aggregation import TeamAggregator
from .decimals import normalize_decimal
from .decimals import parse_decimal
from .records import AuditFigures
from .records import EmployeeRecord
from .repository import HierarchyCycleError
from .repository import HierarchyDepthError
from .repository import HierarchyError
from .repository import HierarchyRepository
from .walker import SubordinateTreeWalker

__all__ = [
    "AuditFigures",
    "EmployeeRecord",
    "HierarchyCycleError",
    "HierarchyDepthError",
    "HierarchyError",
    "HierarchyRepository",
    "SubordinateTreeWalker",
    "TeamAggregation",
    "TeamAggregator",
    "normalize_decimal",
    "parse_decimal",
]
