from decimal import Decimal

import pytest

from sales_audit.hierarchy.aggregation import TeamAggregator
from sales_audit.hierarchy.aggregation import coverage_percent

from .fakes import InMemoryHierarchyRepository

BM = ("BsM", "Business Manager")
BC = ("BC", "Business Consultant")


@pytest.fixture
def repo():
    r = InMemoryHierarchyRepository()
    r.add(1, "M001", position=BM)
    r.add(2, "S001", manager=1)
    r.add(3, "S002", manager=1)
    return r


def test_team_margin_sums_direct_subordinates(repo):
    repo.add_audit(2, 2025, 1, margin="100", na=2)
    repo.add_audit(3, 2025, 1, margin="200", na=3)
    result = TeamAggregator(repo).aggregate(1, 2025, 1)
    assert result.team_margin == Decimal("300.00")
    assert result.team_count == 5
    assert result.warnings == []
    assert result.pending_subordinates == []
    assert result.coverage_pct == 100


def test_subordinate_team_figures_telescope(repo):
    repo.add_audit(2, 2025, 1, margin="100", team_margin="50", na=1, team_na=4)
    repo.add_audit(3, 2025, 1, margin="200")
    result = TeamAggregator(repo).aggregate(1, 2025, 1)
    assert result.team_margin == Decimal("350.00")
    assert result.team_count == 5


def test_only_direct_subordinates_are_read(repo):
    repo.add(4, "G001", manager=2)
    repo.add_audit(4, 2025, 1, margin="999")
    repo.add_audit(2, 2025, 1, margin="10", team_margin="999")
    repo.add_audit(3, 2025, 1, margin="20")
    result = TeamAggregator(repo).aggregate(1, 2025, 1)
    assert result.team_margin == Decimal("1029.00")


def test_no_subordinates_is_vacuously_complete():
    r = InMemoryHierarchyRepository()
    r.add(1)
    result = TeamAggregator(r).aggregate(1, 2025, 1)
    assert result.team_margin == Decimal("0.00")
    assert result.team_count == 0
    assert result.coverage_pct == 100
    assert result.warnings == []
    assert result.structure["by_position"] == []


def test_partial_coverage_lists_pending(repo):
    repo.add(4, "S003", manager=1, position=BM)
    repo.add_audit(2, 2025, 1, margin="100")
    result = TeamAggregator(repo).aggregate(1, 2025, 1)
    assert result.structure["total_subordinates"] == 3
    assert result.structure["audited_subordinates"] == 1
    assert result.coverage_pct == 33
    assert result.warnings == ["2 of 3 subordinates not audited (33% coverage)"]
    assert [p["employee_code"] for p in result.pending_subordinates] == ["S002", "S003"]
    assert result.structure["by_position"] == [
        {"position_code": "BC", "position_name": "Business Consultant", "count": 2, "audited_count": 1},
        {"position_code": "BsM", "position_name": "Business Manager", "count": 1, "audited_count": 0},
    ]


def test_nobody_audited_warning(repo):
    result = TeamAggregator(repo).aggregate(1, 2025, 1)
    assert result.coverage_pct == 0
    assert result.warnings == ["No subordinate has been audited for this period"]
    assert len(result.pending_subordinates) == 2


def test_other_periods_are_ignored(repo):
    repo.add_audit(2, 2025, 2, margin="100")
    result = TeamAggregator(repo).aggregate(1, 2025, 1)
    assert result.team_margin == 0


def test_unparseable_figures_count_as_zero_with_warning(repo):
    repo.add_audit(2, 2025, 1, margin="n/a")
    repo.add_audit(3, 2025, 1, margin="1.234,50")
    result = TeamAggregator(repo).aggregate(1, 2025, 1)
    assert result.team_margin == Decimal("1234.50")
    assert any("S001" in w and "n/a" in w for w in result.warnings)


@pytest.mark.parametrize(
    ("audited", "total", "expected"),
    [(0, 0, 100), (1, 3, 33), (2, 3, 67), (1, 2, 50), (1, 8, 13)],
)
def test_coverage_rounding(audited, total, expected):
    assert coverage_percent(audited, total) == expected
