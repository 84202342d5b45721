import pytest

from sales_audit.hierarchy.repository import HierarchyCycleError
from sales_audit.hierarchy.repository import HierarchyDepthError
from sales_audit.hierarchy.walker import SubordinateTreeWalker

from .fakes import InMemoryHierarchyRepository


@pytest.fixture
def repo():
    # 1 -> (2, 3); 2 -> (4, 5); 5 -> 6; 7 is a separate root
    r = InMemoryHierarchyRepository()
    r.add(1)
    r.add(2, manager=1)
    r.add(3, manager=1)
    r.add(4, manager=2)
    r.add(5, manager=2)
    r.add(6, manager=5)
    r.add(7)
    return r


def test_direct_subordinates(repo):
    walker = SubordinateTreeWalker(repo)
    assert [e.id for e in walker.direct_subordinates(1)] == [2, 3]
    assert walker.direct_subordinates(3) == []


def test_closure_is_complete_and_unique(repo):
    walker = SubordinateTreeWalker(repo)
    ids = [e.id for e in walker.all_subordinates_recursive(1)]
    assert sorted(ids) == [2, 3, 4, 5, 6]
    assert len(ids) == len(set(ids))


def test_closure_issues_one_query_per_level(repo):
    walker = SubordinateTreeWalker(repo)
    walker.all_subordinates_recursive(1)
    # three levels with rows, plus the empty probe below employee 6
    assert repo.level_queries == 4


def test_can_manage(repo):
    walker = SubordinateTreeWalker(repo)
    assert walker.can_manage(1, 6)
    assert walker.can_manage(2, 4)
    assert not walker.can_manage(3, 4)
    assert not walker.can_manage(6, 1)
    assert not walker.can_manage(1, 1)
    assert not walker.can_manage(7, 2)


def test_management_chain_nearest_first(repo):
    walker = SubordinateTreeWalker(repo)
    assert [e.id for e in walker.management_chain(6)] == [5, 2, 1]
    assert walker.management_chain(1) == []


def test_cycle_below_root_is_rejected():
    r = InMemoryHierarchyRepository()
    r.add(1, manager=3)
    r.add(2, manager=1)
    r.add(3, manager=2)
    walker = SubordinateTreeWalker(r)
    with pytest.raises(HierarchyCycleError):
        walker.all_subordinates_recursive(1)
    with pytest.raises(HierarchyCycleError):
        walker.management_chain(2)


def test_depth_guard():
    r = InMemoryHierarchyRepository()
    r.add(1)
    for emp_id in range(2, 12):
        r.add(emp_id, manager=emp_id - 1)
    walker = SubordinateTreeWalker(r, max_depth=5)
    with pytest.raises(HierarchyDepthError):
        walker.all_subordinates_recursive(1)
    with pytest.raises(HierarchyDepthError):
        walker.management_chain(11)
    assert len(SubordinateTreeWalker(r, max_depth=10).all_subordinates_recursive(1)) == 10


def test_build_tree(repo):
    tree = SubordinateTreeWalker(repo).build_tree(1).as_dict()
    assert [c["id"] for c in tree["children"]] == [2, 3]
    second = tree["children"][0]
    assert [c["id"] for c in second["children"]] == [4, 5]
    assert second["children"][1]["children"][0]["id"] == 6
    assert SubordinateTreeWalker(repo).build_tree(999) is None
