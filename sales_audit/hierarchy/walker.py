from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .records import TreeNode
from .repository import HierarchyCycleError
from .repository import HierarchyDepthError

if TYPE_CHECKING:
    from .records import EmployeeRecord
    from .repository import HierarchyRepository

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 64


class SubordinateTreeWalker:
    """Closures over a ``HierarchyRepository``.

    Downward walks expand one level per repository call and keep a visited
    set, so diamonds are reported once and a cycle that slipped past write
    validation fails fast instead of looping. ``max_depth`` bounds both
    directions.
    """

    def __init__(self, repository: HierarchyRepository, max_depth: int = DEFAULT_MAX_DEPTH):
        self.repository = repository
        self.max_depth = max_depth

    def direct_subordinates(self, manager_id: int) -> list[EmployeeRecord]:
        return list(self.repository.direct_subordinates(manager_id))

    def _expand(self, root_id: int):
        """Yield ``(parent_id, employee)`` pairs, breadth first."""
        visited = {root_id}
        frontier = [root_id]
        depth = 0
        while frontier:
            children = self.repository.direct_subordinates_many(frontier)
            if not children:
                return
            depth += 1
            if depth > self.max_depth:
                raise HierarchyDepthError(root_id, self.max_depth)
            next_frontier: list[int] = []
            for child in children:
                if child.id == root_id:
                    raise HierarchyCycleError(root_id, [root_id, child.manager_id, root_id])
                if child.id in visited:
                    logger.warning(
                        "Employee %s reached twice below %s; skipping", child.id, root_id
                    )
                    continue
                visited.add(child.id)
                next_frontier.append(child.id)
                yield child.manager_id, child
            frontier = next_frontier

    def all_subordinates_recursive(self, manager_id: int) -> list[EmployeeRecord]:
        return [employee for _, employee in self._expand(manager_id)]

    def management_chain(self, employee_id: int) -> list[EmployeeRecord]:
        """Managers above ``employee_id``, nearest first."""
        current = self.repository.get_employee(employee_id)
        chain: list[EmployeeRecord] = []
        seen = [employee_id]
        while current is not None and current.manager_id is not None:
            if current.manager_id in seen:
                raise HierarchyCycleError(employee_id, [*seen, current.manager_id])
            if len(chain) >= self.max_depth:
                raise HierarchyDepthError(employee_id, self.max_depth)
            manager = self.repository.get_employee(current.manager_id)
            if manager is None:
                break
            chain.append(manager)
            seen.append(manager.id)
            current = manager
        return chain

    def can_manage(self, manager_id: int, target_id: int) -> bool:
        """True when ``target_id`` sits anywhere below ``manager_id``.

        In a forest this is the same as ``manager_id`` appearing in the
        target's management chain, which costs one lookup per level instead
        of materializing the manager's whole subtree.
        """
        if manager_id == target_id:
            return False
        return any(m.id == manager_id for m in self.management_chain(target_id))

    def build_tree(self, root_id: int) -> TreeNode | None:
        root = self.repository.get_employee(root_id)
        if root is None:
            return None
        nodes = {root.id: TreeNode(root)}
        for parent_id, employee in self._expand(root_id):
            node = TreeNode(employee)
            nodes[employee.id] = node
            nodes[parent_id].children.append(node)
        return nodes[root.id]
