"""Walks over comment reference graphs.

Stored comment data may be corrupted (dangling or cyclic pointers), so every
walk here is iterative and tracks visited nodes.
"""

from collections.abc import Hashable, Iterable, Mapping, Sequence
from typing import Optional, TypeVar

K = TypeVar("K", bound=Hashable)


def find_root(start: K, parent_of: Mapping[K, Optional[K]]) -> Optional[K]:
    """Follow parent pointers from ``start`` to a node without a parent.

    Args:
        start: Node to start from (must be a key of ``parent_of``)
        parent_of: Parent pointer of every known node, None for roots

    Returns:
        The root reached, or None if the chain points at an unknown node or
        loops back on itself
    """
    visited: set[K] = set()
    current = start
    while True:
        parent = parent_of[current]
        if parent is None:
            return current
        if current in visited or parent not in parent_of:
            return None
        visited.add(current)
        current = parent


def walk_preorder(starts: Iterable[K], successors: Mapping[K, Sequence[K]]) -> list[K]:
    """Depth-first pre-order walk from each start node.

    Successors are visited in the order given. A node reachable from several
    starts (or through a cycle) is emitted once, at its first visit.

    Args:
        starts: Entry nodes, walked in order
        successors: Outgoing edges of each node

    Returns:
        Visited nodes in visit order
    """
    visited: set[K] = set()
    order: list[K] = []
    for start in starts:
        stack = [start]
        while stack:
            node = stack.pop()
            if node in visited:
                continue
            visited.add(node)
            order.append(node)
            stack.extend(reversed(successors.get(node, ())))
    return order
