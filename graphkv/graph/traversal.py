"""Breadth-first shortest path and depth-first walks over out-edges."""
from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Optional

from ..errors import ValidationError
from .ids import check_node_id
from .model import Direction, Path
from .store import GraphStore

LOGGER = logging.getLogger(__name__)


@dataclass
class Traversal:
    """Walk the graph through :meth:`GraphStore.neighbors`.

    Only the first ``branch_limit`` out-neighbors of each visited node are
    considered, lowest weight first.  Nodes with a larger fan-out are cut off
    at that limit; raise it when a graph needs wider branching.
    """

    store: GraphStore
    branch_limit: int = 100
    max_depth: int = 6

    def __post_init__(self) -> None:
        if self.branch_limit < 1:
            raise ValidationError(f"branch_limit must be positive, got {self.branch_limit}")
        self._depth_limit(self.max_depth)

    def shortest_path(self, source: int, target: int, max_depth: Optional[int] = None) -> Optional[Path]:
        """Return the fewest-hops path from ``source`` to ``target``.

        Weights only decide expansion order, so among equally short paths the
        one discovered first through lower-weight edges wins.  Nodes found at
        ``max_depth`` hops are not expanded; a target that is further away is
        reported as unreachable (``None``).
        """

        check_node_id(source)
        check_node_id(target)
        limit = self._depth_limit(max_depth)
        if source == target:
            return Path(0, [source])

        queue = deque([(source, 0, [source])])
        seen = {source}
        while queue:
            node_id, depth, path = queue.popleft()
            if depth >= limit:
                continue
            for neighbor in self._successors(node_id):
                if neighbor == target:
                    return Path(depth + 1, path + [neighbor])
                if neighbor not in seen:
                    seen.add(neighbor)
                    queue.append((neighbor, depth + 1, path + [neighbor]))

        LOGGER.debug("No path from %d to %d within %d hops", source, target, limit)
        return None

    def dfs(self, start: int, max_depth: Optional[int] = None) -> list[int]:
        """Return the preorder visit sequence of an iterative depth-first walk."""

        check_node_id(start)
        limit = self._depth_limit(max_depth)
        stack = [(start, 0)]
        seen = {start}
        order: list[int] = []

        while stack:
            node_id, depth = stack.pop()
            order.append(node_id)
            if depth >= limit:
                continue
            # reversed so the lowest-weight neighbor is popped first
            for neighbor in reversed(self._successors(node_id)):
                if neighbor not in seen:
                    seen.add(neighbor)
                    stack.append((neighbor, depth + 1))
        return order

    def _successors(self, node_id: int) -> list[int]:
        return list(self.store.neighbors(node_id, Direction.OUT, 1, self.branch_limit))

    def _depth_limit(self, max_depth: Optional[int]) -> int:
        limit = self.max_depth if max_depth is None else max_depth
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 0:
            raise ValidationError(f"max_depth must be a non-negative integer, got {limit!r}")
        return limit


__all__ = ["Traversal"]
