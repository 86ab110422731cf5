"""Deterministic ordering of DAG identifiers.

The orderer walks the forward adjacency map depth first, always visiting
children in ascending identifier order, and emits an identifier only after
everything reachable from it has been emitted. The walk keeps its own stack,
so long chains cost time rather than interpreter recursion depth.
"""

from collections.abc import Iterator, Mapping, Sequence

import structlog

from rundag.graph.errors import CycleDetectedError
from rundag.graph.types import NodeID

logger = structlog.get_logger(__name__)


class TopologicalOrderer:
    """Produces a children-first total ordering of a forward adjacency map.

    The orderer does not run a full validation. If the walk comes back to an
    identifier still on its current path it raises CycleDetectedError for
    that cycle instead of looping, but only ``CycleValidator`` reports cycle
    membership, so validate the graph before ordering it.

    Example:
        >>> TopologicalOrderer({"a": ["c", "b"], "b": [], "c": []}).order()
        ['b', 'c', 'a']
    """

    def __init__(self, edges: Mapping[NodeID, Sequence[NodeID]]):
        self._edges = edges
        self._visited: set[NodeID] = set()
        self._order: list[NodeID] = []

    def order(self) -> list[NodeID]:
        """Return every identifier exactly once, children before parents.

        Raises:
            CycleDetectedError: If the walk runs into a cycle
        """
        self._visited = set()
        self._order = []

        for node_id in sorted(self._edges):
            if node_id in self._visited:
                continue
            logger.debug("walk_from_node", node_id=node_id)
            self._walk_from(node_id)

        logger.debug("order_computed", node_count=len(self._order))
        return self._order

    def _walk_from(self, start: NodeID) -> None:
        path = [start]
        on_path = {start}
        stack: list[tuple[NodeID, Iterator[NodeID]]] = [(start, self._pending_children(start))]

        while stack:
            node_id, pending = stack[-1]
            child = next(pending, None)
            if child is None:
                stack.pop()
                on_path.discard(path.pop())
                self._order.append(node_id)
                self._visited.add(node_id)
                continue

            if child in on_path:
                cycle = [*path[path.index(child):], child]
                reason = " -> ".join(cycle)
                logger.error("order_cycle_detected", node_id=child, reason=reason)
                raise CycleDetectedError(child, reason)

            path.append(child)
            on_path.add(child)
            stack.append((child, self._pending_children(child)))

    def _pending_children(self, node_id: NodeID) -> Iterator[NodeID]:
        # visited children are checked lazily, a sibling's walk may reach them first
        return (
            child
            for child in sorted(self._edges.get(node_id, ()))
            if child not in self._visited
        )
