"""Cycle detection with path reporting.

This module provides the CycleValidator, which walks a forward adjacency map
from every identifier in ascending order and stops at the first cycle it
finds, reporting the path that closes it.

Each starting identifier re-walks everything reachable from it, so the worst
case is O(V * (V + E)). That is fine for the graphs this engine targets
(tens to low hundreds of nodes). The walk keeps its own stack, so graph depth
is not limited by the interpreter's recursion limit.
"""

from collections.abc import Iterator, Mapping, Sequence

import structlog

from rundag.graph.errors import CycleDetectedError
from rundag.graph.types import NodeID

logger = structlog.get_logger(__name__)


class CycleValidator:
    """Validator for the forward adjacency map of a DAG.

    After ``validate()`` returns or raises, ``cycles`` holds the identifiers
    that take part in the cycle found, plus the identifier the search started
    from. It is empty for an acyclic graph.
    """

    def __init__(self, edges: Mapping[NodeID, Sequence[NodeID]]):
        """Initialize the validator.

        Args:
            edges: Mapping from identifier to its forward edges
        """
        self._edges = edges
        self.cycles: dict[NodeID, bool] = {}

    def validate(self) -> str:
        """Look for a cycle starting from every identifier in ascending order.

        Returns:
            An empty string when no cycle exists

        Raises:
            CycleDetectedError: For the first starting identifier whose
                search finds a cycle
        """
        self.cycles = {}
        node_ids = sorted(self._edges)

        logger.debug("starting_cycle_validation", node_count=len(node_ids))

        for node_id in node_ids:
            self._validate_node(node_id)

        logger.debug("cycle_validation_complete", node_count=len(node_ids))
        return ""

    def _validate_node(self, node_id: NodeID) -> None:
        reason = self._find_cycle(node_id)
        if reason is None:
            return

        self.cycles[node_id] = True
        logger.warning("cycle_detected", node_id=node_id, reason=reason)
        raise CycleDetectedError(node_id, reason)

    def _find_cycle(self, node_id: NodeID) -> str | None:
        """Depth-first search from ``node_id`` for a child already on the branch.

        Children are explored in ascending order and the first cycle found
        ends the search.

        Returns:
            The path description if a cycle is found, else None
        """
        branch = [node_id]
        # position of every branch member, branch members are unique
        positions = {node_id: 0}

        found = self._check_frontier(branch, positions)
        if found is not None:
            return found

        stack: list[Iterator[NodeID]] = [self._sorted_children(node_id)]
        while stack:
            child = next(stack[-1], None)
            if child is None:
                stack.pop()
                del positions[branch.pop()]
                continue

            positions[child] = len(branch)
            branch.append(child)

            found = self._check_frontier(branch, positions)
            if found is not None:
                return found

            stack.append(self._sorted_children(child))

        return None

    def _check_frontier(
        self,
        branch: list[NodeID],
        positions: dict[NodeID, int],
    ) -> str | None:
        """Check whether the last branch member points back into the branch.

        Args:
            branch: Identifiers from the starting node down to the frontier
            positions: Index of each branch member in ``branch``

        Returns:
            ``"<id> -> ... -> <frontier> -> <member>"`` if a cycle closes here,
            else None
        """
        children = self._edges.get(branch[-1], ())
        hits = [positions[child] for child in children if child in positions]
        if not hits:
            return None

        # the earliest branch member wins, the cycle runs from it to the frontier
        index = min(hits)
        for cycle_id in branch[index:]:
            self.cycles[cycle_id] = True
        return " -> ".join([*branch, branch[index]])

    def _sorted_children(self, node_id: NodeID) -> Iterator[NodeID]:
        return iter(sorted(self._edges.get(node_id, ())))
