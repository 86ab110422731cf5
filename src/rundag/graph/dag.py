"""Directed acyclic graph store.

This module provides the DAG class which keeps nodes, their attached values
and the forward adjacency lists that encode ordering constraints. Cycle
detection and ordering are delegated to the validator and orderer modules,
which only ever read the adjacency lists.
"""

from collections.abc import Iterable
from typing import TYPE_CHECKING, Generic, TypeVar

import structlog

from rundag.graph.errors import (
    CycleDetectedError,
    DuplicateNodeError,
    InternalGraphError,
    NodeNotFoundError,
)
from rundag.graph.order import TopologicalOrderer
from rundag.graph.types import NodeID
from rundag.graph.validator import CycleValidator

if TYPE_CHECKING:
    from rundag.config import RundagConfig

logger = structlog.get_logger(__name__)

# Payload attached to a node, never inspected by the engine
V = TypeVar("V")


class DAG(Generic[V]):
    """Directed acyclic graph of identifiers with attached values.

    Edges are declared while inserting a node, either as predecessors
    (``before``, creating ``before -> node``) or successors (``after``,
    creating ``node -> after``). An identifier mentioned only as an edge
    endpoint is part of the graph but has no value.

    Validation results are cached on the instance and invalidated by every
    successful insertion.

    Thread-safety:
        This class is NOT thread-safe. A single owner should mutate it, and
        readers assume no insertion runs concurrently. Protect all calls
        with external synchronization if concurrent access is needed.

    Example:
        >>> dag = DAG()
        >>> dag.add_node("build", {"cmd": "make"}, after=["test"])
        >>> dag.add_node("test", {"cmd": "make test"})
        >>> dag.validate()
        ''
        >>> dag.order()
        ['test', 'build']
    """

    def __init__(self, validate_before_order: bool = False):
        """Initialize an empty graph.

        Args:
            validate_before_order: Run a full validation at the start of
                every ``order()`` call
        """
        self._edges: dict[NodeID, list[NodeID]] = {}
        self._values: dict[NodeID, V] = {}
        self._cycles: dict[NodeID, bool] = {}
        self._validated = False
        self.validate_before_order = validate_before_order

        logger.debug("dag_initialized", validate_before_order=validate_before_order)

    @classmethod
    def from_config(cls, config: "RundagConfig") -> "DAG[V]":
        """Create an empty graph using the graph section of a configuration."""
        return cls(validate_before_order=config.graph.validate_before_order)

    def add_node(
        self,
        node_id: NodeID,
        value: V,
        before: Iterable[NodeID] = (),
        after: Iterable[NodeID] = (),
    ) -> None:
        """Add a node with its value and ordering hints.

        Args:
            node_id: Unique identifier of the node
            value: Arbitrary payload attached to the node
            before: Identifiers that get an edge pointing to this node
            after: Identifiers this node gets an edge pointing to

        Raises:
            DuplicateNodeError: If ``node_id`` already has a value. The graph
                is left untouched in that case.
        """
        if node_id in self._values:
            logger.warning("duplicate_node_rejected", node_id=node_id)
            raise DuplicateNodeError(node_id)

        for bid in before:
            self._edges.setdefault(bid, [])
            self._add_edge(bid, node_id)

        self._edges.setdefault(node_id, [])
        for aid in after:
            self._edges.setdefault(aid, [])
            self._add_edge(node_id, aid)

        self._values[node_id] = value
        self._validated = False

        logger.debug(
            "node_added",
            node_id=node_id,
            edge_count=len(self._edges[node_id]),
        )

    def _add_edge(self, from_id: NodeID, to_id: NodeID) -> None:
        edges = self._edges.get(from_id)
        if edges is None:
            msg = f"edge list for {from_id!r} must exist before adding an edge"
            raise InternalGraphError(msg)

        if to_id in edges:
            logger.debug("edge_already_present", from_id=from_id, to_id=to_id)
            return

        edges.append(to_id)
        logger.debug("edge_added", from_id=from_id, to_id=to_id)

    def node(self, node_id: NodeID) -> V:
        """Return the value attached to ``node_id``.

        Raises:
            NodeNotFoundError: If the identifier has no value, even when it
                is known as an edge endpoint.
        """
        try:
            return self._values[node_id]
        except KeyError:
            raise NodeNotFoundError(node_id) from None

    def children_of(self, node_id: NodeID) -> list[NodeID]:
        """Return the forward edges of ``node_id`` in insertion order.

        Unknown identifiers have no children.
        """
        return list(self._edges.get(node_id, ()))

    def ids(self) -> list[NodeID]:
        """Return every known identifier, sorted ascending."""
        return sorted(self._edges)

    def adjacency(self) -> dict[NodeID, list[NodeID]]:
        """Return a copy of the adjacency map."""
        return {node_id: list(edges) for node_id, edges in self._edges.items()}

    def validate(self) -> str:
        """Validate the graph looking for cycles.

        The cycle membership found by this pass is cached until the next
        insertion.

        Returns:
            An empty string when the graph is acyclic

        Raises:
            CycleDetectedError: On the first cycle found; its ``reason``
                attribute describes the cycle path.
        """
        validator = CycleValidator(self._edges)
        try:
            reason = validator.validate()
        except CycleDetectedError:
            self._cycles = validator.cycles
            self._validated = True
            raise

        self._cycles = validator.cycles
        self._validated = True
        return reason

    def has_cycle(self, node_id: NodeID) -> bool:
        """Check whether ``node_id`` was found to be part of a cycle.

        Runs a full validation first when the graph changed since the last
        one. Never raises for a cyclic graph.
        """
        if not self._validated:
            logger.debug("revalidating_for_cycle_check", node_id=node_id)
            try:
                self.validate()
            except CycleDetectedError:
                pass

        return self._cycles.get(node_id, False)

    def order(self) -> list[NodeID]:
        """Return every identifier with children placed before their parents.

        Ties are broken by ascending identifier at every branching point, so
        the result is stable for a given graph.

        Raises:
            CycleDetectedError: If the graph has a cycle. Without
                ``validate_before_order`` the error comes from the walk
                itself and the cycle membership cache is left alone.
        """
        if self.validate_before_order:
            self.validate()
        return TopologicalOrderer(self._edges).order()

    @property
    def is_validated(self) -> bool:
        """Whether a validation pass ran since the last insertion."""
        return self._validated

    def get_stats(self) -> dict[str, int]:
        """Get statistics about the current graph state.

        Returns:
            Dictionary with:
                - total_nodes: Identifiers known to the graph
                - valued_nodes: Identifiers that carry a value
                - total_edges: Number of forward edges
                - is_validated: Whether the validation cache is current
        """
        stats = {
            "total_nodes": len(self._edges),
            "valued_nodes": len(self._values),
            "total_edges": sum(len(edges) for edges in self._edges.values()),
            "is_validated": self._validated,
        }

        logger.debug("dag_stats_retrieved", **stats)

        return stats

    def copy(self) -> "DAG[V]":
        """Create a structural copy of the graph.

        Values are shared, edge lists are copied. The validation cache is not
        carried over, so the copy validates again on first use.
        """
        new_dag: DAG[V] = DAG(validate_before_order=self.validate_before_order)
        new_dag._edges = self.adjacency()
        new_dag._values = dict(self._values)

        logger.debug("dag_copied", node_count=len(self._edges))

        return new_dag

    def __len__(self) -> int:
        return len(self._edges)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._edges

