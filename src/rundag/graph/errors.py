"""Exceptions raised by the DAG engine.

Every error carries a ``message`` attribute in the same way the graph
exceptions always have, plus the identifier involved so callers can react
without parsing strings.
"""

from rundag.graph.types import NodeID


class DAGError(Exception):
    """Base class for all errors raised by the DAG engine."""

    def __init__(self, message: str):
        """Initialize the exception with a descriptive message.

        Args:
            message: Description of the error
        """
        super().__init__(message)
        self.message = message


class DuplicateNodeError(DAGError):
    """Raised when a value is inserted under an identifier that already has one."""

    def __init__(self, node_id: NodeID):
        super().__init__(f"duplicate node: adding node id {node_id!r}")
        self.node_id = node_id


class NodeNotFoundError(DAGError, KeyError):
    """Raised when looking up the value of an identifier that has none.

    The identifier may still be known to the graph as an edge endpoint.
    """

    def __init__(self, node_id: NodeID):
        super().__init__(f"node not found: {node_id!r}")
        self.node_id = node_id

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.message


class CycleDetectedError(DAGError):
    """Raised when the declared ordering relationships contain a cycle.

    Attributes:
        node_id: Identifier whose traversal found the cycle
        reason: Human readable path of the cycle, e.g. ``"A -> B -> A"``
    """

    def __init__(self, node_id: NodeID, reason: str):
        super().__init__(f"cycle detected: checking node id {node_id!r}")
        self.node_id = node_id
        self.reason = reason


class InternalGraphError(DAGError):
    """Raised when the store breaks one of its own invariants. Always a bug."""
