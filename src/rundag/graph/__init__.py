"""Graph module for ordering interdependent units.

This module provides the DAG store together with cycle detection and a
deterministic children-first ordering.
"""

from rundag.graph.dag import DAG
from rundag.graph.errors import (
    CycleDetectedError,
    DAGError,
    DuplicateNodeError,
    InternalGraphError,
    NodeNotFoundError,
)
from rundag.graph.order import TopologicalOrderer
from rundag.graph.types import NodeID
from rundag.graph.validator import CycleValidator
from rundag.graph.visualize import render

__all__ = [
    "DAG",
    "CycleDetectedError",
    "CycleValidator",
    "DAGError",
    "DuplicateNodeError",
    "InternalGraphError",
    "NodeID",
    "NodeNotFoundError",
    "TopologicalOrderer",
    "render",
]
