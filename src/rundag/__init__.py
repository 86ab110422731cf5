"""Directed acyclic graph engine for validating and sequencing interdependent units."""

from rundag.graph import (
    DAG,
    CycleDetectedError,
    DAGError,
    DuplicateNodeError,
    NodeNotFoundError,
)

__version__ = "0.1.0"

__all__ = [
    "DAG",
    "CycleDetectedError",
    "DAGError",
    "DuplicateNodeError",
    "NodeNotFoundError",
]
