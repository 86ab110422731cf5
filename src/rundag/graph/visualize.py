"""Text renderings of a DAG for documentation and debugging.

Edges are drawn in their stored direction, from a node to its children.
When the graph has been validated, identifiers found in a cycle are
highlighted.
"""

from typing import TYPE_CHECKING

import structlog

from rundag.graph.types import NodeID

if TYPE_CHECKING:
    from rundag.graph.dag import DAG

logger = structlog.get_logger(__name__)

SUPPORTED_FORMATS = ("mermaid", "dot")


def render(dag: "DAG", output_format: str = "mermaid") -> str:
    """Generate a visual representation of the graph.

    Args:
        dag: The graph to render
        output_format: Output format ('mermaid' or 'dot'), case-insensitive

    Returns:
        String representation of the graph in the requested format

    Raises:
        ValueError: If an unsupported format is requested
    """
    output_format = output_format.lower().strip()

    edges = dag.adjacency()
    cyclic = _cyclic_ids(dag)
    logger.debug(
        "rendering_dag",
        output_format=output_format,
        node_count=len(edges),
        cyclic_count=len(cyclic),
    )

    if output_format == "mermaid":
        return _generate_mermaid(edges, cyclic)
    if output_format == "dot":
        return _generate_graphviz(edges, cyclic)
    error_msg = f"Unsupported format: {output_format}. Use 'mermaid' or 'dot'."
    raise ValueError(error_msg)


def _cyclic_ids(dag: "DAG") -> set[NodeID]:
    # only trust the cache, rendering must not trigger a validation pass
    if not dag.is_validated:
        return set()
    return {node_id for node_id in dag.ids() if dag.has_cycle(node_id)}


def _mermaid_label(node_id: NodeID) -> str:
    # Mermaid has no backslash escapes inside quoted labels
    return node_id.replace('"', "#quot;")


def _generate_mermaid(edges: dict[NodeID, list[NodeID]], cyclic: set[NodeID]) -> str:
    lines = ["graph TD"]

    if not edges:
        lines.append("    Empty[Empty Graph]")
        return "\n".join(lines)

    # positional ids keep distinct identifiers distinct whatever they contain
    mermaid_ids = {node_id: f"n{index}" for index, node_id in enumerate(sorted(edges))}

    lines.extend(
        f'    {mermaid_ids[node_id]}["{_mermaid_label(node_id)}"]'
        for node_id in sorted(edges)
    )

    for node_id, children in sorted(edges.items()):
        lines.extend(
            f"    {mermaid_ids[node_id]} --> {mermaid_ids[child]}"
            for child in sorted(children)
        )

    if cyclic:
        lines.append("    classDef cycle fill:#f96,stroke:#c00")
        lines.extend(f"    class {mermaid_ids[node_id]} cycle" for node_id in sorted(cyclic))

    return "\n".join(lines)


def _generate_graphviz(edges: dict[NodeID, list[NodeID]], cyclic: set[NodeID]) -> str:
    def escape_dot_string(s: str) -> str:
        """Escape double quotes for DOT format."""
        return s.replace('"', '\\"')

    lines = ["digraph DAG {"]
    lines.append("    rankdir=LR;")
    lines.append("    node [shape=box, style=rounded];")

    if not edges:
        lines.append('    Empty [label="Empty Graph"];')
    else:
        for node_id in sorted(edges):
            attrs = " [color=red]" if node_id in cyclic else ""
            lines.append(f'    "{escape_dot_string(node_id)}"{attrs};')

        for node_id, children in sorted(edges.items()):
            escaped = escape_dot_string(node_id)
            lines.extend(
                f'    "{escaped}" -> "{escape_dot_string(child)}";'
                for child in sorted(children)
            )

    lines.append("}")
    return "\n".join(lines)
