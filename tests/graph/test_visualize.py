"""Unit tests for graph rendering."""

import pytest

from rundag.graph.dag import DAG
from rundag.graph.visualize import render


@pytest.fixture
def simple_dag() -> DAG:
    dag = DAG()
    dag.add_node("task-1", None, after=["task-2"])
    return dag


class TestMermaid:
    """Test Mermaid flowchart output."""

    def test_empty_graph(self):
        """Test rendering an empty graph."""
        output = render(DAG(), "mermaid")

        assert output == "graph TD\n    Empty[Empty Graph]"

    def test_nodes_and_edges(self, simple_dag):
        """Test positional node ids, quoted labels and forward edges."""
        output = render(simple_dag)

        assert output.splitlines() == [
            "graph TD",
            "    n0[\"task-1\"]",
            "    n1[\"task-2\"]",
            "    n0 --> n1",
        ]

    def test_similar_ids_stay_distinct(self):
        """Test that ids differing only in punctuation get separate nodes."""
        dag = DAG()
        dag.add_node("a-b", None, after=["a.b"])
        dag.add_node("a_b", None, after=["a-b"])

        lines = render(dag).splitlines()

        assert lines[1:4] == [
            "    n0[\"a-b\"]",
            "    n1[\"a.b\"]",
            "    n2[\"a_b\"]",
        ]
        assert "    n0 --> n1" in lines
        assert "    n2 --> n0" in lines

    def test_special_characters_in_labels(self):
        """Test that brackets stay inside the quoted label and quotes are encoded."""
        dag = DAG()
        dag.add_node('stack[0] "main"', None)

        output = render(dag)

        assert '    n0["stack[0] #quot;main#quot;"]' in output

    def test_case_insensitive_format(self, simple_dag):
        """Test that the format name is normalized."""
        assert render(simple_dag, " Mermaid ") == render(simple_dag, "mermaid")

    def test_cycle_highlighted_after_validation(self):
        """Test that cycle members are styled once the graph is validated."""
        dag = DAG()
        dag.add_node("a", None, after=["b"])
        dag.add_node("b", None, after=["a"])
        dag.add_node("c", None)
        assert dag.has_cycle("a")

        output = render(dag)

        assert "    class n0 cycle" in output
        assert "    class n1 cycle" in output
        assert "class n2 cycle" not in output

    def test_render_does_not_validate(self):
        """Test that rendering an unvalidated graph leaves it unvalidated."""
        dag = DAG()
        dag.add_node("a", None, after=["a"])

        output = render(dag)

        assert "classDef" not in output
        assert not dag.is_validated


class TestGraphviz:
    """Test DOT output."""

    def test_empty_graph(self):
        """Test rendering an empty graph."""
        output = render(DAG(), "dot")

        assert '    Empty [label="Empty Graph"];' in output
        assert output.endswith("}")

    def test_nodes_and_edges(self, simple_dag):
        """Test node declarations and forward edges."""
        output = render(simple_dag, "DOT")

        assert output.startswith("digraph DAG {")
        assert '    "task-1";' in output
        assert '    "task-1" -> "task-2";' in output

    def test_quotes_escaped(self):
        """Test that double quotes in ids are escaped."""
        dag = DAG()
        dag.add_node('say "hi"', None)

        output = render(dag, "dot")

        assert '    "say \\"hi\\"";' in output

    def test_cycle_highlighted(self):
        """Test that cycle members are drawn in red."""
        dag = DAG()
        dag.add_node("a", None, after=["a"])
        dag.has_cycle("a")

        assert '    "a" [color=red];' in render(dag, "dot")


def test_unsupported_format(simple_dag):
    """Test that unknown formats are rejected."""
    with pytest.raises(ValueError, match="Unsupported format"):
        render(simple_dag, "svg")
