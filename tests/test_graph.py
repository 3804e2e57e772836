"""
Tests for resource graph ordering.
"""

import pytest

from livestack.config.table import PartitionKey, TableConfig
from livestack.core.errors import GraphConstructionError
from livestack.core.graph import ResourceGraph
from livestack.core.resource import ResourceDeclaration, ResourceKind


def _declaration(logical_id: str) -> ResourceDeclaration:
    config = TableConfig(partition_key=PartitionKey(name="id"))
    return ResourceDeclaration(logical_id, ResourceKind.TABLE, config, ("table_name",))


def _graph(*names: str) -> ResourceGraph:
    graph = ResourceGraph()
    for name in names:
        graph.add_node(_declaration(name))
    return graph


class TestResourceGraph:
    """Tests for ResourceGraph class."""

    def test_empty_graph(self):
        """Test creating an empty graph."""
        graph = ResourceGraph()

        assert len(graph) == 0
        assert graph.topological_sort() == []

    def test_add_node(self):
        """Test adding declarations to the graph."""
        graph = ResourceGraph()
        declaration = _declaration("Table")
        graph.add_node(declaration)

        assert "Table" in graph
        assert graph.nodes["Table"].declaration is declaration

    def test_duplicate_node_rejected(self):
        """Logical ids are unique within a graph."""
        graph = _graph("Table")

        with pytest.raises(GraphConstructionError, match="Duplicate"):
            graph.add_node(_declaration("Table"))

    def test_add_edge(self):
        """Test adding edges between nodes."""
        graph = _graph("Table", "Function")
        graph.add_edge("Table", "Function")

        assert graph.get_dependencies("Function") == ["Table"]
        assert graph.get_dependencies("Table") == []

    def test_add_edge_is_idempotent(self):
        """The same edge twice is recorded once."""
        graph = _graph("Table", "Function")
        graph.add_edge("Table", "Function")
        graph.add_edge("Table", "Function")

        assert graph.edges() == [("Table", "Function")]

    def test_edge_to_unknown_node(self):
        """Edges may only join nodes already in the graph."""
        graph = _graph("Table")

        with pytest.raises(GraphConstructionError, match="Missing"):
            graph.add_edge("Table", "Missing")

    def test_topological_sort(self):
        """Test a linear chain: table -> function -> url."""
        graph = _graph("Url", "Function", "Table")
        graph.add_edge("Table", "Function")
        graph.add_edge("Function", "Url")

        assert graph.topological_sort() == ["Table", "Function", "Url"]

    def test_topological_sort_keeps_declaration_order(self):
        """Independent nodes come back in insertion order."""
        graph = _graph("A", "B", "C")

        assert graph.topological_sort() == ["A", "B", "C"]

    def test_topological_sort_keeps_dependency_order(self):
        """A graph declared in dependency order comes back as declared."""
        graph = _graph("Table", "Function", "Alarm")
        graph.add_edge("Table", "Function")

        assert graph.topological_sort() == ["Table", "Function", "Alarm"]

    def test_topological_sort_prefers_earlier_declarations(self):
        """A dependent that becomes ready goes before later independent nodes."""
        graph = _graph("A", "C", "B", "D")
        graph.add_edge("A", "C")
        graph.add_edge("B", "D")

        assert graph.topological_sort() == ["A", "C", "B", "D"]

    def test_topological_sort_diamond(self):
        """Test sorting with parallel branches."""
        #      Function
        #     /        \
        # Policy       Url
        #     \        /
        #       Alarm
        graph = _graph("Function", "Policy", "Url", "Alarm")
        graph.add_edge("Function", "Policy")
        graph.add_edge("Function", "Url")
        graph.add_edge("Policy", "Alarm")
        graph.add_edge("Url", "Alarm")

        order = graph.topological_sort()

        assert order[0] == "Function"
        assert order[-1] == "Alarm"

    def test_cycle_detection(self):
        """Test detecting cycles."""
        graph = _graph("A", "B", "C")
        graph.add_edge("A", "B")
        graph.add_edge("B", "C")
        graph.add_edge("C", "A")

        cycle = graph.detect_cycles()

        assert cycle is not None
        assert cycle[0] == cycle[-1]
        assert set(cycle) == {"A", "B", "C"}

    def test_sort_rejects_cycles(self):
        """Sorting a cyclic graph is a construction error."""
        graph = _graph("A", "B")
        graph.add_edge("A", "B")
        graph.add_edge("B", "A")

        with pytest.raises(GraphConstructionError, match="cycle"):
            graph.topological_sort()

    def test_no_cycle_detection(self):
        """Test that no cycle is detected in a valid graph."""
        graph = _graph("A", "B", "C")
        graph.add_edge("A", "B")
        graph.add_edge("B", "C")

        assert graph.detect_cycles() is None

    def test_levels(self):
        """Nodes sit one level after their deepest dependency."""
        graph = _graph("Table", "Function", "Policy", "Url")
        graph.add_edge("Table", "Function")
        graph.add_edge("Function", "Policy")
        graph.add_edge("Function", "Url")

        levels = graph.get_levels()

        assert levels == [["Table"], ["Function"], ["Policy", "Url"]]

    def test_levels_uneven_depth(self):
        """A node depending on a shallow and a deep node follows the deep one."""
        graph = _graph("A", "B", "C")
        graph.add_edge("A", "B")
        graph.add_edge("B", "C")
        graph.add_edge("A", "C")

        assert graph.get_levels() == [["A"], ["B"], ["C"]]

