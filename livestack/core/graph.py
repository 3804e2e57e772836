"""
Resource graph: dependency ordering for resource declarations.
"""

import heapq
from collections import defaultdict
from dataclasses import dataclass, field

from livestack.core.errors import GraphConstructionError
from livestack.core.resource import ResourceDeclaration


@dataclass
class GraphNode:
    """A declaration plus its edges in the resource graph."""

    logical_id: str
    declaration: ResourceDeclaration
    dependencies: list[str] = field(default_factory=list)


class ResourceGraph:
    """
    Directed acyclic graph of resource declarations.

    An edge ``a -> b`` means ``b`` reads a generated value of ``a`` (or
    explicitly depends on it) and must be realized after it.

    Provides:
    1. Insertion-ordered node storage
    2. Topological sorting
    3. Cycle detection
    4. Parallel realization levels
    """

    def __init__(self):
        self.nodes: dict[str, GraphNode] = {}
        self._adjacency_list: dict[str, list[str]] = defaultdict(list)

    def __contains__(self, logical_id: str) -> bool:
        return logical_id in self.nodes

    def __len__(self) -> int:
        return len(self.nodes)

    def add_node(self, declaration: ResourceDeclaration) -> None:
        """Add a declaration. Logical ids must be unique."""
        if declaration.logical_id in self.nodes:
            raise GraphConstructionError(
                f"Duplicate logical id '{declaration.logical_id}'"
            )
        self.nodes[declaration.logical_id] = GraphNode(
            logical_id=declaration.logical_id, declaration=declaration
        )

    def add_edge(self, from_node: str, to_node: str) -> None:
        """
        Add a directed edge from one node to another.

        Args:
            from_node: The node that 'to_node' depends on
            to_node: The dependent node
        """
        for name in (from_node, to_node):
            if name not in self.nodes:
                raise GraphConstructionError(
                    f"Cannot add edge {from_node} -> {to_node}: '{name}' is not in the graph"
                )
        if to_node in self._adjacency_list[from_node]:
            return

        self._adjacency_list[from_node].append(to_node)
        self.nodes[to_node].dependencies.append(from_node)

    def get_dependencies(self, logical_id: str) -> list[str]:
        """Get all nodes that this node depends on."""
        return self.nodes[logical_id].dependencies if logical_id in self.nodes else []

    def topological_sort(self) -> list[str]:
        """
        Return a realization order for the graph.

        Among the declarations that are ready, the earliest added goes
        first, so a graph declared in dependency order comes back
        unchanged.

        Raises:
            GraphConstructionError: If the graph contains cycles
        """
        position = {node: index for index, node in enumerate(self.nodes)}
        in_degree = {node: len(self.nodes[node].dependencies) for node in self.nodes}

        ready = [(position[node], node) for node, degree in in_degree.items() if degree == 0]
        heapq.heapify(ready)
        result = []

        while ready:
            _, node = heapq.heappop(ready)
            result.append(node)

            for dependent in self._adjacency_list[node]:
                in_degree[dependent] -= 1
                if in_degree[dependent] == 0:
                    heapq.heappush(ready, (position[dependent], dependent))

        if len(result) != len(self.nodes):
            cycle = self.detect_cycles()
            path = " -> ".join(cycle) if cycle else "unknown"
            raise GraphConstructionError(f"Resource graph contains a cycle: {path}")

        return result

    def detect_cycles(self) -> list[str] | None:
        """
        Detect if there are any cycles in the graph.

        Returns:
            A cycle path if one exists, None otherwise
        """
        visited: set[str] = set()
        rec_stack: set[str] = set()
        path: list[str] = []

        def dfs(node: str) -> list[str] | None:
            visited.add(node)
            rec_stack.add(node)
            path.append(node)

            for neighbor in self._adjacency_list[node]:
                if neighbor not in visited:
                    cycle = dfs(neighbor)
                    if cycle:
                        return cycle
                elif neighbor in rec_stack:
                    cycle_start = path.index(neighbor)
                    return path[cycle_start:] + [neighbor]

            path.pop()
            rec_stack.remove(node)
            return None

        for node in self.nodes:
            if node not in visited:
                cycle = dfs(node)
                if cycle:
                    return cycle

        return None

    def get_levels(self) -> list[list[str]]:
        """
        Group nodes into levels an engine may realize in parallel.

        Every node sits one level after the deepest of its dependencies.
        """
        depth: dict[str, int] = {}
        levels: list[list[str]] = []

        for node in self.topological_sort():
            level_idx = max((depth[dep] + 1 for dep in self.get_dependencies(node)), default=0)
            depth[node] = level_idx
            while len(levels) <= level_idx:
                levels.append([])
            levels[level_idx].append(node)

        return levels

    def edges(self) -> list[tuple[str, str]]:
        return [
            (from_node, to_node)
            for from_node, to_nodes in self._adjacency_list.items()
            for to_node in to_nodes
        ]

    def __repr__(self) -> str:
        return f"ResourceGraph(nodes={len(self.nodes)}, edges={len(self.edges())})"
