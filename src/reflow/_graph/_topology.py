"""Adjacency structures built fresh for every pass."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from reflow._model import Edge


@dataclass(frozen=True, slots=True)
class Topology:
    """In- and out-edge adjacency for a set of nodes.

    Every node id has an entry in each mapping, even with zero edges. Edges
    whose source or target is not a known node are left out.

    Attributes:
        node_ids: Node ids in node-list order (duplicates removed).
        in_edges: Mapping from node id to the edges terminating there.
        out_edges: Mapping from node id to the edges originating there.
        in_degree: Mapping from node id to ``len(in_edges[node_id])``.

    """

    node_ids: tuple[str, ...] = ()
    in_edges: Mapping[str, tuple[Edge, ...]] = field(default_factory=lambda: MappingProxyType({}))
    out_edges: Mapping[str, tuple[Edge, ...]] = field(default_factory=lambda: MappingProxyType({}))
    in_degree: Mapping[str, int] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def build(cls, node_ids: Iterable[str], edges: Iterable[Edge]) -> Topology:
        """Build adjacency from node ids and edges in O(V + E).

        Args:
            node_ids: All node ids, in node-list order.
            edges: The edge list.

        Returns:
            A new Topology instance.

        Example:
            >>> topo = Topology.build(["a", "b"], [Edge(id="e1", source="a", target="b")])
            >>> topo.in_degree["b"]
            1

        """
        ordered = tuple(dict.fromkeys(node_ids))
        in_edges: dict[str, list[Edge]] = {node_id: [] for node_id in ordered}
        out_edges: dict[str, list[Edge]] = {node_id: [] for node_id in ordered}

        for edge in edges:
            if edge.source not in out_edges or edge.target not in in_edges:
                continue
            in_edges[edge.target].append(edge)
            out_edges[edge.source].append(edge)

        return cls(
            node_ids=ordered,
            in_edges=MappingProxyType({k: tuple(v) for k, v in in_edges.items()}),
            out_edges=MappingProxyType({k: tuple(v) for k, v in out_edges.items()}),
            in_degree=MappingProxyType({k: len(v) for k, v in in_edges.items()}),
        )

    def predecessors(self, node_id: str) -> frozenset[str]:
        """Get the nodes feeding directly into a node."""
        return frozenset(edge.source for edge in self.in_edges.get(node_id, ()))

    def successors(self, node_id: str) -> frozenset[str]:
        """Get the nodes a node feeds directly into."""
        return frozenset(edge.target for edge in self.out_edges.get(node_id, ()))

    def roots(self) -> frozenset[str]:
        """Get nodes with no incoming edges."""
        return frozenset(n for n in self.node_ids if self.in_degree[n] == 0)

    def leaves(self) -> frozenset[str]:
        """Get nodes with no outgoing edges."""
        return frozenset(n for n in self.node_ids if not self.out_edges[n])

    def orphans(self) -> frozenset[str]:
        """Get nodes with no edges at all."""
        return self.roots() & self.leaves()

    def ancestors(self, node_id: str) -> frozenset[str]:
        """Get all nodes a node transitively depends on.

        Args:
            node_id: The node to query.

        Returns:
            Set of all upstream nodes. Contains ``node_id`` itself only when
            the node lies on a cycle.

        """
        visited: set[str] = set()
        stack = list(self.predecessors(node_id))
        while stack:
            current = stack.pop()
            if current not in visited:
                visited.add(current)
                stack.extend(self.predecessors(current))
        return frozenset(visited)

    def descendants(self, node_id: str) -> frozenset[str]:
        """Get all nodes that transitively depend on a node.

        Args:
            node_id: The node to query.

        Returns:
            Set of all downstream nodes. Contains ``node_id`` itself only when
            the node lies on a cycle.

        """
        visited: set[str] = set()
        stack = list(self.successors(node_id))
        while stack:
            current = stack.pop()
            if current not in visited:
                visited.add(current)
                stack.extend(self.successors(current))
        return frozenset(visited)

    def on_cycle(self, node_id: str) -> bool:
        """Check whether a node lies on a directed cycle (self-loops included)."""
        return node_id in self.descendants(node_id)

    def __len__(self) -> int:
        """Return the number of nodes."""
        return len(self.node_ids)

    def __contains__(self, node_id: object) -> bool:
        """Check if a node id is known."""
        return node_id in self.in_degree
