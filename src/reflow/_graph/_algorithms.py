"""Scheduling algorithms over a Topology."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ._topology import Topology


@dataclass(frozen=True, slots=True)
class Schedule:
    """Execution order for one pass.

    Attributes:
        order: Node ids in evaluation order. For every edge ``u -> v`` between
            scheduled nodes, ``u`` comes before ``v``.
        unreachable: Node ids never scheduled because they sit in a cycle or
            are only reachable through one, in node-list order.

    """

    order: tuple[str, ...]
    unreachable: tuple[str, ...]

    @property
    def has_cycle(self) -> bool:
        return len(self.unreachable) > 0


def kahn_schedule(topology: Topology) -> Schedule:
    """Order nodes with Kahn's algorithm (dependencies before dependents).

    The queue is seeded with every zero in-degree node in node-list order,
    which fixes the tie-break between independent nodes. Nodes whose
    in-degree never reaches zero are returned as ``unreachable`` instead of
    raising, so a cycle only removes its own subgraph from the pass.

    Args:
        topology: Adjacency built for this pass.

    Returns:
        The pass schedule.

    Example:
        >>> topo = Topology.build(["a", "b", "c"], [edge("a", "b"), edge("b", "a")])
        >>> kahn_schedule(topo)
        Schedule(order=('c',), unreachable=('a', 'b'))

    """
    remaining = dict(topology.in_degree)
    queue = deque(node_id for node_id in topology.node_ids if remaining[node_id] == 0)
    order: list[str] = []

    while queue:
        node_id = queue.popleft()
        order.append(node_id)
        for edge in topology.out_edges[node_id]:
            remaining[edge.target] -= 1
            if remaining[edge.target] == 0:
                queue.append(edge.target)

    unreachable = tuple(node_id for node_id in topology.node_ids if remaining[node_id] > 0)
    return Schedule(order=tuple(order), unreachable=unreachable)


def topological_sort(topology: Topology) -> list[str]:
    """Return nodes in topological order.

    Raises:
        ValueError: If the graph contains a cycle.

    """
    schedule = kahn_schedule(topology)
    if schedule.has_cycle:
        msg = f"Cycle detected in graph involving: {', '.join(schedule.unreachable)}"
        raise ValueError(msg)
    return list(schedule.order)
