"""Graph health report: counts, orphans and cycles at a glance."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ._errors import DiagnosticLevel
from ._graph import Topology, kahn_schedule

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ._model import Edge, Node

LARGE_GRAPH_THRESHOLD = 300


@dataclass(frozen=True, slots=True)
class HealthWarning:
    key: str
    level: DiagnosticLevel
    detail: str = ""


@dataclass(frozen=True, slots=True)
class GraphHealthReport:
    """Summary of a graph's shape.

    Attributes:
        node_count: Number of nodes.
        edge_count: Number of edges.
        orphans: Ids of nodes with no edges at all.
        cyclic: Ids of nodes lying on a cycle.
        unreachable: Ids of nodes a pass would not evaluate (cyclic or behind a cycle).
        warnings: Human-oriented warnings derived from the above.

    """

    node_count: int
    edge_count: int
    orphans: tuple[str, ...]
    cyclic: tuple[str, ...]
    unreachable: tuple[str, ...]
    warnings: tuple[HealthWarning, ...]

    @property
    def cycle_detected(self) -> bool:
        return len(self.cyclic) > 0


def compute_graph_health(nodes: Iterable[Node], edges: Iterable[Edge]) -> GraphHealthReport:
    """Compute a health report for the current graph state."""
    nodes = list(nodes)
    edges = list(edges)
    topology = Topology.build((node.id for node in nodes), edges)
    schedule = kahn_schedule(topology)

    orphans = topology.orphans()
    orphan_ids = tuple(n for n in topology.node_ids if n in orphans)
    # Only unreachable nodes can lie on a cycle.
    cyclic = tuple(n for n in schedule.unreachable if topology.on_cycle(n))

    warnings: list[HealthWarning] = []
    if orphan_ids:
        warnings.append(HealthWarning("orphans", DiagnosticLevel.WARNING, f"{len(orphan_ids)} unconnected node(s)"))
    if cyclic:
        warnings.append(
            HealthWarning(
                "cycle_detected",
                DiagnosticLevel.WARNING,
                f"{len(cyclic)} node(s) on a cycle, {len(schedule.unreachable)} node(s) will not be evaluated",
            ),
        )
    if len(topology) > LARGE_GRAPH_THRESHOLD:
        warnings.append(HealthWarning("large_graph", DiagnosticLevel.INFO, f"{len(topology)} nodes"))

    return GraphHealthReport(
        node_count=len(topology),
        edge_count=len(edges),
        orphans=orphan_ids,
        cyclic=cyclic,
        unreachable=schedule.unreachable,
        warnings=tuple(warnings),
    )


def format_health_report(report: GraphHealthReport) -> str:
    """Produce a plain-text summary of a health report."""
    lines = [
        "Graph health",
        f"  Nodes: {report.node_count}",
        f"  Edges: {report.edge_count}",
        "",
    ]
    for warning in report.warnings:
        marker = "⚠" if warning.level == DiagnosticLevel.WARNING else "ℹ"  # noqa: RUF001
        lines.append(f"  {marker} {warning.key}: {warning.detail}")
    return "\n".join(lines)
