"""Pre-flight checks for graphs handed to the engine.

The evaluator assumes well-formed input and never calls these checks itself.
Graph-mutation code and tooling call :func:`validate_graph` to catch broken
invariants (duplicate ids, dangling edges, several edges into one port).
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import TYPE_CHECKING

from ._errors import Diagnostic, DiagnosticLevel, ErrorCode

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ._model import Edge, Node

logger = logging.getLogger(__name__)


def validate_graph(nodes: Iterable[Node], edges: Iterable[Edge]) -> list[Diagnostic]:
    """Validate the graph and return a list of diagnostics.

    Checks for:
    - Duplicate node ids
    - Edges referencing missing source or target nodes
    - More than one edge targeting the same ``(node, port)`` pair

    Args:
        nodes: The graph's nodes.
        edges: The graph's edges.

    Returns:
        List of diagnostics. Empty list if the graph is valid.

    """
    nodes = list(nodes)
    edges = list(edges)
    diagnostics: list[Diagnostic] = []

    id_counts = Counter(node.id for node in nodes)
    diagnostics.extend(
        Diagnostic(
            code=ErrorCode.DUPLICATE_NODE,
            message=f"Node id '{node_id}' is used by {count} nodes",
            node_id=node_id,
        )
        for node_id, count in id_counts.items()
        if count > 1
    )

    for edge in edges:
        if edge.source not in id_counts:
            diagnostics.append(
                Diagnostic(
                    code=ErrorCode.DANGLING_EDGE,
                    message=f"Edge '{edge.id}' references missing source node '{edge.source}'",
                ),
            )
        if edge.target not in id_counts:
            diagnostics.append(
                Diagnostic(
                    code=ErrorCode.DANGLING_EDGE,
                    message=f"Edge '{edge.id}' references missing target node '{edge.target}'",
                ),
            )

    targets: dict[tuple[str, str], list[str]] = {}
    for edge in edges:
        targets.setdefault((edge.target, edge.target_handle), []).append(edge.id)
    for (node_id, port_id), edge_ids in targets.items():
        if len(edge_ids) > 1:
            diagnostics.append(
                Diagnostic(
                    code=ErrorCode.PORT_FAN_IN,
                    message=f"Port '{port_id}' on node '{node_id}' is targeted by {len(edge_ids)} edges: "
                    + ", ".join(edge_ids),
                    level=DiagnosticLevel.WARNING,
                    node_id=node_id,
                ),
            )

    logger.debug("Validation produced %d diagnostic(s)", len(diagnostics))
    return diagnostics
