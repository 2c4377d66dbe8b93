"""Core evaluation engine for dataflow graphs."""

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType

from reflow._bindings import NamedValues
from reflow._blocks import BlockContract, BlockRegistry
from reflow._errors import Diagnostic, DiagnosticLevel, ErrorCode
from reflow._graph import Topology, kahn_schedule
from reflow._model import Edge, Node
from reflow._value import Error, Value, ValueSummary, canonicalize, is_value, summarize

from ._resolution import resolve_inputs

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TraceEntry:
    """What one node saw and produced during a pass.

    Attributes:
        node_id: The evaluated node.
        block_type: The node's block type.
        inputs: Mapping from port id to a summary of the resolved input
            (None when the port had no value).
        output: Summary of the value written for the node.

    """

    node_id: str
    block_type: str
    inputs: Mapping[str, ValueSummary | None]
    output: ValueSummary


@dataclass(frozen=True, slots=True)
class EvaluationResult:
    """Result of one evaluation pass.

    Attributes:
        values: Read-only mapping from node id to its value. Nodes that are
            unreachable or have an unknown block type have no entry.
        order: Node ids in the order they were scheduled.
        unreachable: Node ids in, or only reachable through, a cycle.
        diagnostics: Notes about cycles, unknown blocks and block faults.
        trace: Per-node trace entries, present only when tracing was requested.

    """

    values: Mapping[str, Value] = field(default_factory=lambda: MappingProxyType({}))
    order: tuple[str, ...] = ()
    unreachable: tuple[str, ...] = ()
    diagnostics: tuple[Diagnostic, ...] = ()
    trace: tuple[TraceEntry, ...] | None = None

    @property
    def success(self) -> bool:
        """Check if the pass produced no error-level diagnostics."""
        return not any(d.level == DiagnosticLevel.ERROR for d in self.diagnostics)

    @property
    def errors(self) -> dict[str, str]:
        """Mapping from node id to message for every node whose value is an Error."""
        return {node_id: value.message for node_id, value in self.values.items() if isinstance(value, Error)}

    def get_value(self, node_id: str) -> Value:
        """Get a node's value.

        Raises:
            KeyError: If the node has no value this pass.

        """
        return self.values[node_id]


def _call_block(contract: BlockContract, node: Node, inputs: Sequence[Value | None]) -> tuple[Value, Diagnostic | None]:
    """Invoke a block's evaluate function behind an exception barrier."""
    try:
        result = contract.evaluate(inputs, node.data)
        if not is_value(result):
            message = f"Block '{contract.type}' returned {type(result).__name__}, expected a value"
            logger.warning("%s (node '%s')", message, node.id)
            return Error(message), Diagnostic(code=ErrorCode.OPERATION_FAULT, message=message, node_id=node.id)
        # Malformed payloads (non-float elements, ints beyond float range) fail here.
        return canonicalize(result), None
    except Exception as e:  # noqa: BLE001
        message = str(e) or type(e).__name__
        logger.warning("Block '%s' raised on node '%s': %s", contract.type, node.id, message)
        return Error(message), Diagnostic(
            code=ErrorCode.OPERATION_FAULT,
            message=f"Block '{contract.type}' raised {type(e).__name__} on node '{node.id}': {message}",
            node_id=node.id,
        )


def evaluate_graph(  # noqa: PLR0913
    nodes: Iterable[Node],
    edges: Iterable[Edge],
    *,
    registry: BlockRegistry,
    named_values: NamedValues | None = None,
    trace: bool = False,
    max_trace_nodes: int | None = None,
) -> EvaluationResult:
    """Evaluate every node in the graph once.

    This is a pure function that:
    1. Builds in/out-edge adjacency from the nodes and edges
    2. Schedules nodes with Kahn's algorithm, setting aside nodes in or behind cycles
    3. Resolves each scheduled node's ports and calls its block contract
    4. Records the value, which later nodes read as their upstream input

    Nothing is shared between passes: a new pass starts from empty results.

    Args:
        nodes: The graph's nodes. Their order fixes the tie-break between
            independent nodes.
        edges: The graph's edges. At most one edge may target a given port.
        registry: Block contracts, looked up by ``Node.block_type``.
        named_values: Named constants and variables for port bindings.
        trace: Collect a TraceEntry for every evaluated node.
        max_trace_nodes: Cap on the number of trace entries.

    Returns:
        EvaluationResult with the pass's values and diagnostics.

    Example:
        >>> registry = core_registry()
        >>> nodes = [Node(id="n1", block_type="number", data={"value": 3})]
        >>> evaluate_graph(nodes, [], registry=registry).values["n1"]
        Scalar(value=3.0)

    """
    nodes = list(nodes)
    named_values = named_values if named_values is not None else NamedValues()

    # A repeated id keeps its first schedule position but evaluates its last definition.
    node_map = {node.id: node for node in nodes}

    topology = Topology.build((node.id for node in nodes), edges)
    schedule = kahn_schedule(topology)

    diagnostics: list[Diagnostic] = [
        Diagnostic(
            code=ErrorCode.CYCLE_DETECTED,
            message=f"Node '{node_id}' is part of, or downstream of, a cycle",
            node_id=node_id,
        )
        for node_id in schedule.unreachable
    ]
    if schedule.unreachable:
        logger.debug("%d node(s) excluded by cycles: %s", len(schedule.unreachable), schedule.unreachable)

    results: dict[str, Value] = {}
    trace_entries: list[TraceEntry] = []

    logger.debug("Starting evaluation with %d nodes in order", len(schedule.order))

    for node_id in schedule.order:
        node = node_map.get(node_id)
        if node is None:
            continue

        contract = registry.get(node.block_type)
        if contract is None:
            logger.debug("Skipping %s (unknown block type '%s')", node_id, node.block_type)
            diagnostics.append(
                Diagnostic(
                    code=ErrorCode.UNKNOWN_BLOCK,
                    message=f"Unknown block type: {node.block_type}",
                    level=DiagnosticLevel.WARNING,
                    node_id=node_id,
                ),
            )
            continue

        inputs = resolve_inputs(node, contract, topology.in_edges[node_id], results, named_values)
        value, fault = _call_block(contract, node, inputs)
        if fault is not None:
            diagnostics.append(fault)

        results[node_id] = value
        logger.debug("Result for %s: %r", node_id, value)

        if trace and (max_trace_nodes is None or len(trace_entries) < max_trace_nodes):
            trace_entries.append(
                TraceEntry(
                    node_id=node_id,
                    block_type=node.block_type,
                    inputs=MappingProxyType(
                        {
                            port.id: summarize(v) if v is not None else None
                            for port, v in zip(contract.inputs, inputs, strict=True)
                        },
                    ),
                    output=summarize(value),
                ),
            )

    return EvaluationResult(
        values=MappingProxyType(results),
        order=schedule.order,
        unreachable=schedule.unreachable,
        diagnostics=tuple(diagnostics),
        trace=tuple(trace_entries) if trace else None,
    )


def evaluate(
    nodes: Iterable[Node],
    edges: Iterable[Edge],
    *,
    registry: BlockRegistry,
    named_values: NamedValues | None = None,
) -> Mapping[str, Value]:
    """Run one pass and return the result map (node id to value).

    The returned mapping is read-only. Nodes in or behind a cycle, and nodes
    whose block type is not registered, have no entry.
    """
    return evaluate_graph(nodes, edges, registry=registry, named_values=named_values).values
