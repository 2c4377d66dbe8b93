"""Per-port value resolution for the evaluation engine."""

from __future__ import annotations

from typing import TYPE_CHECKING

from reflow._bindings import port_binding, resolve_binding
from reflow._value import Scalar, Value

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from reflow._bindings import NamedValues
    from reflow._blocks import BlockContract
    from reflow._model import Edge, Node


def resolve_port(
    node: Node,
    port_id: str,
    incoming: Edge | None,
    results: Mapping[str, Value],
    named_values: NamedValues,
) -> Value | None:
    """Resolve the value of one input port.

    Precedence:
    1. Connected and not overridden: the upstream node's result, or None when
       the upstream node has no result this pass (it sits in a cycle).
    2. Overridden, or unconnected with a binding: the binding as a Scalar.
    3. Otherwise: None.

    Args:
        node: The node owning the port.
        port_id: The port to resolve.
        incoming: The edge feeding the port, if any.
        results: Values computed so far in this pass.
        named_values: Lookup table for named constants and variables.

    Returns:
        The port's value, or None when it has none.

    """
    if incoming is not None and not node.is_overridden(port_id):
        return results.get(incoming.source)

    binding = port_binding(node, port_id)
    if binding is None:
        return None
    return Scalar(resolve_binding(binding, named_values))


def resolve_inputs(
    node: Node,
    contract: BlockContract,
    in_edges: Iterable[Edge],
    results: Mapping[str, Value],
    named_values: NamedValues,
) -> list[Value | None]:
    """Resolve every input port of a node, in the contract's port order.

    At most one edge targets a given port. Should a caller break that rule,
    the first matching edge wins.
    """
    incoming: dict[str, Edge] = {}
    for edge in in_edges:
        incoming.setdefault(edge.target_handle, edge)

    return [
        resolve_port(node, port.id, incoming.get(port.id), results, named_values)
        for port in contract.inputs
    ]
