"""Port bindings: legacy normalization and named-value resolution.

Older node payloads store per-port numbers in ``manual_values``. Newer ones
store typed ``input_bindings``. Stored data is never rewritten; instead
:func:`port_binding` reads both shapes at the boundary and always hands the
engine a binding, with ``input_bindings`` taking precedence.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, assert_never

from ._model import Binding, ConstantBinding, LiteralBinding, Node, Variable, VariableBinding
from ._value import Scalar

if TYPE_CHECKING:
    from ._blocks import BlockRegistry

logger = logging.getLogger(__name__)

CONSTANTS_CATEGORY = "constants"


@dataclass(frozen=True, slots=True)
class NamedValues:
    """Lookup table for named constants and variables.

    The caller builds this once per pass (or keeps it while nothing changes)
    and hands it to the evaluator before ports are resolved.

    Attributes:
        constants: Mapping from constant id (e.g. ``"pi"``) to its value.
        variables: Mapping from variable id to its current value.

    """

    constants: Mapping[str, float] = field(default_factory=lambda: MappingProxyType({}))
    variables: Mapping[str, float] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_registry(
        cls,
        registry: BlockRegistry,
        variables: Iterable[Variable] | Mapping[str, float] = (),
    ) -> NamedValues:
        """Build a table whose constants come from the registry's constant blocks.

        Every zero-input block in the ``"constants"`` category is evaluated once;
        those returning a scalar become named constants keyed by block type.

        Args:
            registry: The block registry to read constants from.
            variables: Project variables, as ``Variable`` models or an id-to-value mapping.

        Returns:
            A new NamedValues instance.

        """
        constants: dict[str, float] = {}
        for contract in registry:
            if contract.category != CONSTANTS_CATEGORY or not contract.is_source():
                continue
            value = contract.evaluate((), {})
            if isinstance(value, Scalar):
                constants[contract.type] = value.value
            else:
                logger.warning("Constant block '%s' did not produce a scalar; skipped", contract.type)
        return cls(constants=MappingProxyType(constants), variables=_variables_mapping(variables))


def _variables_mapping(variables: Iterable[Variable] | Mapping[str, float]) -> Mapping[str, float]:
    if isinstance(variables, Mapping):
        return MappingProxyType(dict(variables))
    return MappingProxyType({variable.id: variable.value for variable in variables})


def resolve_binding(binding: Binding, named_values: NamedValues) -> float:
    """Resolve a binding to a plain number.

    Unknown constants and variables resolve to NaN rather than raising, so a
    stale reference shows up as a NaN result on the node.
    """
    match binding:
        case LiteralBinding(value=value):
            return value
        case ConstantBinding(const_id=const_id):
            value = named_values.constants.get(const_id)
            if value is None:
                logger.debug("Unknown constant '%s'", const_id)
                return math.nan
            return value
        case VariableBinding(var_id=var_id):
            value = named_values.variables.get(var_id)
            if value is None:
                logger.debug("Unknown variable '%s'", var_id)
                return math.nan
            return value
        case _:
            assert_never(binding)


def migrate_manual_values(manual_values: Mapping[str, float] | None) -> dict[str, Binding] | None:
    """Convert legacy manual values into literal bindings.

    Returns None when there is nothing to convert.
    """
    if not manual_values:
        return None
    return {port_id: LiteralBinding(value=value) for port_id, value in manual_values.items()}


def port_binding(node: Node, port_id: str) -> Binding | None:
    """Return the binding declared for a port, reading legacy data if needed."""
    binding = node.input_bindings.get(port_id)
    if binding is not None:
        return binding
    legacy = node.manual_values.get(port_id)
    if legacy is not None:
        return LiteralBinding(value=legacy)
    return None


def ensure_binding(node: Node, port_id: str) -> Binding:
    """Return the port's binding, defaulting to a literal zero.

    Editors call this when the user starts editing a port, to seed the editor
    with whatever the port currently resolves from.
    """
    binding = port_binding(node, port_id)
    if binding is not None:
        return binding
    return LiteralBinding(value=0.0)
