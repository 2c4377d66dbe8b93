"""Block contracts and the registry that holds them."""

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from reflow._errors import DuplicateBlockError
from reflow._value import Value

logger = logging.getLogger(__name__)

type EvaluateFn = Callable[[Sequence[Value | None], Mapping[str, Any]], Value]
"""``(inputs, node_data) -> Value``.

``inputs`` is ordered like the contract's ``inputs`` ports; ``None`` means the
port has no value. The function must never raise: failures are reported by
returning an :class:`~reflow.Error` value.
"""


@dataclass(frozen=True, slots=True)
class Port:
    """An input slot on a block."""

    id: str
    label: str = ""


@dataclass(frozen=True, slots=True)
class BlockContract:
    """Describes one operation type: its ordered input ports and behavior.

    Attributes:
        type: The block type string nodes refer to (``Node.block_type``).
        evaluate: Pure function computing the node's value.
        inputs: Input ports in positional order.
        label: Human-readable name.
        category: Palette category (e.g. ``"math"``, ``"constants"``).

    """

    type: str
    evaluate: EvaluateFn
    inputs: tuple[Port, ...] = field(default_factory=tuple)
    label: str = ""
    category: str = ""

    @property
    def port_ids(self) -> tuple[str, ...]:
        return tuple(port.id for port in self.inputs)

    def is_source(self) -> bool:
        """Check if this block takes no inputs."""
        return len(self.inputs) == 0


def _as_port(port: Port | str) -> Port:
    if isinstance(port, Port):
        return port
    return Port(id=port, label=port.upper())


class BlockRegistry:
    """A set of block contracts keyed by block type.

    A registry is built once and passed explicitly to the evaluator; there is
    no process-wide registry.

    Example:
        >>> registry = BlockRegistry()
        >>> @registry.block("double", inputs=["a"])
        ... def double(inputs, data):
        ...     a = extract_scalar(inputs[0])
        ...     return Scalar(a * 2) if a is not None else Error("no input")

    """

    def __init__(self, contracts: Iterable[BlockContract] = ()) -> None:
        self._contracts: dict[str, BlockContract] = {}
        for contract in contracts:
            self.register(contract)

    def register(self, contract: BlockContract) -> BlockContract:
        """Add a contract to the registry.

        Raises:
            DuplicateBlockError: If a contract with the same type already exists.

        """
        if contract.type in self._contracts:
            msg = f"Block type '{contract.type}' is already registered."
            raise DuplicateBlockError(msg)
        self._contracts[contract.type] = contract
        logger.debug("Registered block '%s' with %d input(s)", contract.type, len(contract.inputs))
        return contract

    def block(
        self,
        type_: str,
        *,
        inputs: Iterable[Port | str] = (),
        label: str | None = None,
        category: str = "",
    ) -> Callable[[EvaluateFn], EvaluateFn]:
        """Decorator to register a function as a block's evaluate function.

        Ports may be given as :class:`Port` objects or as bare ids.
        """

        def decorator(func: EvaluateFn) -> EvaluateFn:
            self.register(
                BlockContract(
                    type=type_,
                    evaluate=func,
                    inputs=tuple(_as_port(port) for port in inputs),
                    label=label if label is not None else type_.capitalize(),
                    category=category,
                ),
            )
            return func

        return decorator

    def get(self, type_: str) -> BlockContract | None:
        return self._contracts.get(type_)

    def types(self) -> list[str]:
        """Return the registered block types in registration order."""
        return list(self._contracts)

    def __contains__(self, type_: object) -> bool:
        return type_ in self._contracts

    def __iter__(self) -> Iterator[BlockContract]:
        return iter(self._contracts.values())

    def __len__(self) -> int:
        return len(self._contracts)
