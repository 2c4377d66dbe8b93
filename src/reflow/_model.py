"""Graph model: nodes, edges and per-port bindings.

The surrounding editor owns and mutates these objects. The engine only reads
them; every model here is frozen. Field names are snake_case in Python and
accept the camelCase spelling used by editor payloads (``blockType``,
``inputBindings``, ``portOverrides``, ``manualValues``, ``sourceHandle``...).
"""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _FrozenModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class LiteralBinding(_FrozenModel):
    """A port bound to a literal number."""

    kind: Literal["literal"] = "literal"
    value: float


class ConstantBinding(_FrozenModel):
    """A port bound to a named constant (e.g. ``"pi"``)."""

    kind: Literal["const"] = "const"
    const_id: str


class VariableBinding(_FrozenModel):
    """A port bound to a project-level variable."""

    kind: Literal["var"] = "var"
    var_id: str


Binding = Annotated[LiteralBinding | ConstantBinding | VariableBinding, Field(discriminator="kind")]


class Node(_FrozenModel):
    """A single operation node in the computation graph.

    Attributes:
        id: Identifier, stable across passes.
        block_type: Which block contract evaluates this node.
        data: Opaque per-node data handed to the block (e.g. ``{"value": 3}``).
        input_bindings: Per-port binding used when the port is unconnected
            or overridden.
        port_overrides: Per-port flag; when true the port ignores its
            upstream connection in favour of its binding.
        manual_values: Legacy per-port numbers, read as literal bindings
            when no ``input_bindings`` entry exists for the port.

    """

    model_config = ConfigDict(extra="ignore")

    id: str
    block_type: str
    data: dict[str, Any] = Field(default_factory=dict)
    input_bindings: dict[str, Binding] = Field(default_factory=dict)
    port_overrides: dict[str, bool] = Field(default_factory=dict)
    manual_values: dict[str, float] = Field(default_factory=dict)

    def is_overridden(self, port_id: str) -> bool:
        """Check whether the override flag is active on a port."""
        return self.port_overrides.get(port_id, False) is True


class Edge(_FrozenModel):
    """A directed connection from one node's output to another node's input port."""

    id: str
    source: str
    target: str
    source_handle: str = "out"
    target_handle: str = "in"


class Variable(_FrozenModel):
    """A project-level named variable that ports can bind to."""

    id: str
    name: str = ""
    value: float


class GraphDocument(_FrozenModel):
    """A complete graph as handed to the engine by a caller or the CLI."""

    nodes: list[Node] = Field(default_factory=list)
    edges: list[Edge] = Field(default_factory=list)
    variables: list[Variable] = Field(default_factory=list)
