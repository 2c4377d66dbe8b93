"""Core block pack: sources, constants, arithmetic and display.

Broadcasting rules shared by the arithmetic blocks:

- Scalar op Scalar -> Scalar
- Scalar op Vector (either order) -> Vector, scalar broadcast per element
- Vector op Vector -> Vector, lengths must match
- Scalar op Table (either order) -> Table, scalar broadcast per cell
- Table op Table -> Table, shapes must match
- Error on either side -> the first error propagates
- A missing input (None) behaves like a NaN scalar
"""

import math
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from reflow._value import Error, Scalar, Table, Value, Vector

from ._contract import BlockRegistry, EvaluateFn

type UnaryFn = Callable[[float], float]
type BinaryFn = Callable[[float, float], float]

PHI = 1.618_033_988_749_895


def _number_from_data(data: Mapping[str, Any], key: str = "value") -> float:
    raw = data.get(key)
    if isinstance(raw, bool) or not isinstance(raw, int | float):
        return 0.0
    return float(raw)


def _apply_unary(f: UnaryFn, value: Value | None) -> Value:
    match value:
        case None:
            return Scalar(f(math.nan))
        case Scalar(value=n):
            return Scalar(f(n))
        case Vector(values=values):
            return Vector(tuple(f(n) for n in values))
        case Table(columns=columns, rows=rows):
            return Table(columns, tuple(tuple(f(n) for n in row) for row in rows))
        case Error():
            return value


def _kind(value: Value | None) -> str:
    return "none" if value is None else value.kind


def _apply_binary(f: BinaryFn, a: Value | None, b: Value | None) -> Value:  # noqa: C901, PLR0911
    if isinstance(a, Error):
        return a
    if isinstance(b, Error):
        return b
    if a is None:
        a = Scalar(math.nan)
    if b is None:
        b = Scalar(math.nan)

    match a, b:
        case Scalar(value=x), Scalar(value=y):
            return Scalar(f(x, y))
        case Scalar(value=s), Vector(values=values):
            return Vector(tuple(f(s, n) for n in values))
        case Vector(values=values), Scalar(value=s):
            return Vector(tuple(f(n, s) for n in values))
        case Vector(values=va), Vector(values=vb):
            if len(va) != len(vb):
                return Error(f"Vector length mismatch: {len(va)} vs {len(vb)}")
            return Vector(tuple(f(x, y) for x, y in zip(va, vb, strict=True)))
        case Scalar(value=s), Table(columns=columns, rows=rows):
            return Table(columns, tuple(tuple(f(s, n) for n in row) for row in rows))
        case Table(columns=columns, rows=rows), Scalar(value=s):
            return Table(columns, tuple(tuple(f(n, s) for n in row) for row in rows))
        case Table(), Table():
            if a.shape != b.shape:
                return Error(
                    f"Table shape mismatch: {a.shape[0]}x{a.shape[1]} vs {b.shape[0]}x{b.shape[1]}",
                )
            return Table(
                a.columns,
                tuple(
                    tuple(f(x, y) for x, y in zip(row_a, row_b, strict=True))
                    for row_a, row_b in zip(a.rows, b.rows, strict=True)
                ),
            )
        case _:
            return Error(f"Cannot broadcast {_kind(a)} with {_kind(b)}")


def _divide(a: float, b: float) -> float:
    # Python floats raise on zero divisors; the block turns that into an Error value.
    return a / b


def _sqrt(x: float) -> float:
    return math.sqrt(x) if x >= 0 or math.isnan(x) else math.nan


def _power(base: float, exp: float) -> float:
    try:
        return math.pow(base, exp)
    except OverflowError:
        return math.inf
    except ValueError:
        return math.nan


def _constant(value: float) -> EvaluateFn:
    def evaluate(inputs: Sequence[Value | None], data: Mapping[str, Any]) -> Value:  # noqa: ARG001
        return Scalar(value)

    return evaluate


def _binary(f: BinaryFn) -> EvaluateFn:
    def evaluate(inputs: Sequence[Value | None], data: Mapping[str, Any]) -> Value:  # noqa: ARG001
        try:
            return _apply_binary(f, inputs[0], inputs[1])
        except ZeroDivisionError:
            return Error("Division by zero")

    return evaluate


def _unary(f: UnaryFn) -> EvaluateFn:
    def evaluate(inputs: Sequence[Value | None], data: Mapping[str, Any]) -> Value:  # noqa: ARG001
        return _apply_unary(f, inputs[0])

    return evaluate


def _source(inputs: Sequence[Value | None], data: Mapping[str, Any]) -> Value:  # noqa: ARG001
    return Scalar(_number_from_data(data))


def _passthrough(inputs: Sequence[Value | None], data: Mapping[str, Any]) -> Value:  # noqa: ARG001
    value = inputs[0]
    return value if value is not None else Scalar(math.nan)


def register_core_blocks(registry: BlockRegistry) -> BlockRegistry:
    """Register the core block pack on ``registry`` and return it."""
    for type_, label in (("number", "Number"), ("slider", "Slider"), ("variableSource", "Variable")):
        registry.block(type_, label=label, category="input")(_source)

    for type_, label, value in (
        ("pi", "Pi (π)", math.pi),
        ("euler", "E (e)", math.e),
        ("tau", "Tau (τ)", math.tau),
        ("phi", "Phi (φ)", PHI),
    ):
        registry.block(type_, label=label, category="constants")(_constant(value))

    binary_ops: tuple[tuple[str, str, BinaryFn], ...] = (
        ("add", "Add", lambda a, b: a + b),
        ("subtract", "Subtract", lambda a, b: a - b),
        ("multiply", "Multiply", lambda a, b: a * b),
        ("divide", "Divide", _divide),
    )
    for type_, label, f in binary_ops:
        registry.block(type_, inputs=["a", "b"], label=label, category="math")(_binary(f))

    registry.block("power", inputs=["base", "exp"], label="Power", category="math")(_binary(_power))

    unary_ops: tuple[tuple[str, str, UnaryFn], ...] = (
        ("negate", "Negate", lambda x: -x),
        ("abs", "Abs", abs),
        ("sqrt", "Sqrt", _sqrt),
        ("floor", "Floor", lambda x: float(math.floor(x)) if math.isfinite(x) else x),
        ("ceil", "Ceil", lambda x: float(math.ceil(x)) if math.isfinite(x) else x),
    )
    for type_, label, f in unary_ops:
        registry.block(type_, inputs=["a"], label=label, category="math")(_unary(f))

    registry.block("display", inputs=["value"], label="Display", category="output")(_passthrough)
    registry.block("probe", inputs=["value"], label="Probe", category="output")(_passthrough)

    return registry


def core_registry() -> BlockRegistry:
    """Build a new registry holding the core block pack."""
    return register_core_blocks(BlockRegistry())
