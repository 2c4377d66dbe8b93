"""Polymorphic value algebra produced and consumed by every block.

A :data:`Value` is exactly one of four immutable kinds:

- ``Scalar``: a single float. NaN and +/-inf are valid scalars, not errors.
- ``Vector``: an ordered tuple of floats.
- ``Table``: column names plus rows of floats.
- ``Error``: a failure message that flows downstream like any other value.

Consumers dispatch with ``match`` over the four classes and close the match
with ``assert_never`` so that adding a kind is caught by the type checker.
"""

import math
from dataclasses import dataclass
from typing import ClassVar, TypeIs, assert_never


@dataclass(frozen=True, slots=True)
class Scalar:
    """A single number."""

    kind: ClassVar[str] = "scalar"

    value: float


@dataclass(frozen=True, slots=True)
class Vector:
    """An ordered list of numbers."""

    kind: ClassVar[str] = "vector"

    values: tuple[float, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.values, tuple):
            object.__setattr__(self, "values", tuple(self.values))

    def __len__(self) -> int:
        return len(self.values)


@dataclass(frozen=True, slots=True)
class Table:
    """Named columns plus numeric row data."""

    kind: ClassVar[str] = "table"

    columns: tuple[str, ...] = ()
    rows: tuple[tuple[float, ...], ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.columns, tuple):
            object.__setattr__(self, "columns", tuple(self.columns))
        if not isinstance(self.rows, tuple) or not all(isinstance(row, tuple) for row in self.rows):
            object.__setattr__(self, "rows", tuple(tuple(row) for row in self.rows))

    @property
    def shape(self) -> tuple[int, int]:
        """Return ``(row_count, column_count)``."""
        return len(self.rows), len(self.columns)


@dataclass(frozen=True, slots=True)
class Error:
    """A failure reported by a block, propagated downstream as a value."""

    kind: ClassVar[str] = "error"

    message: str


type Value = Scalar | Vector | Table | Error


def is_scalar(value: Value | None) -> TypeIs[Scalar]:
    return isinstance(value, Scalar)


def is_vector(value: Value | None) -> TypeIs[Vector]:
    return isinstance(value, Vector)


def is_table(value: Value | None) -> TypeIs[Table]:
    return isinstance(value, Table)


def is_error(value: Value | None) -> TypeIs[Error]:
    return isinstance(value, Error)


def is_value(obj: object) -> TypeIs[Value]:
    """Check whether ``obj`` is one of the four value kinds."""
    return isinstance(obj, (Scalar, Vector, Table, Error))


def extract_scalar(value: Value | None) -> float | None:
    """Unwrap a scalar to a plain float. Anything else returns None."""
    if isinstance(value, Scalar):
        return value.value
    return None


def kind_name(value: Value) -> str:
    """Return the kind tag of a value (``"scalar"``, ``"vector"``, ...)."""
    return value.kind


def _canonicalize_number(n: float) -> float:
    if math.isnan(n):
        return math.nan
    if n == 0.0:
        return 0.0
    return float(n)


def canonicalize(value: Value) -> Value:
    """Collapse NaN payloads to a single NaN and normalize -0.0 to 0.0.

    Two passes over equal inputs must produce equal results, so every value
    written to a result map goes through this function first.
    """
    match value:
        case Scalar(value=n):
            return Scalar(_canonicalize_number(n))
        case Vector(values=values):
            return Vector(tuple(_canonicalize_number(n) for n in values))
        case Table(columns=columns, rows=rows):
            return Table(columns, tuple(tuple(_canonicalize_number(n) for n in row) for row in rows))
        case Error():
            return value
        case _:
            assert_never(value)


# Compact summaries used by evaluation traces.


@dataclass(frozen=True, slots=True)
class ValueSummary:
    """A compact description of a value, suitable for traces and logs.

    Large vectors keep only their first few elements and tables keep only
    their shape.
    """

    kind: str
    value: float | None = None
    length: int | None = None
    sample: tuple[float, ...] = ()
    rows: int | None = None
    columns: int | None = None
    message: str | None = None


_SUMMARY_SAMPLE_SIZE = 5


def summarize(value: Value) -> ValueSummary:
    match value:
        case Scalar(value=n):
            return ValueSummary(kind=value.kind, value=n)
        case Vector(values=values):
            return ValueSummary(kind=value.kind, length=len(values), sample=values[:_SUMMARY_SAMPLE_SIZE])
        case Table():
            n_rows, n_columns = value.shape
            return ValueSummary(kind=value.kind, rows=n_rows, columns=n_columns)
        case Error(message=message):
            return ValueSummary(kind=value.kind, message=message)
        case _:
            assert_never(value)


def values_equal(a: Value | None, b: Value | None) -> bool:
    """Compare two values, treating NaN as equal to NaN.

    Dataclass equality follows float semantics, where ``nan != nan``; that
    makes it unsuitable for checking that two passes agree.
    """
    if a is None or b is None:
        return a is b
    if type(a) is not type(b):
        return False
    a_c, b_c = canonicalize(a), canonicalize(b)
    return _nan_safe_key(a_c) == _nan_safe_key(b_c)


def _nan_safe_key(value: Value) -> object:
    def key(n: float) -> object:
        return "nan" if math.isnan(n) else n

    match value:
        case Scalar(value=n):
            return (value.kind, key(n))
        case Vector(values=values):
            return (value.kind, tuple(key(n) for n in values))
        case Table(columns=columns, rows=rows):
            return (value.kind, columns, tuple(tuple(key(n) for n in row) for row in rows))
        case Error(message=message):
            return (value.kind, message)
        case _:
            assert_never(value)
