"""Error codes, diagnostics and exceptions shared across reflow."""

from dataclasses import dataclass
from enum import StrEnum, auto
from typing import Self


class _StrEnumWithDoc(StrEnum):
    """String enum whose members carry a docstring as the second tuple item."""

    def __new__(cls, value: str, doc: str = "") -> Self:
        obj = str.__new__(cls, value)
        obj._value_ = value
        obj.__doc__ = doc
        return obj


class ErrorCode(_StrEnumWithDoc):
    """Machine-readable codes attached to diagnostics."""

    CYCLE_DETECTED = "CYCLE_DETECTED", "The node sits in, or downstream of, a cycle and was not evaluated."
    UNKNOWN_BLOCK = "UNKNOWN_BLOCK", "No block contract is registered for the node's block type."
    OPERATION_FAULT = "OPERATION_FAULT", "A block's evaluate function raised or returned a non-value."
    DANGLING_EDGE = "DANGLING_EDGE", "An edge references a node id that does not exist."
    DUPLICATE_NODE = "DUPLICATE_NODE", "Two nodes share the same id."
    PORT_FAN_IN = "PORT_FAN_IN", "More than one edge targets the same input port."


class DiagnosticLevel(StrEnum):
    """Severity of a diagnostic."""

    INFO = auto()
    WARNING = auto()
    ERROR = auto()


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A structured, human-readable note about the graph or a pass.

    Attributes:
        code: Machine-readable error code.
        message: Human-friendly description.
        level: Severity of the diagnostic.
        node_id: The node the diagnostic relates to, if any.

    """

    code: ErrorCode
    message: str
    level: DiagnosticLevel = DiagnosticLevel.ERROR
    node_id: str | None = None

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class ReflowError(Exception):
    """Base class for all reflow exceptions."""


class DuplicateBlockError(ReflowError):
    """A block type was registered twice on the same registry."""


class GraphDocumentError(ReflowError):
    """A graph document could not be loaded."""


class ConfigError(ReflowError):
    """Error in reflow configuration."""
