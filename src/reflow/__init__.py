"""Dataflow graph evaluation engine."""

__all__ = [
    "MISSING",
    "Binding",
    "BlockContract",
    "BlockRegistry",
    "ConfigError",
    "ConstantBinding",
    "Diagnostic",
    "DiagnosticLevel",
    "DuplicateBlockError",
    "Edge",
    "Error",
    "ErrorCode",
    "EvaluateFn",
    "EvaluationResult",
    "GraphDocument",
    "GraphDocumentError",
    "GraphHealthReport",
    "LiteralBinding",
    "NamedValues",
    "Node",
    "Port",
    "ReflowError",
    "Scalar",
    "Schedule",
    "Table",
    "Topology",
    "TraceEntry",
    "Value",
    "ValueSummary",
    "Variable",
    "VariableBinding",
    "Vector",
    "canonicalize",
    "compute_graph_health",
    "core_registry",
    "ensure_binding",
    "evaluate",
    "evaluate_graph",
    "export_to_toml",
    "extract_scalar",
    "format_health_report",
    "format_value",
    "format_value_full",
    "format_value_json",
    "is_error",
    "is_scalar",
    "is_table",
    "is_value",
    "is_vector",
    "kahn_schedule",
    "kind_name",
    "load_graph_document",
    "migrate_manual_values",
    "port_binding",
    "register_core_blocks",
    "resolve_binding",
    "summarize",
    "topological_sort",
    "validate_graph",
    "values_equal",
]

from ._bindings import NamedValues, ensure_binding, migrate_manual_values, port_binding, resolve_binding
from ._blocks import BlockContract, BlockRegistry, EvaluateFn, Port, core_registry, register_core_blocks
from ._errors import (
    ConfigError,
    Diagnostic,
    DiagnosticLevel,
    DuplicateBlockError,
    ErrorCode,
    GraphDocumentError,
    ReflowError,
)
from ._eval_engine import EvaluationResult, TraceEntry, evaluate, evaluate_graph
from ._format import MISSING, format_value, format_value_full, format_value_json
from ._graph import Schedule, Topology, kahn_schedule, topological_sort
from ._health import GraphHealthReport, compute_graph_health, format_health_report
from ._io import export_to_toml, load_graph_document
from ._model import (
    Binding,
    ConstantBinding,
    Edge,
    GraphDocument,
    LiteralBinding,
    Node,
    Variable,
    VariableBinding,
)
from ._validate import validate_graph
from ._value import (
    Error,
    Scalar,
    Table,
    Value,
    ValueSummary,
    Vector,
    canonicalize,
    extract_scalar,
    is_error,
    is_scalar,
    is_table,
    is_value,
    is_vector,
    kind_name,
    summarize,
    values_equal,
)
