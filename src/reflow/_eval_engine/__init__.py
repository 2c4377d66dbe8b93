"""Evaluation engine module for reflow.

This module provides pure functions for evaluating dataflow graphs.
Each pass takes nodes, edges, a block registry and named values, and
produces a fresh result map without side effects.

Key types:
- EvaluationResult: Values plus schedule, diagnostics and optional trace
- TraceEntry: Input/output summaries for one evaluated node
- evaluate: Run a pass and return the result map
- evaluate_graph: Run a pass and return the full EvaluationResult
"""

from ._engine import EvaluationResult, TraceEntry, evaluate, evaluate_graph
from ._resolution import resolve_inputs, resolve_port

__all__ = [
    "EvaluationResult",
    "TraceEntry",
    "evaluate",
    "evaluate_graph",
    "resolve_inputs",
    "resolve_port",
]
