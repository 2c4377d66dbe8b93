"""Rich rendering utilities for CLI commands."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from reflow._errors import DiagnosticLevel
from reflow._format import MISSING, format_value
from reflow._value import Error, Scalar

if TYPE_CHECKING:
    from collections.abc import Iterable

    from rich.console import Console

    from reflow._blocks import BlockRegistry
    from reflow._errors import Diagnostic
    from reflow._eval_engine import EvaluationResult
    from reflow._health import GraphHealthReport
    from reflow._model import Node
    from reflow._value import Value


def _value_style(value: Value | None) -> str:
    """Pick a display style: errors red, extraordinary numbers yellow, missing dim."""
    if value is None:
        return "dim"
    if isinstance(value, Error):
        return "red"
    if isinstance(value, Scalar) and not math.isfinite(value.value):
        return "yellow"
    return ""


def _level_style(level: DiagnosticLevel) -> str:
    match level:
        case DiagnosticLevel.ERROR:
            return "red"
        case DiagnosticLevel.WARNING:
            return "yellow"
        case DiagnosticLevel.INFO:
            return "cyan"


def build_results_table(nodes: Iterable[Node], result: EvaluationResult, locale: str | None = None) -> Table:
    """Build a table with one row per node, in node-list order.

    Args:
        nodes: The evaluated nodes.
        result: The pass result.
        locale: Optional locale tag for number formatting.

    Returns:
        A Rich Table ready to print.

    """
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Node", style="bold")
    table.add_column("Block")
    table.add_column("Kind")
    table.add_column("Value", justify="right")

    for node in nodes:
        value = result.values.get(node.id)
        style = _value_style(value)
        text = escape(format_value(value, locale)) if value is not None else MISSING
        table.add_row(
            escape(node.id),
            escape(node.block_type),
            value.kind if value is not None else "[dim]none[/dim]",
            f"[{style}]{text}[/{style}]" if style else text,
        )

    return table


def render_results_table(
    nodes: Iterable[Node],
    result: EvaluationResult,
    console: Console,
    locale: str | None = None,
) -> None:
    console.print(build_results_table(nodes, result, locale))


def render_diagnostics(diagnostics: Iterable[Diagnostic], console: Console) -> None:
    """Render diagnostics as a list of styled lines."""
    diagnostics = list(diagnostics)
    if not diagnostics:
        console.print("[dim]No diagnostics[/dim]")
        return

    for diagnostic in diagnostics:
        style = _level_style(diagnostic.level)
        console.print(f"  [{style}]{diagnostic.level.upper()}[/{style}] [bold]{diagnostic.code}[/bold] {escape(diagnostic.message)}")


def build_trace_tree(result: EvaluationResult) -> Tree:
    """Build a tree showing each traced node's inputs and output."""
    tree = Tree("[bold]Evaluation trace[/bold]")
    for entry in result.trace or ():
        branch = tree.add(f"[bold]{escape(entry.node_id)}[/bold] [dim]({escape(entry.block_type)})[/dim]")
        for port_id, summary in entry.inputs.items():
            branch.add(f"[cyan]{escape(port_id)}[/cyan] ← {escape(repr(summary)) if summary else '[dim]none[/dim]'}")
        branch.add(f"[green]out[/green] → {escape(repr(entry.output))}")
    return tree


def build_health_table(report: GraphHealthReport) -> Table:
    table = Table(show_header=False, box=None)
    table.add_column("Metric", style="cyan")
    table.add_column("Count", justify="right")
    table.add_row("Nodes", str(report.node_count))
    table.add_row("Edges", str(report.edge_count))
    table.add_row("Orphans", str(len(report.orphans)))
    table.add_row("On a cycle", str(len(report.cyclic)))
    table.add_row("Not evaluated", str(len(report.unreachable)))
    return table


def build_blocks_table(registry: BlockRegistry) -> Table:
    """Build a table listing every registered block contract."""
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Type", style="bold")
    table.add_column("Label")
    table.add_column("Category")
    table.add_column("Inputs")

    for contract in registry:
        inputs = ", ".join(port.id for port in contract.inputs) or "[dim]none[/dim]"
        table.add_row(escape(contract.type), escape(contract.label), contract.category or "[dim]-[/dim]", inputs)

    return table
