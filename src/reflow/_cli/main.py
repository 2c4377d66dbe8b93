import importlib
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel

from reflow._bindings import NamedValues
from reflow._blocks import BlockRegistry, core_registry
from reflow._errors import ConfigError, DiagnosticLevel, ReflowError
from reflow._eval_engine import evaluate_graph
from reflow._health import compute_graph_health, format_health_report
from reflow._io import export_to_toml, load_graph_document
from reflow._validate import validate_graph

from .config import ReflowConfig, get_config
from .render import (
    build_blocks_table,
    build_health_table,
    build_trace_tree,
    render_diagnostics,
    render_results_table,
)

app = typer.Typer()

logger = logging.getLogger(__name__)
# Console for stderr (info/errors)
err_console = Console(stderr=True)
# Console for stdout (results)
out_console = Console()


@app.callback()
def callback(
    *,
    verbose: bool = typer.Option(default=False, help="Enable verbose output"),
) -> None:
    """Reflow CLI."""
    log_level = logging.DEBUG if verbose else logging.INFO

    # Configure rich logging handler to output to stderr
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=err_console,
                show_time=False,
                show_path=verbose,
                rich_tracebacks=True,
            ),
        ],
    )


def load_block_pack(module_path: str) -> Callable[[BlockRegistry], object]:
    """Load a block-pack registration function from a module path.

    Args:
        module_path: Module path in format 'module.path:function_name'. The
            function is called with the registry and registers its blocks.

    Returns:
        The registration function.

    """
    if ":" not in module_path:
        msg = "Block pack must be in format 'module.path:function_name'"
        raise ValueError(msg)

    module_name, func_name = module_path.split(":", 1)
    module = importlib.import_module(module_name)
    func = getattr(module, func_name, None)

    if not callable(func):
        msg = f"'{func_name}' in module '{module_name}' is not callable"
        raise TypeError(msg)

    return func


def build_registry(block_packs: list[str] | None = None) -> BlockRegistry:
    """Build the core registry plus any extra block packs."""
    registry = core_registry()
    for module_path in block_packs or []:
        logger.debug("Loading block pack %s", module_path)
        load_block_pack(module_path)(registry)
    return registry


def _load_config() -> ReflowConfig:
    try:
        return get_config()
    except ConfigError as e:
        err_console.print(f"[red]✗ {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e


def _resolve_graph_path(graph: Path | None, config: ReflowConfig) -> Path:
    if graph is not None:
        return graph
    if config.graph is not None:
        return config.graph
    err_console.print("[red]✗ No graph document given and no \\[tool.reflow].graph configured[/red]")
    raise typer.Exit(code=1)


BlocksOption = Annotated[
    list[str] | None,
    typer.Option("--blocks", help="Extra block pack to register (e.g. mypkg.blocks:register). Repeatable."),
]


@app.command()
def calc(  # noqa: PLR0913
    graph: Annotated[
        Path | None,
        typer.Argument(help="Path to the graph document (TOML or JSON)"),
    ] = None,
    *,
    output: Annotated[
        Path | None,
        typer.Option("-o", "--output", help="Path to output TOML file"),
    ] = None,
    locale: Annotated[
        str | None,
        typer.Option("--locale", help="Locale tag for on-screen number formatting (e.g. de, fr_FR)"),
    ] = None,
    trace: Annotated[
        bool | None,
        typer.Option("--trace/--no-trace", help="Show what every node received and produced"),
    ] = None,
    strict: Annotated[
        bool,
        typer.Option("--strict", help="Exit non-zero if the pass reports any error diagnostic"),
    ] = False,
    blocks: BlocksOption = None,
) -> None:
    """Evaluate a graph document and print every node's value."""
    config = _load_config()
    graph_path = _resolve_graph_path(graph, config)
    output = output if output is not None else config.output
    locale = locale if locale is not None else config.locale
    trace = trace if trace is not None else config.trace

    err_console.print()
    err_console.print(f"[cyan]Loading graph from:[/cyan] {escape(str(graph_path))}")
    try:
        document = load_graph_document(graph_path)
        registry = build_registry(blocks)
    except (ReflowError, ImportError, ValueError, TypeError) as e:
        err_console.print(f"[red]✗ {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    named_values = NamedValues.from_registry(registry, document.variables)

    err_console.print("[cyan]Evaluating graph...[/cyan]")
    result = evaluate_graph(
        document.nodes,
        document.edges,
        registry=registry,
        named_values=named_values,
        trace=trace,
    )
    err_console.print()

    render_results_table(document.nodes, result, out_console, locale)

    if result.diagnostics:
        err_console.print()
        err_console.print("[bold]Diagnostics[/bold]")
        render_diagnostics(result.diagnostics, err_console)

    if trace:
        err_console.print()
        err_console.print(build_trace_tree(result))

    if output is not None:
        err_console.print()
        err_console.print(f"[cyan]Exporting results to:[/cyan] {escape(str(output))}")
        export_to_toml(result, output)

    err_console.print()
    if strict and not result.success:
        err_console.print("[red]✗ Evaluation reported errors[/red]")
        raise typer.Exit(code=1)

    err_console.print("[green]✓ Evaluation complete[/green]")
    err_console.print()


@app.command()
def check(
    graph: Annotated[
        Path | None,
        typer.Argument(help="Path to the graph document (TOML or JSON)"),
    ] = None,
    *,
    plain: Annotated[
        bool,
        typer.Option("--plain", help="Print the health report as plain text"),
    ] = False,
    blocks: BlocksOption = None,
) -> None:
    """Check a graph document for structural problems without evaluating it."""
    config = _load_config()
    graph_path = _resolve_graph_path(graph, config)

    err_console.print()
    err_console.print(f"[cyan]Loading graph from:[/cyan] {escape(str(graph_path))}")
    try:
        document = load_graph_document(graph_path)
        registry = build_registry(blocks)
    except (ReflowError, ImportError, ValueError, TypeError) as e:
        err_console.print(f"[red]✗ {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    diagnostics = validate_graph(document.nodes, document.edges)
    unknown = sorted({node.block_type for node in document.nodes if node.block_type not in registry})
    report = compute_graph_health(document.nodes, document.edges)

    if plain:
        out_console.print(format_health_report(report), markup=False, highlight=False, soft_wrap=True)
    else:
        err_console.print(
            Panel(
                build_health_table(report),
                title="[bold]Graph health[/bold]",
                border_style="cyan",
            ),
        )
        for warning in report.warnings:
            err_console.print(f"  [yellow]⚠[/yellow] {warning.key}: {warning.detail}")
    for block_type in unknown:
        err_console.print(f"  [yellow]⚠[/yellow] unknown block type: {escape(block_type)}")

    err_console.print()
    render_diagnostics(diagnostics, err_console)
    err_console.print()

    if any(d.level == DiagnosticLevel.ERROR for d in diagnostics):
        err_console.print("[red]✗ Graph is invalid[/red]")
        raise typer.Exit(code=1)

    err_console.print("[green]✓ Graph is valid[/green]")
    err_console.print()


@app.command(name="blocks")
def list_blocks(
    *,
    blocks: BlocksOption = None,
) -> None:
    """List the registered block contracts."""
    try:
        registry = build_registry(blocks)
    except (ReflowError, ImportError, ValueError, TypeError) as e:
        err_console.print(f"[red]✗ {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    out_console.print(build_blocks_table(registry))
    out_console.print(f"\n[dim]Total: {len(registry)} blocks[/dim]")


def main() -> None:
    app()
