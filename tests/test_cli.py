"""Tests for the reflow CLI commands and rendering helpers."""

import tomllib
from pathlib import Path

import pytest
from typer.testing import CliRunner

from reflow._blocks import core_registry
from reflow._cli.main import app, build_registry, load_block_pack
from reflow._cli.render import build_blocks_table, build_results_table, build_trace_tree
from reflow._eval_engine import evaluate_graph
from reflow._model import Node

runner = CliRunner()

# --- Fixtures ---

SUM_GRAPH = """
[[nodes]]
id = "n1"
block_type = "number"
data = { value = 3 }

[[nodes]]
id = "n2"
block_type = "number"
data = { value = 4 }

[[nodes]]
id = "sum"
block_type = "add"

[[edges]]
id = "e1"
source = "n1"
target = "sum"
target_handle = "a"

[[edges]]
id = "e2"
source = "n2"
target = "sum"
target_handle = "b"
"""

CYCLE_GRAPH = """
[[nodes]]
id = "a"
block_type = "negate"

[[nodes]]
id = "b"
block_type = "negate"

[[edges]]
id = "e1"
source = "a"
target = "b"
target_handle = "a"

[[edges]]
id = "e2"
source = "b"
target = "a"
target_handle = "a"
"""

BLOCK_PACK = '''
from reflow import Scalar


def register(registry):
    @registry.block("answer", category="input")
    def answer(inputs, data):
        return Scalar(42.0)
'''


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run each CLI test from an empty directory without a pyproject.toml."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


def write_graph(directory: Path, contents: str, name: str = "graph.toml") -> Path:
    path = directory / name
    path.write_text(contents)
    return path


# --- calc ---


class TestCalcCommand:
    """Tests for the calc command."""

    def test_prints_values(self, workdir: Path) -> None:
        graph = write_graph(workdir, SUM_GRAPH)

        result = runner.invoke(app, ["calc", str(graph)])

        assert result.exit_code == 0, result.output
        assert "sum" in result.output
        assert "7" in result.output

    def test_exports_results(self, workdir: Path) -> None:
        graph = write_graph(workdir, SUM_GRAPH)
        output = workdir / "out" / "results.toml"

        result = runner.invoke(app, ["calc", str(graph), "-o", str(output)])

        assert result.exit_code == 0, result.output
        with output.open("rb") as f:
            data = tomllib.load(f)
        assert data["values"]["sum"]["value"] == 7.0

    def test_cycle_succeeds_without_strict(self, workdir: Path) -> None:
        graph = write_graph(workdir, CYCLE_GRAPH)

        result = runner.invoke(app, ["calc", str(graph)])

        assert result.exit_code == 0, result.output
        assert "CYCLE_DETECTED" in result.output

    def test_cycle_fails_with_strict(self, workdir: Path) -> None:
        graph = write_graph(workdir, CYCLE_GRAPH)

        result = runner.invoke(app, ["calc", str(graph), "--strict"])

        assert result.exit_code == 1

    def test_missing_graph_file(self, workdir: Path) -> None:
        result = runner.invoke(app, ["calc", str(workdir / "missing.toml")])

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_no_graph_and_no_config(self, workdir: Path) -> None:
        result = runner.invoke(app, ["calc"])

        assert result.exit_code == 1

    def test_graph_from_config(self, workdir: Path) -> None:
        write_graph(workdir, SUM_GRAPH, name="budget.toml")
        (workdir / "pyproject.toml").write_text('[tool.reflow]\ngraph = "budget.toml"\n')

        result = runner.invoke(app, ["calc"])

        assert result.exit_code == 0, result.output
        assert "sum" in result.output

    def test_invalid_config(self, workdir: Path) -> None:
        (workdir / "pyproject.toml").write_text("[tool.reflow]\ntrace = 1\n")

        result = runner.invoke(app, ["calc"])

        assert result.exit_code == 1

    def test_locale_option(self, workdir: Path) -> None:
        graph = write_graph(workdir, '[[nodes]]\nid = "n"\nblock_type = "number"\ndata = { value = 1234.5 }\n')

        result = runner.invoke(app, ["calc", str(graph), "--locale", "de"])

        assert result.exit_code == 0, result.output
        assert "1.234,5" in result.output

    def test_trace_option(self, workdir: Path) -> None:
        graph = write_graph(workdir, SUM_GRAPH)

        result = runner.invoke(app, ["calc", str(graph), "--trace"])

        assert result.exit_code == 0, result.output
        assert "Evaluation trace" in result.output

    def test_extra_block_pack(self, workdir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (workdir / "extra_blocks.py").write_text(BLOCK_PACK)
        monkeypatch.syspath_prepend(str(workdir))
        graph = write_graph(workdir, '[[nodes]]\nid = "q"\nblock_type = "answer"\n')

        result = runner.invoke(app, ["calc", str(graph), "--blocks", "extra_blocks:register"])

        assert result.exit_code == 0, result.output
        assert "42" in result.output


# --- check ---


class TestCheckCommand:
    """Tests for the check command."""

    def test_valid_graph(self, workdir: Path) -> None:
        graph = write_graph(workdir, SUM_GRAPH)

        result = runner.invoke(app, ["check", str(graph)])

        assert result.exit_code == 0, result.output
        assert "Graph is valid" in result.output

    def test_duplicate_nodes_fail(self, workdir: Path) -> None:
        graph = write_graph(
            workdir,
            '[[nodes]]\nid = "x"\nblock_type = "number"\n\n[[nodes]]\nid = "x"\nblock_type = "number"\n',
        )

        result = runner.invoke(app, ["check", str(graph)])

        assert result.exit_code == 1
        assert "DUPLICATE_NODE" in result.output

    def test_cycle_reported_but_valid(self, workdir: Path) -> None:
        graph = write_graph(workdir, CYCLE_GRAPH)

        result = runner.invoke(app, ["check", str(graph)])

        assert result.exit_code == 0, result.output
        assert "cycle_detected" in result.output

    def test_plain_health_report(self, workdir: Path) -> None:
        graph = write_graph(workdir, CYCLE_GRAPH)

        result = runner.invoke(app, ["check", str(graph), "--plain"])

        assert result.exit_code == 0, result.output
        assert "Graph health\n" in result.output
        assert "  ⚠ cycle_detected: " in result.output

    def test_unknown_block_type_reported(self, workdir: Path) -> None:
        graph = write_graph(workdir, '[[nodes]]\nid = "x"\nblock_type = "mystery"\n')

        result = runner.invoke(app, ["check", str(graph)])

        assert "unknown block type: mystery" in result.output


# --- blocks ---


class TestBlocksCommand:
    """Tests for the blocks command."""

    def test_lists_core_blocks(self) -> None:
        result = runner.invoke(app, ["blocks"])

        assert result.exit_code == 0, result.output
        assert "divide" in result.output
        assert f"Total: {len(core_registry())} blocks" in result.output


# --- Block pack loading ---


class TestLoadBlockPack:
    """Tests for load_block_pack and build_registry."""

    def test_requires_colon(self) -> None:
        with pytest.raises(ValueError, match="module.path:function_name"):
            load_block_pack("math")

    def test_rejects_non_callable(self) -> None:
        with pytest.raises(TypeError, match="not callable"):
            load_block_pack("math:pi")

    def test_missing_module(self) -> None:
        with pytest.raises(ImportError):
            load_block_pack("no_such_module_for_reflow:register")

    def test_build_registry_without_packs(self) -> None:
        assert build_registry().types() == core_registry().types()


# --- Rendering ---


class TestRendering:
    """Tests for the rich rendering builders."""

    def test_results_table_has_row_per_node(self) -> None:
        nodes = [Node(id="n", block_type="number"), Node(id="u", block_type="mystery")]
        result = evaluate_graph(nodes, [], registry=core_registry())

        table = build_results_table(nodes, result)

        assert table.row_count == 2

    def test_trace_tree_has_branch_per_entry(self) -> None:
        nodes = [Node(id="n", block_type="number"), Node(id="neg", block_type="negate")]
        result = evaluate_graph(nodes, [], registry=core_registry(), trace=True)

        tree = build_trace_tree(result)

        assert len(tree.children) == 2

    def test_blocks_table(self) -> None:
        assert build_blocks_table(core_registry()).row_count == len(core_registry())
