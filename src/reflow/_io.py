from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Any, assert_never

import tomli_w
from pydantic import ValidationError

from ._errors import GraphDocumentError
from ._format import format_value
from ._model import GraphDocument
from ._value import Error, Scalar, Table, Value, Vector

if TYPE_CHECKING:
    from ._eval_engine import EvaluationResult

logger = logging.getLogger(__name__)


def document_from_dict(contents: dict[str, Any]) -> GraphDocument:
    """Validate parsed document contents into a GraphDocument.

    This is a pure function. Both snake_case and camelCase field names are
    accepted (``block_type`` / ``blockType``).

    Raises:
        GraphDocumentError: If the contents do not describe a valid graph.

    """
    try:
        return GraphDocument.model_validate(contents)
    except ValidationError as e:
        msg = f"Invalid graph document: {e}"
        raise GraphDocumentError(msg) from e


def load_graph_document(input_path: Path | str) -> GraphDocument:
    """Load a graph document from a TOML or JSON file.

    The format is chosen by file suffix: ``.json`` is read as JSON, anything
    else as TOML.

    Args:
        input_path: Path to the graph document.

    Returns:
        The validated GraphDocument.

    Raises:
        GraphDocumentError: If the file is missing, unparsable or invalid.

    """
    input_path = Path(input_path)
    if not input_path.is_file():
        msg = f"Graph document not found: {input_path}"
        raise GraphDocumentError(msg)

    if input_path.suffix.lower() == ".json":
        try:
            document = GraphDocument.model_validate_json(input_path.read_bytes())
        except ValidationError as e:
            msg = f"Invalid graph document {input_path}: {e}"
            raise GraphDocumentError(msg) from e
    else:
        with input_path.open("rb") as f:
            try:
                contents = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                msg = f"Invalid TOML in {input_path}: {e}"
                raise GraphDocumentError(msg) from e
        document = document_from_dict(contents)

    logger.debug(
        "Loaded graph document from %s (%d nodes, %d edges)",
        input_path,
        len(document.nodes),
        len(document.edges),
    )
    return document


def _serialize_value(value: Value) -> dict[str, Any]:
    """Serialize one value for TOML export.

    TOML has no null, so every entry carries its kind plus kind-specific
    fields. ``display`` is always the locale-neutral compact rendering.
    """
    entry: dict[str, Any] = {"kind": value.kind, "display": format_value(value)}
    match value:
        case Scalar(value=n):
            entry["value"] = n
        case Vector(values=values):
            entry["values"] = list(values)
        case Table(columns=columns, rows=rows):
            entry["columns"] = list(columns)
            entry["rows"] = [list(row) for row in rows]
        case Error(message=message):
            entry["message"] = message
        case _:
            assert_never(value)
    return entry


def results_to_dict(result: EvaluationResult) -> dict[str, Any]:
    """Convert an evaluation result to a nested dictionary for export.

    This is a pure function.

    Returns:
        A dictionary with the structure:
        {
            "values": {"<node id>": {"kind": ..., "display": ..., ...}},
            "unreachable": {"nodes": [...]},
            "diagnostics": [{"code": ..., "level": ..., "message": ...}],
        }

    """
    data: dict[str, Any] = {
        "values": {node_id: _serialize_value(value) for node_id, value in result.values.items()},
        "unreachable": {"nodes": list(result.unreachable)},
    }
    if result.diagnostics:
        data["diagnostics"] = [
            {"code": str(d.code), "level": str(d.level), "message": d.message}
            | ({"node_id": d.node_id} if d.node_id is not None else {})
            for d in result.diagnostics
        ]
    return data


def export_to_toml(result: EvaluationResult, output_path: Path | str) -> None:
    """Export an evaluation result to a TOML file.

    Args:
        result: The result of an evaluation pass.
        output_path: Path to the output TOML file.

    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("wb") as f:
        tomli_w.dump(results_to_dict(result), f)

    logger.debug("Exported results to %s", output_path)
