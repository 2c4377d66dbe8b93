"""Tests for the graph model."""

import pytest
from pydantic import ValidationError

from reflow._model import ConstantBinding, Edge, GraphDocument, LiteralBinding, Node, Variable, VariableBinding


class TestNode:
    """Tests for Node model."""

    def test_defaults(self) -> None:
        node = Node(id="n1", block_type="number")
        assert node.data == {}
        assert node.input_bindings == {}
        assert node.port_overrides == {}
        assert node.manual_values == {}

    def test_accepts_camel_case_payload(self) -> None:
        node = Node.model_validate(
            {
                "id": "n1",
                "blockType": "add",
                "inputBindings": {"a": {"kind": "literal", "value": 2}},
                "portOverrides": {"a": True},
                "manualValues": {"b": 5},
            },
        )
        assert node.block_type == "add"
        assert node.input_bindings["a"] == LiteralBinding(value=2.0)
        assert node.is_overridden("a")
        assert node.manual_values == {"b": 5.0}

    def test_ignores_editor_only_fields(self) -> None:
        node = Node.model_validate({"id": "n1", "blockType": "number", "position": {"x": 0, "y": 0}})
        assert node.id == "n1"

    def test_binding_discriminated_by_kind(self) -> None:
        node = Node.model_validate(
            {
                "id": "n1",
                "block_type": "add",
                "input_bindings": {
                    "a": {"kind": "const", "constId": "pi"},
                    "b": {"kind": "var", "var_id": "v1"},
                },
            },
        )
        assert node.input_bindings["a"] == ConstantBinding(const_id="pi")
        assert node.input_bindings["b"] == VariableBinding(var_id="v1")

    def test_unknown_binding_kind_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Node.model_validate({"id": "n1", "block_type": "add", "input_bindings": {"a": {"kind": "expr"}}})

    def test_is_overridden_false_by_default(self) -> None:
        node = Node(id="n1", block_type="add", port_overrides={"a": False})
        assert not node.is_overridden("a")
        assert not node.is_overridden("b")

    def test_frozen(self) -> None:
        node = Node(id="n1", block_type="number")
        with pytest.raises(ValidationError):
            node.block_type = "add"  # type: ignore[misc]


class TestEdge:
    """Tests for Edge model."""

    def test_default_handles(self) -> None:
        edge = Edge(id="e1", source="a", target="b")
        assert edge.source_handle == "out"
        assert edge.target_handle == "in"

    def test_camel_case_handles(self) -> None:
        edge = Edge.model_validate({"id": "e1", "source": "a", "target": "b", "targetHandle": "x"})
        assert edge.target_handle == "x"


class TestGraphDocument:
    """Tests for GraphDocument model."""

    def test_empty_document(self) -> None:
        document = GraphDocument()
        assert document.nodes == []
        assert document.edges == []
        assert document.variables == []

    def test_full_document(self) -> None:
        document = GraphDocument.model_validate(
            {
                "nodes": [{"id": "n1", "blockType": "number", "data": {"value": 3}}],
                "edges": [],
                "variables": [{"id": "g", "name": "gravity", "value": 9.81}],
            },
        )
        assert document.nodes[0].data == {"value": 3}
        assert document.variables == [Variable(id="g", name="gravity", value=9.81)]

    def test_unknown_top_level_key_rejected(self) -> None:
        with pytest.raises(ValidationError):
            GraphDocument.model_validate({"nodes": [], "layout": {}})
