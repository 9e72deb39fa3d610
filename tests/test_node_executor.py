"""Tests for node validation, processing functions and NodeExecutor."""

import pytest

from node_service.dependencies import get_node_executor
from node_service.models.schema import FieldDescriptor, NodeDefinition
from node_service.processing import ProcessorNotFound, concat, echo, resolve_processor
from node_service.services.node_executor import NodeExecutor, ProcessingContractError
from node_service.validation import PayloadValidationError, parse_json_object, validate_fields


def string_field(name):
    return FieldDescriptor(fieldType="string", name=name, label=name)


def definition(inputs, outputs):
    return NodeDefinition(
        name="testNode",
        inputs=[string_field(n) for n in inputs],
        outputs=[string_field(n) for n in outputs],
    )


class TestParseJsonObject:

    def test_object(self):
        assert parse_json_object(b'{"a": "b"}') == {"a": "b"}

    @pytest.mark.parametrize("raw", [b"", b"   ", b"{oops", b"[1, 2]", b'"text"', b"null"])
    def test_rejected(self, raw):
        with pytest.raises(PayloadValidationError):
            parse_json_object(raw)


class TestValidateFields:

    def test_values_in_declaration_order(self):
        fields = [string_field("b"), string_field("a")]

        assert validate_fields({"a": "1", "b": "2"}, fields) == ["2", "1"]

    def test_bool_is_not_a_string(self):
        with pytest.raises(PayloadValidationError) as exc_info:
            validate_fields({"a": True}, [string_field("a")])

        assert exc_info.value.issues[0].problem == "expected string, got boolean"

    def test_null_is_mistyped_not_missing(self):
        with pytest.raises(PayloadValidationError) as exc_info:
            validate_fields({"a": None}, [string_field("a")])

        assert exc_info.value.issues[0].problem == "expected string, got null"

    def test_collects_all_issues(self):
        fields = [string_field("a"), string_field("b"), string_field("c")]

        with pytest.raises(PayloadValidationError) as exc_info:
            validate_fields({"b": 1, "c": "ok"}, fields)

        assert [i.field for i in exc_info.value.issues] == ["a", "b"]
        assert "a: missing required field" in exc_info.value.message


class TestProcessors:

    def test_echo(self):
        assert echo("value1") == "value1"

    def test_concat(self):
        assert concat("value1", "value2") == "value1value2"

    def test_resolve_builtin(self):
        assert resolve_processor("concat") is concat

    def test_resolve_import_path(self):
        assert resolve_processor("node_service.processing:echo") is echo

    @pytest.mark.parametrize("ref", [
        "nope",
        "node_service.does_not_exist:func",
        "node_service.processing:missing",
        "node_service.processing:BUILTIN_PROCESSORS",
    ])
    def test_resolve_failures(self, ref):
        with pytest.raises(ProcessorNotFound):
            resolve_processor(ref)


class TestNodeExecutor:

    def test_single_output(self):
        executor = NodeExecutor(definition(["inputField1"], ["outputField"]), echo)

        assert executor.execute({"inputField1": "value1"}) == {"outputField": "value1"}

    def test_multiple_outputs(self):
        executor = NodeExecutor(
            definition(["text"], ["upper", "lower"]),
            lambda text: (text.upper(), text.lower()),
        )

        assert executor.execute({"text": "MiXed"}) == {"upper": "MIXED", "lower": "mixed"}

    def test_validation_runs_before_processor(self):
        calls = []
        executor = NodeExecutor(definition(["a"], ["out"]), lambda a: calls.append(a) or a)

        with pytest.raises(PayloadValidationError):
            executor.execute({})

        assert calls == []

    def test_wrong_output_arity(self):
        executor = NodeExecutor(definition(["a"], ["x", "y"]), lambda a: (a,))

        with pytest.raises(ProcessingContractError):
            executor.execute({"a": "1"})

    def test_wrong_output_type(self):
        executor = NodeExecutor(definition(["a"], ["out"]), lambda a: len(a))

        with pytest.raises(ProcessingContractError):
            executor.execute({"a": "abc"})


def test_contract_error_is_500(make_client, settings):
    client = make_client(settings)
    broken = NodeExecutor(settings.node_schema.primary, lambda value: 123)
    client.app.dependency_overrides[get_node_executor] = lambda: broken

    response = client.post("/do", json={"inputField1": "value1"})

    assert response.status_code == 500
