"""
interactive-parse — unit tests for oneOf / allOf / anyOf

File: tests/unit/builder/test_composition.py
"""

from __future__ import annotations

from typing import Any

import pytest

from interactive_parse.builder.composition import unique_labels
from interactive_parse.builder.values import build_value
from interactive_parse.errors import ResolutionError
from interactive_parse.prompts.scripted import PromptRecord, ScriptedPrompter
from interactive_parse.schema.resolver import load_document
from interactive_parse.terminal.redraw import BufferTerminal


def _build(schema: dict[str, Any], answers: list[Any]) -> tuple[Any, ScriptedPrompter]:
    prompter = ScriptedPrompter(answers, terminal=BufferTerminal())
    value = build_value(load_document(schema), prompter, terminal=prompter.terminal)
    assert prompter.remaining == 0
    return value, prompter


_PETS: dict[str, Any] = {
    "oneOf": [
        {"type": "object", "properties": {"cat": {"type": "string"}}},
        {"type": "object", "properties": {"dog": {"type": "integer"}}},
    ]
}


@pytest.mark.unit
def test_one_of_builds_only_the_chosen_variant() -> None:
    value, prompter = _build(_PETS, ["dog", 3])

    assert value == {"dog": 3}
    assert prompter.transcript[0] == PromptRecord("select", "Select one:", "value", "dog")
    assert [record.question for record in prompter.transcript] == ["Select one:", "dog"]


@pytest.mark.unit
def test_skip_inside_variant_returns_to_the_menu() -> None:
    value, prompter = _build(_PETS, ["dog", "<", "cat", "tom"])

    assert value == {"cat": "tom"}
    terminal = prompter.terminal
    assert isinstance(terminal, BufferTerminal)
    assert terminal.erase_calls == [2]
    assert terminal.lines == ("Select one: cat", "cat tom")


@pytest.mark.unit
def test_one_of_const_variant_returns_literal_without_prompt() -> None:
    schema = {
        "oneOf": [{"const": "none"}, {"$ref": "#/$defs/Size"}],
        "$defs": {"Size": {"type": "integer", "title": "Size"}},
    }

    value, prompter = _build(schema, ["none"])

    assert value == "none"
    assert len(prompter.transcript) == 1


@pytest.mark.unit
def test_reference_variant_is_labelled_by_its_title() -> None:
    schema = {
        "oneOf": [{"const": "none"}, {"$ref": "#/$defs/Size"}],
        "$defs": {"Size": {"type": "integer", "title": "Size"}},
    }

    value, _ = _build(schema, ["Size", 4])

    assert value == 4


@pytest.mark.unit
def test_duplicate_labels_are_numbered() -> None:
    schema = {"oneOf": [{"type": "string"}, {"type": "string"}, {"type": "integer"}]}

    value, _ = _build(schema, ["string #2", "b"])

    assert value == "b"


@pytest.mark.unit
def test_untitled_empty_object_variant_cannot_be_labelled() -> None:
    schema = {"oneOf": [{"type": "object", "properties": {}}, {"type": "string"}]}

    with pytest.raises(ResolutionError, match="variant 0"):
        _build(schema, [])


@pytest.mark.unit
def test_all_of_with_two_scalars_yields_two_elements() -> None:
    schema = {"allOf": [{"type": "string"}, {"type": "integer"}]}

    value, prompter = _build(schema, ["a", 1])

    assert value == ["a", 1]
    assert [record.question for record in prompter.transcript] == ["value", "value"]


@pytest.mark.unit
def test_all_of_with_one_variant_yields_its_value() -> None:
    schema = {
        "allOf": [{"$ref": "#/$defs/Inner"}],
        "$defs": {"Inner": {"type": "object", "properties": {"x": {"type": "boolean"}}}},
    }

    value, _ = _build(schema, [True])

    assert value == {"x": True}


@pytest.mark.unit
def test_any_of_with_null_is_an_optional_value() -> None:
    schema = {"anyOf": [{"type": "string"}, {"type": "null"}]}

    declined, _ = _build(schema, [False])
    accepted, prompter = _build(schema, [True, "hi"])

    assert declined is None
    assert accepted == "hi"
    assert prompter.transcript[0].question == "Add optional value?"


@pytest.mark.unit
def test_any_of_without_null_is_a_union_menu() -> None:
    schema = {"anyOf": [{"type": "string"}, {"type": "integer"}]}

    value, prompter = _build(schema, ["integer", 9])

    assert value == 9
    assert prompter.transcript[0].kind == "select"


@pytest.mark.unit
def test_any_of_with_several_non_null_variants_gates_then_offers_menu() -> None:
    schema = {"anyOf": [{"type": "string"}, {"type": "integer"}, {"type": "null"}]}

    value, prompter = _build(schema, [True, "string", "s"])

    assert value == "s"
    assert [record.kind for record in prompter.transcript] == ["confirm", "select", "text"]


@pytest.mark.unit
def test_any_of_of_only_nulls_is_none() -> None:
    value, prompter = _build({"anyOf": [{"type": "null"}]}, [])

    assert value is None
    assert prompter.transcript == []


@pytest.mark.unit
def test_numbered_labels_never_collide_with_literal_labels() -> None:
    labels = unique_labels(["x", "x", "x #2"])

    assert labels == ["x #1", "x #5", "x #2"]
    assert len(set(labels)) == 3


@pytest.mark.unit
@pytest.mark.parametrize(("answers", "expected"), [(["x #2", True], True), (["x #5", 7], 7)])
def test_one_of_with_colliding_titles_builds_the_chosen_variant(
    answers: list[Any], expected: Any
) -> None:
    schema = {
        "oneOf": [
            {"type": "string", "title": "x"},
            {"type": "integer", "title": "x"},
            {"type": "boolean", "title": "x #2"},
        ]
    }

    value, _ = _build(schema, answers)

    assert value == expected
