"""
interactive-parse — unit tests for the scripted prompter

File: tests/unit/prompts/test_scripted.py
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from interactive_parse.errors import PromptIOError
from interactive_parse.prompts.base import SKIP, Prompter
from interactive_parse.prompts.scripted import PromptRecord, ScriptedPrompter
from interactive_parse.terminal.redraw import BufferTerminal

if TYPE_CHECKING:
    from pathlib import Path


@pytest.mark.unit
def test_scripted_prompter_satisfies_protocol() -> None:
    assert isinstance(ScriptedPrompter([]), Prompter)


@pytest.mark.unit
@pytest.mark.parametrize(
    ("raw", "expected"),
    [(True, True), ("y", True), ("YES", True), ("off", False), (False, False)],
)
def test_confirm_coercion(raw: object, expected: bool) -> None:
    assert ScriptedPrompter([raw]).confirm("q", "") is expected


@pytest.mark.unit
def test_number_coercion() -> None:
    prompter = ScriptedPrompter(["3", 4.0, "2.5", 7])

    assert prompter.number("n", "", integer=True) == 3
    assert prompter.number("n", "", integer=True) == 4
    assert prompter.number("n", "") == 2.5
    assert prompter.number("n", "") == 7.0


@pytest.mark.unit
def test_text_accepts_numbers_as_text() -> None:
    assert ScriptedPrompter([42]).text("t", "") == "42"


@pytest.mark.unit
def test_select_accepts_label_or_one_based_index() -> None:
    prompter = ScriptedPrompter(["b", 3])

    assert prompter.select("pick", ["a", "b", "c"], "") == "b"
    assert prompter.select("pick", ["a", "b", "c"], "") == "c"


@pytest.mark.unit
def test_undo_token_skips_any_prompt_kind() -> None:
    prompter = ScriptedPrompter(["<", "<", "<", "<"])

    assert prompter.confirm("c", "") is SKIP
    assert prompter.text("t", "") is SKIP
    assert prompter.number("n", "") is SKIP
    assert prompter.select("s", ["a"], "") is SKIP


@pytest.mark.unit
def test_custom_undo_token() -> None:
    prompter = ScriptedPrompter(["<", "back"], undo_token="back")

    assert prompter.text("t", "") == "<"
    assert prompter.text("t", "") is SKIP


@pytest.mark.unit
@pytest.mark.parametrize(
    ("method", "raw"),
    [("confirm", "maybe"), ("integer", 1.5), ("integer", True), ("text", None), ("select", 9)],
)
def test_mismatched_answer_raises_prompt_io_error(method: str, raw: object) -> None:
    prompter = ScriptedPrompter([raw])

    with pytest.raises(PromptIOError, match="does not fit"):
        if method == "confirm":
            prompter.confirm("q", "")
        elif method == "integer":
            prompter.number("q", "", integer=True)
        elif method == "text":
            prompter.text("q", "")
        else:
            prompter.select("q", ["a", "b"], "")


@pytest.mark.unit
def test_exhausted_script_raises_prompt_io_error() -> None:
    with pytest.raises(PromptIOError, match="exhausted"):
        ScriptedPrompter([]).text("name", "")


@pytest.mark.unit
def test_transcript_and_terminal_record_every_exchange() -> None:
    terminal = BufferTerminal()
    prompter = ScriptedPrompter(["ann", "<"], terminal=terminal)

    prompter.text("name", "string")
    prompter.confirm("Add element?", "tags")

    assert prompter.transcript == [
        PromptRecord("text", "name", "string", "ann"),
        PromptRecord("confirm", "Add element?", "tags", SKIP),
    ]
    assert terminal.lines == ("name ann", "Add element? <")
    assert prompter.remaining == 0


@pytest.mark.unit
def test_from_file_reads_yaml_list(tmp_path: Path) -> None:
    script = tmp_path / "answers.yaml"
    script.write_text("- ann\n- 3\n- '<'\n- yes\n", encoding="utf-8")

    prompter = ScriptedPrompter.from_file(script)

    assert prompter.remaining == 4
    assert prompter.text("t", "") == "ann"
    assert prompter.number("n", "", integer=True) == 3
    assert prompter.text("t", "") is SKIP
    assert prompter.confirm("c", "") is True


@pytest.mark.unit
def test_from_file_reads_json_list(tmp_path: Path) -> None:
    script = tmp_path / "answers.json"
    script.write_text('["a", true]', encoding="utf-8")

    assert ScriptedPrompter.from_file(script).remaining == 2


@pytest.mark.unit
def test_from_file_empty_document_is_empty_script(tmp_path: Path) -> None:
    script = tmp_path / "answers.yaml"
    script.write_text("", encoding="utf-8")

    assert ScriptedPrompter.from_file(script).remaining == 0


@pytest.mark.unit
def test_from_file_rejects_non_list(tmp_path: Path) -> None:
    script = tmp_path / "answers.yaml"
    script.write_text("name: ann\n", encoding="utf-8")

    with pytest.raises(PromptIOError, match="list of answers"):
        ScriptedPrompter.from_file(script)


@pytest.mark.unit
def test_from_file_missing_file(tmp_path: Path) -> None:
    with pytest.raises(PromptIOError, match="cannot read"):
        ScriptedPrompter.from_file(tmp_path / "missing.yaml")
