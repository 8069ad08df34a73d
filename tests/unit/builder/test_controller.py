"""
interactive-parse — unit tests for the checkpoint/undo controller

File: tests/unit/builder/test_controller.py

Purpose
- Validate depth accounting, frame absorption, per-element loop ownership,
  root policies, and the screen line count kept in step with the depth.

What this test file should cover
- A committed prompt advances the depth by exactly one; a skip never does.
- A skip redoes the previous prompt and erases exactly the discarded lines.
- Undoing the very first prompt aborts or retries depending on the policy.
- Out-of-band cancellation writes one marker line and behaves like a skip.
"""

from __future__ import annotations

from typing import Any

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from interactive_parse.builder.controller import CANCEL_MARKER, RootPolicy, TraversalContext
from interactive_parse.builder.outcome import STOP, Committed, Rewind
from interactive_parse.builder.values import build_value
from interactive_parse.config.schema import BuilderSettings
from interactive_parse.errors import Aborted
from interactive_parse.prompts.base import SKIP
from interactive_parse.prompts.scripted import ScriptedPrompter
from interactive_parse.schema.resolver import load_document
from interactive_parse.terminal.cancellation import CancellationSource
from interactive_parse.terminal.redraw import BufferTerminal, DisplayRedraw


def _two_fields() -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {"a": {"type": "string"}, "b": {"type": "integer"}},
    }


def _run(
    schema: dict[str, Any],
    answers: list[Any],
    *,
    policy: RootPolicy = RootPolicy.ABORT,
    cancellation: CancellationSource | None = None,
) -> tuple[Any, BufferTerminal, ScriptedPrompter]:
    terminal = BufferTerminal()
    prompter = ScriptedPrompter(answers, terminal=terminal)
    value = build_value(
        load_document(schema),
        prompter,
        settings=BuilderSettings(root_policy=policy),
        terminal=terminal,
        cancellation=cancellation,
    )
    return value, terminal, prompter


# ---------------------------------------------------------------------------
# TraversalContext primitives
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_ask_advances_depth_only_on_commit() -> None:
    context = TraversalContext()

    assert context.ask(lambda: "x") == Committed("x")
    assert context.depth == 1
    assert context.ask(lambda: SKIP) == Rewind(1)
    assert context.depth == 1


@pytest.mark.unit
def test_frame_forwards_rewind_targeting_its_own_checkpoint() -> None:
    context = TraversalContext()
    context.ask(lambda: "x")

    outcome = context.frame(lambda: context.ask(lambda: SKIP))

    assert outcome == Rewind(1)
    assert context.depth == 1


@pytest.mark.unit
def test_frame_absorbs_rewind_from_inside_and_retries() -> None:
    terminal = BufferTerminal()
    context = TraversalContext(redraw=DisplayRedraw(terminal))
    answers = iter(["first", SKIP, "again", "second"])

    def prompt() -> Any:
        answer = next(answers)
        terminal.write_line(str(answer))
        return answer

    def attempt() -> Any:
        first = context.ask(prompt)
        if isinstance(first, Rewind):
            return first
        second = context.ask(prompt)
        if isinstance(second, Rewind):
            return second
        return Committed((first.value, second.value))

    outcome = context.frame(attempt)

    assert outcome == Committed(("again", "second"))
    assert context.depth == 2
    assert terminal.erase_calls == [2]
    assert terminal.lines == ("again", "second")


@pytest.mark.unit
def test_loop_rebuilds_from_the_owning_element() -> None:
    context = TraversalContext()
    script = iter(["a", "b", SKIP, "b2", "c"])
    calls: list[int] = []

    def step(index: int) -> Any:
        if index == 3:
            return STOP
        calls.append(index)
        return context.frame(lambda: context.ask(lambda: next(script)))

    outcome = context.loop(step)

    assert outcome == Committed(["a", "b2", "c"])
    assert calls == [0, 1, 2, 1, 2]
    assert context.depth == 3


@pytest.mark.unit
def test_loop_forwards_rewind_no_element_owns() -> None:
    context = TraversalContext()
    context.ask(lambda: "outer")

    outcome = context.loop(lambda index: context.ask(lambda: SKIP))

    assert outcome == Rewind(1)
    assert context.depth == 1


@pytest.mark.unit
def test_rewind_to_rejects_checkpoint_beyond_depth() -> None:
    context = TraversalContext()

    with pytest.raises(ValueError, match="outside depth range"):
        context.rewind_to(3, 3)


@pytest.mark.unit
def test_finish_turns_escaped_rewind_into_aborted() -> None:
    context = TraversalContext()

    assert context.finish(Committed(5)) == 5
    with pytest.raises(Aborted) as excinfo:
        context.finish(Rewind(0))
    assert excinfo.value.depth == 0


@pytest.mark.unit
def test_rewind_depth_must_be_non_negative() -> None:
    with pytest.raises(ValueError):
        Rewind(-1)


# ---------------------------------------------------------------------------
# Whole-session behaviour
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_skip_redoes_previous_prompt_and_erases_two_lines() -> None:
    value, terminal, prompter = _run(_two_fields(), ["x", "<", "y", 2])

    assert value == {"a": "y", "b": 2}
    assert terminal.erase_calls == [2]
    assert terminal.lines == ("a y", "b 2")
    assert prompter.remaining == 0


@pytest.mark.unit
def test_skip_then_same_answers_yields_same_value_as_no_skip() -> None:
    plain, _, _ = _run(_two_fields(), ["x", 7])
    redone, _, _ = _run(_two_fields(), ["x", "<", "x", 7])

    assert plain == redone == {"a": "x", "b": 7}


@pytest.mark.unit
def test_screen_line_count_matches_committed_prompts() -> None:
    schema = {
        "type": "object",
        "properties": {
            "inner": {
                "type": "object",
                "properties": {"p": {"type": "string"}, "q": {"type": "string"}},
            },
            "r": {"type": "string"},
        },
    }

    value, terminal, _ = _run(schema, ["p1", "<", "p2", "q1", "r1"])

    assert value == {"inner": {"p": "p2", "q": "q1"}, "r": "r1"}
    assert len(terminal.lines) == 3
    assert terminal.erase_calls == [2]


@pytest.mark.unit
def test_skip_after_nested_object_redoes_that_object() -> None:
    schema = {
        "type": "object",
        "properties": {
            "inner": {
                "type": "object",
                "properties": {"p": {"type": "string"}, "q": {"type": "string"}},
            },
            "r": {"type": "string"},
        },
    }

    value, terminal, _ = _run(schema, ["p1", "q1", "<", "p2", "q2", "r1"])

    assert value == {"inner": {"p": "p2", "q": "q2"}, "r": "r1"}
    assert terminal.erase_calls == [3]
    assert terminal.lines == ("p p2", "q q2", "r r1")


@pytest.mark.unit
def test_skipping_first_prompt_aborts_under_abort_policy() -> None:
    with pytest.raises(Aborted):
        _run(_two_fields(), ["<"])


@pytest.mark.unit
def test_skipping_first_prompt_retries_under_retry_policy() -> None:
    value, terminal, _ = _run(_two_fields(), ["<", "<", "x", 1], policy=RootPolicy.RETRY)

    assert value == {"a": "x", "b": 1}
    assert terminal.erase_calls == [1, 1]
    assert terminal.lines == ("a x", "b 1")


@pytest.mark.unit
def test_cancellation_request_rewinds_like_a_skip() -> None:
    source = CancellationSource()

    class _CancelAfterFirst(ScriptedPrompter):
        def text(self, question: str, help_message: str) -> Any:
            answer = super().text(question, help_message)
            if len(self.transcript) == 1:
                source.request("test")
            return answer

    terminal = BufferTerminal()
    prompter = _CancelAfterFirst(["x", "y", 3], terminal=terminal)

    value = build_value(
        load_document(_two_fields()), prompter, terminal=terminal, cancellation=source
    )

    assert value == {"a": "y", "b": 3}
    assert terminal.erase_calls == [2]
    assert terminal.lines == ("a y", "b 3")
    assert source.poll() is None


@pytest.mark.unit
def test_cancellation_marker_occupies_one_line() -> None:
    source = CancellationSource()
    terminal = BufferTerminal()
    context = TraversalContext(redraw=DisplayRedraw(terminal), cancellation=source)
    source.request()

    outcome = context.ask(lambda: pytest.fail("prompt must not run"))

    assert outcome == Rewind(0)
    assert terminal.lines == (CANCEL_MARKER,)


@pytest.mark.unit
@settings(max_examples=50, deadline=None)
@given(st.lists(st.text(alphabet="abcxyz ", min_size=1, max_size=8), min_size=1, max_size=6))
def test_without_skips_value_shape_follows_the_answers(answers: list[str]) -> None:
    names = [f"f{index}" for index in range(len(answers))]
    schema = {
        "type": "object",
        "properties": {name: {"type": "string"} for name in names},
    }
    terminal = BufferTerminal()
    prompter = ScriptedPrompter(answers, terminal=terminal)

    value = build_value(load_document(schema), prompter, terminal=terminal)

    assert value == dict(zip(names, answers, strict=True))
    assert len(terminal.lines) == len(answers)
    assert terminal.erase_calls == []
