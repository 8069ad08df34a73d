"""Prompter that replays a prepared list of answers.

Used for non-interactive builds (``build --answers FILE``) and throughout the
test suite. Each answer is either a concrete value or the undo token, which
makes the prompt report :data:`~interactive_parse.prompts.base.SKIP`.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from interactive_parse.errors import PromptIOError
from interactive_parse.prompts.base import DEFAULT_UNDO_TOKEN, SKIP, Skipped
from interactive_parse.terminal.redraw import NullTerminal, TerminalControl

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

_TRUE_WORDS = frozenset({"y", "yes", "true", "on", "1"})
_FALSE_WORDS = frozenset({"n", "no", "false", "off", "0"})


@dataclass(frozen=True, slots=True)
class PromptRecord:
    kind: str
    question: str
    help_message: str
    answer: Any


class ScriptedPrompter:
    """Answer prompts from a fixed script, recording every exchange."""

    def __init__(
        self,
        answers: Iterable[Any],
        *,
        undo_token: str = DEFAULT_UNDO_TOKEN,
        terminal: TerminalControl | None = None,
    ) -> None:
        self._answers: deque[Any] = deque(answers)
        self.undo_token = undo_token
        self.terminal: TerminalControl = terminal if terminal is not None else NullTerminal()
        self.transcript: list[PromptRecord] = []

    @classmethod
    def from_file(
        cls,
        path: str | Path,
        *,
        undo_token: str = DEFAULT_UNDO_TOKEN,
        terminal: TerminalControl | None = None,
    ) -> ScriptedPrompter:
        """Load answers from a YAML (or JSON) file holding a top-level list."""

        source = Path(path)
        try:
            loaded = yaml.safe_load(source.read_text(encoding="utf-8"))
        except OSError as exc:
            raise PromptIOError(f"cannot read answers file {source}: {exc}") from exc
        except yaml.YAMLError as exc:
            raise PromptIOError(f"answers file {source} is not valid YAML: {exc}") from exc
        if loaded is None:
            loaded = []
        if not isinstance(loaded, list):
            raise PromptIOError(f"answers file {source} must contain a list of answers")
        return cls(loaded, undo_token=undo_token, terminal=terminal)

    @property
    def remaining(self) -> int:
        return len(self._answers)

    def confirm(self, question: str, help_message: str) -> bool | Skipped:
        return self._answer("confirm", question, help_message, _as_bool)

    def text(self, question: str, help_message: str) -> str | Skipped:
        return self._answer("text", question, help_message, _as_text)

    def number(
        self, question: str, help_message: str, *, integer: bool = False
    ) -> int | float | Skipped:
        coerce = _as_int if integer else _as_float
        return self._answer("integer" if integer else "number", question, help_message, coerce)

    def select(self, question: str, options: Sequence[str], help_message: str) -> str | Skipped:
        def _choose(raw: Any) -> str:
            return _as_option(raw, options)

        return self._answer("select", question, help_message, _choose)

    def _answer(self, kind: str, question: str, help_message: str, coerce: Any) -> Any:
        if not self._answers:
            raise PromptIOError(f"answer script exhausted at {kind} prompt {question!r}")
        raw = self._answers.popleft()
        if isinstance(raw, str) and raw == self.undo_token:
            answer: Any = SKIP
            shown = self.undo_token
        else:
            try:
                answer = coerce(raw)
            except (TypeError, ValueError) as exc:
                raise PromptIOError(
                    f"scripted answer {raw!r} does not fit {kind} prompt {question!r}: {exc}"
                ) from exc
            shown = str(answer)
        self.transcript.append(PromptRecord(kind, question, help_message, answer))
        self.terminal.write_line(f"{question} {shown}")
        return answer


def _as_bool(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        lowered = raw.strip().lower()
        if lowered in _TRUE_WORDS:
            return True
        if lowered in _FALSE_WORDS:
            return False
    raise ValueError("expected a yes/no answer")


def _as_text(raw: Any) -> str:
    if isinstance(raw, bool) or raw is None:
        raise TypeError("expected a string answer")
    if isinstance(raw, (str, int, float)):
        return str(raw)
    raise TypeError("expected a string answer")


def _as_int(raw: Any) -> int:
    if isinstance(raw, bool):
        raise TypeError("expected an integer answer")
    if isinstance(raw, float):
        if not raw.is_integer():
            raise ValueError("expected an integer answer")
        return int(raw)
    if isinstance(raw, (int, str)):
        return int(raw)
    raise TypeError("expected an integer answer")


def _as_float(raw: Any) -> float:
    if isinstance(raw, bool):
        raise TypeError("expected a numeric answer")
    if isinstance(raw, (int, float, str)):
        return float(raw)
    raise TypeError("expected a numeric answer")


def _as_option(raw: Any, options: Sequence[str]) -> str:
    if isinstance(raw, str) and raw in options:
        return raw
    if isinstance(raw, int) and not isinstance(raw, bool) and 1 <= raw <= len(options):
        return options[raw - 1]
    raise ValueError(f"expected one of {list(options)} or a 1-based index")


__all__ = ["PromptRecord", "ScriptedPrompter"]
