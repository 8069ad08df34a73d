"""Interactive prompts on a ``rich`` console.

Each prompt leaves exactly one line on screen, whether answered or skipped:
validation errors erase the rejected line and are shown inline on the retry,
and selection menus collapse to a single summary line once answered. The
redraw arithmetic of the undo controller depends on this.
"""

from __future__ import annotations

from typing import IO, TYPE_CHECKING, Any, cast

from rich.console import Console
from rich.prompt import Confirm, InvalidResponse, PromptBase, PromptType
from rich.text import Text, TextType

from interactive_parse.errors import PromptIOError
from interactive_parse.prompts.base import DEFAULT_UNDO_TOKEN, SKIP, Skipped
from interactive_parse.terminal.redraw import RichTerminal

if TYPE_CHECKING:
    from collections.abc import Sequence


class _UndoablePrompt(PromptBase[PromptType]):
    prompt_suffix = " "

    def __init__(
        self,
        prompt: TextType,
        *,
        terminal: RichTerminal,
        undo_token: str,
        help_message: str = "",
    ) -> None:
        super().__init__(prompt, console=terminal.console, show_default=False)
        self.undo_token = undo_token
        self.help_message = help_message
        self._terminal = terminal
        self._hint: TextType | None = None

    def make_prompt(self, default: Any) -> Text:
        prompt = self.prompt.copy()
        prompt.end = ""
        if self.show_choices and self.choices:
            prompt.append(f" [{'/'.join(self.choices)}]", "prompt.choices")
        if self.help_message:
            prompt.append(f" ({self.help_message})", "dim")
        if self._hint is not None:
            hint = self._hint
            prompt.append(" ")
            prompt.append(Text.from_markup(hint) if isinstance(hint, str) else hint)
        prompt.append(self.prompt_suffix)
        return prompt

    def process_response(self, value: str) -> PromptType:
        if value.strip() == self.undo_token:
            return cast("PromptType", SKIP)
        return super().process_response(value)

    def on_validate_error(self, value: str, error: InvalidResponse) -> None:
        self._terminal.move_up(1)
        self._terminal.clear_to_end()
        self._hint = error.message


class _TextPrompt(_UndoablePrompt[str]):
    response_type = str


class _IntegerPrompt(_UndoablePrompt[int]):
    response_type = int
    validate_error_message = "[prompt.invalid](enter a whole number)"


class _FloatPrompt(_UndoablePrompt[float]):
    response_type = float
    validate_error_message = "[prompt.invalid](enter a number)"


class _ConfirmPrompt(_UndoablePrompt[bool], Confirm):
    validate_error_message = "[prompt.invalid](enter y or n)"


class _SelectPrompt(_UndoablePrompt[str]):
    response_type = str
    illegal_choice_message = "[prompt.invalid.choice](pick a listed number or label)"

    def __init__(self, prompt: TextType, *, options: Sequence[str], **kwargs: Any) -> None:
        super().__init__(prompt, **kwargs)
        self.options = list(options)

    def process_response(self, value: str) -> str:
        stripped = value.strip()
        if stripped == self.undo_token:
            return cast("str", SKIP)
        if stripped.isdigit() and 1 <= int(stripped) <= len(self.options):
            return self.options[int(stripped) - 1]
        if stripped in self.options:
            return stripped
        raise InvalidResponse(self.illegal_choice_message)


class ConsolePrompter:
    """Prompt primitives rendered with ``rich.prompt``.

    Typing the undo token (``<`` by default) at any prompt skips it.
    """

    def __init__(
        self,
        console: Console | None = None,
        *,
        undo_token: str = DEFAULT_UNDO_TOKEN,
        stream: IO[str] | None = None,
    ) -> None:
        self.terminal = RichTerminal(console)
        self.console = self.terminal.console
        self.undo_token = undo_token
        self._stream = stream

    def confirm(self, question: str, help_message: str) -> bool | Skipped:
        return self._run(_ConfirmPrompt(question, **self._options(help_message)))

    def text(self, question: str, help_message: str) -> str | Skipped:
        return self._run(_TextPrompt(question, **self._options(help_message)))

    def number(
        self, question: str, help_message: str, *, integer: bool = False
    ) -> int | float | Skipped:
        if integer:
            return self._run(_IntegerPrompt(question, **self._options(help_message)))
        return self._run(_FloatPrompt(question, **self._options(help_message)))

    def select(self, question: str, options: Sequence[str], help_message: str) -> str | Skipped:
        for index, option in enumerate(options, start=1):
            self.console.print(f"  {index}) {option}", markup=False, highlight=False)
        prompt = _SelectPrompt(question, options=options, **self._options(help_message))
        answer = self._run(prompt)

        # Collapse the menu into one summary line.
        self.terminal.move_up(len(options) + 1)
        self.terminal.clear_to_end()
        shown = self.undo_token if answer is SKIP else str(answer)
        self.console.print(
            Text.assemble((question, "prompt"), " ", (shown, "bold")), highlight=False
        )
        return answer

    def _options(self, help_message: str) -> dict[str, Any]:
        return {
            "terminal": self.terminal,
            "undo_token": self.undo_token,
            "help_message": help_message,
        }

    def _run(self, prompt: _UndoablePrompt[Any]) -> Any:
        try:
            return prompt(stream=self._stream)
        except (EOFError, OSError) as exc:
            raise PromptIOError(f"prompt input failed: {exc or type(exc).__name__}") from exc


__all__ = ["ConsolePrompter"]
