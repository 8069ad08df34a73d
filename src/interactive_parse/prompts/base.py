"""Prompt primitive contract shared by console and scripted prompters.

A prompt either returns a parsed answer or the :data:`SKIP` sentinel when the
user cancels it. Cancellation is never reported as an exception; genuine
input/output failures raise :class:`~interactive_parse.errors.PromptIOError`.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Final, Literal, Protocol, TypeAlias, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

DEFAULT_UNDO_TOKEN: Final[str] = "<"


class Skip(Enum):
    """Marker returned by a prompt the user skipped."""

    SKIP = "skip"

    def __repr__(self) -> str:
        return "SKIP"


SKIP: Final = Skip.SKIP
Skipped: TypeAlias = Literal[Skip.SKIP]


@runtime_checkable
class Prompter(Protocol):
    """Synchronous prompt primitives used by the value builder."""

    def confirm(self, question: str, help_message: str) -> bool | Skipped: ...

    def text(self, question: str, help_message: str) -> str | Skipped: ...

    def number(
        self, question: str, help_message: str, *, integer: bool = False
    ) -> int | float | Skipped: ...

    def select(
        self, question: str, options: Sequence[str], help_message: str
    ) -> str | Skipped: ...


__all__ = ["DEFAULT_UNDO_TOKEN", "SKIP", "Prompter", "Skip", "Skipped"]
