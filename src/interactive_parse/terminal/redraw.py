"""Terminal line erasure used when an undo discards committed prompts.

Every committed or skipped prompt leaves exactly one line on screen, so
restoring a checkpoint is a matter of moving the cursor up by a known line
count and clearing everything below it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Final, Protocol, runtime_checkable

from rich.console import Console
from rich.control import Control

if TYPE_CHECKING:
    from collections.abc import Sequence

_CLEAR_TO_END: Final[str] = "\x1b[0J"


@runtime_checkable
class TerminalControl(Protocol):
    """Minimal cursor/erase surface the redraw logic needs."""

    def move_up(self, lines: int) -> None: ...

    def clear_to_end(self) -> None: ...

    def write_line(self, text: str) -> None: ...


class RichTerminal:
    """Terminal control backed by a ``rich`` console."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console if console is not None else Console(highlight=False)

    def move_up(self, lines: int) -> None:
        if lines <= 0:
            return
        self.console.control(Control.move_to_column(0, -lines))

    def clear_to_end(self) -> None:
        if self.console.is_dumb_terminal:
            return
        # rich exposes no erase-in-display control code.
        self.console.file.write(_CLEAR_TO_END)
        self.console.file.flush()

    def write_line(self, text: str) -> None:
        self.console.print(text, markup=False, highlight=False, soft_wrap=True)


class BufferTerminal:
    """In-memory screen model: a list of lines and a cursor row."""

    def __init__(self) -> None:
        self._lines: list[str] = []
        self._cursor = 0
        self.erase_calls: list[int] = []

    @property
    def lines(self) -> Sequence[str]:
        return tuple(self._lines)

    def move_up(self, lines: int) -> None:
        self._cursor = max(0, self._cursor - max(lines, 0))
        self.erase_calls.append(lines)

    def clear_to_end(self) -> None:
        del self._lines[self._cursor :]

    def write_line(self, text: str) -> None:
        del self._lines[self._cursor :]
        self._lines.append(text)
        self._cursor = len(self._lines)


class NullTerminal:
    """Terminal that discards everything."""

    def move_up(self, lines: int) -> None:
        return None

    def clear_to_end(self) -> None:
        return None

    def write_line(self, text: str) -> None:
        return None


class DisplayRedraw:
    """Erase a counted block of prompt lines from the bottom of the screen."""

    def __init__(self, terminal: TerminalControl | None = None, *, enabled: bool = True) -> None:
        self.terminal: TerminalControl = terminal if terminal is not None else NullTerminal()
        self.enabled = enabled

    def erase(self, lines: int) -> None:
        if not self.enabled or lines <= 0:
            return
        self.terminal.move_up(lines)
        self.terminal.clear_to_end()

    def note(self, text: str) -> None:
        """Write one line standing in for a prompt that never rendered."""

        self.terminal.write_line(text)


__all__ = [
    "BufferTerminal",
    "DisplayRedraw",
    "NullTerminal",
    "RichTerminal",
    "TerminalControl",
]
