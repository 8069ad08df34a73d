"""Terminal control, redraw, and advisory cancellation."""

from interactive_parse.terminal.cancellation import CancellationSource
from interactive_parse.terminal.redraw import (
    BufferTerminal,
    DisplayRedraw,
    NullTerminal,
    RichTerminal,
    TerminalControl,
)

__all__ = [
    "BufferTerminal",
    "CancellationSource",
    "DisplayRedraw",
    "NullTerminal",
    "RichTerminal",
    "TerminalControl",
]
