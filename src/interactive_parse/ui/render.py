"""Output rendering for the interactive-parse CLI.

Purpose
- Thin rendering layer over a ``rich`` console for command output.
- Respect the ``NO_COLOR`` environment variable and the ``--no-color`` flag.

Command output goes to stdout; prompts and diagnostics use a separate stderr
console so a built value can be piped.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from rich import box
from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from collections.abc import Sequence


def _color_allowed(no_color_flag: bool) -> bool:
    if no_color_flag:
        return False
    return not os.environ.get("NO_COLOR", "")


class CLIRenderer:
    """CLI output renderer with a matching stderr console for prompts."""

    def __init__(self, *, no_color: bool = False, verbose: bool = False) -> None:
        self.verbose = verbose
        color = _color_allowed(no_color)
        self.console = Console(highlight=False, no_color=not color, soft_wrap=True)
        self.prompt_console = Console(
            stderr=True, highlight=False, no_color=not color, soft_wrap=True
        )

    def heading(self, text: str) -> None:
        self.console.print(text, style="bold", markup=False)

    def kv(self, key: str, value: object) -> None:
        self.console.print(f"{key}: {value}", markup=False)

    def text(self, line: str) -> None:
        self.console.print(line, markup=False)

    def section(self, title: str) -> None:
        """Print a section header with a preceding blank line."""

        self.console.print()
        self.console.print(title, style="bold", markup=False)

    def warning(self, text: str) -> None:
        self.prompt_console.print(f"Warning: {text}", style="yellow", markup=False)

    def detail(self, text: str) -> None:
        """Print only in verbose mode."""

        if self.verbose:
            self.console.print(text, style="dim", markup=False)

    def items(self, entries: Sequence[str], *, prefix: str = "- ") -> None:
        for entry in entries:
            self.console.print(f"  {prefix}{entry}", markup=False)

    def table(
        self,
        headers: Sequence[str],
        rows: Sequence[Sequence[str]],
        *,
        title: str | None = None,
    ) -> None:
        """Print a simple table; nothing is printed for an empty row set."""

        if not rows:
            return
        if title:
            self.section(title)
        table = Table(box=box.SIMPLE, show_edge=False, pad_edge=False)
        for header in headers:
            table.add_column(header)
        for row in rows:
            table.add_row(*(str(cell) for cell in row))
        self.console.print(table)


def create_renderer(*, no_color: bool = False, verbose: bool = False) -> CLIRenderer:
    return CLIRenderer(no_color=no_color, verbose=verbose)


__all__ = ["CLIRenderer", "create_renderer"]
