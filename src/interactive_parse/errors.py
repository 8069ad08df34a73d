"""Error kinds surfaced by the interactive value builder.

``Rewind`` is not an error: it is a control value returned by the
traversal layer (see ``interactive_parse.builder.outcome``) and only ever
leaves it as :class:`Aborted`.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from interactive_parse.schema.model import JSONValue


class InteractiveParseError(Exception):
    """Base class for every error raised by ``interactive_parse``."""


class ResolutionError(InteractiveParseError):
    """Raised for unresolved references and malformed schema shapes."""

    def __init__(self, message: str, *, path: str = "#") -> None:
        super().__init__(f"{path}: {message}" if path else message)
        self.path = path
        self.detail = message


class PromptIOError(InteractiveParseError):
    """Raised when the underlying prompt input/output fails."""


class Aborted(InteractiveParseError):
    """Raised when an undo request unwinds past the root frame."""

    def __init__(self, depth: int = 0) -> None:
        super().__init__("build aborted by user")
        self.depth = depth


class DeserializationError(InteractiveParseError):
    """The built value does not match the target type.

    Carries both the generated value and the underlying mismatch so the
    caller can show the user what was produced.
    """

    def __init__(self, value: JSONValue, detail: BaseException | str) -> None:
        self.value = value
        self.detail = detail
        rendered = json.dumps(value, indent=2, ensure_ascii=False, default=str)
        super().__init__(f"interactive-parse generated this json object: {rendered}\n{detail}")


__all__ = [
    "Aborted",
    "DeserializationError",
    "InteractiveParseError",
    "PromptIOError",
    "ResolutionError",
]
