"""
interactive-parse: build typed values by answering schema-driven prompts.

Purpose
- Walk the JSON Schema of a type (or a schema file) and prompt for each part.
- Let the user undo any answered prompt and resume from there.
- Validate the finished value back into the requested type.

Importing the package configures nothing; logging is set up by the CLI or
lazily on the first build.
"""

from interactive_parse.deserialize import interactive_parse
from interactive_parse.errors import (
    Aborted,
    DeserializationError,
    InteractiveParseError,
    PromptIOError,
    ResolutionError,
)

__version__ = "0.1.0"

__all__ = [
    "Aborted",
    "DeserializationError",
    "InteractiveParseError",
    "PromptIOError",
    "ResolutionError",
    "__version__",
    "interactive_parse",
]
