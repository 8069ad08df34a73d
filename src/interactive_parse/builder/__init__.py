"""Interactive value building with checkpoint/undo."""

from interactive_parse.builder.controller import CANCEL_MARKER, RootPolicy, TraversalContext
from interactive_parse.builder.outcome import STOP, Committed, Outcome, Rewind, Stop
from interactive_parse.builder.values import ValueBuilder, build_value

__all__ = [
    "CANCEL_MARKER",
    "STOP",
    "Committed",
    "Outcome",
    "Rewind",
    "RootPolicy",
    "Stop",
    "TraversalContext",
    "ValueBuilder",
    "build_value",
]
