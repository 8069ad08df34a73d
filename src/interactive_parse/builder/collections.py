"""Array and object builders.

Both build their members through :meth:`TraversalContext.loop`, so an undo
inside a member only discards that member and the ones after it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from interactive_parse.builder.outcome import STOP, Committed, Outcome, Rewind, Stop
from interactive_parse.prompts.base import SKIP

if TYPE_CHECKING:
    from interactive_parse.builder.values import ValueBuilder
    from interactive_parse.prompts.base import Skipped
    from interactive_parse.schema.model import Array, JSONValue, Object, SchemaNode

ELEMENT_QUESTION = "Add element?"
ENTRY_QUESTION = "Add entry?"


class CollectionBuilder:
    def __init__(self, builder: ValueBuilder) -> None:
        self._builder = builder

    def array(self, node: Array, name: str, title: str | None) -> Outcome[JSONValue]:
        """Build between ``min_items`` and ``max_items`` elements.

        Elements below the minimum are built unconditionally; every further
        element is gated by an "Add element?" confirmation. Positional arrays
        never grow past their schema list.
        """

        builder = self._builder
        low = node.min_items or 0
        high = node.max_items
        if isinstance(node.items, tuple):
            schemas: tuple[SchemaNode, ...] | None = node.items
            high = len(node.items) if high is None else min(high, len(node.items))
        else:
            schemas = None
        help_message = builder.labelled_help(name, title, node.meta)

        def step(index: int) -> Outcome[JSONValue] | Stop:
            if high is not None and index >= high:
                return STOP
            if index >= low:
                gate = builder.confirm(ELEMENT_QUESTION, help_message, name=name)
                if isinstance(gate, Rewind):
                    return gate
                if not gate.value:
                    return STOP
            if schemas is not None:
                return builder.build(schemas[index], f"{name}.{index}", title)
            return builder.build(node.items, f"{name}[{index}]", title)

        outcome = builder.context.loop(step, name=name)
        if isinstance(outcome, Rewind):
            return outcome
        return Committed(list(outcome.value))

    def object(self, node: Object, name: str, title: str | None) -> Outcome[JSONValue]:
        """Build declared properties in order, then any open-map entries."""

        builder = self._builder
        properties = node.properties
        additional = node.additional
        help_message = builder.labelled_help(name, title, node.meta)
        # keys[i] is the key of loop element i; rewinds truncate the loop.
        keys: list[str] = []

        def step(index: int) -> Outcome[tuple[str, JSONValue]] | Stop:
            del keys[index:]
            if index < len(properties):
                key, schema = properties[index]
                keys.append(key)
                return _keyed(key, builder.build(schema, key, title))
            if additional is None:
                return STOP

            gate = builder.confirm(ENTRY_QUESTION, help_message, name=name)
            if isinstance(gate, Rewind):
                return gate
            if not gate.value:
                return STOP
            key_outcome = builder.context.ask(
                lambda: self._new_key(f"{name} key", frozenset(keys)), name=name
            )
            if isinstance(key_outcome, Rewind):
                return key_outcome
            key = key_outcome.value
            keys.append(key)
            return _keyed(key, builder.build(additional, key, title))

        outcome = builder.context.loop(step, name=name)
        if isinstance(outcome, Rewind):
            return outcome
        return Committed(dict(outcome.value))

    def _new_key(self, question: str, taken: frozenset[str]) -> str | Skipped:
        """Ask for a map key until it differs from every key already built.

        A rejected answer is erased so the prompt still leaves one line.
        """

        builder = self._builder
        help_message = "string"
        while True:
            answer = builder.prompter.text(question, help_message)
            if answer is SKIP or answer not in taken:
                return answer
            builder.context.redraw.erase(1)
            help_message = f"string: duplicate key {answer!r}, enter another"


def _keyed(key: str, outcome: Outcome[JSONValue]) -> Outcome[tuple[str, JSONValue]]:
    if isinstance(outcome, Rewind):
        return outcome
    return Committed((key, outcome.value))


__all__ = ["CollectionBuilder", "ELEMENT_QUESTION", "ENTRY_QUESTION"]
