"""oneOf / allOf / anyOf interpretation.

- ``oneOf`` offers a menu of variant labels and builds the chosen variant.
- ``allOf`` builds every variant against the same field name; a single
  variant yields its value directly, several yield a list.
- ``anyOf`` with a null branch is an optional value: one confirmation, then
  the non-null variant. Without a null branch it is a plain union and is
  resolved like ``oneOf``.
"""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING

from interactive_parse.builder.outcome import STOP, Committed, Outcome, Rewind, Stop
from interactive_parse.errors import ResolutionError
from interactive_parse.schema.model import (
    Composition,
    CompositionKind,
    Enumeration,
    Null,
    Object,
    Reference,
    SchemaNode,
    kind_label,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from interactive_parse.builder.values import ValueBuilder
    from interactive_parse.schema.model import JSONValue

SELECT_QUESTION = "Select one:"
OPTIONAL_QUESTION = "Add optional value?"


class CompositionResolver:
    def __init__(self, builder: ValueBuilder) -> None:
        self._builder = builder

    def resolve(self, node: Composition, name: str, title: str | None) -> Outcome[JSONValue]:
        match node.kind:
            case CompositionKind.ONE_OF:
                return self._one_of(node.variants, node, name, title)
            case CompositionKind.ALL_OF:
                return self._all_of(node.variants, name, title)
            case CompositionKind.ANY_OF:
                return self._any_of(node, name, title)

    def labels(self, variants: Sequence[SchemaNode]) -> list[str]:
        """Menu label per variant, unique within the menu."""

        return unique_labels(
            [self._label(variant, index) for index, variant in enumerate(variants)]
        )

    def _one_of(
        self,
        variants: Sequence[SchemaNode],
        node: Composition,
        name: str,
        title: str | None,
    ) -> Outcome[JSONValue]:
        builder = self._builder
        labels = self.labels(variants)
        help_message = builder.labelled_help(name, title, node.meta)
        choice = builder.context.ask(
            lambda: builder.prompter.select(SELECT_QUESTION, labels, help_message), name=name
        )
        if isinstance(choice, Rewind):
            return choice

        chosen = variants[labels.index(choice.value)]
        if isinstance(chosen, Enumeration) and len(chosen.values) == 1:
            return Committed(chosen.values[0])
        return builder.build(chosen, name, chosen.meta.title or title)

    def _all_of(
        self, variants: Sequence[SchemaNode], name: str, title: str | None
    ) -> Outcome[JSONValue]:
        builder = self._builder

        def step(index: int) -> Outcome[JSONValue] | Stop:
            if index >= len(variants):
                return STOP
            variant = variants[index]
            return builder.build(variant, name, variant.meta.title or title)

        outcome = builder.context.loop(step, name=name)
        if isinstance(outcome, Rewind):
            return outcome
        values = outcome.value
        if len(values) == 1:
            return Committed(values[0])
        return Committed(list(values))

    def _any_of(self, node: Composition, name: str, title: str | None) -> Outcome[JSONValue]:
        builder = self._builder
        present = [variant for variant in node.variants if not isinstance(variant, Null)]
        if len(present) == len(node.variants):
            return self._one_of(node.variants, node, name, title)
        if not present:
            return Committed(None)

        first = present[0]
        variant_title = first.meta.title or title
        gate = builder.confirm(
            OPTIONAL_QUESTION, builder.labelled_help(name, variant_title), name=name
        )
        if isinstance(gate, Rewind):
            return gate
        if not gate.value:
            return Committed(None)
        if len(present) == 1:
            return builder.build(first, name, variant_title)
        return self._one_of(present, node, name, title)

    def _label(self, variant: SchemaNode, index: int) -> str:
        match variant:
            case Object() if variant.properties:
                return variant.property_names[0]
            case Enumeration(values=values):
                return str(values[0])
            case Reference():
                _, reference_title = self._builder.definitions.resolve(variant)
                return reference_title
            case Object(meta=meta) if meta.title:
                return meta.title
            case Object():
                raise ResolutionError(
                    f"composition variant {index} has neither properties, values nor a title"
                )
            case _:
                return variant.meta.title or kind_label(variant)


def unique_labels(raw: Sequence[str]) -> list[str]:
    """Suffix repeated labels with ``#<position>`` so every menu entry is distinct.

    A suffixed label that would clash with another entry is bumped until it
    is free, so ``labels.index(choice)`` always recovers the position.
    """

    counts = Counter(raw)
    taken = {label for label in raw if counts[label] == 1}
    out: list[str] = []
    for index, label in enumerate(raw):
        if counts[label] == 1:
            out.append(label)
            continue
        number = index + 1
        candidate = f"{label} #{number}"
        while candidate in taken:
            number += len(raw)
            candidate = f"{label} #{number}"
        taken.add(candidate)
        out.append(candidate)
    return out


__all__ = ["CompositionResolver", "OPTIONAL_QUESTION", "SELECT_QUESTION", "unique_labels"]
