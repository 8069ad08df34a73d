"""Recursive dispatcher turning a schema node into a prompted value.

Every call to :meth:`ValueBuilder.build` is one undo frame. The dispatcher
handles leaves itself and hands arrays, objects and compositions to their
helpers, which recurse back through ``build`` for nested nodes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Final

from interactive_parse.builder.collections import CollectionBuilder
from interactive_parse.builder.composition import CompositionResolver, unique_labels
from interactive_parse.builder.controller import RootPolicy, TraversalContext
from interactive_parse.builder.outcome import Committed, Outcome, Rewind
from interactive_parse.schema.model import (
    Array,
    Composition,
    Enumeration,
    Metadata,
    Null,
    Nullable,
    Object,
    Reference,
    Scalar,
    ScalarKind,
    SchemaNode,
)
from interactive_parse.terminal.redraw import DisplayRedraw

if TYPE_CHECKING:
    from interactive_parse.config.schema import BuilderSettings
    from interactive_parse.prompts.base import Prompter
    from interactive_parse.schema.model import JSONValue
    from interactive_parse.schema.resolver import DefinitionTable, SchemaDocument
    from interactive_parse.terminal.cancellation import CancellationSource
    from interactive_parse.terminal.redraw import TerminalControl

DEFAULT_DESCRIPTION_LIMIT: Final[int] = 60
DEFAULT_ROOT_NAME: Final[str] = "value"

_KIND_HELP: Final[dict[ScalarKind, str]] = {
    ScalarKind.STRING: "string",
    ScalarKind.NUMBER: "num",
    ScalarKind.INTEGER: "int",
    ScalarKind.BOOLEAN: "bool",
}


class ValueBuilder:
    """Drive prompts for one schema tree against a traversal context."""

    def __init__(
        self,
        definitions: DefinitionTable,
        prompter: Prompter,
        context: TraversalContext,
        *,
        description_limit: int = DEFAULT_DESCRIPTION_LIMIT,
    ) -> None:
        self.definitions = definitions
        self.prompter = prompter
        self.context = context
        self.description_limit = description_limit
        self._collections = CollectionBuilder(self)
        self._compositions = CompositionResolver(self)

    def build(self, node: SchemaNode, name: str, title: str | None = None) -> Outcome[JSONValue]:
        """Build ``node`` as one undo frame; retried until it commits or rewinds past us."""

        return self.context.frame(lambda: self._dispatch(node, name, title), name=name)

    def confirm(self, question: str, help_message: str, *, name: str) -> Outcome[bool]:
        return self.context.ask(lambda: self.prompter.confirm(question, help_message), name=name)

    def labelled_help(self, name: str, title: str | None, meta: Metadata | None = None) -> str:
        """``<Title> name`` help text, followed by the node description when known."""

        prefix = f"<{title}> " if title else ""
        return f"{prefix}{name}{self.describe(meta)}"

    def describe(self, meta: Metadata | None) -> str:
        if meta is None or not meta.description:
            return ""
        description = meta.description
        if len(description) > self.description_limit:
            description = description[: self.description_limit] + "..."
        return f": {description}"

    def _dispatch(self, node: SchemaNode, name: str, title: str | None) -> Outcome[JSONValue]:
        match node:
            case Scalar():
                return self._scalar(node, name)
            case Nullable(inner=inner):
                gate = self.confirm(
                    "Add optional value?", self.labelled_help(name, title), name=name
                )
                if isinstance(gate, Rewind):
                    return gate
                if not gate.value:
                    return Committed(None)
                return self.build(inner, name, title)
            case Reference():
                resolved, reference_title = self.definitions.resolve(node)
                return self.build(resolved, name, reference_title)
            case Composition():
                return self._compositions.resolve(node, name, title)
            case Array():
                return self._collections.array(node, name, title)
            case Object():
                return self._collections.object(node, name, title)
            case Enumeration(values=values):
                return self._enumeration(values, node.meta, name, title)
            case Null():
                return Committed(None)

    def _scalar(self, node: Scalar, name: str) -> Outcome[JSONValue]:
        kind_help = _KIND_HELP[node.kind]
        if node.format:
            kind_help = f"{kind_help} ({node.format})"
        help_message = f"{kind_help}{self.describe(node.meta)}"
        prompter = self.prompter
        match node.kind:
            case ScalarKind.STRING:
                return self.context.ask(lambda: prompter.text(name, help_message), name=name)
            case ScalarKind.NUMBER:
                return self.context.ask(lambda: prompter.number(name, help_message), name=name)
            case ScalarKind.INTEGER:
                return self.context.ask(
                    lambda: prompter.number(name, help_message, integer=True), name=name
                )
            case ScalarKind.BOOLEAN:
                return self.context.ask(lambda: prompter.confirm(name, help_message), name=name)

    def _enumeration(
        self, values: tuple[JSONValue, ...], meta: Metadata, name: str, title: str | None
    ) -> Outcome[JSONValue]:
        if len(values) == 1:
            return Committed(values[0])
        labels = unique_labels([str(value) for value in values])
        help_message = self.labelled_help(name, title, meta)
        choice = self.context.ask(
            lambda: self.prompter.select("Select one:", labels, help_message), name=name
        )
        if isinstance(choice, Rewind):
            return choice
        return Committed(values[labels.index(choice.value)])


def build_value(
    document: SchemaDocument,
    prompter: Prompter,
    *,
    settings: BuilderSettings | None = None,
    terminal: TerminalControl | None = None,
    cancellation: CancellationSource | None = None,
    logger: Any | None = None,
) -> JSONValue:
    """Run a whole interactive session for ``document`` and return the built value.

    Raises :class:`~interactive_parse.errors.Aborted` when the user undoes past
    the first prompt under the ``abort`` root policy.
    """

    root_policy = settings.root_policy if settings is not None else RootPolicy.ABORT
    redraw_enabled = settings.redraw if settings is not None else True
    limit = settings.description_limit if settings is not None else DEFAULT_DESCRIPTION_LIMIT

    context = TraversalContext(
        redraw=DisplayRedraw(terminal, enabled=redraw_enabled),
        cancellation=cancellation,
        root_policy=root_policy,
        logger=logger,
    )
    builder = ValueBuilder(document.definitions, prompter, context, description_limit=limit)
    outcome = builder.build(document.root, document.title or DEFAULT_ROOT_NAME)
    return context.finish(outcome)


__all__ = ["DEFAULT_DESCRIPTION_LIMIT", "ValueBuilder", "build_value"]
