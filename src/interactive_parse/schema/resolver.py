"""Reference resolution against a definition table.

The table is built once per session and is read-only afterwards. Alias
chains (a definition that is itself a reference) are collapsed at
construction, and reference cycles that a user could never leave are
rejected up front instead of recursing without bound at prompt time.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Final

from interactive_parse.errors import ResolutionError
from interactive_parse.schema.model import (
    Array,
    Composition,
    CompositionKind,
    Enumeration,
    Null,
    Nullable,
    Object,
    Reference,
    Scalar,
    SchemaNode,
    parse_node,
)

_DEFINITION_KEYS: Final[tuple[str, ...]] = ("definitions", "$defs")
_DOCUMENT_ONLY_KEYS: Final[frozenset[str]] = frozenset({"$schema", "$id", *_DEFINITION_KEYS})


class DefinitionTable(Mapping[str, SchemaNode]):
    """Named definitions, every entry resolved to a non-reference node."""

    def __init__(self, definitions: Mapping[str, SchemaNode] | None = None) -> None:
        raw = dict(definitions or {})
        self._nodes: dict[str, SchemaNode] = {name: _follow_aliases(name, raw) for name in raw}
        _reject_forced_cycles(self._nodes)

    def __getitem__(self, name: str) -> SchemaNode:
        return self._nodes[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def resolve(self, reference: Reference) -> tuple[SchemaNode, str]:
        """Return the referenced node and the title to display for it.

        The definition's own title wins; otherwise the reference name is used.
        """

        node = self._nodes.get(reference.name)
        if node is None:
            raise ResolutionError(
                f"unresolved reference {reference.name!r}", path=f"#/$defs/{reference.name}"
            )
        title = node.meta.title or reference.name
        return node, title


@dataclass(frozen=True, slots=True)
class SchemaDocument:
    """A root node plus the definitions its references point into."""

    root: SchemaNode
    definitions: DefinitionTable
    title: str | None = None


def load_document(raw: Mapping[str, object]) -> SchemaDocument:
    """Normalize a whole JSON Schema document (root plus definitions)."""

    parsed: dict[str, SchemaNode] = {}
    for key in _DEFINITION_KEYS:
        section = raw.get(key)
        if section is None:
            continue
        if not isinstance(section, Mapping):
            raise ResolutionError(f"{key} must be an object", path=f"#/{key}")
        for name, schema in section.items():
            parsed[str(name)] = parse_node(schema, path=f"#/{key}/{name}")

    root_raw = {key: value for key, value in raw.items() if key not in _DOCUMENT_ONLY_KEYS}
    root = parse_node(root_raw)
    table = DefinitionTable(parsed)
    title = raw.get("title")
    return SchemaDocument(
        root=root, definitions=table, title=title if isinstance(title, str) else None
    )


def forced_references(node: SchemaNode) -> set[str]:
    """Names reachable from ``node`` without passing a user choice point."""

    match node:
        case Reference(name=name):
            return {name}
        case Object(properties=properties):
            found: set[str] = set()
            for _, child in properties:
                found |= forced_references(child)
            return found
        case Array(items=items, min_items=low):
            minimum = low or 0
            if isinstance(items, tuple):
                found = set()
                for child in items[:minimum]:
                    found |= forced_references(child)
                return found
            return forced_references(items) if minimum > 0 else set()
        case Composition(kind=CompositionKind.ALL_OF, variants=variants):
            found = set()
            for child in variants:
                found |= forced_references(child)
            return found
        case Composition(variants=variants):
            non_null = [child for child in variants if not isinstance(child, Null)]
            if len(non_null) == 1 and len(non_null) == len(variants):
                return forced_references(non_null[0])
            return set()
        case Nullable() | Scalar() | Enumeration() | Null():
            return set()


def _follow_aliases(name: str, raw: Mapping[str, SchemaNode]) -> SchemaNode:
    chain = [name]
    node = raw[name]
    while isinstance(node, Reference):
        if node.name in chain:
            cycle = " -> ".join([*chain, node.name])
            raise ResolutionError(f"reference alias cycle: {cycle}", path=f"#/$defs/{name}")
        if node.name not in raw:
            raise ResolutionError(
                f"unresolved reference {node.name!r}", path=f"#/$defs/{chain[-1]}"
            )
        chain.append(node.name)
        node = raw[node.name]
    return node


def _reject_forced_cycles(nodes: Mapping[str, SchemaNode]) -> None:
    edges = {name: sorted(forced_references(node)) for name, node in nodes.items()}
    done: set[str] = set()

    def visit(name: str, stack: list[str]) -> None:
        if name in done:
            return
        if name in stack:
            cycle = " -> ".join([*stack[stack.index(name) :], name])
            raise ResolutionError(
                f"reference cycle without a choice point: {cycle}", path=f"#/$defs/{name}"
            )
        stack.append(name)
        for target in edges.get(name, ()):
            visit(target, stack)
        stack.pop()
        done.add(name)

    for name in edges:
        visit(name, [])


__all__ = ["DefinitionTable", "SchemaDocument", "forced_references", "load_document"]
