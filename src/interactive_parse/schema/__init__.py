"""Schema model and reference resolution."""

from interactive_parse.schema.model import (
    Array,
    Composition,
    CompositionKind,
    Enumeration,
    JSONValue,
    Metadata,
    Null,
    Nullable,
    Object,
    Reference,
    Scalar,
    ScalarKind,
    SchemaNode,
    kind_label,
    parse_node,
)
from interactive_parse.schema.resolver import DefinitionTable, SchemaDocument, load_document

__all__ = [
    "Array",
    "Composition",
    "CompositionKind",
    "DefinitionTable",
    "Enumeration",
    "JSONValue",
    "Metadata",
    "Null",
    "Nullable",
    "Object",
    "Reference",
    "Scalar",
    "ScalarKind",
    "SchemaDocument",
    "SchemaNode",
    "kind_label",
    "load_document",
    "parse_node",
]
