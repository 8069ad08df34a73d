"""Normalized schema nodes and the JSON Schema normalizer.

Raw JSON Schema documents (draft-07 as produced by schema reflection
libraries, or 2020-12 as produced by ``pydantic``) are turned into a closed
set of frozen node types so the builder can dispatch with ``match``.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Final, TypeAlias

from interactive_parse.errors import ResolutionError

JSONScalar = str | int | float | bool | None
JSONValue = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]

REFERENCE_PREFIXES: Final[tuple[str, ...]] = ("#/definitions/", "#/$defs/")
_COMPOSITION_KEYS: Final[tuple[str, ...]] = ("oneOf", "allOf", "anyOf")
_SCALAR_KINDS: Final[frozenset[str]] = frozenset(("string", "number", "integer", "boolean"))


class ScalarKind(StrEnum):
    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"


class CompositionKind(StrEnum):
    ONE_OF = "oneOf"
    ALL_OF = "allOf"
    ANY_OF = "anyOf"


@dataclass(frozen=True, slots=True)
class Metadata:
    """Optional human-facing annotations carried by any node."""

    title: str | None = None
    description: str | None = None


_NO_METADATA: Final[Metadata] = Metadata()


@dataclass(frozen=True, slots=True)
class Scalar:
    kind: ScalarKind
    meta: Metadata = _NO_METADATA
    format: str | None = None


@dataclass(frozen=True, slots=True)
class Array:
    """Array node; ``items`` is a tuple when elements are positional."""

    items: SchemaNode | tuple[SchemaNode, ...]
    min_items: int | None = None
    max_items: int | None = None
    meta: Metadata = _NO_METADATA


@dataclass(frozen=True, slots=True)
class Object:
    properties: tuple[tuple[str, SchemaNode], ...] = ()
    additional: SchemaNode | None = None
    meta: Metadata = _NO_METADATA

    @property
    def property_names(self) -> tuple[str, ...]:
        return tuple(name for name, _ in self.properties)


@dataclass(frozen=True, slots=True)
class Reference:
    name: str
    meta: Metadata = _NO_METADATA


@dataclass(frozen=True, slots=True)
class Composition:
    kind: CompositionKind
    variants: tuple[SchemaNode, ...]
    meta: Metadata = _NO_METADATA


@dataclass(frozen=True, slots=True)
class Nullable:
    """A single definite kind that may also be null."""

    inner: SchemaNode
    meta: Metadata = _NO_METADATA


@dataclass(frozen=True, slots=True)
class Enumeration:
    values: tuple[JSONValue, ...]
    meta: Metadata = _NO_METADATA


@dataclass(frozen=True, slots=True)
class Null:
    meta: Metadata = _NO_METADATA


SchemaNode: TypeAlias = (
    Scalar | Array | Object | Reference | Composition | Nullable | Enumeration | Null
)


def parse_node(raw: object, *, path: str = "#") -> SchemaNode:
    """Normalize one raw JSON Schema fragment into a :data:`SchemaNode`."""

    if isinstance(raw, bool):
        raise ResolutionError("boolean schemas cannot be parsed interactively", path=path)
    if not isinstance(raw, Mapping):
        raise ResolutionError(f"expected a schema object, got {type(raw).__name__}", path=path)

    meta = _metadata(raw)

    reference = raw.get("$ref")
    if reference is not None:
        if not isinstance(reference, str):
            raise ResolutionError("$ref must be a string", path=path)
        return Reference(name=reference_name(reference), meta=meta)

    if "const" in raw:
        return Enumeration(values=(_literal(raw["const"]),), meta=meta)
    if "enum" in raw:
        values = raw["enum"]
        if not isinstance(values, Sequence) or isinstance(values, str) or not values:
            raise ResolutionError("enum must be a non-empty array", path=path)
        return Enumeration(values=tuple(_literal(value) for value in values), meta=meta)

    declared = raw.get("type")
    if isinstance(declared, list):
        non_null = [kind for kind in declared if kind != "null"]
        if not non_null:
            return Null(meta=meta)
        if len(non_null) > 1:
            raise ResolutionError(f"unsupported multi-kind type {declared!r}", path=path)
        inner = _concrete(raw, non_null[0], meta, path)
        if len(non_null) == len(declared):
            return inner
        return Nullable(inner=inner, meta=meta)

    if declared == "null":
        # A null kind that carries subschemas is an optional composition.
        if _composition_key(raw) is not None:
            return _composition(raw, meta, path)
        return Null(meta=meta)

    if isinstance(declared, str):
        return _concrete(raw, declared, meta, path)
    if declared is not None:
        raise ResolutionError(f"type must be a string or array, got {declared!r}", path=path)

    if _composition_key(raw) is not None:
        return _composition(raw, meta, path)
    if "properties" in raw or "additionalProperties" in raw:
        return _concrete(raw, "object", meta, path)
    if "items" in raw or "prefixItems" in raw:
        return _concrete(raw, "array", meta, path)

    raise ResolutionError("schema node has no type, reference, or composition", path=path)


def reference_name(reference: str) -> str:
    """Strip a local definitions prefix from ``reference``."""

    for prefix in REFERENCE_PREFIXES:
        if reference.startswith(prefix):
            return reference[len(prefix) :]
    if reference.startswith("#"):
        raise ResolutionError(f"unsupported reference {reference!r}", path=reference)
    return reference


def kind_label(node: SchemaNode) -> str:
    """Short human label of a node's variant, used by ``inspect``."""

    match node:
        case Scalar(kind=kind):
            return str(kind)
        case Array(items=items, min_items=low, max_items=high):
            shape = "tuple" if isinstance(items, tuple) else "array"
            return f"{shape}[{low if low is not None else 0}..{high if high is not None else '*'}]"
        case Object(additional=additional):
            return "object" if additional is None else "map"
        case Reference(name=name):
            return f"ref {name}"
        case Composition(kind=kind, variants=variants):
            return f"{kind}({len(variants)})"
        case Nullable(inner=inner):
            return f"{kind_label(inner)}?"
        case Enumeration(values=values):
            return "const" if len(values) == 1 else f"enum({len(values)})"
        case Null():
            return "null"


def _metadata(raw: Mapping[str, object]) -> Metadata:
    title = raw.get("title")
    description = raw.get("description")
    if not isinstance(title, str) and not isinstance(description, str):
        return _NO_METADATA
    return Metadata(
        title=title if isinstance(title, str) else None,
        description=description if isinstance(description, str) else None,
    )


def _composition_key(raw: Mapping[str, object]) -> str | None:
    for key in _COMPOSITION_KEYS:
        if key in raw:
            return key
    return None


def _composition(raw: Mapping[str, object], meta: Metadata, path: str) -> Composition:
    key = _composition_key(raw)
    if key is None:
        raise ResolutionError("expected oneOf, allOf, or anyOf", path=path)
    variants = raw[key]
    if not isinstance(variants, Sequence) or isinstance(variants, str) or not variants:
        raise ResolutionError(f"{key} must be a non-empty array", path=path)
    return Composition(
        kind=CompositionKind(key),
        variants=tuple(
            parse_node(variant, path=f"{path}/{key}/{index}")
            for index, variant in enumerate(variants)
        ),
        meta=meta,
    )


def _concrete(raw: Mapping[str, object], kind: str, meta: Metadata, path: str) -> SchemaNode:
    if kind in _SCALAR_KINDS:
        fmt = raw.get("format")
        return Scalar(
            kind=ScalarKind(kind), meta=meta, format=fmt if isinstance(fmt, str) else None
        )
    if kind == "array":
        return _array(raw, meta, path)
    if kind == "object":
        return _object(raw, meta, path)
    raise ResolutionError(f"unknown instance type {kind!r}", path=path)


def _array(raw: Mapping[str, object], meta: Metadata, path: str) -> Array:
    positional = raw.get("prefixItems")
    items = raw.get("items")
    low = _cardinality(raw, "minItems", path)
    high = _cardinality(raw, "maxItems", path)

    if isinstance(positional, Sequence) and not isinstance(positional, str):
        schemas = tuple(
            parse_node(item, path=f"{path}/prefixItems/{index}")
            for index, item in enumerate(positional)
        )
        return Array(items=schemas, min_items=low, max_items=high, meta=meta)
    if isinstance(items, Sequence) and not isinstance(items, str):
        schemas = tuple(
            parse_node(item, path=f"{path}/items/{index}") for index, item in enumerate(items)
        )
        return Array(items=schemas, min_items=low, max_items=high, meta=meta)
    if items is None:
        raise ResolutionError("array schema has no items", path=path)
    element = parse_node(items, path=f"{path}/items")
    return Array(items=element, min_items=low, max_items=high, meta=meta)


def _object(raw: Mapping[str, object], meta: Metadata, path: str) -> Object:
    raw_properties = raw.get("properties", {})
    if not isinstance(raw_properties, Mapping):
        raise ResolutionError("properties must be an object", path=path)
    properties = tuple(
        (str(name), parse_node(schema, path=f"{path}/properties/{name}"))
        for name, schema in raw_properties.items()
    )

    additional: SchemaNode | None = None
    raw_additional = raw.get("additionalProperties")
    if isinstance(raw_additional, Mapping) and raw_additional:
        additional = parse_node(raw_additional, path=f"{path}/additionalProperties")

    return Object(properties=properties, additional=additional, meta=meta)


def _cardinality(raw: Mapping[str, object], key: str, path: str) -> int | None:
    value = raw.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ResolutionError(f"{key} must be a non-negative integer", path=path)
    return value


def _literal(value: object) -> JSONValue:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Sequence):
        return [_literal(item) for item in value]
    if isinstance(value, Mapping):
        return {str(key): _literal(item) for key, item in value.items()}
    raise ResolutionError(f"unsupported literal {value!r}")


__all__ = [
    "Array",
    "Composition",
    "CompositionKind",
    "Enumeration",
    "JSONScalar",
    "JSONValue",
    "Metadata",
    "Null",
    "Nullable",
    "Object",
    "REFERENCE_PREFIXES",
    "Reference",
    "Scalar",
    "ScalarKind",
    "SchemaNode",
    "kind_label",
    "parse_node",
    "reference_name",
]
