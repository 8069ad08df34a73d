"""Bridge between Python types and the interactive builder.

``pydantic`` derives the JSON Schema of a target type and validates the
built value back into that type. Targets can also be plain JSON Schema files
(JSON or YAML), in which case the built value is returned as-is.
"""

from __future__ import annotations

import importlib
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Final, TypeVar

import yaml
from pydantic import PydanticUserError, TypeAdapter, ValidationError

from interactive_parse.builder.values import build_value
from interactive_parse.errors import DeserializationError, ResolutionError
from interactive_parse.observability.logging import ensure_structlog
from interactive_parse.prompts.console import ConsolePrompter
from interactive_parse.schema.resolver import SchemaDocument, load_document

if TYPE_CHECKING:
    from interactive_parse.config.schema import BuilderSettings
    from interactive_parse.prompts.base import Prompter
    from interactive_parse.schema.model import JSONValue
    from interactive_parse.terminal.cancellation import CancellationSource
    from interactive_parse.terminal.redraw import TerminalControl

T = TypeVar("T")

SCHEMA_SUFFIXES: Final[frozenset[str]] = frozenset({".json", ".yaml", ".yml"})


@dataclass(frozen=True, slots=True)
class Target:
    """A resolved build target: its schema document and, for Python types, its adapter."""

    label: str
    document: SchemaDocument
    adapter: TypeAdapter[Any] | None = None


def schema_for(target: Any) -> dict[str, Any]:
    """JSON Schema of ``target`` as produced by ``pydantic``."""

    try:
        return TypeAdapter(target).json_schema()
    except PydanticUserError as exc:
        raise ResolutionError(f"cannot derive a schema for {target!r}: {exc}", path="") from exc


def materialize(adapter: TypeAdapter[T], value: JSONValue) -> T:
    """Validate ``value`` into the adapter's type, surfacing the value on mismatch."""

    try:
        return adapter.validate_python(value)
    except ValidationError as exc:
        raise DeserializationError(value, exc) from exc


def import_target(reference: str) -> Any:
    """Import ``package.module:Attribute`` (attribute may be dotted)."""

    module_name, sep, attribute = reference.partition(":")
    if not sep or not module_name or not attribute:
        raise ResolutionError(f"expected 'package.module:TypeName', got {reference!r}", path="")
    try:
        resolved: Any = importlib.import_module(module_name)
    except ImportError as exc:
        raise ResolutionError(f"cannot import module {module_name!r}: {exc}", path="") from exc
    for part in attribute.split("."):
        try:
            resolved = getattr(resolved, part)
        except AttributeError as exc:
            raise ResolutionError(f"{reference!r} has no attribute {part!r}", path="") from exc
    return resolved


def load_schema_file(path: str | Path) -> SchemaDocument:
    """Load a JSON or YAML JSON Schema document from disk."""

    source = Path(path)
    try:
        raw = yaml.safe_load(source.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ResolutionError(f"cannot read schema file {source}: {exc}", path="") from exc
    except yaml.YAMLError as exc:
        raise ResolutionError(
            f"schema file {source} is not valid JSON/YAML: {exc}", path=""
        ) from exc
    if not isinstance(raw, dict):
        raise ResolutionError(f"schema file {source} must contain an object", path="")
    return load_document(raw)


def resolve_target(reference: str) -> Target:
    """Resolve a CLI target: a schema file path or an import path to a Python type."""

    candidate = Path(reference)
    if candidate.suffix.lower() in SCHEMA_SUFFIXES or candidate.is_file():
        return Target(label=reference, document=load_schema_file(candidate))
    python_type = import_target(reference)
    document = load_document(schema_for(python_type))
    return Target(label=reference, document=document, adapter=TypeAdapter(python_type))


def interactive_parse(
    target: type[T] | Any,
    *,
    prompter: Prompter | None = None,
    settings: BuilderSettings | None = None,
    terminal: TerminalControl | None = None,
    cancellation: CancellationSource | None = None,
    logger: Any | None = None,
) -> T:
    """Prompt the user for a value of ``target`` and return it validated.

    Defaults to a :class:`ConsolePrompter` on the current terminal. Raises
    :class:`~interactive_parse.errors.Aborted` if the user undoes past the
    first prompt and :class:`~interactive_parse.errors.DeserializationError`
    if the built value does not validate.
    """

    ensure_structlog()
    document = load_document(schema_for(target))
    adapter: TypeAdapter[T] = TypeAdapter(target)
    if prompter is None:
        console_prompter = ConsolePrompter(
            undo_token=settings.undo_token if settings is not None else "<"
        )
        prompter = console_prompter
        terminal = terminal if terminal is not None else console_prompter.terminal
    value = build_value(
        document,
        prompter,
        settings=settings,
        terminal=terminal,
        cancellation=cancellation,
        logger=logger,
    )
    return materialize(adapter, value)


__all__ = [
    "Target",
    "import_target",
    "interactive_parse",
    "load_schema_file",
    "materialize",
    "resolve_target",
    "schema_for",
]
