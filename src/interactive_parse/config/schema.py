"""
interactive-parse: configuration schema and validation.

Purpose
- Define the built-in defaults and strict validation rules for runtime config.
- Materialize the typed settings view the value builder consumes.

Sections
- ``builder``: root undo policy.
- ``prompts``: undo token and help description limit.
- ``terminal``: redraw and color switches.
- ``observability``: log level and the JSON-lines log sink.
"""

from __future__ import annotations

import copy
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final, Literal, TypedDict

from interactive_parse.builder.controller import RootPolicy

LOG_LEVELS: Final[tuple[str, ...]] = ("DEBUG", "INFO", "WARNING", "ERROR")

# Config paths normalized relative to the config file location.
PATH_FIELDS: Final[tuple[tuple[str, str], ...]] = (("observability", "log_dir"),)


class BuilderConfig(TypedDict):
    root_skip: Literal["abort", "retry"]


class PromptsConfig(TypedDict):
    undo_token: str
    description_limit: int


class TerminalConfig(TypedDict):
    redraw: bool
    color: bool


class ObservabilityConfig(TypedDict):
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"]
    log_dir: str
    log_to_file: bool


class InteractiveParseConfig(TypedDict):
    builder: BuilderConfig
    prompts: PromptsConfig
    terminal: TerminalConfig
    observability: ObservabilityConfig


DEFAULT_CONFIG: Final[InteractiveParseConfig] = {
    "builder": {"root_skip": "abort"},
    "prompts": {"undo_token": "<", "description_limit": 60},
    "terminal": {"redraw": True, "color": True},
    "observability": {
        "log_level": "INFO",
        "log_dir": ".interactive_parse/logs",
        "log_to_file": False,
    },
}


@dataclass(frozen=True, slots=True)
class ConfigValidationIssue:
    """Single structured validation failure."""

    path: str
    message: str


@dataclass(frozen=True, slots=True)
class ConfigValidationResult:
    config: dict[str, Any] | None
    issues: tuple[ConfigValidationIssue, ...]

    @property
    def is_valid(self) -> bool:
        return self.config is not None and not self.issues


class ConfigValidationError(ValueError):
    """Raised when strict config validation fails."""

    def __init__(self, issues: Sequence[ConfigValidationIssue]) -> None:
        self.issues = tuple(issues)
        if not self.issues:
            rendered = "unknown validation failure"
        else:
            rendered = "\n".join(f"- {item.path}: {item.message}" for item in self.issues)
        super().__init__(f"invalid config:\n{rendered}")


@dataclass(frozen=True, slots=True)
class BuilderSettings:
    """Typed view of the config consumed by a build session."""

    root_policy: RootPolicy = RootPolicy.ABORT
    undo_token: str = "<"
    description_limit: int = 60
    redraw: bool = True

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> BuilderSettings:
        validated = assert_valid_config(config)
        return cls(
            root_policy=RootPolicy(validated["builder"]["root_skip"]),
            undo_token=validated["prompts"]["undo_token"],
            description_limit=validated["prompts"]["description_limit"],
            redraw=validated["terminal"]["redraw"],
        )


class _IssueCollector:
    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: list[ConfigValidationIssue] = []

    def add(self, path: str, message: str) -> None:
        self._items.append(ConfigValidationIssue(path=path, message=message))

    def items(self) -> tuple[ConfigValidationIssue, ...]:
        return tuple(self._items)

    @property
    def has_issues(self) -> bool:
        return bool(self._items)


def default_config() -> InteractiveParseConfig:
    """Return a deep copy of the built-in defaults."""

    return copy.deepcopy(DEFAULT_CONFIG)


def merge_config(base: Mapping[str, object], overlay: Mapping[str, object]) -> dict[str, Any]:
    """Deep-merge ``overlay`` onto a copy of ``base``."""

    merged = copy.deepcopy(dict(base))
    _merge_into(merged, overlay)
    return merged


def validate_config(config: Mapping[str, object] | object) -> ConfigValidationResult:
    """Validate a full config payload and collect every issue with its dotted path."""

    issues = _IssueCollector()
    root = _as_object(config, "<root>", issues)
    if root is None:
        return ConfigValidationResult(config=None, issues=issues.items())

    sections: dict[str, Callable[[dict[str, object], str, _IssueCollector], dict[str, Any]]] = {
        "builder": _validate_builder,
        "prompts": _validate_prompts,
        "terminal": _validate_terminal,
        "observability": _validate_observability,
    }
    _reject_unknown_keys(root, set(sections), "", issues)
    _require_keys(root, set(sections), "", issues)

    normalized: dict[str, Any] = {}
    for key in sorted(sections):
        raw = root.get(key)
        if raw is None:
            continue
        section = _as_object(raw, key, issues)
        if section is None:
            continue
        normalized[key] = sections[key](section, key, issues)

    if issues.has_issues:
        return ConfigValidationResult(config=None, issues=issues.items())
    return ConfigValidationResult(config=normalized, issues=())


def assert_valid_config(config: Mapping[str, object] | object) -> dict[str, Any]:
    """Validate config and raise ``ConfigValidationError`` on failure."""

    result = validate_config(config)
    if result.config is None:
        raise ConfigValidationError(result.issues)
    return result.config


def _validate_builder(
    payload: dict[str, object], path: str, issues: _IssueCollector
) -> dict[str, Any]:
    allowed = {"root_skip"}
    _reject_unknown_keys(payload, allowed, path, issues)
    _require_keys(payload, allowed, path, issues)

    out: dict[str, Any] = {}
    if "root_skip" in payload:
        parsed = _as_enum(
            payload["root_skip"],
            _join(path, "root_skip"),
            issues,
            allowed_values=tuple(policy.value for policy in RootPolicy),
        )
        if parsed is not None:
            out["root_skip"] = parsed
    return out


def _validate_prompts(
    payload: dict[str, object], path: str, issues: _IssueCollector
) -> dict[str, Any]:
    allowed = {"undo_token", "description_limit"}
    _reject_unknown_keys(payload, allowed, path, issues)
    _require_keys(payload, allowed, path, issues)

    out: dict[str, Any] = {}
    if "undo_token" in payload:
        token = _as_str(payload["undo_token"], _join(path, "undo_token"), issues)
        if token is not None:
            if any(char.isspace() for char in token):
                issues.add(_join(path, "undo_token"), "must not contain whitespace")
            else:
                out["undo_token"] = token
    if "description_limit" in payload:
        limit = _as_int(
            payload["description_limit"], _join(path, "description_limit"), issues, minimum=1
        )
        if limit is not None:
            out["description_limit"] = limit
    return out


def _validate_terminal(
    payload: dict[str, object], path: str, issues: _IssueCollector
) -> dict[str, Any]:
    allowed = {"redraw", "color"}
    _reject_unknown_keys(payload, allowed, path, issues)
    _require_keys(payload, allowed, path, issues)

    out: dict[str, Any] = {}
    for key in sorted(allowed):
        if key in payload:
            parsed = _as_bool(payload[key], _join(path, key), issues)
            if parsed is not None:
                out[key] = parsed
    return out


def _validate_observability(
    payload: dict[str, object], path: str, issues: _IssueCollector
) -> dict[str, Any]:
    allowed = {"log_level", "log_dir", "log_to_file"}
    _reject_unknown_keys(payload, allowed, path, issues)
    _require_keys(payload, allowed, path, issues)

    out: dict[str, Any] = {}
    if "log_level" in payload:
        level = _as_enum(
            payload["log_level"], _join(path, "log_level"), issues, allowed_values=LOG_LEVELS
        )
        if level is not None:
            out["log_level"] = level
    if "log_dir" in payload:
        log_dir = _as_str(payload["log_dir"], _join(path, "log_dir"), issues)
        if log_dir is not None:
            if "\x00" in log_dir:
                issues.add(_join(path, "log_dir"), "must not contain NUL bytes")
            else:
                out["log_dir"] = log_dir
    if "log_to_file" in payload:
        enabled = _as_bool(payload["log_to_file"], _join(path, "log_to_file"), issues)
        if enabled is not None:
            out["log_to_file"] = enabled
    return out


def _as_object(value: object, path: str, issues: _IssueCollector) -> dict[str, object] | None:
    if not isinstance(value, Mapping):
        issues.add(path, f"expected object, got {type(value).__name__}")
        return None
    out: dict[str, object] = {}
    for key, item in value.items():
        if not isinstance(key, str):
            issues.add(path, f"object key must be string, got {type(key).__name__}")
            continue
        out[key] = item
    return out


def _as_str(value: object, path: str, issues: _IssueCollector) -> str | None:
    if not isinstance(value, str):
        issues.add(path, f"expected string, got {type(value).__name__}")
        return None
    parsed = value.strip()
    if not parsed:
        issues.add(path, "must not be empty")
        return None
    return parsed


def _as_bool(value: object, path: str, issues: _IssueCollector) -> bool | None:
    if isinstance(value, bool):
        return value
    issues.add(path, f"expected boolean, got {type(value).__name__}")
    return None


def _as_int(
    value: object,
    path: str,
    issues: _IssueCollector,
    *,
    minimum: int | None = None,
) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        issues.add(path, f"expected integer, got {type(value).__name__}")
        return None
    if minimum is not None and value < minimum:
        issues.add(path, f"must be >= {minimum}")
        return None
    return value


def _as_enum(
    value: object,
    path: str,
    issues: _IssueCollector,
    *,
    allowed_values: tuple[str, ...],
) -> str | None:
    parsed = _as_str(value, path, issues)
    if parsed is None:
        return None
    if parsed not in allowed_values:
        expected = ", ".join(sorted(allowed_values))
        issues.add(path, f"invalid value {parsed!r}; expected one of: {expected}")
        return None
    return parsed


def _reject_unknown_keys(
    payload: Mapping[str, object], allowed: set[str], path: str, issues: _IssueCollector
) -> None:
    for key in sorted(payload):
        if key not in allowed:
            issues.add(_join(path, key), "unknown field")


def _require_keys(
    payload: Mapping[str, object], required: set[str], path: str, issues: _IssueCollector
) -> None:
    for key in sorted(required):
        if key not in payload:
            issues.add(_join(path, key), "missing required field")


def _join(path: str, key: str) -> str:
    if not path:
        return key
    return f"{path}.{key}"


def _merge_into(target: dict[str, Any], overlay: Mapping[str, object]) -> None:
    for key in sorted(overlay):
        value = overlay[key]
        if isinstance(value, Mapping):
            existing = target.get(key)
            nested = existing if isinstance(existing, dict) else {}
            _merge_into(nested, value)
            target[key] = nested
        else:
            target[key] = copy.deepcopy(value)


__all__ = [
    "DEFAULT_CONFIG",
    "LOG_LEVELS",
    "PATH_FIELDS",
    "BuilderSettings",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "InteractiveParseConfig",
    "assert_valid_config",
    "default_config",
    "merge_config",
    "validate_config",
]
