"""
interactive-parse: runtime config loader.

Purpose
- Load effective runtime config from defaults, a TOML file, env vars, and CLI overrides.

Precedence
- CLI > env (``INTERACTIVE_PARSE_``) > file (``interactive_parse.toml``) > defaults.
- Every setting lives at ``section.key``; its env var is the prefix plus
  ``SECTION_KEY`` upper-cased, for example ``INTERACTIVE_PARSE_BUILDER_ROOT_SKIP``.
- ``observability.log_dir`` is normalized relative to the config file location.
"""

from __future__ import annotations

import json
import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from interactive_parse.config.schema import (
    PATH_FIELDS,
    assert_valid_config,
    default_config,
    merge_config,
)

DEFAULT_CONFIG_FILE: Final[str] = "interactive_parse.toml"
ENV_PREFIX: Final[str] = "INTERACTIVE_PARSE_"

_BOOLEAN_TRUE: Final[frozenset[str]] = frozenset({"1", "true", "t", "yes", "y", "on"})
_BOOLEAN_FALSE: Final[frozenset[str]] = frozenset({"0", "false", "f", "no", "n", "off"})


class ConfigLoadError(ValueError):
    """Raised when config cannot be loaded or overrides cannot be coerced."""


def load_config(
    config_path: str | Path | None = None,
    *,
    cli_overrides: Mapping[str, object] | None = None,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Load effective config with precedence CLI > env > file > defaults.

    ``cli_overrides`` keys are ``section.key`` paths (``"builder.root_skip"``);
    ``None`` values are ignored so argparse defaults never mask lower layers.
    """

    resolved_path = _resolve_config_path(config_path)
    env_map = os.environ if environ is None else environ

    file_payload = _load_toml_file(resolved_path, required=config_path is not None)
    merged = assert_valid_config(merge_config(default_config(), file_payload))

    merged = merge_config(merged, _env_overrides(merged, env_map))
    merged = merge_config(merged, _cli_overrides(cli_overrides or {}))
    merged = assert_valid_config(merged)

    return normalize_paths(merged, base_dir=resolved_path.parent)


def normalize_paths(config: Mapping[str, object], *, base_dir: Path) -> dict[str, Any]:
    """Make the configured directories absolute, relative to ``base_dir``."""

    materialized = merge_config({}, config)
    for section, key in PATH_FIELDS:
        value = materialized.get(section, {}).get(key)
        if isinstance(value, str):
            materialized[section][key] = _absolute_posix(value, base_dir)
    return materialized


def dump_effective_config(config: Mapping[str, object]) -> str:
    """Return a deterministic JSON dump of the effective config."""

    return json.dumps(config, sort_keys=True, indent=2, ensure_ascii=False)


def env_var_name(section: str, key: str) -> str:
    return f"{ENV_PREFIX}{section.upper()}_{key.upper()}"


def _resolve_config_path(config_path: str | Path | None) -> Path:
    if config_path is None:
        return (Path.cwd() / DEFAULT_CONFIG_FILE).resolve()
    return Path(config_path).expanduser().resolve()


def _load_toml_file(path: Path, *, required: bool) -> dict[str, Any]:
    if not path.exists():
        if required:
            raise ConfigLoadError(f"config file not found: {path}")
        return {}

    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigLoadError(f"invalid TOML in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigLoadError(f"unable to read config file {path}: {exc}") from exc


def _env_overrides(
    config: Mapping[str, Mapping[str, object]], environ: Mapping[str, str]
) -> dict[str, dict[str, object]]:
    """Read one env var per known setting, typed like the setting's current value."""

    overrides: dict[str, dict[str, object]] = {}
    for section, settings in sorted(config.items()):
        for key, current in sorted(settings.items()):
            name = env_var_name(section, key)
            raw = environ.get(name)
            if raw is not None:
                overrides.setdefault(section, {})[key] = _coerce_env(name, raw, current)
    return overrides


def _coerce_env(name: str, raw: str, current: object) -> object:
    value = raw.strip()
    if isinstance(current, bool):
        lowered = value.lower()
        if lowered in _BOOLEAN_TRUE:
            return True
        if lowered in _BOOLEAN_FALSE:
            return False
        raise ConfigLoadError(f"{name} must be a boolean (true/false/1/0/yes/no/on/off)")
    if isinstance(current, int):
        try:
            return int(value)
        except ValueError as exc:
            raise ConfigLoadError(f"{name} must be an integer") from exc
    return value


def _cli_overrides(overrides: Mapping[str, object]) -> dict[str, dict[str, object]]:
    payload: dict[str, dict[str, object]] = {}
    for dotted, value in sorted(overrides.items()):
        if value is None:
            continue
        section, _, key = dotted.partition(".")
        if not section or not key or "." in key:
            raise ConfigLoadError(f"invalid CLI override key {dotted!r}; expected 'section.key'")
        payload.setdefault(section, {})[key] = value
    return payload


def _absolute_posix(raw: str, base_dir: Path) -> str:
    candidate = Path(os.path.expandvars(raw)).expanduser()
    if not candidate.is_absolute():
        candidate = base_dir / candidate
    return Path(os.path.normpath(candidate)).as_posix()


__all__ = [
    "ConfigLoadError",
    "DEFAULT_CONFIG_FILE",
    "ENV_PREFIX",
    "dump_effective_config",
    "env_var_name",
    "load_config",
    "normalize_paths",
]
