"""
interactive-parse config package public API.

Loads ``interactive_parse.toml`` plus ``INTERACTIVE_PARSE_`` env overrides and
fails fast with structured validation/load errors.
"""

from interactive_parse.config.loader import (
    DEFAULT_CONFIG_FILE,
    ENV_PREFIX,
    ConfigLoadError,
    dump_effective_config,
    env_var_name,
    load_config,
    normalize_paths,
)
from interactive_parse.config.schema import (
    DEFAULT_CONFIG,
    PATH_FIELDS,
    BuilderSettings,
    ConfigValidationError,
    ConfigValidationIssue,
    ConfigValidationResult,
    InteractiveParseConfig,
    assert_valid_config,
    default_config,
    merge_config,
    validate_config,
)

__all__ = [
    "BuilderSettings",
    "ConfigLoadError",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "DEFAULT_CONFIG",
    "DEFAULT_CONFIG_FILE",
    "ENV_PREFIX",
    "InteractiveParseConfig",
    "PATH_FIELDS",
    "assert_valid_config",
    "default_config",
    "dump_effective_config",
    "env_var_name",
    "load_config",
    "merge_config",
    "normalize_paths",
    "validate_config",
]
