"""Command-line interface router for interactive-parse."""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog

from interactive_parse.builder.values import build_value
from interactive_parse.config import (
    BuilderSettings,
    ConfigLoadError,
    ConfigValidationError,
    dump_effective_config,
    load_config,
)
from interactive_parse.deserialize import Target, materialize, resolve_target
from interactive_parse.observability import (
    StructuredLoggingHandle,
    ensure_structlog,
    setup_logging,
    shutdown_logging,
)
from interactive_parse.prompts import ConsolePrompter, Prompter, ScriptedPrompter
from interactive_parse.schema.model import (
    Array,
    Composition,
    Nullable,
    Object,
    SchemaNode,
    kind_label,
)
from interactive_parse.terminal import CancellationSource, NullTerminal, RichTerminal
from interactive_parse.ui.render import CLIRenderer, create_renderer

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class CLIError(RuntimeError):
    """Typed CLI failure with an explicit process exit code."""

    message: str
    exit_code: int = 1

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse command router."""

    parser = argparse.ArgumentParser(
        prog="interactive-parse",
        description=(
            "interactive-parse: build typed values by answering schema-driven prompts.\n\n"
            "Type the undo token (default '<') at any prompt to step back.\n\n"
            "Common workflows:\n"
            "  interactive-parse build schema.json           Prompt for a value\n"
            "  interactive-parse build app.models:User       Prompt for a pydantic type\n"
            "  interactive-parse inspect schema.json         Show the prompt outline\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to TOML config (default: ./interactive_parse.toml if present).",
    )
    common.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=False,
        help="Show detailed output and log at DEBUG level.",
    )
    common.add_argument(
        "--no-color",
        action="store_true",
        default=False,
        help="Disable colored output (also respects NO_COLOR env var).",
    )
    common.add_argument(
        "--log-dir",
        default=None,
        help="Write a JSON-lines session log under this directory.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # build ---------------------------------------------------------------
    build = subparsers.add_parser(
        "build",
        parents=[common],
        help="Prompt for a value of a schema or Python type",
        description=(
            "Drive prompts from TARGET and print the resulting value as JSON.\n\n"
            "TARGET is a JSON/YAML schema file or a 'package.module:TypeName' import path.\n\n"
            "Examples:\n"
            "  interactive-parse build schema.json\n"
            "  interactive-parse build app.models:User --output user.json\n"
            "  interactive-parse build schema.json --answers answers.yaml --json\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    build.add_argument("target", help="Schema file or package.module:TypeName")
    build.add_argument(
        "--answers",
        default=None,
        help="Replay answers from a YAML/JSON list instead of prompting.",
    )
    build.add_argument("--output", default=None, help="Write the value as JSON to this file.")
    build.add_argument(
        "--root-skip",
        choices=("abort", "retry"),
        default=None,
        help="What undoing the first prompt does (overrides builder.root_skip).",
    )
    build.add_argument(
        "--undo-token",
        default=None,
        help="Answer that undoes a prompt (overrides prompts.undo_token).",
    )
    build.add_argument("--json", action="store_true", help="Emit JSON output")
    build.set_defaults(handler=_cmd_build)

    # inspect -------------------------------------------------------------
    inspect = subparsers.add_parser(
        "inspect",
        parents=[common],
        help="Show how a target would be prompted",
        description=(
            "Normalize TARGET and show its prompt outline and named definitions.\n\n"
            "Examples:\n"
            "  interactive-parse inspect schema.json\n"
            "  interactive-parse inspect app.models:User --json\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    inspect.add_argument("target", help="Schema file or package.module:TypeName")
    inspect.add_argument("--json", action="store_true", help="Emit JSON output")
    inspect.set_defaults(handler=_cmd_inspect)

    # config --------------------------------------------------------------
    config = subparsers.add_parser(
        "config",
        parents=[common],
        help="Show effective configuration",
        description=(
            "Display the effective config after merging defaults, file, and env.\n\n"
            "Examples:\n"
            "  interactive-parse config\n"
            "  interactive-parse config --json\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    config.add_argument("--json", action="store_true", help="Emit JSON output")
    config.set_defaults(handler=_cmd_config)

    return parser


# ---------------------------------------------------------------------------
# Entrypoints
# ---------------------------------------------------------------------------


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Parse argv, route to a command handler, and return process exit code."""

    parser = build_parser()
    namespace = parser.parse_args(list(argv) if argv is not None else None)
    handler: Callable[[argparse.Namespace], int] | None = getattr(namespace, "handler", None)
    if not callable(handler):
        parser.print_help(sys.stderr)
        return 2

    try:
        result = handler(namespace)
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    return int(result)


def main(argv: Sequence[str] | None = None) -> int:
    return run_cli(argv)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_build(args: argparse.Namespace) -> int:
    config = _load_effective_config(args)
    settings = BuilderSettings.from_config(config)
    renderer = _get_renderer(args, config)
    handle = _start_logging(config)
    try:
        target = resolve_target(args.target)
        logger.info("build_started", target=target.label, root_policy=settings.root_policy.value)
        if not _flag(args, "json"):
            renderer.detail(f"Target: {target.label} (root policy {settings.root_policy.value})")
        value = _run_build(args, target, settings, renderer)
        logger.info("build_finished", target=target.label)
    finally:
        if handle is not None:
            shutdown_logging(handle)
            if handle.dropped_records:
                renderer.warning(f"{handle.dropped_records} log records dropped (queue full)")

    if args.output:
        output = Path(args.output).expanduser()
        output.write_text(json.dumps(value, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")

    if _flag(args, "json"):
        _emit_json({"command": "build", "target": args.target, "value": value})
        return 0

    if args.output:
        renderer.kv("Wrote", args.output)
    else:
        renderer.section("Result:")
        renderer.text(json.dumps(value, indent=2, ensure_ascii=False))
    return 0


def _run_build(
    args: argparse.Namespace,
    target: Target,
    settings: BuilderSettings,
    renderer: CLIRenderer,
) -> Any:
    prompter: Prompter
    cancellation: CancellationSource | None = None
    restore: Callable[[], None] | None = None
    if args.answers:
        terminal = NullTerminal() if _flag(args, "json") else RichTerminal(renderer.prompt_console)
        prompter = ScriptedPrompter.from_file(
            args.answers, undo_token=settings.undo_token, terminal=terminal
        )
    else:
        console_prompter = ConsolePrompter(
            renderer.prompt_console, undo_token=settings.undo_token
        )
        prompter = console_prompter
        terminal = console_prompter.terminal
        cancellation = CancellationSource()
        try:
            restore = cancellation.install_signal_handler()
        except (RuntimeError, ValueError) as exc:
            renderer.warning(f"undo signal unavailable: {exc}")
            restore = None

    try:
        value = build_value(
            target.document,
            prompter,
            settings=settings,
            terminal=terminal,
            cancellation=cancellation,
        )
    finally:
        if restore is not None:
            restore()
        if cancellation is not None:
            stale = cancellation.drain()
            if stale:
                logger.debug("cancellation_discarded", count=stale)

    if target.adapter is None:
        return value
    typed = materialize(target.adapter, value)
    return target.adapter.dump_python(typed, mode="json")


def _cmd_inspect(args: argparse.Namespace) -> int:
    config = _load_effective_config(args)
    handle = _start_logging(config)
    try:
        target = resolve_target(args.target)
    finally:
        if handle is not None:
            shutdown_logging(handle)

    document = target.document
    root_name = document.title or "value"
    definitions = [
        {"name": name, "kind": kind_label(node), "title": node.meta.title or ""}
        for name, node in document.definitions.items()
    ]
    outline = _outline(document.root, root_name)

    if _flag(args, "json"):
        _emit_json(
            {
                "command": "inspect",
                "target": args.target,
                "root": kind_label(document.root),
                "title": document.title,
                "outline": outline,
                "definitions": definitions,
            }
        )
        return 0

    renderer = _get_renderer(args, config)
    renderer.heading(f"{root_name}: {kind_label(document.root)}")
    renderer.section("Prompt outline:")
    renderer.items(outline, prefix="")
    renderer.table(
        ("name", "kind", "title"),
        [(item["name"], item["kind"], item["title"]) for item in definitions],
        title="Definitions:",
    )
    return 0


def _cmd_config(args: argparse.Namespace) -> int:
    config = _load_effective_config(args)

    if _flag(args, "json"):
        _emit_json({"command": "config", "config": config})
        return 0

    renderer = _get_renderer(args, config)
    renderer.kv("Config file", args.config_path or "(default search)")
    renderer.text(dump_effective_config(config))
    return 0


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _emit_json(payload: Mapping[str, object]) -> None:
    """Emit a JSON payload to stdout with deterministic formatting."""

    print(json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False))


def _get_renderer(args: argparse.Namespace, config: Mapping[str, Any]) -> CLIRenderer:
    no_color = _flag(args, "no_color") or not config["terminal"]["color"]
    return create_renderer(no_color=no_color, verbose=_flag(args, "verbose"))


def _load_effective_config(args: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, object] = {
        "builder.root_skip": getattr(args, "root_skip", None),
        "prompts.undo_token": getattr(args, "undo_token", None),
    }
    if _flag(args, "no_color"):
        overrides["terminal.color"] = False
    if _flag(args, "verbose"):
        overrides["observability.log_level"] = "DEBUG"
    if getattr(args, "log_dir", None):
        overrides["observability.log_dir"] = args.log_dir
        overrides["observability.log_to_file"] = True

    try:
        return load_config(args.config_path, cli_overrides=overrides)
    except (ConfigLoadError, ConfigValidationError) as exc:
        raise CLIError(str(exc), exit_code=2) from exc


def _start_logging(config: Mapping[str, Any]) -> StructuredLoggingHandle | None:
    observability = config["observability"]
    if not observability["log_to_file"]:
        ensure_structlog()
        return None
    return setup_logging(observability)


def _outline(node: SchemaNode, name: str, indent: int = 0) -> list[str]:
    """Indented ``name: kind`` lines; references are listed, not expanded."""

    lines = [f"{'  ' * indent}{name}: {kind_label(node)}"]
    match node:
        case Object(properties=properties, additional=additional):
            for key, child in properties:
                lines.extend(_outline(child, key, indent + 1))
            if additional is not None:
                lines.extend(_outline(additional, "<key>", indent + 1))
        case Array(items=items) if isinstance(items, tuple):
            for index, child in enumerate(items):
                lines.extend(_outline(child, f"{name}.{index}", indent + 1))
        case Array(items=items):
            lines.extend(_outline(items, f"{name}[]", indent + 1))
        case Composition(variants=variants):
            for index, child in enumerate(variants):
                lines.extend(_outline(child, f"#{index}", indent + 1))
        case Nullable(inner=inner):
            lines.extend(_outline(inner, name, indent + 1))
        case _:
            pass
    return lines


def _flag(args: argparse.Namespace, name: str) -> bool:
    return bool(getattr(args, name, False))


__all__ = ["CLIError", "build_parser", "main", "run_cli"]
