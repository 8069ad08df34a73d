"""Command-line surface: argparse router and rich output rendering."""

from interactive_parse.ui.cli import CLIError, build_parser, main, run_cli
from interactive_parse.ui.render import CLIRenderer, create_renderer

__all__ = ["CLIError", "CLIRenderer", "build_parser", "create_renderer", "main", "run_cli"]
