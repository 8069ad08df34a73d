"""Module entrypoint for ``python -m interactive_parse``."""

from __future__ import annotations

from interactive_parse.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
