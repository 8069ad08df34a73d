"""
interactive-parse — unit tests for the CLI router

File: tests/unit/ui/test_cli.py

Purpose
- Validate the build, inspect and config commands end to end with scripted
  answers, JSON output, config errors, and the optional session log.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest
from pydantic import BaseModel

from interactive_parse.ui.cli import build_parser, run_cli

if TYPE_CHECKING:
    from pathlib import Path


class Server(BaseModel):
    host: str
    port: int


_SCHEMA = {
    "title": "Service",
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "replicas": {"type": "array", "items": {"type": "integer"}, "maxItems": 2},
        "owner": {"$ref": "#/$defs/Owner"},
    },
    "$defs": {"Owner": {"enum": ["ops", "dev"]}},
}


@pytest.fixture()
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("NO_COLOR", "1")
    (tmp_path / "schema.json").write_text(json.dumps(_SCHEMA), encoding="utf-8")
    (tmp_path / "answers.yaml").write_text(
        "- api\n- yes\n- 3\n- no\n- dev\n", encoding="utf-8"
    )
    return tmp_path


def _json_output(capsys: pytest.CaptureFixture[str]) -> dict[str, object]:
    return json.loads(capsys.readouterr().out.strip().splitlines()[-1])


@pytest.mark.unit
def test_parser_requires_a_command() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


@pytest.mark.unit
def test_build_with_answers_emits_json(
    workspace: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    code = run_cli(["build", "schema.json", "--answers", "answers.yaml", "--json"])

    assert code == 0
    payload = _json_output(capsys)
    assert payload == {
        "command": "build",
        "target": "schema.json",
        "value": {"name": "api", "replicas": [3], "owner": "dev"},
    }


@pytest.mark.unit
def test_build_writes_output_file(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = run_cli(
        ["build", "schema.json", "--answers", "answers.yaml", "--output", "out.json"]
    )

    assert code == 0
    written = json.loads((workspace / "out.json").read_text(encoding="utf-8"))
    assert written["owner"] == "dev"
    assert "Wrote: out.json" in capsys.readouterr().out


@pytest.mark.unit
def test_build_prints_result_without_json_flag(
    workspace: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    code = run_cli(["build", "schema.json", "--answers", "answers.yaml", "--no-color"])

    captured = capsys.readouterr()
    assert code == 0
    assert "Result:" in captured.out
    assert '"name": "api"' in captured.out
    assert "name api" in captured.err


@pytest.mark.unit
def test_verbose_build_names_the_target_and_root_policy(
    workspace: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    code = run_cli(["build", "schema.json", "--answers", "answers.yaml", "--verbose"])

    captured = capsys.readouterr()
    assert code == 0
    assert "Target: schema.json (root policy abort)" in captured.out

    code = run_cli(["build", "schema.json", "--answers", "answers.yaml"])

    assert code == 0
    assert "Target:" not in capsys.readouterr().out


@pytest.mark.unit
def test_build_python_type_validates_and_dumps(
    workspace: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    (workspace / "server.yaml").write_text("- localhost\n- 8080\n", encoding="utf-8")

    code = run_cli(["build", f"{__name__}:Server", "--answers", "server.yaml", "--json"])

    assert code == 0
    assert _json_output(capsys)["value"] == {"host": "localhost", "port": 8080}


@pytest.mark.unit
def test_custom_undo_token_flag(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (workspace / "undo.yaml").write_text(
        "- first\n- back\n- api\n- no\n- ops\n", encoding="utf-8"
    )

    code = run_cli(
        ["build", "schema.json", "--answers", "undo.yaml", "--undo-token", "back", "--json"]
    )

    assert code == 0
    assert _json_output(capsys)["value"] == {"name": "api", "replicas": [], "owner": "ops"}


@pytest.mark.unit
def test_inspect_json_lists_outline_and_definitions(
    workspace: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    code = run_cli(["inspect", "schema.json", "--json"])

    assert code == 0
    payload = _json_output(capsys)
    assert payload["title"] == "Service"
    assert payload["root"] == "object"
    assert payload["outline"] == [
        "Service: object",
        "  name: string",
        "  replicas: array[0..2]",
        "    replicas[]: integer",
        "  owner: ref Owner",
    ]
    assert payload["definitions"] == [{"name": "Owner", "kind": "enum(2)", "title": ""}]


@pytest.mark.unit
def test_inspect_renders_text(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = run_cli(["inspect", "schema.json"])

    out = capsys.readouterr().out
    assert code == 0
    assert "Service: object" in out
    assert "Prompt outline:" in out
    assert "Owner" in out


@pytest.mark.unit
def test_config_json_reflects_cli_overrides(
    workspace: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    code = run_cli(["config", "--json", "--verbose"])

    assert code == 0
    config = _json_output(capsys)["config"]
    assert isinstance(config, dict)
    assert config["observability"]["log_level"] == "DEBUG"
    assert config["builder"]["root_skip"] == "abort"


@pytest.mark.unit
def test_invalid_config_file_exits_with_config_error(
    workspace: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    (workspace / "interactive_parse.toml").write_text(
        '[prompts]\nundo_token = "two words"\n', encoding="utf-8"
    )

    code = run_cli(["config"])

    assert code == 2
    assert "prompts.undo_token" in capsys.readouterr().err


@pytest.mark.unit
def test_log_dir_writes_session_log(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = run_cli(
        ["build", "schema.json", "--answers", "answers.yaml", "--json", "--log-dir", "logs"]
    )

    assert code == 0
    log_files = list((workspace / "logs").glob("*/session.jsonl"))
    assert len(log_files) == 1
    events = [
        json.loads(line)["event"]
        for line in log_files[0].read_text(encoding="utf-8").splitlines()
    ]
    assert events[0] == "build_started"
    assert events[-1] == "build_finished"
    assert _json_output(capsys)["command"] == "build"
