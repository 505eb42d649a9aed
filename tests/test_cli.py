"""Tests for the root stackctl CLI."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from stackctl import __version__
from stackctl.cli import cli


@pytest.fixture(autouse=True)
def _in_tmp(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("STACKCTL_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)


def test_cli_help(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "stackctl" in result.output
    assert "project" in result.output
    assert "app" in result.output


def test_cli_version(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_cli_no_args(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, [])
    assert result.exit_code == 0
    assert "Usage" in result.output


@pytest.mark.parametrize("flag", ["--json", "-q", "-v", "--log-json", "--no-interact"])
def test_global_flags_accepted(cli_runner: CliRunner, flag: str) -> None:
    result = cli_runner.invoke(cli, [flag, "--version"])
    assert result.exit_code == 0


def test_config_option_accepted(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["-c", "/nonexistent/stackctl.toml", "--version"])
    assert result.exit_code == 0


@pytest.mark.parametrize(
    ("args", "expected"),
    [
        (["project", "--examples"], "stackctl project init test"),
        (["project", "init", "--examples"], "--no-interact --json project init test"),
        (["app", "--examples"], "stackctl app package -n frontend -e test --tag v1.2.0"),
        (["app", "package", "--examples"], "--output-dir ./infrastructure"),
        (["app", "show", "--examples"], "--resources"),
    ],
)
def test_examples(cli_runner: CliRunner, args: list[str], expected: str) -> None:
    result = cli_runner.invoke(cli, args)
    assert result.exit_code == 0
    assert result.output.startswith("Examples for 'cli ")
    assert expected in result.output


def test_quiet_package_prints_created_files(
    cli_runner: CliRunner, cli_backend: Any, tmp_path: Path
) -> None:
    result = cli_runner.invoke(
        cli,
        ["-q", "app", "package", "-n", "frontend", "-e", "test", "--tag", "v1", "--output-dir", "out"],
    )
    assert result.exit_code == 0, result.stderr
    assert result.stdout.splitlines() == [
        str(Path("out") / "frontend.stack.yml"),
        str(Path("out") / "frontend-test.params.json"),
    ]
    assert result.stderr == ""
    assert (tmp_path / "out" / "frontend.stack.yml").is_file()


def test_quiet_stream_package_prints_only_template(cli_runner: CliRunner, cli_backend: Any) -> None:
    result = cli_runner.invoke(cli, ["-q", "app", "package", "-n", "frontend", "-e", "test", "--tag", "v1"])
    assert result.exit_code == 0, result.stderr
    assert result.stdout == "# http stack for frontend\n"


def test_verbose_json_carries_telemetry(cli_runner: CliRunner, cli_backend: Any) -> None:
    result = cli_runner.invoke(cli, ["-v", "--json", "project", "show"])
    assert result.exit_code == 0, result.stderr
    payload = json.loads(result.stdout)
    assert payload["meta"]["telemetry"]["name"] == "ProjectService.show_project"
