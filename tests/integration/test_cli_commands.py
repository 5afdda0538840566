"""CLI tests for the artifact maintenance commands."""

from __future__ import annotations

import json
import os
from pathlib import Path

from pytest import MonkeyPatch
from typer.testing import CliRunner

from metasync.cli import app


def test_dirs_command_lists_relative_leaves(tmp_path: Path) -> None:
    """`dirs` prints leaf directories relative to the root."""

    (tmp_path / "deploy" / "cred" / "bu1").mkdir(parents=True)
    (tmp_path / "deploy" / "cred" / "bu2").mkdir(parents=True)

    result = CliRunner().invoke(app, ["dirs", str(tmp_path / "deploy"), "--depth", "2"])

    assert result.exit_code == 0
    assert result.output.splitlines() == [
        os.path.join("cred", "bu1"),
        os.path.join("cred", "bu2"),
    ]


def test_dirs_command_fails_for_missing_root(tmp_path: Path) -> None:
    result = CliRunner().invoke(app, ["dirs", str(tmp_path / "missing")])

    assert result.exit_code == 1
    assert "dirs failed: Cannot list directories" in result.output


def test_format_command_beautifies_file_in_place(
    monkeypatch: MonkeyPatch, tmp_path: Path
) -> None:
    """`format` uses the project style file from the configured project root."""

    (tmp_path / ".prettierrc").write_text("tabWidth: 2\n", encoding="utf-8")
    target = tmp_path / "data.json"
    target.write_text('{"a":1}', encoding="utf-8")
    monkeypatch.setenv("METASYNC_PROJECT_ROOT", str(tmp_path))

    result = CliRunner().invoke(app, ["format", str(target)])

    assert result.exit_code == 0
    assert target.read_text(encoding="utf-8") == '{\n  "a": 1\n}\n'


def test_format_command_rejects_unsupported_type(tmp_path: Path) -> None:
    target = tmp_path / "binary.exe"
    target.write_text("x", encoding="utf-8")

    result = CliRunner().invoke(app, ["format", str(target)])

    assert result.exit_code == 1
    assert "format failed at stage `format`: Unsupported file type `exe`." in result.output


def test_format_command_respects_disabled_formatting(
    monkeypatch: MonkeyPatch, tmp_path: Path
) -> None:
    target = tmp_path / "a.html"
    target.write_text("<p>x</p>", encoding="utf-8")
    monkeypatch.setenv("METASYNC_FORMATTING", "false")

    result = CliRunner().invoke(app, ["format", str(target)])

    assert result.exit_code == 1
    assert "Formatting is disabled by configuration." in result.output
    assert target.read_text(encoding="utf-8") == "<p>x</p>"


def test_copy_command_reports_skipped_source(tmp_path: Path) -> None:
    result = CliRunner().invoke(
        app, ["copy", str(tmp_path / "gone.txt"), str(tmp_path / "dst.txt")]
    )

    assert result.exit_code == 0
    assert "skipped:" in result.output
    assert "(deleted from repository)" in result.output


def test_encode_and_decode_commands() -> None:
    runner = CliRunner()

    encoded = runner.invoke(app, ["encode", "a/b*c"])
    encoded_path = runner.invoke(app, ["encode", "--path", "a/b c"])
    decoded = runner.invoke(app, ["decode", "a%2Fb_STAR_c"])

    assert encoded.output.strip() == "a%2Fb_STAR_c"
    assert encoded_path.output.strip() == "a/b c"
    assert decoded.output.strip() == "a/b*c"


def test_init_style_command_writes_default_style_file(
    monkeypatch: MonkeyPatch, tmp_path: Path
) -> None:
    """`init-style` creates `.prettierrc.json` once and refuses to overwrite it."""

    monkeypatch.setenv("METASYNC_PROJECT_ROOT", str(tmp_path))
    runner = CliRunner()

    first = runner.invoke(app, ["init-style"])
    second = runner.invoke(app, ["init-style"])

    assert first.exit_code == 0
    payload = json.loads((tmp_path / ".prettierrc.json").read_text(encoding="utf-8"))
    assert payload["tabWidth"] == 4
    assert second.exit_code == 1
    assert "Style file already exists" in second.output


def test_cli_reports_missing_config_file(tmp_path: Path) -> None:
    """A missing `--config` path is rendered with a stage-aware hint."""

    result = CliRunner().invoke(
        app, ["--config", str(tmp_path / "missing.yml"), "encode", "x"]
    )

    assert result.exit_code == 1
    assert "metasync failed at stage `config`" in result.output
    assert "Hint: Provide an existing path via `--config <path.yaml>`." in result.output


def test_cli_runs_update_check_when_enabled(monkeypatch: MonkeyPatch) -> None:
    """The update check runs once per invocation unless disabled."""

    calls: list[str] = []
    monkeypatch.delenv("METASYNC_NO_UPDATE_CHECK")
    monkeypatch.setattr("metasync.cli.notify_if_outdated", lambda version: calls.append(version))

    result = CliRunner().invoke(app, ["decode", "x"])

    assert result.exit_code == 0
    assert len(calls) == 1


def test_format_command_rewrites_file_with_non_ascii_name_in_place(
    monkeypatch: MonkeyPatch, tmp_path: Path
) -> None:
    """Names that the store would percent-encode are formatted under their own name."""

    (tmp_path / ".prettierrc").write_text("tabWidth: 2\n", encoding="utf-8")
    folder = tmp_path / "a&b #1"
    folder.mkdir()
    target = folder / "café+1.json"
    target.write_text('{"a":1}', encoding="utf-8")
    monkeypatch.setenv("METASYNC_PROJECT_ROOT", str(tmp_path))

    result = CliRunner().invoke(app, ["format", str(target)])

    assert result.exit_code == 0
    assert target.read_text(encoding="utf-8") == '{\n  "a": 1\n}\n'
    assert sorted(path.name for path in folder.iterdir()) == ["café+1.json"]
    assert sorted(path.name for path in tmp_path.iterdir()) == [".prettierrc", "a&b #1"]


def test_format_command_writes_error_log_beside_unparseable_file(
    monkeypatch: MonkeyPatch, tmp_path: Path
) -> None:
    """Parser failures keep the file unchanged and leave an `.error.log` next to it."""

    (tmp_path / ".prettierrc").write_text("tabWidth: 2\n", encoding="utf-8")
    target = tmp_path / "café+1.json"
    target.write_text('{"a": ', encoding="utf-8")
    monkeypatch.setenv("METASYNC_PROJECT_ROOT", str(tmp_path))

    result = CliRunner().invoke(app, ["format", str(target)])

    assert result.exit_code == 0
    assert target.read_text(encoding="utf-8") == '{"a": '
    sidecar = tmp_path / "café+1.error.log"
    assert sidecar.read_text(encoding="utf-8").startswith("Error Log\nParser: json\n")
