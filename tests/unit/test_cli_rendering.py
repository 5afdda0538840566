"""Unit tests for CLI output and error rendering helpers."""

from __future__ import annotations

import pytest
import typer

from metasync.cli_rendering import (
    echo_copy_result,
    echo_directory_list,
    exit_with_command_error,
)
from metasync.errors import CommandError
from metasync.models.datatypes import CopyResult


def test_exit_with_command_error_renders_stage_error_with_hint(
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Renderer should print stage diagnostics and hint before exiting with code 1."""

    error = CommandError(
        stage="config",
        detail="Config file not found: `missing.yml`.",
        hint="Provide an existing path via `--config <path.yaml>`.",
    )

    with pytest.raises(typer.Exit) as exc_info:
        exit_with_command_error("format", error)

    captured = capsys.readouterr()
    assert exc_info.value.exit_code == 1
    assert "format failed at stage `config`" in captured.err
    assert "Hint: Provide an existing path via `--config <path.yaml>`." in captured.err


def test_exit_with_command_error_renders_non_stage_fallback(
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Renderer should print fallback exception text for non-stage failures."""

    with pytest.raises(typer.Exit):
        exit_with_command_error("dirs", RuntimeError("unexpected walk error"))

    assert "dirs failed: unexpected walk error" in capsys.readouterr().err


def test_echo_helpers_render_listing_and_copy_outcome(
    capsys: pytest.CaptureFixture[str],
) -> None:
    echo_directory_list(["", "a/b"])
    echo_copy_result(CopyResult("skipped", "x.json", "deleted from repository"))

    assert capsys.readouterr().out == ".\na/b\nskipped: x.json (deleted from repository)\n"


def test_copy_result_rejects_unknown_status() -> None:
    with pytest.raises(ValueError, match="Unknown copy status"):
        CopyResult("maybe", "x")
