"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics,
directory listings and copy outcomes.
"""

from __future__ import annotations

from typing import NoReturn

import typer

from .errors import CommandError
from .models.datatypes import COPY_STATUS_OK, CopyResult


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, CommandError):
        typer.secho(
            f"{command_name} failed at stage `{exc.stage}`: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def echo_directory_list(directories: list[str]) -> None:
    """Print one directory per line, using `.` for the search root itself."""

    for directory in directories:
        typer.echo(directory or ".")


def echo_copy_result(result: CopyResult) -> None:
    """Print a copy outcome, colored by status."""

    line = f"{result.status}: {result.file}"
    if result.status_message:
        line = f"{line} ({result.status_message})"
    color = typer.colors.GREEN if result.status == COPY_STATUS_OK else typer.colors.YELLOW
    typer.secho(line, fg=color)
