"""Command-line interface for metasync artifact maintenance.

Responsibilities:
- Expose inspection commands over the artifact store and directory walker.
- Load configuration, configure logging and run the update check once.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from . import __version__
from .cli_rendering import echo_copy_result, echo_directory_list, exit_with_command_error
from .config import ConfigLoader, MetasyncConfig
from .errors import CommandError
from .formatting.fallback import FormatterFallback
from .formatting.filetypes import is_supported, normalize_file_type
from .formatting.style import STYLE_FILE_NAMES, FormatterState, default_style_payload
from .io.filesystem import LocalFileSystem
from .io.path_codec import decode_filename, encode_filename, encode_path
from .io.storage import ArtifactStore
from .io.walker import DirectoryWalker
from .models.datatypes import COPY_STATUS_FAILED
from .telemetry.logger import configure_logging, log_event
from .update_notifier import notify_if_outdated

app = typer.Typer(
    name="metasync",
    no_args_is_help=True,
    help="metasync artifact store CLI.",
)


def _load_config(config_path: Path | None) -> MetasyncConfig:
    """Load YAML or environment config and map failures to command errors."""

    if config_path is None:
        try:
            return ConfigLoader.from_env()
        except ValueError as exc:
            raise CommandError(
                stage="config",
                detail=f"Invalid environment configuration: {exc}",
                hint="Check `METASYNC_*` environment variables.",
            ) from exc

    try:
        return ConfigLoader.from_yaml(config_path)
    except FileNotFoundError as exc:
        raise CommandError(
            stage="config",
            detail=f"Config file not found: `{config_path}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except ValueError as exc:
        raise CommandError(
            stage="config",
            detail=f"Invalid config file `{config_path}`: {exc}",
            hint="Fix config schema/values and rerun.",
        ) from exc


def _config(ctx: typer.Context) -> MetasyncConfig:
    return ctx.obj if isinstance(ctx.obj, MetasyncConfig) else MetasyncConfig()


@app.callback()
def main_callback(
    ctx: typer.Context,
    config: Annotated[
        Path | None,
        typer.Option("--config", help="Path to a metasync YAML config file."),
    ] = None,
    log_level: Annotated[
        str | None,
        typer.Option("--log-level", help="Override the configured log level."),
    ] = None,
) -> None:
    """Load configuration shared by all commands."""

    try:
        resolved = _load_config(config)
        if log_level is not None:
            resolved.log_level = log_level
            resolved.validate()
    except (CommandError, ValueError) as exc:
        exit_with_command_error("metasync", exc)

    configure_logging(level=resolved.log_level)
    if resolved.update_check:
        notify_if_outdated(__version__)
    ctx.obj = resolved


@app.command("dirs")
def dirs_command(
    root: Annotated[Path, typer.Argument(help="Directory to list leaf directories of.")],
    depth: Annotated[int, typer.Option("--depth", min=0, help="Levels to descend.")] = 1,
    include_root: Annotated[
        bool,
        typer.Option("--include-root", help="Print full paths including ROOT."),
    ] = False,
) -> None:
    """List leaf directories below ROOT up to --depth levels."""

    try:
        directories = DirectoryWalker().walk(str(root), depth, include_root)
    except Exception as exc:
        exit_with_command_error("dirs", exc)
    echo_directory_list(directories)


def _write_beside(directory: str, name: str, ext: str, content: str) -> bool:
    """Write a formatter sidecar next to the target file without re-encoding names."""

    try:
        LocalFileSystem().write_text(str(Path(directory) / f"{name}.{ext}"), content)
    except OSError as exc:
        log_event("ERROR", "cli", "sidecar_write_failed", str(exc), directory=directory)
        return False
    return True


@app.command("format")
def format_command(
    ctx: typer.Context,
    file: Annotated[Path, typer.Argument(help="File to beautify in place.")],
    file_type: Annotated[
        str | None,
        typer.Option("--type", help="File type; defaults to the file extension."),
    ] = None,
) -> None:
    """Beautify FILE in place with the project style configuration."""

    config = _config(ctx)
    try:
        resolved_type = normalize_file_type(file_type or file.suffix)
        if not resolved_type or not is_supported(resolved_type):
            raise CommandError(
                stage="format",
                detail=f"Unsupported file type `{resolved_type or file.name}`.",
                hint="Pass a supported type via `--type`, for example `html` or `amp`.",
            )
        if not config.formatting_enabled:
            raise CommandError(
                stage="format",
                detail="Formatting is disabled by configuration.",
                hint="Set `formatting_enabled: true` or unset `METASYNC_FORMATTING`.",
            )
        content = file.read_text(encoding="utf-8")
        formatter = FormatterFallback(project_root=config.project_root)
        state = FormatterState()
        formatter.init_formatter(state, resolved_type)
        # FILE is already an on-disk name, so it is written as given, not re-encoded
        formatted = formatter.format(
            state,
            resolved_type,
            content,
            str(file.parent),
            file.stem,
            sidecar_writer=_write_beside,
        )
        try:
            file.write_text(formatted, encoding="utf-8")
        except OSError as exc:
            raise CommandError(stage="write", detail=f"Could not write `{file}`: {exc}") from exc
    except Exception as exc:
        exit_with_command_error("format", exc)
    typer.echo(f"Formatted: {file}")


@app.command("copy")
def copy_command(
    source: Annotated[Path, typer.Argument(help="Existing file or directory.")],
    destination: Annotated[Path, typer.Argument(help="Target path.")],
) -> None:
    """Copy SOURCE to DESTINATION, reporting vanished sources as skipped."""

    result = ArtifactStore().copy(source, destination)
    echo_copy_result(result)
    if result.status == COPY_STATUS_FAILED:
        raise typer.Exit(code=1)


@app.command("encode")
def encode_command(
    name: Annotated[str, typer.Argument(help="Name to encode.")],
    path: Annotated[bool, typer.Option("--path", help="Keep directory separators.")] = False,
) -> None:
    """Print the filesystem-safe form of NAME."""

    typer.echo(encode_path(name) if path else encode_filename(name))


@app.command("decode")
def decode_command(
    name: Annotated[str, typer.Argument(help="Encoded filename to decode.")],
) -> None:
    """Print the original form of an encoded filename."""

    typer.echo(decode_filename(name))


@app.command("init-style")
def init_style_command(ctx: typer.Context) -> None:
    """Create a default .prettierrc.json in the project root."""

    config = _config(ctx)
    try:
        existing = [
            name for name in STYLE_FILE_NAMES if (config.project_root / name).exists()
        ]
        if existing:
            raise CommandError(
                stage="init-style",
                detail=f"Style file already exists: `{config.project_root / existing[0]}`.",
                hint="Edit the existing file instead.",
            )
        if not ArtifactStore().write_json(str(config.project_root), ".prettierrc", default_style_payload()):
            raise CommandError(stage="write", detail="Could not write `.prettierrc.json`.")
    except Exception as exc:
        exit_with_command_error("init-style", exc)
    typer.echo(f"Created: {config.project_root / '.prettierrc.json'}")


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
