"""Structured run logging utilities.

Responsibilities:
- Configure the process `loguru` sink with deterministic, uncolored output.
- Emit concise component/event lines with sorted, shell-safe context tokens.
"""

from __future__ import annotations

import sys
from typing import TextIO

from loguru import logger

_LEVELS = frozenset({"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"})


def _sanitize_context_value(value: object) -> str:
    """Convert context values into stable, shell-safe tokens."""

    raw = str(value).strip()
    if not raw:
        return "none"
    return "".join(
        character
        if character.isalnum() or character in {"-", "_", ".", ":", "/", "\\"}
        else "_"
        for character in raw
    )


def _format_context(context: dict[str, object]) -> str:
    """Serialize context key/value pairs in deterministic key order."""

    if not context:
        return ""
    tokens = [
        f"{key}={_sanitize_context_value(context[key])}"
        for key in sorted(context.keys())
    ]
    return " " + " ".join(tokens)


def normalize_level(level: str) -> str:
    """Return an upper-cased loguru level name or raise for unknown names."""

    normalized = level.strip().upper()
    if normalized not in _LEVELS:
        supported = ", ".join(sorted(_LEVELS))
        raise ValueError(f"Unsupported log level `{level}`; supported: {supported}.")
    return normalized


def configure_logging(sink: TextIO | None = None, level: str = "INFO") -> int:
    """Route all log output to one sink and return the loguru handler id."""

    logger.remove()
    return logger.add(
        sink or sys.stderr,
        format="{message}",
        level=normalize_level(level),
        colorize=False,
    )


def log_event(
    level: str,
    component: str,
    event: str,
    message: str = "",
    **context: object,
) -> None:
    """Emit one structured log line.

    Lines look like ``[artifact_store] level=ERROR event=write_failed path=a/b | detail``.
    """

    line = f"[{component}] level={level} event={event}{_format_context(context)}"
    if message:
        line = f"{line} | {message}"
    logger.opt(depth=1).log(level, line)
