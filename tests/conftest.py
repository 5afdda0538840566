"""Shared pytest fixtures for the full metasync test suite."""

from __future__ import annotations

import io
from typing import Iterator

import pytest

from metasync.telemetry.logger import configure_logging


@pytest.fixture
def log_buffer() -> Iterator[io.StringIO]:
    """Capture all log lines (DEBUG and above) emitted during a test."""

    buffer = io.StringIO()
    configure_logging(sink=buffer, level="DEBUG")
    yield buffer
    configure_logging(level="INFO")


@pytest.fixture(autouse=True)
def _disable_update_check(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep CLI tests offline by disabling the release update check."""

    monkeypatch.setenv("METASYNC_NO_UPDATE_CHECK", "1")
