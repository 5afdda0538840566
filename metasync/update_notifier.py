"""Release update notification for the metasync CLI.

Responsibilities:
- Look up the newest published release on PyPI at most once per day.
- Log an info line when the installed version is outdated.
- Never fail the calling command: network and cache errors are logged only.
"""

from __future__ import annotations

import json
from pathlib import Path
import re
import time

import requests

from .telemetry.logger import log_event

PACKAGE_NAME = "metasync"
PYPI_URL_TEMPLATE = "https://pypi.org/pypi/{package}/json"
CHECK_INTERVAL_SECONDS = 24 * 3600
DEFAULT_STATE_PATH = Path.home() / ".cache" / "metasync" / "update-check.json"

_COMPONENT = "update_notifier"
_VERSION_PART_PATTERN = re.compile(r"\d+")


def parse_version(version: str) -> tuple[int, ...]:
    """Return the numeric release parts of `version` (`1.2.3rc1` -> `(1, 2, 3)`)."""

    parts: list[int] = []
    for piece in version.strip().lstrip("v").split("."):
        match = _VERSION_PART_PATTERN.match(piece)
        if match is None:
            break
        parts.append(int(match.group(0)))
    return tuple(parts)


def _read_last_check(state_path: Path) -> float | None:
    try:
        payload = json.loads(state_path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return None
    last_check = payload.get("last_check") if isinstance(payload, dict) else None
    return float(last_check) if isinstance(last_check, (int, float)) else None


def _write_last_check(state_path: Path, timestamp: float) -> None:
    try:
        state_path.parent.mkdir(parents=True, exist_ok=True)
        state_path.write_text(json.dumps({"last_check": timestamp}), encoding="utf-8")
    except OSError as exc:
        log_event("DEBUG", _COMPONENT, "state_write_failed", str(exc))


def fetch_latest_version(package: str = PACKAGE_NAME, timeout_seconds: float = 3.0) -> str | None:
    """Return the latest released version of `package`, or `None` on failure."""

    try:
        response = requests.get(PYPI_URL_TEMPLATE.format(package=package), timeout=timeout_seconds)
        response.raise_for_status()
        payload = response.json()
    except (requests.RequestException, ValueError) as exc:
        log_event("DEBUG", _COMPONENT, "lookup_failed", str(exc), package=package)
        return None
    version = payload.get("info", {}).get("version") if isinstance(payload, dict) else None
    return version if isinstance(version, str) else None


def notify_if_outdated(
    current_version: str,
    *,
    package: str = PACKAGE_NAME,
    state_path: Path = DEFAULT_STATE_PATH,
    now: float | None = None,
) -> str | None:
    """Check for a newer release once per interval and log when one exists.

    Returns the newer version when one was announced, otherwise `None`.
    """

    timestamp = time.time() if now is None else now
    last_check = _read_last_check(state_path)
    if last_check is not None and timestamp - last_check < CHECK_INTERVAL_SECONDS:
        return None

    latest = fetch_latest_version(package)
    _write_last_check(state_path, timestamp)
    if latest is None or parse_version(latest) <= parse_version(current_version):
        return None

    log_event(
        "INFO",
        _COMPONENT,
        "update_available",
        f"Update available {current_version} -> {latest}. Run `pip install -U {package}` to update.",
    )
    return latest
