"""Configuration model and loaders for metasync.

Responsibilities:
- Define runtime configuration as a typed dataclass.
- Provide loader entry points for file- and environment-based configuration.

Key types:
- `MetasyncConfig`: normalized runtime settings.
- `ConfigLoader`: static construction helpers for `MetasyncConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from .telemetry.logger import normalize_level

_DEFAULT_LOG_LEVEL = "INFO"
_FLAG_TOKENS: dict[str, bool] = {
    "1": True,
    "true": True,
    "yes": True,
    "on": True,
    "0": False,
    "false": False,
    "no": False,
    "off": False,
}


def _clean_text(value: object) -> str | None:
    """Return `value` as stripped text, or `None` when it is missing or blank."""

    text = "" if value is None else str(value).strip()
    return text or None


def _parse_flag(value: object) -> bool | None:
    """Map a boolean or an on/off style token to `bool`; unknown tokens give `None`."""

    if isinstance(value, bool):
        return value
    text = _clean_text(value)
    return None if text is None else _FLAG_TOKENS.get(text.lower())


@dataclass(slots=True)
class MetasyncConfig:
    """Runtime configuration for one CLI invocation.

    Attributes:
        project_root: Directory probed for the project style file.
        log_level: Minimum loguru level written to stderr.
        formatting_enabled: Whether text artifacts are beautified on write.
        update_check: Whether the CLI checks PyPI for a newer release.
    """

    project_root: Path = Path(".")
    log_level: str = _DEFAULT_LOG_LEVEL
    formatting_enabled: bool = True
    update_check: bool = True

    def validate(self) -> None:
        """Validate configuration values and normalize the log level."""

        self.log_level = normalize_level(self.log_level)
        if not str(self.project_root).strip():
            raise ValueError("`project_root` must be a non-empty path.")


class ConfigLoader:
    """Factory methods for creating `MetasyncConfig` from external sources."""

    _SUPPORTED_YAML_KEYS = frozenset(
        {
            "project_root",
            "log_level",
            "formatting_enabled",
            "update_check",
        }
    )

    @staticmethod
    def from_yaml(path: Path) -> MetasyncConfig:
        """Create a validated config from a YAML file."""

        path_text = path.read_text(encoding="utf-8")
        payload = ConfigLoader._parse_yaml_payload(path_text, path)
        source_label = f"YAML `{path}`"
        ConfigLoader._validate_yaml_keys(payload, source_label)

        project_root = ConfigLoader._optional_string(payload, "project_root", source_label)
        log_level = ConfigLoader._optional_string(payload, "log_level", source_label)
        config = MetasyncConfig(
            project_root=Path(project_root) if project_root else Path("."),
            log_level=log_level or _DEFAULT_LOG_LEVEL,
            formatting_enabled=ConfigLoader._optional_boolean(
                payload, "formatting_enabled", default=True
            ),
            update_check=ConfigLoader._optional_boolean(payload, "update_check", default=True),
        )
        config.validate()
        return config

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> MetasyncConfig:
        """Create a validated config from environment variables."""

        env_map: Mapping[str, str] = os.environ if env is None else env

        project_root = _clean_text(env_map.get("METASYNC_PROJECT_ROOT"))
        log_level = _clean_text(env_map.get("METASYNC_LOG_LEVEL"))
        formatting = _parse_flag(env_map.get("METASYNC_FORMATTING"))
        no_update_check = _parse_flag(env_map.get("METASYNC_NO_UPDATE_CHECK"))

        config = MetasyncConfig(
            project_root=Path(project_root) if project_root else Path("."),
            log_level=log_level or _DEFAULT_LOG_LEVEL,
            formatting_enabled=True if formatting is None else formatting,
            update_check=not no_update_check,
        )
        config.validate()
        return config

    @staticmethod
    def _parse_yaml_payload(raw_text: str, path: Path) -> Mapping[str, Any]:
        """Parse YAML text and enforce a mapping root payload."""

        try:
            payload = yaml.safe_load(raw_text)
        except yaml.YAMLError as exc:
            raise ValueError(f"YAML config `{path}` is not valid YAML: {exc}") from exc

        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")
        return payload

    @staticmethod
    def _validate_yaml_keys(payload: Mapping[str, Any], source_label: str) -> None:
        unknown = sorted(str(key) for key in payload if key not in ConfigLoader._SUPPORTED_YAML_KEYS)
        if unknown:
            raise ValueError(f"{source_label} has unsupported key(s): {', '.join(unknown)}.")

    @staticmethod
    def _optional_string(payload: Mapping[str, Any], key: str, source_label: str) -> str | None:
        value = payload.get(key)
        if value is not None and not isinstance(value, str):
            raise ValueError(f"`{key}` in {source_label} must be a string.")
        return _clean_text(value)

    @staticmethod
    def _optional_boolean(payload: Mapping[str, Any], key: str, default: bool) -> bool:
        value = payload.get(key)
        if value is None:
            return default
        parsed = _parse_flag(value)
        if parsed is None:
            raise ValueError(
                f"`{key}` must be a boolean value (`true`/`false`, `1`/`0`, `yes`/`no`)."
            )
        return parsed
