"""Project style configuration for the general formatter.

Responsibilities:
- Locate the project-level style file in the project root.
- Resolve indentation/width options for one file type, applying overrides.
- Track resolution state in a caller-owned `FormatterState` handle.

Key types:
- `StyleOptions`: resolved formatting options.
- `FormatterState`: mutable resolution state passed into every format call.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from fnmatch import fnmatch
from pathlib import Path
from typing import Any, Mapping

import yaml

from ..errors import StyleConfigError

STYLE_FILE_NAMES = (
    ".prettierrc",
    ".prettierrc.json",
    ".prettierrc.yaml",
    ".prettierrc.yml",
)
PACKAGE_JSON_NAME = "package.json"
PACKAGE_JSON_STYLE_KEY = "prettier"

STATUS_UNRESOLVED = "unresolved"
STATUS_RESOLVED = "resolved"
STATUS_FAILED = "failed"

# style file key -> (StyleOptions field, expected type)
_OPTION_KEYS: Mapping[str, tuple[str, type]] = {
    "tabWidth": ("tab_width", int),
    "useTabs": ("use_tabs", bool),
    "printWidth": ("print_width", int),
}


@dataclass(frozen=True, slots=True)
class StyleOptions:
    """Formatting options resolved from the project style file.

    Attributes:
        tab_width: Spaces per indentation level.
        use_tabs: Indent with tabs instead of spaces.
        print_width: Preferred maximum line length.
    """

    tab_width: int = 2
    use_tabs: bool = False
    print_width: int = 80

    @property
    def indent(self) -> str:
        """Return the string used for one indentation level."""

        return "\t" if self.use_tabs else " " * self.tab_width


@dataclass(slots=True)
class FormatterState:
    """Caller-owned formatter configuration handle.

    Attributes:
        status: `unresolved`, `resolved` or `failed`. `failed` is sticky.
        file_type: File type the options were resolved for.
        options: Resolved options when `status` is `resolved`.
        source_path: Style file the options were read from.
    """

    status: str = STATUS_UNRESOLVED
    file_type: str | None = None
    options: StyleOptions | None = None
    source_path: Path | None = None
    failure_reason: str | None = field(default=None)

    @property
    def is_resolved(self) -> bool:
        return self.status == STATUS_RESOLVED

    @property
    def is_failed(self) -> bool:
        return self.status == STATUS_FAILED

    def needs_resolution(self, file_type: str) -> bool:
        """Return whether options must be (re)resolved for `file_type`."""

        if self.status == STATUS_FAILED:
            return False
        return self.status == STATUS_UNRESOLVED or self.file_type != file_type

    def mark_resolved(self, file_type: str, options: StyleOptions, source_path: Path) -> None:
        self.status = STATUS_RESOLVED
        self.file_type = file_type
        self.options = options
        self.source_path = source_path
        self.failure_reason = None

    def mark_failed(self, file_type: str, reason: str) -> None:
        self.status = STATUS_FAILED
        self.file_type = file_type
        self.options = None
        self.source_path = None
        self.failure_reason = reason


def find_style_file(project_root: Path) -> tuple[Path, Mapping[str, Any]] | None:
    """Return the first style file in `project_root` and its parsed payload."""

    for name in STYLE_FILE_NAMES:
        candidate = project_root / name
        if candidate.is_file():
            return candidate, _load_mapping(candidate)

    package_json = project_root / PACKAGE_JSON_NAME
    if package_json.is_file():
        payload = _load_mapping(package_json)
        style = payload.get(PACKAGE_JSON_STYLE_KEY)
        if isinstance(style, Mapping):
            return package_json, style
    return None


def resolve_style_options(
    project_root: Path, file_type: str
) -> tuple[StyleOptions, Path] | None:
    """Resolve options for `file_type`, or `None` when no style file exists.

    Overrides apply when their `files` glob matches `index.<file_type>`, so the
    same project can resolve different options per file type.
    """

    found = find_style_file(project_root)
    if found is None:
        return None
    source_path, payload = found

    options = _apply_options(StyleOptions(), payload, source_path)
    probe_name = f"index.{file_type}"
    overrides = payload.get("overrides", [])
    if not isinstance(overrides, list):
        raise StyleConfigError(f"`overrides` in `{source_path}` must be a list.")
    for override in overrides:
        if not isinstance(override, Mapping):
            raise StyleConfigError(f"Each override in `{source_path}` must be a mapping.")
        if not _override_matches(override, probe_name, source_path):
            continue
        override_options = override.get("options", {})
        if not isinstance(override_options, Mapping):
            raise StyleConfigError(f"Override `options` in `{source_path}` must be a mapping.")
        options = _apply_options(options, override_options, source_path)
    return options, source_path


def default_style_payload() -> dict[str, object]:
    """Return the style file payload written by `metasync init-style`."""

    return {
        "tabWidth": 4,
        "useTabs": False,
        "printWidth": 100,
        "overrides": [
            {"files": ["*.json", "*.yml", "*.yaml"], "options": {"tabWidth": 2}},
        ],
    }


def _load_mapping(path: Path) -> Mapping[str, Any]:
    try:
        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise StyleConfigError(f"Cannot parse style file `{path}`: {exc}") from exc
    if payload is None:
        return {}
    if not isinstance(payload, Mapping):
        raise StyleConfigError(f"Style file `{path}` must contain a top-level mapping/object.")
    return payload


def _as_patterns(value: object, key: str, source_path: Path) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return list(value)
    raise StyleConfigError(
        f"Override `{key}` in `{source_path}` must be a glob or a list of globs."
    )


def _override_matches(override: Mapping[str, Any], probe_name: str, source_path: Path) -> bool:
    included = _as_patterns(override.get("files"), "files", source_path)
    excluded = _as_patterns(override.get("excludeFiles"), "excludeFiles", source_path)
    if not any(fnmatch(probe_name, pattern) for pattern in included):
        return False
    return not any(fnmatch(probe_name, pattern) for pattern in excluded)


def _apply_options(
    base: StyleOptions, payload: Mapping[str, Any], source_path: Path
) -> StyleOptions:
    changes: dict[str, object] = {}
    for key, (field_name, expected_type) in _OPTION_KEYS.items():
        if key not in payload:
            continue
        value = payload[key]
        # bool is an int subclass; reject it for numeric options
        if not isinstance(value, expected_type) or (
            expected_type is int and isinstance(value, bool)
        ):
            raise StyleConfigError(
                f"`{key}` in `{source_path}` must be of type {expected_type.__name__}."
            )
        if expected_type is int and value <= 0:
            raise StyleConfigError(f"`{key}` in `{source_path}` must be a positive integer.")
        changes[field_name] = value
    return replace(base, **changes) if changes else base
