"""File-type to parser mapping for the formatters.

The table is finite: unknown file types raise `UnsupportedFileTypeError`
rather than falling through to a default parser.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType

from ..errors import UnsupportedFileTypeError

AMP_FILE_TYPE = "amp"


@dataclass(frozen=True, slots=True)
class ParserSpec:
    """Parser selection for one file type.

    Attributes:
        name: Parser name reported in diagnostics (`html`, `babel`, ...).
        backend: Formatter backend key (`ampscript`, `html`, `script`, `json`,
            `yaml`, `stylesheet`, `markdown`, `sql`).
        plugin: Optional plugin the backend needs for this parser.
    """

    name: str
    backend: str
    plugin: str | None = None


AMPSCRIPT = ParserSpec(name="ampscript", backend="ampscript")
_HTML = ParserSpec(name="html", backend="html")
_BABEL = ParserSpec(name="babel", backend="script")
_BABEL_TS = ParserSpec(name="babel-ts", backend="script")
_JSON = ParserSpec(name="json", backend="json")
_YAML = ParserSpec(name="yaml", backend="yaml")
_CSS = ParserSpec(name="css", backend="stylesheet")
_LESS = ParserSpec(name="less", backend="stylesheet")
_SCSS = ParserSpec(name="scss", backend="stylesheet")
_MARKDOWN = ParserSpec(name="markdown", backend="markdown")
_SQL = ParserSpec(name="sql", backend="sql", plugin="sqlparse")

PARSERS_BY_FILE_TYPE = MappingProxyType(
    {
        AMP_FILE_TYPE: AMPSCRIPT,
        "htm": _HTML,
        "html": _HTML,
        "js": _BABEL,
        "ssjs": _BABEL,
        "ts": _BABEL_TS,
        "json": _JSON,
        "yaml": _YAML,
        "yml": _YAML,
        "css": _CSS,
        "less": _LESS,
        "sass": _SCSS,
        "scss": _SCSS,
        "md": _MARKDOWN,
        "sql": _SQL,
    }
)


def normalize_file_type(file_type: str) -> str:
    """Lower-case a file type and drop a leading dot (`.HTML` -> `html`)."""

    return file_type.strip().lstrip(".").lower()


def parser_for(file_type: str) -> ParserSpec:
    """Return the parser for `file_type` or raise `UnsupportedFileTypeError`."""

    try:
        return PARSERS_BY_FILE_TYPE[normalize_file_type(file_type)]
    except KeyError:
        raise UnsupportedFileTypeError(file_type) from None


def is_supported(file_type: str) -> bool:
    return normalize_file_type(file_type) in PARSERS_BY_FILE_TYPE
