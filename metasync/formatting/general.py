"""General-purpose code formatter backends.

Each backend beautifies one family of file types with the project's style
options. Backends raise on content they cannot parse; the caller decides how
to recover.
"""

from __future__ import annotations

import json
from typing import Callable

from bs4 import BeautifulSoup
from bs4.dammit import EntitySubstitution
from bs4.formatter import HTMLFormatter
import cssbeautifier
import jsbeautifier
import mdformat
import sqlparse
import yaml

from .filetypes import ParserSpec
from .style import StyleOptions


def _ensure_trailing_newline(text: str) -> str:
    return text if text.endswith("\n") else text + "\n"


def format_html(content: str, options: StyleOptions) -> str:
    soup = BeautifulSoup(content, "html.parser")
    formatter = HTMLFormatter(
        entity_substitution=EntitySubstitution.substitute_xml,
        indent=options.indent,
    )
    return _ensure_trailing_newline(soup.prettify(formatter=formatter))


def format_script(content: str, options: StyleOptions) -> str:
    beautifier_options = jsbeautifier.default_options()
    beautifier_options.indent_size = options.tab_width
    beautifier_options.indent_with_tabs = options.use_tabs
    beautifier_options.wrap_line_length = options.print_width
    beautifier_options.end_with_newline = True
    return jsbeautifier.beautify(content, beautifier_options)


def format_stylesheet(content: str, options: StyleOptions) -> str:
    beautifier_options = cssbeautifier.default_options()
    beautifier_options.indent_size = options.tab_width
    beautifier_options.indent_with_tabs = options.use_tabs
    beautifier_options.end_with_newline = True
    return cssbeautifier.beautify(content, beautifier_options)


def format_json(content: str, options: StyleOptions) -> str:
    payload = json.loads(content)
    return json.dumps(payload, indent=options.indent, ensure_ascii=False) + "\n"


def format_yaml(content: str, options: StyleOptions) -> str:
    payload = yaml.safe_load(content)
    return yaml.safe_dump(
        payload,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
        indent=max(2, options.tab_width),
        width=options.print_width,
    )


def format_markdown(content: str, options: StyleOptions) -> str:
    """Normalize Markdown, wrapping paragraphs at the print width.

    mdformat always indents nested lists by the marker width, so `tabWidth`
    and `useTabs` do not apply.
    """

    return mdformat.text(content, options={"wrap": options.print_width})


def format_sql(content: str, options: StyleOptions) -> str:
    formatted = sqlparse.format(
        content,
        reindent=True,
        keyword_case="upper",
        indent_width=options.tab_width,
    )
    return _ensure_trailing_newline(formatted)


Backend = Callable[[str, StyleOptions], str]

BACKENDS: dict[str, Backend] = {
    "html": format_html,
    "script": format_script,
    "stylesheet": format_stylesheet,
    "json": format_json,
    "yaml": format_yaml,
    "markdown": format_markdown,
    "sql": format_sql,
}


class GeneralFormatter:
    """Dispatch content to the backend registered for a parser."""

    def __init__(self, backends: dict[str, Backend] | None = None) -> None:
        self.backends = dict(BACKENDS if backends is None else backends)

    def format(self, content: str, parser: ParserSpec, options: StyleOptions) -> str:
        """Beautify `content` with the backend registered for `parser`."""

        backend = self.backends.get(parser.backend)
        if backend is None:
            raise LookupError(f"No formatter backend registered for parser `{parser.name}`.")
        return backend(content, options)
