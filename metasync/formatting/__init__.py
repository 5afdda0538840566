"""Content beautifiers used before artifacts are written.

This package contains the AMPscript beautifier, the general formatter
backends, project style resolution, and the fallback protocol combining them.
"""

from .amp import AmpBeautifier
from .fallback import FormatterFallback
from .filetypes import ParserSpec, parser_for
from .general import GeneralFormatter
from .style import FormatterState, StyleOptions

__all__ = [
    "AmpBeautifier",
    "FormatterFallback",
    "FormatterState",
    "GeneralFormatter",
    "ParserSpec",
    "StyleOptions",
    "parser_for",
]
