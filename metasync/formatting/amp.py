"""AMPscript beautifier.

The general formatter cannot parse AMPscript embedded in markup, so code
blocks (`%%[ ... ]%%`) are beautified here: keywords outside string literals
and comments are upper-cased and `IF`/`FOR` bodies are re-indented. Inline
output expressions (`%%= ... =%%`) only lose their inner padding. Markup
outside AMPscript is left untouched.
"""

from __future__ import annotations

import re

from ..errors import AmpSyntaxError

BLOCK_OPEN = "%%["
BLOCK_CLOSE = "]%%"
INLINE_OPEN = "%%="
INLINE_CLOSE = "=%%"

KEYWORDS = frozenset(
    {
        "SET",
        "VAR",
        "IF",
        "THEN",
        "ELSEIF",
        "ELSE",
        "ENDIF",
        "FOR",
        "TO",
        "DOWNTO",
        "DO",
        "NEXT",
        "AND",
        "OR",
        "NOT",
    }
)
_OPENERS = ("IF", "FOR")
_CLOSERS = ("ENDIF", "NEXT")
_DEDENTED_LEADERS = frozenset({"ENDIF", "NEXT", "ELSE", "ELSEIF"})

# strings (quotes are doubled to escape), comment open, words, @variables, anything else
_TOKEN_PATTERN = re.compile(
    r"""'[^']*'?|"[^"]*"?|/\*|@\w*|[A-Za-z_]\w*|.""",
    re.DOTALL,
)
_INLINE_PATTERN = re.compile(r"%%=\s*(.*?)\s*=%%", re.DOTALL)


def contains_ampscript(content: str) -> bool:
    """Return whether `content` embeds AMPscript blocks or inline output."""

    return BLOCK_OPEN in content or INLINE_OPEN in content


class AmpBeautifier:
    """Beautify AMPscript code blocks inside arbitrary content."""

    def __init__(self, indent_size: int = 4, capitalize_keywords: bool = True) -> None:
        self.indent = " " * indent_size
        self.capitalize_keywords = capitalize_keywords

    def beautify(self, content: str) -> str:
        """Return `content` with every AMPscript block beautified.

        Raises:
            AmpSyntaxError: On an unclosed block or unbalanced `IF`/`FOR`.
        """

        pieces: list[str] = []
        position = 0
        while True:
            start = content.find(BLOCK_OPEN, position)
            if start == -1:
                pieces.append(self._tidy_inline(content[position:]))
                break
            end = content.find(BLOCK_CLOSE, start + len(BLOCK_OPEN))
            if end == -1:
                line = content.count("\n", 0, start) + 1
                raise AmpSyntaxError(f"Unclosed AMPscript block starting on line {line}.")
            pieces.append(self._tidy_inline(content[position:start]))
            pieces.append(self._format_block(content[start + len(BLOCK_OPEN) : end]))
            position = end + len(BLOCK_CLOSE)
        return "".join(pieces)

    def _tidy_inline(self, markup: str) -> str:
        return _INLINE_PATTERN.sub(lambda match: f"{INLINE_OPEN}{match.group(1)}{INLINE_CLOSE}", markup)

    def _format_block(self, body: str) -> str:
        lines = body.strip().splitlines()
        formatted: list[str] = []
        level = 0
        in_comment = False
        for raw_line in lines:
            stripped = raw_line.strip()
            if not stripped:
                formatted.append("")
                continue
            starts_in_comment = in_comment
            text, in_comment, keywords = self._scan(stripped, in_comment)
            leader = "" if starts_in_comment else text.split(None, 1)[0].upper()
            print_level = level - 1 if leader in _DEDENTED_LEADERS else level
            if print_level < 0:
                raise AmpSyntaxError(f"Unexpected `{leader}` without matching IF/FOR.")
            level += sum(keywords.count(word) for word in _OPENERS)
            level -= sum(keywords.count(word) for word in _CLOSERS)
            if level < 0:
                raise AmpSyntaxError(f"Unbalanced control structure near `{stripped}`.")
            formatted.append(self.indent * print_level + text)
        if level != 0:
            raise AmpSyntaxError("AMPscript block ends with an unclosed IF/FOR.")
        return f"{BLOCK_OPEN}\n" + "\n".join(formatted) + f"\n{BLOCK_CLOSE}"

    def _scan(self, line: str, in_comment: bool) -> tuple[str, bool, list[str]]:
        """Capitalize keywords in one line; return text, comment state, keywords seen."""

        output: list[str] = []
        keywords: list[str] = []
        position = 0
        while position < len(line):
            if in_comment:
                end = line.find("*/", position)
                if end == -1:
                    output.append(line[position:])
                    break
                output.append(line[position : end + 2])
                position = end + 2
                in_comment = False
                continue
            match = _TOKEN_PATTERN.match(line, position)
            token = match.group(0)
            position = match.end()
            if token == "/*":
                in_comment = True
                output.append(token)
                continue
            upper = token.upper()
            if upper in KEYWORDS:
                keywords.append(upper)
                output.append(upper if self.capitalize_keywords else token)
            else:
                output.append(token)
        return "".join(output), in_comment, keywords
