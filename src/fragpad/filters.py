"""Formatter and highlighter collaborators.

Both are pure line transforms. A failing filter logs and hands back its
input unchanged so a bad fragment can never take the editor down.
"""

from __future__ import annotations

import ast
import logging
import textwrap
from typing import Protocol

from pygments import highlight as pygments_highlight
from pygments.formatters import Terminal256Formatter
from pygments.lexers import PythonLexer
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

logger = logging.getLogger(__name__)

MAX_BLANK_RUN = 2


class Formatter(Protocol):
    def format(self, lines: list[str]) -> list[str]: ...


class Highlighter(Protocol):
    def highlight(self, lines: list[str]) -> list[str]: ...


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


class TidyFormatter:
    """Whitespace normaliser for Python source.

    Expands tabs, strips trailing whitespace, removes common indentation and
    collapses long runs of blank lines. When the input parses, the result is
    used only if it has the same syntax tree, so text inside string literals
    is never altered.
    """

    def __init__(self, indent_width: int = 4) -> None:
        self.indent_width = indent_width

    def format(self, lines: list[str]) -> list[str]:
        try:
            return self._format(lines)
        except Exception:
            logger.exception("Formatter failed; leaving code unchanged")
            return list(lines)

    def _format(self, lines: list[str]) -> list[str]:
        expanded = [line.expandtabs(self.indent_width).rstrip() for line in lines]
        dedented = textwrap.dedent("\n".join(expanded)).split("\n")

        result: list[str] = []
        blank_run = 0
        for line in dedented:
            blank_run = blank_run + 1 if not line else 0
            if blank_run <= MAX_BLANK_RUN:
                result.append(line)

        before = _syntax_tree(lines)
        if before is not None and _syntax_tree(result) != before:
            logger.debug("Formatting would change the program; keeping original")
            return list(lines)
        return result or [""]


def _syntax_tree(lines: list[str]) -> str | None:
    """``ast.dump`` of the source, or ``None`` when it does not parse.

    Positions are left out, so two sources compare equal exactly when they
    differ only in layout.
    """
    try:
        return ast.dump(ast.parse("\n".join(lines)))
    except (SyntaxError, ValueError):
        return None


class NullFormatter:
    def format(self, lines: list[str]) -> list[str]:
        return list(lines)


# ---------------------------------------------------------------------------
# Highlighting
# ---------------------------------------------------------------------------


def normalize_style(style: str, fallback: str = "monokai") -> str:
    try:
        get_style_by_name(style)
    except ClassNotFound:
        logger.warning("Unknown highlight style %r, using %r", style, fallback)
        return fallback
    return style


class PygmentsHighlighter:
    """Colours Python source with pygments, one styled line per input line."""

    def __init__(self, style: str = "monokai") -> None:
        self.style = normalize_style(style)
        self._lexer = PythonLexer(stripnl=False, ensurenl=True)
        self._formatter = Terminal256Formatter(style=self.style)

    def highlight(self, lines: list[str]) -> list[str]:
        try:
            rendered = pygments_highlight("\n".join(lines), self._lexer, self._formatter)
        except Exception:
            logger.exception("Highlighter failed; rendering plain code")
            return list(lines)

        styled = rendered.split("\n")
        if styled and styled[-1] == "" and len(styled) == len(lines) + 1:
            styled.pop()
        if len(styled) != len(lines):
            logger.debug("Highlighter changed the line count; rendering plain code")
            return list(lines)
        return styled


class PlainHighlighter:
    def highlight(self, lines: list[str]) -> list[str]:
        return list(lines)
