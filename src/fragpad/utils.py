"""Terminal text measurement helpers (ANSI aware, grapheme aware)."""

from __future__ import annotations

import re
import unicodedata

import grapheme
import wcwidth as _wcwidth

# SGR and the few cursor/erase sequences that can appear in styled lines.
_ANSI_RE = re.compile(r"\x1b\[[0-9;]*[mGKHJ]")

_CONTROL_RE = re.compile("[\x00-\x1f\x7f-\x9f\ud800-\udfff]")

REPLACEMENT_CHAR = "\ufffd"

_width_cache: dict[str, int] = {}
_WIDTH_CACHE_MAX = 512


def strip_ansi(text: str) -> str:
    return _ANSI_RE.sub("", text)


def sanitize_line(line: str) -> str:
    """Make *line* safe to paint, keeping one character per cell position.

    Tabs become a single space and other control characters the
    replacement character, so string indices and columns still line up
    for plain text.
    """
    if _CONTROL_RE.search(line) is None:
        return line
    return _CONTROL_RE.sub(lambda m: " " if m.group() == "\t" else REPLACEMENT_CHAR, line)


def grapheme_width(cluster: str) -> int:
    """Cells taken by one grapheme cluster."""
    if not cluster:
        return 0
    first = cluster[0]
    if len(cluster) > 1:
        # Emoji presentation, ZWJ sequences, skin tones and flags are wide.
        for ch in cluster:
            cp = ord(ch)
            if cp in (0xFE0F, 0x200D) or 0x1F3FB <= cp <= 0x1F3FF or 0x1F1E6 <= cp <= 0x1F1FF:
                return 2
        if unicodedata.category(first) in ("Mn", "Me", "Cf"):
            return 0
    return max(_wcwidth.wcwidth(first), 0)


def visible_width(text: str) -> int:
    """Cells *text* occupies once ANSI codes are removed."""
    if not text:
        return 0
    stripped = strip_ansi(text)
    if stripped.isascii() and stripped.isprintable():
        return len(stripped)

    cached = _width_cache.get(stripped)
    if cached is not None:
        return cached

    width = sum(grapheme_width(cluster) for cluster in grapheme.graphemes(stripped))
    if len(_width_cache) >= _WIDTH_CACHE_MAX:
        _width_cache.clear()
    _width_cache[stripped] = width
    return width


def truncate_to_width(text: str, max_width: int, ellipsis: str = "", pad: bool = False) -> str:
    """Cut *text* to *max_width* cells, keeping ANSI codes intact.

    When the text is cut, *ellipsis* replaces its tail. With *pad* the result
    is right-padded with spaces to exactly *max_width* cells.
    """
    if max_width <= 0:
        return ""
    width = visible_width(text)
    if width <= max_width:
        return text + " " * (max_width - width) if pad else text

    target = max_width - visible_width(ellipsis)
    if target <= 0:
        return _take_columns(ellipsis, max_width)
    result = _take_columns(text, target) + ellipsis
    if pad:
        result += " " * (max_width - visible_width(result))
    return result


def _take_columns(text: str, max_cols: int) -> str:
    parts: list[str] = []
    cols = 0
    pos = 0
    while pos < len(text):
        match = _ANSI_RE.match(text, pos)
        if match:
            parts.append(match.group())
            pos = match.end()
            continue
        # Plain text up to the next escape sequence.
        end = text.find("\x1b", pos + 1)
        chunk = text[pos:] if end == -1 else text[pos:end]
        for cluster in grapheme.graphemes(chunk):
            width = grapheme_width(cluster)
            if cols + width > max_cols:
                return "".join(parts)
            parts.append(cluster)
            cols += width
        pos += len(chunk)
    return "".join(parts)
