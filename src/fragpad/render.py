"""Builds the render model: the visible lines plus the cursor position.

The flattened buffer of a context is, in document order, each fragment's
code lines (behind a two-cell gutter) followed by its output lines.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from fragpad.utils import sanitize_line, truncate_to_width, visible_width

if TYPE_CHECKING:
    from fragpad.context import Context
    from fragpad.filters import Highlighter
    from fragpad.fragment import Fragment
    from fragpad.viewport import Viewport

GUTTER_WIDTH = 2

RESET = "\x1b[0m"
BG_ERROR = "\x1b[41m"
BG_DETACHED = "\x1b[43;30m"
BG_EVEN = "\x1b[44;37m"
BG_ODD = "\x1b[42;30m"
NOTICE_STYLE = "\x1b[44;37;1m"
PROMPT_TERM_STYLE = "\x1b[31m"

MARK_EXECUTED = " "
MARK_PENDING = "|"


@dataclass
class FlatBuffer:
    """A context flattened into lines, with the cursor's buffer position."""

    lines: list[str] = field(default_factory=list)
    cursor_line: int = 0
    cursor_col: int = 0


@dataclass
class RenderModel:
    """What the screen should show: exactly ``height`` lines or fewer."""

    lines: list[str]
    cursor_row: int
    cursor_col: int
    show_cursor: bool = True


def gutter(fragment: Fragment, index: int) -> str:
    mark = MARK_EXECUTED if fragment.edit.executed else MARK_PENDING
    if fragment.edit.error:
        background = BG_ERROR
    elif fragment.detached:
        background = BG_DETACHED
    else:
        background = BG_EVEN if index % 2 == 0 else BG_ODD
    return f"{background}{mark}{RESET} "


def flatten(context: Context, highlighter: Highlighter | None = None) -> FlatBuffer:
    """Flatten *context* into display lines and locate the cursor."""
    buffer = FlatBuffer()
    document = context.document
    use_highlight = highlighter is not None and context.options.highlight

    for index, fragment in enumerate(document):
        plain = [sanitize_line(line) for line in fragment.code]
        styled = highlighter.highlight(plain) if use_highlight else plain
        prefix = gutter(fragment, index)

        if fragment is document.active:
            row = fragment.edit.row
            buffer.cursor_line = len(buffer.lines) + row
            buffer.cursor_col = GUTTER_WIDTH + visible_width(plain[row][: fragment.edit.col])

        buffer.lines.extend(prefix + line for line in styled)
        buffer.lines.extend(sanitize_line(line) for line in fragment.out)

    return buffer


def build_render_model(
    buffer: FlatBuffer,
    viewport: Viewport,
    *,
    follow_cursor: bool = True,
    notices: list[str] | None = None,
    prompt: str | None = None,
) -> RenderModel:
    """Slice *buffer* through *viewport* and overlay the footer.

    With *follow_cursor* the viewport scrolls to keep the cursor inside its
    margins; otherwise it keeps its position and the cursor is hidden when
    it falls outside the window. Footer rows (notices, then the prompt)
    cover the bottom of the window.
    """
    doc_height = len(buffer.lines)
    if follow_cursor:
        viewport.follow(buffer.cursor_line, doc_height)
    else:
        viewport.doc_height = doc_height
        viewport.first_line = viewport.clamp(viewport.first_line)

    width = viewport.width
    visible = [
        truncate_to_width(buffer.lines[i], width) for i in viewport.visible_range()
    ]

    footer = [NOTICE_STYLE + truncate_to_width(line, width, "...") + RESET for line in notices or []]
    if prompt is not None:
        footer.append(truncate_to_width(prompt, width, "..."))
    footer = footer[-max(0, viewport.height - 1):] if viewport.height > 1 else []

    if footer:
        visible += [""] * max(0, viewport.height - len(visible))
        visible[len(visible) - len(footer):] = footer

    screen_row = viewport.screen_row(buffer.cursor_line)
    show_cursor = screen_row is not None
    cursor_row = screen_row if screen_row is not None else 0
    cursor_col = min(buffer.cursor_col, max(0, width - 1))
    if prompt is not None:
        # The prompt owns the cursor while it is shown.
        cursor_row = len(visible) - 1
        cursor_col = min(visible_width(prompt), max(0, width - 1))
        show_cursor = True

    return RenderModel(
        lines=visible,
        cursor_row=cursor_row,
        cursor_col=cursor_col,
        show_cursor=show_cursor,
    )


def find_prompt(term: str) -> str:
    return f">> FIND: {PROMPT_TERM_STYLE}{term}{RESET}"
