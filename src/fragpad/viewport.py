"""Viewport controller: maps the flattened document onto the terminal window."""

from __future__ import annotations

from dataclasses import dataclass

TOP_MARGIN = 2
BOTTOM_MARGIN = 2


@dataclass
class Viewport:
    """Visible window onto the flattened render buffer.

    ``first_line`` is the index of the first visible buffer line and
    ``doc_height`` the buffer length seen by the last render.
    """

    height: int = 24
    width: int = 80
    first_line: int = 0
    doc_height: int = 0

    def resize(self, width: int, height: int) -> None:
        self.width = max(1, width)
        self.height = max(1, height)
        self.first_line = self.clamp(self.first_line)

    def max_first_line(self) -> int:
        return max(0, self.doc_height - self.height + BOTTOM_MARGIN)

    def clamp(self, first_line: int) -> int:
        return max(0, min(first_line, self.max_first_line()))

    def follow(self, cursor_line: int, doc_height: int) -> None:
        """Scroll just enough to keep *cursor_line* inside the margins.

        *cursor_line* is the cursor's index in the flattened buffer.
        """
        self.doc_height = doc_height
        top = min(TOP_MARGIN, max(0, (self.height - 1) // 2))
        bottom = min(BOTTOM_MARGIN, max(0, self.height - 1 - top))

        first = self.first_line
        if cursor_line - first < top:
            first = cursor_line - top
        elif cursor_line - first > self.height - 1 - bottom:
            first = cursor_line - (self.height - 1 - bottom)
        self.first_line = self.clamp(first)

    def scroll(self, lines: int) -> None:
        """Free scroll: move the window by *lines* without touching the cursor."""
        self.first_line = self.clamp(self.first_line + lines)

    def screen_row(self, buffer_line: int) -> int | None:
        """Screen row of *buffer_line*, or ``None`` when it is off screen."""
        row = buffer_line - self.first_line
        if 0 <= row < self.height:
            return row
        return None

    def visible_range(self) -> range:
        return range(self.first_line, min(self.doc_height, self.first_line + self.height))
