"""Rendering backend: paints render models onto a terminal.

Only rows that changed since the previous frame are rewritten. Render
requests made while one is pending coalesce into a single paint on the next
event loop tick, and paints happen in request order.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from fragpad.render import RenderModel
from fragpad.terminal import Terminal

logger = logging.getLogger(__name__)

_SEGMENT_RESET = "\x1b[0m"


def _apply_line_reset(line: str) -> str:
    """Terminate styled lines so attributes never bleed into the next row."""
    if "\x1b[" not in line or line.endswith(_SEGMENT_RESET):
        return line
    return line + _SEGMENT_RESET


class Screen:
    """Differential painter for a full-screen application."""

    def __init__(self, terminal: Terminal, compose: Callable[[], RenderModel]) -> None:
        self.terminal = terminal
        self._compose = compose
        self._previous_lines: list[str] = []
        self._previous_size: tuple[int, int] = (0, 0)
        self._render_requested = False
        self._stopped = True
        self._full_redraw_count = 0

    @property
    def full_redraws(self) -> int:
        return self._full_redraw_count

    def start(self) -> None:
        self._stopped = False
        self.terminal.enter_alternate_screen()
        self.invalidate()
        self.request_render()

    def stop(self) -> None:
        self._stopped = True
        self.terminal.show_cursor()
        self.terminal.leave_alternate_screen()

    def invalidate(self) -> None:
        """Forget the previous frame so the next paint redraws everything."""
        self._previous_lines = []
        self._previous_size = (0, 0)

    def request_render(self) -> None:
        """Schedule a paint on the next event loop tick."""
        if self._render_requested:
            return
        self._render_requested = True
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No running loop: paint synchronously.
            self._render_tick()
            return
        loop.call_soon(self._render_tick)

    def _render_tick(self) -> None:
        self._render_requested = False
        if self._stopped:
            return
        self.paint(self._compose())

    def paint(self, model: RenderModel) -> None:
        size = (self.terminal.columns, self.terminal.rows)
        full = size != self._previous_size
        lines = [_apply_line_reset(line) for line in model.lines[: size[1]]]

        out: list[str] = ["\x1b[?25l"]
        if full:
            self._full_redraw_count += 1
            logger.debug("Full redraw at %dx%d", *size)
            out.append("\x1b[H\x1b[2J")

        previous = [] if full else self._previous_lines
        for row in range(max(len(lines), len(previous))):
            new_line = lines[row] if row < len(lines) else ""
            old_line = previous[row] if row < len(previous) else None
            if new_line == old_line:
                continue
            out.append(f"\x1b[{row + 1};1H{new_line}\x1b[K")

        out.append(f"\x1b[{model.cursor_row + 1};{model.cursor_col + 1}H")
        if model.show_cursor:
            out.append("\x1b[?25h")

        self.terminal.write("".join(out))
        self._previous_lines = lines
        self._previous_size = size
