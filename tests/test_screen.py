"""Tests for fragpad.screen -- differential painting.

Uses the VirtualTerminal to capture output and check that only changed rows
are rewritten.
"""

from __future__ import annotations

import asyncio

import pytest

from fragpad.render import RenderModel
from fragpad.screen import Screen

from .virtual_terminal import VirtualTerminal


class Frames:
    """Compose callback returning whatever model the test sets."""

    def __init__(self, *lines: str) -> None:
        self.model = RenderModel(lines=list(lines), cursor_row=0, cursor_col=0)
        self.calls = 0

    def __call__(self) -> RenderModel:
        self.calls += 1
        return self.model


def _started(terminal: VirtualTerminal, frames: Frames) -> Screen:
    screen = Screen(terminal, frames)
    screen.start()
    terminal.clear_buffer()
    return screen


class TestLifecycle:
    def test_start_paints_full_frame(self) -> None:
        terminal = VirtualTerminal(rows=5, columns=20)
        frames = Frames("one", "two")
        screen = Screen(terminal, frames)
        screen.start()
        assert terminal.alternate_screen
        assert "\x1b[2J" in terminal.output
        assert "\x1b[1;1Hone\x1b[K" in terminal.output
        assert "\x1b[2;1Htwo\x1b[K" in terminal.output
        assert screen.full_redraws == 1

    def test_stop_restores_screen_and_ignores_renders(self) -> None:
        terminal = VirtualTerminal()
        frames = Frames("x")
        screen = _started(terminal, frames)
        screen.stop()
        assert not terminal.alternate_screen
        assert terminal.cursor_visible
        calls = frames.calls
        screen.request_render()
        assert frames.calls == calls


class TestDifferentialPaint:
    def test_unchanged_frame_writes_no_rows(self) -> None:
        terminal = VirtualTerminal(rows=5)
        frames = Frames("a", "b")
        screen = _started(terminal, frames)
        screen.request_render()
        assert "\x1b[K" not in terminal.output
        assert terminal.output.endswith("\x1b[1;1H\x1b[?25h")

    def test_only_changed_row_is_rewritten(self) -> None:
        terminal = VirtualTerminal(rows=5)
        frames = Frames("a", "b", "c")
        screen = _started(terminal, frames)
        frames.model = RenderModel(lines=["a", "B", "c"], cursor_row=1, cursor_col=1)
        screen.request_render()
        assert "\x1b[2;1HB\x1b[K" in terminal.output
        assert "\x1b[1;1H" + "a" not in terminal.output
        assert "\x1b[2;2H" in terminal.output

    def test_removed_rows_are_cleared(self) -> None:
        terminal = VirtualTerminal(rows=5)
        frames = Frames("a", "b")
        screen = _started(terminal, frames)
        frames.model = RenderModel(lines=["a"], cursor_row=0, cursor_col=0)
        screen.request_render()
        assert "\x1b[2;1H\x1b[K" in terminal.output

    def test_resize_forces_full_redraw(self) -> None:
        terminal = VirtualTerminal(rows=5)
        frames = Frames("a")
        screen = _started(terminal, frames)
        terminal.rows = 8
        screen.request_render()
        assert screen.full_redraws == 2
        assert "\x1b[2J" in terminal.output

    def test_invalidate_forces_full_redraw(self) -> None:
        terminal = VirtualTerminal()
        frames = Frames("a")
        screen = _started(terminal, frames)
        screen.invalidate()
        screen.request_render()
        assert screen.full_redraws == 2

    def test_hidden_cursor_stays_hidden(self) -> None:
        terminal = VirtualTerminal()
        frames = Frames("a")
        screen = _started(terminal, frames)
        frames.model = RenderModel(lines=["a"], cursor_row=0, cursor_col=0, show_cursor=False)
        screen.request_render()
        assert not terminal.output.endswith("\x1b[?25h")

    def test_styled_rows_are_reset(self) -> None:
        terminal = VirtualTerminal()
        screen = Screen(terminal, Frames("\x1b[31mred"))
        screen.start()
        assert "\x1b[31mred\x1b[0m\x1b[K" in terminal.output

class TestCoalescing:
    @pytest.mark.asyncio
    async def test_requests_in_one_tick_paint_once(self) -> None:
        terminal = VirtualTerminal()
        frames = Frames("a")
        screen = Screen(terminal, frames)
        screen.start()
        screen.request_render()
        screen.request_render()
        assert frames.calls == 0
        await asyncio.sleep(0)
        assert frames.calls == 1
