"""Tests for fragpad.viewport -- cursor following and free scrolling."""

from __future__ import annotations

from fragpad.viewport import BOTTOM_MARGIN, TOP_MARGIN, Viewport


class TestFollow:
    def test_short_document_stays_at_top(self) -> None:
        viewport = Viewport(height=10)
        viewport.follow(3, 5)
        assert viewport.first_line == 0

    def test_scrolls_down_to_keep_bottom_margin(self) -> None:
        viewport = Viewport(height=10)
        viewport.follow(20, 100)
        assert viewport.first_line == 20 - (10 - 1 - BOTTOM_MARGIN)
        assert viewport.screen_row(20) == 10 - 1 - BOTTOM_MARGIN

    def test_scrolls_up_to_keep_top_margin(self) -> None:
        viewport = Viewport(height=10, first_line=50)
        viewport.follow(51, 100)
        assert viewport.first_line == 51 - TOP_MARGIN

    def test_inside_margins_does_not_scroll(self) -> None:
        viewport = Viewport(height=10, first_line=10)
        viewport.follow(14, 100)
        assert viewport.first_line == 10

    def test_cursor_always_visible(self) -> None:
        viewport = Viewport(height=7)
        for cursor in list(range(0, 60, 3)) + list(range(60, 0, -5)):
            viewport.follow(cursor, 60)
            assert viewport.screen_row(cursor) is not None

    def test_tiny_height(self) -> None:
        viewport = Viewport(height=1)
        viewport.follow(5, 10)
        assert viewport.screen_row(5) == 0


class TestScroll:
    def test_scroll_is_clamped(self) -> None:
        viewport = Viewport(height=10, doc_height=30)
        viewport.scroll(-5)
        assert viewport.first_line == 0
        viewport.scroll(1000)
        assert viewport.first_line == 30 - 10 + BOTTOM_MARGIN

    def test_screen_row_off_screen(self) -> None:
        viewport = Viewport(height=5, first_line=10, doc_height=40)
        assert viewport.screen_row(9) is None
        assert viewport.screen_row(15) is None
        assert viewport.screen_row(12) == 2

    def test_visible_range(self) -> None:
        viewport = Viewport(height=5, first_line=2, doc_height=4)
        assert list(viewport.visible_range()) == [2, 3]

    def test_resize_reclamps(self) -> None:
        viewport = Viewport(height=5, first_line=20, doc_height=25)
        viewport.resize(100, 30)
        assert (viewport.width, viewport.height) == (100, 30)
        assert viewport.first_line == 0
