"""Tests for fragpad.fragment -- the fragment entity and its clone."""

from __future__ import annotations

from fragpad.fragment import EditState, Fragment, create_fragment


class TestCreateFragment:
    def test_empty_fragment_has_one_empty_line(self) -> None:
        fragment = create_fragment("frag_0")
        assert fragment.code == [""]
        assert fragment.revision == -1
        assert fragment.detached is False
        assert fragment.out == []
        assert fragment.edit == EditState()
        assert fragment.is_empty()

    def test_code_is_copied(self) -> None:
        lines = ["a = 1", "a"]
        fragment = create_fragment("f", lines)
        lines.append("b")
        assert fragment.code == ["a = 1", "a"]

    def test_empty_code_list_becomes_single_line(self) -> None:
        assert create_fragment("f", []).code == [""]


class TestCursorClamp:
    def test_set_code_pulls_cursor_into_range(self) -> None:
        fragment = create_fragment("f", ["abcdef", "ghijkl"])
        fragment.edit.row = 1
        fragment.edit.col = 6
        fragment.set_code(["xy"])
        assert (fragment.edit.row, fragment.edit.col) == (0, 2)

    def test_clamp_negative_values(self) -> None:
        fragment = create_fragment("f", ["abc"])
        fragment.edit.row = -3
        fragment.edit.col = -1
        fragment.clamp_cursor()
        assert (fragment.edit.row, fragment.edit.col) == (0, 0)

    def test_current_line_and_text(self) -> None:
        fragment = create_fragment("f", ["x = 1", "x + 1"])
        fragment.edit.row = 1
        assert fragment.current_line == "x + 1"
        assert fragment.text() == "x = 1\nx + 1"


class TestReset:
    def test_reset_keeps_name_and_revision(self) -> None:
        fragment = create_fragment("f", ["x = 1"])
        fragment.revision = 3
        fragment.out = ["=> 1"]
        fragment.edit.executed = True
        fragment.edit.col = 4
        fragment.reset()
        assert fragment.name == "f"
        assert fragment.revision == 3
        assert fragment.code == [""]
        assert fragment.out == []
        assert fragment.edit.executed is False
        assert (fragment.edit.row, fragment.edit.col) == (0, 0)


class TestClone:
    def test_clone_is_equal_but_independent(self) -> None:
        fragment = Fragment(name="f", code=["a", "b"], out=["=> 1"])
        fragment.edit.row = 1
        copy = fragment.clone()
        assert copy == fragment

        fragment.code.append("c")
        fragment.out.clear()
        fragment.edit.row = 0
        assert copy.code == ["a", "b"]
        assert copy.out == ["=> 1"]
        assert copy.edit.row == 1
