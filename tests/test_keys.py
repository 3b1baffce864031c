"""Tests for fragpad.keys -- keyboard input parsing and matching."""

from __future__ import annotations

import pytest

from fragpad.keys import (
    describe_input,
    matches_key,
    normalize_key_id,
    parse_key,
    printable_text,
    split_key_id,
)


# ---------------------------------------------------------------------------
# Key id normalisation
# ---------------------------------------------------------------------------


class TestNormalizeKeyId:
    @pytest.mark.parametrize(
        "key_id, expected",
        [
            ("ctrl+r", "ctrl+r"),
            ("alt+ctrl+r", "ctrl+alt+r"),
            ("Ctrl+Shift+Up", "ctrl+shift+up"),
            ("F1", "f1"),
            ("pgup", "pageUp"),
            ("ctrl+PageDown", "ctrl+pageDown"),
            ("esc", "escape"),
            ("R", "shift+r"),
            ("ctrl++", "ctrl++"),
        ],
    )
    def test_canonical_spelling(self, key_id: str, expected: str) -> None:
        assert normalize_key_id(key_id) == expected

    @pytest.mark.parametrize("key_id", ["", "hyper+a", "ctrl+"])
    def test_malformed(self, key_id: str) -> None:
        assert normalize_key_id(key_id) is None

    def test_split(self) -> None:
        assert split_key_id("ctrl+alt+n") == (6, "n")


# ---------------------------------------------------------------------------
# Raw input parsing
# ---------------------------------------------------------------------------


class TestParseKeySimple:
    @pytest.mark.parametrize(
        "data, expected",
        [
            ("\x1b", "escape"),
            ("\r", "enter"),
            ("\t", "tab"),
            ("\x7f", "backspace"),
            (" ", "space"),
            ("a", "a"),
            ("A", "shift+a"),
            ("\u00e9", "\u00e9"),
            ("\x12", "ctrl+r"),
            ("\x03", "ctrl+c"),
            ("\x00", "ctrl+space"),
        ],
    )
    def test_single_characters(self, data: str, expected: str) -> None:
        assert parse_key(data) == expected

    def test_empty(self) -> None:
        assert parse_key("") is None


class TestParseKeyEscapes:
    @pytest.mark.parametrize(
        "data, expected",
        [
            ("\x1b[A", "up"),
            ("\x1bOB", "down"),
            ("\x1b[H", "home"),
            ("\x1b[4~", "end"),
            ("\x1b[5~", "pageUp"),
            ("\x1b[6~", "pageDown"),
            ("\x1b[2~", "insert"),
            ("\x1b[3~", "delete"),
            ("\x1bOP", "f1"),
            ("\x1b[11~", "f1"),
            ("\x1b[[A", "f1"),
            ("\x1b[Z", "shift+tab"),
            ("\x1b[1;5A", "ctrl+up"),
            ("\x1b[1;5C", "ctrl+right"),
            ("\x1b[5;5~", "ctrl+pageUp"),
            ("\x1b[2;5~", "ctrl+insert"),
            ("\x1b[5;3~", "alt+pageUp"),
            ("\x1b[1;3A", "alt+up"),
            ("\x1b[1;7D", "ctrl+alt+left"),
            ("\x1b[1;2A", "shift+up"),
            ("\x1bO5A", "ctrl+up"),
        ],
    )
    def test_sequences(self, data: str, expected: str) -> None:
        assert parse_key(data) == expected

    def test_unknown_sequence(self) -> None:
        assert parse_key("\x1b[99~") is None


class TestParseKeyMeta:
    def test_esc_prefix_adds_alt(self) -> None:
        assert parse_key("\x1bx") == "alt+x"
        assert parse_key("\x1b\x12") == "ctrl+alt+r"
        assert parse_key("\x1b\x0e") == "ctrl+alt+n"

    def test_double_escape_sequence_adds_alt(self) -> None:
        assert parse_key("\x1b\x1b[A") == "alt+up"
        assert parse_key("\x1b\x1b[5~") == "alt+pageUp"

    def test_eight_bit_meta_via_surrogate_escape(self) -> None:
        # Byte 0x92 (meta + ctrl+r) decoded with errors="surrogateescape".
        data = b"\x92".decode("utf-8", errors="surrogateescape")
        assert parse_key(data) == "ctrl+alt+r"

    def test_eight_bit_meta_as_c1_code_point(self) -> None:
        assert parse_key("\x8e") == "ctrl+alt+n"


class TestMatchesKey:
    def test_matches(self) -> None:
        assert matches_key("\x12", "ctrl+r")
        assert matches_key("\x1b[1;7C", "alt+ctrl+right")
        assert not matches_key("\x12", "ctrl+t")
        assert not matches_key("\x1b[99~", "f1")


# ---------------------------------------------------------------------------
# Text and diagnostics
# ---------------------------------------------------------------------------


class TestPrintableText:
    @pytest.mark.parametrize("data", ["a", "Z", " ", "hello world", "\u65e5\u672c", "\u00e9"])
    def test_text(self, data: str) -> None:
        assert printable_text(data) == data

    @pytest.mark.parametrize("data", ["", "\x1b[A", "\x03", "\x7f", "\x8e", "a\nb", "\udc92"])
    def test_not_text(self, data: str) -> None:
        assert printable_text(data) is None


class TestDescribeInput:
    def test_hex_of_raw_bytes(self) -> None:
        assert describe_input("\x1b[99~") == "1b5b39397e"

    def test_surrogate_escaped_byte(self) -> None:
        assert describe_input("\udc92") == "92"
