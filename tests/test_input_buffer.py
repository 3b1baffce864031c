"""Tests for fragpad.input_buffer -- splitting stdin into keys and pastes."""

from __future__ import annotations

import asyncio

import pytest

from fragpad.input_buffer import (
    BRACKETED_PASTE_END,
    BRACKETED_PASTE_START,
    InputBuffer,
    sequence_state,
    split_sequences,
)


class Recorder:
    def __init__(self) -> None:
        self.keys: list[str] = []
        self.pastes: list[str] = []

    def buffer(self, **kwargs) -> InputBuffer:
        return InputBuffer(self.keys.append, self.pastes.append, **kwargs)


class TestSequenceState:
    @pytest.mark.parametrize(
        "data, state",
        [
            ("a", "text"),
            ("\x1b", "incomplete"),
            ("\x1b[", "incomplete"),
            ("\x1b[1;5", "incomplete"),
            ("\x1b[1;5A", "complete"),
            ("\x1b[5~", "complete"),
            ("\x1b[[", "incomplete"),
            ("\x1b[[A", "complete"),
            ("\x1bO", "incomplete"),
            ("\x1bOP", "complete"),
            ("\x1bO5", "incomplete"),
            ("\x1bO5A", "complete"),
            ("\x1b\x1b", "incomplete"),
            ("\x1b\x1b[A", "complete"),
            ("\x1bx", "complete"),
        ],
    )
    def test_states(self, data: str, state: str) -> None:
        assert sequence_state(data) == state


class TestSplitSequences:
    def test_mixed_input(self) -> None:
        sequences, remainder = split_sequences("ab\x1b[Ac\x1b\x12")
        assert sequences == ["a", "b", "\x1b[A", "c", "\x1b\x12"]
        assert remainder == ""

    def test_incomplete_tail_is_held(self) -> None:
        sequences, remainder = split_sequences("x\x1b[1;")
        assert sequences == ["x"]
        assert remainder == "\x1b[1;"


class TestInputBufferSync:
    def test_keys_delivered_in_order(self) -> None:
        recorder = Recorder()
        recorder.buffer().feed("hi\x1b[B")
        assert recorder.keys == ["h", "i", "\x1b[B"]

    def test_lone_escape_flushes_without_loop(self) -> None:
        recorder = Recorder()
        buffer = recorder.buffer()
        buffer.feed("\x1b")
        assert recorder.keys == ["\x1b"]
        assert buffer.pending == ""

    def test_bracketed_paste(self) -> None:
        recorder = Recorder()
        recorder.buffer().feed(f"a{BRACKETED_PASTE_START}x = 1\ny\x1b[A{BRACKETED_PASTE_END}b")
        assert recorder.keys == ["a", "b"]
        assert recorder.pastes == ["x = 1\ny\x1b[A"]

    def test_paste_spanning_chunks(self) -> None:
        recorder = Recorder()
        buffer = recorder.buffer()
        buffer.feed(BRACKETED_PASTE_START + "part one ")
        assert buffer.in_paste
        buffer.feed("part two\x1b[20")
        buffer.feed("1~z")
        assert recorder.pastes == ["part one part two"]
        assert recorder.keys == ["z"]
        assert not buffer.in_paste

    def test_clear(self) -> None:
        recorder = Recorder()
        buffer = recorder.buffer()
        buffer.feed(BRACKETED_PASTE_START + "abc")
        buffer.clear()
        assert not buffer.in_paste
        assert buffer.pending == ""


class TestInputBufferAsync:
    @pytest.mark.asyncio
    async def test_sequence_split_across_reads_is_reassembled(self) -> None:
        recorder = Recorder()
        buffer = recorder.buffer(timeout=0.05)
        buffer.feed("\x1b[1;")
        assert buffer.pending == "\x1b[1;"
        buffer.feed("5A")
        assert recorder.keys == ["\x1b[1;5A"]

    @pytest.mark.asyncio
    async def test_pending_escape_flushes_after_timeout(self) -> None:
        recorder = Recorder()
        buffer = recorder.buffer(timeout=0.01)
        buffer.feed("\x1b")
        assert recorder.keys == []
        await asyncio.sleep(0.05)
        assert recorder.keys == ["\x1b"]
