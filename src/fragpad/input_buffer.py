"""Reassembles raw stdin chunks into key sequences and paste payloads.

Input can arrive split at arbitrary points, so an escape sequence may span
two reads. Incomplete sequences are held back until more data arrives or a
short timeout passes (a lone ESC is the escape key). Bracketed paste blocks
are delivered whole through a separate callback.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Literal

ESC = "\x1b"
BRACKETED_PASTE_START = "\x1b[200~"
BRACKETED_PASTE_END = "\x1b[201~"

SequenceState = Literal["complete", "incomplete", "text"]


def sequence_state(data: str) -> SequenceState:
    """Classify *data*, which starts at a sequence boundary."""
    if not data.startswith(ESC):
        return "text"
    if len(data) == 1:
        return "incomplete"

    introducer = data[1]
    if introducer == "[":
        # CSI ends with a final byte in 0x40..0x7e; "ESC [ [ X" is the
        # linux console function key form.
        body = data[2:]
        if not body:
            return "incomplete"
        if body.startswith("[") and len(body) < 2:
            return "incomplete"
        if body.startswith("["):
            return "complete"
        return "complete" if 0x40 <= ord(body[-1]) <= 0x7E else "incomplete"
    if introducer == "O":
        if len(data) < 3:
            return "incomplete"
        # SS3 may carry a modifier digit before the final letter.
        if data[2].isdigit():
            return "complete" if len(data) >= 4 else "incomplete"
        return "complete"
    if introducer == ESC:
        # ESC ESC <sequence>: meta applied to an escape sequence.
        if len(data) == 2:
            return "incomplete"
        return sequence_state(data[1:])
    return "complete"


def split_sequences(buffer: str) -> tuple[list[str], str]:
    """Split *buffer* into complete sequences plus an incomplete remainder."""
    sequences: list[str] = []
    pos = 0
    while pos < len(buffer):
        if buffer[pos] != ESC:
            sequences.append(buffer[pos])
            pos += 1
            continue

        end = pos + 1
        while True:
            state = sequence_state(buffer[pos:end])
            if state == "complete":
                break
            if end >= len(buffer):
                return sequences, buffer[pos:]
            end += 1
        sequences.append(buffer[pos:end])
        pos = end
    return sequences, ""


class InputBuffer:
    """Feeds complete key sequences to *on_key* and pastes to *on_paste*."""

    def __init__(
        self,
        on_key: Callable[[str], None],
        on_paste: Callable[[str], None],
        *,
        timeout: float = 0.01,
    ) -> None:
        self._on_key = on_key
        self._on_paste = on_paste
        self._timeout = timeout
        self._pending = ""
        self._paste: str | None = None
        self._timer: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> str:
        return self._pending

    @property
    def in_paste(self) -> bool:
        return self._paste is not None

    def feed(self, data: str) -> None:
        self._cancel_timer()
        self._pending += data

        while self._pending:
            if self._paste is not None:
                self._paste += self._pending
                self._pending = ""
                end = self._paste.find(BRACKETED_PASTE_END)
                if end == -1:
                    return
                pasted = self._paste[:end]
                self._pending = self._paste[end + len(BRACKETED_PASTE_END) :]
                self._paste = None
                self._on_paste(pasted)
                continue

            start = self._pending.find(BRACKETED_PASTE_START)
            if start != -1:
                before = self._pending[:start]
                self._pending = self._pending[start + len(BRACKETED_PASTE_START) :]
                self._paste = ""
                sequences, remainder = split_sequences(before)
                for sequence in sequences + ([remainder] if remainder else []):
                    self._on_key(sequence)
                continue

            sequences, self._pending = split_sequences(self._pending)
            for sequence in sequences:
                self._on_key(sequence)
            break

        if self._pending:
            self._schedule_flush()

    def flush(self) -> None:
        """Deliver whatever is held back as one sequence."""
        self._cancel_timer()
        if self._pending and self._paste is None:
            pending, self._pending = self._pending, ""
            self._on_key(pending)

    def clear(self) -> None:
        self._cancel_timer()
        self._pending = ""
        self._paste = None

    def _schedule_flush(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop (tests, synchronous use): nothing more can arrive.
            self.flush()
            return
        self._timer = loop.call_later(self._timeout, self.flush)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
