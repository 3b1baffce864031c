"""The terminal fragpad draws on.

``Terminal`` is what the screen and the application need from a terminal;
``ProcessTerminal`` implements it on the controlling tty of the process:
raw mode, bracketed paste, window title and alternate screen, with window
size changes reported through SIGWINCH.
"""

from __future__ import annotations

import asyncio
import codecs
import logging
import os
import signal
import sys
import termios
import tty
from typing import Callable, Protocol

from fragpad.errors import IOFailure
from fragpad.input_buffer import InputBuffer

logger = logging.getLogger(__name__)

PASTE_MODE_ON = "\x1b[?2004h"
PASTE_MODE_OFF = "\x1b[?2004l"
ALT_SCREEN_ON = "\x1b[?1049h"
ALT_SCREEN_OFF = "\x1b[?1049l"
CURSOR_HIDDEN = "\x1b[?25l"
CURSOR_SHOWN = "\x1b[?25h"

READ_CHUNK = 4096
FALLBACK_SIZE = (80, 24)


class Terminal(Protocol):
    """Output, size and lifecycle of a character terminal."""

    @property
    def columns(self) -> int: ...

    @property
    def rows(self) -> int: ...

    def start(
        self,
        on_input: Callable[[str], None],
        on_paste: Callable[[str], None],
        on_resize: Callable[[], None],
    ) -> None:
        """Begin delivering key sequences, pastes and size changes."""
        ...

    def stop(self) -> None: ...

    def write(self, data: str) -> None: ...

    def hide_cursor(self) -> None: ...

    def show_cursor(self) -> None: ...

    def enter_alternate_screen(self) -> None: ...

    def leave_alternate_screen(self) -> None: ...

    def set_title(self, title: str) -> None: ...


def _window_size() -> os.terminal_size:
    try:
        return os.get_terminal_size(sys.stdout.fileno())
    except (ValueError, OSError):
        return os.terminal_size(FALLBACK_SIZE)


class ProcessTerminal:
    """The tty behind ``sys.stdin`` and ``sys.stdout``.

    Input is decoded with ``surrogateescape``: 8-bit meta bytes that are not
    valid UTF-8 reach the key parser as lone surrogates.

    ``FRAGPAD_WRITE_LOG`` names a file that receives a copy of every
    write, for inspecting escape output.
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="surrogateescape")
        self._keys: InputBuffer | None = None
        self._on_resize: Callable[[], None] | None = None
        self._saved_mode: list | None = None
        self._saved_sigwinch: Callable | int | None = None
        self._reading = False
        self._write_log = os.environ.get("FRAGPAD_WRITE_LOG", "")

    @property
    def columns(self) -> int:
        return _window_size().columns

    @property
    def rows(self) -> int:
        return _window_size().lines

    # -- Lifecycle -------------------------------------------------------------

    def start(
        self,
        on_input: Callable[[str], None],
        on_paste: Callable[[str], None],
        on_resize: Callable[[], None],
    ) -> None:
        """Switch stdin to raw mode and start reading it on the running loop.

        Raises :class:`IOFailure` when stdin is not a terminal; nothing has
        been changed in that case.
        """
        try:
            fd = sys.stdin.fileno()
            saved = termios.tcgetattr(fd)
            tty.setraw(fd)
        except (termios.error, OSError, ValueError) as e:
            raise IOFailure(f"Cannot put the terminal into raw mode: {e}") from e
        self._saved_mode = saved

        self._keys = InputBuffer(on_input, on_paste)
        self._on_resize = on_resize
        self._saved_sigwinch = signal.signal(signal.SIGWINCH, self._handle_sigwinch)
        asyncio.get_running_loop().add_reader(fd, self._read_stdin)
        self._reading = True
        self._emit(PASTE_MODE_ON)
        logger.debug("Terminal started (%dx%d)", self.columns, self.rows)

    def stop(self) -> None:
        """Undo everything :meth:`start` did. Safe to call twice."""
        self._emit(PASTE_MODE_OFF)

        if self._reading:
            self._reading = False
            try:
                asyncio.get_running_loop().remove_reader(sys.stdin.fileno())
            except (RuntimeError, ValueError) as e:
                logger.debug("stdin reader already gone: %s", e)

        if self._keys is not None:
            self._keys.clear()
            self._keys = None

        if self._saved_sigwinch is not None:
            signal.signal(signal.SIGWINCH, self._saved_sigwinch)
            self._saved_sigwinch = None
        self._on_resize = None

        if self._saved_mode is not None:
            termios.tcsetattr(sys.stdin.fileno(), termios.TCSADRAIN, self._saved_mode)
            self._saved_mode = None
        logger.debug("Terminal stopped")

    # -- Output ----------------------------------------------------------------

    def write(self, data: str) -> None:
        self._emit(data)
        if not self._write_log:
            return
        try:
            with open(self._write_log, "a", encoding="utf-8") as log:
                log.write(data)
        except OSError as e:
            logger.warning("Disabling write log %s: %s", self._write_log, e)
            self._write_log = ""

    def hide_cursor(self) -> None:
        self._emit(CURSOR_HIDDEN)

    def show_cursor(self) -> None:
        self._emit(CURSOR_SHOWN)

    def enter_alternate_screen(self) -> None:
        self._emit(ALT_SCREEN_ON)

    def leave_alternate_screen(self) -> None:
        self._emit(ALT_SCREEN_OFF)

    def set_title(self, title: str) -> None:
        self._emit(f"\x1b]0;{title}\x07")

    # -- Internal --------------------------------------------------------------

    def _emit(self, data: str) -> None:
        try:
            sys.stdout.write(data)
            sys.stdout.flush()
        except OSError as e:
            logger.debug("Terminal write failed: %s", e)

    def _read_stdin(self) -> None:
        try:
            chunk = os.read(sys.stdin.fileno(), READ_CHUNK)
        except OSError as e:
            logger.debug("stdin read failed: %s", e)
            return
        text = self._decoder.decode(chunk)
        if text and self._keys is not None:
            self._keys.feed(text)

    def _handle_sigwinch(self, signum: int, frame: object) -> None:
        if self._on_resize is not None:
            self._on_resize()
