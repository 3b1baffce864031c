"""Application loop: wires the terminal, the screen and the dispatcher."""

from __future__ import annotations

import asyncio
import logging

from fragpad.dispatcher import InputDispatcher
from fragpad.screen import Screen
from fragpad.session import Session
from fragpad.terminal import ProcessTerminal, Terminal

logger = logging.getLogger(__name__)

TITLE = "fragpad"


class App:
    """Runs one session on a terminal until the user quits."""

    def __init__(self, session: Session, terminal: Terminal | None = None) -> None:
        self.session = session
        self.terminal: Terminal = terminal or ProcessTerminal()
        self.screen = Screen(self.terminal, session.compose)
        self.dispatcher = InputDispatcher(session, on_quit=self.stop)
        self._loop: asyncio.AbstractEventLoop | None = None
        self._done: asyncio.Future[None] | None = None

    async def run(self) -> None:
        """Take over the terminal and process input until quit.

        Raises :class:`~fragpad.errors.IOFailure` if the terminal cannot be
        put into raw mode; nothing has been drawn at that point.
        """
        self._loop = asyncio.get_running_loop()
        self._done = self._loop.create_future()
        self.session.viewport.resize(self.terminal.columns, self.terminal.rows)

        self.terminal.start(self._on_input, self._on_paste, self._on_resize)
        logger.info("Session started (%dx%d)", self.terminal.columns, self.terminal.rows)
        try:
            self.terminal.set_title(TITLE)
            self.screen.start()
            await self._done
        finally:
            self.screen.stop()
            self.terminal.stop()
            logger.info("Session ended")

    def stop(self) -> None:
        if self._done is not None and not self._done.done():
            self._done.set_result(None)

    # -- Terminal callbacks -------------------------------------------------

    def _on_input(self, data: str) -> None:
        self.dispatcher.handle_input(data)
        self.screen.request_render()

    def _on_paste(self, text: str) -> None:
        self.dispatcher.handle_paste(text)
        self.screen.request_render()

    def _on_resize(self) -> None:
        # Called from a signal handler: hand over to the loop.
        if self._loop is not None:
            self._loop.call_soon_threadsafe(self._apply_resize)
        else:
            self._apply_resize()

    def _apply_resize(self) -> None:
        self.dispatcher.handle_resize(self.terminal.columns, self.terminal.rows)
        self.screen.invalidate()
        self.screen.request_render()
