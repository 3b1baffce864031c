"""Input dispatcher: turns key sequences into session operations.

Three modes:

* ``edit``: keys run the bound action or insert text.
* ``find``: keys build a search term; enter jumps to the next match.
* ``suggest``: a completion is staged; enter accepts it.

A key that leaves ``find`` or ``suggest`` without being consumed is then
handled in ``edit`` mode. Recoverable errors raised by an operation become
footer notices; the state they refer to is left unchanged.
"""

from __future__ import annotations

import logging
from typing import Callable, Literal

from fragpad.autocomplete import Completion, namespace_view, resolve
from fragpad.errors import FragpadError
from fragpad.keybindings import EditorAction
from fragpad.keys import describe_input, printable_text
from fragpad.render import find_prompt
from fragpad.session import Session

logger = logging.getLogger(__name__)

Mode = Literal["edit", "find", "suggest"]

QUIT_PROMPT = "<<< Again if you mean it! >>>"
EXACT_MATCH = "<exact match>"
NO_COMPLETIONS = "<no completions>"
MAX_LISTED_CANDIDATES = 10


class InputDispatcher:
    def __init__(self, session: Session, on_quit: Callable[[], None] | None = None) -> None:
        self.session = session
        self.on_quit = on_quit
        self.mode: Mode = "edit"
        self.search_term = ""
        self.completion: Completion | None = None
        self.quit_requested = False
        self._quit_armed = False
        self._actions: dict[EditorAction, Callable[[], None]] = {
            "cursorUp": lambda: self._document.move_cursor("up"),
            "cursorDown": lambda: self._document.move_cursor("down"),
            "cursorLeft": lambda: self._document.move_cursor("left"),
            "cursorRight": lambda: self._document.move_cursor("right"),
            "cursorWordLeft": lambda: self._document.move_word_left(),
            "cursorWordRight": lambda: self._document.move_word_right(),
            "cursorLineStart": lambda: self._document.move_line_start(),
            "cursorLineEnd": lambda: self._document.move_line_end(),
            "pageUp": lambda: self._document.page_cursor(-self._step),
            "pageDown": lambda: self._document.page_cursor(self._step),
            "scrollUp": lambda: self._scroll(-self._step),
            "scrollDown": lambda: self._scroll(self._step),
            "deleteCharBackward": lambda: self._document.delete_before(),
            "deleteCharForward": lambda: self._document.delete_at(),
            "newLine": lambda: self._document.split_line(),
            "clearLine": lambda: self._document.clear_line(),
            "tab": self._tab,
            "find": self._start_find,
            "cancel": lambda: None,
            "run": lambda: self.session.runner.run(self.session.context),
            "runAll": lambda: self.session.runner.run_all(self.session.context),
            "clearOutputs": lambda: self._document.clear_outputs(),
            "previousFragment": lambda: self._document.focus_previous(),
            "nextFragment": lambda: self._document.focus_next(),
            "moveFragmentUp": lambda: self._document.move_fragment(-1),
            "moveFragmentDown": lambda: self._document.move_fragment(1),
            "deleteFragment": lambda: self._document.delete_fragment(),
            "splitFragment": lambda: self._document.split_fragment(),
            "toggleDetached": lambda: self._document.toggle_detached(),
            "revisionBack": lambda: self._navigate_revision("back"),
            "revisionForward": lambda: self._navigate_revision("forward"),
            "resetContext": lambda: self.session.contexts.reset(),
            "newContext": lambda: self.session.contexts.create_scratch(),
            "deleteContext": lambda: self.session.contexts.delete(),
            "previousContext": lambda: self.session.contexts.switch("previous"),
            "nextContext": lambda: self.session.contexts.switch("next"),
            "help": lambda: self.session.notify(self.session.help_text()),
            "quit": self._quit,
        }

    @property
    def _document(self):
        return self.session.document

    @property
    def _step(self) -> int:
        return self.session.context.options.scroll_speed

    # -- Entry points -----------------------------------------------------------

    def handle_input(self, data: str) -> None:
        """Process one complete key sequence."""
        self.session.clear_notices()
        quit_armed, self._quit_armed = self._quit_armed, False
        try:
            if self.mode == "find" and self._handle_find(data):
                return
            if self.mode == "suggest" and self._handle_suggest(data):
                return
            self._handle_edit(data, quit_armed)
        except FragpadError as e:
            logger.debug("Operation refused: %s", e)
            self.session.notify(str(e))
        finally:
            self.session.prompt = find_prompt(self.search_term) if self.mode == "find" else None

    def handle_paste(self, text: str) -> None:
        """Insert pasted text at the cursor (or into the search term)."""
        self.session.clear_notices()
        self._quit_armed = False
        if self.mode == "find":
            first_line = text.replace("\r", "\n").split("\n", 1)[0]
            self.search_term += printable_text(first_line) or ""
            self.session.prompt = find_prompt(self.search_term)
            return
        self._dismiss_suggestion()
        try:
            self._document.insert_text(text)
        except FragpadError as e:
            self.session.notify(str(e))
        self.session.follow_cursor = True

    def handle_resize(self, width: int, height: int) -> None:
        self.session.viewport.resize(width, height)

    # -- Modes --------------------------------------------------------------------

    def _handle_find(self, data: str) -> bool:
        action = self.session.keybindings.action_for(data)
        if action == "deleteCharBackward":
            if self.search_term:
                self.search_term = self.search_term[:-1]
            else:
                self.mode = "edit"
            return True
        if action == "newLine":
            term, self.search_term = self.search_term, ""
            self.mode = "edit"
            if term and not self._document.find(term):
                self.session.notify(f"<not found: {term}>")
            self.session.follow_cursor = True
            return True
        if action == "cancel":
            self.search_term = ""
            self.mode = "edit"
            return True

        text = printable_text(data) if action is None else None
        if text is not None:
            self.search_term += text
            return True

        self.search_term = ""
        self.mode = "edit"
        return False

    def _handle_suggest(self, data: str) -> bool:
        completion = self.completion
        if completion is not None and self.session.keybindings.action_for(data) == "newLine":
            self._dismiss_suggestion()
            if completion.staged is not None:
                self._document.replace_before_cursor(completion.offset, completion.staged)
            return True
        self._dismiss_suggestion()
        return False

    def _handle_edit(self, data: str, quit_armed: bool) -> None:
        action = self.session.keybindings.action_for(data)
        if action == "quit":
            self._quit_armed = quit_armed
        if action is not None:
            self._actions[action]()
            if action not in ("scrollUp", "scrollDown"):
                self.session.follow_cursor = True
            return

        text = printable_text(data)
        if text is None:
            # Unbound and not text: show the raw bytes so new keys can be identified.
            self.session.notify(f"<{describe_input(data)}>")
            return
        self._document.insert_text(text)
        self.session.follow_cursor = True

    # -- Actions ------------------------------------------------------------------

    def _quit(self) -> None:
        if self._quit_armed:
            self.quit_requested = True
            logger.info("Quit confirmed")
            if self.on_quit is not None:
                self.on_quit()
            return
        self._quit_armed = True
        self.session.notify(QUIT_PROMPT)

    def _scroll(self, lines: int) -> None:
        self.session.viewport.scroll(lines)
        self.session.follow_cursor = False

    def _start_find(self) -> None:
        self.mode = "find"
        self.search_term = ""

    def _navigate_revision(self, direction: Literal["back", "forward"]) -> None:
        context = self.session.context
        fragment = context.document.require_active()
        context.history.navigate(context.document, fragment.name, direction)

    def _tab(self) -> None:
        context = self.session.context
        fragment = context.document.require_active()
        before = fragment.current_line[: fragment.edit.col]

        if not before or before[-1].isspace():
            context.document.insert_char(" " * context.options.indent_width)
            return

        completion = resolve(before, namespace_view(context.namespace))
        if completion.exact:
            self.session.notify(EXACT_MATCH)
            return
        if not completion.candidates:
            self.session.notify(NO_COMPLETIONS)
            return

        self.completion = completion
        self.mode = "suggest"
        head = "".join(f"{segment}." for segment in completion.path)
        listed = completion.candidates[:MAX_LISTED_CANDIDATES]
        lines = ["<", *(f"    {head}{candidate}" for candidate in listed)]
        hidden = len(completion.candidates) - len(listed)
        if hidden > 0:
            lines.append(f"    ... {hidden} more")
        lines.append(">")
        self.session.notify("\n".join(lines))

    def _dismiss_suggestion(self) -> None:
        self.completion = None
        if self.mode == "suggest":
            self.mode = "edit"
