"""Editor actions and the keys bound to them."""

from __future__ import annotations

import logging
from typing import Literal, get_args

from fragpad.keys import KeyId, normalize_key_id, parse_key

logger = logging.getLogger(__name__)

EditorAction = Literal[
    # Cursor movement
    "cursorUp",
    "cursorDown",
    "cursorLeft",
    "cursorRight",
    "cursorWordLeft",
    "cursorWordRight",
    "cursorLineStart",
    "cursorLineEnd",
    "pageUp",
    "pageDown",
    "scrollUp",
    "scrollDown",
    # Editing
    "deleteCharBackward",
    "deleteCharForward",
    "newLine",
    "clearLine",
    "tab",
    "find",
    "cancel",
    # Execution
    "run",
    "runAll",
    "clearOutputs",
    # Fragments
    "previousFragment",
    "nextFragment",
    "moveFragmentUp",
    "moveFragmentDown",
    "deleteFragment",
    "splitFragment",
    "toggleDetached",
    "revisionBack",
    "revisionForward",
    # Contexts
    "resetContext",
    "newContext",
    "deleteContext",
    "previousContext",
    "nextContext",
    # Application
    "help",
    "quit",
]

ACTIONS: tuple[str, ...] = get_args(EditorAction)

EditorKeybindingsConfig = dict[EditorAction, KeyId | list[KeyId]]

DEFAULT_EDITOR_KEYBINDINGS: dict[EditorAction, KeyId | list[KeyId]] = {
    # Cursor movement
    "cursorUp": "up",
    "cursorDown": "down",
    "cursorLeft": "left",
    "cursorRight": "right",
    "cursorWordLeft": "ctrl+left",
    "cursorWordRight": "ctrl+right",
    "cursorLineStart": "home",
    "cursorLineEnd": "end",
    "pageUp": "pageUp",
    "pageDown": "pageDown",
    "scrollUp": "alt+pageUp",
    "scrollDown": "alt+pageDown",
    # Editing
    "deleteCharBackward": "backspace",
    "deleteCharForward": "delete",
    "newLine": "enter",
    "clearLine": "ctrl+d",
    "tab": "tab",
    "find": "ctrl+f",
    "cancel": "escape",
    # Execution
    "run": "ctrl+r",
    "runAll": "ctrl+alt+r",
    "clearOutputs": "ctrl+l",
    # Fragments
    "previousFragment": "ctrl+pageUp",
    "nextFragment": "ctrl+pageDown",
    "moveFragmentUp": "ctrl+up",
    "moveFragmentDown": "ctrl+down",
    "deleteFragment": "ctrl+k",
    "splitFragment": "ctrl+insert",
    "toggleDetached": "insert",
    "revisionBack": "alt+up",
    "revisionForward": "alt+down",
    # Contexts
    "resetContext": "ctrl+n",
    "newContext": "ctrl+alt+n",
    "deleteContext": "ctrl+alt+k",
    "previousContext": "ctrl+alt+left",
    "nextContext": "ctrl+alt+right",
    # Application
    "help": "f1",
    "quit": "ctrl+c",
}

ACTION_DESCRIPTIONS: dict[EditorAction, str] = {
    "pageUp": "cursor up one page",
    "pageDown": "cursor down one page",
    "scrollUp": "scroll up (cursor stays)",
    "scrollDown": "scroll down (cursor stays)",
    "cursorWordLeft": "previous word",
    "cursorWordRight": "next word",
    "cursorLineStart": "start of line",
    "cursorLineEnd": "end of line",
    "clearLine": "clear line, or delete it when empty",
    "tab": "autocomplete, or indent",
    "find": "find in fragment",
    "run": "run fragment",
    "runAll": "run all fragments",
    "clearOutputs": "clear all fragment outputs",
    "previousFragment": "previous fragment",
    "nextFragment": "next fragment",
    "moveFragmentUp": "move fragment up",
    "moveFragmentDown": "move fragment down",
    "deleteFragment": "remove fragment",
    "splitFragment": "split fragment at cursor",
    "toggleDetached": "detach/attach fragment",
    "revisionBack": "previous fragment revision",
    "revisionForward": "next fragment revision",
    "resetContext": "clear context (keeps code)",
    "newContext": "new context",
    "deleteContext": "delete context",
    "previousContext": "previous context",
    "nextContext": "next context",
    "help": "this help",
    "quit": "exit (press twice)",
}


class EditorKeybindingsManager:
    """Maps actions to keys: defaults overlaid with user configuration."""

    def __init__(self, config: EditorKeybindingsConfig | None = None) -> None:
        self._action_to_keys: dict[EditorAction, list[KeyId]] = {}
        self._key_to_action: dict[KeyId, EditorAction] = {}
        self._build_maps(config or {})

    def _build_maps(self, config: EditorKeybindingsConfig) -> None:
        self._action_to_keys.clear()
        self._key_to_action.clear()

        for action, keys in DEFAULT_EDITOR_KEYBINDINGS.items():
            self._action_to_keys[action] = _normalize_keys(keys)

        for action, keys in config.items():
            if action not in ACTIONS:
                logger.warning("Ignoring keybinding for unknown action %r", action)
                continue
            self._action_to_keys[action] = _normalize_keys(keys)

        # A key bound twice goes to the configured action first.
        configured = [action for action in config if action in ACTIONS]
        for action in [*configured, *self._action_to_keys]:
            for key in self._action_to_keys[action]:
                self._key_to_action.setdefault(key, action)

    def matches(self, data: str, action: EditorAction) -> bool:
        """Check if raw input triggers *action*."""
        key = parse_key(data)
        return key is not None and key in self._action_to_keys.get(action, [])

    def action_for(self, data: str) -> EditorAction | None:
        """The action raw input *data* triggers, if any."""
        key = parse_key(data)
        if key is None:
            return None
        return self._key_to_action.get(key)

    def get_keys(self, action: EditorAction) -> list[KeyId]:
        return self._action_to_keys.get(action, [])

    def set_config(self, config: EditorKeybindingsConfig) -> None:
        self._build_maps(config)

    def help_text(self) -> str:
        """One line per described action: its keys and what it does."""
        lines = ["==== fragpad keys ===="]
        for action, description in ACTION_DESCRIPTIONS.items():
            keys = ", ".join(self.get_keys(action)) or "(unbound)"
            lines.append(f"  {keys:<16} {description}")
        return "\n".join(lines)


def _normalize_keys(keys: KeyId | list[KeyId]) -> list[KeyId]:
    key_array = keys if isinstance(keys, list) else [keys]
    normalized: list[KeyId] = []
    for key in key_array:
        canonical = normalize_key_id(key) if isinstance(key, str) else None
        if canonical is None:
            logger.warning("Ignoring malformed key id %r", key)
            continue
        normalized.append(canonical)
    return normalized

