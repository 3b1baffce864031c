"""Fragment entity: one independently editable and executable unit of code."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field


@dataclass
class EditState:
    """Cursor position and run state of a fragment."""

    row: int = 0
    col: int = 0
    executed: bool = False
    error: bool = False


@dataclass
class Fragment:
    """A named buffer of code lines plus the output of its last run.

    ``code`` is never empty; an empty fragment holds a single empty line.
    ``revision`` is -1 until the first successful run, then the index of
    the matching snapshot in the context's history.
    """

    name: str
    code: list[str] = field(default_factory=lambda: [""])
    revision: int = -1
    detached: bool = False
    out: list[str] = field(default_factory=list)
    edit: EditState = field(default_factory=EditState)

    @property
    def current_line(self) -> str:
        return self.code[self.edit.row]

    def is_empty(self) -> bool:
        return self.code == [""]

    def text(self) -> str:
        return "\n".join(self.code)

    def set_code(self, lines: list[str]) -> None:
        """Replace the code and pull the cursor back into range."""
        self.code = list(lines) if lines else [""]
        self.clamp_cursor()

    def clamp_cursor(self) -> None:
        """Restore ``0 <= row < len(code)`` and ``0 <= col <= len(code[row])``."""
        if not self.code:
            self.code = [""]
        self.edit.row = max(0, min(self.edit.row, len(self.code) - 1))
        self.edit.col = max(0, min(self.edit.col, len(self.code[self.edit.row])))

    def reset(self) -> None:
        """Empty the fragment in place, keeping its name and history."""
        self.code = [""]
        self.out = []
        self.edit.row = 0
        self.edit.col = 0
        self.edit.executed = False

    def clone(self) -> Fragment:
        """Return a fully independent copy (value semantics)."""
        return copy.deepcopy(self)


def create_fragment(name: str, code: list[str] | None = None) -> Fragment:
    """Build an empty fragment, or one holding *code*."""
    fragment = Fragment(name=name)
    if code is not None:
        fragment.set_code(code)
    return fragment
