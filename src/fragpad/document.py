"""Document model: the ordered fragments of one context and the active pointer.

All editing operations act on the active fragment and leave its cursor inside
the code (see :meth:`Fragment.clamp_cursor`). Structural operations raise
:mod:`fragpad.errors` exceptions and apply no change when they fail.
"""

from __future__ import annotations

from typing import Iterable, Literal, Sequence

import grapheme as _grapheme

from fragpad.errors import NamingConflict, NotFound, RefusedOperation
from fragpad.fragment import Fragment, create_fragment

Direction = Literal["up", "down", "left", "right"]

DEFAULT_FRAGMENT_NAME = "frag_0"


class Document:
    """Insertion-ordered mapping of fragment name to fragment.

    Document order is navigation order. ``active`` always references a
    fragment present in the mapping, except while a detached fragment is
    being executed.
    """

    def __init__(self, fragments: Iterable[Fragment] = (), *, counter: int = 0) -> None:
        self._fragments: dict[str, Fragment] = {}
        for fragment in fragments:
            if fragment.name in self._fragments:
                raise NamingConflict(f"Duplicate fragment name '{fragment.name}'")
            self._fragments[fragment.name] = fragment
        self.active: Fragment | None = next(iter(self._fragments.values()), None)
        # Monotonic; names issued once are never issued again.
        self._counter = counter

    @classmethod
    def with_default_fragment(cls) -> Document:
        return cls([create_fragment(DEFAULT_FRAGMENT_NAME)], counter=1)

    # -- Lookup --------------------------------------------------------------

    @property
    def fragments(self) -> dict[str, Fragment]:
        """The live mapping (document order)."""
        return self._fragments

    def names(self) -> list[str]:
        return list(self._fragments)

    def __len__(self) -> int:
        return len(self._fragments)

    def __iter__(self):
        return iter(list(self._fragments.values()))

    def __contains__(self, name: object) -> bool:
        return name in self._fragments

    def get(self, name: str) -> Fragment | None:
        return self._fragments.get(name)

    def require(self, name: str) -> Fragment:
        fragment = self._fragments.get(name)
        if fragment is None:
            raise NotFound(f"No fragment named '{name}'")
        return fragment

    def index_of(self, name: str) -> int:
        try:
            return self.names().index(name)
        except ValueError:
            raise NotFound(f"No fragment named '{name}'") from None

    def require_active(self) -> Fragment:
        if self.active is None:
            raise RefusedOperation("No active fragment")
        return self.active

    def next_fragment_name(self) -> str:
        """Issue the next ``frag_<n>`` name not currently in use."""
        while True:
            name = f"frag_{self._counter}"
            self._counter += 1
            if name not in self._fragments:
                return name

    def unique_name(self, base: str, separator: str = "_") -> str:
        """Return *base* suffixed with the first free counter value."""
        index = 0
        while True:
            candidate = f"{base}{separator}{index}"
            if candidate not in self._fragments:
                return candidate
            index += 1

    # -- Character editing -----------------------------------------------------

    def insert_char(self, ch: str) -> None:
        fragment = self.require_active()
        row, col = fragment.edit.row, fragment.edit.col
        line = fragment.code[row]
        fragment.code[row] = line[:col] + ch + line[col:]
        fragment.edit.col = col + len(ch)
        fragment.edit.executed = False

    def insert_text(self, text: str) -> None:
        """Insert possibly multi-line *text* at the cursor."""
        if not text:
            return
        fragment = self.require_active()
        inserted = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
        if len(inserted) == 1:
            self.insert_char(inserted[0])
            return

        row, col = fragment.edit.row, fragment.edit.col
        line = fragment.code[row]
        before, after = line[:col], line[col:]
        new_lines = [before + inserted[0], *inserted[1:-1], inserted[-1] + after]
        fragment.code[row : row + 1] = new_lines
        fragment.edit.row = row + len(inserted) - 1
        fragment.edit.col = len(inserted[-1])
        fragment.edit.executed = False

    def delete_before(self) -> None:
        """Backspace: remove the grapheme before the cursor or join lines."""
        fragment = self.require_active()
        row, col = fragment.edit.row, fragment.edit.col
        line = fragment.code[row]

        if col > 0:
            graphemes = list(_grapheme.graphemes(line[:col]))
            size = len(graphemes[-1]) if graphemes else 1
            fragment.code[row] = line[: col - size] + line[col:]
            fragment.edit.col = col - size
        elif row > 0:
            previous = fragment.code[row - 1]
            fragment.code[row - 1] = previous + line
            del fragment.code[row]
            fragment.edit.row = row - 1
            fragment.edit.col = len(previous)
        fragment.edit.executed = False

    def delete_at(self) -> None:
        """Delete: remove the grapheme under the cursor or pull up the next line."""
        fragment = self.require_active()
        row, col = fragment.edit.row, fragment.edit.col
        line = fragment.code[row]

        if col < len(line):
            graphemes = list(_grapheme.graphemes(line[col:]))
            size = len(graphemes[0]) if graphemes else 1
            fragment.code[row] = line[:col] + line[col + size :]
        elif row < len(fragment.code) - 1:
            fragment.code[row] = line + fragment.code[row + 1]
            del fragment.code[row + 1]
        fragment.edit.executed = False

    def split_line(self) -> None:
        """Enter: break the line at the cursor; cursor goes to the new line."""
        fragment = self.require_active()
        row, col = fragment.edit.row, fragment.edit.col
        line = fragment.code[row]
        fragment.code[row] = line[:col]
        fragment.code.insert(row + 1, line[col:])
        fragment.edit.row = row + 1
        fragment.edit.col = 0
        fragment.edit.executed = False

    def clear_line(self) -> None:
        """Empty the current line, or remove it when it is already empty."""
        fragment = self.require_active()
        row = fragment.edit.row
        if fragment.code[row]:
            fragment.code[row] = ""
            fragment.edit.col = 0
        elif len(fragment.code) > 1:
            del fragment.code[row]
            if row == len(fragment.code):
                fragment.edit.row = row - 1
        fragment.clamp_cursor()

    def replace_before_cursor(self, length: int, replacement: str) -> None:
        """Replace the *length* characters left of the cursor with *replacement*."""
        fragment = self.require_active()
        row, col = fragment.edit.row, fragment.edit.col
        line = fragment.code[row]
        start = max(0, col - length)
        fragment.code[row] = line[:start] + replacement + line[col:]
        fragment.edit.col = start + len(replacement)
        fragment.edit.executed = False

    # -- Cursor movement -------------------------------------------------------

    def move_cursor(self, direction: Direction) -> None:
        """Move within the fragment, crossing into neighbours at its edges.

        Moving up from the first line focuses the previous fragment; moving
        down from the last line focuses the next one, creating it when the
        current fragment is the last and is not empty. A fragment gaining
        focus keeps its own cursor.
        """
        fragment = self.require_active()
        edit = fragment.edit

        if direction == "left":
            if edit.col > 0:
                edit.col -= 1
        elif direction == "right":
            if edit.col < len(fragment.current_line):
                edit.col += 1
        elif direction == "up":
            if edit.row > 0:
                edit.row -= 1
                edit.col = min(edit.col, len(fragment.current_line))
            else:
                self.focus_previous()
        elif direction == "down":
            if edit.row + 1 < len(fragment.code):
                edit.row += 1
                edit.col = min(edit.col, len(fragment.current_line))
            elif not self.focus_next() and not fragment.is_empty():
                self.active = self.create_fragment()

    def move_line_start(self) -> None:
        self.require_active().edit.col = 0

    def move_line_end(self) -> None:
        fragment = self.require_active()
        fragment.edit.col = len(fragment.current_line)

    def move_word_right(self) -> None:
        fragment = self.require_active()
        line, col = fragment.current_line, fragment.edit.col
        while col < len(line) and not line[col].isspace():
            col += 1
        while col < len(line) and line[col].isspace():
            col += 1
        fragment.edit.col = col

    def move_word_left(self) -> None:
        fragment = self.require_active()
        line, col = fragment.current_line, fragment.edit.col
        while col > 0 and line[col - 1].isspace():
            col -= 1
        while col > 0 and not line[col - 1].isspace():
            col -= 1
        fragment.edit.col = col

    def page_cursor(self, lines: int) -> None:
        """Move the cursor row by *lines* (negative is up), clamped to the fragment."""
        fragment = self.require_active()
        fragment.edit.row += lines
        fragment.clamp_cursor()

    def focus(self, name: str) -> Fragment:
        self.active = self.require(name)
        return self.active

    def focus_previous(self) -> bool:
        names = self.names()
        index = names.index(self.require_active().name)
        if index == 0:
            return False
        self.active = self._fragments[names[index - 1]]
        return True

    def focus_next(self) -> bool:
        names = self.names()
        index = names.index(self.require_active().name)
        if index + 1 >= len(names):
            return False
        self.active = self._fragments[names[index + 1]]
        return True

    def find(self, term: str) -> bool:
        """Jump to the first line at or after the cursor row containing *term*.

        Wraps around to the first match in the fragment when nothing matches
        from the cursor row onwards. Returns ``False`` when there is no match.
        """
        fragment = self.require_active()
        if not term:
            return False
        first: int | None = None
        found: int | None = None
        for index, line in enumerate(fragment.code):
            if term not in line:
                continue
            if first is None:
                first = index
            if index >= fragment.edit.row:
                found = index
                break
        target = found if found is not None else first
        if target is None:
            return False
        fragment.edit.row = target
        fragment.edit.col = fragment.code[target].index(term)
        return True

    # -- Fragment lifecycle ------------------------------------------------------

    def create_fragment(self, name: str | None = None, code: list[str] | None = None) -> Fragment:
        """Append a new fragment at the end of document order."""
        if name is None:
            name = self.next_fragment_name()
        elif name in self._fragments:
            raise NamingConflict(f"Fragment '{name}' already exists")
        fragment = create_fragment(name, code)
        self._fragments[name] = fragment
        if self.active is None:
            self.active = fragment
        return fragment

    def delete_fragment(self, name: str | None = None) -> Fragment:
        """Remove a fragment (the active one by default).

        The only fragment of a document is emptied in place instead. When the
        active fragment goes, focus moves to the following fragment, or to
        the preceding one if it was last.
        """
        fragment = self.require_active() if name is None else self.require(name)
        names = self.names()

        if len(names) == 1:
            fragment.reset()
            return fragment

        index = names.index(fragment.name)
        del self._fragments[fragment.name]
        if self.active is fragment:
            neighbour = names[index + 1] if index + 1 < len(names) else names[index - 1]
            self.active = self._fragments[neighbour]
        return fragment

    def split_fragment(self, at_row: int | None = None) -> Fragment | None:
        """Move the lines after *at_row* into a new fragment placed right after.

        Defaults to the cursor row. Returns ``None`` (no change) when
        *at_row* is the last line.
        """
        fragment = self.require_active()
        if at_row is None:
            at_row = fragment.edit.row
        if at_row < 0 or at_row >= len(fragment.code):
            raise NotFound(f"No row {at_row} in fragment '{fragment.name}'")
        if at_row + 1 == len(fragment.code):
            return None

        tail = fragment.code[at_row + 1 :]
        new_name = self.unique_name(f"{fragment.name}_split")
        del fragment.code[at_row + 1 :]
        fragment.edit.executed = False
        fragment.clamp_cursor()

        new_fragment = create_fragment(new_name, tail)
        self._insert_after(fragment.name, new_fragment)
        return new_fragment

    def merge_fragments(self, a: str, b: str) -> Fragment:
        """Append b's lines to a, combine their executed flags and delete b."""
        first = self.require(a)
        second = self.require(b)
        if first is second:
            raise RefusedOperation(f"Cannot merge '{a}' into itself")

        first.code = first.code + second.code
        first.edit.executed = first.edit.executed and second.edit.executed
        del self._fragments[b]
        if self.active is second:
            self.active = first
        return first

    def rename_fragment(self, old: str, new: str, overwrite: bool = False) -> Fragment:
        """Rename *old* to *new*; the renamed fragment moves to the end."""
        fragment = self.require(old)
        if new in self._fragments and new != old and not overwrite:
            raise NamingConflict(f"Fragment '{new}' exists; pass overwrite to replace it")

        displaced = self._fragments.get(new)
        del self._fragments[old]
        self._fragments.pop(new, None)
        fragment.name = new
        self._fragments[new] = fragment
        if displaced is not None and self.active is displaced:
            self.active = fragment
        return fragment

    def reorder_fragments(self, permutation: Sequence[int]) -> None:
        """Rebuild document order from indices into the current order.

        Repeated indices count once; fragments not mentioned keep their
        relative order after the listed ones, so no fragment is dropped.
        """
        fragments = list(self._fragments.values())
        for index in permutation:
            if not 0 <= index < len(fragments):
                raise NotFound(f"No fragment number {index}")

        order: list[int] = []
        for index in list(permutation) + list(range(len(fragments))):
            if index not in order:
                order.append(index)
        self._fragments = {fragments[i].name: fragments[i] for i in order}

    def move_fragment(self, offset: int) -> bool:
        """Swap the active fragment with the neighbour *offset* (±1) away."""
        names = self.names()
        index = names.index(self.require_active().name)
        target = index + offset
        if offset not in (-1, 1) or not 0 <= target < len(names):
            return False
        order = list(range(len(names)))
        order[index], order[target] = order[target], order[index]
        self.reorder_fragments(order)
        return True

    def toggle_detached(self) -> bool:
        fragment = self.require_active()
        fragment.detached = not fragment.detached
        return fragment.detached

    def replace_fragment(self, name: str, replacement: Fragment) -> None:
        """Swap the live fragment *name* for *replacement* at the same position."""
        current = self.require(name)
        replacement.name = name
        self._fragments[name] = replacement
        if self.active is current:
            self.active = replacement

    # -- Detached execution ------------------------------------------------------

    def detach(self, fragment: Fragment) -> None:
        """Take *fragment* out of the document for the duration of its run."""
        if self._fragments.get(fragment.name) is not fragment:
            raise NotFound(f"Fragment '{fragment.name}' is not in the document")
        del self._fragments[fragment.name]
        if self.active is fragment:
            self.active = None

    def reattach(self, fragment: Fragment) -> None:
        """Append a detached fragment back at the end and focus it."""
        if fragment.name in self._fragments:
            fragment.name = self.unique_name(fragment.name)
        self._fragments[fragment.name] = fragment
        self.active = fragment

    # -- Run state -----------------------------------------------------------------

    def clear_outputs(self) -> None:
        for fragment in self._fragments.values():
            fragment.out = []

    def forget_run_state(self) -> None:
        for fragment in self._fragments.values():
            fragment.edit.executed = False
            fragment.out = []

    # -- Internal --------------------------------------------------------------------

    def _insert_after(self, name: str, fragment: Fragment) -> None:
        items = list(self._fragments.items())
        index = self.index_of(name)
        items.insert(index + 1, (fragment.name, fragment))
        self._fragments = dict(items)
