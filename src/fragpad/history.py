"""Append-only per-fragment snapshot log with revision navigation.

Snapshots are deep clones taken on push, so later edits to the live fragment
never leak into the log; restoring clones again so the log stays pristine.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from fragpad.document import Document
    from fragpad.fragment import Fragment

logger = logging.getLogger(__name__)

RevisionDirection = Literal["back", "forward"]


class HistoryStore:
    """Maps fragment name to the ordered snapshots of its successful runs."""

    def __init__(self) -> None:
        self._entries: dict[str, list[Fragment]] = {}

    def record(self, fragment: Fragment) -> int:
        """Append a snapshot of *fragment* and return its revision index.

        The live fragment's ``revision`` is set to the new last index before
        the snapshot is taken, so the snapshot carries its own index.
        """
        entries = self._entries.setdefault(fragment.name, [])
        fragment.revision = len(entries)
        entries.append(fragment.clone())
        return fragment.revision

    def entries(self, name: str) -> list[Fragment]:
        """Return the snapshots recorded for *name* (a shallow list copy)."""
        return list(self._entries.get(name, []))

    def length(self, name: str) -> int:
        return len(self._entries.get(name, []))

    def names(self) -> list[str]:
        return list(self._entries)

    def rename(self, old: str, new: str) -> None:
        """Move the snapshots of *old* under *new*, replacing any there."""
        if old == new:
            return
        entries = self._entries.pop(old, None)
        if entries is None:
            self._entries.pop(new, None)
            return
        for snapshot in entries:
            snapshot.name = new
        self._entries[new] = entries

    def navigate(
        self,
        document: Document,
        name: str,
        direction: RevisionDirection,
    ) -> bool:
        """Step the live fragment *name* one revision back or forward.

        The live fragment (and the active pointer, if it was active) is
        replaced by a clone of the target snapshot, discarding unsaved edits.
        Returns ``False`` without changes when there is no history or the
        step would leave the recorded range.
        """
        entries = self._entries.get(name)
        live = document.get(name)
        if not entries or live is None:
            return False

        target = live.revision + (1 if direction == "forward" else -1)
        if target < 0 or target >= len(entries):
            return False

        document.replace_fragment(name, entries[target].clone())
        logger.debug("Fragment %s restored to revision %d", name, target)
        return True
