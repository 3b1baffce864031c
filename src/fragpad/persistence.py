"""Saving and loading fragment source."""

from __future__ import annotations

import logging
from pathlib import Path

from fragpad.document import Document
from fragpad.errors import IOFailure
from fragpad.fragment import Fragment

logger = logging.getLogger(__name__)


def read_text(path: Path) -> str:
    for encoding in ("utf-8", "utf-8-sig", "latin-1"):
        try:
            return path.read_text(encoding=encoding)
        except UnicodeDecodeError:
            continue
    return path.read_bytes().decode("utf-8", errors="replace")


def save(document: Document, path: str | Path) -> int:
    """Write the code of every attached fragment, in order; return the line count."""
    lines: list[str] = []
    for fragment in document:
        if not fragment.detached:
            lines.extend(fragment.code)

    target = Path(path)
    try:
        target.write_text("\n".join(lines) + "\n", encoding="utf-8")
    except OSError as e:
        logger.warning("Saving %s failed: %s", target, e)
        raise IOFailure(f"Couldn't write {target}: {e.strerror or e}") from e
    logger.info("Saved %d lines to %s", len(lines), target)
    return len(lines)


def load(document: Document, path: str | Path, overwrite: bool = False) -> Fragment:
    """Read *path* into a new fragment named ``file_<path>``.

    The name gets a ``_<i>`` suffix when taken, unless *overwrite* is set in
    which case the existing fragment is replaced. The new fragment is
    appended without taking focus.
    """
    source = Path(path)
    try:
        text = read_text(source)
    except OSError as e:
        logger.warning("Loading %s failed: %s", source, e)
        raise IOFailure(f"Couldn't load {source}: {e.strerror or e}") from e

    lines = text.splitlines() or [""]
    name = f"file_{path}"
    if name in document:
        if overwrite:
            fragment = document.require(name)
            fragment.set_code(lines)
            fragment.edit.executed = False
            logger.info("Reloaded %d lines from %s into %s", len(lines), source, name)
            return fragment
        name = document.unique_name(name)

    fragment = document.create_fragment(name, lines)
    logger.info("Loaded %d lines from %s into %s", len(lines), source, name)
    return fragment
