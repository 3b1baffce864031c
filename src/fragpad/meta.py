"""The ``meta`` object every context namespace exposes to fragment code.

Callables return a usage line when called without their required
arguments and the error message when the operation is refused, so they
are safe to poke at interactively.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from fragpad import persistence
from fragpad.errors import FragpadError

if TYPE_CHECKING:
    from fragpad.context import Context, ContextManager, ContextOptions
    from fragpad.fragment import Fragment
    from fragpad.history import HistoryStore
    from fragpad.runner import Runner

logger = logging.getLogger(__name__)

META_HELP = """\
==== meta ====
  name             name of this context
  contexts         names of all live contexts
  fragments        fragments of this context, in document order (name -> fragment)
  active           the fragment holding the cursor
    .name          fragment name
    .revision      index of the last successful run in history (-1 before)
    .detached      taken out of the document while it runs
    .code          source lines
    .out           output of the last run
    .edit          row, col, executed, error
  history          HistoryStore of successful runs per fragment
  executed_script  source of every successful run, in order
  opts             format, highlight, scroll_speed, indent_width
  log(*args)       write a line to the running fragment's output
  save(path)       write all attached fragments to a file
  load(path, overwrite=False)  read a file into a new fragment
  ls_frag()        fragment names
  merge_frags(a, b)            append b to a and delete b
  mv_frag(old, new, overwrite=False)  rename a fragment (moves it last)
  refrag(*indices)             reorder fragments by index
"""


class Meta:
    """Live view of one context for code running inside it."""

    def __init__(
        self,
        context: Context,
        manager: ContextManager,
        runner: Runner,
        key_help: str = "",
    ) -> None:
        self._context = context
        self._manager = manager
        self._runner = runner
        self._key_help = key_help

    def __repr__(self) -> str:
        names = ", ".join(self._context.document.names())
        return f"<meta {self._context.name}: {names}>"

    # -- Views -------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._context.name

    @property
    def contexts(self) -> list[str]:
        return self._manager.names()

    @property
    def fragments(self) -> dict[str, Fragment]:
        return self._context.document.fragments

    @property
    def active(self) -> Fragment | None:
        return self._context.document.active

    @property
    def history(self) -> HistoryStore:
        return self._context.history

    @property
    def executed_script(self) -> str:
        return self._context.executed_script

    @property
    def opts(self) -> ContextOptions:
        return self._context.options

    @property
    def help(self) -> str:
        return f"{self._key_help}\n{META_HELP}" if self._key_help else META_HELP

    # -- Operations -------------------------------------------------------------

    def log(self, *args: Any) -> str | None:
        """Append a line to the output of the fragment being run.

        Outside of a run the line is returned instead.
        """
        line = " ".join(str(arg) for arg in args)
        sink = self._runner.sink
        if sink is None:
            return line
        sink.extend(line.split("\n"))
        return None

    def save(self, path: str | None = None) -> str:
        if not path:
            return "meta.save('filename'): save all attached fragment source to a file."
        try:
            count = persistence.save(self._context.document, path)
        except FragpadError as e:
            return str(e)
        return f"Written {count} lines to {path}."

    def load(self, path: str | None = None, overwrite: bool = False) -> str:
        if not path:
            return "meta.load('filename', overwrite=False): load a file into a new fragment."
        try:
            fragment = persistence.load(self._context.document, path, overwrite)
        except FragpadError as e:
            return str(e)
        return f"Read {len(fragment.code)} lines from {path} into {fragment.name}."

    def ls_frag(self) -> list[str]:
        return self._context.document.names()

    def merge_frags(self, a: str | None = None, b: str | None = None) -> str:
        if not a or not b:
            return "meta.merge_frags(a, b): append fragment b to fragment a and delete b."
        try:
            self._context.document.merge_fragments(a, b)
        except FragpadError as e:
            return str(e)
        return f"Merged {b} into {a}."

    def mv_frag(self, old: str | None = None, new: str | None = None, overwrite: bool = False) -> str:
        if not old or not new:
            return "meta.mv_frag(old, new, overwrite=False): rename a fragment, it is moved last."
        try:
            self._context.rename_fragment(old, new, overwrite)
        except FragpadError as e:
            return str(e)
        return f"{old} renamed to {new}."

    def refrag(self, *indices: int) -> str:
        if not indices:
            return "meta.refrag(i, j, ...): reorder fragments by their current index."
        try:
            self._context.document.reorder_fragments(list(indices))
        except FragpadError as e:
            return str(e)
        return "reordered."


def install_meta(context: Context, manager: ContextManager, runner: Runner, key_help: str = "") -> Meta:
    """Place a :class:`Meta` for *context* into its namespace."""
    meta = Meta(context, manager, runner, key_help)
    context.namespace["meta"] = meta
    logger.debug("Installed meta into context %s", context.name)
    return meta
