"""Contexts and the context manager.

A context is a document of fragments plus the namespace its code runs in,
its options and the history of its successful runs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Literal

from fragpad.document import Document
from fragpad.errors import NamingConflict, NotFound, RefusedOperation
from fragpad.history import HistoryStore

if TYPE_CHECKING:
    from fragpad.settings import SettingsManager

logger = logging.getLogger(__name__)

DEFAULT_CONTEXT_NAME = "ctx_0"

SwitchDirection = Literal["previous", "next"]


@dataclass
class ContextOptions:
    """Per-context options, mutable at runtime through ``meta.opts``."""

    format: bool = True
    highlight: bool = True
    scroll_speed: int = 10
    indent_width: int = 4

    @classmethod
    def from_settings(cls, settings: SettingsManager) -> ContextOptions:
        return cls(
            format=settings.get_format(),
            highlight=settings.get_highlight(),
            scroll_speed=settings.get_scroll_speed(),
            indent_width=settings.get_indent_width(),
        )


class Context:
    """One named workspace.

    ``document``, ``history`` and ``options`` may be shared with the context
    this one was reset from; the namespace is always its own.
    """

    def __init__(
        self,
        name: str,
        *,
        document: Document | None = None,
        history: HistoryStore | None = None,
        options: ContextOptions | None = None,
    ) -> None:
        self.name = name
        self.document = document if document is not None else Document.with_default_fragment()
        self.history = history if history is not None else HistoryStore()
        self.options = options if options is not None else ContextOptions()
        self.namespace: dict[str, Any] = {"__name__": f"fragpad.{name}"}
        self.executed_script = ""

    def __repr__(self) -> str:
        return f"Context({self.name!r}, fragments={self.document.names()!r})"

    def rename_fragment(self, old: str, new: str, overwrite: bool = False) -> None:
        """Rename a fragment together with its history."""
        self.document.rename_fragment(old, new, overwrite)
        self.history.rename(old, new)

    def log_execution(self, name: str, revision: int, code: list[str]) -> None:
        source = "\n".join(code)
        self.executed_script += f"\n# {name} r {revision}\n{source}\n"


class ContextManager:
    """Registry of live contexts in registration order plus the active one."""

    def __init__(self, default_options: ContextOptions | None = None) -> None:
        self._contexts: dict[str, Context] = {}
        self._active: Context | None = None
        self._counter = 1
        self.default_options = default_options or ContextOptions()
        # Called with each context created or reset, e.g. to install ``meta``.
        self.on_context_ready: list[Callable[[Context], None]] = []

    # -- Lookup -----------------------------------------------------------------

    @property
    def active(self) -> Context:
        if self._active is None:
            raise RefusedOperation("No active context")
        return self._active

    def names(self) -> list[str]:
        return list(self._contexts)

    def get(self, name: str) -> Context:
        context = self._contexts.get(name)
        if context is None:
            raise NotFound(f"No context named '{name}'")
        return context

    def __len__(self) -> int:
        return len(self._contexts)

    def __contains__(self, name: object) -> bool:
        return name in self._contexts

    def next_name(self) -> str:
        while True:
            name = f"ctx_{self._counter}"
            self._counter += 1
            if name not in self._contexts:
                return name

    # -- Lifecycle ----------------------------------------------------------------

    def create(self, name: str | None = None, *, activate: bool = False) -> Context:
        """Register a new context with one default fragment."""
        if name is None:
            name = self.next_name()
        elif name in self._contexts:
            raise NamingConflict(f"Context '{name}' already exists")

        options = ContextOptions(**vars(self.default_options))
        context = Context(name, options=options)
        self._register(context)
        if activate or self._active is None:
            self._active = context
        logger.info("Created context %s", name)
        return context

    def create_scratch(self) -> Context:
        """Create and activate a fresh ``ctx_<n>`` whose fragment names it."""
        context = self.create(activate=True)
        fragment = context.document.require_active()
        fragment.set_code([f"# Context {context.name}", ""])
        fragment.edit.row = 1
        return context

    def switch(self, direction: SwitchDirection) -> Context:
        """Activate the previous or next context, wrapping around."""
        names = self.names()
        index = names.index(self.active.name)
        step = 1 if direction == "next" else -1
        self._active = self._contexts[names[(index + step) % len(names)]]
        logger.info("Switched to context %s", self._active.name)
        return self._active

    def activate(self, name: str) -> Context:
        self._active = self.get(name)
        return self._active

    def reset(self, name: str | None = None) -> Context:
        """Replace a context by a new one sharing its code and history.

        The executed script and options carry over; the namespace is fresh
        and every fragment forgets its run state.
        """
        old = self.active if name is None else self.get(name)
        fresh = Context(
            old.name,
            document=old.document,
            history=old.history,
            options=old.options,
        )
        fresh.executed_script = old.executed_script
        fresh.document.forget_run_state()
        self._register(fresh)
        if self._active is old:
            self._active = fresh
        logger.info("Reset context %s", old.name)
        return fresh

    def delete(self, name: str | None = None) -> Context:
        """Remove a context; refused when it is the last one."""
        context = self.active if name is None else self.get(name)
        names = self.names()
        if len(names) == 1:
            raise RefusedOperation("Refusing to delete the last context")

        index = names.index(context.name)
        del self._contexts[context.name]
        if self._active is context:
            neighbour = names[index + 1] if index + 1 < len(names) else names[index - 1]
            self._active = self._contexts[neighbour]
        logger.info("Deleted context %s", context.name)
        return context

    def _register(self, context: Context) -> None:
        self._contexts[context.name] = context
        for callback in self.on_context_ready:
            callback(context)

