"""Session state: everything one editor instance works on.

The session owns the context registry, the viewport, the status notices and
the collaborators (evaluator, formatter, highlighter). It is passed
explicitly to whoever needs it; there is no module-level current context.
"""

from __future__ import annotations

import logging

from fragpad import persistence
from fragpad.context import DEFAULT_CONTEXT_NAME, Context, ContextManager, ContextOptions
from fragpad.document import Document
from fragpad.errors import FragpadError
from fragpad.evaluator import Evaluator, PythonEvaluator
from fragpad.filters import Formatter, Highlighter, PygmentsHighlighter, TidyFormatter
from fragpad.keybindings import EditorKeybindingsManager
from fragpad.meta import install_meta
from fragpad.render import FlatBuffer, RenderModel, build_render_model, flatten
from fragpad.runner import Runner
from fragpad.settings import SettingsManager
from fragpad.viewport import Viewport

logger = logging.getLogger(__name__)


class Session:
    def __init__(
        self,
        settings: SettingsManager | None = None,
        *,
        evaluator: Evaluator | None = None,
        formatter: Formatter | None = None,
        highlighter: Highlighter | None = None,
    ) -> None:
        self.settings = settings or SettingsManager.in_memory()
        self.options = ContextOptions.from_settings(self.settings)
        self.keybindings = EditorKeybindingsManager(self.settings.get_keybindings())
        self.runner = Runner(
            evaluator or PythonEvaluator(),
            formatter or TidyFormatter(self.options.indent_width),
        )
        self.highlighter = highlighter or PygmentsHighlighter(self.settings.get_highlight_style())
        self.viewport = Viewport()
        self.notices: list[str] = []
        self.prompt: str | None = None
        self.follow_cursor = True
        self.contexts = ContextManager(self.options)
        self.contexts.on_context_ready.append(self._install_meta)
        self.contexts.create(DEFAULT_CONTEXT_NAME, activate=True)

    # -- Shortcuts ------------------------------------------------------------

    @property
    def context(self) -> Context:
        return self.contexts.active

    @property
    def document(self) -> Document:
        return self.contexts.active.document

    def help_text(self) -> str:
        return self.keybindings.help_text()

    # -- Notices --------------------------------------------------------------

    def notify(self, text: str) -> None:
        """Show *text* in the footer until the next key press."""
        self.notices.extend(text.split("\n"))

    def clear_notices(self) -> None:
        self.notices = []

    # -- Operations -----------------------------------------------------------

    def load_file(self, path: str) -> bool:
        """Load *path* into a new fragment of the active context.

        Failure becomes a notice; the session carries on without the file.
        """
        try:
            fragment = persistence.load(self.document, path)
        except FragpadError as e:
            self.notify(str(e))
            return False
        self.notify(f"Read {len(fragment.code)} lines from {path} into {fragment.name}.")
        return True

    def flatten(self) -> FlatBuffer:
        return flatten(self.context, self.highlighter)

    def compose(self) -> RenderModel:
        """Render model of the active context at the current viewport."""
        return build_render_model(
            self.flatten(),
            self.viewport,
            follow_cursor=self.follow_cursor,
            notices=self.notices,
            prompt=self.prompt,
        )

    def _install_meta(self, context: Context) -> None:
        install_meta(context, self.contexts, self.runner, self.help_text())
