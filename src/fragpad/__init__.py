"""fragpad: fragment based terminal editor for Python."""

# Editing model
from fragpad.context import Context, ContextManager, ContextOptions
from fragpad.document import Document
from fragpad.fragment import EditState, Fragment, create_fragment
from fragpad.history import HistoryStore
from fragpad.viewport import Viewport

# Errors
from fragpad.errors import (
    EvaluationFailure,
    FragpadError,
    IOFailure,
    NamingConflict,
    NotFound,
    RefusedOperation,
)

# Collaborators
from fragpad.autocomplete import Completion, resolve
from fragpad.evaluator import EvalResult, Evaluator, PythonEvaluator
from fragpad.filters import Formatter, Highlighter, PygmentsHighlighter, TidyFormatter
from fragpad.runner import Runner

# Application
from fragpad.dispatcher import InputDispatcher
from fragpad.session import Session
from fragpad.settings import SettingsManager

__all__ = [
    # Editing model
    "Context",
    "ContextManager",
    "ContextOptions",
    "Document",
    "EditState",
    "Fragment",
    "HistoryStore",
    "Viewport",
    "create_fragment",
    # Errors
    "EvaluationFailure",
    "FragpadError",
    "IOFailure",
    "NamingConflict",
    "NotFound",
    "RefusedOperation",
    # Collaborators
    "Completion",
    "EvalResult",
    "Evaluator",
    "Formatter",
    "Highlighter",
    "PygmentsHighlighter",
    "PythonEvaluator",
    "Runner",
    "TidyFormatter",
    "resolve",
    # Application
    "InputDispatcher",
    "Session",
    "SettingsManager",
]
