"""Recoverable error taxonomy.

Every error here is local to one operation: the operation raising it leaves
the document, history and context registry untouched, and callers surface
the message to the user instead of terminating.
"""

from __future__ import annotations


class FragpadError(Exception):
    """Base class for all recoverable editor errors."""


class NamingConflict(FragpadError):
    """A fragment or context name is already taken."""


class NotFound(FragpadError):
    """An operation referenced an absent fragment, context or index."""


class RefusedOperation(FragpadError):
    """The operation is valid in general but refused in the current state."""


class IOFailure(FragpadError):
    """Saving or loading fragment source failed."""


class EvaluationFailure(FragpadError):
    """Executing a fragment failed.

    Never propagated out of the runner; recorded into the fragment output.
    """
