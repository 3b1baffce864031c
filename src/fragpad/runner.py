"""Execution of fragments against their context's namespace."""

from __future__ import annotations

import logging

from fragpad.context import Context
from fragpad.errors import EvaluationFailure
from fragpad.evaluator import EvalResult, Evaluator
from fragpad.filters import Formatter, NullFormatter
from fragpad.fragment import Fragment

logger = logging.getLogger(__name__)

VALUE_PREFIX = "=> "


def value_lines(value: object) -> list[str]:
    """``=> `` plus the repr of *value*, split on embedded newlines."""
    return (VALUE_PREFIX + repr(value)).split("\n")


class Runner:
    """Runs fragments through an evaluator and records the outcome.

    A successful run writes the value line and captured output into the
    fragment, clears its error flag, records a history snapshot and appends
    to the context's executed script. A failed run keeps the captured output,
    appends the error description and sets the error flag.
    """

    def __init__(self, evaluator: Evaluator, formatter: Formatter | None = None) -> None:
        self.evaluator = evaluator
        self.formatter = formatter or NullFormatter()
        # Collects the output of the run in progress; ``meta.log`` writes here.
        self.sink: list[str] | None = None

    def run(self, context: Context, name: str | None = None) -> bool:
        """Run fragment *name* (default: the active one); return success."""
        document = context.document
        fragment = document.require_active() if name is None else document.require(name)

        fragment.out = []
        if context.options.format:
            fragment.code = self.formatter.format(fragment.code) or [""]
            fragment.clamp_cursor()
        fragment.edit.executed = True

        if not fragment.detached:
            return self._execute(context, fragment)

        # Detached: out of the document while it runs, then appended and focused.
        document.detach(fragment)
        try:
            return self._execute(context, fragment)
        finally:
            document.reattach(fragment)

    def run_all(self, context: Context) -> int:
        """Run every fragment in document order; return the failure count.

        Focus returns to the fragment that was active before the run.
        """
        document = context.document
        previous = document.active
        document.clear_outputs()

        failures = 0
        for fragment in list(document):
            document.active = fragment
            if not self.run(context, fragment.name):
                failures += 1

        if previous is not None and document.get(previous.name) is previous:
            document.active = previous
        return failures

    def _execute(self, context: Context, fragment: Fragment) -> bool:
        logs: list[str] = []
        self.sink = logs
        try:
            result: EvalResult = self.evaluator.execute(
                fragment.text(), context.namespace, logs
            )
        except EvaluationFailure as e:
            result = EvalResult(error=str(e))
        finally:
            self.sink = None

        if not result.ok:
            fragment.out = logs + [result.error or "Error"]
            fragment.edit.error = True
            logger.info("Fragment %s failed: %s", fragment.name, result.error)
            return False

        head = value_lines(result.value) if result.value is not None else []
        fragment.out = head + logs
        fragment.edit.error = False
        revision = context.history.record(fragment)
        context.log_execution(fragment.name, revision, fragment.code)
        logger.info("Fragment %s ran, revision %d", fragment.name, revision)
        return True
