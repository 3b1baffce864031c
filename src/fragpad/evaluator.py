"""Evaluator collaborator: executes fragment source in a context namespace.

The contract is ``execute(source, namespace, sink) -> EvalResult``. Lines
printed by the code are appended to *sink* in emission order; errors in the
executed code are returned, never raised.
"""

from __future__ import annotations

import ast
import contextlib
import io
from dataclasses import dataclass
from typing import Any, MutableMapping, Protocol

ErrorDescriptor = str


@dataclass
class EvalResult:
    """Outcome of one execution.

    ``value`` is ``None`` when the code produced no value; ``error`` is the
    ``"<ExceptionType>: <message>"`` description when it failed.
    """

    value: Any = None
    error: ErrorDescriptor | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class Evaluator(Protocol):
    """Anything able to run source text against a namespace.

    Errors in the source are reported through the result; an implementation
    may also raise :class:`~fragpad.errors.EvaluationFailure` instead.
    """

    def execute(
        self,
        source: str,
        namespace: MutableMapping[str, Any],
        sink: list[str],
    ) -> EvalResult: ...


def describe_error(error: BaseException) -> ErrorDescriptor:
    message = str(error)
    name = type(error).__name__
    return f"{name}: {message}" if message else name


class LineSink(io.TextIOBase):
    """Text stream that appends each completed line to a list."""

    def __init__(self, lines: list[str]) -> None:
        super().__init__()
        self._lines = lines
        self._partial = ""

    def writable(self) -> bool:
        return True

    def write(self, text: str) -> int:
        self._partial += text
        *complete, self._partial = self._partial.split("\n")
        self._lines.extend(complete)
        return len(text)

    def flush(self) -> None:
        if self._partial:
            self._lines.append(self._partial)
            self._partial = ""


class PythonEvaluator:
    """Runs Python source REPL style.

    Statements are executed in order; when the last statement is an
    expression its value becomes the result. Both stdout and stderr are
    captured into the sink. Every exception, ``SystemExit`` and
    ``KeyboardInterrupt`` included, is reported as an error so a fragment
    cannot end the session.
    """

    def __init__(self, filename: str = "<fragment>") -> None:
        self.filename = filename

    def execute(
        self,
        source: str,
        namespace: MutableMapping[str, Any],
        sink: list[str],
    ) -> EvalResult:
        stream = LineSink(sink)
        try:
            with contextlib.redirect_stdout(stream), contextlib.redirect_stderr(stream):
                value = self._run(source, namespace)
        except BaseException as e:
            return EvalResult(error=describe_error(e))
        finally:
            stream.flush()
        return EvalResult(value=value)

    def _run(self, source: str, namespace: MutableMapping[str, Any]) -> Any:
        tree = ast.parse(source, filename=self.filename, mode="exec")
        tail: ast.expr | None = None
        if tree.body and isinstance(tree.body[-1], ast.Expr):
            tail = tree.body.pop().value

        # exec() only accepts a real dict as globals.
        scope = namespace if isinstance(namespace, dict) else dict(namespace)
        if tree.body:
            exec(compile(tree, self.filename, "exec"), scope)
        value = None
        if tail is not None:
            expression = ast.Expression(tail)
            value = eval(compile(expression, self.filename, "eval"), scope)
        if scope is not namespace:
            namespace.update(scope)
        return value
