"""Tests for fragpad.evaluator -- REPL style execution of Python source."""

from __future__ import annotations

from collections import UserDict

import pytest

from fragpad.evaluator import EvalResult, LineSink, PythonEvaluator, describe_error


class TestDescribeError:
    def test_with_message(self) -> None:
        assert describe_error(ValueError("bad")) == "ValueError: bad"

    def test_without_message(self) -> None:
        assert describe_error(KeyboardInterrupt()) == "KeyboardInterrupt"


class TestLineSink:
    def test_complete_and_partial_lines(self) -> None:
        lines: list[str] = []
        sink = LineSink(lines)
        sink.write("one\ntw")
        sink.write("o\n")
        sink.write("three")
        assert lines == ["one", "two"]
        sink.flush()
        assert lines == ["one", "two", "three"]


class TestPythonEvaluator:
    def test_trailing_expression_is_the_value(self) -> None:
        namespace: dict = {}
        result = PythonEvaluator().execute("x = 1\nx + 1", namespace, [])
        assert result == EvalResult(value=2)
        assert result.ok
        assert namespace["x"] == 1

    def test_statements_only_have_no_value(self) -> None:
        result = PythonEvaluator().execute("x = 1", {}, [])
        assert result.ok
        assert result.value is None

    def test_print_output_goes_to_sink(self) -> None:
        sink: list[str] = []
        result = PythonEvaluator().execute('print("a")\nprint("b", end="")\n3', {}, sink)
        assert sink == ["a", "b"]
        assert result.value == 3

    def test_namespace_persists_between_runs(self) -> None:
        evaluator = PythonEvaluator()
        namespace: dict = {}
        evaluator.execute("def f(n):\n    return n * 2", namespace, [])
        assert evaluator.execute("f(21)", namespace, []).value == 42

    def test_error_is_returned_not_raised(self) -> None:
        sink: list[str] = []
        result = PythonEvaluator().execute('print("before")\ny', {}, sink)
        assert not result.ok
        assert result.error == "NameError: name 'y' is not defined"
        assert sink == ["before"]

    def test_syntax_error(self) -> None:
        result = PythonEvaluator().execute("def (", {}, [])
        assert result.error is not None
        assert result.error.startswith("SyntaxError")

    def test_system_exit_is_captured(self) -> None:
        result = PythonEvaluator().execute("raise SystemExit(3)", {}, [])
        assert result.error == "SystemExit: 3"

    def test_non_dict_namespace_is_updated(self) -> None:
        namespace = UserDict({"a": 2})
        result = PythonEvaluator().execute("b = a * 3\nb", namespace, [])
        assert result.value == 6
        assert namespace["b"] == 6

    def test_empty_source(self) -> None:
        assert PythonEvaluator().execute("", {}, []) == EvalResult()

    def test_keyboard_interrupt_is_captured(self) -> None:
        result = PythonEvaluator().execute("raise KeyboardInterrupt", {}, [])
        assert result.error == "KeyboardInterrupt"

    def test_stderr_goes_to_sink(self, capsys: pytest.CaptureFixture[str]) -> None:
        sink: list[str] = []
        source = "import sys\nprint('oops', file=sys.stderr)\nprint('fine')"
        result = PythonEvaluator().execute(source, {}, sink)
        assert result.ok
        assert sink == ["oops", "fine"]
        captured = capsys.readouterr()
        assert captured.err == ""
        assert captured.out == ""
