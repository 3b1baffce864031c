"""Tests for fragpad.meta -- the object fragment code uses to drive the editor."""

from __future__ import annotations

from pathlib import Path

from fragpad.context import Context, ContextManager
from fragpad.evaluator import PythonEvaluator
from fragpad.meta import META_HELP, Meta, install_meta
from fragpad.runner import Runner


def _setup() -> tuple[ContextManager, Context, Runner, Meta]:
    manager = ContextManager()
    runner = Runner(PythonEvaluator())
    manager.on_context_ready.append(lambda c: install_meta(c, manager, runner, "keys help"))
    context = manager.create("ctx_0", activate=True)
    return manager, context, runner, context.namespace["meta"]


class TestInstall:
    def test_meta_in_every_context(self) -> None:
        manager, context, _, meta = _setup()
        other = manager.create()
        assert isinstance(meta, Meta)
        assert other.namespace["meta"].name == other.name

    def test_meta_reinstalled_after_reset(self) -> None:
        manager, _, _, _ = _setup()
        fresh = manager.reset()
        assert fresh.namespace["meta"].name == "ctx_0"


class TestViews:
    def test_views_reflect_context(self) -> None:
        manager, context, _, meta = _setup()
        manager.create()
        assert meta.name == "ctx_0"
        assert meta.contexts == ["ctx_0", "ctx_1"]
        assert meta.fragments is context.document.fragments
        assert meta.active is context.document.active
        assert meta.history is context.history
        assert meta.opts is context.options
        assert meta.ls_frag() == ["frag_0"]
        assert "ctx_0" in repr(meta)

    def test_help_combines_key_and_meta_help(self) -> None:
        _, _, _, meta = _setup()
        assert meta.help.startswith("keys help")
        assert meta.help.endswith(META_HELP)

    def test_opts_changes_apply(self) -> None:
        _, context, runner, _ = _setup()
        context.document.active.set_code(["meta.opts.format = False"])
        runner.run(context)
        assert context.options.format is False


class TestLog:
    def test_log_outside_run_returns_line(self) -> None:
        _, _, _, meta = _setup()
        assert meta.log("a", 1) == "a 1"

    def test_log_during_run_goes_to_output(self) -> None:
        _, context, runner, _ = _setup()
        context.document.active.set_code(["meta.log('hello', 2)", "None"])
        runner.run(context)
        assert context.document.active.out == ["hello 2"]

    def test_executed_script_visible(self) -> None:
        _, context, runner, meta = _setup()
        context.document.active.set_code(["x = 1"])
        runner.run(context)
        assert meta.executed_script == "\n# frag_0 r 0\nx = 1\n"


class TestOperations:
    def test_usage_without_arguments(self) -> None:
        _, _, _, meta = _setup()
        assert meta.save().startswith("meta.save(")
        assert meta.load().startswith("meta.load(")
        assert meta.merge_frags("a").startswith("meta.merge_frags(")
        assert meta.mv_frag().startswith("meta.mv_frag(")
        assert meta.refrag().startswith("meta.refrag(")

    def test_save_and_load(self, tmp_path: Path) -> None:
        _, context, _, meta = _setup()
        context.document.active.set_code(["a = 1", "a"])
        target = tmp_path / "saved.py"
        assert meta.save(str(target)) == f"Written 2 lines to {target}."
        message = meta.load(str(target))
        assert message == f"Read 2 lines from {target} into file_{target}."
        assert f"file_{target}" in meta.ls_frag()

    def test_load_failure_returns_message(self, tmp_path: Path) -> None:
        _, context, _, meta = _setup()
        assert "Couldn't load" in meta.load(str(tmp_path / "missing.py"))
        assert context.document.names() == ["frag_0"]

    def test_merge_rename_reorder(self) -> None:
        _, context, _, meta = _setup()
        document = context.document
        document.create_fragment("b", ["2"])
        document.create_fragment("c", ["3"])
        document.require("frag_0").set_code(["1"])

        assert meta.merge_frags("frag_0", "b") == "Merged b into frag_0."
        assert document.require("frag_0").code == ["1", "2"]
        assert meta.mv_frag("frag_0", "first") == "frag_0 renamed to first."
        assert meta.ls_frag() == ["c", "first"]
        assert meta.refrag(1, 0) == "reordered."
        assert meta.ls_frag() == ["first", "c"]

    def test_errors_become_messages(self) -> None:
        _, _, _, meta = _setup()
        assert meta.merge_frags("frag_0", "frag_0") == "Cannot merge 'frag_0' into itself"
        assert meta.mv_frag("nope", "x") == "No fragment named 'nope'"
        assert meta.refrag(7) == "No fragment number 7"
