from __future__ import annotations

import sys
from pathlib import Path

import pytest

from spectra_ref import runner
from spectra_ref.runtime import ShkInt, ShkNull, new_global_frame
from spectra_ref.utils import DEBUG_PY_TRACE_ENV
from tests.support.harness import (
    SpectraError,
    UndefinedVariable,
    UnterminatedString,
    run_program,
    verify_result,
)


def test_run_returns_last_expression_value() -> None:
    verify_result(run_program("var x = 2; x * 21;"), "int", 42)


def test_run_trailing_declaration_is_null() -> None:
    verify_result(run_program("1; var x = 2;"), "null", None)


def test_run_empty_program_is_null() -> None:
    verify_result(run_program(""), "null", None)


def test_run_reuses_caller_frame() -> None:
    frame = new_global_frame()
    run_program("var x = 41;", frame)

    assert run_program("x + 1;", frame) == ShkInt(42)


def test_fresh_runs_do_not_share_state() -> None:
    run_program("var shared = 1;")

    with pytest.raises(UndefinedVariable):
        run_program("shared;")


def test_lex_errors_surface_through_run() -> None:
    with pytest.raises(UnterminatedString) as exc_info:
        run_program('var s = "abc;')

    assert isinstance(exc_info.value, SpectraError)


def test_repl_eval_expression_is_echoed() -> None:
    frame = new_global_frame()
    value, is_stmt = runner.repl_eval("1 + 2", frame)

    assert value == ShkInt(3)
    assert is_stmt is False


def test_repl_eval_declaration_is_statement() -> None:
    frame = new_global_frame()
    value, is_stmt = runner.repl_eval("var y = 5", frame)

    assert isinstance(value, ShkNull)
    assert is_stmt is True
    assert frame.get("y") == ShkInt(5)


def test_repl_eval_accepts_explicit_terminators() -> None:
    frame = new_global_frame()
    runner.repl_eval("var n = 1; // counter", frame)
    runner.repl_eval("while n < 4 { n = n + 1; }", frame)
    value, _ = runner.repl_eval("n", frame)

    assert value == ShkInt(4)


def test_debug_trace_off_by_default() -> None:
    with pytest.raises(UndefinedVariable) as exc_info:
        run_program("missing;")

    assert exc_info.value.spc_py_trace is None


def test_debug_trace_attached_when_enabled(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(DEBUG_PY_TRACE_ENV, "1")

    with pytest.raises(UndefinedVariable) as exc_info:
        run_program("missing;")

    assert exc_info.value.spc_py_trace is not None


def test_main_runs_file(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    script = tmp_path / "hello.spc"
    script.write_text('var who = "world";\nprintln("hello " + who);\n', encoding="utf-8")
    monkeypatch.setattr(sys, "argv", ["spectra", str(script)])

    runner.main()

    assert capsys.readouterr().out == "hello world\n"


def test_main_reports_errors(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.setattr(sys, "argv", ["spectra", "var x = 1;\nx();"])

    with pytest.raises(SystemExit) as exc_info:
        runner.main()

    assert exc_info.value.code == 1
    err = capsys.readouterr().err
    assert err.startswith("Error: ")
    assert "(line 2)" in err


def test_main_reports_runaway_recursion(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.setattr(sys, "argv", ["spectra", "var f = fun () { f(); };\nf();"])

    with pytest.raises(SystemExit) as exc_info:
        runner.main()

    assert exc_info.value.code == 1
    err = capsys.readouterr().err
    assert "Maximum recursion depth of 1000 calls exceeded (line 1)" in err
