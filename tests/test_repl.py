from __future__ import annotations

import pytest
from prompt_toolkit.document import Document

from spectra_ref.repl import SLASH_COMMANDS, _SlashCompleter, handle_slash, open_depth
from spectra_ref.repl_highlight import GROUP_STYLE, _highlight_line
from spectra_ref.runtime import ShkInt, new_global_frame
from spectra_ref.utils import DEBUG_PY_TRACE_ENV, debug_py_trace_enabled


@pytest.mark.parametrize(
    "text, depth",
    [
        pytest.param("var x = 1;", 0, id="flat"),
        pytest.param("while true {", 1, id="open-brace"),
        pytest.param("var f = fun (a) {\n  if a {", 2, id="nested-open"),
        pytest.param("f(1,", 1, id="open-paren"),
        pytest.param("if x { 1; }", 0, id="closed"),
        pytest.param('"{"', 0, id="brace-in-string"),
        pytest.param("// {", 0, id="brace-in-comment"),
        pytest.param('"unterminated {', 0, id="lex-error-submits"),
    ],
)
def test_open_depth(text: str, depth: int) -> None:
    assert open_depth(text) == depth


def test_reset_swaps_frame(capsys: pytest.CaptureFixture[str]) -> None:
    frame = new_global_frame()
    frame.define("x", ShkInt(1))
    box = [frame]

    assert handle_slash("/reset", box) is True
    assert box[0] is not frame
    assert "x" not in box[0].vars
    assert box[0].get("println").name == "println"
    assert "Environment reset." in capsys.readouterr().out


def test_py_traceback_toggle(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.setenv(DEBUG_PY_TRACE_ENV, "0")
    box = [new_global_frame()]

    handle_slash("/py-traceback on", box)
    assert debug_py_trace_enabled()

    handle_slash("/py-traceback", box)
    assert not debug_py_trace_enabled()

    out = capsys.readouterr().out
    assert "Python traceback: on" in out
    assert "Python traceback: off" in out


def test_py_traceback_rejects_unknown_argument(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.setenv(DEBUG_PY_TRACE_ENV, "1")

    assert handle_slash("/py-traceback maybe", [new_global_frame()]) is True
    assert debug_py_trace_enabled()
    assert "Usage: /py-traceback [on|off]" in capsys.readouterr().err


@pytest.mark.parametrize(
    "typed, offered",
    [
        pytest.param("/", sorted(SLASH_COMMANDS), id="all"),
        pytest.param("/re", ["/reset"], id="prefix"),
        pytest.param("/reset now", [], id="after-argument"),
        pytest.param("var x", [], id="source-text"),
    ],
)
def test_slash_completion(typed: str, offered: list[str]) -> None:
    completions = _SlashCompleter().get_completions(Document(typed), None)
    assert sorted(c.text for c in completions) == offered


def test_non_command_passes_through() -> None:
    assert handle_slash("var x = 1;", [new_global_frame()]) is False


def test_unknown_command_is_consumed(capsys: pytest.CaptureFixture[str]) -> None:
    assert handle_slash("/nope", [new_global_frame()]) is True
    assert "Unknown command: /nope" in capsys.readouterr().err


def test_highlight_covers_whole_line() -> None:
    line = 'var x = "s"; // note'
    fragments = _highlight_line(line)

    assert "".join(text for _, text in fragments) == line
    assert (GROUP_STYLE["keyword"], "var") in fragments
    assert (GROUP_STYLE["string"], '"s"') in fragments
    assert (GROUP_STYLE["comment"], "// note") in fragments


def test_highlight_falls_back_on_lex_error() -> None:
    assert _highlight_line('"open') == [("", '"open')]
