from __future__ import annotations

import pytest

from spectra_ref.runtime import (
    ShkBool,
    ShkClass,
    ShkFloat,
    ShkInstance,
    ShkInt,
    ShkNull,
    ShkString,
    new_global_frame,
)
from spectra_ref.utils import stringify
from tests.support.harness import run_program

OUTPUT_CASES = [
    pytest.param('print("a"); print(1);', "a1", id="print-no-newline"),
    pytest.param('println("hi");', "hi\n", id="println-string"),
    pytest.param("println(42);", "42\n", id="println-int"),
    pytest.param("println(2.0 * 2);", "4.0\n", id="println-float-keeps-fraction"),
    pytest.param("println(0.5);", "0.5\n", id="println-float"),
    pytest.param("println(0.00001);", "0.00001\n", id="println-small-float"),
    pytest.param("println(100000000.0 * 100000000.0);", "10000000000000000.0\n", id="println-large-float"),
    pytest.param("println(true); println(false);", "true\nfalse\n", id="println-bools"),
    pytest.param("println(null);", "null\n", id="println-null"),
    pytest.param("println('c');", "c\n", id="println-char"),
    pytest.param('println("tab\\there");', "tab\there\n", id="println-escape"),
    pytest.param('println("a", 1, true, null);', "a 1 true null\n", id="println-many"),
    pytest.param("println();", "\n", id="println-empty"),
    pytest.param("println(fun (a, b) { a; });", "<fun(a, b)>\n", id="println-function"),
    pytest.param("println(println);", "<builtin println>\n", id="println-builtin"),
    pytest.param("class P { } println(P);", "<class P>\n", id="println-class"),
    pytest.param("class P { } println(P());", "<P instance>\n", id="println-instance"),
    pytest.param(
        'var i = 0; while i < 3 { print(i); i = i + 1; } println("");',
        "012\n",
        id="print-in-loop",
    ),
    pytest.param(
        'println(if 1 < 2 { "yes"; } else { "no"; });',
        "yes\n",
        id="println-if-value",
    ),
]


@pytest.mark.parametrize("source, expected", OUTPUT_CASES)
def test_output(source: str, expected: str, capsys: pytest.CaptureFixture[str]) -> None:
    run_program(source)
    assert capsys.readouterr().out == expected


def test_print_returns_null(capsys: pytest.CaptureFixture[str]) -> None:
    result = run_program('var r = println("x"); r;')

    assert isinstance(result, ShkNull)
    assert capsys.readouterr().out == "x\n"


def test_builtins_live_in_global_frame() -> None:
    frame = new_global_frame()

    assert frame.get("print").name == "print"
    assert frame.get("println").name == "println"


STRINGIFY_CASES = [
    pytest.param(ShkInt(-3), "-3", id="int"),
    pytest.param(ShkFloat(1.0), "1.0", id="float-integral"),
    pytest.param(ShkFloat(2.25), "2.25", id="float"),
    pytest.param(ShkFloat(0.00001), "0.00001", id="float-small"),
    pytest.param(ShkFloat(-2.5e-7), "-0.00000025", id="float-small-negative"),
    pytest.param(ShkFloat(1e16), "10000000000000000.0", id="float-large"),
    pytest.param(ShkFloat(1.5e20), "150000000000000000000.0", id="float-large-fraction"),
    pytest.param(ShkFloat(0.1 + 0.2), "0.30000000000000004", id="float-shortest-repr"),
    pytest.param(ShkFloat(1e308 * 10), "Infinity", id="float-overflowed"),
    pytest.param(ShkBool(True), "true", id="bool"),
    pytest.param(ShkNull(), "null", id="null"),
    pytest.param(ShkString('say "hi"'), 'say "hi"', id="string-raw"),
    pytest.param(ShkClass(name="Box", fields=[]), "<class Box>", id="class"),
    pytest.param(
        ShkInstance(cls=ShkClass(name="Box", fields=[]), fields={}),
        "<Box instance>",
        id="instance",
    ),
]


@pytest.mark.parametrize("value, expected", STRINGIFY_CASES)
def test_stringify(value, expected: str) -> None:
    assert stringify(value) == expected


def test_small_float_concatenation_stays_positional() -> None:
    result = run_program('"v=" + 0.00001;')
    assert result.value == "v=0.00001"


def test_huge_integer_prints_every_digit(capsys: pytest.CaptureFixture[str]) -> None:
    digits = "9" * 5000
    run_program(f"println({digits} + 0);")

    assert capsys.readouterr().out == digits + "\n"
