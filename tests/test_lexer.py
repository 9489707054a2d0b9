from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

import pytest

from spectra_ref.lexer_rd import Lexer, TT, tokenize
from tests.support.harness import (
    InvalidCharLiteral,
    InvalidEscape,
    LexError,
    UnexpectedCharacter,
    UnterminatedChar,
    UnterminatedString,
)


@dataclass(frozen=True)
class Case:
    """Unified lexer case payload."""

    name: str
    source: str
    expected: Optional[Tuple[Tuple[TT, object], ...]] = None
    expected_types: Optional[Tuple[TT, ...]] = None
    expected_lines: Optional[Tuple[Tuple[str, int], ...]] = None
    exc: Optional[type[Exception]] = None
    msg: Optional[str] = None
    err_line: Optional[int] = None


LITERAL_CASES: List[Case] = [
    Case("int", "123", expected=((TT.INT, 123),)),
    Case("int-zero", "0", expected=((TT.INT, 0),)),
    Case("float", "3.14", expected=((TT.FLOAT, 3.14),)),
    Case("string", '"hello"', expected=((TT.STRING, "hello"),)),
    Case("string-empty", '""', expected=((TT.STRING, ""),)),
    Case("char", "'a'", expected=((TT.CHAR, "a"),)),
    Case("bool-true", "true", expected=((TT.TRUE, True),)),
    Case("bool-false", "false", expected=((TT.FALSE, False),)),
]

ESCAPE_CASES: List[Case] = [
    Case("newline", r'"a\nb"', expected=((TT.STRING, "a\nb"),)),
    Case("tab", r'"a\tb"', expected=((TT.STRING, "a\tb"),)),
    Case("quote", r'"say \"hi\""', expected=((TT.STRING, 'say "hi"'),)),
    Case("backslash", r'"back\\slash"', expected=((TT.STRING, "back\\slash"),)),
    Case("char-newline", r"'\n'", expected=((TT.CHAR, "\n"),)),
    Case("char-quote", r"'\''", expected=((TT.CHAR, "'"),)),
]

OPERATOR_CASES: List[Case] = [
    Case("eq", "==", expected_types=(TT.EQ,)),
    Case("neq", "!=", expected_types=(TT.NEQ,)),
    Case("lte", "<=", expected_types=(TT.LTE,)),
    Case("gte", ">=", expected_types=(TT.GTE,)),
    Case("lt", "<", expected_types=(TT.LT,)),
    Case("gt", ">", expected_types=(TT.GT,)),
    Case("assign", "=", expected_types=(TT.ASSIGN,)),
    Case("neg", "!", expected_types=(TT.NEG,)),
    Case("incr", "++", expected_types=(TT.INCR,)),
    Case("decr", "--", expected_types=(TT.DECR,)),
    Case("pluseq", "+=", expected_types=(TT.PLUSEQ,)),
    Case("slasheq", "/=", expected_types=(TT.SLASHEQ,)),
    Case("mod", "%", expected_types=(TT.MOD,)),
    Case("eq-then-assign", "===", expected_types=(TT.EQ, TT.ASSIGN)),
    Case("lt-then-neg", "<!", expected_types=(TT.LT, TT.NEG)),
    Case(
        "punctuation",
        "(){}[],.;",
        expected_types=(
            TT.LPAR, TT.RPAR, TT.LBRACE, TT.RBRACE, TT.LSQB, TT.RSQB,
            TT.COMMA, TT.DOT, TT.SEMI,
        ),
    ),
]

KEYWORD_CASES: List[Case] = [
    Case(f"kw-{word}", word, expected_types=(tt,)) for word, tt in Lexer.KEYWORDS.items()
] + [
    Case("ident-plain", "foo", expected_types=(TT.IDENT,)),
    Case("ident-keyword-prefix", "variable", expected_types=(TT.IDENT,)),
    Case("ident-keyword-suffix", "my_class", expected_types=(TT.IDENT,)),
    Case("ident-underscore", "_x1", expected_types=(TT.IDENT,)),
]

SEQUENCE_CASES: List[Case] = [
    Case(
        "var-decl",
        "var x = 1;",
        expected_types=(TT.VAR, TT.IDENT, TT.ASSIGN, TT.INT, TT.SEMI),
    ),
    Case(
        "member-call",
        "p.move(1, 2.5)",
        expected_types=(
            TT.IDENT, TT.DOT, TT.IDENT, TT.LPAR, TT.INT, TT.COMMA, TT.FLOAT, TT.RPAR,
        ),
    ),
    Case("int-then-dot", "1.x", expected_types=(TT.INT, TT.DOT, TT.IDENT)),
    Case("comment-only", "// nothing here", expected_types=()),
    Case("comment-after-code", "x // trailing", expected_types=(TT.IDENT,)),
    Case("slash-not-comment", "a / b", expected_types=(TT.IDENT, TT.SLASH, TT.IDENT)),
]

POSITION_CASES: List[Case] = [
    Case("simple-lines", "x\ny\n  z", expected_lines=(("x", 1), ("y", 2), ("z", 3))),
    Case(
        "comment-lines",
        "a // one\n// two\nb",
        expected_lines=(("a", 1), ("b", 3)),
    ),
    Case(
        "multiline-string",
        '"a\nb" c',
        expected_lines=(('"a\nb"', 1), ("c", 2)),
    ),
]

LEX_ERROR_CASES: List[Case] = [
    Case("unterminated-string", '"abc', exc=UnterminatedString, msg="Unterminated string", err_line=1),
    Case(
        "unterminated-string-line2",
        'var x = 1;\nvar y = "abc',
        exc=UnterminatedString,
        err_line=2,
    ),
    Case("unterminated-char", "'a", exc=UnterminatedChar, err_line=1),
    Case("char-newline", "'\n'", exc=UnterminatedChar, err_line=1),
    Case("char-empty", "''", exc=InvalidCharLiteral, msg="exactly one character"),
    Case("char-too-long", "'ab'", exc=InvalidCharLiteral),
    Case("unknown-escape", r'"\q"', exc=InvalidEscape, msg="\\q"),
    Case("unexpected-at", "x @ y", exc=UnexpectedCharacter, msg="'@'", err_line=1),
    Case("unexpected-line3", "a\nb\n#", exc=UnexpectedCharacter, err_line=3),
]


def _case_params(cases: List[Case]) -> List[pytest.ParameterSet]:
    return [pytest.param(case, id=case.name) for case in cases]


def _significant(source: str):
    return [tok for tok in Lexer(source).tokenize() if tok.type != TT.EOF]


@pytest.mark.parametrize("case", _case_params(LITERAL_CASES + ESCAPE_CASES))
def test_literal_tokens(case: Case) -> None:
    tokens = _significant(case.source)
    assert [(tok.type, tok.literal) for tok in tokens] == list(case.expected)


@pytest.mark.parametrize(
    "case", _case_params(OPERATOR_CASES + KEYWORD_CASES + SEQUENCE_CASES)
)
def test_token_types(case: Case) -> None:
    tokens = _significant(case.source)
    assert tuple(tok.type for tok in tokens) == case.expected_types


@pytest.mark.parametrize("case", _case_params(POSITION_CASES))
def test_token_lines(case: Case) -> None:
    tokens = _significant(case.source)
    assert tuple((tok.value, tok.line) for tok in tokens) == case.expected_lines


@pytest.mark.parametrize("case", _case_params(LEX_ERROR_CASES))
def test_lex_errors(case: Case) -> None:
    with pytest.raises(case.exc) as exc_info:
        Lexer(case.source).tokenize()

    err = exc_info.value
    assert isinstance(err, LexError)
    if case.msg is not None:
        assert case.msg in str(err)
    if case.err_line is not None:
        assert err.line == case.err_line


def test_tokenize_ends_with_single_eof() -> None:
    tokens = list(tokenize("var x = 1;"))
    assert tokens[-1].type == TT.EOF
    assert [tok.type for tok in tokens].count(TT.EOF) == 1


def test_empty_source_is_just_eof() -> None:
    tokens = list(tokenize(""))
    assert [tok.type for tok in tokens] == [TT.EOF]


def test_tokenize_is_lazy() -> None:
    # The bad character sits after the first token; pulling one token is fine.
    stream = tokenize("x @")
    first = next(stream)
    assert first.type == TT.IDENT

    with pytest.raises(UnexpectedCharacter):
        next(stream)


def test_tokens_carry_columns() -> None:
    tokens = _significant("var  answer = 42;")
    assert [(tok.value, tok.column) for tok in tokens] == [
        ("var", 1),
        ("answer", 6),
        ("=", 13),
        ("42", 15),
        (";", 17),
    ]


def test_string_token_keeps_lexeme() -> None:
    (tok,) = _significant(r'"a\tb"')
    assert tok.value == r'"a\tb"'
    assert tok.literal == "a\tb"
