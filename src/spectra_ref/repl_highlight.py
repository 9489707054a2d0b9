"""prompt_toolkit lexer for live Spectra syntax highlighting in the REPL."""

from __future__ import annotations

from typing import Callable

from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import StyleAndTextTuples
from prompt_toolkit.lexers import Lexer

from .lexer_rd import Lexer as SpcLexer, LexError
from .token_types import TT

# Map highlight groups → prompt_toolkit style strings.
GROUP_STYLE = {
    "keyword": "bold ansicyan",
    "boolean": "ansicyan",
    "constant": "ansicyan",
    "number": "ansimagenta",
    "string": "ansigreen",
    "identifier": "",
    "operator": "",
    "punctuation": "",
    "comment": "italic ansigray",
}

_KEYWORD_TT = {
    TT.VAR, TT.FUN, TT.IF, TT.ELSE, TT.WHILE, TT.BREAK, TT.CONTINUE,
    TT.CLASS, TT.CONSTRUCTOR, TT.THIS,
}

_PUNCT_TT = {
    TT.LPAR, TT.RPAR, TT.LBRACE, TT.RBRACE, TT.LSQB, TT.RSQB,
    TT.COMMA, TT.DOT, TT.SEMI,
}

def token_group(tt: TT) -> str:
    if tt in _KEYWORD_TT:
        return "keyword"
    if tt in (TT.TRUE, TT.FALSE):
        return "boolean"
    if tt == TT.NULL:
        return "constant"
    if tt in (TT.INT, TT.FLOAT):
        return "number"
    if tt in (TT.STRING, TT.CHAR):
        return "string"
    if tt == TT.IDENT:
        return "identifier"
    if tt in _PUNCT_TT:
        return "punctuation"
    return "operator"

def _highlight_line(text: str) -> StyleAndTextTuples:
    """Tokenize a single line and return styled fragments."""
    if not text:
        return [("", "")]

    try:
        tokens = SpcLexer(text).tokenize()
    except LexError:
        return [("", text)]

    result: StyleAndTextTuples = []
    pos = 0

    for tok in tokens:
        if tok.type == TT.EOF:
            continue

        tok_text = str(tok.value)
        start = tok.column - 1

        # Unstyled gap before token.
        if start > pos:
            result.append(("", text[pos:start]))

        result.append((GROUP_STYLE[token_group(tok.type)], tok_text))
        pos = start + len(tok_text)

    # Trailing text is whitespace and possibly a `//` comment.
    if pos < len(text):
        tail = text[pos:]
        lead = len(tail) - len(tail.lstrip())
        if tail.lstrip().startswith("//"):
            if lead:
                result.append(("", tail[:lead]))
            result.append((GROUP_STYLE["comment"], tail[lead:]))
        else:
            result.append(("", tail))

    return result if result else [("", text)]


class SpectraLexer(Lexer):
    """prompt_toolkit Lexer that highlights Spectra source using the RD lexer."""

    def lex_document(self, document: Document) -> Callable[[int], StyleAndTextTuples]:
        lines = document.lines

        cache: dict[int, StyleAndTextTuples] = {}

        def get_line(lineno: int) -> StyleAndTextTuples:
            if lineno not in cache:
                if lineno < len(lines):
                    cache[lineno] = _highlight_line(lines[lineno])
                else:
                    cache[lineno] = [("", "")]

            return cache[lineno]

        return get_line
