"""
Token Types for Spectra Parser

Shared between lexer and parser to avoid circular dependencies.
"""

from typing import Any
from dataclasses import dataclass
from enum import Enum, auto


class TT(Enum):
    """Token Types - the closed set the lexer emits"""

    # Literals
    INT = auto()
    FLOAT = auto()
    STRING = auto()
    CHAR = auto()
    IDENT = auto()

    # Keywords
    VAR = auto()
    FUN = auto()
    IF = auto()
    ELSE = auto()
    WHILE = auto()
    BREAK = auto()
    CONTINUE = auto()
    CLASS = auto()
    CONSTRUCTOR = auto()
    THIS = auto()
    TRUE = auto()
    FALSE = auto()
    NULL = auto()

    # Arithmetic
    PLUS = auto()
    MINUS = auto()
    STAR = auto()
    SLASH = auto()
    MOD = auto()

    # Comparison
    EQ = auto()
    NEQ = auto()
    LT = auto()
    LTE = auto()
    GT = auto()
    GTE = auto()

    # Prefix
    NEG = auto()  # !

    # Postfix
    INCR = auto()  # ++
    DECR = auto()  # --

    # Assignment
    ASSIGN = auto()  # =
    PLUSEQ = auto()
    MINUSEQ = auto()
    STAREQ = auto()
    SLASHEQ = auto()

    # Punctuation
    LPAR = auto()
    RPAR = auto()
    LBRACE = auto()
    RBRACE = auto()
    LSQB = auto()
    RSQB = auto()
    COMMA = auto()
    DOT = auto()
    SEMI = auto()

    # Special
    EOF = auto()


@dataclass
class Tok:
    """Token with position info and the decoded literal, if any"""

    type: TT
    value: Any
    line: int = 0
    column: int = 0
    literal: Any = None

    def describe(self) -> str:
        """Human-readable form used in parse diagnostics."""
        if self.type == TT.EOF:
            return "end of input"
        if self.type == TT.IDENT:
            return f"identifier `{self.value}`"
        if self.type in (TT.INT, TT.FLOAT):
            return f"number `{self.value}`"
        if self.type in (TT.STRING, TT.CHAR):
            return f"literal {self.value}"
        return f"`{self.value}`"

    def __repr__(self):
        return f"Tok({self.type.name}, {self.value!r}, {self.line}:{self.column})"
