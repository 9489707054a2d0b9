"""
Errors raised by the lexer, parser and evaluator.

Every error carries the source line it was raised for. Runtime errors also
name the identifier or operator at fault so a host can render a diagnostic
without re-walking the AST.
"""

from __future__ import annotations

from typing import Any, Optional


class SpectraError(Exception):
    """Root of every error the core reports to its caller."""

    def __init__(self, message: str, line: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.line = line

    def __str__(self) -> str:
        if self.line is None:
            return self.message

        return f"{self.message} (line {self.line})"


# ---------- Lexing ----------

class LexError(SpectraError):
    """Lexical analysis error"""


class UnterminatedString(LexError):
    def __init__(self, line: int):
        super().__init__("Unterminated string literal", line)


class UnterminatedChar(LexError):
    def __init__(self, line: int):
        super().__init__("Unterminated char literal", line)


class InvalidCharLiteral(LexError):
    def __init__(self, body: str, line: int):
        super().__init__(f"Char literal must hold exactly one character, got '{body}'", line)
        self.body = body


class InvalidEscape(LexError):
    def __init__(self, sequence: str, line: int):
        super().__init__(f"Unknown escape sequence '{sequence}'", line)
        self.sequence = sequence


class UnexpectedCharacter(LexError):
    def __init__(self, ch: str, line: int, column: Optional[int] = None):
        super().__init__(f"Unexpected character '{ch}'", line)
        self.ch = ch
        self.column = column


# ---------- Parsing ----------

class ParseError(SpectraError):
    """Parse error with the expectation and the token actually found"""

    def __init__(self, expected: str, found: Any):
        self.expected = expected
        self.found = found
        describe = getattr(found, "describe", None)
        got = describe() if callable(describe) else repr(found)
        super().__init__(f"Expected {expected}, got {got}", getattr(found, "line", None))


class NestingTooDeep(SpectraError):
    def __init__(self, line: Optional[int] = None):
        super().__init__("Program is nested too deeply to parse", line)


# ---------- Runtime ----------

class SpectraRuntimeError(SpectraError):
    spc_py_trace: Optional[Any]

    def __init__(self, message: str, line: Optional[int] = None):
        super().__init__(message, line)
        self.spc_py_trace = None


class UndefinedVariable(SpectraRuntimeError):
    def __init__(self, name: str):
        super().__init__(f"Undefined variable '{name}'")
        self.name = name


class DuplicateDefinition(SpectraRuntimeError):
    def __init__(self, name: str):
        super().__init__(f"'{name}' is already defined in this scope")
        self.name = name


class TypeMismatch(SpectraRuntimeError):
    def __init__(self, message: str, op: Optional[str] = None):
        super().__init__(message)
        self.op = op


class NotCallable(TypeMismatch):
    def __init__(self, type_name: str):
        super().__init__(f"Value of type {type_name} is not callable", op="call")
        self.type_name = type_name


class ArityMismatch(SpectraRuntimeError):
    def __init__(self, name: str, expected: int, got: int):
        super().__init__(f"{name} expects {expected} argument(s); got {got}")
        self.name = name
        self.expected = expected
        self.got = got


class UndefinedMethod(SpectraRuntimeError):
    def __init__(self, class_name: str, name: str):
        super().__init__(f"Class '{class_name}' has no method '{name}'")
        self.class_name = class_name
        self.name = name


class UndefinedField(SpectraRuntimeError):
    def __init__(self, class_name: str, name: str):
        super().__init__(f"Class '{class_name}' has no field '{name}'")
        self.class_name = class_name
        self.name = name


class IllegalControlFlow(SpectraRuntimeError):
    def __init__(self, keyword: str):
        super().__init__(f"'{keyword}' outside of a loop")
        self.keyword = keyword


class DivisionByZero(SpectraRuntimeError):
    def __init__(self, op: str):
        super().__init__(f"Division by zero in '{op}'")
        self.op = op


class RecursionDepthExceeded(SpectraRuntimeError):
    def __init__(self, limit: Optional[int] = None):
        detail = f" of {limit} calls" if limit is not None else ""
        super().__init__(f"Maximum recursion depth{detail} exceeded")
        self.limit = limit


class NumericOverflow(SpectraRuntimeError):
    def __init__(self, op: str):
        super().__init__(f"Numeric overflow in '{op}'")
        self.op = op
