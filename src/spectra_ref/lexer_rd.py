"""
Lexer for Spectra - Recursive Descent Parser

Tokenizes Spectra source code into a stream of tokens.

Features:
- Single-pass, lazy tokenization (one token per request)
- Position tracking (line, column)
- String and char literals with escape decoding
- `//` line comments
"""

from typing import Iterator, List

from .errors import (
    InvalidCharLiteral,
    InvalidEscape,
    LexError,
    UnexpectedCharacter,
    UnterminatedChar,
    UnterminatedString,
)
from .token_types import TT, Tok
from .utils import raise_host_limits

# ============================================================================
# Lexer Implementation
# ============================================================================

_IDENT_START = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ_")
_DIGITS = frozenset("0123456789")
_IDENT_CONTINUE = _IDENT_START | _DIGITS
_WHITESPACE = frozenset(" \t\r\n")


class Lexer:
    """
    Spectra lexer.

    Tokens are produced by the `scan()` generator so the parser can pull
    them one at a time. `tokenize()` drains it into a list.
    """

    # Keyword mapping
    KEYWORDS = {
        'var': TT.VAR,
        'fun': TT.FUN,
        'if': TT.IF,
        'else': TT.ELSE,
        'while': TT.WHILE,
        'break': TT.BREAK,
        'continue': TT.CONTINUE,
        'class': TT.CLASS,
        'constructor': TT.CONSTRUCTOR,
        'this': TT.THIS,
        'true': TT.TRUE,
        'false': TT.FALSE,
        'null': TT.NULL,
    }

    KEYWORD_LITERALS = {
        TT.TRUE: True,
        TT.FALSE: False,
    }

    # Operator mapping: longest matches first to handle prefixes correctly
    OPERATORS = [
        # Two-character operators
        ('==', TT.EQ),
        ('!=', TT.NEQ),
        ('<=', TT.LTE),
        ('>=', TT.GTE),
        ('++', TT.INCR),
        ('--', TT.DECR),
        ('+=', TT.PLUSEQ),
        ('-=', TT.MINUSEQ),
        ('*=', TT.STAREQ),
        ('/=', TT.SLASHEQ),

        # Single-character operators
        ('+', TT.PLUS),
        ('-', TT.MINUS),
        ('*', TT.STAR),
        ('/', TT.SLASH),
        ('%', TT.MOD),
        ('<', TT.LT),
        ('>', TT.GT),
        ('!', TT.NEG),
        ('=', TT.ASSIGN),
        ('(', TT.LPAR),
        (')', TT.RPAR),
        ('{', TT.LBRACE),
        ('}', TT.RBRACE),
        ('[', TT.LSQB),
        (']', TT.RSQB),
        (',', TT.COMMA),
        ('.', TT.DOT),
        (';', TT.SEMI),
    ]

    ESCAPES = {
        'n': '\n',
        't': '\t',
        '\\': '\\',
        '"': '"',
    }

    # Char literals may also escape their own delimiter
    CHAR_ESCAPES = {**ESCAPES, "'": "'"}

    def __init__(self, source: str):
        raise_host_limits()
        self.source = source
        self.pos = 0
        self.line = 1
        self.column = 1

        # Start of the token being scanned
        self.tok_line = 1
        self.tok_column = 1

    # ========================================================================
    # Main Tokenization
    # ========================================================================

    def tokenize(self) -> List[Tok]:
        """Tokenize entire source, return token list"""
        return list(self.scan())

    def scan(self) -> Iterator[Tok]:
        """Yield tokens lazily, ending with exactly one EOF token"""
        while True:
            self.skip_trivia()
            self.tok_line = self.line
            self.tok_column = self.column

            if self.pos >= len(self.source):
                yield self.make(TT.EOF, None)
                return

            yield self.scan_token()

    def scan_token(self) -> Tok:
        """Scan next token (trivia already skipped)"""
        ch = self.peek()

        # String literals
        if ch == '"':
            return self.scan_string()

        # Char literals
        if ch == "'":
            return self.scan_char()

        # Numbers
        if ch in _DIGITS:
            return self.scan_number()

        # Identifiers and keywords
        if ch in _IDENT_START:
            return self.scan_identifier()

        # Operators and punctuation
        return self.scan_operator()

    # ========================================================================
    # Token Scanners
    # ========================================================================

    def scan_string(self) -> Tok:
        """Scan string literal: "..." with escapes decoded into `literal`"""
        start = self.pos
        self.advance()  # Opening quote
        decoded = ''

        while self.pos < len(self.source) and self.peek() != '"':
            if self.peek() == '\\':
                decoded += self.scan_escape(self.ESCAPES)
            else:
                decoded += self.advance()

        if self.pos >= len(self.source):
            raise UnterminatedString(self.tok_line)

        self.advance()  # Closing quote
        return self.make(TT.STRING, self.source[start:self.pos], decoded)

    def scan_char(self) -> Tok:
        """Scan char literal: '<one possibly escaped character>'"""
        start = self.pos
        self.advance()  # Opening quote
        decoded = ''

        while self.peek() != "'":
            if self.pos >= len(self.source) or self.peek() == '\n':
                raise UnterminatedChar(self.tok_line)

            if self.peek() == '\\':
                decoded += self.scan_escape(self.CHAR_ESCAPES)
            else:
                decoded += self.advance()

        self.advance()  # Closing quote

        if len(decoded) != 1:
            raise InvalidCharLiteral(decoded, self.tok_line)

        return self.make(TT.CHAR, self.source[start:self.pos], decoded)

    def scan_escape(self, table: dict) -> str:
        """Consume a backslash escape and return the decoded character"""
        self.advance()  # Backslash

        if self.pos >= len(self.source):
            # Let the caller report the missing terminator
            return ''

        code = self.advance()
        decoded = table.get(code)
        if decoded is None:
            raise InvalidEscape('\\' + code, self.line)

        return decoded

    def scan_number(self) -> Tok:
        """Scan number literal: digits, optionally `.digits` (no exponent)"""
        start = self.pos

        # Integer part
        while self.peek() in _DIGITS:
            self.advance()

        # Decimal part
        if self.peek() == '.' and self.peek(1) in _DIGITS:
            self.advance()  # .
            while self.peek() in _DIGITS:
                self.advance()

            text = self.source[start:self.pos]
            return self.make(TT.FLOAT, text, float(text))

        text = self.source[start:self.pos]
        return self.make(TT.INT, text, int(text))

    def scan_identifier(self) -> Tok:
        """Scan identifier or keyword"""
        start = self.pos

        while self.peek() in _IDENT_CONTINUE:
            self.advance()

        value = self.source[start:self.pos]

        # Check if keyword
        token_type = self.KEYWORDS.get(value, TT.IDENT)
        return self.make(token_type, value, self.KEYWORD_LITERALS.get(token_type))

    def scan_operator(self) -> Tok:
        """Scan operators and punctuation"""
        for op_str, op_type in self.OPERATORS:
            if self.source.startswith(op_str, self.pos):
                self.advance(len(op_str))
                return self.make(op_type, op_str)

        raise UnexpectedCharacter(self.peek(), self.line, self.column)

    # ========================================================================
    # Utilities
    # ========================================================================

    def peek(self, offset: int = 0) -> str:
        """Look ahead at character"""
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return '\0'

    def advance(self, n: int = 1) -> str:
        """Consume n characters and return them as a string"""
        if n < 0:
            raise ValueError(f"advance() requires n >= 0, got {n}")

        result = self.source[self.pos:self.pos + n]

        for ch in result:
            if ch == '\n':
                self.line += 1
                self.column = 1
            else:
                self.column += 1

        self.pos += len(result)
        return result

    def skip_trivia(self) -> None:
        """Skip whitespace and `//` comments"""
        while self.pos < len(self.source):
            ch = self.peek()

            if ch in _WHITESPACE:
                self.advance()
            elif ch == '/' and self.peek(1) == '/':
                while self.pos < len(self.source) and self.peek() != '\n':
                    self.advance()
            else:
                return

    def make(self, token_type: TT, value, literal=None) -> Tok:
        """Build a token positioned at the start of the current scan"""
        return Tok(
            type=token_type,
            value=value,
            line=self.tok_line,
            column=self.tok_column,
            literal=literal,
        )


def tokenize(source: str) -> Iterator[Tok]:
    """Lazily tokenize source; the sequence always ends with EOF"""
    return Lexer(source).scan()


__all__ = ["Lexer", "LexError", "TT", "Tok", "tokenize"]
