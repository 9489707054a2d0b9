"""
Recursive Descent Parser for Spectra

Structure:
- Lexer: lazy token stream from source
- Parser: recursive descent for statements, precedence climbing for
  binary operators
- AST: lark Tree/Token nodes (shapes documented in tree.py)

There is no error recovery: the first unexpected token raises ParseError.
`break`/`continue` placement is not checked here; the evaluator reports a
stray one when it reaches it.
"""

from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from lark import Token, Tree

from .errors import NestingTooDeep, ParseError
from .lexer_rd import Lexer, tokenize
from .token_types import TT, Tok
from .tree import ASSIGNABLE_LABELS, BLOCK_BODIED_LABELS, make_tree, tree_label

# Binding power of each binary operator; all binary levels are left-associative.
# Assignment sits below these and is handled separately (right-associative).
BINARY_PRECEDENCE: Dict[TT, int] = {
    TT.EQ: 1, TT.NEQ: 1,
    TT.LT: 2, TT.LTE: 2, TT.GT: 2, TT.GTE: 2,
    TT.PLUS: 3, TT.MINUS: 3,
    TT.STAR: 4, TT.SLASH: 4, TT.MOD: 4,
}

PREFIX_OPS = (TT.NEG, TT.MINUS)
POSTFIX_OPS = (TT.INCR, TT.DECR)
COMPOUND_ASSIGN_OPS = (TT.PLUSEQ, TT.MINUSEQ, TT.STAREQ, TT.SLASHEQ)

LITERAL_TOKENS = (TT.INT, TT.FLOAT, TT.STRING, TT.CHAR, TT.TRUE, TT.FALSE, TT.NULL)

_DISPLAY: Dict[TT, str] = {tt: f"`{text}`" for text, tt in Lexer.OPERATORS}
_DISPLAY.update({tt: f"`{word}`" for word, tt in Lexer.KEYWORDS.items()})
_DISPLAY.update({
    TT.IDENT: "identifier",
    TT.INT: "integer literal",
    TT.FLOAT: "float literal",
    TT.STRING: "string literal",
    TT.CHAR: "char literal",
    TT.EOF: "end of input",
})


def describe_kind(token_type: TT) -> str:
    return _DISPLAY.get(token_type, token_type.name)


# ============================================================================
# Parser
# ============================================================================

class Parser:
    """
    Recursive descent parser for Spectra.

    Expression precedence (lowest to highest):
    1. assignment (=, +=, -=, *=, /=)   right-assoc
    2. equality (==, !=)
    3. relational (<, <=, >, >=)
    4. additive (+, -)
    5. multiplicative (*, /, %)
    6. prefix (!, -)                    right-assoc
    7. postfix (call, .member, ++, --)
    8. primary (literals, identifiers, this, parens, fun, if, while)
    """

    def __init__(self, tokens: Iterable[Tok]):
        self._stream: Iterator[Tok] = iter(tokens)
        self._lookahead: List[Tok] = []
        self._eof: Optional[Tok] = None
        self._last_line = 0
        self.current = self._pull()

    # ========================================================================
    # Token Navigation
    # ========================================================================

    def _pull(self) -> Tok:
        if self._eof is not None:
            return self._eof

        tok = next(self._stream, None)
        if tok is None:
            tok = Tok(TT.EOF, None, self._last_line, 0)

        self._last_line = tok.line

        if tok.type == TT.EOF:
            self._eof = tok

        return tok

    def peek(self, offset: int = 0) -> Tok:
        """Look ahead at token; offset 0 is the current token"""
        if offset == 0:
            return self.current

        while len(self._lookahead) < offset:
            self._lookahead.append(self._pull())

        return self._lookahead[offset - 1]

    def advance(self) -> Tok:
        """Consume current token and move to next"""
        prev = self.current

        if self._lookahead:
            self.current = self._lookahead.pop(0)
        else:
            self.current = self._pull()

        return prev

    def check(self, *types: TT) -> bool:
        """Check if current token matches any of the given types"""
        return self.current.type in types

    def match(self, *types: TT) -> bool:
        """Check and consume if current token matches"""
        if self.check(*types):
            self.advance()
            return True
        return False

    def expect(self, token_type: TT, expected: Optional[str] = None) -> Tok:
        """Consume token of expected type or raise error"""
        if not self.check(token_type):
            raise ParseError(expected or describe_kind(token_type), self.current)
        return self.advance()

    # ========================================================================
    # Top-Level Parsing
    # ========================================================================

    def parse(self) -> Tree:
        """Parse entire program"""
        first = self.current
        stmts = []

        try:
            while not self.check(TT.EOF):
                stmts.append(self.parse_statement())
        except RecursionError:
            raise NestingTooDeep(self.current.line) from None

        return make_tree('program', stmts, first.line, first.column)

    # ========================================================================
    # Statements
    # ========================================================================

    def parse_statement(self) -> Tree:
        """
        Parse a single statement, dispatching on the leading token:
        var / class / break / continue / block / bare if-while / expression.
        """
        if self.check(TT.VAR):
            return self.parse_var_decl()
        if self.check(TT.CLASS):
            decl = self.parse_class_decl()
            self.match(TT.SEMI)
            return decl
        if self.check(TT.BREAK, TT.CONTINUE):
            return self.parse_loop_control()
        if self.check(TT.LBRACE):
            block = self.parse_block()
            self.match(TT.SEMI)
            return block

        start = self.current

        # Statement-level if/while end at their closing brace; a following
        # operator starts the next statement rather than continuing this one.
        if self.check(TT.IF):
            expr = self.parse_if_expr()
            self.match(TT.SEMI)
            return make_tree('exprstmt', [expr], start.line, start.column)
        if self.check(TT.WHILE):
            expr = self.parse_while_expr()
            self.match(TT.SEMI)
            return make_tree('exprstmt', [expr], start.line, start.column)

        expr = self.parse_expr()
        self.expect_terminator(expr)
        return make_tree('exprstmt', [expr], start.line, start.column)

    def expect_terminator(self, expr: Tree) -> None:
        """
        `;` ends a statement. It may be left off after a block-bodied
        expression or before the `}` closing the enclosing block.
        """
        if self.match(TT.SEMI):
            return

        if tree_label(expr) in BLOCK_BODIED_LABELS or self.check(TT.RBRACE):
            return

        raise ParseError(describe_kind(TT.SEMI), self.current)

    def parse_var_decl(self) -> Tree:
        """Parse variable declaration: var name = expr;"""
        var_tok = self.expect(TT.VAR)
        name = self.expect(TT.IDENT)
        self.expect(TT.ASSIGN)
        init = self.parse_expr()
        self.expect_terminator(init)
        return make_tree('vardecl', [self._ident(name), init], var_tok.line, var_tok.column)

    def parse_loop_control(self) -> Tree:
        """Parse `break;` / `continue;`"""
        tok = self.advance()
        self.expect(TT.SEMI)
        label = 'breakstmt' if tok.type == TT.BREAK else 'continuestmt'
        return make_tree(label, [], tok.line, tok.column)

    def parse_class_decl(self) -> Tree:
        """
        Parse class declaration:
        class Name { field, field, constructor(params) { body } method(params) { body } }
        Members may be separated by commas.
        """
        class_tok = self.expect(TT.CLASS)
        name = self.expect(TT.IDENT)
        self.expect(TT.LBRACE)

        fields: List[Token] = []
        ctor: List[Tree] = []
        methods: List[Tree] = []

        # Fields come first: an identifier not followed by `(`
        while self.check(TT.IDENT) and self.peek(1).type != TT.LPAR:
            fields.append(self._ident(self.advance()))
            self.match(TT.COMMA)

        if self.check(TT.CONSTRUCTOR):
            ctor_tok = self.advance()
            ctor.append(self.parse_fn_tail(ctor_tok))
            self.match(TT.COMMA)

        while not self.check(TT.RBRACE):
            method_tok = self.expect(TT.IDENT, "method declaration or `}`")
            fn = self.parse_fn_tail(method_tok)
            methods.append(make_tree('method', [self._ident(method_tok), fn], method_tok.line, method_tok.column))
            self.match(TT.COMMA)

        self.expect(TT.RBRACE)

        children = [
            self._ident(name),
            make_tree('fields', fields, class_tok.line),
            make_tree('ctor', ctor, class_tok.line),
            make_tree('methods', methods, class_tok.line),
        ]
        return make_tree('classdecl', children, class_tok.line, class_tok.column)

    def parse_block(self) -> Tree:
        """Parse `{ stmt* }`"""
        lbrace = self.expect(TT.LBRACE)
        stmts = []

        while not self.check(TT.RBRACE):
            if self.check(TT.EOF):
                raise ParseError(describe_kind(TT.RBRACE), self.current)
            stmts.append(self.parse_statement())

        self.expect(TT.RBRACE)
        return make_tree('block', stmts, lbrace.line, lbrace.column)

    # ========================================================================
    # Expressions
    # ========================================================================

    def parse_expr(self) -> Tree:
        """Parse a full expression (assignment level)"""
        return self.parse_assignment()

    def parse_assignment(self) -> Tree:
        """Parse assignment: target = expr (right associative)"""
        left = self.parse_binary(1)

        if self.check(TT.ASSIGN):
            op = self.advance()
            self._require_assignable(left, op)
            value = self.parse_assignment()
            return make_tree('assign', [left, value], op.line, op.column)

        if self.check(*COMPOUND_ASSIGN_OPS):
            op = self.advance()
            self._require_assignable(left, op)
            value = self.parse_assignment()
            return make_tree('compound_assign', [self._op(op), left, value], op.line, op.column)

        return left

    def parse_binary(self, min_prec: int) -> Tree:
        """Precedence climbing over BINARY_PRECEDENCE (left associative)"""
        left = self.parse_prefix()

        while True:
            prec = BINARY_PRECEDENCE.get(self.current.type)
            if prec is None or prec < min_prec:
                return left

            op = self.advance()
            right = self.parse_binary(prec + 1)
            left = make_tree('binary', [self._op(op), left, right], op.line, op.column)

    def parse_prefix(self) -> Tree:
        """Parse unary prefix operators: !expr, -expr"""
        if self.check(*PREFIX_OPS):
            op = self.advance()
            operand = self.parse_prefix()
            return make_tree('prefix', [self._op(op), operand], op.line, op.column)

        return self.parse_postfix()

    def parse_postfix(self) -> Tree:
        """
        Parse postfix operations:
        - calls: expr(args)
        - member access: expr.name
        - increment/decrement: expr++ / expr--
        """
        expr = self.parse_primary()

        while True:
            if self.check(TT.LPAR):
                lpar = self.advance()
                args = self.parse_arg_list()
                expr = make_tree('call', [expr, make_tree('args', args, lpar.line)], lpar.line, lpar.column)
            elif self.check(TT.DOT):
                dot = self.advance()
                name = self.expect(TT.IDENT, "member name after `.`")
                expr = make_tree('member', [expr, self._ident(name)], dot.line, dot.column)
            elif self.check(*POSTFIX_OPS):
                op = self.advance()
                self._require_assignable(expr, op)
                expr = make_tree('postfix', [self._op(op), expr], op.line, op.column)
            else:
                return expr

    def parse_primary(self) -> Tree:
        """
        Parse primary expressions:
        - Literals (numbers, strings, chars, true, false, null)
        - Identifiers and `this`
        - Parenthesized expressions
        - Function literals, if and while expressions
        """
        tok = self.current

        if self.check(*LITERAL_TOKENS):
            self.advance()
            leaf = Token(tok.type.name, self._literal_text(tok), line=tok.line, column=tok.column)
            return make_tree('literal', [leaf], tok.line, tok.column)

        if self.check(TT.IDENT):
            self.advance()
            return make_tree('ident', [self._ident(tok)], tok.line, tok.column)

        if self.match(TT.THIS):
            return make_tree('this', [], tok.line, tok.column)

        if self.match(TT.LPAR):
            inner = self.parse_expr()
            self.expect(TT.RPAR)
            return inner

        if self.check(TT.FUN):
            fun_tok = self.advance()
            return self.parse_fn_tail(fun_tok)

        if self.check(TT.IF):
            return self.parse_if_expr()

        if self.check(TT.WHILE):
            return self.parse_while_expr()

        raise ParseError("expression", tok)

    def parse_if_expr(self) -> Tree:
        """
        Parse if expression:
        if expr { stmts } [else { stmts } | else if ...]
        """
        if_tok = self.expect(TT.IF)
        cond = self.parse_expr()
        then_block = self.parse_block()
        children = [cond, then_block]

        if self.match(TT.ELSE):
            if self.check(TT.IF):
                children.append(self.parse_if_expr())
            else:
                children.append(self.parse_block())

        return make_tree('ifexpr', children, if_tok.line, if_tok.column)

    def parse_while_expr(self) -> Tree:
        """Parse while loop: while expr { stmts }"""
        while_tok = self.expect(TT.WHILE)
        cond = self.parse_expr()
        body = self.parse_block()
        return make_tree('whileexpr', [cond, body], while_tok.line, while_tok.column)

    def parse_fn_tail(self, head: Tok) -> Tree:
        """Parse `(params) { body }` following `fun`, `constructor` or a method name"""
        lpar = self.expect(TT.LPAR)
        params = self.parse_param_list()
        body = self.parse_block()
        return make_tree('fnlit', [make_tree('params', params, lpar.line), body], head.line, head.column)

    def parse_param_list(self) -> List[Token]:
        """Parse `a, b, c)`; the opening paren is already consumed"""
        params: List[Token] = []

        if self.match(TT.RPAR):
            return params

        while True:
            params.append(self._ident(self.expect(TT.IDENT, "parameter name")))
            if self.match(TT.COMMA):
                continue
            self.expect(TT.RPAR, "`,` or `)`")
            return params

    def parse_arg_list(self) -> List[Tree]:
        """Parse `expr, expr)`; the opening paren is already consumed"""
        args: List[Tree] = []

        if self.match(TT.RPAR):
            return args

        while True:
            args.append(self.parse_expr())
            if self.match(TT.COMMA):
                continue
            self.expect(TT.RPAR, "`,` or `)`")
            return args

    # ========================================================================
    # Helpers
    # ========================================================================

    def _require_assignable(self, target: Tree, op: Tok) -> None:
        if tree_label(target) not in ASSIGNABLE_LABELS:
            raise ParseError(f"assignment target before {describe_kind(op.type)}", op)

    @staticmethod
    def _ident(tok: Tok) -> Token:
        return Token('IDENT', tok.value, line=tok.line, column=tok.column)

    @staticmethod
    def _op(tok: Tok) -> Token:
        return Token(tok.type.name, tok.value, line=tok.line, column=tok.column)

    @staticmethod
    def _literal_text(tok: Tok) -> str:
        # Strings/chars keep their decoded contents; everything else its lexeme
        if tok.type in (TT.STRING, TT.CHAR):
            return tok.literal
        return tok.value


# ============================================================================
# Entry points
# ============================================================================

def parse(tokens: Iterable[Tok]) -> Tree:
    """Parse a token sequence into a `program` tree"""
    return Parser(tokens).parse()


def parse_source(source: str) -> Tree:
    """Tokenize and parse source text"""
    return Parser(tokenize(source)).parse()


def parse_expr_fragment(source: str) -> Tree:
    """
    Parse a standalone expression fragment.
    The whole fragment must be consumed.
    """
    parser = Parser(tokenize(source))
    expr = parser.parse_expr()

    if not parser.check(TT.EOF):
        raise ParseError(describe_kind(TT.EOF), parser.current)
    return expr


__all__: Tuple[str, ...] = (
    "BINARY_PRECEDENCE",
    "ParseError",
    "Parser",
    "describe_kind",
    "parse",
    "parse_expr_fragment",
    "parse_source",
)
