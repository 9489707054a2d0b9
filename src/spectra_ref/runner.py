from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional, Tuple

from .errors import LexError, SpectraError
from .evaluator import eval_expr
from .lexer_rd import tokenize
from .parser_rd import parse_source
from .runtime import Frame, ShkValue, init_stdlib, new_global_frame
from .token_types import TT
from .tree import tree_children, tree_label

def run(src: str, frame: Optional[Frame]=None) -> ShkValue:
    """Lex, parse and evaluate a whole program.

    Returns the value of the last top-level statement when it is an
    expression statement, otherwise null. A caller-supplied frame keeps its
    bindings across runs.
    """
    init_stdlib()

    ast = parse_source(src)

    if frame is None:
        frame = new_global_frame()

    return eval_expr(ast, frame)

def repl_eval(text: str, frame: Frame) -> Tuple[ShkValue, bool]:
    """
    Evaluate one REPL entry against a persistent frame.
    Returns (value, is_stmt); is_stmt is True when the entry did not end in
    an expression statement, so there is nothing worth echoing.
    A trailing `;` may be left off at the prompt.
    """
    if _needs_terminator(text):
        text += "\n;"

    ast = parse_source(text)
    stmts = tree_children(ast)
    is_stmt = not stmts or tree_label(stmts[-1]) != 'exprstmt'

    return eval_expr(ast, frame), is_stmt

def _needs_terminator(text: str) -> bool:
    last = None

    try:
        for tok in tokenize(text):
            if tok.type != TT.EOF:
                last = tok.type
    except LexError:
        return False

    return last is not None and last not in (TT.SEMI, TT.RBRACE)

def _load_source(arg: Optional[str]) -> str:
    """
    Resolve CLI input into source text.
    - None or "-" => read stdin.
    - Existing path => read file contents.
    - Otherwise treat the argument as literal source.
    """

    if arg is None or arg == "-":
        data = sys.stdin.read()
        if not data:
            raise SystemExit("No input provided on stdin")
        return data

    candidate = Path(arg)
    if candidate.exists():
        return candidate.read_text(encoding="utf-8")

    return arg

def main() -> None:
    args = sys.argv[1:]

    if args and args[0] == "--repl":
        from .repl import repl  # prompt_toolkit only needed interactively
        repl()
        return

    if len(args) > 1:
        raise SystemExit(f"Unexpected argument: {args[1]}")

    source = _load_source(args[0] if args else "-")

    try:
        run(source)
    except SpectraError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

if __name__ == "__main__":
    main()
