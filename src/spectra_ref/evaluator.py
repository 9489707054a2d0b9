from __future__ import annotations

from typing import Callable, Optional

from lark import Token

from .runtime import (
    Frame,
    Outcome,
    RecursionDepthExceeded,
    ShkValue,
    SpectraRuntimeError,
    is_signal,
    new_global_frame,
)
from .tree import Node, Tree, is_token, node_line
from .utils import debug_py_trace_enabled, raise_host_limits

from .eval.bind import eval_assign, eval_compound_assign, eval_postfix, eval_vardecl
from .eval.blocks import (
    eval_block,
    eval_break_stmt,
    eval_continue_stmt,
    eval_exprstmt,
    eval_program,
    raise_illegal_control_flow,
)
from .eval.common import token_literal
from .eval.expr import eval_binary, eval_prefix
from .eval.fn import eval_call, eval_fnlit
from .eval.loops import eval_if_expr, eval_while_expr
from .eval.objects import eval_class_decl, eval_member, eval_this

EvalFunc = Callable[[Node, Frame], Outcome]


def _maybe_attach_location(exc: SpectraRuntimeError, node: Node) -> None:
    if exc.line is not None:
        return

    line = node_line(node)
    if line is not None:
        exc.line = line

def _maybe_keep_py_trace(exc: SpectraRuntimeError) -> None:
    if exc.spc_py_trace is None and debug_py_trace_enabled():
        exc.spc_py_trace = exc.__traceback__

# ---------------- Public API ----------------

def eval_expr(ast: Node, frame: Optional[Frame]=None) -> ShkValue:
    """Evaluate a parsed program (or single node) and return its value.

    Without a frame, a fresh global frame holding the built-ins is used.
    """
    if frame is None:
        frame = new_global_frame()

    raise_host_limits()
    try:
        result = eval_node(ast, frame)
    except RecursionError:
        # Nesting deep enough to exhaust the host stack without a call
        raise RecursionDepthExceeded() from None

    # A bare break/continue node evaluated on its own
    if is_signal(result):
        raise_illegal_control_flow(result)

    return result

# ---------------- Core evaluator ----------------

def eval_node(n: Node, frame: Frame) -> Outcome:
    try:
        return _eval_node_inner(n, frame)
    except SpectraRuntimeError as e:
        _maybe_keep_py_trace(e)
        _maybe_attach_location(e, n)
        raise


def _eval_node_inner(n: Node, frame: Frame) -> Outcome:
    if is_token(n):
        return _eval_token(n, frame)

    handler = _NODE_DISPATCH.get(n.data)
    if handler is None:
        raise SpectraRuntimeError(f"Unknown node: {n.data}")

    return handler(n, frame)

# ---------------- Tokens ----------------

def _eval_token(t: Token, frame: Frame) -> ShkValue:
    if t.type == 'IDENT':
        return frame.get(str(t.value))

    return token_literal(t)

def _eval_ident(n: Tree, frame: Frame) -> Outcome:
    return _eval_token(n.children[0], frame)

def _eval_literal(n: Tree, _frame: Frame) -> Outcome:
    return token_literal(n.children[0])

# ---------------- Dispatch ----------------

_NODE_DISPATCH: dict[str, Callable[[Tree, Frame], Outcome]] = {
    # expressions
    'literal': _eval_literal,
    'ident': _eval_ident,
    'this': eval_this,
    'binary': lambda n, frame: eval_binary(n, frame, eval_node),
    'prefix': lambda n, frame: eval_prefix(n, frame, eval_node),
    'postfix': lambda n, frame: eval_postfix(n, frame, eval_node),
    'assign': lambda n, frame: eval_assign(n, frame, eval_node),
    'compound_assign': lambda n, frame: eval_compound_assign(n, frame, eval_node),
    'call': lambda n, frame: eval_call(n, frame, eval_node),
    'fnlit': eval_fnlit,
    'ifexpr': lambda n, frame: eval_if_expr(n, frame, eval_node),
    'whileexpr': lambda n, frame: eval_while_expr(n, frame, eval_node),
    'member': lambda n, frame: eval_member(n, frame, eval_node),
    # statements
    'vardecl': lambda n, frame: eval_vardecl(n, frame, eval_node),
    'exprstmt': lambda n, frame: eval_exprstmt(n, frame, eval_node),
    'breakstmt': eval_break_stmt,
    'continuestmt': eval_continue_stmt,
    'classdecl': eval_class_decl,
    'block': lambda n, frame: eval_block(n, frame, eval_node),
    'program': lambda n, frame: eval_program(n, frame, eval_node),
}
