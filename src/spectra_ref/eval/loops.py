from __future__ import annotations

from typing import Callable

from ..runtime import Frame, Outcome, ShkNull, SpectraRuntimeError, is_signal
from ..tree import Node, Tree, tree_label
from .blocks import eval_block
from .helpers import require_bool

EvalFunc = Callable[[Node, Frame], Outcome]

def eval_if_expr(n: Tree, frame: Frame, eval_func: EvalFunc) -> Outcome:
    """Value of the taken branch, or null when no branch runs."""
    children = n.children
    if len(children) not in (2, 3):
        raise SpectraRuntimeError("Malformed if expression")

    cond_node, then_block = children[0], children[1]

    cond = eval_func(cond_node, frame)
    if is_signal(cond):
        return cond

    if require_bool(cond, "if"):
        return eval_block(then_block, frame, eval_func)

    if len(children) == 3:
        else_node = children[2]
        if tree_label(else_node) == 'ifexpr':
            return eval_func(else_node, frame)
        return eval_block(else_node, frame, eval_func)

    return ShkNull()

def eval_while_expr(n: Tree, frame: Frame, eval_func: EvalFunc) -> Outcome:
    """Loop while the condition is true; always evaluates to null.

    Each iteration gets its own child frame. `break` ends the loop and
    `continue` ends the iteration; neither escapes the loop.
    """
    cond_node, body = n.children

    while True:
        cond = eval_func(cond_node, frame)
        if is_signal(cond):
            return cond

        if not require_bool(cond, "while"):
            break

        out = eval_block(body, frame, eval_func)
        if is_signal(out) and out.keyword == "break":
            break

    return ShkNull()
