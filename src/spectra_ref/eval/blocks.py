from __future__ import annotations

from typing import Callable, List

from ..runtime import ControlSignal, Frame, IllegalControlFlow, Outcome, ShkNull, is_signal
from ..tree import Node, Tree, node_line, tree_label

EvalFunc = Callable[[Node, Frame], Outcome]

def eval_statements(stmts: List[Node], frame: Frame, eval_func: EvalFunc) -> Outcome:
    """Run stmts in `frame`; value is the trailing expression statement's, else null.

    A break/continue outcome stops the run and is handed back to the caller.
    """
    result: Outcome = ShkNull()

    for stmt in stmts:
        out = eval_func(stmt, frame)
        if is_signal(out):
            return out

        result = out if tree_label(stmt) == 'exprstmt' else ShkNull()

    return result

def eval_block(n: Tree, frame: Frame, eval_func: EvalFunc) -> Outcome:
    return eval_statements(n.children, frame.child(), eval_func)

def eval_program(n: Tree, frame: Frame, eval_func: EvalFunc) -> Outcome:
    """Top level runs directly in the global frame; no loop can catch a signal here."""
    result = eval_statements(n.children, frame, eval_func)

    if is_signal(result):
        raise_illegal_control_flow(result)

    return result

def raise_illegal_control_flow(signal: ControlSignal) -> None:
    exc = IllegalControlFlow(signal.keyword)
    exc.line = signal.line
    raise exc

def eval_exprstmt(n: Tree, frame: Frame, eval_func: EvalFunc) -> Outcome:
    return eval_func(n.children[0], frame)

def eval_break_stmt(n: Tree, _frame: Frame) -> Outcome:
    return ControlSignal("break", node_line(n))

def eval_continue_stmt(n: Tree, _frame: Frame) -> Outcome:
    return ControlSignal("continue", node_line(n))
