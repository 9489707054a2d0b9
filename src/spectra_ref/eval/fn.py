from __future__ import annotations

from typing import Callable, List, Optional

from ..runtime import (
    DuplicateDefinition,
    Frame,
    Outcome,
    ShkFn,
    ShkValue,
    SpectraRuntimeError,
    call_method,
    call_value,
    get_field,
    is_signal,
    require_instance,
)
from ..tree import Node, Tree, tree_children, tree_label
from .common import expect_ident_token

EvalFunc = Callable[[Node, Frame], Outcome]

def extract_param_names(params_node: Node) -> List[str]:
    names: List[str] = []

    for p in tree_children(params_node):
        name = expect_ident_token(p, "Parameter")
        if name in names:
            raise DuplicateDefinition(name)
        names.append(name)

    return names

def make_closure(n: Tree, frame: Frame, name: Optional[str]=None) -> ShkFn:
    if tree_label(n) != 'fnlit':
        raise SpectraRuntimeError("Malformed function literal")

    params_node, body = n.children
    return ShkFn(params=extract_param_names(params_node), body=body, frame=frame, name=name)

def eval_fnlit(n: Tree, frame: Frame) -> Outcome:
    return make_closure(n, frame)

def eval_call(n: Tree, frame: Frame, eval_func: EvalFunc) -> Outcome:
    callee_node, args_node = n.children

    # instance.name(args): method table first, then a callable stored in a field
    if tree_label(callee_node) == 'member':
        obj_node, name_tok = callee_node.children
        obj = eval_func(obj_node, frame)
        if is_signal(obj):
            return obj

        name = expect_ident_token(name_tok, "Method name")
        inst = require_instance(obj, name)

        args = eval_args(args_node, frame, eval_func)
        if not isinstance(args, list):
            return args

        if name not in inst.cls.methods and name in inst.fields:
            return call_value(get_field(inst, name), args, frame)
        return call_method(inst, name, args)

    callee = eval_func(callee_node, frame)
    if is_signal(callee):
        return callee

    args = eval_args(args_node, frame, eval_func)
    if not isinstance(args, list):
        return args

    return call_value(callee, args, frame)

def eval_args(args_node: Node, frame: Frame, eval_func: EvalFunc) -> List[ShkValue] | Outcome:
    values: List[ShkValue] = []

    for arg in tree_children(args_node):
        val = eval_func(arg, frame)
        if is_signal(val):
            return val
        values.append(val)

    return values
