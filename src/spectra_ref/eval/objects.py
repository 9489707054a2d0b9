from __future__ import annotations

from typing import Callable, Dict, List

from ..runtime import (
    DuplicateDefinition,
    Frame,
    Outcome,
    ShkClass,
    ShkFn,
    ShkNull,
    SpectraRuntimeError,
    get_field,
    is_signal,
    require_instance,
)
from ..tree import Node, Tree, tree_children, tree_label
from .common import expect_ident_token
from .fn import make_closure

EvalFunc = Callable[[Node, Frame], Outcome]

def eval_class_decl(n: Tree, frame: Frame) -> Outcome:
    name_tok, fields_node, ctor_node, methods_node = n.children
    name = expect_ident_token(name_tok, "Class name")

    fields: List[str] = []
    for tok in tree_children(fields_node):
        field = expect_ident_token(tok, "Field name")
        if field in fields:
            raise DuplicateDefinition(field)
        fields.append(field)

    ctor = None
    ctor_children = tree_children(ctor_node)
    if ctor_children:
        ctor = make_closure(ctor_children[0], frame, name=f"{name}.constructor")

    methods: Dict[str, ShkFn] = {}
    for method in tree_children(methods_node):
        if tree_label(method) != 'method':
            raise SpectraRuntimeError("Malformed class body")
        method_tok, fn_node = method.children
        method_name = expect_ident_token(method_tok, "Method name")
        if method_name in methods:
            raise DuplicateDefinition(method_name)
        methods[method_name] = make_closure(fn_node, frame, name=f"{name}.{method_name}")

    frame.define(name, ShkClass(name=name, fields=fields, ctor=ctor, methods=methods))
    return ShkNull()

def eval_member(n: Tree, frame: Frame, eval_func: EvalFunc) -> Outcome:
    obj_node, name_tok = n.children

    obj = eval_func(obj_node, frame)
    if is_signal(obj):
        return obj

    name = expect_ident_token(name_tok, "Member name")
    return get_field(require_instance(obj, name), name)

def eval_this(_n: Tree, frame: Frame) -> Outcome:
    return frame.lookup_this()
