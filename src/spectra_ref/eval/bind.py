from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from ..runtime import (
    Frame,
    Outcome,
    ShkFloat,
    ShkFn,
    ShkInstance,
    ShkInt,
    ShkNull,
    ShkValue,
    SpectraRuntimeError,
    TypeMismatch,
    get_field,
    is_signal,
    require_instance,
    set_field,
    type_name,
)
from ..tree import Node, Tree, tree_label
from .common import expect_ident_token
from .expr import apply_binary, op_symbol

EvalFunc = Callable[[Node, Frame], Outcome]


@dataclass
class Place:
    """Resolved assignment target: a variable binding or an instance field."""

    frame: Frame
    name: str
    instance: Optional[ShkInstance] = None

    def read(self) -> ShkValue:
        if self.instance is not None:
            return get_field(self.instance, self.name)
        return self.frame.get(self.name)

    def write(self, value: ShkValue) -> None:
        if self.instance is not None:
            set_field(self.instance, self.name, value)
        else:
            self.frame.assign(self.name, value)


def resolve_place(target: Tree, frame: Frame, eval_func: EvalFunc) -> Place | Outcome:
    """Evaluate the receiver part of a target; returns a signal if one escaped."""
    match tree_label(target):
        case 'ident':
            return Place(frame, expect_ident_token(target.children[0], "Assignment target"))
        case 'member':
            obj_node, name_tok = target.children
            obj = eval_func(obj_node, frame)
            if is_signal(obj):
                return obj
            name = expect_ident_token(name_tok, "Member name")
            return Place(frame, name, require_instance(obj, name))
        case _:
            raise SpectraRuntimeError("Invalid assignment target")


def eval_vardecl(n: Tree, frame: Frame, eval_func: EvalFunc) -> Outcome:
    name_tok, init_node = n.children
    name = expect_ident_token(name_tok, "Variable name")

    value = eval_func(init_node, frame)
    if is_signal(value):
        return value

    if isinstance(value, ShkFn) and value.name is None and tree_label(init_node) == 'fnlit':
        value.name = name

    frame.define(name, value)
    return ShkNull()


def eval_assign(n: Tree, frame: Frame, eval_func: EvalFunc) -> Outcome:
    target, value_node = n.children

    place = resolve_place(target, frame, eval_func)
    if not isinstance(place, Place):
        return place

    value = eval_func(value_node, frame)
    if is_signal(value):
        return value

    place.write(value)
    return value


def eval_compound_assign(n: Tree, frame: Frame, eval_func: EvalFunc) -> Outcome:
    op, target, value_node = n.children

    place = resolve_place(target, frame, eval_func)
    if not isinstance(place, Place):
        return place

    current = place.read()

    rhs = eval_func(value_node, frame)
    if is_signal(rhs):
        return rhs

    result = apply_binary(op_symbol(op), current, rhs)
    place.write(result)
    return result


def eval_postfix(n: Tree, frame: Frame, eval_func: EvalFunc) -> Outcome:
    """`x++` / `x--`: write back old +/- 1, evaluate to the old value."""
    op, target = n.children

    place = resolve_place(target, frame, eval_func)
    if not isinstance(place, Place):
        return place

    old = place.read()
    if not isinstance(old, (ShkInt, ShkFloat)):
        raise TypeMismatch(f"Unsupported operand type for {op.value}: {type_name(old)}", op=str(op.value))

    delta = '+' if op.value == '++' else '-'
    place.write(apply_binary(delta, old, ShkInt(1)))
    return old
