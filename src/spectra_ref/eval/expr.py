from __future__ import annotations

import math
from typing import Callable

from lark import Token

from ..runtime import (
    DivisionByZero,
    Frame,
    NumericOverflow,
    Outcome,
    ShkBool,
    ShkFloat,
    ShkInt,
    ShkString,
    ShkValue,
    SpectraRuntimeError,
    TypeMismatch,
    is_signal,
    type_name,
)
from ..tree import Node, Tree
from ..utils import shk_equals, stringify

EvalFunc = Callable[[Node, Frame], Outcome]

_RELATIONAL = {
    '<': lambda a, b: a < b,
    '<=': lambda a, b: a <= b,
    '>': lambda a, b: a > b,
    '>=': lambda a, b: a >= b,
}

def eval_binary(n: Tree, frame: Frame, eval_func: EvalFunc) -> Outcome:
    op, left_node, right_node = n.children

    lhs = eval_func(left_node, frame)
    if is_signal(lhs):
        return lhs

    rhs = eval_func(right_node, frame)
    if is_signal(rhs):
        return rhs

    return apply_binary(str(op.value), lhs, rhs)

def eval_prefix(n: Tree, frame: Frame, eval_func: EvalFunc) -> Outcome:
    op, operand_node = n.children

    operand = eval_func(operand_node, frame)
    if is_signal(operand):
        return operand

    return apply_prefix(str(op.value), operand)

def apply_prefix(op: str, operand: ShkValue) -> ShkValue:
    match op, operand:
        case '-', ShkInt(value=v):
            return ShkInt(-v)
        case '-', ShkFloat(value=v):
            return ShkFloat(-v)
        case '!', ShkBool(value=b):
            return ShkBool(not b)
        case ('-' | '!'), _:
            raise TypeMismatch(f"Unsupported operand type for unary {op}: {type_name(operand)}", op=op)
        case _:
            raise SpectraRuntimeError(f"Unsupported prefix op {op}")

def apply_binary(op: str, lhs: ShkValue, rhs: ShkValue) -> ShkValue:
    match op:
        case '+' if isinstance(lhs, ShkString) or isinstance(rhs, ShkString):
            return ShkString(stringify(lhs) + stringify(rhs))
        case '+' | '-' | '*' | '/':
            return _arith(op, lhs, rhs)
        case '%':
            return _modulo(lhs, rhs)
        case '==':
            return ShkBool(shk_equals(lhs, rhs))
        case '!=':
            return ShkBool(not shk_equals(lhs, rhs))
        case '<' | '<=' | '>' | '>=':
            if not (_is_number(lhs) and _is_number(rhs)):
                raise _operand_error(op, lhs, rhs)
            return ShkBool(_RELATIONAL[op](lhs.value, rhs.value))
        case _:
            raise SpectraRuntimeError(f"Unsupported binary op {op}")

def _is_number(val: ShkValue) -> bool:
    return isinstance(val, (ShkInt, ShkFloat))

def _operand_error(op: str, lhs: ShkValue, rhs: ShkValue) -> TypeMismatch:
    return TypeMismatch(
        f"Unsupported operand types for {op}: {type_name(lhs)} and {type_name(rhs)}",
        op=op,
    )

def _arith(op: str, lhs: ShkValue, rhs: ShkValue) -> ShkValue:
    match lhs, rhs:
        case ShkInt(value=a), ShkInt(value=b):
            match op:
                case '+':
                    return ShkInt(a + b)
                case '-':
                    return ShkInt(a - b)
                case '*':
                    return ShkInt(a * b)
                case _:
                    if b == 0:
                        raise DivisionByZero(op)
                    return ShkInt(_trunc_div(a, b))
        case (ShkInt() | ShkFloat()), (ShkInt() | ShkFloat()):
            return ShkFloat(_float_arith(op, lhs.value, rhs.value))
        case _:
            raise _operand_error(op, lhs, rhs)

def _float_arith(op: str, lhs: int | float, rhs: int | float) -> float:
    try:
        a, b = float(lhs), float(rhs)
    except OverflowError:
        # Integer operand wider than any float
        raise NumericOverflow(op) from None

    match op:
        case '+':
            result = a + b
        case '-':
            result = a - b
        case '*':
            result = a * b
        case _:
            if b == 0.0:
                raise DivisionByZero(op)
            result = a / b

    if not math.isfinite(result):
        raise NumericOverflow(op)

    return result

def _modulo(lhs: ShkValue, rhs: ShkValue) -> ShkValue:
    match lhs, rhs:
        case ShkInt(value=a), ShkInt(value=b):
            if b == 0:
                raise DivisionByZero('%')
            # Remainder takes the sign of the dividend
            return ShkInt(a - b * _trunc_div(a, b))
        case _:
            raise _operand_error('%', lhs, rhs)

def _trunc_div(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return -q if (a < 0) != (b < 0) else q

def op_symbol(tok: Token) -> str:
    """`+=` -> `+`"""
    text = str(tok.value)
    return text[:-1] if text.endswith('=') else text
