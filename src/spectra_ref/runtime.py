from __future__ import annotations

import importlib
from typing import List, Optional

from .types import (
    ShkNull, ShkInt, ShkFloat, ShkBool, ShkString,
    ShkFn, ShkClass, ShkInstance, StdlibFunction, StdlibFn,
    ShkValue, Frame, Builtins, ControlSignal, Outcome,
    SpectraError, SpectraRuntimeError, TypeMismatch, NotCallable, ArityMismatch,
    UndefinedVariable, UndefinedField, UndefinedMethod, DuplicateDefinition,
    IllegalControlFlow, DivisionByZero, NumericOverflow, RecursionDepthExceeded,
    is_signal, type_name,
)
from .utils import MAX_CALL_DEPTH

_STDLIB_INITIALIZED = False

# Closure calls currently on the host stack
_CALL_DEPTH = 0

def init_stdlib() -> None:
    """Load stdlib modules (idempotent) so register_stdlib hooks run."""
    global _STDLIB_INITIALIZED

    if _STDLIB_INITIALIZED:
        return

    importlib.import_module("spectra_ref.stdlib")
    _STDLIB_INITIALIZED = True

def register_stdlib(name: str):
    def dec(fn: StdlibFn):
        Builtins.stdlib_functions[name] = StdlibFunction(fn=fn, name=name)
        return fn

    return dec

def new_global_frame() -> Frame:
    init_stdlib()
    return Frame.globals()

# ---------------- Calls ----------------

def call_value(callee: ShkValue, args: List[ShkValue], frame: Frame) -> ShkValue:
    match callee:
        case ShkFn():
            return call_shkfn(callee, args)
        case ShkClass():
            return instantiate(callee, args)
        case StdlibFunction(fn=fn):
            return fn(frame, args)
        case _:
            raise NotCallable(type_name(callee))

def call_shkfn(fn: ShkFn, positional: List[ShkValue], this: Optional[ShkInstance]=None) -> ShkValue:
    """
    Call a closure:
    - new frame whose parent is the closure's captured frame (this bound if given)
    - one binding per parameter; arity must match exactly
    - value is the body's trailing expression statement, else null
    """
    global _CALL_DEPTH

    from .eval.blocks import eval_statements  # local import to avoid cycle
    from .evaluator import eval_node

    if len(positional) != len(fn.params):
        raise ArityMismatch(fn.label, len(fn.params), len(positional))

    callee_frame = Frame(parent=fn.frame, this=this)

    for name, val in zip(fn.params, positional):
        callee_frame.define(name, val)

    if _CALL_DEPTH >= MAX_CALL_DEPTH:
        raise RecursionDepthExceeded(MAX_CALL_DEPTH)

    _CALL_DEPTH += 1
    try:
        result = eval_statements(fn.body.children, callee_frame, eval_node)
    finally:
        _CALL_DEPTH -= 1

    # A loop outside the function body cannot be the target
    if is_signal(result):
        exc = IllegalControlFlow(result.keyword)
        exc.line = result.line
        raise exc

    return result

def instantiate(cls: ShkClass, args: List[ShkValue]) -> ShkInstance:
    inst = ShkInstance(cls=cls, fields={name: ShkNull() for name in cls.fields})

    if cls.ctor is not None:
        call_shkfn(cls.ctor, args, this=inst)
    elif args:
        raise ArityMismatch(cls.name, 0, len(args))

    return inst

def call_method(inst: ShkInstance, name: str, args: List[ShkValue]) -> ShkValue:
    method = inst.cls.methods.get(name)
    if method is None:
        raise UndefinedMethod(inst.cls.name, name)

    return call_shkfn(method, args, this=inst)

# ---------------- Fields ----------------

def get_field(inst: ShkInstance, name: str) -> ShkValue:
    if name not in inst.fields:
        raise UndefinedField(inst.cls.name, name)

    return inst.fields[name]

def set_field(inst: ShkInstance, name: str, value: ShkValue) -> None:
    if name not in inst.fields:
        raise UndefinedField(inst.cls.name, name)

    inst.fields[name] = value

def require_instance(value: ShkValue, name: str) -> ShkInstance:
    if isinstance(value, ShkInstance):
        return value

    raise TypeMismatch(f"Cannot access member '{name}' on {type_name(value)}", op=".")
