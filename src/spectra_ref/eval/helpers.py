from __future__ import annotations

from ..runtime import ShkBool, ShkValue, TypeMismatch, type_name

def require_bool(val: ShkValue, context: str) -> bool:
    """Conditions must be Boolean; there is no truthiness coercion."""
    if isinstance(val, ShkBool):
        return val.value

    raise TypeMismatch(f"{context} condition must be Boolean, got {type_name(val)}", op=context)
