from __future__ import annotations

import os as _os
import sys as _sys
from decimal import Decimal
from typing import Optional

from .types import (
    ShkValue,
    ShkNull,
    ShkInt,
    ShkFloat,
    ShkString,
    ShkBool,
    ShkFn,
    ShkClass,
    ShkInstance,
    StdlibFunction,
)

DEBUG_PY_TRACE_ENV = "SPECTRA_DEBUG_PY_TRACE"

MAX_CALL_DEPTH = 1000

# Host frames budgeted for one closure call and the nodes under it
_HOST_FRAMES_PER_CALL = 100


def raise_host_limits() -> None:
    """Make room on the host for deep Spectra recursion and huge integers."""
    wanted = MAX_CALL_DEPTH * _HOST_FRAMES_PER_CALL
    if _sys.getrecursionlimit() < wanted:
        _sys.setrecursionlimit(wanted)

    _sys.set_int_max_str_digits(0)


def debug_py_trace_enabled() -> bool:
    """True when runtime errors should keep their Python traceback."""
    raw = _os.environ.get(DEBUG_PY_TRACE_ENV, "")
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def shk_equals(lhs: ShkValue, rhs: ShkValue) -> bool:
    # Integer vs Float is a cross-kind pair and never equal
    match (lhs, rhs):
        case (ShkNull(), ShkNull()):
            return True
        case (ShkInt(value=a), ShkInt(value=b)):
            return a == b
        case (ShkFloat(value=a), ShkFloat(value=b)):
            return a == b
        case (ShkString(value=a), ShkString(value=b)):
            return a == b
        case (ShkBool(value=a), ShkBool(value=b)):
            return a == b
        case (
            (ShkFn(), ShkFn())
            | (ShkClass(), ShkClass())
            | (ShkInstance(), ShkInstance())
            | (StdlibFunction(), StdlibFunction())
        ):
            return lhs is rhs
        case _:
            return False


def stringify(value: Optional[ShkValue]) -> str:
    """Canonical display rendering used by `print`, `println` and `+` coercion."""
    if isinstance(value, ShkString):
        return value.value

    if isinstance(value, ShkBool):
        return "true" if value.value else "false"

    if isinstance(value, ShkInt):
        return str(value.value)

    if isinstance(value, ShkFloat):
        return format_float(value.value)

    if isinstance(value, ShkNull) or value is None:
        return "null"

    return repr(value)


def format_float(value: float) -> str:
    """Positional decimal form, always with a fractional part: 1e-05 -> 0.00001."""
    exact = Decimal(repr(value))
    text = format(exact, "f")
    if exact.is_finite() and "." not in text:
        text += ".0"

    return text
