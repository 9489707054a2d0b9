"""Built-in stdlib functions (print, println) registered via spectra_ref.runtime."""

from __future__ import annotations

import sys
from typing import List

from .runtime import Frame, ShkNull, ShkValue, register_stdlib
from .utils import stringify

def _render(args: List[ShkValue]) -> str:
    return " ".join(stringify(arg) for arg in args)

@register_stdlib("print")
def std_print(_frame: Frame, args: List[ShkValue]) -> ShkNull:
    sys.stdout.write(_render(args))
    sys.stdout.flush()
    return ShkNull()

@register_stdlib("println")
def std_println(_frame: Frame, args: List[ShkValue]) -> ShkNull:
    sys.stdout.write(_render(args) + "\n")
    sys.stdout.flush()
    return ShkNull()
