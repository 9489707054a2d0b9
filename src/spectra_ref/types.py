from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from lark import Tree
from typing_extensions import TypeAlias, TypeGuard

from .errors import (
    ArityMismatch,
    DivisionByZero,
    DuplicateDefinition,
    IllegalControlFlow,
    NotCallable,
    NumericOverflow,
    RecursionDepthExceeded,
    SpectraError,
    SpectraRuntimeError,
    TypeMismatch,
    UndefinedField,
    UndefinedMethod,
    UndefinedVariable,
)

# ---------- Value Model ----------

@dataclass
class ShkNull:
    def __repr__(self) -> str:
        return "null"

@dataclass
class ShkInt:
    value: int
    def __repr__(self) -> str:
        return str(self.value)

@dataclass
class ShkFloat:
    value: float
    def __repr__(self) -> str:
        return repr(self.value)

@dataclass
class ShkBool:
    value: bool
    def __repr__(self) -> str:
        return "true" if self.value else "false"

@dataclass
class ShkString:
    value: str
    def __repr__(self) -> str:
        return f'"{self.value}"'

@dataclass(eq=False)
class ShkFn:
    """Closure: parameter names, body block and the frame it was created in."""
    params: List[str]
    body: Tree
    frame: 'Frame'
    name: Optional[str] = None

    @property
    def label(self) -> str:
        return self.name or "function"

    def __repr__(self) -> str:
        return f"<fun({', '.join(self.params)})>"

@dataclass(eq=False)
class ShkClass:
    name: str
    fields: List[str]
    ctor: Optional[ShkFn] = None
    methods: Dict[str, ShkFn] = field(default_factory=dict)

    def __repr__(self) -> str:
        return f"<class {self.name}>"

@dataclass(eq=False)
class ShkInstance:
    """Object created from a class; its field set never changes after creation."""
    cls: ShkClass
    fields: Dict[str, 'ShkValue']

    def __repr__(self) -> str:
        return f"<{self.cls.name} instance>"

StdlibFn = Callable[['Frame', List['ShkValue']], 'ShkValue']

@dataclass(frozen=True)
class StdlibFunction:
    """Host-provided callable living in the global frame."""
    fn: StdlibFn
    name: str

    def __repr__(self) -> str:
        return f"<builtin {self.name}>"

ShkValue: TypeAlias = (
    ShkNull
    | ShkInt
    | ShkFloat
    | ShkBool
    | ShkString
    | ShkFn
    | ShkClass
    | ShkInstance
    | StdlibFunction
)

def type_name(value: ShkValue) -> str:
    match value:
        case ShkNull():
            return "Null"
        case ShkInt():
            return "Integer"
        case ShkFloat():
            return "Float"
        case ShkBool():
            return "Boolean"
        case ShkString():
            return "String"
        case ShkFn() | StdlibFunction():
            return "Function"
        case ShkClass():
            return "Class"
        case ShkInstance(cls=cls):
            return cls.name
        case _:
            return type(value).__name__

# ---------- Control outcomes ----------

@dataclass(frozen=True)
class ControlSignal:
    """Non-local loop outcome returned (not raised) by statement evaluation."""
    keyword: str  # "break" | "continue"
    line: Optional[int] = None

    def __repr__(self) -> str:
        return f"<{self.keyword} signal>"

Outcome: TypeAlias = ShkValue | ControlSignal

def is_signal(value: object) -> TypeGuard[ControlSignal]:
    return isinstance(value, ControlSignal)

# ---------- Environment ----------

class Frame:
    """One level of the lexical scope chain.

    Children keep a plain reference to their parent; closures keep the frame
    they were created in. A closure stored into its own frame is a reference
    cycle, left to the interpreter's cycle collector.
    """

    def __init__(self, parent: Optional['Frame']=None, this: Optional[ShkInstance]=None):
        self.parent = parent
        self.vars: Dict[str, ShkValue] = {}
        self.this = this

    @classmethod
    def globals(cls) -> 'Frame':
        """Root frame with the host built-ins pre-populated."""
        frame = cls()

        for name, std in Builtins.stdlib_functions.items():
            frame.vars[name] = std

        return frame

    def define(self, name: str, val: ShkValue) -> None:
        if name in self.vars:
            raise DuplicateDefinition(name)

        self.vars[name] = val

    def get(self, name: str) -> ShkValue:
        frame: Optional[Frame] = self

        while frame is not None:
            if name in frame.vars:
                return frame.vars[name]
            frame = frame.parent

        raise UndefinedVariable(name)

    def assign(self, name: str, val: ShkValue) -> None:
        frame: Optional[Frame] = self

        while frame is not None:
            if name in frame.vars:
                frame.vars[name] = val
                return
            frame = frame.parent

        raise UndefinedVariable(name)

    def lookup_this(self) -> ShkInstance:
        frame: Optional[Frame] = self

        while frame is not None:
            if frame.this is not None:
                return frame.this
            frame = frame.parent

        raise UndefinedVariable("this")

    def child(self) -> 'Frame':
        return Frame(parent=self)

class Builtins:
    stdlib_functions: Dict[str, StdlibFunction] = {}

__all__ = [
    "ArityMismatch",
    "Builtins",
    "ControlSignal",
    "DivisionByZero",
    "DuplicateDefinition",
    "Frame",
    "IllegalControlFlow",
    "NotCallable",
    "NumericOverflow",
    "Outcome",
    "RecursionDepthExceeded",
    "ShkBool",
    "ShkClass",
    "ShkFloat",
    "ShkFn",
    "ShkInstance",
    "ShkInt",
    "ShkNull",
    "ShkString",
    "ShkValue",
    "SpectraError",
    "SpectraRuntimeError",
    "StdlibFn",
    "StdlibFunction",
    "TypeMismatch",
    "UndefinedField",
    "UndefinedMethod",
    "UndefinedVariable",
    "is_signal",
    "type_name",
]
