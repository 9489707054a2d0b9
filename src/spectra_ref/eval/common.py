from __future__ import annotations

from typing import Any, Optional

from lark import Token

from ..runtime import ShkBool, ShkFloat, ShkInt, ShkNull, ShkString, ShkValue, SpectraRuntimeError
from ..tree import is_token

def token_kind(node: Any) -> Optional[str]:
    if not is_token(node):
        return None
    tok: Token = node
    return str(tok.type)

def expect_ident_token(node: Any, context: str) -> str:
    if is_token(node) and token_kind(node) == 'IDENT':
        return str(node.value)

    raise SpectraRuntimeError(f"{context} must be an identifier")

def token_literal(token: Token) -> ShkValue:
    match token.type:
        case 'INT':
            return ShkInt(int(token.value))
        case 'FLOAT':
            return ShkFloat(float(token.value))
        case 'STRING' | 'CHAR':
            return ShkString(str(token.value))
        case 'TRUE':
            return ShkBool(True)
        case 'FALSE':
            return ShkBool(False)
        case 'NULL':
            return ShkNull()
        case _:
            raise SpectraRuntimeError(f"Unhandled literal token {token.type}:{token.value}")
