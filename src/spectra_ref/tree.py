"""Shared helpers for the AST built from lark Tree/Token nodes.

The parser emits plain `lark.Tree` nodes whose `data` is one of the labels
below and whose `meta` carries the source line/column of the construct.
Leaves are `lark.Token` instances (identifiers, operators, literals).

Expression labels and their children:

    literal          [Token(INT|FLOAT|STRING|CHAR|TRUE|FALSE|NULL)]
    ident            [Token(IDENT)]
    this             []
    binary           [Token(op), left, right]
    prefix           [Token(op), operand]
    postfix          [Token(op), operand]
    assign           [target, value]
    compound_assign  [Token(op), target, value]
    call             [callee, args]            args = Tree('args', [expr...])
    fnlit            [params, block]           params = Tree('params', [Token(IDENT)...])
    ifexpr           [cond, block]  |  [cond, block, block | ifexpr]
    whileexpr        [cond, block]
    member           [object, Token(IDENT)]

Statement labels:

    vardecl          [Token(IDENT), initializer]
    exprstmt         [expr]
    breakstmt        []
    continuestmt     []
    classdecl        [Token(IDENT), fields, ctor, methods]
                     fields  = Tree('fields', [Token(IDENT)...])
                     ctor    = Tree('ctor', [] | [fnlit])
                     methods = Tree('methods', [Tree('method', [Token(IDENT), fnlit])...])
    block            [stmt...]
    program          [stmt...]
"""
from __future__ import annotations

from typing import Iterable, List, Optional, Set

from lark import Token, Tree
from lark.tree import Meta
from typing_extensions import TypeAlias, TypeGuard

Node: TypeAlias = Tree | Token

# Expressions whose source form ends in a `{ ... }` block
BLOCK_BODIED_LABELS = frozenset({'fnlit', 'ifexpr', 'whileexpr'})

ASSIGNABLE_LABELS = frozenset({'ident', 'member'})


def make_meta(line: int, column: int = 0) -> Meta:
    meta = Meta()
    meta.empty = False
    meta.line = line
    meta.column = column
    return meta


def make_tree(label: str, children: List[Node], line: int, column: int = 0) -> Tree:
    return Tree(label, children, make_meta(line, column))


def is_tree(node: object) -> TypeGuard[Tree]:
    return isinstance(node, Tree)

def is_token(node: object) -> TypeGuard[Token]:
    return isinstance(node, Token)

def tree_label(node: object) -> Optional[str]:
    return node.data if is_tree(node) else None

def tree_children(node: object) -> List[Node]:
    if not is_tree(node):
        return []

    return list(node.children)

def node_meta(node: object) -> Optional[Meta]:
    if not is_tree(node):
        return None

    meta = node.meta
    return None if meta.empty else meta

def node_line(node: object) -> Optional[int]:
    if is_token(node):
        return node.line

    meta = node_meta(node)
    return getattr(meta, "line", None) if meta is not None else None

def find_tree_by_label(node: Node, labels: Iterable[str]) -> Optional[Tree]:
    lookup: Set[str] = set(labels)

    if is_tree(node) and tree_label(node) in lookup:
        return node

    for child in tree_children(node):
        found = find_tree_by_label(child, lookup)
        if found is not None:
            return found

    return None


def dump(node: Node) -> str:
    """Compact one-line rendering, stable across parses of the same source."""
    if is_token(node):
        return f"{node.type}:{node.value}"

    inner = " ".join(dump(ch) for ch in node.children)
    return f"({node.data} {inner})" if inner else f"({node.data})"
