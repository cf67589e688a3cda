from __future__ import annotations

from ..ast import (
    CallExpression,
    Identifier,
    Literal,
    MemberExpression,
    Node,
    ThisExpression,
    node_kind,
)
from .coerce import number_to_string

def render_expr(node: Node) -> str:
    """Short human rendering of an expression for error messages."""
    match node:
        case Identifier(name=name):
            return name
        case ThisExpression():
            return "this"
        case Literal(value=None):
            return "null"
        case Literal(value=str() as text):
            return f'"{text}"'
        case Literal(value=bool() as flag):
            return "true" if flag else "false"
        case Literal(value=num):
            return number_to_string(num)
        case MemberExpression(object=obj, property=prop, computed=False):
            return f"{render_expr(obj)}.{render_expr(prop)}"
        case MemberExpression(object=obj, property=prop):
            return f"{render_expr(obj)}[{render_expr(prop)}]"
        case CallExpression(callee=callee):
            return f"{render_expr(callee)}(...)"
        case _:
            return node_kind(node)
