from __future__ import annotations

from typing import Callable

from ..ast import ArrayExpression, Identifier, Literal, Node, ObjectExpression, Property
from ..types import JsArray, JsObject, JsValue, Scope, UNDEFINED
from .coerce import to_property_key
from .expr import eval_literal
from .fn import eval_named

EvalFunc = Callable[[Node, Scope], JsValue]

def eval_key(prop: Property, scope: Scope, eval_func: EvalFunc) -> str:
    if prop.computed:
        return to_property_key(eval_func(prop.key, scope))

    match prop.key:
        case Identifier(name=name):
            return name
        case Literal():
            # {1: x} and {"1": x} name the same slot
            return to_property_key(eval_literal(prop.key))
        case other:
            return to_property_key(eval_func(other, scope))

def eval_object(node: ObjectExpression, scope: Scope, eval_func: EvalFunc) -> JsObject:
    obj = JsObject()

    for prop in node.properties:
        key = eval_key(prop, scope, eval_func)
        obj.slots[key] = eval_named(prop.value, key, scope, eval_func)

    return obj

def eval_array(node: ArrayExpression, scope: Scope, eval_func: EvalFunc) -> JsArray:
    items = []

    for element in node.elements:
        # holes read back as undefined
        items.append(UNDEFINED if element is None else eval_func(element, scope))

    return JsArray(items)
