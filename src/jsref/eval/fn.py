from __future__ import annotations

from typing import Callable, List, Optional, Union

from ..ast import (
    ArrowFunctionExpression,
    CallExpression,
    FunctionDeclaration,
    FunctionExpression,
    MemberExpression,
    NewExpression,
    Node,
)
from ..runtime import call_function, construct
from ..types import (
    DeclKind,
    JsFunction,
    JsTypeError,
    JsValue,
    Scope,
    UNDEFINED,
    is_callable,
)
from .coerce import to_property_key
from .common import render_expr
from .mutation import get_property

EvalFunc = Callable[[Node, Scope], JsValue]

FunctionNode = Union[FunctionDeclaration, FunctionExpression, ArrowFunctionExpression]

def make_function(node: FunctionNode, scope: Scope, name: Optional[str]=None) -> JsFunction:
    """Close over `scope`; `name` is the inferred name for anonymous expressions."""
    match node:
        case FunctionDeclaration():
            return JsFunction(params=node.params, body=node.body, scope=scope, name=node.name)
        case FunctionExpression(name=own_name) if own_name:
            # the expression's own name is visible only inside its body
            name_scope = Scope(parent=scope)
            fn = JsFunction(params=node.params, body=node.body, scope=name_scope, name=own_name)
            name_scope.define(own_name, fn, DeclKind.VAR)
            return fn
        case FunctionExpression():
            return JsFunction(params=node.params, body=node.body, scope=scope, name=name or "")
        case ArrowFunctionExpression():
            return JsFunction(
                params=node.params,
                body=node.body,
                scope=scope,
                name=name or "",
                is_arrow=True,
            )

def eval_named(node: Node, name: str, scope: Scope, eval_func: EvalFunc) -> JsValue:
    """Evaluate `node`, naming it `name` when it is an anonymous function."""
    if isinstance(node, ArrowFunctionExpression) or (isinstance(node, FunctionExpression) and not node.name):
        return make_function(node, scope, name)

    return eval_func(node, scope)

def _eval_args(args, scope: Scope, eval_func: EvalFunc) -> List[JsValue]:
    return [eval_func(arg, scope) for arg in args]

def eval_call(node: CallExpression, scope: Scope, eval_func: EvalFunc) -> JsValue:
    callee = node.callee
    this: JsValue = UNDEFINED

    if isinstance(callee, MemberExpression):
        # member calls bind the receiver as `this`
        this = eval_func(callee.object, scope)
        key = to_property_key(eval_func(callee.property, scope)) if callee.computed else callee.property.name
        fn = get_property(this, key)
    else:
        fn = eval_func(callee, scope)

    args = _eval_args(node.arguments, scope, eval_func)

    if not is_callable(fn):
        raise JsTypeError(f"{render_expr(callee)} is not a function")

    return call_function(fn, this, args)

def eval_new(node: NewExpression, scope: Scope, eval_func: EvalFunc) -> JsValue:
    fn = eval_func(node.callee, scope)
    args = _eval_args(node.arguments, scope, eval_func)

    if not is_callable(fn) or (isinstance(fn, JsFunction) and fn.is_arrow):
        raise JsTypeError(f"{render_expr(node.callee)} is not a constructor")

    return construct(fn, args)
