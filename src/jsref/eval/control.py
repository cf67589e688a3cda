from __future__ import annotations

import logging
from typing import Callable, Optional

from ..ast import Node, ThrowStatement, TryStatement
from ..types import (
    EMPTY,
    Completion,
    DeclKind,
    JsObject,
    JsString,
    JsThrowable,
    JsValue,
    Normal,
    Scope,
    UserThrown,
    is_callable,
)
from .blocks import exec_block

log = logging.getLogger(__name__)

EvalFunc = Callable[[Node, Scope], JsValue]
ExecFunc = Callable[[Node, Scope], Completion]

def error_to_value(exc: JsThrowable, scope: Scope) -> JsValue:
    """The value a catch clause binds for `exc`."""
    if isinstance(exc, UserThrown):
        return exc.payload

    # tag runtime errors with the matching global constructor, when present
    ctor = scope.get(exc.error_name)
    err = JsObject(constructor=ctor if is_callable(ctor) else None)
    err.slots["name"] = JsString(exc.error_name)
    err.slots["message"] = JsString(exc.message)

    return err

def eval_throw_stmt(node: ThrowStatement, scope: Scope, eval_func: EvalFunc) -> Completion:
    raise UserThrown(eval_func(node.argument, scope))

def eval_try_stmt(node: TryStatement, scope: Scope, exec_func: ExecFunc) -> Completion:
    pending: Optional[JsThrowable] = None

    try:
        completion = exec_block(node.block, scope, exec_func)
    except JsThrowable as exc:
        if node.handler is None:
            pending = exc
            completion = EMPTY
        else:
            completion, pending = _run_handler(node, exc, scope, exec_func)

    if node.finalizer is not None:
        final = exec_block(node.finalizer, scope, exec_func)

        if not isinstance(final, Normal):
            log.debug(
                "finally completed with %s, discarding %s",
                type(final).__name__,
                pending if pending is not None else type(completion).__name__,
            )
            return final

    if pending is not None:
        raise pending

    return completion

def _run_handler(
    node: TryStatement,
    exc: JsThrowable,
    scope: Scope,
    exec_func: ExecFunc,
) -> tuple[Completion, Optional[JsThrowable]]:
    handler = node.handler
    catch_scope = Scope(parent=scope)

    if handler.param is not None:
        catch_scope.define(handler.param, error_to_value(exc, scope), DeclKind.LET)

    try:
        return exec_block(handler.body, catch_scope, exec_func), None
    except JsThrowable as rethrown:
        if node.finalizer is None:
            raise
        return EMPTY, rethrown
