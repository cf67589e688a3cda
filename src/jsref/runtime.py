from __future__ import annotations

import importlib
import logging
import math
import sys
from typing import Any, Callable, Dict, List, Optional

from .types import (
    NULL,
    UNDEFINED,
    Builtins,
    DeclKind,
    EvalOptions,
    JsArray,
    JsBool,
    JsFunction,
    JsNull,
    JsNumber,
    JsObject,
    JsRangeError,
    JsString,
    JsTypeError,
    JsUndefined,
    JsValue,
    NativeFn,
    NativeFunction,
    REFERENCE_TYPES,
    Scope,
    ScopeKind,
    ensure_js_value,
    is_js_value,
)

log = logging.getLogger(__name__)

_STDLIB_INITIALIZED = False

# each JS call costs roughly twenty Python frames
MAX_CALL_DEPTH = 500
_RECURSION_LIMIT = 15000
_call_depth = 0

STACK_OVERFLOW_MESSAGE = "Maximum call stack size exceeded"

def init_stdlib() -> None:
    """Load stdlib modules (idempotent) so register_stdlib hooks run."""
    global _STDLIB_INITIALIZED

    if _STDLIB_INITIALIZED:
        return

    importlib.import_module("jsref.stdlib")
    _STDLIB_INITIALIZED = True

def register_stdlib(name: str, *, namespace: Optional[str]=None):
    """Register a host function as a global, or as a member of a global namespace object."""
    def dec(fn: NativeFn):
        if namespace is None:
            Builtins.stdlib_functions[name] = fn
        else:
            Builtins.namespaces.setdefault(namespace, {})[name] = fn

        return fn

    return dec

def create_global_scope(options: Optional[EvalOptions]=None) -> Scope:
    """Fresh root scope; builtins are new values per scope so runs never share state."""
    init_stdlib()
    scope = Scope(kind=ScopeKind.FUNCTION, options=options)

    scope.define("undefined", UNDEFINED, DeclKind.CONST)
    scope.define("NaN", JsNumber(math.nan), DeclKind.CONST)
    scope.define("Infinity", JsNumber(math.inf), DeclKind.CONST)

    for name, fn in Builtins.stdlib_functions.items():
        scope.define(name, NativeFunction(fn=fn, name=name), DeclKind.VAR)

    for ns_name, members in Builtins.namespaces.items():
        ns = JsObject()

        for name, fn in members.items():
            ns.slots[name] = NativeFunction(fn=fn, name=name)

        scope.define(ns_name, ns, DeclKind.VAR)

    return scope

# ---------------- Calls ----------------

def call_function(fn: JsValue, this: JsValue, args: List[JsValue]) -> JsValue:
    match fn:
        case NativeFunction():
            return ensure_js_value(fn.fn(this, list(args)))
        case JsFunction():
            return _call_js_function(fn, this, args)
        case _:
            raise JsTypeError(f"{fn!r} is not a function")

def _call_js_function(fn: JsFunction, this: JsValue, args: List[JsValue]) -> JsValue:
    from .evaluator import eval_node, exec_stmt  # local import to avoid cycle
    from .eval.blocks import run_function_body

    global _call_depth

    if _call_depth >= MAX_CALL_DEPTH:
        raise JsRangeError(STACK_OVERFLOW_MESSAGE)

    log.debug("call %s with %d argument(s)", fn.name or "(anonymous)", len(args))
    call_scope = Scope(parent=fn.scope, kind=ScopeKind.FUNCTION)

    # arrows see the enclosing `this`
    if not fn.is_arrow:
        call_scope.bind_this(this)

    for idx, name in enumerate(fn.params):
        value = args[idx] if idx < len(args) else UNDEFINED
        call_scope.define(name, value, DeclKind.VAR)

    _call_depth += 1
    try:
        return run_function_body(fn, call_scope, exec_stmt, eval_node)
    finally:
        _call_depth -= 1

def ensure_stack_headroom() -> None:
    """Raise the host recursion limit far enough for MAX_CALL_DEPTH nested calls."""
    if sys.getrecursionlimit() < _RECURSION_LIMIT:
        sys.setrecursionlimit(_RECURSION_LIMIT)

def construct(fn: JsValue, args: List[JsValue]) -> JsValue:
    """`new fn(...args)`: a fresh object tagged with its constructor."""
    obj = JsObject(constructor=fn)
    result = call_function(fn, obj, args)

    if isinstance(result, REFERENCE_TYPES):
        return result

    return obj

# ---------------- Host conversion ----------------

def from_python(value: Any) -> JsValue:
    if is_js_value(value):
        return value

    if value is None:
        return NULL

    if isinstance(value, bool):
        return JsBool(value)

    if isinstance(value, (int, float)):
        return JsNumber(float(value))

    if isinstance(value, str):
        return JsString(value)

    if isinstance(value, (list, tuple)):
        return JsArray([from_python(item) for item in value])

    if isinstance(value, dict):
        return JsObject({str(k): from_python(v) for k, v in value.items()})

    if callable(value):
        return _wrap_callable(value)

    raise JsTypeError(f"Cannot convert host value of type {type(value).__name__}")

def _wrap_callable(fn: Callable[..., Any]) -> NativeFunction:
    def _call(_this: JsValue, args: List[JsValue]) -> JsValue:
        return from_python(fn(*[to_python(arg) for arg in args]))

    return NativeFunction(fn=_call, name=getattr(fn, "__name__", ""))

def to_python(value: JsValue, _seen: Optional[Dict[int, Any]]=None) -> Any:
    """Plain Python data for a value; integral numbers become ints."""
    seen = {} if _seen is None else _seen

    match value:
        case JsUndefined() | JsNull():
            return None
        case JsBool(value=b):
            return b
        case JsNumber(value=num):
            if num.is_integer():
                return int(num)
            return num
        case JsString(value=s):
            return s
        case JsArray(items=items):
            if id(value) in seen:
                return seen[id(value)]

            out: List[Any] = []
            seen[id(value)] = out
            out.extend(to_python(item, seen) for item in items)

            return out
        case JsObject(slots=slots):
            if id(value) in seen:
                return seen[id(value)]

            mapping: Dict[str, Any] = {}
            seen[id(value)] = mapping

            for key, item in slots.items():
                mapping[key] = to_python(item, seen)

            return mapping
        case _:
            # callables pass through unchanged
            return value
