"""Built-in globals (print, console.log, Error constructors) registered via jsref.runtime."""

from __future__ import annotations

import sys
from typing import List

from .eval.coerce import display_value, to_string
from .runtime import register_stdlib
from .types import JsObject, JsString, JsUndefined, JsValue, UNDEFINED

def _write(stream, args: List[JsValue]) -> JsValue:
    print(*(display_value(arg) for arg in args), file=stream)
    return UNDEFINED

@register_stdlib("print")
def std_print(_this: JsValue, args: List[JsValue]) -> JsValue:
    return _write(sys.stdout, args)

@register_stdlib("log", namespace="console")
def std_console_log(_this: JsValue, args: List[JsValue]) -> JsValue:
    return _write(sys.stdout, args)

@register_stdlib("error", namespace="console")
def std_console_error(_this: JsValue, args: List[JsValue]) -> JsValue:
    return _write(sys.stderr, args)

def _error_constructor(error_name: str):
    def construct_error(this: JsValue, args: List[JsValue]) -> JsValue:
        # `new Err(...)` fills the tagged receiver; a plain call builds a fresh object
        err = this if isinstance(this, JsObject) and this.constructor is not None else JsObject()
        message = args[0] if args else UNDEFINED

        err.slots["name"] = JsString(error_name)
        err.slots["message"] = JsString("" if isinstance(message, JsUndefined) else to_string(message))

        return err

    return construct_error

for _name in ("Error", "TypeError", "ReferenceError", "RangeError"):
    register_stdlib(_name)(_error_constructor(_name))
