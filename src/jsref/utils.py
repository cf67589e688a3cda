from __future__ import annotations

import os
from typing import List

from .types import (
    JsBool,
    JsNull,
    JsNumber,
    JsString,
    JsUndefined,
    JsValue,
)

PY_TRACEBACK_ENV = "JSREF_PY_TRACEBACK"

def debug_py_trace_enabled() -> bool:
    """Whether errors should surface with their Python traceback."""
    return os.environ.get(PY_TRACEBACK_ENV, "").strip().lower() in ("1", "true", "yes", "on")

def strict_equals(lhs: JsValue, rhs: JsValue) -> bool:
    """`===`: no coercion, NaN unequal to itself, +0 equal to -0."""
    match lhs, rhs:
        case JsNumber(value=a), JsNumber(value=b):
            return a == b
        case JsString(value=a), JsString(value=b):
            return a == b
        case JsBool(value=a), JsBool(value=b):
            return a == b
        case JsUndefined(), JsUndefined():
            return True
        case JsNull(), JsNull():
            return True
        case _:
            return lhs is rhs

def utf16_key(text: str) -> bytes:
    """Sort key that orders strings by UTF-16 code units."""
    return text.encode("utf-16-be", "surrogatepass")

def utf16_units(text: str) -> List[str]:
    """`text` split into UTF-16 code units; astral characters become two lone surrogates."""
    if text.isascii():
        return list(text)

    units: List[str] = []

    for ch in text:
        cp = ord(ch)

        if cp > 0xFFFF:
            cp -= 0x10000
            units.append(chr(0xD800 + (cp >> 10)))
            units.append(chr(0xDC00 + (cp & 0x3FF)))
        else:
            units.append(ch)

    return units

def utf16_length(text: str) -> int:
    if text.isascii():
        return len(text)

    return len(text) + sum(1 for ch in text if ord(ch) > 0xFFFF)
