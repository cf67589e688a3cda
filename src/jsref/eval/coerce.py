from __future__ import annotations

import math
import re
from decimal import Decimal
from typing import Optional, Set

from ..types import (
    JsArray,
    JsBool,
    JsFunction,
    JsNull,
    JsNumber,
    JsObject,
    JsString,
    JsUndefined,
    JsValue,
    NativeFunction,
    REFERENCE_TYPES,
    is_callable,
)

_JS_WHITESPACE = (
    " \t\n\v\f\r\u00a0\u1680\u2000\u2001\u2002\u2003\u2004\u2005\u2006"
    "\u2007\u2008\u2009\u200a\u2028\u2029\u202f\u205f\u3000\ufeff"
)
_DECIMAL_RE = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_RADIX_PREFIXES = {"x": 16, "o": 8, "b": 2}

def number_to_string(num: float) -> str:
    """Format a number the way Number.prototype.toString() does for radix 10."""
    if math.isnan(num):
        return "NaN"

    if num == 0:
        return "0"

    if math.isinf(num):
        return "Infinity" if num > 0 else "-Infinity"

    sign = "-" if num < 0 else ""
    # repr() yields the shortest round-tripping digits
    _, digit_tuple, exponent = Decimal(repr(abs(num))).as_tuple()
    digits = "".join(str(d) for d in digit_tuple).rstrip("0")
    exponent += len(digit_tuple) - len(digits)
    k = len(digits)
    n = exponent + k

    if k <= n <= 21:
        return sign + digits + "0" * (n - k)

    if 0 < n <= 21:
        return sign + digits[:n] + "." + digits[n:]

    if -6 < n <= 0:
        return sign + "0." + "0" * (-n) + digits

    exp = n - 1
    exp_part = f"e{'+' if exp >= 0 else '-'}{abs(exp)}"

    if k == 1:
        return sign + digits + exp_part

    return sign + digits[0] + "." + digits[1:] + exp_part

def string_to_number(text: str) -> float:
    s = text.strip(_JS_WHITESPACE)

    if not s:
        return 0.0

    if len(s) > 2 and s[0] == "0" and s[1].lower() in _RADIX_PREFIXES:
        digits = s[2:]
        # int() would also accept "_" separators and inner whitespace
        if not (digits.isascii() and digits.isalnum()):
            return math.nan

        try:
            return _int_to_float(int(digits, _RADIX_PREFIXES[s[1].lower()]))
        except ValueError:
            return math.nan

    if s in ("Infinity", "+Infinity"):
        return math.inf

    if s == "-Infinity":
        return -math.inf

    if _DECIMAL_RE.fullmatch(s):
        return float(s)

    return math.nan

def _int_to_float(value: int) -> float:
    try:
        return float(value)
    except OverflowError:
        return math.inf

def to_primitive(value: JsValue, hint: str="default") -> JsValue:
    if not isinstance(value, REFERENCE_TYPES):
        return value

    if isinstance(value, (JsObject, JsArray)):
        converted = _call_conversion_methods(value, hint)
        if converted is not None:
            return converted

    if isinstance(value, JsArray):
        return JsString(_join_array(value, set()))

    if is_callable(value):
        return JsString(f"function {value.name}() {{ [native code] }}")

    return JsString("[object Object]")

def _call_conversion_methods(value: JsValue, hint: str) -> Optional[JsValue]:
    """Honor own `valueOf` / `toString` slots, there being no prototypes."""
    order = ("toString", "valueOf") if hint == "string" else ("valueOf", "toString")
    slots = value.slots

    for name in order:
        method = slots.get(name)

        if not is_callable(method):
            continue

        from ..runtime import call_function
        result = call_function(method, value, [])

        if not isinstance(result, REFERENCE_TYPES):
            return result

    return None

def _join_array(arr: JsArray, active: Set[int]) -> str:
    # cyclic references join as empty strings
    if id(arr) in active:
        return ""

    active.add(id(arr))
    parts = []

    try:
        for item in arr.items:
            if isinstance(item, (JsUndefined, JsNull)):
                parts.append("")
            elif isinstance(item, JsArray):
                parts.append(_join_array(item, active))
            else:
                parts.append(to_string(item))
    finally:
        active.discard(id(arr))

    return ",".join(parts)

def to_number(value: JsValue) -> float:
    match value:
        case JsNumber(value=num):
            return num
        case JsUndefined():
            return math.nan
        case JsNull():
            return 0.0
        case JsBool(value=b):
            return 1.0 if b else 0.0
        case JsString(value=s):
            return string_to_number(s)
        case _:
            return to_number(to_primitive(value, "number"))

def to_string(value: JsValue) -> str:
    match value:
        case JsString(value=s):
            return s
        case JsNumber(value=num):
            return number_to_string(num)
        case JsBool(value=b):
            return "true" if b else "false"
        case JsUndefined():
            return "undefined"
        case JsNull():
            return "null"
        case _:
            return to_string(to_primitive(value, "string"))

def to_property_key(value: JsValue) -> str:
    return to_string(to_primitive(value, "string"))

def to_int32(value: JsValue) -> int:
    n = to_uint32(value)
    return n - 0x100000000 if n >= 0x80000000 else n

def to_uint32(value: JsValue) -> int:
    num = to_number(value)

    if math.isnan(num) or math.isinf(num):
        return 0

    return int(num) % 0x100000000

def is_truthy(value: JsValue) -> bool:
    match value:
        case JsBool(value=b):
            return b
        case JsUndefined() | JsNull():
            return False
        case JsNumber(value=num):
            return not (num == 0 or math.isnan(num))
        case JsString(value=s):
            return bool(s)
        case _:
            return True

def typeof_value(value: JsValue) -> str:
    match value:
        case JsUndefined():
            return "undefined"
        case JsNull():
            return "object"
        case JsBool():
            return "boolean"
        case JsNumber():
            return "number"
        case JsString():
            return "string"
        case JsFunction() | NativeFunction():
            return "function"
        case _:
            return "object"

def display_value(value: JsValue) -> str:
    """Render a value for messages and console output (strings unquoted)."""
    if isinstance(value, JsString):
        return value.value

    if isinstance(value, JsObject) and "message" in value.slots and "name" in value.slots:
        return f"{to_string(value.slots['name'])}: {to_string(value.slots['message'])}"

    return repr(value)
