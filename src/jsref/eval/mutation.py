from __future__ import annotations

import math
import re
from typing import List, Optional

from ..types import (
    JsArray,
    JsFunction,
    JsNull,
    JsNumber,
    JsObject,
    JsRangeError,
    JsString,
    JsTypeError,
    JsUndefined,
    JsValue,
    NativeFunction,
    UNDEFINED,
)
from ..utils import utf16_length, utf16_units
from .coerce import to_number

_INDEX_RE = re.compile(r"0|[1-9][0-9]*")
_MAX_ARRAY_INDEX = 2 ** 32 - 2
# arrays are stored densely, so growth past this is refused
MAX_ARRAY_LENGTH = 1 << 24

def array_index(key: str) -> Optional[int]:
    """Canonical array index for `key`, or None when it is a plain property."""
    if not _INDEX_RE.fullmatch(key):
        return None

    idx = int(key)
    return idx if idx <= _MAX_ARRAY_INDEX else None

def _describe_base(value: JsValue) -> str:
    return "null" if isinstance(value, JsNull) else "undefined"

def get_property(obj: JsValue, key: str) -> JsValue:
    match obj:
        case JsUndefined() | JsNull():
            raise JsTypeError(f"Cannot read properties of {_describe_base(obj)} (reading '{key}')")
        case JsObject(slots=slots):
            return slots.get(key, UNDEFINED)
        case JsArray(items=items, slots=slots):
            idx = array_index(key)

            if idx is not None:
                return items[idx] if idx < len(items) else UNDEFINED

            if key == "length":
                return JsNumber(float(len(items)))

            return slots.get(key, UNDEFINED)
        case JsString(value=s):
            idx = array_index(key)

            if idx is not None:
                units = utf16_units(s)
                return JsString(units[idx]) if idx < len(units) else UNDEFINED

            if key == "length":
                return JsNumber(float(utf16_length(s)))

            return UNDEFINED
        case JsFunction() | NativeFunction():
            if key in obj.slots:
                return obj.slots[key]

            if key == "name":
                return JsString(obj.name)

            if key == "length":
                arity = len(obj.params) if isinstance(obj, JsFunction) else 0
                return JsNumber(float(arity))

            return UNDEFINED
        case _:
            # numbers and booleans carry no own properties
            return UNDEFINED

def set_property(obj: JsValue, key: str, value: JsValue) -> None:
    match obj:
        case JsUndefined() | JsNull():
            raise JsTypeError(f"Cannot set properties of {_describe_base(obj)} (setting '{key}')")
        case JsObject(slots=slots):
            slots[key] = value
        case JsArray(items=items, slots=slots):
            idx = array_index(key)

            if idx is not None:
                if idx >= len(items):
                    _grow(items, idx + 1)
                items[idx] = value
                return

            if key == "length":
                _set_array_length(obj, value)
                return

            slots[key] = value
        case JsFunction() | NativeFunction():
            obj.slots[key] = value
        case _:
            # assignment to a primitive's property is dropped, as in sloppy mode
            return

def _set_array_length(arr: JsArray, value: JsValue) -> None:
    num = to_number(value)

    if math.isnan(num) or num < 0 or num != math.floor(num) or num > _MAX_ARRAY_INDEX + 1:
        raise JsRangeError("Invalid array length")

    new_len = int(num)

    if new_len < len(arr.items):
        del arr.items[new_len:]
    else:
        _grow(arr.items, new_len)

def _grow(items: List[JsValue], new_len: int) -> None:
    if new_len > MAX_ARRAY_LENGTH:
        raise JsRangeError(f"Array length {new_len} exceeds the supported maximum of {MAX_ARRAY_LENGTH}")

    items.extend([UNDEFINED] * (new_len - len(items)))

def delete_property(obj: JsValue, key: str) -> bool:
    match obj:
        case JsUndefined() | JsNull():
            raise JsTypeError(f"Cannot convert {_describe_base(obj)} to object")
        case JsObject(slots=slots):
            slots.pop(key, None)
            return True
        case JsArray(items=items, slots=slots):
            idx = array_index(key)

            if idx is not None:
                # no holes: the element reads back as undefined
                if idx < len(items):
                    items[idx] = UNDEFINED
                return True

            if key == "length":
                return False

            slots.pop(key, None)
            return True
        case JsFunction() | NativeFunction():
            obj.slots.pop(key, None)
            return True
        case _:
            return True

def has_property(obj: JsValue, key: str) -> bool:
    match obj:
        case JsObject(slots=slots):
            return key in slots
        case JsArray(items=items, slots=slots):
            idx = array_index(key)

            if idx is not None:
                return idx < len(items)

            return key == "length" or key in slots
        case JsFunction() | NativeFunction():
            return key in obj.slots or key in ("name", "length")
        case _:
            raise JsTypeError(f"Cannot use 'in' operator to search for '{key}' in {obj!r}")

def own_keys(obj: JsValue) -> List[str]:
    """Enumerable own keys in for-in order."""
    match obj:
        case JsObject(slots=slots):
            return list(slots)
        case JsArray(items=items, slots=slots):
            return [str(i) for i in range(len(items))] + list(slots)
        case JsString(value=s):
            return [str(i) for i in range(utf16_length(s))]
        case JsFunction() | NativeFunction():
            return list(obj.slots)
        case _:
            return []

def has_own_key(obj: JsValue, key: str) -> bool:
    if isinstance(obj, JsString):
        idx = array_index(key)
        return idx is not None and idx < utf16_length(obj.value)

    if isinstance(obj, (JsObject, JsArray, JsFunction, NativeFunction)):
        return has_property(obj, key)

    return False
