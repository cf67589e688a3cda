from __future__ import annotations

import math
from typing import Callable, Optional

from ..ast import (
    BinaryExpression,
    ConditionalExpression,
    Identifier,
    Literal,
    LogicalExpression,
    MemberExpression,
    Node,
    RegexLiteral,
    SequenceExpression,
    TemplateLiteral,
    UnaryExpression,
)
from ..types import (
    FALSE,
    NOT_FOUND,
    NULL,
    TRUE,
    UNDEFINED,
    JsBool,
    JsNull,
    JsNumber,
    JsObject,
    JsString,
    JsTypeError,
    JsUndefined,
    JsValue,
    REFERENCE_TYPES,
    Scope,
    UnresolvedReference,
    is_callable,
)
from ..utils import strict_equals, utf16_key
from .coerce import (
    is_truthy,
    to_int32,
    to_number,
    to_primitive,
    to_property_key,
    to_string,
    to_uint32,
    typeof_value,
)
from .mutation import delete_property, has_property

EvalFunc = Callable[[Node, Scope], JsValue]

# ---------------- Leaves ----------------

def eval_identifier(node: Identifier, scope: Scope) -> JsValue:
    value = scope.get(node.name)

    if value is NOT_FOUND:
        raise UnresolvedReference(node.name)

    return value

def eval_literal(node: Literal) -> JsValue:
    value = node.value

    if value is None:
        return NULL
    if isinstance(value, bool):
        return JsBool(value)
    if isinstance(value, (int, float)):
        return JsNumber(float(value))

    return JsString(value)

def eval_regex(node: RegexLiteral) -> JsValue:
    # no regex engine; the literal is kept as inert data
    return JsObject({"source": JsString(node.pattern), "flags": JsString(node.flags)})

def eval_template(node: TemplateLiteral, scope: Scope, eval_func: EvalFunc) -> JsString:
    parts = [node.quasis[0]]

    for expr, quasi in zip(node.expressions, node.quasis[1:]):
        parts.append(to_string(eval_func(expr, scope)))
        parts.append(quasi)

    return JsString("".join(parts))

# ---------------- Unary ----------------

def eval_unary(node: UnaryExpression, scope: Scope, eval_func: EvalFunc) -> JsValue:
    op = node.operator
    arg = node.argument

    if op == "typeof":
        if isinstance(arg, Identifier):
            value = scope.get(arg.name)
            if value is NOT_FOUND:
                return JsString("undefined")
            return JsString(typeof_value(value))

        return JsString(typeof_value(eval_func(arg, scope)))

    if op == "delete":
        return _eval_delete(arg, scope, eval_func)

    value = eval_func(arg, scope)

    match op:
        case "-":
            return JsNumber(-to_number(value))
        case "+":
            return JsNumber(to_number(value))
        case "!":
            return FALSE if is_truthy(value) else TRUE
        case "~":
            return JsNumber(float(~to_int32(value)))
        case "void":
            return UNDEFINED
        case _:
            raise JsTypeError(f"Unknown unary operator {op}")

def _eval_delete(arg: Node, scope: Scope, eval_func: EvalFunc) -> JsBool:
    if isinstance(arg, MemberExpression):
        obj = eval_func(arg.object, scope)
        key = _member_key(arg, scope, eval_func)
        return TRUE if delete_property(obj, key) else FALSE

    if isinstance(arg, Identifier):
        # declared bindings are not deletable
        return FALSE

    eval_func(arg, scope)
    return TRUE

def _member_key(node: MemberExpression, scope: Scope, eval_func: EvalFunc) -> str:
    if node.computed:
        return to_property_key(eval_func(node.property, scope))

    return node.property.name

# ---------------- Binary ----------------

def _wrap_int32(n: int) -> int:
    return ((n + 0x80000000) % 0x100000000) - 0x80000000

def _divide(a: float, b: float) -> float:
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)

    return a / b

def _remainder(a: float, b: float) -> float:
    if math.isnan(a) or math.isnan(b) or math.isinf(a) or b == 0:
        return math.nan

    if math.isinf(b):
        return a

    return math.fmod(a, b)

def _is_odd_integer(num: float) -> bool:
    return math.isfinite(num) and num == math.floor(num) and int(num) % 2 == 1

def _power(a: float, b: float) -> float:
    if math.isnan(b):
        return math.nan
    if b == 0:
        return 1.0
    if math.isnan(a):
        return math.nan
    if abs(a) == 1 and math.isinf(b):
        return math.nan

    try:
        return math.pow(a, b)
    except ZeroDivisionError:
        negative = math.copysign(1.0, a) < 0 and _is_odd_integer(b)
        return -math.inf if negative else math.inf
    except ValueError:
        if a == 0 and b < 0:
            negative = math.copysign(1.0, a) < 0 and _is_odd_integer(b)
            return -math.inf if negative else math.inf
        return math.nan
    except OverflowError:
        return -math.inf if a < 0 and _is_odd_integer(b) else math.inf

def _less_than(lhs: JsValue, rhs: JsValue) -> Optional[bool]:
    """Abstract relational comparison on primitives; None means undefined."""
    if isinstance(lhs, JsString) and isinstance(rhs, JsString):
        return utf16_key(lhs.value) < utf16_key(rhs.value)

    a = to_number(lhs)
    b = to_number(rhs)

    if math.isnan(a) or math.isnan(b):
        return None

    return a < b

def loose_equals(lhs: JsValue, rhs: JsValue) -> bool:
    if type(lhs) is type(rhs):
        return strict_equals(lhs, rhs)

    nullish = (JsUndefined, JsNull)

    if isinstance(lhs, nullish) or isinstance(rhs, nullish):
        return isinstance(lhs, nullish) and isinstance(rhs, nullish)

    if isinstance(lhs, JsBool):
        return loose_equals(JsNumber(to_number(lhs)), rhs)

    if isinstance(rhs, JsBool):
        return loose_equals(lhs, JsNumber(to_number(rhs)))

    match lhs, rhs:
        case JsNumber(value=a), JsString():
            return a == to_number(rhs)
        case JsString(), JsNumber(value=b):
            return to_number(lhs) == b
        case (JsNumber() | JsString()), _ if isinstance(rhs, REFERENCE_TYPES):
            return loose_equals(lhs, to_primitive(rhs))
        case _, (JsNumber() | JsString()) if isinstance(lhs, REFERENCE_TYPES):
            return loose_equals(to_primitive(lhs), rhs)
        case _:
            return False

def _add(lhs: JsValue, rhs: JsValue) -> JsValue:
    lp = to_primitive(lhs)
    rp = to_primitive(rhs)

    if isinstance(lp, JsString) or isinstance(rp, JsString):
        return JsString(to_string(lp) + to_string(rp))

    return JsNumber(to_number(lp) + to_number(rp))

def _instanceof(lhs: JsValue, rhs: JsValue) -> bool:
    if not is_callable(rhs):
        raise JsTypeError("Right-hand side of 'instanceof' is not callable")

    return isinstance(lhs, JsObject) and lhs.constructor is rhs

def apply_binary_operator(op: str, lhs: JsValue, rhs: JsValue) -> JsValue:
    match op:
        case "+":
            return _add(lhs, rhs)
        case "-":
            return JsNumber(to_number(lhs) - to_number(rhs))
        case "*":
            return JsNumber(to_number(lhs) * to_number(rhs))
        case "/":
            return JsNumber(_divide(to_number(lhs), to_number(rhs)))
        case "%":
            return JsNumber(_remainder(to_number(lhs), to_number(rhs)))
        case "**":
            return JsNumber(_power(to_number(lhs), to_number(rhs)))
        case "==":
            return JsBool(loose_equals(lhs, rhs))
        case "!=":
            return JsBool(not loose_equals(lhs, rhs))
        case "===":
            return JsBool(strict_equals(lhs, rhs))
        case "!==":
            return JsBool(not strict_equals(lhs, rhs))
        case "<" | ">" | "<=" | ">=":
            return JsBool(_compare(op, lhs, rhs))
        case "<<":
            shift = to_uint32(rhs) & 31
            return JsNumber(float(_wrap_int32(to_int32(lhs) << shift)))
        case ">>":
            shift = to_uint32(rhs) & 31
            return JsNumber(float(to_int32(lhs) >> shift))
        case ">>>":
            shift = to_uint32(rhs) & 31
            return JsNumber(float(to_uint32(lhs) >> shift))
        case "&":
            return JsNumber(float(_wrap_int32(to_int32(lhs) & to_int32(rhs))))
        case "|":
            return JsNumber(float(_wrap_int32(to_int32(lhs) | to_int32(rhs))))
        case "^":
            return JsNumber(float(_wrap_int32(to_int32(lhs) ^ to_int32(rhs))))
        case "in":
            return JsBool(has_property(rhs, to_property_key(lhs)))
        case "instanceof":
            return JsBool(_instanceof(lhs, rhs))
        case _:
            raise JsTypeError(f"Unknown binary operator {op}")

def _compare(op: str, lhs: JsValue, rhs: JsValue) -> bool:
    # left operand is converted first
    lp = to_primitive(lhs, "number")
    rp = to_primitive(rhs, "number")

    match op:
        case "<":
            return _less_than(lp, rp) is True
        case ">":
            return _less_than(rp, lp) is True
        case "<=":
            return _less_than(rp, lp) is False
        case _:
            return _less_than(lp, rp) is False

def eval_binary(node: BinaryExpression, scope: Scope, eval_func: EvalFunc) -> JsValue:
    lhs = eval_func(node.left, scope)
    rhs = eval_func(node.right, scope)
    return apply_binary_operator(node.operator, lhs, rhs)

# ---------------- Logical / misc ----------------

def eval_logical(node: LogicalExpression, scope: Scope, eval_func: EvalFunc) -> JsValue:
    lhs = eval_func(node.left, scope)

    match node.operator:
        case "&&":
            return eval_func(node.right, scope) if is_truthy(lhs) else lhs
        case "||":
            return lhs if is_truthy(lhs) else eval_func(node.right, scope)
        case "??":
            if isinstance(lhs, (JsUndefined, JsNull)):
                return eval_func(node.right, scope)
            return lhs
        case op:
            raise JsTypeError(f"Unknown logical operator {op}")

def eval_conditional(node: ConditionalExpression, scope: Scope, eval_func: EvalFunc) -> JsValue:
    if is_truthy(eval_func(node.test, scope)):
        return eval_func(node.consequent, scope)

    return eval_func(node.alternate, scope)

def eval_sequence(node: SequenceExpression, scope: Scope, eval_func: EvalFunc) -> JsValue:
    result: JsValue = UNDEFINED

    for expr in node.expressions:
        result = eval_func(expr, scope)

    return result
