from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from ..ast import (
    AssignmentExpression,
    Identifier,
    MemberExpression,
    Node,
    UpdateExpression,
    VariableDeclaration,
    node_kind,
)
from ..types import (
    EMPTY,
    UNDEFINED,
    Completion,
    DeclKind,
    JsNumber,
    JsValue,
    NOT_FOUND,
    Scope,
    UnresolvedReference,
    UnsupportedSyntax,
)
from .coerce import to_number, to_property_key
from .expr import apply_binary_operator
from .fn import eval_named
from .mutation import get_property, set_property

EvalFunc = Callable[[Node, Scope], JsValue]

_DECL_KINDS = {
    "var": DeclKind.VAR,
    "let": DeclKind.LET,
    "const": DeclKind.CONST,
}

@dataclass
class Reference:
    """Resolved assignment target: read and write the same slot."""
    getter: Callable[[], JsValue]
    setter: Callable[[JsValue], None]
    name: str

def resolve_reference(target: Node, scope: Scope, eval_func: EvalFunc) -> Reference:
    match target:
        case Identifier(name=name):
            def _get() -> JsValue:
                value = scope.get(name)
                if value is NOT_FOUND:
                    raise UnresolvedReference(name)
                return value

            def _set(value: JsValue) -> None:
                scope.set(name, value)

            return Reference(getter=_get, setter=_set, name=name)
        case MemberExpression(object=obj_node, property=prop, computed=computed):
            obj = eval_func(obj_node, scope)
            key = to_property_key(eval_func(prop, scope)) if computed else prop.name

            return Reference(
                getter=lambda: get_property(obj, key),
                setter=lambda value: set_property(obj, key, value),
                name=key,
            )
        case _:
            span = target.span
            raise UnsupportedSyntax(
                f"{node_kind(target)} as assignment target",
                span.start if span else None,
                span.end if span else None,
            )

def eval_assign(node: AssignmentExpression, scope: Scope, eval_func: EvalFunc) -> JsValue:
    ref = resolve_reference(node.left, scope, eval_func)

    if node.operator == "=":
        name = ref.name if isinstance(node.left, Identifier) else ""
        value = eval_named(node.right, name, scope, eval_func)
        ref.setter(value)
        return value

    # compound: old value is read before the right-hand side runs
    old = ref.getter()
    rhs = eval_func(node.right, scope)
    value = apply_binary_operator(node.operator[:-1], old, rhs)
    ref.setter(value)

    return value

def eval_update(node: UpdateExpression, scope: Scope, eval_func: EvalFunc) -> JsValue:
    ref = resolve_reference(node.argument, scope, eval_func)
    old = to_number(ref.getter())
    new = old + 1 if node.operator == "++" else old - 1
    ref.setter(JsNumber(new))

    return JsNumber(new if node.prefix else old)

def eval_var_declaration(node: VariableDeclaration, scope: Scope, eval_func: EvalFunc) -> Completion:
    kind = _DECL_KINDS[node.kind]

    for decl in node.declarations:
        if kind is DeclKind.VAR:
            _assign_var(decl.name, decl.init, scope, eval_func)
            continue

        value = UNDEFINED if decl.init is None else eval_named(decl.init, decl.name, scope, eval_func)
        scope.declare(kind, decl.name, value)

    return EMPTY

def _assign_var(name: str, init, scope: Scope, eval_func: EvalFunc) -> None:
    binding = scope.function_scope().bindings.get(name)

    if binding is None:
        # not hoisted, e.g. a declaration evaluated on its own
        scope.declare(DeclKind.VAR, name, UNDEFINED)
        binding = scope.function_scope().bindings[name]

    if init is not None:
        binding.value = eval_named(init, name, scope, eval_func)

def declare_loop_target(kind: str, name: str, value: JsValue, scope: Scope) -> None:
    """Bind a for-in/for-of declaration target for one iteration."""
    decl_kind = _DECL_KINDS[kind]

    if decl_kind is DeclKind.VAR:
        scope.function_scope().declare(DeclKind.VAR, name, value)
        return

    scope.define(name, value, decl_kind)
