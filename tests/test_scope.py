from __future__ import annotations

import pytest

from jsref.types import (
    NOT_FOUND,
    UNDEFINED,
    ConstReassignment,
    DeclKind,
    EvalOptions,
    JsNumber,
    Redeclaration,
    Scope,
    ScopeKind,
    UnresolvedReference,
)


def _nested() -> tuple[Scope, Scope, Scope]:
    root = Scope(kind=ScopeKind.FUNCTION)
    fn = Scope(parent=root, kind=ScopeKind.FUNCTION)
    block = Scope(parent=fn)
    return root, fn, block


def test_var_declares_in_function_scope() -> None:
    root, fn, block = _nested()
    block.declare(DeclKind.VAR, "v", JsNumber(1.0))

    assert "v" in fn.bindings
    assert "v" not in block.bindings
    assert not root.has("v")


def test_let_declares_in_own_scope() -> None:
    _, fn, block = _nested()
    block.declare(DeclKind.LET, "x", JsNumber(1.0))

    assert "x" in block.bindings
    assert fn.get("x") is NOT_FOUND


def test_var_may_repeat() -> None:
    _, fn, _ = _nested()
    fn.declare(DeclKind.VAR, "v", JsNumber(1.0))
    fn.declare(DeclKind.VAR, "v", JsNumber(2.0))

    assert fn.get("v") == JsNumber(2.0)


@pytest.mark.parametrize(
    "first, second",
    [
        (DeclKind.LET, DeclKind.LET),
        (DeclKind.LET, DeclKind.VAR),
        (DeclKind.VAR, DeclKind.CONST),
        (DeclKind.CONST, DeclKind.LET),
    ],
)
def test_redeclaration(first: DeclKind, second: DeclKind) -> None:
    scope = Scope(kind=ScopeKind.FUNCTION)
    scope.declare(first, "a", UNDEFINED)

    with pytest.raises(Redeclaration):
        scope.declare(second, "a", UNDEFINED)


def test_shadowing_is_allowed() -> None:
    _, fn, block = _nested()
    fn.declare(DeclKind.LET, "x", JsNumber(1.0))
    block.declare(DeclKind.LET, "x", JsNumber(2.0))

    assert block.get("x") == JsNumber(2.0)
    assert fn.get("x") == JsNumber(1.0)


def test_set_updates_nearest_binding() -> None:
    _, fn, block = _nested()
    fn.declare(DeclKind.LET, "x", JsNumber(1.0))
    block.set("x", JsNumber(5.0))

    assert fn.get("x") == JsNumber(5.0)


def test_const_cannot_be_set_from_inner_scope() -> None:
    root, _, block = _nested()
    root.declare(DeclKind.CONST, "c", JsNumber(1.0))

    with pytest.raises(ConstReassignment):
        block.set("c", JsNumber(2.0))

    assert root.get("c") == JsNumber(1.0)


def test_unbound_set_creates_global() -> None:
    root, _, block = _nested()
    block.set("g", JsNumber(3.0))

    assert root.bindings["g"].kind is DeclKind.VAR


def test_strict_references_reject_unbound_set() -> None:
    root = Scope(kind=ScopeKind.FUNCTION, options=EvalOptions(strict_references=True))
    block = Scope(parent=root)

    assert block.options.strict_references
    with pytest.raises(UnresolvedReference):
        block.set("g", JsNumber(3.0))


def test_this_lookup_walks_to_nearest_binding() -> None:
    root, fn, block = _nested()
    assert block.lookup_this() is UNDEFINED

    fn.bind_this(JsNumber(1.0))
    assert block.lookup_this() == JsNumber(1.0)
    assert root.lookup_this() is UNDEFINED
