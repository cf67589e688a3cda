from __future__ import annotations

import enum
from typing import Callable, FrozenSet, Iterator, Optional

from ..ast import (
    DoWhileStatement,
    ForInStatement,
    ForOfStatement,
    ForStatement,
    IfStatement,
    LabeledStatement,
    LOOP_TYPES,
    Node,
    SwitchStatement,
    VariableDeclaration,
    WhileStatement,
)
from ..types import (
    EMPTY,
    Break,
    Completion,
    Continue,
    JsArray,
    JsNull,
    JsString,
    JsTypeError,
    JsUndefined,
    JsValue,
    Normal,
    Scope,
)
from ..utils import strict_equals
from .bind import declare_loop_target, resolve_reference
from .blocks import hoist_declarations, run_body, run_statements
from .coerce import is_truthy
from .common import render_expr
from .mutation import has_own_key, own_keys

EvalFunc = Callable[[Node, Scope], JsValue]
ExecFunc = Callable[..., Completion]
Labels = FrozenSet[str]

class _Step(enum.Enum):
    NEXT = "next"   # keep iterating
    STOP = "stop"   # leave the loop, completion absorbed
    EXIT = "exit"   # leave the loop, completion propagates

def _classify(completion: Completion, labels: Labels) -> _Step:
    match completion:
        case Normal():
            return _Step.NEXT
        case Continue(label=None):
            return _Step.NEXT
        case Continue(label=label) if label in labels:
            return _Step.NEXT
        case Break(label=None):
            return _Step.STOP
        case Break(label=label) if label in labels:
            return _Step.STOP
        case _:
            return _Step.EXIT

# ---------------- If ----------------

def eval_if_stmt(node: IfStatement, scope: Scope, exec_func: ExecFunc, eval_func: EvalFunc) -> Completion:
    if is_truthy(eval_func(node.test, scope)):
        return exec_func(node.consequent, scope)

    if node.alternate is not None:
        return exec_func(node.alternate, scope)

    return EMPTY

# ---------------- While / For ----------------

def eval_while_stmt(
    node: WhileStatement,
    scope: Scope,
    exec_func: ExecFunc,
    eval_func: EvalFunc,
    labels: Labels=frozenset(),
) -> Completion:
    loop_scope = Scope(parent=scope)

    while is_truthy(eval_func(node.test, loop_scope)):
        completion = run_body(node.body, Scope(parent=loop_scope), exec_func)
        step = _classify(completion, labels)

        if step is _Step.STOP:
            break
        if step is _Step.EXIT:
            return completion

    return EMPTY

def eval_do_while_stmt(
    node: DoWhileStatement,
    scope: Scope,
    exec_func: ExecFunc,
    eval_func: EvalFunc,
    labels: Labels=frozenset(),
) -> Completion:
    loop_scope = Scope(parent=scope)

    while True:
        completion = run_body(node.body, Scope(parent=loop_scope), exec_func)
        step = _classify(completion, labels)

        if step is _Step.STOP:
            break
        if step is _Step.EXIT:
            return completion

        if not is_truthy(eval_func(node.test, loop_scope)):
            break

    return EMPTY

def eval_for_stmt(
    node: ForStatement,
    scope: Scope,
    exec_func: ExecFunc,
    eval_func: EvalFunc,
    labels: Labels=frozenset(),
) -> Completion:
    # `let` in the init clause lives here and is shared by every iteration
    loop_scope = Scope(parent=scope)

    if isinstance(node.init, VariableDeclaration):
        exec_func(node.init, loop_scope)
    elif node.init is not None:
        eval_func(node.init, loop_scope)

    while True:
        if node.test is not None and not is_truthy(eval_func(node.test, loop_scope)):
            break

        completion = run_body(node.body, Scope(parent=loop_scope), exec_func)
        step = _classify(completion, labels)

        if step is _Step.STOP:
            break
        if step is _Step.EXIT:
            return completion

        # continue still runs the update
        if node.update is not None:
            eval_func(node.update, loop_scope)

    return EMPTY

# ---------------- For-In / For-Of ----------------

def _bind_loop_target(left: Node, value: JsValue, scope: Scope, eval_func: EvalFunc) -> None:
    if isinstance(left, VariableDeclaration):
        declare_loop_target(left.kind, left.declarations[0].name, value, scope)
        return

    resolve_reference(left, scope, eval_func).setter(value)

def _run_iterations(
    node: ForInStatement | ForOfStatement,
    values: Iterator[JsValue],
    loop_scope: Scope,
    exec_func: ExecFunc,
    eval_func: EvalFunc,
    labels: Labels,
) -> Completion:
    for value in values:
        iter_scope = Scope(parent=loop_scope)
        _bind_loop_target(node.left, value, iter_scope, eval_func)
        completion = run_body(node.body, iter_scope, exec_func)
        step = _classify(completion, labels)

        if step is _Step.STOP:
            break
        if step is _Step.EXIT:
            return completion

    return EMPTY

def _enumerate_keys(obj: JsValue) -> Iterator[JsValue]:
    # snapshot of keys; ones deleted mid-iteration are skipped
    for key in own_keys(obj):
        if has_own_key(obj, key):
            yield JsString(key)

def eval_for_in_stmt(
    node: ForInStatement,
    scope: Scope,
    exec_func: ExecFunc,
    eval_func: EvalFunc,
    labels: Labels=frozenset(),
) -> Completion:
    loop_scope = Scope(parent=scope)
    obj = eval_func(node.right, loop_scope)

    if isinstance(obj, (JsUndefined, JsNull)):
        return EMPTY

    return _run_iterations(node, _enumerate_keys(obj), loop_scope, exec_func, eval_func, labels)

def _iterate_values(iterable: JsValue) -> Optional[Iterator[JsValue]]:
    match iterable:
        case JsArray(items=items):
            def _live() -> Iterator[JsValue]:
                idx = 0
                # length is re-read each step
                while idx < len(items):
                    yield items[idx]
                    idx += 1

            return _live()
        case JsString(value=s):
            # by code point, so a surrogate pair yields one value
            return (JsString(ch) for ch in s)
        case _:
            return None

def eval_for_of_stmt(
    node: ForOfStatement,
    scope: Scope,
    exec_func: ExecFunc,
    eval_func: EvalFunc,
    labels: Labels=frozenset(),
) -> Completion:
    loop_scope = Scope(parent=scope)
    iterable = eval_func(node.right, loop_scope)
    values = _iterate_values(iterable)

    if values is None:
        raise JsTypeError(f"{render_expr(node.right)} is not iterable")

    return _run_iterations(node, values, loop_scope, exec_func, eval_func, labels)

# ---------------- Switch ----------------

def eval_switch_stmt(
    node: SwitchStatement,
    scope: Scope,
    exec_func: ExecFunc,
    eval_func: EvalFunc,
    labels: Labels=frozenset(),
) -> Completion:
    discriminant = eval_func(node.discriminant, scope)
    switch_scope = Scope(parent=scope)
    hoist_declarations([stmt for case in node.cases for stmt in case.consequent], switch_scope)

    start: Optional[int] = None

    for idx, case in enumerate(node.cases):
        if case.test is None:
            continue

        if strict_equals(discriminant, eval_func(case.test, switch_scope)):
            start = idx
            break

    if start is None:
        start = next((idx for idx, case in enumerate(node.cases) if case.test is None), None)

    if start is None:
        return EMPTY

    result: Completion = EMPTY

    for case in node.cases[start:]:
        completion = run_statements(case.consequent, switch_scope, exec_func)

        match completion:
            case Normal():
                if completion is not EMPTY:
                    result = completion
                continue
            case Break(label=None):
                return result
            case Break(label=label) if label in labels:
                return result
            case _:
                return completion

    return result

# ---------------- Labels ----------------

_LABEL_TARGETS = LOOP_TYPES + (SwitchStatement, LabeledStatement)

def eval_labeled_stmt(
    node: LabeledStatement,
    scope: Scope,
    exec_func: ExecFunc,
    labels: Labels=frozenset(),
) -> Completion:
    labels = labels | {node.label}

    if isinstance(node.body, _LABEL_TARGETS):
        completion = exec_func(node.body, scope, labels)
    else:
        completion = exec_func(node.body, scope)

    match completion:
        case Break(label=label) if label == node.label:
            return EMPTY
        case _:
            return completion
