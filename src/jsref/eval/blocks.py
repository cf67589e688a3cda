from __future__ import annotations

from typing import Callable, Iterable, Iterator, List

from ..ast import (
    BlockStatement,
    DoWhileStatement,
    EmptyStatement,
    ForInStatement,
    ForOfStatement,
    ForStatement,
    FunctionDeclaration,
    IfStatement,
    LabeledStatement,
    Node,
    Program,
    Statement,
    SwitchStatement,
    TryStatement,
    VariableDeclaration,
    WhileStatement,
)
from ..types import (
    EMPTY,
    UNDEFINED,
    Break,
    Completion,
    Continue,
    DeclKind,
    InvalidStatementForm,
    JsFunction,
    JsValue,
    Normal,
    Redeclaration,
    Return,
    Scope,
)
from .fn import make_function

ExecFunc = Callable[[Node, Scope], Completion]
EvalFunc = Callable[[Node, Scope], JsValue]

# ---------------- Hoisting ----------------

def _nested_statements(stmt: Node) -> Iterator[Node]:
    """Child statements that share the enclosing function's var scope."""
    match stmt:
        case BlockStatement(body=body):
            yield from body
        case IfStatement(consequent=consequent, alternate=alternate):
            yield consequent
            if alternate is not None:
                yield alternate
        case WhileStatement(body=body) | DoWhileStatement(body=body) | LabeledStatement(body=body):
            yield body
        case ForStatement(init=init, body=body):
            if isinstance(init, VariableDeclaration):
                yield init
            yield body
        case ForInStatement(left=left, body=body) | ForOfStatement(left=left, body=body):
            if isinstance(left, VariableDeclaration):
                yield left
            yield body
        case SwitchStatement(cases=cases):
            for case in cases:
                yield from case.consequent
        case TryStatement(block=block, handler=handler, finalizer=finalizer):
            yield block
            if handler is not None:
                yield handler.body
            if finalizer is not None:
                yield finalizer

def collect_var_names(stmts: Iterable[Node]) -> List[str]:
    """`var` names declared in a body, not descending into nested functions."""
    names: List[str] = []
    pending = list(stmts)

    while pending:
        stmt = pending.pop(0)

        if isinstance(stmt, VariableDeclaration):
            if stmt.kind == "var":
                names.extend(d.name for d in stmt.declarations if d.name not in names)
            continue

        pending[:0] = list(_nested_statements(stmt))

    return names

def hoist_declarations(stmts: Iterable[Statement], scope: Scope, function_level: bool=False) -> None:
    stmts = list(stmts)

    if function_level:
        target = scope.function_scope()

        for name in collect_var_names(stmts):
            existing = target.bindings.get(name)

            if existing is None:
                target.declare(DeclKind.VAR, name, UNDEFINED)
            elif existing.kind is not DeclKind.VAR:
                raise Redeclaration(name)

    for stmt in stmts:
        if isinstance(stmt, FunctionDeclaration):
            scope.define(stmt.name, make_function(stmt, scope), DeclKind.VAR)

# ---------------- Statement lists ----------------

def run_statements(stmts: Iterable[Statement], scope: Scope, exec_func: ExecFunc) -> Completion:
    """Run in order; the first abrupt completion is returned immediately."""
    result: Completion = EMPTY

    for stmt in stmts:
        if isinstance(stmt, EmptyStatement):
            raise InvalidStatementForm("Unexpected token ';'")

        completion = exec_func(stmt, scope)

        if not isinstance(completion, Normal):
            return completion

        # declarations leave the previous value in place
        if completion is not EMPTY:
            result = completion

    return result

def eval_program(node: Program, scope: Scope, exec_func: ExecFunc) -> Completion:
    hoist_declarations(node.body, scope, function_level=True)
    return run_statements(node.body, scope, exec_func)

def exec_block(node: BlockStatement, scope: Scope, exec_func: ExecFunc) -> Completion:
    block_scope = Scope(parent=scope)
    hoist_declarations(node.body, block_scope)
    return run_statements(node.body, block_scope, exec_func)

def run_body(body: Statement, scope: Scope, exec_func: ExecFunc) -> Completion:
    """Run a loop or case body directly in an already fresh scope."""
    if isinstance(body, BlockStatement):
        hoist_declarations(body.body, scope)
        return run_statements(body.body, scope, exec_func)

    return exec_func(body, scope)

def run_function_body(fn: JsFunction, scope: Scope, exec_func: ExecFunc, eval_func: EvalFunc) -> JsValue:
    if not isinstance(fn.body, BlockStatement):
        # concise arrow body
        return eval_func(fn.body, scope)

    hoist_declarations(fn.body.body, scope, function_level=True)
    completion = run_statements(fn.body.body, scope, exec_func)

    match completion:
        case Return(value=value):
            return value
        case Break() | Continue():
            raise InvalidStatementForm(f"Illegal {type(completion).__name__.lower()} statement")
        case _:
            return UNDEFINED
