from __future__ import annotations

import logging
from types import SimpleNamespace
from typing import Callable, FrozenSet, Optional

from .ast import (
    ArrayExpression,
    ArrowFunctionExpression,
    AssignmentExpression,
    BinaryExpression,
    BlockStatement,
    BreakStatement,
    CallExpression,
    ConditionalExpression,
    ContinueStatement,
    DebuggerStatement,
    DoWhileStatement,
    EmptyStatement,
    ExpressionStatement,
    ForInStatement,
    ForOfStatement,
    ForStatement,
    FunctionDeclaration,
    FunctionExpression,
    Identifier,
    IfStatement,
    LabeledStatement,
    Literal,
    LogicalExpression,
    MemberExpression,
    NewExpression,
    Node,
    ObjectExpression,
    Program,
    RegexLiteral,
    ReturnStatement,
    SequenceExpression,
    STATEMENT_TYPES,
    SwitchStatement,
    TemplateLiteral,
    ThisExpression,
    ThrowStatement,
    TryStatement,
    UnaryExpression,
    UpdateExpression,
    VariableDeclaration,
    WhileStatement,
    node_kind,
)
from .runtime import STACK_OVERFLOW_MESSAGE, create_global_scope, ensure_stack_headroom
from .types import (
    EMPTY,
    UNDEFINED,
    Break,
    Completion,
    Continue,
    DeclKind,
    InvalidStatementForm,
    JsRangeError,
    JsRuntimeError,
    JsValue,
    Normal,
    Return,
    Scope,
    UnsupportedSyntax,
)

from .eval.bind import eval_assign, eval_update, eval_var_declaration
from .eval.blocks import eval_program, exec_block
from .eval.control import eval_throw_stmt, eval_try_stmt
from .eval.expr import (
    eval_binary,
    eval_conditional,
    eval_identifier,
    eval_literal,
    eval_logical,
    eval_regex,
    eval_sequence,
    eval_template,
    eval_unary,
)
from .eval.fn import eval_call, eval_new, make_function
from .eval.loops import (
    eval_do_while_stmt,
    eval_for_in_stmt,
    eval_for_of_stmt,
    eval_for_stmt,
    eval_if_stmt,
    eval_labeled_stmt,
    eval_switch_stmt,
    eval_while_stmt,
)
from .eval.mutation import get_property
from .eval.coerce import to_property_key
from .eval.objects import eval_array, eval_object

log = logging.getLogger(__name__)

Labels = FrozenSet[str]

def _maybe_attach_location(exc: JsRuntimeError, node: Node) -> None:
    if getattr(exc, "_augmented", False):
        return

    span = getattr(node, "span", None)
    if span is None:
        return

    exc.js_meta = SimpleNamespace(line=span.line, column=span.column + 1)
    exc._augmented = True  # type: ignore[attr-defined]

# ---------------- Public API ----------------

def evaluate(node: Node, scope: Optional[Scope]=None) -> JsValue:
    """Run a program, statement or expression and return its value."""
    if scope is None:
        scope = create_global_scope()

    ensure_stack_headroom()

    try:
        if not isinstance(node, STATEMENT_TYPES):
            return eval_node(node, scope)

        completion = exec_stmt(node, scope)
    except JsRuntimeError as e:
        _maybe_attach_location(e, node)
        raise
    except RecursionError:
        # deep expression nesting can still outrun the host stack
        raise JsRangeError(STACK_OVERFLOW_MESSAGE) from None

    match completion:
        case Normal(value=value) | Return(value=value):
            return value
        case Break() | Continue():
            # a stray break/continue just stops the program
            log.debug("top-level %s stopped evaluation", type(completion).__name__)
            return UNDEFINED

# ---------------- Statements ----------------

def exec_stmt(n: Node, scope: Scope, labels: Labels=frozenset()) -> Completion:
    try:
        return _exec_stmt_inner(n, scope, labels)
    except JsRuntimeError as e:
        _maybe_attach_location(e, n)
        raise

def _exec_stmt_inner(n: Node, scope: Scope, labels: Labels) -> Completion:
    handler = _STMT_DISPATCH.get(type(n))
    if handler is not None:
        return handler(n, scope)

    match n:
        case WhileStatement():
            return eval_while_stmt(n, scope, exec_stmt, eval_node, labels)
        case DoWhileStatement():
            return eval_do_while_stmt(n, scope, exec_stmt, eval_node, labels)
        case ForStatement():
            return eval_for_stmt(n, scope, exec_stmt, eval_node, labels)
        case ForInStatement():
            return eval_for_in_stmt(n, scope, exec_stmt, eval_node, labels)
        case ForOfStatement():
            return eval_for_of_stmt(n, scope, exec_stmt, eval_node, labels)
        case SwitchStatement():
            return eval_switch_stmt(n, scope, exec_stmt, eval_node, labels)
        case LabeledStatement():
            return eval_labeled_stmt(n, scope, exec_stmt, labels)
        case ReturnStatement(argument=None):
            return Return(UNDEFINED)
        case ReturnStatement(argument=arg):
            return Return(eval_node(arg, scope))
        case BreakStatement(label=label):
            return Break(label)
        case ContinueStatement(label=label):
            return Continue(label)
        case EmptyStatement():
            return EMPTY
        case DebuggerStatement():
            raise InvalidStatementForm("Unexpected token 'debugger'")
        case _:
            raise _unsupported(n)

def _exec_function_declaration(n: FunctionDeclaration, scope: Scope) -> Completion:
    # already bound by hoisting unless evaluated outside a statement list
    if n.name not in scope.bindings:
        scope.define(n.name, make_function(n, scope), DeclKind.VAR)

    return EMPTY

_STMT_DISPATCH: dict[type, Callable[[Node, Scope], Completion]] = {
    Program: lambda n, scope: eval_program(n, scope, exec_stmt),
    ExpressionStatement: lambda n, scope: Normal(eval_node(n.expression, scope)),
    BlockStatement: lambda n, scope: exec_block(n, scope, exec_stmt),
    VariableDeclaration: lambda n, scope: eval_var_declaration(n, scope, eval_node),
    FunctionDeclaration: _exec_function_declaration,
    IfStatement: lambda n, scope: eval_if_stmt(n, scope, exec_stmt, eval_node),
    ThrowStatement: lambda n, scope: eval_throw_stmt(n, scope, eval_node),
    TryStatement: lambda n, scope: eval_try_stmt(n, scope, exec_stmt),
}

# ---------------- Expressions ----------------

def eval_node(n: Node, scope: Scope) -> JsValue:
    try:
        return _eval_node_inner(n, scope)
    except JsRuntimeError as e:
        _maybe_attach_location(e, n)
        raise

def _eval_node_inner(n: Node, scope: Scope) -> JsValue:
    handler = _EXPR_DISPATCH.get(type(n))
    if handler is not None:
        return handler(n, scope)

    match n:
        case Literal():
            return eval_literal(n)
        case Identifier():
            return eval_identifier(n, scope)
        case ThisExpression():
            return scope.lookup_this()
        case RegexLiteral():
            return eval_regex(n)
        case MemberExpression(object=obj_node, property=prop, computed=computed):
            obj = eval_node(obj_node, scope)
            key = to_property_key(eval_node(prop, scope)) if computed else prop.name
            return get_property(obj, key)
        case FunctionExpression() | ArrowFunctionExpression():
            return make_function(n, scope)
        case _:
            raise _unsupported(n)

def _unsupported(n: Node) -> UnsupportedSyntax:
    span = getattr(n, "span", None)

    if span is None:
        return UnsupportedSyntax(node_kind(n))

    return UnsupportedSyntax(node_kind(n), span.start, span.end)

_EXPR_DISPATCH: dict[type, Callable[[Node, Scope], JsValue]] = {
    TemplateLiteral: lambda n, scope: eval_template(n, scope, eval_node),
    ArrayExpression: lambda n, scope: eval_array(n, scope, eval_node),
    ObjectExpression: lambda n, scope: eval_object(n, scope, eval_node),
    UnaryExpression: lambda n, scope: eval_unary(n, scope, eval_node),
    UpdateExpression: lambda n, scope: eval_update(n, scope, eval_node),
    BinaryExpression: lambda n, scope: eval_binary(n, scope, eval_node),
    LogicalExpression: lambda n, scope: eval_logical(n, scope, eval_node),
    AssignmentExpression: lambda n, scope: eval_assign(n, scope, eval_node),
    ConditionalExpression: lambda n, scope: eval_conditional(n, scope, eval_node),
    CallExpression: lambda n, scope: eval_call(n, scope, eval_node),
    NewExpression: lambda n, scope: eval_new(n, scope, eval_node),
    SequenceExpression: lambda n, scope: eval_sequence(n, scope, eval_node),
}
