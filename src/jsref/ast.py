"""Syntax tree consumed by the evaluator.

One frozen dataclass per supported node kind. Child lists are tuples so a
tree cannot change while it is being evaluated. Every node carries an
optional `Span` used only for diagnostics.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple, Union, get_args
from typing_extensions import TypeAlias

@dataclass(frozen=True)
class Span:
    """Character offsets plus 1-based line and 0-based column of the start."""

    start: int
    end: int
    line: int
    column: int

@dataclass(frozen=True)
class Node:
    span: Optional[Span] = field(default=None, kw_only=True, compare=False)

# ============================================================
# EXPRESSIONS
# ============================================================

@dataclass(frozen=True)
class Literal(Node):
    """null, booleans, numbers and strings. `None` is null."""

    value: Union[None, bool, float, str]

@dataclass(frozen=True)
class RegexLiteral(Node):
    pattern: str
    flags: str = ""

@dataclass(frozen=True)
class TemplateLiteral(Node):
    quasis: Tuple[str, ...]
    expressions: Tuple['Expression', ...] = ()

@dataclass(frozen=True)
class Identifier(Node):
    name: str

@dataclass(frozen=True)
class ThisExpression(Node):
    pass

@dataclass(frozen=True)
class ArrayExpression(Node):
    """Holes are stored as None."""

    elements: Tuple[Optional['Expression'], ...] = ()

@dataclass(frozen=True)
class Property(Node):
    """Object literal entry; a non-computed key is an Identifier or Literal."""

    key: 'Expression'
    value: 'Expression'
    computed: bool = False

@dataclass(frozen=True)
class ObjectExpression(Node):
    properties: Tuple[Property, ...] = ()

@dataclass(frozen=True)
class FunctionExpression(Node):
    name: Optional[str]
    params: Tuple[str, ...]
    body: 'BlockStatement'

@dataclass(frozen=True)
class ArrowFunctionExpression(Node):
    """`body` is an expression when `expression` is set (concise body)."""

    params: Tuple[str, ...]
    body: Union['BlockStatement', 'Expression']
    expression: bool = False

@dataclass(frozen=True)
class UnaryExpression(Node):
    operator: str
    argument: 'Expression'

@dataclass(frozen=True)
class UpdateExpression(Node):
    operator: str
    argument: 'Expression'
    prefix: bool

@dataclass(frozen=True)
class BinaryExpression(Node):
    operator: str
    left: 'Expression'
    right: 'Expression'

@dataclass(frozen=True)
class LogicalExpression(Node):
    operator: str
    left: 'Expression'
    right: 'Expression'

@dataclass(frozen=True)
class AssignmentExpression(Node):
    """`left` is an Identifier or MemberExpression."""

    operator: str
    left: 'Expression'
    right: 'Expression'

@dataclass(frozen=True)
class ConditionalExpression(Node):
    test: 'Expression'
    consequent: 'Expression'
    alternate: 'Expression'

@dataclass(frozen=True)
class CallExpression(Node):
    callee: 'Expression'
    arguments: Tuple['Expression', ...] = ()

@dataclass(frozen=True)
class NewExpression(Node):
    callee: 'Expression'
    arguments: Tuple['Expression', ...] = ()

@dataclass(frozen=True)
class MemberExpression(Node):
    """`property` is an Identifier unless `computed`."""

    object: 'Expression'
    property: 'Expression'
    computed: bool = False

@dataclass(frozen=True)
class SequenceExpression(Node):
    expressions: Tuple['Expression', ...]

Expression: TypeAlias = Union[
    Literal,
    RegexLiteral,
    TemplateLiteral,
    Identifier,
    ThisExpression,
    ArrayExpression,
    ObjectExpression,
    FunctionExpression,
    ArrowFunctionExpression,
    UnaryExpression,
    UpdateExpression,
    BinaryExpression,
    LogicalExpression,
    AssignmentExpression,
    ConditionalExpression,
    CallExpression,
    NewExpression,
    MemberExpression,
    SequenceExpression,
]

# ============================================================
# STATEMENTS
# ============================================================

@dataclass(frozen=True)
class ExpressionStatement(Node):
    expression: Expression

@dataclass(frozen=True)
class BlockStatement(Node):
    body: Tuple['Statement', ...] = ()

@dataclass(frozen=True)
class EmptyStatement(Node):
    pass

@dataclass(frozen=True)
class DebuggerStatement(Node):
    pass

@dataclass(frozen=True)
class VariableDeclarator(Node):
    name: str
    init: Optional[Expression] = None

@dataclass(frozen=True)
class VariableDeclaration(Node):
    """`kind` is one of "var", "let", "const"."""

    kind: str
    declarations: Tuple[VariableDeclarator, ...]

@dataclass(frozen=True)
class FunctionDeclaration(Node):
    name: str
    params: Tuple[str, ...]
    body: BlockStatement

@dataclass(frozen=True)
class IfStatement(Node):
    test: Expression
    consequent: 'Statement'
    alternate: Optional['Statement'] = None

@dataclass(frozen=True)
class SwitchCase(Node):
    """`test` is None for the default clause."""

    test: Optional[Expression]
    consequent: Tuple['Statement', ...] = ()

@dataclass(frozen=True)
class SwitchStatement(Node):
    discriminant: Expression
    cases: Tuple[SwitchCase, ...] = ()

@dataclass(frozen=True)
class WhileStatement(Node):
    test: Expression
    body: 'Statement'

@dataclass(frozen=True)
class DoWhileStatement(Node):
    body: 'Statement'
    test: Expression

@dataclass(frozen=True)
class ForStatement(Node):
    init: Union[VariableDeclaration, Expression, None]
    test: Optional[Expression]
    update: Optional[Expression]
    body: 'Statement'

@dataclass(frozen=True)
class ForInStatement(Node):
    left: Union[VariableDeclaration, Expression]
    right: Expression
    body: 'Statement'

@dataclass(frozen=True)
class ForOfStatement(Node):
    left: Union[VariableDeclaration, Expression]
    right: Expression
    body: 'Statement'

@dataclass(frozen=True)
class LabeledStatement(Node):
    label: str
    body: 'Statement'

@dataclass(frozen=True)
class BreakStatement(Node):
    label: Optional[str] = None

@dataclass(frozen=True)
class ContinueStatement(Node):
    label: Optional[str] = None

@dataclass(frozen=True)
class ReturnStatement(Node):
    argument: Optional[Expression] = None

@dataclass(frozen=True)
class ThrowStatement(Node):
    argument: Expression

@dataclass(frozen=True)
class CatchClause(Node):
    param: Optional[str]
    body: BlockStatement

@dataclass(frozen=True)
class TryStatement(Node):
    block: BlockStatement
    handler: Optional[CatchClause] = None
    finalizer: Optional[BlockStatement] = None

@dataclass(frozen=True)
class Program(Node):
    body: Tuple['Statement', ...] = ()

Statement: TypeAlias = Union[
    ExpressionStatement,
    BlockStatement,
    EmptyStatement,
    DebuggerStatement,
    VariableDeclaration,
    FunctionDeclaration,
    IfStatement,
    SwitchStatement,
    WhileStatement,
    DoWhileStatement,
    ForStatement,
    ForInStatement,
    ForOfStatement,
    LabeledStatement,
    BreakStatement,
    ContinueStatement,
    ReturnStatement,
    ThrowStatement,
    TryStatement,
]

STATEMENT_TYPES = (Program,) + get_args(Statement)
LOOP_TYPES = (WhileStatement, DoWhileStatement, ForStatement, ForInStatement, ForOfStatement)
FUNCTION_TYPES = (FunctionDeclaration, FunctionExpression, ArrowFunctionExpression)

def node_kind(node: object) -> str:
    return type(node).__name__
