"""Convert esprima's ESTree objects into `jsref.ast` nodes.

Anything outside the supported node set (classes, destructuring, spread,
generators, async functions, getters/setters) is rejected here with
`UnsupportedSyntax`, so the evaluator only ever sees known node kinds.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Tuple

from . import ast
from .types import UnsupportedSyntax

def lower(node: Any) -> ast.Program:
    """Lower an ESTree Program."""
    if _kind(node) != "Program":
        raise _unsupported(node)

    return ast.Program(body=_stmts(node.body), span=_span(node))

# ---------------- Helpers ----------------

def _kind(node: Any) -> str:
    return str(getattr(node, "type", type(node).__name__))

def _field(obj: Any, name: str) -> Any:
    # esprima exposes some payloads as plain dicts
    if isinstance(obj, dict):
        return obj.get(name)

    return getattr(obj, name, None)

def _span(node: Any) -> Optional[ast.Span]:
    rng = getattr(node, "range", None)
    loc = getattr(node, "loc", None)

    if rng is None or loc is None:
        return None

    start = _field(loc, "start")

    return ast.Span(
        start=int(rng[0]),
        end=int(rng[1]),
        line=int(_field(start, "line")),
        column=int(_field(start, "column")),
    )

def _unsupported(node: Any, what: Optional[str]=None) -> UnsupportedSyntax:
    rng = getattr(node, "range", None)
    start, end = (rng[0], rng[1]) if rng is not None else (None, None)

    return UnsupportedSyntax(what or _kind(node), start, end)

def _ident(node: Any, context: str) -> str:
    if _kind(node) != "Identifier":
        raise _unsupported(node, f"{_kind(node)} in {context}")

    return str(node.name)

def _reject_special_function(node: Any) -> None:
    if getattr(node, "generator", False):
        raise _unsupported(node, "generator function")

    if getattr(node, "isAsync", False) or getattr(node, "async", False):
        raise _unsupported(node, "async function")

def _params(node: Any) -> Tuple[str, ...]:
    return tuple(_ident(p, "parameter list") for p in (node.params or ()))

def _stmts(nodes: Any) -> Tuple[ast.Statement, ...]:
    return tuple(lower_statement(n) for n in (nodes or ()))

def _exprs(nodes: Any) -> Tuple[ast.Expression, ...]:
    return tuple(lower_expression(n) for n in (nodes or ()))

def _opt_expr(node: Any) -> Optional[ast.Expression]:
    return None if node is None else lower_expression(node)

def _label(node: Any) -> Optional[str]:
    return None if node is None else str(node.name)

def _block(node: Any) -> ast.BlockStatement:
    if _kind(node) != "BlockStatement":
        raise _unsupported(node)

    return ast.BlockStatement(body=_stmts(node.body), span=_span(node))

# ---------------- Statements ----------------

def lower_statement(node: Any) -> ast.Statement:
    handler = _STATEMENTS.get(_kind(node))

    if handler is None:
        raise _unsupported(node)

    return handler(node)

def _for_left(node: Any) -> Any:
    if _kind(node) == "VariableDeclaration":
        return _variable_declaration(node)

    return _assign_target(node)

def _variable_declaration(node: Any) -> ast.VariableDeclaration:
    decls = tuple(
        ast.VariableDeclarator(
            name=_ident(d.id, "variable declaration"),
            init=_opt_expr(d.init),
            span=_span(d),
        )
        for d in node.declarations
    )

    return ast.VariableDeclaration(kind=str(node.kind), declarations=decls, span=_span(node))

def _function_declaration(node: Any) -> ast.FunctionDeclaration:
    _reject_special_function(node)

    return ast.FunctionDeclaration(
        name=_ident(node.id, "function declaration"),
        params=_params(node),
        body=_block(node.body),
        span=_span(node),
    )

def _switch(node: Any) -> ast.SwitchStatement:
    cases = tuple(
        ast.SwitchCase(test=_opt_expr(c.test), consequent=_stmts(c.consequent), span=_span(c))
        for c in node.cases
    )

    return ast.SwitchStatement(discriminant=lower_expression(node.discriminant), cases=cases, span=_span(node))

def _try(node: Any) -> ast.TryStatement:
    handler = None

    if node.handler is not None:
        h = node.handler
        param = None if h.param is None else _ident(h.param, "catch clause")
        handler = ast.CatchClause(param=param, body=_block(h.body), span=_span(h))

    return ast.TryStatement(
        block=_block(node.block),
        handler=handler,
        finalizer=None if node.finalizer is None else _block(node.finalizer),
        span=_span(node),
    )

def _for(node: Any) -> ast.ForStatement:
    init = node.init

    if init is not None:
        init = _variable_declaration(init) if _kind(init) == "VariableDeclaration" else lower_expression(init)

    return ast.ForStatement(
        init=init,
        test=_opt_expr(node.test),
        update=_opt_expr(node.update),
        body=lower_statement(node.body),
        span=_span(node),
    )

_STATEMENTS: Dict[str, Callable[[Any], ast.Statement]] = {
    "ExpressionStatement": lambda n: ast.ExpressionStatement(expression=lower_expression(n.expression), span=_span(n)),
    "BlockStatement": _block,
    "EmptyStatement": lambda n: ast.EmptyStatement(span=_span(n)),
    "DebuggerStatement": lambda n: ast.DebuggerStatement(span=_span(n)),
    "VariableDeclaration": _variable_declaration,
    "FunctionDeclaration": _function_declaration,
    "IfStatement": lambda n: ast.IfStatement(
        test=lower_expression(n.test),
        consequent=lower_statement(n.consequent),
        alternate=None if n.alternate is None else lower_statement(n.alternate),
        span=_span(n),
    ),
    "SwitchStatement": _switch,
    "WhileStatement": lambda n: ast.WhileStatement(test=lower_expression(n.test), body=lower_statement(n.body), span=_span(n)),
    "DoWhileStatement": lambda n: ast.DoWhileStatement(body=lower_statement(n.body), test=lower_expression(n.test), span=_span(n)),
    "ForStatement": _for,
    "ForInStatement": lambda n: ast.ForInStatement(
        left=_for_left(n.left), right=lower_expression(n.right), body=lower_statement(n.body), span=_span(n)
    ),
    "ForOfStatement": lambda n: ast.ForOfStatement(
        left=_for_left(n.left), right=lower_expression(n.right), body=lower_statement(n.body), span=_span(n)
    ),
    "LabeledStatement": lambda n: ast.LabeledStatement(label=str(n.label.name), body=lower_statement(n.body), span=_span(n)),
    "BreakStatement": lambda n: ast.BreakStatement(label=_label(n.label), span=_span(n)),
    "ContinueStatement": lambda n: ast.ContinueStatement(label=_label(n.label), span=_span(n)),
    "ReturnStatement": lambda n: ast.ReturnStatement(argument=_opt_expr(n.argument), span=_span(n)),
    "ThrowStatement": lambda n: ast.ThrowStatement(argument=lower_expression(n.argument), span=_span(n)),
    "TryStatement": _try,
}

# ---------------- Expressions ----------------

def lower_expression(node: Any) -> ast.Expression:
    handler = _EXPRESSIONS.get(_kind(node))

    if handler is None:
        raise _unsupported(node)

    return handler(node)

def _assign_target(node: Any) -> ast.Expression:
    if _kind(node) not in ("Identifier", "MemberExpression"):
        raise _unsupported(node, f"{_kind(node)} as assignment target")

    return lower_expression(node)

def _literal(node: Any) -> ast.Expression:
    regex = getattr(node, "regex", None)

    if regex is not None:
        return ast.RegexLiteral(
            pattern=str(_field(regex, "pattern")),
            flags=str(_field(regex, "flags") or ""),
            span=_span(node),
        )

    value = node.value

    # bool before int: True is an int too
    if isinstance(value, bool) or value is None or isinstance(value, str):
        return ast.Literal(value=value, span=_span(node))

    if isinstance(value, (int, float)):
        return ast.Literal(value=float(value), span=_span(node))

    raise _unsupported(node, f"literal of type {type(value).__name__}")

def _template(node: Any) -> ast.TemplateLiteral:
    quasis = []

    for q in node.quasis:
        cooked = _field(q.value, "cooked")
        quasis.append(str(cooked if cooked is not None else _field(q.value, "raw")))

    return ast.TemplateLiteral(quasis=tuple(quasis), expressions=_exprs(node.expressions), span=_span(node))

def _array(node: Any) -> ast.ArrayExpression:
    elements = []

    for el in node.elements or ():
        if el is None:
            elements.append(None)
            continue
        elements.append(lower_expression(el))

    return ast.ArrayExpression(elements=tuple(elements), span=_span(node))

def _object(node: Any) -> ast.ObjectExpression:
    props = []

    for p in node.properties or ():
        if _kind(p) != "Property":
            raise _unsupported(p)

        if getattr(p, "kind", "init") != "init":
            raise _unsupported(p, f"{p.kind}ter property")

        props.append(ast.Property(
            key=lower_expression(p.key),
            value=lower_expression(p.value),
            computed=bool(p.computed),
            span=_span(p),
        ))

    return ast.ObjectExpression(properties=tuple(props), span=_span(node))

def _function_expression(node: Any) -> ast.FunctionExpression:
    _reject_special_function(node)

    return ast.FunctionExpression(
        name=None if node.id is None else _ident(node.id, "function expression"),
        params=_params(node),
        body=_block(node.body),
        span=_span(node),
    )

def _arrow(node: Any) -> ast.ArrowFunctionExpression:
    _reject_special_function(node)
    concise = bool(node.expression)

    return ast.ArrowFunctionExpression(
        params=_params(node),
        body=lower_expression(node.body) if concise else _block(node.body),
        expression=concise,
        span=_span(node),
    )

def _update(node: Any) -> ast.UpdateExpression:
    return ast.UpdateExpression(
        operator=str(node.operator),
        argument=_assign_target(node.argument),
        prefix=bool(node.prefix),
        span=_span(node),
    )

def _binary_like(cls: type) -> Callable[[Any], ast.Expression]:
    def build(node: Any) -> ast.Expression:
        return cls(
            operator=str(node.operator),
            left=lower_expression(node.left),
            right=lower_expression(node.right),
            span=_span(node),
        )

    return build

def _assignment(node: Any) -> ast.AssignmentExpression:
    return ast.AssignmentExpression(
        operator=str(node.operator),
        left=_assign_target(node.left),
        right=lower_expression(node.right),
        span=_span(node),
    )

def _callee(node: Any) -> ast.Expression:
    if _kind(node) == "Super":
        raise _unsupported(node)

    return lower_expression(node)

_EXPRESSIONS: Dict[str, Callable[[Any], ast.Expression]] = {
    "Literal": _literal,
    "TemplateLiteral": _template,
    "Identifier": lambda n: ast.Identifier(name=str(n.name), span=_span(n)),
    "ThisExpression": lambda n: ast.ThisExpression(span=_span(n)),
    "ArrayExpression": _array,
    "ObjectExpression": _object,
    "FunctionExpression": _function_expression,
    "ArrowFunctionExpression": _arrow,
    "UnaryExpression": lambda n: ast.UnaryExpression(
        operator=str(n.operator), argument=lower_expression(n.argument), span=_span(n)
    ),
    "UpdateExpression": _update,
    "BinaryExpression": _binary_like(ast.BinaryExpression),
    "LogicalExpression": _binary_like(ast.LogicalExpression),
    "AssignmentExpression": _assignment,
    "ConditionalExpression": lambda n: ast.ConditionalExpression(
        test=lower_expression(n.test),
        consequent=lower_expression(n.consequent),
        alternate=lower_expression(n.alternate),
        span=_span(n),
    ),
    "CallExpression": lambda n: ast.CallExpression(callee=_callee(n.callee), arguments=_exprs(n.arguments), span=_span(n)),
    "NewExpression": lambda n: ast.NewExpression(callee=_callee(n.callee), arguments=_exprs(n.arguments), span=_span(n)),
    "MemberExpression": lambda n: ast.MemberExpression(
        object=lower_expression(n.object),
        property=lower_expression(n.property),
        computed=bool(n.computed),
        span=_span(n),
    ),
    "SequenceExpression": lambda n: ast.SequenceExpression(expressions=_exprs(n.expressions), span=_span(n)),
}
