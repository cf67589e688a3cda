from __future__ import annotations

import pytest

from jsref import ast
from tests.support.harness import ParseError, UnsupportedSyntax, parse_source


def _first_expr(source: str) -> ast.Expression:
    stmt = parse_source(source).body[0]
    assert isinstance(stmt, ast.ExpressionStatement)
    return stmt.expression


def test_statement_kinds() -> None:
    program = parse_source("var a = 1;\nfunction f() {}\nif (a) a;\nfor (;;) break;")

    kinds = [type(stmt) for stmt in program.body]
    assert kinds == [
        ast.VariableDeclaration,
        ast.FunctionDeclaration,
        ast.IfStatement,
        ast.ForStatement,
    ]


def test_spans_track_lines_and_columns() -> None:
    program = parse_source("var x = 1;\n  x")

    span = program.body[1].span
    assert (span.line, span.column) == (2, 2)
    assert span.start == 13


def test_numbers_are_floats() -> None:
    literal = _first_expr("42")
    assert literal == ast.Literal(42.0)
    assert isinstance(literal.value, float)


def test_literal_kinds() -> None:
    values = [_first_expr(src).value for src in ("null", "true", '"s"', "0x10")]
    assert values == [None, True, "s", 16.0]


def test_regex_literal() -> None:
    assert _first_expr("/ab+c/gi") == ast.RegexLiteral("ab+c", "gi")


def test_template_literal() -> None:
    tpl = _first_expr("`a${b}c\\n`")

    assert isinstance(tpl, ast.TemplateLiteral)
    assert tpl.quasis == ("a", "c\n")
    assert tpl.expressions == (ast.Identifier("b"),)


def test_member_expressions() -> None:
    dotted = _first_expr("a.b")
    computed = _first_expr("a[0]")

    assert dotted == ast.MemberExpression(ast.Identifier("a"), ast.Identifier("b"), False)
    assert computed.computed and computed.property == ast.Literal(0.0)


def test_array_holes() -> None:
    arr = _first_expr("[1, , 3]")
    assert arr.elements[1] is None


def test_arrow_concise_body() -> None:
    arrow = _first_expr("(a, b) => a + b")

    assert isinstance(arrow, ast.ArrowFunctionExpression)
    assert arrow.params == ("a", "b")
    assert isinstance(arrow.body, ast.BinaryExpression)


def test_try_catch_shape() -> None:
    stmt = parse_source("try { a } catch (e) { b } finally { c }").body[0]

    assert isinstance(stmt, ast.TryStatement)
    assert stmt.handler.param == "e"
    assert stmt.finalizer is not None


def test_spans_do_not_affect_equality() -> None:
    assert parse_source("a + 1") == parse_source("  a + 1")


@pytest.mark.parametrize(
    "source",
    [
        pytest.param("f(...args)", id="spread-call"),
        pytest.param("[a, b] = [1, 2]", id="array-pattern-assign"),
        pytest.param("for (const [k, v] of x) {}", id="pattern-loop-target"),
        pytest.param("function f(...rest) {}", id="rest-param"),
        pytest.param("var o = { set x(v) {} };", id="setter"),
    ],
)
def test_rejected_constructs(source: str) -> None:
    with pytest.raises(UnsupportedSyntax):
        parse_source(source)


def test_unsupported_reports_offsets() -> None:
    with pytest.raises(UnsupportedSyntax) as exc_info:
        parse_source("1;\nclass A {}")

    assert exc_info.value.start == 3
    assert exc_info.value.kind == "ClassDeclaration"


def test_syntax_error() -> None:
    with pytest.raises(ParseError) as exc_info:
        parse_source("if (")

    assert "SyntaxError" in str(exc_info.value)
