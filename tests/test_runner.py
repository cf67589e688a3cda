from __future__ import annotations

import sys

import pytest

from jsref.runner import custom_eval, main, repl_eval
from jsref.runtime import create_global_scope, from_python, to_python
from jsref.types import EvalOptions, JsNumber, JsString
from jsref.utils import PY_TRACEBACK_ENV
from tests.support.harness import JsTypeError, UnresolvedReference, run_program


def _run_cli(monkeypatch: pytest.MonkeyPatch, *args: str) -> None:
    monkeypatch.setattr(sys, "argv", ["jsref", *args])
    main()


def test_cli_prints_result(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    _run_cli(monkeypatch, "1 + 2")
    assert capsys.readouterr().out == "3\n"


def test_cli_reads_file(
    tmp_path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    script = tmp_path / "prog.js"
    script.write_text('console.log("hi", 1 + 1);\n"done"', encoding="utf-8")

    _run_cli(monkeypatch, str(script))
    assert capsys.readouterr().out == 'hi 2\n"done"\n'


def test_cli_reads_stdin(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    import io

    monkeypatch.setattr(sys, "stdin", io.StringIO("[1, 2].length"))
    _run_cli(monkeypatch, "-")
    assert capsys.readouterr().out == "2\n"


def test_cli_reports_errors(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setenv(PY_TRACEBACK_ENV, "0")

    with pytest.raises(SystemExit) as exc_info:
        _run_cli(monkeypatch, "null.x")

    assert exc_info.value.code == 1
    assert capsys.readouterr().err.startswith("Error: Cannot read properties of null")


def test_cli_reports_stack_overflow(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setenv(PY_TRACEBACK_ENV, "0")

    with pytest.raises(SystemExit) as exc_info:
        _run_cli(monkeypatch, "function f() { return f() } f()")

    assert exc_info.value.code == 1
    assert capsys.readouterr().err.startswith("Error: Maximum call stack size exceeded")


def test_evaluation_raises_recursion_limit(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sys, "getrecursionlimit", lambda: 1000)
    raised = []
    monkeypatch.setattr(sys, "setrecursionlimit", raised.append)

    run_program("1")

    assert raised and raised[0] > 1000


def test_cli_py_traceback_reraises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(PY_TRACEBACK_ENV, "0")

    with pytest.raises(JsTypeError):
        _run_cli(monkeypatch, "--py-traceback", "null.x")


def test_cli_strict_refs(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setenv(PY_TRACEBACK_ENV, "0")

    with pytest.raises(SystemExit):
        _run_cli(monkeypatch, "--strict-refs", "undeclared = 1")

    assert "undeclared is not defined" in capsys.readouterr().err


def test_cli_rejects_unknown_flag(monkeypatch: pytest.MonkeyPatch) -> None:
    with pytest.raises(SystemExit) as exc_info:
        _run_cli(monkeypatch, "--nope", "1")

    assert "Unknown flag" in str(exc_info.value.code)


def test_strict_references_option() -> None:
    with pytest.raises(UnresolvedReference):
        run_program("function f() { g = 1 }\nf()", options=EvalOptions(strict_references=True))


def test_evaluation_is_repeatable() -> None:
    source = "var o = {n: 0}; for (var i = 0; i < 4; i++) o.n += i; o.n"

    assert run_program(source) == run_program(source) == JsNumber(6.0)


def test_repl_eval_keeps_state(global_scope) -> None:
    scope = global_scope

    repl_eval("let total = 1;", scope)
    repl_eval("function bump() { total += 1; return total }", scope)

    assert repl_eval("bump(); bump()", scope) == JsNumber(3.0)


def test_host_values_in_scope(global_scope) -> None:
    scope = global_scope
    scope.define("host", from_python({"items": [1, 2, 3], "label": "x"}))
    scope.define("double", from_python(lambda n: n * 2))

    result = run_program("[host.items.length, host.label, double(21)]", scope)
    assert to_python(result) == [3, "x", 42]


def test_custom_eval_exports_object() -> None:
    result = custom_eval("exports.a = 1;\nexports.b = function () { return 2 };")

    assert to_python(result)["a"] == 1


def test_custom_eval_replaced_exports() -> None:
    assert custom_eval("module.exports = 5;") == JsNumber(5.0)


def test_custom_eval_reads_parent_scope() -> None:
    parent = create_global_scope()
    parent.define("greeting", JsString("hello"))

    assert custom_eval('module.exports = greeting + "!";', parent) == JsString("hello!")


def test_custom_eval_isolates_module_vars() -> None:
    parent = create_global_scope()
    custom_eval("var secret = 1;", parent)

    assert not parent.has("secret")


def test_console_streams(capsys: pytest.CaptureFixture[str]) -> None:
    run_program('print("a", [1, "b"]); console.error("oops", null); console.log({k: 1})')

    captured = capsys.readouterr()
    assert captured.out == 'a [1, "b"]\n{ k: 1 }\n'
    assert captured.err == "oops null\n"
