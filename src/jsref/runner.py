from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Optional

from .evaluator import evaluate
from .eval.mutation import get_property
from .parser import parse_source
from .runtime import create_global_scope
from .types import (
    DeclKind,
    EvalOptions,
    JsObject,
    JsRuntimeError,
    JsValue,
    Scope,
    ScopeKind,
)
from .utils import PY_TRACEBACK_ENV, debug_py_trace_enabled

def run(src: str, scope: Optional[Scope]=None, options: Optional[EvalOptions]=None) -> JsValue:
    """Parse and evaluate `src`; a fresh global scope is made unless one is given."""
    program = parse_source(src)

    if scope is None:
        scope = create_global_scope(options=options)

    return evaluate(program, scope)

def repl_eval(src: str, scope: Scope) -> JsValue:
    """Evaluate one REPL entry against the session's long-lived scope."""
    return run(src, scope)

def custom_eval(code: str, parent: Optional[Scope]=None) -> JsValue:
    """Run `code` as a module body and return its `module.exports`."""
    if parent is None:
        parent = create_global_scope()

    module_scope = Scope(parent=parent, kind=ScopeKind.FUNCTION)
    exports = JsObject()
    module = JsObject({"exports": exports})

    module_scope.define("module", module, DeclKind.VAR)
    module_scope.define("exports", exports, DeclKind.VAR)

    evaluate(parse_source(code), module_scope)

    # `module.exports = ...` replaces the object, so read it back
    return get_property(module, "exports")

def _load_source(arg: Optional[str]) -> str:
    """
    Resolve CLI input into source text.
    - None or "-" => read stdin.
    - Existing path => read file contents.
    - Otherwise treat the argument as literal source.
    """

    if arg is None or arg == "-":
        data = sys.stdin.read()
        if not data:
            raise SystemExit("No input provided on stdin")
        return data

    candidate = Path(arg)
    if candidate.is_file():
        return candidate.read_text(encoding="utf-8")

    return arg

def main() -> None:
    strict_refs = False
    arg = None

    for token in sys.argv[1:]:
        if token == "--debug":
            logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")
            continue

        if token == "--strict-refs":
            strict_refs = True
            continue

        if token == "--py-traceback":
            os.environ[PY_TRACEBACK_ENV] = "1"
            continue

        if token.startswith("--"):
            raise SystemExit(f"Unknown flag: {token}")

        if arg is None:
            arg = token
        else:
            raise SystemExit(f"Unexpected argument: {token}")

    source = _load_source(arg or "-")

    try:
        result = run(source, options=EvalOptions(strict_references=strict_refs))
    except JsRuntimeError as exc:
        if debug_py_trace_enabled():
            raise
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from None

    print(result)

if __name__ == "__main__":
    main()
