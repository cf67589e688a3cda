from __future__ import annotations

from types import SimpleNamespace

import esprima
from esprima.error_handler import Error as EsprimaError

from .ast import Program
from .lower import lower
from .types import ParseError

def parse_source(code: str) -> Program:
    """Parse script source into a lowered Program."""
    try:
        tree = esprima.parseScript(code, {"range": True, "loc": True})
    except EsprimaError as e:
        line = getattr(e, "lineNumber", None)
        column = getattr(e, "column", None)
        description = getattr(e, "description", None) or str(e)

        err = ParseError(f"SyntaxError: {description}", line, column)
        if line is not None:
            err.js_meta = SimpleNamespace(line=line, column=column)
        raise err from e

    return lower(tree)

def is_incomplete_input(err: ParseError) -> bool:
    """True when the source merely stopped early (the REPL keeps reading)."""
    return "end of input" in err.message.lower()
