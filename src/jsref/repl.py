"""prompt_toolkit front end: one long-lived global scope, multi-line entry and `/` commands."""

from __future__ import annotations

import logging
import os
import re
import sys
import traceback
from pathlib import Path
from typing import Callable, Dict, Iterator, Tuple

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.shortcuts import clear

from .parser import is_incomplete_input, parse_source
from .runner import repl_eval
from .runtime import create_global_scope
from .types import JsRuntimeError, JsUndefined, ParseError, Scope
from .utils import PY_TRACEBACK_ENV, debug_py_trace_enabled

_STRIP_RE = re.compile("[\\u200b\\u200c\\u200d\\ufeff\\r]")
_NBSP_RE = re.compile("\\u00a0")

_ON = ("on", "1", "true", "yes")
_OFF = ("off", "0", "false", "no")

class ReplSession:
    """State shared by every entry typed into one REPL run."""

    def __init__(self) -> None:
        self.scope: Scope = create_global_scope()
        self.commands: Dict[str, Tuple[Callable[[str], None], str, str]] = {
            "/help": (self._cmd_help, "List commands", ""),
            "/clear": (self._cmd_clear, "Clear the terminal screen", ""),
            "/reset": (self._cmd_reset, "Drop every binding made this session", ""),
            "/scope": (self._cmd_scope, "Show names bound at the top level", ""),
            "/load": (self._cmd_load, "Run a script file into this session", "FILE"),
            "/debug": (self._cmd_debug, "Toggle jsref debug logging", "[on|off]"),
            "/py-traceback": (self._cmd_py_traceback, "Toggle Python traceback on errors", "[on|off]"),
        }
        self._builtins = frozenset(self.scope.bindings)

    # ---- entries ----

    def run_entry(self, text: str) -> None:
        text = normalize_input(text)
        if not text.strip():
            return

        if text.lstrip().startswith("/"):
            self.run_command(text.strip())
            return

        try:
            result = repl_eval(text, self.scope)
        except JsRuntimeError as exc:
            report_error(exc)
            return

        if not isinstance(result, JsUndefined):
            print(repr(result))

    def run_command(self, line: str) -> None:
        name, _, arg = line.partition(" ")
        entry = self.commands.get(name)

        if entry is None:
            print(f"Unknown command: {name} (try /help)", file=sys.stderr)
            return

        entry[0](arg.strip())

    # ---- commands ----

    def _cmd_help(self, _arg: str) -> None:
        for name, (_fn, desc, hint) in self.commands.items():
            usage = f"{name} {hint}".rstrip()
            print(f"  {usage:<22} {desc}")

    def _cmd_clear(self, _arg: str) -> None:
        clear()

    def _cmd_reset(self, _arg: str) -> None:
        self.scope = create_global_scope()
        print("Environment reset.")

    def _cmd_scope(self, _arg: str) -> None:
        names = [name for name in self.scope.bindings if name not in self._builtins]
        if not names:
            print("(no bindings)")
            return

        for name in names:
            binding = self.scope.bindings[name]
            print(f"  {binding.kind.value} {name} = {binding.value!r}")

    def _cmd_load(self, arg: str) -> None:
        if not arg:
            print("Usage: /load FILE", file=sys.stderr)
            return

        try:
            source = Path(arg).read_text(encoding="utf-8")
        except OSError as exc:
            print(f"Cannot read {arg}: {exc.strerror}", file=sys.stderr)
            return

        try:
            repl_eval(source, self.scope)
        except JsRuntimeError as exc:
            report_error(exc)
            return

        print(f"Loaded {arg}")

    def _cmd_debug(self, arg: str) -> None:
        logger = logging.getLogger("jsref")
        enabled = _toggle(arg, logger.isEnabledFor(logging.DEBUG), "/debug")
        if enabled is None:
            return

        if enabled and not logger.handlers:
            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
            logger.addHandler(handler)

        logger.setLevel(logging.DEBUG if enabled else logging.WARNING)
        print(f"Debug logging: {'on' if enabled else 'off'}")

    def _cmd_py_traceback(self, arg: str) -> None:
        enabled = _toggle(arg, debug_py_trace_enabled(), "/py-traceback")
        if enabled is None:
            return

        if enabled:
            os.environ[PY_TRACEBACK_ENV] = "1"
        else:
            os.environ.pop(PY_TRACEBACK_ENV, None)

        print(f"Python traceback: {'on' if enabled else 'off'}")

def _toggle(arg: str, current: bool, usage: str):
    """New on/off state for a toggle command, or None after a usage error."""
    word = arg.lower()

    if word == "":
        return not current
    if word in _ON:
        return True
    if word in _OFF:
        return False

    print(f"Usage: {usage} [on|off]", file=sys.stderr)
    return None

def report_error(exc: JsRuntimeError) -> None:
    print(f"Error: {exc}", file=sys.stderr)

    if debug_py_trace_enabled():
        print("\nPython traceback:", file=sys.stderr)
        traceback.print_exception(exc, file=sys.stderr)

def normalize_input(text: str) -> str:
    """Drop zero-width characters pasted along with code; NBSP becomes a space."""
    return _NBSP_RE.sub(" ", _STRIP_RE.sub("", text))

def needs_more_input(text: str) -> bool:
    """True while the buffer stops short of a complete program (open brace, dangling operator)."""
    if text.lstrip().startswith("/"):
        return False

    try:
        parse_source(normalize_input(text))
    except ParseError as exc:
        return is_incomplete_input(exc)
    except JsRuntimeError:
        # unsupported syntax is reported on submit
        return False

    return False

def continuation_indent(text: str) -> str:
    depth = 0

    for ch in text:
        if ch in "{([":
            depth += 1
        elif ch in "})]":
            depth = max(depth - 1, 0)

    return "  " * depth

class _CommandCompleter(Completer):
    def __init__(self, session: ReplSession):
        self.session = session

    def get_completions(self, document, complete_event) -> Iterator[Completion]:
        text = document.text_before_cursor
        if not text.startswith("/") or " " in text:
            return

        for name, (_fn, desc, _hint) in self.session.commands.items():
            if name.startswith(text):
                yield Completion(name, start_position=-len(text), display_meta=desc)

def _key_bindings() -> KeyBindings:
    bindings = KeyBindings()

    @bindings.add("enter")
    def _enter(event):
        buf = event.app.current_buffer
        text = buf.text

        # a blank line always submits what is there
        lines = text.split("\n")
        if len(lines) > 1 and not lines[-1].strip():
            buf.text = "\n".join(lines[:-1])
            buf.validate_and_handle()
            return

        if needs_more_input(text):
            buf.insert_text("\n" + continuation_indent(text))
            return

        buf.validate_and_handle()

    return bindings

def repl() -> None:
    session = ReplSession()
    prompt: PromptSession[str] = PromptSession(
        history=InMemoryHistory(),
        completer=_CommandCompleter(session),
        complete_while_typing=True,
        key_bindings=_key_bindings(),
        multiline=True,
        prompt_continuation="... ",
    )

    print("jsref repl (Ctrl-D to exit, /help for commands)")

    while True:
        try:
            text = prompt.prompt("js> ")
        except EOFError:
            print()
            break
        except KeyboardInterrupt:
            print("KeyboardInterrupt")
            continue

        session.run_entry(text)

if __name__ == "__main__":
    repl()
