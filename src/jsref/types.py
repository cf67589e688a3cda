from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple, Union
from typing_extensions import TypeAlias, TypeGuard

log = logging.getLogger(__name__)

# ---------- Value Model ----------

@dataclass(frozen=True)
class JsUndefined:
    def __repr__(self) -> str:
        return "undefined"

@dataclass(frozen=True)
class JsNull:
    def __repr__(self) -> str:
        return "null"

UNDEFINED = JsUndefined()
NULL = JsNull()

@dataclass(frozen=True)
class JsNumber:
    value: float
    def __repr__(self) -> str:
        from .eval.coerce import number_to_string
        return number_to_string(self.value)

@dataclass(frozen=True)
class JsString:
    value: str
    def __post_init__(self) -> None:
        # a surrogate pair and the astral character it encodes are the same string
        if not self.value.isascii():
            object.__setattr__(self, "value", join_surrogates(self.value))

    def __repr__(self) -> str:
        return f'"{self.value}"'

def join_surrogates(text: str) -> str:
    """Combine adjacent high/low surrogates into one astral character; lone halves stay."""
    out: List[str] = []
    idx = 0

    while idx < len(text):
        high = ord(text[idx])
        low = ord(text[idx + 1]) if idx + 1 < len(text) else 0

        if 0xD800 <= high <= 0xDBFF and 0xDC00 <= low <= 0xDFFF:
            out.append(chr(0x10000 + ((high - 0xD800) << 10) + (low - 0xDC00)))
            idx += 2
        else:
            out.append(text[idx])
            idx += 1

    return "".join(out)

@dataclass(frozen=True)
class JsBool:
    value: bool
    def __repr__(self) -> str:
        return "true" if self.value else "false"

TRUE = JsBool(True)
FALSE = JsBool(False)

# Reference values compare by identity.

@dataclass(eq=False)
class JsArray:
    items: List['JsValue'] = field(default_factory=list)
    slots: Dict[str, 'JsValue'] = field(default_factory=dict)
    def __repr__(self) -> str:
        return "[" + ", ".join(repr(x) for x in self.items) + "]"

@dataclass(eq=False)
class JsObject:
    slots: Dict[str, 'JsValue'] = field(default_factory=dict)
    constructor: Optional['JsFunction'] = None
    def __repr__(self) -> str:
        pairs = []

        for k, v in self.slots.items():
            pairs.append(f"{k}: {v!r}")

        if not pairs:
            return "{}"

        return "{ " + ", ".join(pairs) + " }"

@dataclass(eq=False)
class JsFunction:
    params: Tuple[str, ...]
    body: object                # BlockStatement, or an expression for concise arrows
    scope: 'Scope'              # closure scope
    name: str = ""
    is_arrow: bool = False
    slots: Dict[str, 'JsValue'] = field(default_factory=dict)
    def __repr__(self) -> str:
        label = "arrow" if self.is_arrow else "function"
        return f"<{label} {self.name or '(anonymous)'}>"

NativeFn = Callable[['JsValue', List['JsValue']], 'JsValue']

@dataclass(eq=False)
class NativeFunction:
    """Host callable exposed to programs; receives `this` and the argument list."""
    fn: NativeFn
    name: str = ""
    slots: Dict[str, 'JsValue'] = field(default_factory=dict)
    def __repr__(self) -> str:
        return f"<native {self.name or '(anonymous)'}>"

JsValue: TypeAlias = Union[
    JsUndefined,
    JsNull,
    JsNumber,
    JsString,
    JsBool,
    JsArray,
    JsObject,
    JsFunction,
    NativeFunction,
]

_JS_VALUE_TYPES: Tuple[type, ...] = (
    JsUndefined,
    JsNull,
    JsNumber,
    JsString,
    JsBool,
    JsArray,
    JsObject,
    JsFunction,
    NativeFunction,
)

REFERENCE_TYPES: Tuple[type, ...] = (JsArray, JsObject, JsFunction, NativeFunction)

def is_js_value(value: object) -> TypeGuard[JsValue]:
    return isinstance(value, _JS_VALUE_TYPES)

def is_callable(value: object) -> TypeGuard[Union[JsFunction, NativeFunction]]:
    return isinstance(value, (JsFunction, NativeFunction))

def ensure_js_value(value: object) -> JsValue:
    if value is None:
        return UNDEFINED
    if is_js_value(value):
        return value
    raise JsTypeError(f"Unexpected host value of type {type(value).__name__}")

# ---------- Completions ----------

@dataclass(frozen=True)
class Normal:
    value: JsValue = UNDEFINED

@dataclass(frozen=True)
class Break:
    label: Optional[str] = None

@dataclass(frozen=True)
class Continue:
    label: Optional[str] = None

@dataclass(frozen=True)
class Return:
    value: JsValue = UNDEFINED

Completion: TypeAlias = Union[Normal, Break, Continue, Return]

EMPTY = Normal()

# ---------- Scopes ----------

class DeclKind(enum.Enum):
    LET = "let"        # reassignable, block scoped
    VAR = "var"        # reassignable, function scoped
    CONST = "const"

class ScopeKind(enum.Enum):
    FUNCTION = "function"
    BLOCK = "block"

@dataclass(frozen=True)
class EvalOptions:
    # Assignment to an undeclared name raises instead of creating a global.
    strict_references: bool = False

@dataclass
class Binding:
    name: str
    value: JsValue
    kind: DeclKind

class _NotFound:
    def __repr__(self) -> str:
        return "<not found>"

NOT_FOUND = _NotFound()

class Scope:
    def __init__(
        self,
        parent: Optional['Scope']=None,
        kind: ScopeKind=ScopeKind.BLOCK,
        options: Optional[EvalOptions]=None,
    ):
        self.parent = parent
        self.kind = kind
        self.bindings: Dict[str, Binding] = {}
        self.has_this = False
        self.this_value: JsValue = UNDEFINED

        if options is not None:
            self.options = options
        elif parent is not None:
            self.options = parent.options
        else:
            self.options = EvalOptions()

    def lookup(self, name: str) -> Optional[Binding]:
        scope: Optional[Scope] = self

        while scope is not None:
            binding = scope.bindings.get(name)
            if binding is not None:
                return binding

            scope = scope.parent

        return None

    def get(self, name: str) -> Union[JsValue, _NotFound]:
        binding = self.lookup(name)
        if binding is None:
            return NOT_FOUND

        return binding.value

    def has(self, name: str) -> bool:
        return self.lookup(name) is not None

    def set(self, name: str, value: JsValue) -> None:
        binding = self.lookup(name)

        if binding is None:
            if self.options.strict_references:
                raise UnresolvedReference(name)

            log.debug("implicit global %r created by assignment", name)
            self.root().bindings[name] = Binding(name, value, DeclKind.VAR)
            return

        if binding.kind is DeclKind.CONST:
            raise ConstReassignment(name)

        binding.value = value

    def declare(self, kind: DeclKind, name: str, value: JsValue) -> None:
        target = self.function_scope() if kind is DeclKind.VAR else self
        existing = target.bindings.get(name)

        if existing is not None and (kind is not DeclKind.VAR or existing.kind is not DeclKind.VAR):
            raise Redeclaration(name)

        target.bindings[name] = Binding(name, value, kind)

    def define(self, name: str, value: JsValue, kind: DeclKind=DeclKind.LET) -> None:
        """Bind in this scope unconditionally (parameters, hoisted functions)."""
        self.bindings[name] = Binding(name, value, kind)

    def function_scope(self) -> 'Scope':
        scope = self

        while scope.kind is not ScopeKind.FUNCTION and scope.parent is not None:
            scope = scope.parent

        return scope

    def root(self) -> 'Scope':
        scope = self

        while scope.parent is not None:
            scope = scope.parent

        return scope

    def bind_this(self, value: JsValue) -> None:
        self.has_this = True
        self.this_value = value

    def lookup_this(self) -> JsValue:
        scope: Optional[Scope] = self

        while scope is not None:
            if scope.has_this:
                return scope.this_value

            scope = scope.parent

        return UNDEFINED

    def __repr__(self) -> str:
        names = ", ".join(self.bindings)
        return f"<Scope {self.kind.value} [{names}]>"

# ---------- Exceptions ----------

class JsRuntimeError(Exception):
    js_meta: Optional[object]

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        self.js_meta = None

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        msg = super().__str__()

        meta = getattr(self, "js_meta", None)
        if meta is None:
            return msg

        line = getattr(meta, "line", None)
        col = getattr(meta, "column", None)

        if line is None:
            return msg

        if col is None:
            return f"{msg} (line {line})"

        return f"{msg} (line {line}, col {col})"

class JsThrowable(JsRuntimeError):
    """Errors the evaluated program can observe with try/catch."""
    error_name = "Error"

class UserThrown(JsThrowable):
    def __init__(self, payload: JsValue):
        from .eval.coerce import display_value
        super().__init__(f"Uncaught {display_value(payload)}")
        self.payload = payload

class ConstReassignment(JsThrowable):
    error_name = "TypeError"

    def __init__(self, name: str):
        super().__init__(f"Assignment to constant variable '{name}'")
        self.name = name

class UnresolvedReference(JsThrowable):
    error_name = "ReferenceError"

    def __init__(self, name: str):
        super().__init__(f"{name} is not defined")
        self.name = name

class JsTypeError(JsThrowable):
    error_name = "TypeError"

class JsRangeError(JsThrowable):
    error_name = "RangeError"

class JsFatalError(JsRuntimeError):
    """Host-level failures; never visible to the program's try/catch."""

class UnsupportedSyntax(JsFatalError):
    def __init__(self, kind: str, start: Optional[int]=None, end: Optional[int]=None):
        where = f" at {start}:{end}" if start is not None else ""
        super().__init__(f"Unsupported syntax {kind}{where}")
        self.kind = kind
        self.start = start
        self.end = end

class InvalidStatementForm(JsFatalError):
    pass

class Redeclaration(JsFatalError):
    def __init__(self, name: str):
        super().__init__(f"Identifier '{name}' has already been declared")
        self.name = name

class ParseError(JsFatalError):
    def __init__(self, message: str, line: Optional[int]=None, column: Optional[int]=None):
        super().__init__(message)
        self.line = line
        self.column = column

class Builtins:
    stdlib_functions: Dict[str, NativeFn] = {}
    namespaces: Dict[str, Dict[str, NativeFn]] = {}
