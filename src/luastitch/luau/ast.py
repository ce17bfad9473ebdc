# src/luastitch/luau/ast.py
"""Typed syntax tree for Luau source.

Nodes are frozen dataclasses. Children are tuples, so every rewrite builds
new nodes (`dataclasses.replace`) and the input tree is never mutated.
Spans are excluded from equality: two trees that print the same compare
equal regardless of where they came from.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Literal, Union


@dataclass(frozen=True)
class Span:
    line: int
    column: int
    end_line: int
    end_column: int

    def __str__(self) -> str:
        return f"{self.line}:{self.column}-{self.end_line}:{self.end_column}"


@dataclass(frozen=True)
class Node:
    span: Span | None = field(default=None, compare=False, kw_only=True)


# --- types --------------------------------------------------------------------


@dataclass(frozen=True)
class TypeAnnotation(Node):
    """A type expression, kept as its source text."""

    text: str


# --- expressions --------------------------------------------------------------


@dataclass(frozen=True)
class Name(Node):
    name: str


@dataclass(frozen=True)
class Nil(Node):
    pass


@dataclass(frozen=True)
class Boolean(Node):
    value: bool


@dataclass(frozen=True)
class Number(Node):
    raw: str


_SIMPLE_ESCAPES = {
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    "\\": "\\",
    '"': '"',
    "'": "'",
    "\n": "\n",
}

_ESCAPE_RE = re.compile(
    r"\\(?:(?P<simple>[abfnrtv\\\"'\n])"
    r"|x(?P<hex>[0-9A-Fa-f]{2})"
    r"|(?P<dec>[0-9]{1,3})"
    r"|u\{(?P<uni>[0-9A-Fa-f]+)\}"
    r"|z\s*)"
)

_LONG_BRACKET_RE = re.compile(r"^\[(=*)\[(.*)\]\1\]$", re.DOTALL)


def _unescape(body: str) -> str:
    def sub(m: re.Match[str]) -> str:
        if m.group("simple") is not None:
            return _SIMPLE_ESCAPES[m.group("simple")]
        if m.group("hex") is not None:
            return chr(int(m.group("hex"), 16))
        if m.group("dec") is not None:
            return chr(int(m.group("dec")))
        if m.group("uni") is not None:
            return chr(int(m.group("uni"), 16))
        return ""  # \z skips following whitespace

    return _ESCAPE_RE.sub(sub, body)


@dataclass(frozen=True)
class String(Node):
    """A string literal, kept exactly as written (quotes included)."""

    raw: str

    @property
    def value(self) -> str:
        """The decoded string value."""
        long_match = _LONG_BRACKET_RE.match(self.raw)
        if long_match:
            body = long_match.group(2)
            # a newline right after the opening bracket is skipped
            if body.startswith("\r\n"):
                return body[2:]
            if body.startswith("\n"):
                return body[1:]
            return body
        return _unescape(self.raw[1:-1])

    @classmethod
    def from_value(cls, value: str) -> String:
        escaped = (
            value.replace("\\", "\\\\")
            .replace('"', '\\"')
            .replace("\n", "\\n")
            .replace("\r", "\\r")
        )
        return cls(f'"{escaped}"')


@dataclass(frozen=True)
class InterpolatedString(Node):
    """A backtick string, kept verbatim."""

    raw: str


@dataclass(frozen=True)
class Vararg(Node):
    pass


@dataclass(frozen=True)
class Index(Node):
    obj: Expr
    key: Expr


@dataclass(frozen=True)
class Field(Node):
    obj: Expr
    name: str


CallStyle = Literal["paren", "string", "table"]


@dataclass(frozen=True)
class CallArgs(Node):
    """Arguments of a call. `style` records how they were written."""

    values: tuple[Expr, ...] = ()
    style: CallStyle = "paren"


@dataclass(frozen=True)
class Call(Node):
    func: Expr
    args: CallArgs


@dataclass(frozen=True)
class MethodCall(Node):
    obj: Expr
    method: str
    args: CallArgs


@dataclass(frozen=True)
class Paren(Node):
    expr: Expr


@dataclass(frozen=True)
class Binding(Node):
    """A name being declared, with its optional type annotation."""

    name: str
    annotation: TypeAnnotation | None = None


@dataclass(frozen=True)
class FunctionBody(Node):
    params: tuple[Binding, ...]
    body: Block
    generics: str | None = None
    return_type: TypeAnnotation | None = None

    @property
    def is_vararg(self) -> bool:
        return bool(self.params) and self.params[-1].name == "..."


@dataclass(frozen=True)
class FunctionExpr(Node):
    body: FunctionBody


@dataclass(frozen=True)
class PositionalField(Node):
    value: Expr


@dataclass(frozen=True)
class NamedField(Node):
    name: str
    value: Expr


@dataclass(frozen=True)
class KeyedField(Node):
    key: Expr
    value: Expr


TableField = Union[PositionalField, NamedField, KeyedField]


@dataclass(frozen=True)
class Table(Node):
    fields: tuple[TableField, ...] = ()


@dataclass(frozen=True)
class BinaryOp(Node):
    op: str
    left: Expr
    right: Expr


@dataclass(frozen=True)
class UnaryOp(Node):
    op: str
    operand: Expr


@dataclass(frozen=True)
class IfExpr(Node):
    """`if c then a elseif d then b else e`; branches hold (condition, value)."""

    branches: tuple[tuple[Expr, Expr], ...]
    orelse: Expr


@dataclass(frozen=True)
class Cast(Node):
    expr: Expr
    annotation: TypeAnnotation


Expr = Union[
    Name,
    Nil,
    Boolean,
    Number,
    String,
    InterpolatedString,
    Vararg,
    Index,
    Field,
    Call,
    MethodCall,
    Paren,
    FunctionExpr,
    Table,
    BinaryOp,
    UnaryOp,
    IfExpr,
    Cast,
]


# --- statements ---------------------------------------------------------------


@dataclass(frozen=True)
class FunctionName(Node):
    """`a.b.c:d` as ("a", "b", "c") plus method "d"."""

    names: tuple[str, ...]
    method: str | None = None

    def __str__(self) -> str:
        dotted = ".".join(self.names)
        return f"{dotted}:{self.method}" if self.method else dotted


@dataclass(frozen=True)
class Assignment(Node):
    targets: tuple[Expr, ...]
    values: tuple[Expr, ...]


@dataclass(frozen=True)
class CompoundAssignment(Node):
    op: str
    target: Expr
    value: Expr


@dataclass(frozen=True)
class CallStatement(Node):
    call: Call | MethodCall


@dataclass(frozen=True)
class Do(Node):
    body: Block


@dataclass(frozen=True)
class While(Node):
    condition: Expr
    body: Block


@dataclass(frozen=True)
class Repeat(Node):
    body: Block
    condition: Expr


@dataclass(frozen=True)
class IfBranch(Node):
    condition: Expr
    body: Block


@dataclass(frozen=True)
class If(Node):
    branches: tuple[IfBranch, ...]
    orelse: Block | None = None


@dataclass(frozen=True)
class NumericFor(Node):
    var: Binding
    start: Expr
    stop: Expr
    step: Expr | None
    body: Block


@dataclass(frozen=True)
class GenericFor(Node):
    names: tuple[Binding, ...]
    iterables: tuple[Expr, ...]
    body: Block


@dataclass(frozen=True)
class FunctionDeclaration(Node):
    name: FunctionName
    body: FunctionBody


@dataclass(frozen=True)
class LocalFunction(Node):
    name: str
    body: FunctionBody


@dataclass(frozen=True)
class LocalAssignment(Node):
    names: tuple[Binding, ...]
    values: tuple[Expr, ...] = ()


@dataclass(frozen=True)
class TypeAlias(Node):
    name: str
    value: TypeAnnotation
    generics: str | None = None
    exported: bool = False


@dataclass(frozen=True)
class Return(Node):
    values: tuple[Expr, ...] = ()


@dataclass(frozen=True)
class Break(Node):
    pass


@dataclass(frozen=True)
class Continue(Node):
    pass


Stmt = Union[
    Assignment,
    CompoundAssignment,
    CallStatement,
    Do,
    While,
    Repeat,
    If,
    NumericFor,
    GenericFor,
    FunctionDeclaration,
    LocalFunction,
    LocalAssignment,
    TypeAlias,
    Return,
    Break,
    Continue,
]


@dataclass(frozen=True)
class Block(Node):
    statements: tuple[Stmt, ...] = ()


@dataclass(frozen=True)
class Chunk(Node):
    """A whole source file."""

    block: Block


def node_kind(node: Node) -> str:
    """Human name of a node kind, e.g. `LocalAssignment` -> `local declaration`."""
    return NODE_KIND_NAMES.get(type(node).__name__, type(node).__name__)


NODE_KIND_NAMES = {
    "Assignment": "assignment",
    "CompoundAssignment": "compound assignment",
    "CallStatement": "call statement",
    "Do": "do block",
    "While": "while loop",
    "Repeat": "repeat loop",
    "If": "if statement",
    "NumericFor": "numeric for loop",
    "GenericFor": "generic for loop",
    "FunctionDeclaration": "function declaration",
    "LocalFunction": "local function declaration",
    "LocalAssignment": "local declaration",
    "TypeAlias": "type alias",
    "Return": "return statement",
    "Break": "break statement",
    "Continue": "continue statement",
}
