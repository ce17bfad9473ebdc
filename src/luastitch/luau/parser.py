# src/luastitch/luau/parser.py
"""Luau source to syntax tree.

The grammar lives in `grammar.lark` next to this file and is compiled once
into an LALR parser. Syntax errors do not stop at the first one: the parser
skips the offending token and keeps going, so every problem in a file ends
up in a single `ParseError`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from lark import Lark, Token, Transformer, v_args
from lark.exceptions import (
    UnexpectedCharacters,
    UnexpectedInput,
    UnexpectedToken,
    VisitError,
)

from ..constants import MAX_PARSE_ERRORS
from ..diagnostics import Diagnostic, ParseError
from ..utils import recursion_limit
from . import ast as A


_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text(encoding="utf-8")

_PARSER = Lark(
    _GRAMMAR_SRC,
    parser="lalr",
    lexer="basic",
    start="start",
    propagate_positions=True,
    maybe_placeholders=False,
)


def _span(meta: Any) -> A.Span | None:
    if getattr(meta, "empty", True):
        return None
    return A.Span(meta.line, meta.column, meta.end_line, meta.end_column)


class _Problem:
    __slots__ = ("column", "line", "message")

    def __init__(self, line: int, column: int, message: str) -> None:
        self.line = line
        self.column = column
        self.message = message

    def render(self) -> str:
        return f"{self.line}:{self.column}: {self.message}"


@v_args(meta=True)
class _TreeBuilder(Transformer):  # type: ignore[type-arg]
    """Turns the lark parse tree into `luastitch.luau.ast` nodes."""

    def __init__(self, source: str) -> None:
        super().__init__()
        self._source = source
        self.problems: list[_Problem] = []

    def _slice(self, meta: Any) -> str:
        return self._source[meta.start_pos : meta.end_pos]

    def _problem(self, meta: Any, message: str) -> None:
        self.problems.append(_Problem(meta.line, meta.column, message))

    # --- chunk and blocks ---

    def start(self, meta, children):
        return A.Chunk(children[0], span=_span(meta))

    def block(self, meta, children):
        stmts = tuple(c for c in children if c is not None)
        return A.Block(stmts, span=_span(meta))

    def retstat(self, meta, children):
        values = children[0] if children else ()
        return A.Return(values, span=_span(meta))

    # --- statements ---

    def empty_stat(self, meta, children):
        return None

    def assign(self, meta, children):
        targets, values = children
        return A.Assignment(targets, values, span=_span(meta))

    def compound_assign(self, meta, children):
        target, op, value = children
        return A.CompoundAssignment(str(op)[:-1], target, value, span=_span(meta))

    def expr_stat(self, meta, children):
        expr = children[0]
        if isinstance(expr, (A.Call, A.MethodCall)):
            return A.CallStatement(expr, span=_span(meta))
        self._problem(
            meta,
            f"expected a function call or an assignment, got `{self._slice(meta)}`",
        )
        return None

    def do_stat(self, meta, children):
        return A.Do(children[0], span=_span(meta))

    def while_stat(self, meta, children):
        condition, body = children
        return A.While(condition, body, span=_span(meta))

    def repeat_stat(self, meta, children):
        body, condition = children
        return A.Repeat(body, condition, span=_span(meta))

    def if_stat(self, meta, children):
        condition, body, *rest = children
        branches = [A.IfBranch(condition, body, span=_span(meta))]
        orelse = None
        for item in rest:
            if isinstance(item, A.IfBranch):
                branches.append(item)
            else:
                orelse = item
        return A.If(tuple(branches), orelse, span=_span(meta))

    def elseif_clause(self, meta, children):
        condition, body = children
        return A.IfBranch(condition, body, span=_span(meta))

    def else_clause(self, meta, children):
        return children[0]

    def numeric_for(self, meta, children):
        var, start, stop, *rest = children
        body = rest[-1]
        step = rest[0] if len(rest) == 2 else None  # noqa: PLR2004
        return A.NumericFor(var, start, stop, step, body, span=_span(meta))

    def generic_for(self, meta, children):
        *names, iterables, body = children
        return A.GenericFor(tuple(names), iterables, body, span=_span(meta))

    def function_decl(self, meta, children):
        name, body = children
        return A.FunctionDeclaration(name, body, span=_span(meta))

    def local_function(self, meta, children):
        name, body = children
        return A.LocalFunction(str(name), body, span=_span(meta))

    def local_assign(self, meta, children):
        names = tuple(c for c in children if isinstance(c, A.Binding))
        values: tuple[A.Expr, ...] = ()
        if children and isinstance(children[-1], tuple):
            values = children[-1]
        return A.LocalAssignment(names, values, span=_span(meta))

    def break_stat(self, meta, children):
        return A.Break(span=_span(meta))

    def continue_stat(self, meta, children):
        return A.Continue(span=_span(meta))

    def type_alias(self, meta, children):
        keyword, name, *rest = children
        if keyword != "type":
            self._problem(meta, f"unexpected name `{keyword}` before `{name}`")
            return None
        return self._type_alias(meta, str(name), rest, exported=False)

    def exported_type_alias(self, meta, children):
        export, keyword, name, *rest = children
        if export != "export" or keyword != "type":
            self._problem(meta, f"expected `export type`, got `{export} {keyword}`")
            return None
        return self._type_alias(meta, str(name), rest, exported=True)

    def _type_alias(self, meta, name, rest, *, exported):
        generics = rest[0] if len(rest) == 2 else None  # noqa: PLR2004
        return A.TypeAlias(
            name, rest[-1], generics=generics, exported=exported, span=_span(meta)
        )

    # --- lists ---

    def varlist(self, meta, children):
        return tuple(children)

    def explist(self, meta, children):
        return tuple(children)

    def fieldlist(self, meta, children):
        return tuple(children)

    def params(self, meta, children):
        return tuple(children)

    # --- function pieces ---

    def funcname(self, meta, children):
        names = tuple(str(c) for c in children if isinstance(c, Token))
        method = next((c for c in children if not isinstance(c, Token)), None)
        return A.FunctionName(names, method, span=_span(meta))

    def method_name(self, meta, children):
        # plain str, so funcname can tell it apart from NAME tokens
        return str(children[0])

    def funcbody(self, meta, children):
        generics = None
        params: tuple[A.Binding, ...] = ()
        return_type = None
        body = children[-1]
        for child in children[:-1]:
            if isinstance(child, tuple):
                params = child
            elif isinstance(child, A.TypeAnnotation):
                return_type = child
            else:
                generics = child
        return A.FunctionBody(
            params, body, generics=generics, return_type=return_type, span=_span(meta)
        )

    def return_type(self, meta, children):
        return children[0]

    def binding(self, meta, children):
        annotation = children[1] if len(children) > 1 else None
        return A.Binding(str(children[0]), annotation, span=_span(meta))

    def vararg_param(self, meta, children):
        annotation = children[0] if children else None
        return A.Binding("...", annotation, span=_span(meta))

    # --- expressions ---

    def name(self, meta, children):
        return A.Name(str(children[0]), span=_span(meta))

    def paren(self, meta, children):
        return A.Paren(children[0], span=_span(meta))

    def index(self, meta, children):
        obj, key = children
        return A.Index(obj, key, span=_span(meta))

    def dot_index(self, meta, children):
        obj, name = children
        return A.Field(obj, str(name), span=_span(meta))

    def call(self, meta, children):
        func, args = children
        return A.Call(func, args, span=_span(meta))

    def method_call(self, meta, children):
        obj, method, args = children
        return A.MethodCall(obj, str(method), args, span=_span(meta))

    def paren_args(self, meta, children):
        values = children[0] if children else ()
        return A.CallArgs(values, "paren", span=_span(meta))

    def table_args(self, meta, children):
        return A.CallArgs((children[0],), "table", span=_span(meta))

    def string_args(self, meta, children):
        literal = A.String(str(children[0]), span=_span(meta))
        return A.CallArgs((literal,), "string", span=_span(meta))

    def binop(self, meta, children):
        left, op, right = children
        return A.BinaryOp(str(op), left, right, span=_span(meta))

    def unop(self, meta, children):
        op, operand = children
        return A.UnaryOp(str(op), operand, span=_span(meta))

    def cast(self, meta, children):
        expr, annotation = children
        return A.Cast(expr, annotation, span=_span(meta))

    def nil_lit(self, meta, children):
        return A.Nil(span=_span(meta))

    def true_lit(self, meta, children):
        return A.Boolean(True, span=_span(meta))  # noqa: FBT003

    def false_lit(self, meta, children):
        return A.Boolean(False, span=_span(meta))  # noqa: FBT003

    def number(self, meta, children):
        return A.Number(str(children[0]), span=_span(meta))

    def string(self, meta, children):
        return A.String(str(children[0]), span=_span(meta))

    def interp_string(self, meta, children):
        return A.InterpolatedString(str(children[0]), span=_span(meta))

    def vararg(self, meta, children):
        return A.Vararg(span=_span(meta))

    def function_exp(self, meta, children):
        return A.FunctionExpr(children[0], span=_span(meta))

    def if_exp(self, meta, children):
        condition, then, *middle, orelse = children
        branches = ((condition, then), *middle)
        return A.IfExpr(branches, orelse, span=_span(meta))

    def elseif_exp(self, meta, children):
        return (children[0], children[1])

    def table(self, meta, children):
        fields = children[0] if children else ()
        return A.Table(fields, span=_span(meta))

    def keyed_field(self, meta, children):
        key, value = children
        return A.KeyedField(key, value, span=_span(meta))

    def named_field(self, meta, children):
        name, value = children
        return A.NamedField(str(name), value, span=_span(meta))

    def positional_field(self, meta, children):
        return A.PositionalField(children[0], span=_span(meta))

    # --- types, kept as source text ---

    def type(self, meta, children):
        return A.TypeAnnotation(self._slice(meta), span=_span(meta))

    def type_params(self, meta, children):
        return self._slice(meta)


# --- error reporting -------------------------------------------------------


def _describe_expected(expected: set[str]) -> str:
    names = []
    for term in sorted(expected):
        if term == "$END":
            names.append("end of file")
            continue
        try:
            pattern = _PARSER.get_terminal(term).pattern
        except KeyError:
            names.append(term)
            continue
        if pattern.type == "str":
            names.append(f"`{pattern.value}`")
        else:
            names.append(term.lower())
    shown = ", ".join(names[:8])
    if len(names) > 8:  # noqa: PLR2004
        shown += ", ..."
    return shown


def _describe_error(err: UnexpectedInput) -> str:
    if isinstance(err, UnexpectedToken):
        if err.token.type == "$END":
            found = "end of file"
        else:
            found = f"`{err.token}`"
        return f"unexpected {found} (expected {_describe_expected(err.expected)})"
    if isinstance(err, UnexpectedCharacters):
        return f"unexpected character {err.char!r}"
    return str(err)


def _strip_shebang(source: str) -> str:
    if source.startswith("#!"):
        return "--" + source[2:]
    return source


def _aggregate(path: str, problems: list[_Problem]) -> ParseError:
    first = problems[0]
    count = len(problems)
    return ParseError(
        Diagnostic(
            kind="parse",
            message=f"failed to parse ({count} syntax error{'s' if count != 1 else ''})",
            path=path,
            span=A.Span(first.line, first.column, first.line, first.column),
            source_text="\n".join(p.render() for p in problems),
        )
    )


def nesting_too_deep(path: str) -> ParseError:
    """The error for a module whose tree is deeper than the passes can walk."""
    return ParseError(
        Diagnostic(
            kind="parse",
            message="nesting is too deep to process",
            path=path,
            hint="split the longest expression or the deepest block into functions",
        )
    )


# --- public API ----------------------------------------------------------------


def parse_chunk(source: str, path: str = "<string>") -> A.Chunk:
    """Parse Luau source into a `Chunk`.

    Args:
        source: The module text.
        path: Name used in diagnostics.

    Raises:
        ParseError: With every syntax error of the file aggregated into a
            single Diagnostic.
    """
    problems: list[_Problem] = []
    seen: set[tuple[int, int]] = set()

    def on_error(err: UnexpectedInput) -> bool:
        key = (err.line, err.column)
        if key not in seen:
            seen.add(key)
            problems.append(_Problem(err.line, err.column, _describe_error(err)))
        if isinstance(err, UnexpectedToken) and err.token.type == "$END":
            return False
        return len(problems) < MAX_PARSE_ERRORS

    text = _strip_shebang(source)
    try:
        tree = _PARSER.parse(text, on_error=on_error)
    except UnexpectedInput as e:
        if not problems:
            problems.append(_Problem(e.line, e.column, _describe_error(e)))
        raise _aggregate(path, problems) from None

    if problems:
        raise _aggregate(path, problems)

    builder = _TreeBuilder(text)
    try:
        with recursion_limit():
            chunk = builder.transform(tree)
    except VisitError as e:
        if isinstance(e.orig_exc, RecursionError):
            raise nesting_too_deep(path) from None
        raise e.orig_exc from e
    except RecursionError:
        raise nesting_too_deep(path) from None
    if builder.problems:
        raise _aggregate(path, builder.problems)
    return chunk
