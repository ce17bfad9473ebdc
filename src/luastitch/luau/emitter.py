# src/luastitch/luau/emitter.py
"""Syntax tree back to Luau source.

Output is normalized: one statement per line, `indent` per nesting level,
comments gone. Parentheses are added where operator precedence requires
them, so trees built by hand print correctly as well.
"""

from __future__ import annotations

from ..constants import DEFAULT_INDENT
from ..utils import recursion_limit
from . import ast as A


# --- precedence -------------------------------------------------------------

_BINARY_PRECEDENCE = {
    "or": 1,
    "and": 2,
    "<": 3,
    ">": 3,
    "<=": 3,
    ">=": 3,
    "~=": 3,
    "==": 3,
    "..": 4,
    "+": 5,
    "-": 5,
    "*": 6,
    "/": 6,
    "//": 6,
    "%": 6,
    "^": 8,
}
_RIGHT_ASSOCIATIVE = {"..", "^"}
_UNARY_PRECEDENCE = 7
_CAST_PRECEDENCE = 9
_ATOM_PRECEDENCE = 10

_PREFIX_NODES = (A.Name, A.Paren, A.Call, A.MethodCall, A.Index, A.Field)

_INLINE_TABLE_WIDTH = 80


def _precedence(expr: A.Expr) -> int:
    if isinstance(expr, A.BinaryOp):
        return _BINARY_PRECEDENCE[expr.op]
    if isinstance(expr, A.UnaryOp):
        return _UNARY_PRECEDENCE
    if isinstance(expr, A.Cast):
        return _CAST_PRECEDENCE
    if isinstance(expr, A.IfExpr):
        return 0
    return _ATOM_PRECEDENCE


class Emitter:
    def __init__(self, indent: str = DEFAULT_INDENT) -> None:
        self.indent = indent

    # --- blocks and statements ---

    def chunk(self, chunk: A.Chunk) -> str:
        lines = self.block(chunk.block, 0)
        return "\n".join(lines) + "\n" if lines else ""

    def block(self, block: A.Block, depth: int) -> list[str]:
        pad = self.indent * depth
        lines = []
        for stmt in block.statements:
            text = self.statement(stmt, depth)
            if text.startswith("("):
                # keeps the previous line from being read as a call
                text = ";" + text
            lines.append(pad + text)
        return lines

    def statement(self, stmt: A.Stmt, depth: int = 0) -> str:  # noqa: C901, PLR0911, PLR0912
        if isinstance(stmt, A.Assignment):
            targets = ", ".join(self.expr(t, depth) for t in stmt.targets)
            return f"{targets} = {self._exprs(stmt.values, depth)}"
        if isinstance(stmt, A.CompoundAssignment):
            target = self.expr(stmt.target, depth)
            return f"{target} {stmt.op}= {self.expr(stmt.value, depth)}"
        if isinstance(stmt, A.CallStatement):
            return self.expr(stmt.call, depth)
        if isinstance(stmt, A.Do):
            return self._wrap("do", stmt.body, "end", depth)
        if isinstance(stmt, A.While):
            head = f"while {self.expr(stmt.condition, depth)} do"
            return self._wrap(head, stmt.body, "end", depth)
        if isinstance(stmt, A.Repeat):
            tail = f"until {self.expr(stmt.condition, depth)}"
            return self._wrap("repeat", stmt.body, tail, depth)
        if isinstance(stmt, A.If):
            return self._if(stmt, depth)
        if isinstance(stmt, A.NumericFor):
            bounds = [stmt.start, stmt.stop]
            if stmt.step is not None:
                bounds.append(stmt.step)
            head = (
                f"for {self._binding(stmt.var)} = "
                f"{self._exprs(tuple(bounds), depth)} do"
            )
            return self._wrap(head, stmt.body, "end", depth)
        if isinstance(stmt, A.GenericFor):
            names = ", ".join(self._binding(b) for b in stmt.names)
            head = f"for {names} in {self._exprs(stmt.iterables, depth)} do"
            return self._wrap(head, stmt.body, "end", depth)
        if isinstance(stmt, A.FunctionDeclaration):
            return f"function {stmt.name}{self.function_body(stmt.body, depth)}"
        if isinstance(stmt, A.LocalFunction):
            return f"local function {stmt.name}{self.function_body(stmt.body, depth)}"
        if isinstance(stmt, A.LocalAssignment):
            names = ", ".join(self._binding(b) for b in stmt.names)
            if not stmt.values:
                return f"local {names}"
            return f"local {names} = {self._exprs(stmt.values, depth)}"
        if isinstance(stmt, A.TypeAlias):
            head = "export type" if stmt.exported else "type"
            return f"{head} {stmt.name}{stmt.generics or ''} = {stmt.value.text}"
        if isinstance(stmt, A.Return):
            if not stmt.values:
                return "return"
            return f"return {self._exprs(stmt.values, depth)}"
        if isinstance(stmt, A.Break):
            return "break"
        if isinstance(stmt, A.Continue):
            return "continue"
        xmsg = f"Cannot emit statement of type {type(stmt).__name__}"
        raise TypeError(xmsg)

    def _wrap(self, head: str, body: A.Block, tail: str, depth: int) -> str:
        lines = [head, *self.block(body, depth + 1), self.indent * depth + tail]
        return "\n".join(lines)

    def _if(self, stmt: A.If, depth: int) -> str:
        pad = self.indent * depth
        lines: list[str] = []
        for i, branch in enumerate(stmt.branches):
            keyword = "if" if i == 0 else pad + "elseif"
            lines.append(f"{keyword} {self.expr(branch.condition, depth)} then")
            lines.extend(self.block(branch.body, depth + 1))
        if stmt.orelse is not None:
            lines.append(pad + "else")
            lines.extend(self.block(stmt.orelse, depth + 1))
        lines.append(pad + "end")
        return "\n".join(lines)

    def function_body(self, body: A.FunctionBody, depth: int) -> str:
        params = ", ".join(self._binding(p) for p in body.params)
        head = f"{body.generics or ''}({params})"
        if body.return_type is not None:
            head += f": {body.return_type.text}"
        if not body.body.statements:
            return head + " end"
        return self._wrap(head, body.body, "end", depth)

    def _binding(self, binding: A.Binding) -> str:
        if binding.annotation is None:
            return binding.name
        return f"{binding.name}: {binding.annotation.text}"

    # --- expressions ---

    def _exprs(self, exprs: tuple[A.Expr, ...], depth: int) -> str:
        return ", ".join(self.expr(e, depth) for e in exprs)

    def _operand(
        self, expr: A.Expr, minimum: int, depth: int, *, rightmost: bool = False
    ) -> str:
        text = self.expr(expr, depth)
        if rightmost and isinstance(expr, A.IfExpr):
            # an if-expression already extends as far right as it can
            return text
        if _precedence(expr) < minimum:
            return f"({text})"
        return text

    def _prefix(self, expr: A.Expr, depth: int) -> str:
        text = self.expr(expr, depth)
        if isinstance(expr, _PREFIX_NODES):
            return text
        return f"({text})"

    def _bracketed(self, expr: A.Expr, depth: int) -> str:
        text = self.expr(expr, depth)
        if text.startswith("[") or text.endswith("]"):
            return f"[ {text} ]"
        return f"[{text}]"

    def expr(self, expr: A.Expr, depth: int = 0) -> str:  # noqa: C901, PLR0911, PLR0912
        if isinstance(expr, A.Name):
            return expr.name
        if isinstance(expr, A.Nil):
            return "nil"
        if isinstance(expr, A.Boolean):
            return "true" if expr.value else "false"
        if isinstance(expr, (A.Number, A.String, A.InterpolatedString)):
            return expr.raw
        if isinstance(expr, A.Vararg):
            return "..."
        if isinstance(expr, A.Paren):
            return f"({self.expr(expr.expr, depth)})"
        if isinstance(expr, A.Index):
            obj = self._prefix(expr.obj, depth)
            return obj + self._bracketed(expr.key, depth)
        if isinstance(expr, A.Field):
            return f"{self._prefix(expr.obj, depth)}.{expr.name}"
        if isinstance(expr, A.Call):
            return self._prefix(expr.func, depth) + self._args(expr.args, depth)
        if isinstance(expr, A.MethodCall):
            obj = self._prefix(expr.obj, depth)
            return f"{obj}:{expr.method}{self._args(expr.args, depth)}"
        if isinstance(expr, A.FunctionExpr):
            return "function" + self.function_body(expr.body, depth)
        if isinstance(expr, A.Table):
            return self._table(expr, depth)
        if isinstance(expr, A.BinaryOp):
            prec = _BINARY_PRECEDENCE[expr.op]
            if expr.op == "^":
                # `2 ^ -3` is valid without parentheses
                left_min, right_min = _CAST_PRECEDENCE, _UNARY_PRECEDENCE
            elif expr.op in _RIGHT_ASSOCIATIVE:
                left_min, right_min = prec + 1, prec
            else:
                left_min, right_min = prec, prec + 1
            left = self._operand(expr.left, left_min, depth)
            right = self._operand(expr.right, right_min, depth, rightmost=True)
            return f"{left} {expr.op} {right}"
        if isinstance(expr, A.UnaryOp):
            operand = self._operand(
                expr.operand, _UNARY_PRECEDENCE, depth, rightmost=True
            )
            if expr.op == "not" or (expr.op == "-" and operand.startswith("-")):
                return f"{expr.op} {operand}"
            return f"{expr.op}{operand}"
        if isinstance(expr, A.IfExpr):
            parts = []
            for i, (condition, value) in enumerate(expr.branches):
                keyword = "if" if i == 0 else "elseif"
                parts.append(
                    f"{keyword} {self.expr(condition, depth)} then "
                    f"{self.expr(value, depth)}"
                )
            parts.append(f"else {self.expr(expr.orelse, depth)}")
            return " ".join(parts)
        if isinstance(expr, A.Cast):
            operand = self._operand(expr.expr, _CAST_PRECEDENCE, depth)
            return f"{operand} :: {expr.annotation.text}"
        xmsg = f"Cannot emit expression of type {type(expr).__name__}"
        raise TypeError(xmsg)

    def _args(self, args: A.CallArgs, depth: int) -> str:
        values = args.values
        if len(values) == 1:
            if args.style == "string" and isinstance(values[0], A.String):
                return f" {values[0].raw}"
            if args.style == "table" and isinstance(values[0], A.Table):
                return f" {self._table(values[0], depth)}"
        return f"({self._exprs(values, depth)})"

    def _field(self, field: A.TableField, depth: int) -> str:
        if isinstance(field, A.NamedField):
            return f"{field.name} = {self.expr(field.value, depth)}"
        if isinstance(field, A.KeyedField):
            key = self._bracketed(field.key, depth)
            return f"{key} = {self.expr(field.value, depth)}"
        return self.expr(field.value, depth)

    def _table(self, table: A.Table, depth: int) -> str:
        if not table.fields:
            return "{}"
        inline = [self._field(f, depth) for f in table.fields]
        text = "{" + ", ".join(inline) + "}"
        if len(text) <= _INLINE_TABLE_WIDTH and not any("\n" in f for f in inline):
            return text
        pad = self.indent * (depth + 1)
        lines = ["{"]
        lines.extend(f"{pad}{self._field(f, depth + 1)}," for f in table.fields)
        lines.append(self.indent * depth + "}")
        return "\n".join(lines)


# --- convenience -------------------------------------------------------------


def emit_chunk(chunk: A.Chunk, indent: str = DEFAULT_INDENT) -> str:
    """Render a whole chunk as source text."""
    with recursion_limit():
        return Emitter(indent).chunk(chunk)


def emit_statement(stmt: A.Stmt, indent: str = DEFAULT_INDENT) -> str:
    return Emitter(indent).statement(stmt)


def emit_expr(expr: A.Expr) -> str:
    return Emitter().expr(expr)
