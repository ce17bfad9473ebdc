# src/luastitch/traversal.py
"""Depth-aware tree rewriting shared by the bundling passes.

`ScopedRewriter` walks every statement and expression of a module and
rebuilds the tree on the way back up. The current nesting depth is passed
down as an ordinary argument; depth 0 means "directly in the module's
top-level block". `TraversalState` shadows that value and checks every
scope entry and exit against it, so an unbalanced walk is caught instead of
silently misclassifying statements.
"""

from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager
from dataclasses import replace

from .diagnostics import (
    Diagnostic,
    DiagnosticKind,
    InternalConsistencyError,
    raise_for,
)
from .logs import get_app_logger
from .luau import ast as A
from .luau.emitter import Emitter
from .modules import SourceModule
from .utils import recursion_limit


_EXCERPT_LINES = 3


class TraversalState:
    """Nesting counter for one walk over one module."""

    def __init__(self, path: str = "<module>") -> None:
        self.path = path
        self.depth = 0

    def _check(self, depth: int, action: str) -> None:
        if depth != self.depth:
            xmsg = (
                f"Scope depth out of sync in {self.path} while trying to {action}:"
                f" walker is at {depth}, state is at {self.depth}"
            )
            raise InternalConsistencyError(xmsg)

    def enter(self, depth: int) -> int:
        """Open a nested scope from `depth`; returns the inner depth."""
        self._check(depth, "enter a scope")
        self.depth += 1
        return self.depth

    def leave(self, depth: int) -> int:
        """Close the scope at `depth`; returns the outer depth."""
        self._check(depth, "leave a scope")
        if self.depth == 0:
            xmsg = f"Left the top-level scope of {self.path}"
            raise InternalConsistencyError(xmsg)
        self.depth -= 1
        return self.depth

    def finish(self) -> None:
        if self.depth != 0:
            xmsg = f"Traversal of {self.path} ended at depth {self.depth}, expected 0"
            raise InternalConsistencyError(xmsg)


class ScopedRewriter:
    """Base class for passes over one module.

    Subclasses override the hooks (`check_statement`,
    `rewrite_function_name`, `rewrite_call`, `rewrite_call_statement`).
    Problems go through `report()`: the first one raises unless the
    rewriter was created with `collect=True`, in which case they pile up in
    `diagnostics`.
    """

    def __init__(self, module: SourceModule, *, collect: bool = False) -> None:
        self.module = module
        self.collect = collect
        self.diagnostics: list[Diagnostic] = []
        self.state = TraversalState(module.path)

    # --- driver ---

    def run(self) -> SourceModule:
        logger = get_app_logger()
        logger.trace(f"[{type(self).__name__}] walking {self.module.path}")
        self.state = TraversalState(self.module.path)
        chunk = self.module.chunk
        with recursion_limit():
            block = self.block(chunk.block, 0)
        self.state.finish()
        return self.module.with_chunk(replace(chunk, block=block))

    @contextmanager
    def scope(self, depth: int) -> Generator[int, None, None]:
        inner = self.state.enter(depth)
        yield inner
        self.state.leave(inner)

    # --- hooks ---

    def check_statement(self, stmt: A.Stmt, depth: int) -> None:
        """Inspect a statement before it is walked."""

    def rewrite_function_name(
        self, name: A.FunctionName, depth: int
    ) -> A.FunctionName:
        return name

    def rewrite_call(self, call: A.Call | A.MethodCall, depth: int) -> A.Expr:
        """Rewrite a call used as an expression (children already walked)."""
        return call

    def rewrite_call_statement(
        self, stmt: A.CallStatement, depth: int
    ) -> A.Stmt | None:
        """Rewrite a call statement (call already walked). None drops it."""
        return stmt

    # --- reporting ---

    def excerpt(self, node: A.Node) -> str:
        """Source text of a node, from the original file when possible."""
        span = node.span
        if self.module.source and span is not None:
            lines = self.module.source.splitlines()[span.line - 1 : span.end_line]
            if lines:
                if len(lines) > _EXCERPT_LINES:
                    lines = [*lines[:_EXCERPT_LINES], "..."]
                return "\n".join(lines)
        emitter = Emitter()
        if isinstance(node, A.Node) and type(node).__name__ in A.NODE_KIND_NAMES:
            return emitter.statement(node)  # type: ignore[arg-type]
        return emitter.expr(node)  # type: ignore[arg-type]

    def diagnostic(
        self,
        kind: DiagnosticKind,
        node: A.Node,
        message: str,
        hint: str | None = None,
    ) -> Diagnostic:
        return Diagnostic(
            kind=kind,
            message=message,
            path=self.module.path,
            span=node.span,
            source_text=self.excerpt(node),
            hint=hint,
        )

    def report(self, diag: Diagnostic) -> None:
        if self.collect:
            self.diagnostics.append(diag)
            return
        raise_for([diag])

    # --- blocks and statements ---

    def block(self, block: A.Block, depth: int) -> A.Block:
        statements: list[A.Stmt] = []
        for stmt in block.statements:
            self.check_statement(stmt, depth)
            new = self.statement(stmt, depth)
            if new is not None:
                statements.append(new)
        return replace(block, statements=tuple(statements))

    def statement(self, stmt: A.Stmt, depth: int) -> A.Stmt | None:
        handler = getattr(self, f"_stmt_{type(stmt).__name__}")
        return handler(stmt, depth)

    def function_body(self, body: A.FunctionBody, depth: int) -> A.FunctionBody:
        with self.scope(depth) as inner:
            new_block = self.block(body.body, inner)
        return replace(body, body=new_block)

    def _exprs(self, exprs: tuple[A.Expr, ...], depth: int) -> tuple[A.Expr, ...]:
        return tuple(self.expr(e, depth) for e in exprs)

    def _stmt_Assignment(self, stmt: A.Assignment, depth: int) -> A.Stmt:
        with self.scope(depth) as inner:
            targets = self._exprs(stmt.targets, inner)
            values = self._exprs(stmt.values, inner)
        return replace(stmt, targets=targets, values=values)

    def _stmt_CompoundAssignment(
        self, stmt: A.CompoundAssignment, depth: int
    ) -> A.Stmt:
        with self.scope(depth) as inner:
            target = self.expr(stmt.target, inner)
            value = self.expr(stmt.value, inner)
        return replace(stmt, target=target, value=value)

    def _stmt_CallStatement(self, stmt: A.CallStatement, depth: int) -> A.Stmt | None:
        call = self._walk_call(stmt.call, depth)
        return self.rewrite_call_statement(replace(stmt, call=call), depth)

    def _stmt_Do(self, stmt: A.Do, depth: int) -> A.Stmt:
        with self.scope(depth) as inner:
            body = self.block(stmt.body, inner)
        return replace(stmt, body=body)

    def _stmt_While(self, stmt: A.While, depth: int) -> A.Stmt:
        with self.scope(depth) as inner:
            condition = self.expr(stmt.condition, inner)
            body = self.block(stmt.body, inner)
        return replace(stmt, condition=condition, body=body)

    def _stmt_Repeat(self, stmt: A.Repeat, depth: int) -> A.Stmt:
        with self.scope(depth) as inner:
            body = self.block(stmt.body, inner)
            condition = self.expr(stmt.condition, inner)
        return replace(stmt, body=body, condition=condition)

    def _stmt_If(self, stmt: A.If, depth: int) -> A.Stmt:
        with self.scope(depth) as inner:
            branches = tuple(
                replace(
                    branch,
                    condition=self.expr(branch.condition, inner),
                    body=self.block(branch.body, inner),
                )
                for branch in stmt.branches
            )
            orelse = None
            if stmt.orelse is not None:
                orelse = self.block(stmt.orelse, inner)
        return replace(stmt, branches=branches, orelse=orelse)

    def _stmt_NumericFor(self, stmt: A.NumericFor, depth: int) -> A.Stmt:
        with self.scope(depth) as inner:
            start = self.expr(stmt.start, inner)
            stop = self.expr(stmt.stop, inner)
            step = None if stmt.step is None else self.expr(stmt.step, inner)
            body = self.block(stmt.body, inner)
        return replace(stmt, start=start, stop=stop, step=step, body=body)

    def _stmt_GenericFor(self, stmt: A.GenericFor, depth: int) -> A.Stmt:
        with self.scope(depth) as inner:
            iterables = self._exprs(stmt.iterables, inner)
            body = self.block(stmt.body, inner)
        return replace(stmt, iterables=iterables, body=body)

    def _stmt_FunctionDeclaration(
        self, stmt: A.FunctionDeclaration, depth: int
    ) -> A.Stmt:
        name = self.rewrite_function_name(stmt.name, depth)
        body = self.function_body(stmt.body, depth)
        return replace(stmt, name=name, body=body)

    def _stmt_LocalFunction(self, stmt: A.LocalFunction, depth: int) -> A.Stmt:
        with self.scope(depth) as inner:
            body = self.function_body(stmt.body, inner)
        return replace(stmt, body=body)

    def _stmt_LocalAssignment(self, stmt: A.LocalAssignment, depth: int) -> A.Stmt:
        with self.scope(depth) as inner:
            values = self._exprs(stmt.values, inner)
        return replace(stmt, values=values)

    def _stmt_TypeAlias(self, stmt: A.TypeAlias, depth: int) -> A.Stmt:
        return stmt

    def _stmt_Return(self, stmt: A.Return, depth: int) -> A.Stmt:
        return replace(stmt, values=self._exprs(stmt.values, depth))

    def _stmt_Break(self, stmt: A.Break, depth: int) -> A.Stmt:
        return stmt

    def _stmt_Continue(self, stmt: A.Continue, depth: int) -> A.Stmt:
        return stmt

    # --- expressions ---

    def expr(self, expr: A.Expr, depth: int) -> A.Expr:
        handler = getattr(self, f"_expr_{type(expr).__name__}", None)
        if handler is None:
            # literals and names have no children
            return expr
        return handler(expr, depth)

    def _walk_call(
        self, call: A.Call | A.MethodCall, depth: int
    ) -> A.Call | A.MethodCall:
        if isinstance(call, A.Call):
            func = self.expr(call.func, depth)
            with self.scope(depth) as inner:
                values = self._exprs(call.args.values, inner)
            return replace(call, func=func, args=replace(call.args, values=values))
        obj = self.expr(call.obj, depth)
        with self.scope(depth) as inner:
            values = self._exprs(call.args.values, inner)
        return replace(call, obj=obj, args=replace(call.args, values=values))

    def _expr_Call(self, expr: A.Call, depth: int) -> A.Expr:
        return self.rewrite_call(self._walk_call(expr, depth), depth)

    def _expr_MethodCall(self, expr: A.MethodCall, depth: int) -> A.Expr:
        return self.rewrite_call(self._walk_call(expr, depth), depth)

    def _expr_FunctionExpr(self, expr: A.FunctionExpr, depth: int) -> A.Expr:
        return replace(expr, body=self.function_body(expr.body, depth))

    def _expr_IfExpr(self, expr: A.IfExpr, depth: int) -> A.Expr:
        with self.scope(depth) as inner:
            branches = tuple(
                (self.expr(condition, inner), self.expr(value, inner))
                for condition, value in expr.branches
            )
            orelse = self.expr(expr.orelse, inner)
        return replace(expr, branches=branches, orelse=orelse)

    def _expr_Paren(self, expr: A.Paren, depth: int) -> A.Expr:
        return replace(expr, expr=self.expr(expr.expr, depth))

    def _expr_Index(self, expr: A.Index, depth: int) -> A.Expr:
        return replace(
            expr, obj=self.expr(expr.obj, depth), key=self.expr(expr.key, depth)
        )

    def _expr_Field(self, expr: A.Field, depth: int) -> A.Expr:
        return replace(expr, obj=self.expr(expr.obj, depth))

    def _expr_BinaryOp(self, expr: A.BinaryOp, depth: int) -> A.Expr:
        return replace(
            expr,
            left=self.expr(expr.left, depth),
            right=self.expr(expr.right, depth),
        )

    def _expr_UnaryOp(self, expr: A.UnaryOp, depth: int) -> A.Expr:
        return replace(expr, operand=self.expr(expr.operand, depth))

    def _expr_Cast(self, expr: A.Cast, depth: int) -> A.Expr:
        return replace(expr, expr=self.expr(expr.expr, depth))

    def _expr_Table(self, expr: A.Table, depth: int) -> A.Expr:
        fields: list[A.TableField] = []
        for field in expr.fields:
            if isinstance(field, A.KeyedField):
                fields.append(
                    replace(
                        field,
                        key=self.expr(field.key, depth),
                        value=self.expr(field.value, depth),
                    )
                )
            else:
                fields.append(replace(field, value=self.expr(field.value, depth)))
        return replace(expr, fields=tuple(fields))
