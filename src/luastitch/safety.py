# src/luastitch/safety.py
"""Root-scope safety policy.

Every module ends up sharing one top-level scope with all the others, so
only declarations may sit directly in a module's top-level block. Anything
that would run code or bind locals at load time is rejected there.
"""

from __future__ import annotations

from .diagnostics import Diagnostic
from .luau import ast as A
from .modules import SourceModule
from .traversal import ScopedRewriter


FORBIDDEN_AT_ROOT: tuple[type[A.Node], ...] = (
    A.Assignment,
    A.CompoundAssignment,
    A.Do,
    A.GenericFor,
    A.If,
    A.LocalAssignment,
    A.LocalFunction,
    A.NumericFor,
    A.Return,
    A.While,
    A.Repeat,
    A.Break,
    A.Continue,
)

_HINTS = {
    "LocalAssignment": "move it into a function, or make it a field of a table",
    "LocalFunction": "declare it with `function name()` so it gets namespaced",
    "Return": "modules are merged into one scope; export through functions instead",
}


def is_forbidden_at_root(stmt: A.Stmt) -> bool:
    if isinstance(stmt, FORBIDDEN_AT_ROOT):
        return True
    return isinstance(stmt, A.CallStatement) and isinstance(stmt.call, A.MethodCall)


class RootScopeEnforcer(ScopedRewriter):
    """Rejects load-time statements at depth 0; leaves the tree unchanged."""

    def check_statement(self, stmt: A.Stmt, depth: int) -> None:
        if depth != 0 or not is_forbidden_at_root(stmt):
            return
        if isinstance(stmt, A.CallStatement):
            kind = "method call statement"
        else:
            kind = A.node_kind(stmt)
        self.report(
            self.diagnostic(
                "safety",
                stmt,
                f"{kind} at the top level is not supported when bundling",
                hint=_HINTS.get(type(stmt).__name__),
            )
        )


def enforce_root_scope(module: SourceModule) -> SourceModule:
    """Raise SafetyViolation for the first forbidden top-level statement.

    Returns the module unchanged when it is clean.
    """
    RootScopeEnforcer(module).run()
    return module


def find_root_scope_violations(module: SourceModule) -> list[Diagnostic]:
    """Like `enforce_root_scope`, but return every violation instead of raising."""
    enforcer = RootScopeEnforcer(module, collect=True)
    enforcer.run()
    return enforcer.diagnostics
