# src/luastitch/imports.py
"""Validate `require(...)` calls and point them at bundled modules."""

from __future__ import annotations

from collections.abc import Iterable

from .constants import DEFAULT_IGNORE_IMPORTS, IMPORT_PRIMITIVE
from .diagnostics import Diagnostic
from .logs import get_app_logger
from .luau import ast as A
from .modules import ModuleIndex, SourceModule
from .traversal import ScopedRewriter


def is_import_call(call: A.Call | A.MethodCall) -> bool:
    return (
        isinstance(call, A.Call)
        and isinstance(call.func, A.Name)
        and call.func.name == IMPORT_PRIMITIVE
    )


def is_ignored(identifier: str, ignore_imports: Iterable[str]) -> bool:
    """True for an exact ignore-list entry or anything below one (`entry/...`)."""
    return any(
        identifier == entry or identifier.startswith(entry.rstrip("/") + "/")
        for entry in ignore_imports
    )


class ImportInliner(ScopedRewriter):
    def __init__(
        self,
        module: SourceModule,
        index: ModuleIndex,
        ignore_imports: Iterable[str] = DEFAULT_IGNORE_IMPORTS,
        *,
        collect: bool = False,
    ) -> None:
        super().__init__(module, collect=collect)
        self.index = index
        self.ignore_imports = tuple(ignore_imports)

    def _target(self, call: A.Call) -> SourceModule | None:
        """The bundled module a require() refers to, or None to leave it alone."""
        values = call.args.values
        if len(values) != 1:
            self.report(
                self.diagnostic(
                    "arity",
                    call,
                    f"{IMPORT_PRIMITIVE}() must have exactly one argument",
                    hint=f"got {len(values)}",
                )
            )
            return None

        arg = values[0]
        if not isinstance(arg, A.String):
            self.report(
                self.diagnostic(
                    "unresolved_import",
                    call,
                    f"{IMPORT_PRIMITIVE}() argument must be a string literal",
                )
            )
            return None

        identifier = arg.value
        if is_ignored(identifier, self.ignore_imports):
            get_app_logger().trace(
                f"[IMPORT] {self.module.path}: ignoring {identifier!r}"
            )
            return None

        target = self.index.resolve(identifier, self.module)
        if target is None:
            self.report(
                self.diagnostic(
                    "unresolved_import",
                    call,
                    f"cannot resolve {IMPORT_PRIMITIVE}({identifier!r})",
                    hint="no bundled module has that path",
                )
            )
            return None

        get_app_logger().debug(
            "Inlining %s(%r) in %s as `%s`",
            IMPORT_PRIMITIVE,
            identifier,
            self.module.path,
            target.prefix,
        )
        return target

    def rewrite_call(self, call: A.Call | A.MethodCall, depth: int) -> A.Expr:
        if not is_import_call(call):
            return call
        target = self._target(call)  # type: ignore[arg-type]
        if target is None:
            return call
        return A.Name(target.prefix, span=call.span)

    def rewrite_call_statement(
        self, stmt: A.CallStatement, depth: int
    ) -> A.Stmt | None:
        if not is_import_call(stmt.call):
            return stmt
        target = self._target(stmt.call)  # type: ignore[arg-type]
        if target is None:
            return stmt
        # the target's code is already part of the bundle
        return None


def inline_imports(
    module: SourceModule,
    index: ModuleIndex,
    ignore_imports: Iterable[str] = DEFAULT_IGNORE_IMPORTS,
) -> SourceModule:
    """Replace resolved require() calls with the target's namespace table.

    Raises:
        ArityError: A require() without exactly one argument.
        UnresolvedImport: A non-literal argument, or one that names no
            bundled module and is not on the ignore list.
    """
    return ImportInliner(module, index, ignore_imports).run()


def find_import_problems(
    module: SourceModule,
    index: ModuleIndex,
    ignore_imports: Iterable[str] = DEFAULT_IGNORE_IMPORTS,
) -> list[Diagnostic]:
    inliner = ImportInliner(module, index, ignore_imports, collect=True)
    inliner.run()
    return inliner.diagnostics
