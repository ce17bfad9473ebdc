# src/luastitch/mangle.py
"""Move top-level function declarations into their module's namespace table.

`function foo.bar:baz()` in `a/b.luau` becomes
`function a__b.foo.bar:baz()`. Functions nested anywhere deeper keep their
names. References to the renamed functions are not rewritten.
"""

from __future__ import annotations

from dataclasses import replace

from .diagnostics import (
    Diagnostic,
    InternalConsistencyError,
    NamespaceError,
    ParseError,
)
from .logs import get_app_logger
from .luau import ast as A
from .luau.emitter import emit_chunk
from .luau.parser import parse_chunk
from .modules import SourceModule, is_valid_identifier
from .traversal import ScopedRewriter


class FunctionMangler(ScopedRewriter):
    def __init__(self, module: SourceModule, *, collect: bool = False) -> None:
        super().__init__(module, collect=collect)
        self.prefix = module.prefix
        self.renamed: list[tuple[str, str]] = []

    def rewrite_function_name(
        self, name: A.FunctionName, depth: int
    ) -> A.FunctionName:
        if depth != 0:
            return name
        mangled = replace(name, names=(self.prefix, *name.names))
        get_app_logger().debug(
            "Adding function `%s` to bundle as `%s`", name, mangled
        )
        self.renamed.append((str(name), str(mangled)))
        return mangled


def check_prefix(module: SourceModule) -> Diagnostic | None:
    """A Diagnostic if the module's prefix can't be used as a table name."""
    prefix = module.prefix
    if is_valid_identifier(prefix):
        return None
    if not prefix:
        reason = "has no extension, so its namespace would be empty"
    else:
        reason = f"maps to namespace `{prefix}`, which is not a valid identifier"
    return Diagnostic(
        kind="namespace",
        message=f"module path {reason}",
        path=module.path,
        hint="rename the file to letters, digits and underscores",
    )


def reparse(module: SourceModule, indent: str = "\t") -> SourceModule:
    """Re-emit and re-parse a rewritten module.

    This refreshes every span and proves the tree still prints as valid
    source that prints back the same way. The re-emitted text becomes the
    module's source.
    """
    text = emit_chunk(module.chunk, indent)
    try:
        chunk = parse_chunk(text, module.path)
    except ParseError as e:
        xmsg = f"Rewritten tree of {module.path} no longer parses:\n{e}"
        raise InternalConsistencyError(xmsg) from e
    if emit_chunk(chunk, indent) != text:
        xmsg = f"Rewritten tree of {module.path} does not survive a round trip"
        raise InternalConsistencyError(xmsg)
    return replace(module, chunk=chunk, source=text)


def mangle_top_level_functions(
    module: SourceModule, indent: str = "\t"
) -> SourceModule:
    """Prefix every depth-0 function declaration with the module's namespace.

    Raises:
        NamespaceError: If the module's prefix is not a valid identifier.
        InternalConsistencyError: If the walk or the round trip fails.
    """
    problem = check_prefix(module)
    if problem is not None:
        raise NamespaceError(problem)

    mangler = FunctionMangler(module)
    mangled = mangler.run()
    get_app_logger().trace(
        f"[MANGLE] {module.path}: {len(mangler.renamed)} top-level function(s)"
    )
    return reparse(mangled, indent)
