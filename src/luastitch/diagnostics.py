# src/luastitch/diagnostics.py
"""Diagnostics and the error taxonomy raised by the bundling passes."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal


if TYPE_CHECKING:
    from .luau.ast import Span


DiagnosticKind = Literal[
    "parse",
    "safety",
    "arity",
    "unresolved_import",
    "namespace",
]


@dataclass(frozen=True)
class Diagnostic:
    """One problem found in one module."""

    kind: DiagnosticKind
    message: str
    path: str
    span: Span | None = None
    source_text: str | None = None
    hint: str | None = None

    def location(self) -> str:
        if self.span is None:
            return self.path
        return f"{self.path}:{self.span.line}:{self.span.column}"

    def render(self) -> str:
        lines = [f"{self.location()}: {self.message}"]
        if self.source_text:
            lines.extend(f"    | {line}" for line in self.source_text.splitlines())
        if self.hint:
            lines.append(f"    = {self.hint}")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.render()


# --- Errors -------------------------------------------------------------------


class BundleError(RuntimeError):
    """Base class for problems in the input modules.

    Carries one or more Diagnostics. The message is the rendering of the
    first one, followed by a count of the rest.
    """

    def __init__(self, diagnostics: Diagnostic | Iterable[Diagnostic]) -> None:
        if isinstance(diagnostics, Diagnostic):
            diagnostics = [diagnostics]
        self.diagnostics: tuple[Diagnostic, ...] = tuple(diagnostics)
        if not self.diagnostics:
            xmsg = f"{type(self).__name__} raised without diagnostics"
            raise ValueError(xmsg)
        super().__init__(self._summary())

    def _summary(self) -> str:
        first = self.diagnostics[0].render()
        rest = len(self.diagnostics) - 1
        if rest:
            first += f"\n({rest} more {'error' if rest == 1 else 'errors'})"
        return first


class ParseError(BundleError):
    """A module's source could not be parsed."""


class SafetyViolation(BundleError):
    """A statement that is not allowed at the top level of a module."""


class ArityError(BundleError):
    """An import call with the wrong number of arguments."""


class UnresolvedImport(BundleError):
    """An import identifier that matches no module in the bundle."""


class NamespaceError(BundleError):
    """Two modules would share a namespace, or a namespace is unusable."""


class InternalConsistencyError(Exception):
    """The traversal itself misbehaved (unbalanced scope depth, bad rewrite)."""


ERROR_FOR_KIND: dict[DiagnosticKind, type[BundleError]] = {
    "parse": ParseError,
    "safety": SafetyViolation,
    "arity": ArityError,
    "unresolved_import": UnresolvedImport,
    "namespace": NamespaceError,
}


def raise_for(diagnostics: Sequence[Diagnostic]) -> None:
    """Raise the error matching the first diagnostic's kind, if any."""
    if not diagnostics:
        return
    error_cls = ERROR_FOR_KIND[diagnostics[0].kind]
    raise error_cls(diagnostics)
