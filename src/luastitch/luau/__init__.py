# src/luastitch/luau/__init__.py
"""Luau front end: syntax tree, parser and emitter."""

from .emitter import Emitter, emit_chunk, emit_expr, emit_statement
from .parser import parse_chunk


__all__ = [
    "Emitter",
    "emit_chunk",
    "emit_expr",
    "emit_statement",
    "parse_chunk",
]
