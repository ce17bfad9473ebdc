# src/luastitch/__init__.py

"""Luastitch: bundle Luau modules into one module.

Full developer API
==================
This package re-exports the public symbols of its submodules, for
programmatic use and custom integrations. Anything prefixed with "_" is
considered internal and may change.

Highlights:
    - main()                        → CLI entrypoint
    - run_bundle() / check_bundle() → Bundle or check a directory
    - enforce_root_scope()          → Reject top-level statements
    - mangle_top_level_functions()  → Namespace top-level functions
    - inline_imports()              → Resolve require() calls
    - namespace_prefix()            → Path to namespace prefix
"""

from .actions import get_metadata
from .bundle import (
    build_bundle,
    check_bundle,
    collect_module_paths,
    detect_prefix_collisions,
    emit_bundle,
    load_modules,
    run_bundle,
)
from .cli import main
from .config import (
    BundleConfigResolved,
    RootConfig,
    find_config,
    load_and_validate_config,
    load_config,
    resolve_config,
    validate_config,
)
from .diagnostics import (
    ArityError,
    BundleError,
    Diagnostic,
    InternalConsistencyError,
    NamespaceError,
    ParseError,
    SafetyViolation,
    UnresolvedImport,
)
from .external import run_external_processor
from .imports import find_import_problems, inline_imports
from .logs import get_app_logger
from .luau import emit_chunk, parse_chunk
from .mangle import mangle_top_level_functions
from .meta import (
    PROGRAM_CONFIG,
    PROGRAM_DISPLAY,
    PROGRAM_ENV,
    PROGRAM_PACKAGE,
    PROGRAM_SCRIPT,
    Metadata,
)
from .modules import ModuleIndex, ModuleSet, SourceModule, namespace_prefix
from .safety import enforce_root_scope, find_root_scope_violations
from .templating import render_template, wrap_file
from .traversal import ScopedRewriter, TraversalState
from .utils import read_input, write_output


__all__ = [  # noqa: RUF022
    # actions
    "get_metadata",
    # bundle
    "build_bundle",
    "check_bundle",
    "collect_module_paths",
    "detect_prefix_collisions",
    "emit_bundle",
    "load_modules",
    "run_bundle",
    # cli
    "main",
    # config
    "BundleConfigResolved",
    "RootConfig",
    "find_config",
    "load_and_validate_config",
    "load_config",
    "resolve_config",
    "validate_config",
    # diagnostics
    "ArityError",
    "BundleError",
    "Diagnostic",
    "InternalConsistencyError",
    "NamespaceError",
    "ParseError",
    "SafetyViolation",
    "UnresolvedImport",
    # external
    "run_external_processor",
    # imports
    "find_import_problems",
    "inline_imports",
    # logs
    "get_app_logger",
    # luau
    "emit_chunk",
    "parse_chunk",
    # mangle
    "mangle_top_level_functions",
    # meta
    "Metadata",
    "PROGRAM_CONFIG",
    "PROGRAM_DISPLAY",
    "PROGRAM_ENV",
    "PROGRAM_PACKAGE",
    "PROGRAM_SCRIPT",
    # modules
    "ModuleIndex",
    "ModuleSet",
    "SourceModule",
    "namespace_prefix",
    # safety
    "enforce_root_scope",
    "find_root_scope_violations",
    # templating
    "render_template",
    "wrap_file",
    # traversal
    "ScopedRewriter",
    "TraversalState",
    # utils
    "read_input",
    "write_output",
]
