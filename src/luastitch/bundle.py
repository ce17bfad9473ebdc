# src/luastitch/bundle.py
"""Bundle a directory of Luau modules into one module.

Pipeline: collect paths, parse every file, check namespaces, then per
module enforce the root-scope policy and mangle top-level functions, build
the module index, inline imports, and emit the combined source.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from .actions import get_metadata
from .config.config_types import BundleConfigResolved
from .constants import DEFAULT_EXTENSIONS, DEFAULT_INDENT, STDIN_ALIASES
from .diagnostics import Diagnostic, NamespaceError, ParseError
from .imports import find_import_problems, inline_imports
from .logs import get_app_logger
from .luau import ast as A
from .luau.emitter import emit_chunk
from .luau.parser import nesting_too_deep, parse_chunk
from .mangle import check_prefix, mangle_top_level_functions
from .meta import PROGRAM_DISPLAY, PROGRAM_PACKAGE
from .modules import ModuleIndex, ModuleSet, SourceModule, to_module_path
from .safety import enforce_root_scope, find_root_scope_violations
from .utils import plural, write_output


# --------------------------------------------------------------------------- #
# collection
# --------------------------------------------------------------------------- #


def _has_extension(name: str, extensions: Iterable[str]) -> bool:
    return any(name.endswith(ext) for ext in extensions)


def collect_module_paths(
    root: Path,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    *,
    sort: bool = True,
) -> list[str]:
    """Walk `root` depth-first and return the module paths relative to it.

    Only regular files with one of `extensions` are kept. With `sort`, each
    directory's entries are visited in name order; otherwise in whatever
    order the filesystem returns them.

    Raises:
        FileNotFoundError: If `root` does not exist.
        ValueError: If `root` is not a directory.
    """
    logger = get_app_logger()
    if not root.exists():
        xmsg = f"Input directory not found: {root}"
        raise FileNotFoundError(xmsg)
    if not root.is_dir():
        xmsg = f"Input is not a directory: {root}"
        raise ValueError(xmsg)

    extensions = tuple(extensions)
    found: list[str] = []

    def walk(directory: Path) -> None:
        with os.scandir(directory) as it:
            entries = list(it)
        if sort:
            entries.sort(key=lambda e: e.name)
        for entry in entries:
            if entry.is_dir():
                walk(Path(entry.path))
            elif entry.is_file() and _has_extension(entry.name, extensions):
                rel = Path(entry.path).relative_to(root).as_posix()
                found.append(to_module_path(rel))

    walk(root)
    logger.trace(f"[COLLECT] Found {len(found)} module(s) under {root}")
    return found


def read_module_source(root: Path, path: str) -> str:
    """Module text, with a leading byte order mark dropped.

    Raises:
        ParseError: If the file is not valid UTF-8.
    """
    try:
        return (root / path).read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as e:
        raise ParseError(
            Diagnostic(
                kind="parse",
                message=f"file is not valid UTF-8 (byte {e.start}: {e.reason})",
                path=path,
                hint="save the file as UTF-8",
            )
        ) from e


def load_module(root: Path, path: str) -> SourceModule:
    """Read and parse one module. Raises ParseError with every syntax error."""
    source = read_module_source(root, path)
    chunk = parse_chunk(source, path)
    return SourceModule(path=path, chunk=chunk, source=source)


def load_modules(root: Path, paths: list[str]) -> ModuleSet:
    """Parse every path in order; the first file that fails raises ParseError."""
    logger = get_app_logger()
    modules = ModuleSet()
    for i, path in enumerate(paths, 1):
        logger.info("[%d/%d] %s", i, len(paths), path)
        modules.add(load_module(root, path))
    return modules


# --------------------------------------------------------------------------- #
# namespace checks
# --------------------------------------------------------------------------- #


def find_prefix_collisions(modules: Iterable[SourceModule]) -> list[Diagnostic]:
    """One Diagnostic per module whose prefix is already taken by an earlier one."""
    seen: dict[str, str] = {}
    problems: list[Diagnostic] = []
    for module in modules:
        prev = seen.setdefault(module.prefix, module.path)
        if prev == module.path:
            continue
        problems.append(
            Diagnostic(
                kind="namespace",
                message=(
                    f"namespace `{module.prefix}` is already used by {prev}"
                ),
                path=module.path,
                hint="rename one of the files",
            )
        )
    return problems


def detect_prefix_collisions(
    modules: Iterable[SourceModule], *, reject: bool = True
) -> list[Diagnostic]:
    """Raise NamespaceError for shared prefixes, or only warn when `reject` is off."""
    problems = find_prefix_collisions(modules)
    if problems and reject:
        raise NamespaceError(problems)
    logger = get_app_logger()
    for diag in problems:
        logger.log_diagnostic(diag, level=logging.WARNING)
    return problems


def find_type_alias_collisions(modules: Iterable[SourceModule]) -> list[Diagnostic]:
    """Top-level type aliases stay unprefixed, so two modules can't share a name."""
    seen: dict[str, str] = {}
    problems: list[Diagnostic] = []
    for module in modules:
        for stmt in module.chunk.block.statements:
            if not isinstance(stmt, A.TypeAlias):
                continue
            prev = seen.setdefault(stmt.name, module.path)
            if prev == module.path:
                continue
            problems.append(
                Diagnostic(
                    kind="namespace",
                    message=f"type `{stmt.name}` is already declared in {prev}",
                    path=module.path,
                    span=stmt.span,
                    hint="type aliases are shared by every bundled module",
                )
            )
    return problems


def find_invalid_prefixes(modules: Iterable[SourceModule]) -> list[Diagnostic]:
    return [d for d in map(check_prefix, modules) if d is not None]


# --------------------------------------------------------------------------- #
# output
# --------------------------------------------------------------------------- #


def find_entry(
    modules: ModuleSet, entry: str, extensions: Iterable[str]
) -> SourceModule:
    """The module named by `entry`, relative to the input; extension optional."""
    wanted = to_module_path(entry)
    candidates = [wanted, *(wanted + ext for ext in extensions)]
    for module in modules:
        if module.path in candidates:
            return module
    xmsg = f"Entry module not found in bundle: {entry}"
    raise ValueError(xmsg)


def emit_bundle(
    modules: ModuleSet,
    *,
    entry: SourceModule | None = None,
    indent: str = DEFAULT_INDENT,
    version: str = "unknown",
) -> str:
    """Concatenate rewritten modules under their namespace tables."""
    parts = [
        f"-- Bundled by {PROGRAM_PACKAGE} {version}"
        f" from {len(modules)} module{plural(modules)}",
        "",
    ]
    # colliding prefixes (when allowed) share one table
    prefixes = dict.fromkeys(module.prefix for module in modules)
    parts.extend(f"local {prefix} = {{}}" for prefix in prefixes)
    for module in modules:
        parts.append("")
        parts.append(f"-- {module.path}")
        text = emit_chunk(module.chunk, indent).rstrip("\n")
        if text:
            parts.append(text)
    if entry is not None:
        parts.append("")
        parts.append(f"return {entry.prefix}")
    return "\n".join(parts) + "\n"


# --------------------------------------------------------------------------- #
# drivers
# --------------------------------------------------------------------------- #


def _prepare_module(module: SourceModule, indent: str) -> SourceModule:
    try:
        return mangle_top_level_functions(enforce_root_scope(module), indent)
    except RecursionError:
        raise nesting_too_deep(module.path) from None


def _inline_module(
    module: SourceModule, index: ModuleIndex, ignore_imports: list[str]
) -> SourceModule:
    try:
        return inline_imports(module, index, ignore_imports)
    except RecursionError:
        raise nesting_too_deep(module.path) from None


def _input_root(config: BundleConfigResolved) -> Path:
    loc = config["input"]
    if loc in STDIN_ALIASES:
        xmsg = "Bundling needs an input directory (-i DIR), not stdin"
        raise ValueError(xmsg)
    return Path(loc)


def _collect(config: BundleConfigResolved) -> tuple[Path, list[str]]:
    root = _input_root(config)
    paths = collect_module_paths(
        root, config["extensions"], sort=config["sort_inputs"]
    )
    if not paths:
        xmsg = (
            f"No modules found in {root}"
            f" (extensions: {', '.join(config['extensions'])})"
        )
        raise ValueError(xmsg)
    return root, paths


def build_bundle(config: BundleConfigResolved) -> str:
    """Run every pass and return the bundle text without writing it."""
    logger = get_app_logger()
    root, paths = _collect(config)
    indent = config["indent"]
    logger.info("🧵 Bundling %d module%s from %s", len(paths), plural(paths), root)

    modules = load_modules(root, paths)
    detect_prefix_collisions(modules, reject=config["reject_prefix_collisions"])
    type_problems = find_type_alias_collisions(modules)
    if type_problems:
        raise NamespaceError(type_problems)

    modules = modules.map(lambda m: _prepare_module(m, indent))

    index = ModuleIndex(modules, config["extensions"])
    ignore_imports = config["ignore_imports"]
    modules = modules.map(lambda m: _inline_module(m, index, ignore_imports))

    entry = None
    if config["entry"]:
        entry = find_entry(modules, config["entry"], config["extensions"])
    return emit_bundle(
        modules, entry=entry, indent=indent, version=get_metadata().version
    )


def run_bundle(config: BundleConfigResolved) -> str:
    """Bundle `config['input']` and write the result to `config['out']`."""
    logger = get_app_logger()
    text = build_bundle(config)
    write_output(config["out"], text)
    logger.info("✅ %s bundle written → %s", PROGRAM_DISPLAY, config["out"])
    return text


def check_bundle(config: BundleConfigResolved) -> list[Diagnostic]:
    """Run every check over every module and return all problems found.

    Unlike `run_bundle`, nothing stops at the first problem: parse errors
    of every file, namespace problems, safety violations and import
    problems are all collected. Nothing is written.
    """
    logger = get_app_logger()
    root, paths = _collect(config)
    logger.info("🔍 Checking %d module%s in %s", len(paths), plural(paths), root)

    problems: list[Diagnostic] = []
    modules = ModuleSet()
    for i, path in enumerate(paths, 1):
        logger.info("[%d/%d] %s", i, len(paths), path)
        try:
            modules.add(load_module(root, path))
        except ParseError as e:
            problems.extend(e.diagnostics)

    if config["reject_prefix_collisions"]:
        problems.extend(find_prefix_collisions(modules))
    problems.extend(find_type_alias_collisions(modules))
    invalid = find_invalid_prefixes(modules)
    problems.extend(invalid)
    invalid_paths = {d.path for d in invalid}

    too_deep: set[str] = set()
    for module in modules:
        try:
            problems.extend(find_root_scope_violations(module))
            if module.path not in invalid_paths:
                # round-trips the rewritten tree; a failure here is a defect
                mangle_top_level_functions(module, config["indent"])
        except RecursionError:
            problems.extend(nesting_too_deep(module.path).diagnostics)
            too_deep.add(module.path)

    index = ModuleIndex(modules, config["extensions"])
    for module in modules:
        if module.path not in too_deep:
            problems.extend(
                find_import_problems(module, index, config["ignore_imports"])
            )

    if config["entry"]:
        try:
            find_entry(modules, config["entry"], config["extensions"])
        except ValueError as e:
            problems.append(
                Diagnostic(
                    kind="unresolved_import", message=str(e), path=config["entry"]
                )
            )

    logger.debug("Check found %d problem%s", len(problems), plural(problems))
    return problems
