# src/luastitch/modules.py
"""Module identity: paths, namespace prefixes and the lookup index."""

from __future__ import annotations

import posixpath
import re
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field, replace

from .constants import DEFAULT_EXTENSIONS, PREFIX_JOINER
from .luau.ast import Chunk


_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

LUAU_KEYWORDS = frozenset(
    {
        "and",
        "break",
        "continue",
        "do",
        "else",
        "elseif",
        "end",
        "false",
        "for",
        "function",
        "if",
        "in",
        "local",
        "nil",
        "not",
        "or",
        "repeat",
        "return",
        "then",
        "true",
        "until",
        "while",
    }
)


def namespace_prefix(path: str) -> str:
    """Derive the namespace prefix of a module from its path.

    Path separators become `__`, then the extension (everything after the
    last `.`) is dropped and any remaining dots also become `__`.

        >>> namespace_prefix("a/b.luau")
        'a__b'
        >>> namespace_prefix("lib.v2/x.luau")
        'lib__v2__x'

    A path without a `.` has no extension to drop and yields "".
    """
    flat = path.replace("/", PREFIX_JOINER).replace("\\", PREFIX_JOINER)
    segments = flat.split(".")
    return PREFIX_JOINER.join(segments[:-1])


def is_valid_identifier(name: str) -> bool:
    """True if `name` can be used as a Luau variable name."""
    return bool(_IDENTIFIER_RE.match(name)) and name not in LUAU_KEYWORDS


def to_module_path(raw: str) -> str:
    """Normalize a relative path into the POSIX form used as module identity."""
    return posixpath.normpath(raw.replace("\\", "/"))


# --- SourceModule -----------------------------------------------------------


@dataclass(frozen=True)
class SourceModule:
    """One input file: its identity (`path`) and its current syntax tree."""

    path: str
    chunk: Chunk
    source: str = field(default="", compare=False, repr=False)

    @property
    def prefix(self) -> str:
        return namespace_prefix(self.path)

    @property
    def directory(self) -> str:
        return posixpath.dirname(self.path)

    def with_chunk(self, chunk: Chunk) -> SourceModule:
        return replace(self, chunk=chunk)


# --- ModuleSet --------------------------------------------------------------


class ModuleSet:
    """Modules in discovery order. Paths are unique."""

    def __init__(self, modules: Iterable[SourceModule] = ()) -> None:
        self._modules: list[SourceModule] = []
        self._paths: set[str] = set()
        for module in modules:
            self.add(module)

    def add(self, module: SourceModule) -> None:
        if module.path in self._paths:
            xmsg = f"Duplicate module path: {module.path}"
            raise ValueError(xmsg)
        self._paths.add(module.path)
        self._modules.append(module)

    def map(self, fn: Callable[[SourceModule], SourceModule]) -> ModuleSet:
        """Apply a pass to every module, in order, into a new set."""
        return ModuleSet(fn(m) for m in self._modules)

    @property
    def paths(self) -> list[str]:
        return [m.path for m in self._modules]

    def __iter__(self) -> Iterator[SourceModule]:
        return iter(self._modules)

    def __len__(self) -> int:
        return len(self._modules)

    def __contains__(self, path: object) -> bool:
        return path in self._paths

    def __repr__(self) -> str:
        return f"ModuleSet({self.paths!r})"


# --- ModuleIndex ------------------------------------------------------------


class ModuleIndex(Mapping[str, SourceModule]):
    """Read-only mapping from namespace prefix to module.

    Built once per bundle, before import resolution. When two modules
    share a prefix the first one in discovery order is kept.
    """

    def __init__(
        self,
        modules: Iterable[SourceModule],
        extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    ) -> None:
        self._by_prefix: dict[str, SourceModule] = {}
        for module in modules:
            self._by_prefix.setdefault(module.prefix, module)
        # longest first so ".d.luau"-style compound extensions win
        self._extensions = sorted(extensions, key=len, reverse=True)

    def __getitem__(self, prefix: str) -> SourceModule:
        return self._by_prefix[prefix]

    def __iter__(self) -> Iterator[str]:
        return iter(self._by_prefix)

    def __len__(self) -> int:
        return len(self._by_prefix)

    def lookup_key(self, identifier: str, importer: SourceModule) -> str | None:
        """Turn an import identifier into a prefix key (None if it escapes the root)."""
        ident = identifier.replace("\\", "/")
        if ident.startswith(("./", "../")):
            ident = posixpath.join(importer.directory, ident)
        ident = posixpath.normpath(ident).lstrip("/")
        if ident == ".." or ident.startswith("../"):
            return None
        for ext in self._extensions:
            if ident.endswith(ext):
                ident = ident[: -len(ext)]
                break
        return re.sub(r"[/.]", PREFIX_JOINER, ident)

    def resolve(self, identifier: str, importer: SourceModule) -> SourceModule | None:
        """Find the module an import identifier refers to.

        `./x` and `../x` are relative to the importing module's directory.
        Anything else is relative to the bundle root. A directory resolves
        to its `init` module.
        """
        key = self.lookup_key(identifier, importer)
        if key is None:
            return None
        found = self._by_prefix.get(key)
        if found is None:
            found = self._by_prefix.get(f"{key}{PREFIX_JOINER}init")
        return found
