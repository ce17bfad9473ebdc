# tests/50_core/test_inline_imports.py
"""Tests for luastitch.imports and ModuleIndex resolution."""

import pytest

import luastitch.imports as mod_imports
from luastitch.diagnostics import ArityError, UnresolvedImport
from luastitch.luau.emitter import emit_chunk
from luastitch.modules import ModuleIndex
from tests.utils import make_module


LIB = make_module("function go() end", "lib/b.luau")
MAIN_PATH = "main.luau"


def _inline(source: str, path: str = MAIN_PATH, *others: object) -> str:
    module = make_module(source, path)
    index = ModuleIndex([module, LIB, *others])  # type: ignore[list-item]
    return emit_chunk(mod_imports.inline_imports(module, index).chunk)


def test_require_in_expression_becomes_the_namespace_table() -> None:
    # --- setup ---
    source = (
        "function run()\n"
        '\tlocal b = require("./lib/b")\n'
        "\treturn b.go()\n"
        "end\n"
    )

    # --- execute and verify ---
    assert _inline(source) == (
        "function run()\n\tlocal b = lib__b\n\treturn b.go()\nend\n"
    )


def test_require_statement_is_dropped() -> None:
    # --- execute and verify ---
    assert _inline('require("./lib/b")\nprint(1)\n') == "print(1)\n"


def test_string_call_style_is_resolved() -> None:
    # --- setup ---
    source = 'function run()\n\treturn (require "lib/b").go()\nend\n'

    # --- execute and verify ---
    assert _inline(source) == "function run()\n\treturn (lib__b).go()\nend\n"


def test_field_access_on_require() -> None:
    # --- setup ---
    source = 'function run()\n\treturn require("lib/b.luau").go()\nend\n'

    # --- execute and verify ---
    assert _inline(source) == "function run()\n\treturn lib__b.go()\nend\n"


def test_relative_paths_from_a_subdirectory() -> None:
    # --- setup ---
    main = make_module("function start() end", MAIN_PATH)
    source = (
        "function f()\n"
        '\tlocal sibling = require("./b")\n'
        '\tlocal top = require("../main")\n'
        "end\n"
    )

    # --- execute ---
    text = _inline(source, "lib/a.luau", main)

    # --- verify ---
    assert "local sibling = lib__b" in text
    assert "local top = main" in text


def test_directory_resolves_to_its_init_module() -> None:
    # --- setup ---
    init = make_module("function helper() end", "util/init.luau")
    source = 'function f()\n\treturn require("util")\nend\n'

    # --- execute and verify ---
    assert _inline(source, MAIN_PATH, init) == (
        "function f()\n\treturn util__init\nend\n"
    )


@pytest.mark.parametrize("name", ["@antiraid", "@antiraid/discord", "@antiraid/a/b"])
def test_ignored_imports_are_left_alone(name: str) -> None:
    # --- setup ---
    source = f'function f()\n\treturn require("{name}")\nend\n'

    # --- execute and verify ---
    assert f'require("{name}")' in _inline(source)


def test_ignore_list_does_not_match_partial_names() -> None:
    # --- setup ---
    module = make_module('require("@antiraidx/foo")')

    # --- execute and verify ---
    with pytest.raises(UnresolvedImport):
        mod_imports.inline_imports(module, ModuleIndex([module]))


def test_custom_ignore_list() -> None:
    # --- setup ---
    module = make_module('function f() return require("@lune/fs") end')
    index = ModuleIndex([module])

    # --- execute ---
    result = mod_imports.inline_imports(module, index, ["@lune"])

    # --- verify ---
    assert 'require("@lune/fs")' in emit_chunk(result.chunk)


@pytest.mark.parametrize(
    ("source", "count"), [("require()", 0), ('require("a", "b")', 2)]
)
def test_wrong_arity(source: str, count: int) -> None:
    # --- setup ---
    module = make_module(source)

    # --- execute ---
    with pytest.raises(ArityError) as exc_info:
        mod_imports.inline_imports(module, ModuleIndex([module]))

    # --- verify ---
    (diag,) = exc_info.value.diagnostics
    assert diag.kind == "arity"
    assert diag.message == "require() must have exactly one argument"
    assert diag.hint == f"got {count}"


def test_non_literal_argument() -> None:
    # --- setup ---
    module = make_module("function f(name) return require(name) end")

    # --- execute ---
    with pytest.raises(UnresolvedImport) as exc_info:
        mod_imports.inline_imports(module, ModuleIndex([module]))

    # --- verify ---
    assert exc_info.value.diagnostics[0].message == (
        "require() argument must be a string literal"
    )


@pytest.mark.parametrize("name", ["./nope", "../outside", "lib/missing"])
def test_unknown_module(name: str) -> None:
    # --- setup ---
    module = make_module(f'require("{name}")')

    # --- execute ---
    with pytest.raises(UnresolvedImport) as exc_info:
        mod_imports.inline_imports(module, ModuleIndex([module, LIB]))

    # --- verify ---
    (diag,) = exc_info.value.diagnostics
    assert diag.kind == "unresolved_import"
    assert diag.message == f"cannot resolve require({name!r})"
    assert diag.span is not None


def test_find_import_problems_collects_every_problem() -> None:
    # --- setup ---
    source = (
        'require("./nope")\n'
        "require()\n"
        'require("./lib/b")\n'
        "function f(x) return require(x) end\n"
    )
    module = make_module(source)

    # --- execute ---
    problems = mod_imports.find_import_problems(module, ModuleIndex([module, LIB]))

    # --- verify ---
    assert [d.kind for d in problems] == [
        "unresolved_import",
        "arity",
        "unresolved_import",
    ]
    assert [d.span.line for d in problems if d.span] == [1, 2, 4]


# ---------------------------------------------------------------------------
# ModuleIndex
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("identifier", "importer", "key"),
    [
        ("./b", "lib/a.luau", "lib__b"),
        ("../x/y", "lib/a.luau", "x__y"),
        ("lib/b.luau", "main.luau", "lib__b"),
        ("lib/b.lua", "main.luau", "lib__b"),
        ("/lib/b", "main.luau", "lib__b"),
        ("lib\\b", "main.luau", "lib__b"),
        ("a.b/c", "main.luau", "a__b__c"),
        ("../escape", "main.luau", None),
    ],
)
def test_lookup_key(identifier: str, importer: str, key: str | None) -> None:
    # --- setup ---
    index = ModuleIndex([])

    # --- execute and verify ---
    assert index.lookup_key(identifier, make_module("", importer)) == key


def test_index_keeps_first_module_per_prefix() -> None:
    # --- setup ---
    first = make_module("", "a/b.luau")
    second = make_module("", "a__b.luau")

    # --- execute ---
    index = ModuleIndex([first, second])

    # --- verify ---
    assert len(index) == 1
    assert index["a__b"] is first
