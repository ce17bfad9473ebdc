# tests/50_core/test_scoped_rewriter.py
"""Tests for depth tracking in luastitch.traversal."""

import pytest

import luastitch.luau.ast as A
import luastitch.traversal as mod_traversal
from luastitch.diagnostics import InternalConsistencyError
from tests.utils import make_module


class _DepthRecorder(mod_traversal.ScopedRewriter):
    def __init__(self, *args: object, **kwargs: object) -> None:
        super().__init__(*args, **kwargs)  # type: ignore[arg-type]
        self.seen: list[tuple[str, int]] = []

    def check_statement(self, stmt: A.Stmt, depth: int) -> None:
        self.seen.append((type(stmt).__name__, depth))


def _depths(source: str) -> list[tuple[str, int]]:
    recorder = _DepthRecorder(make_module(source))
    recorder.run()
    return recorder.seen


# ---------------------------------------------------------------------------
# TraversalState
# ---------------------------------------------------------------------------


def test_state_enter_and_leave_are_balanced() -> None:
    # --- setup ---
    state = mod_traversal.TraversalState("m.luau")

    # --- execute ---
    inner = state.enter(0)
    deeper = state.enter(inner)
    state.leave(deeper)
    state.leave(inner)

    # --- verify ---
    assert (inner, deeper) == (1, 2)
    assert state.depth == 0
    state.finish()


def test_state_rejects_out_of_sync_depth() -> None:
    # --- setup ---
    state = mod_traversal.TraversalState("m.luau")
    state.enter(0)

    # --- execute and verify ---
    with pytest.raises(InternalConsistencyError, match="out of sync in m.luau"):
        state.enter(0)


def test_state_cannot_leave_top_level() -> None:
    # --- setup ---
    state = mod_traversal.TraversalState("m.luau")

    # --- execute and verify ---
    with pytest.raises(InternalConsistencyError, match="Left the top-level scope"):
        state.leave(0)


def test_state_finish_requires_depth_zero() -> None:
    # --- setup ---
    state = mod_traversal.TraversalState("m.luau")
    state.enter(0)

    # --- execute and verify ---
    with pytest.raises(InternalConsistencyError, match="ended at depth 1"):
        state.finish()


# ---------------------------------------------------------------------------
# ScopedRewriter
# ---------------------------------------------------------------------------


def test_top_level_statements_are_depth_zero() -> None:
    # --- execute and verify ---
    assert _depths("function f() end\nprint(1)\ntype T = number\n") == [
        ("FunctionDeclaration", 0),
        ("CallStatement", 0),
        ("TypeAlias", 0),
    ]


def test_function_body_is_one_level_deeper() -> None:
    # --- setup ---
    source = "function top()\n\tlocal x = 1\n\tprint(x)\nend\n"

    # --- execute and verify ---
    assert _depths(source) == [
        ("FunctionDeclaration", 0),
        ("LocalAssignment", 1),
        ("CallStatement", 1),
    ]


def test_block_statements_nest() -> None:
    # --- setup ---
    source = "do\n\tprint(1)\n\tif x then\n\t\tprint(2)\n\tend\nend\n"

    # --- execute and verify ---
    assert _depths(source) == [
        ("Do", 0),
        ("CallStatement", 1),
        ("If", 1),
        ("CallStatement", 2),
    ]


def test_local_function_body_is_two_levels_deeper() -> None:
    # --- execute and verify ---
    assert _depths("local function f() print(1) end") == [
        ("LocalFunction", 0),
        ("CallStatement", 2),
    ]


def test_anonymous_function_in_call_arguments() -> None:
    # --- execute and verify ---
    assert _depths("foo(function() bar() end)") == [
        ("CallStatement", 0),
        ("CallStatement", 2),
    ]


def test_run_returns_an_equal_tree_when_nothing_changes() -> None:
    # --- setup ---
    source = "function f(a)\n\tfor i = 1, a do\n\t\tprint(i)\n\tend\nend\n"
    module = make_module(source)

    # --- execute ---
    result = mod_traversal.ScopedRewriter(module).run()

    # --- verify ---
    assert result.chunk == module.chunk
    assert result.path == module.path


def test_report_raises_unless_collecting() -> None:
    # --- setup ---
    module = make_module("print(1)")
    stmt = module.chunk.block.statements[0]
    raising = mod_traversal.ScopedRewriter(module)
    collecting = mod_traversal.ScopedRewriter(module, collect=True)

    # --- execute ---
    diag = raising.diagnostic("safety", stmt, "nope")
    collecting.report(diag)

    # --- verify ---
    with pytest.raises(Exception, match="nope"):
        raising.report(diag)
    assert collecting.diagnostics == [diag]
    assert diag.source_text == "print(1)"
