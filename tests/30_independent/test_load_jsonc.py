# tests/30_independent/test_load_jsonc.py
"""Tests for the config file readers in luastitch.utils."""

from pathlib import Path

import pytest

import luastitch.utils as mod_utils


def test_load_jsonc_strips_comments_and_trailing_commas(tmp_path: Path) -> None:
    # --- setup ---
    path = tmp_path / "cfg.jsonc"
    path.write_text(
        """
        // line comment
        {
          "input": "src/", # hash comment
          /* block
             comment */
          "ignore_imports": ["@antiraid", "http://x//y",],
        }
        """,
        encoding="utf-8",
    )

    # --- execute ---
    data = mod_utils.load_jsonc(path)

    # --- verify ---
    assert data == {"input": "src/", "ignore_imports": ["@antiraid", "http://x//y"]}


def test_load_jsonc_only_comments_is_none(tmp_path: Path) -> None:
    # --- setup ---
    path = tmp_path / "empty.jsonc"
    path.write_text("// nothing here\n", encoding="utf-8")

    # --- execute and verify ---
    assert mod_utils.load_jsonc(path) is None


def test_load_jsonc_invalid_syntax(tmp_path: Path) -> None:
    # --- setup ---
    path = tmp_path / "bad.jsonc"
    path.write_text('{"input": }', encoding="utf-8")

    # --- execute and verify ---
    with pytest.raises(ValueError, match="Invalid JSONC syntax"):
        mod_utils.load_jsonc(path)


def test_load_jsonc_scalar_root_is_rejected(tmp_path: Path) -> None:
    # --- setup ---
    path = tmp_path / "scalar.jsonc"
    path.write_text("42", encoding="utf-8")

    # --- execute and verify ---
    with pytest.raises(ValueError, match="Invalid JSONC root type"):
        mod_utils.load_jsonc(path)


def test_load_jsonc_missing_file(tmp_path: Path) -> None:
    # --- execute and verify ---
    with pytest.raises(FileNotFoundError):
        mod_utils.load_jsonc(tmp_path / "missing.jsonc")


def test_load_toml(tmp_path: Path) -> None:
    # --- setup ---
    path = tmp_path / "luastitch.toml"
    path.write_text('input = "src"\nsort_inputs = false\n', encoding="utf-8")

    # --- execute and verify ---
    assert mod_utils.load_toml(path) == {"input": "src", "sort_inputs": False}


def test_load_toml_invalid(tmp_path: Path) -> None:
    # --- setup ---
    path = tmp_path / "luastitch.toml"
    path.write_text("input = \n", encoding="utf-8")

    # --- execute and verify ---
    with pytest.raises(ValueError, match="Invalid TOML syntax"):
        mod_utils.load_toml(path)


def test_remove_path_in_error_message() -> None:
    # --- setup ---
    path = Path("/abs/path/.luastitch.jsonc")
    msg = f"Invalid JSONC syntax in {path}: Expecting value"

    # --- execute and verify ---
    assert mod_utils.remove_path_in_error_message(msg, path) == (
        "Invalid JSONC syntax: Expecting value"
    )


@pytest.mark.parametrize(
    ("obj", "expected"),
    [(0, "s"), (1, ""), (2, "s"), ([1], ""), ([], "s"), ("ab", "s")],
)
def test_plural(obj: object, expected: str) -> None:
    # --- execute and verify ---
    assert mod_utils.plural(obj) == expected
