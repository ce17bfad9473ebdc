# tests/50_core/test_config_validate.py
"""Tests for luastitch.config.config_validate."""

from typing import Any

import pytest

import luastitch.config.config_validate as mod_validate


def test_valid_config() -> None:
    # --- setup ---
    cfg = {
        "input": "src",
        "out": "dist/bundle.luau",
        "extensions": [".luau"],
        "ignore_imports": ["@antiraid", "@lune"],
        "sort_inputs": False,
        "entry": "main.luau",
        "indent": "  ",
        "processor_config": {"generator": "dense"},
        "log_level": "debug",
    }

    # --- execute ---
    summary = mod_validate.validate_config(cfg)

    # --- verify ---
    assert summary.valid
    assert summary.errors == []
    assert summary.strict_warnings == []
    assert summary.warnings == []


def test_unknown_key_is_a_strict_warning_with_hint() -> None:
    # --- execute ---
    summary = mod_validate.validate_config({"extension": [".luau"]})

    # --- verify ---
    assert not summary.valid
    (msg,) = summary.strict_warnings
    assert "Unknown key 'extension'" in msg
    assert "did you mean 'extensions'?" in msg


def test_unknown_key_is_only_a_warning_when_lenient() -> None:
    # --- execute ---
    summary = mod_validate.validate_config({"strict_config": False, "colour": True})

    # --- verify ---
    assert summary.valid
    assert summary.strict is False
    assert len(summary.warnings) == 1


def test_explicit_strict_argument_wins() -> None:
    # --- execute ---
    summary = mod_validate.validate_config(
        {"strict_config": False, "colour": True}, strict=True
    )

    # --- verify ---
    assert not summary.valid
    assert len(summary.strict_warnings) == 1


@pytest.mark.parametrize(
    ("cfg", "needle"),
    [
        ({"input": 3}, "Config key 'input' must be"),
        ({"extensions": ".luau"}, "Config key 'extensions' must be"),
        ({"extensions": [1]}, "Config key 'extensions' must be"),
        ({"sort_inputs": "yes"}, "Config key 'sort_inputs' must be"),
        ({"processor_config": []}, "Config key 'processor_config' must be"),
        ({"extensions": ["luau"]}, "Extensions must start with '.': luau"),
        ({"indent": "x"}, "'indent' must be non-empty whitespace"),
        ({"indent": ""}, "'indent' must be non-empty whitespace"),
        ({"log_level": "loud"}, "Unknown log_level 'loud'"),
    ],
)
def test_invalid_values_are_errors(cfg: dict[str, Any], needle: str) -> None:
    # --- execute ---
    summary = mod_validate.validate_config(cfg)

    # --- verify ---
    assert not summary.valid
    assert any(needle in e for e in summary.errors), summary.errors


def test_type_error_includes_example() -> None:
    # --- execute ---
    summary = mod_validate.validate_config({"entry": 1})

    # --- verify ---
    assert '(e.g. "main.luau")' in summary.errors[0]
