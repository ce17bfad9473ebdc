# tests/90_integration/test_log_level.py
"""Tests for log level configuration and CLI flags."""

from pathlib import Path

import pytest

import luastitch.cli as mod_cli
import luastitch.logs as mod_logs
import luastitch.meta as mod_meta
from tests.utils import write_config_file, write_modules


# --- constants --------------------------------------------------------------------

ARGPARSE_ERROR_EXIT_CODE = 2

# --- helpers ----------------------------------------------------------------------


def _make_project(root: Path) -> None:
    write_modules(root / "src", {"m.luau": "function f() end\n"})


# --- tests ------------------------------------------------------------------------


def test_quiet_flag(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    module_logger: mod_logs.AppLogger,
) -> None:
    """Should suppress most output but still succeed.

    --quiet sets log level to warning.
    """
    # --- setup ---
    _make_project(tmp_path)

    # --- patch and execute ---
    monkeypatch.chdir(tmp_path)
    code = mod_cli.main(["bundle-dir", "-i", "src", "-o", "b.luau", "--quiet"])

    # --- verify ---
    captured = capsys.readouterr()
    assert code == 0
    assert (tmp_path / "b.luau").exists()
    assert "[1/1]" not in captured.out + captured.err
    assert module_logger.level_name == "WARNING"


def test_verbose_flag(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    module_logger: mod_logs.AppLogger,
) -> None:
    """Should print detailed logs when --verbose is used.

    --verbose sets log level to debug.
    """
    # --- setup ---
    _make_project(tmp_path)

    # --- patch and execute ---
    monkeypatch.chdir(tmp_path)
    code = mod_cli.main(["bundle-dir", "-i", "src", "-o", "b.luau", "--verbose"])

    # --- verify ---
    captured = capsys.readouterr()
    out = (captured.out + captured.err).lower()

    assert code == 0
    # Verbose mode should show debug-level details
    assert "[debug]" in out
    # but not trace-level details
    assert "[trace]" not in out
    # It should still include progress
    assert "[1/1] m.luau" in out


def test_verbose_and_quiet_mutually_exclusive(
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Should fail when both --verbose and --quiet are provided."""
    # --- execute ---
    with pytest.raises(SystemExit) as e:
        mod_cli.main(["check", "--quiet", "--verbose"])

    # --- verify ---
    assert e.value.code == ARGPARSE_ERROR_EXIT_CODE  # must be outside context
    combined = capsys.readouterr().err.lower()
    assert "not allowed with argument" in combined
    assert "--quiet" in combined
    assert "--verbose" in combined


def test_log_level_flag_sets_runtime(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """--log-level should override config and environment."""
    # --- setup ---
    _make_project(tmp_path)
    write_config_file(tmp_path, {"input": "src", "log_level": "warning"})
    monkeypatch.setenv(f"{mod_meta.PROGRAM_ENV}_LOG_LEVEL", "error")

    # --- patch and execute ---
    monkeypatch.chdir(tmp_path)
    code = mod_cli.main(["check", "--log-level", "debug"])

    # --- verify ---
    assert code == 0
    assert mod_logs.get_app_logger().level_name == "DEBUG"


def test_log_level_from_env_var(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """LOG_LEVEL and {PROGRAM_ENV}_LOG_LEVEL should be respected when flag not given."""
    # --- setup ---
    _make_project(tmp_path)
    monkeypatch.chdir(tmp_path)

    # --- execute and verify ---
    # 1️⃣ Specific env var wins
    monkeypatch.setenv(f"{mod_meta.PROGRAM_ENV}_LOG_LEVEL", "warning")
    monkeypatch.setenv("LOG_LEVEL", "error")
    assert mod_cli.main(["check", "-i", "src"]) == 0
    assert mod_logs.get_app_logger().level_name == "WARNING"

    # 2️⃣ Generic LOG_LEVEL fallback works
    monkeypatch.delenv(f"{mod_meta.PROGRAM_ENV}_LOG_LEVEL")
    assert mod_cli.main(["check", "-i", "src"]) == 0
    assert mod_logs.get_app_logger().level_name == "ERROR"


def test_log_level_from_config(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    # --- setup ---
    _make_project(tmp_path)
    write_config_file(tmp_path, {"input": "src", "log_level": "warning"})
    monkeypatch.chdir(tmp_path)

    # --- execute ---
    code = mod_cli.main(["check"])

    # --- verify ---
    assert code == 0
    assert mod_logs.get_app_logger().level_name == "WARNING"
