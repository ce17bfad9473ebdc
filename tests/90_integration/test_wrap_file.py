# tests/90_integration/test_wrap_file.py
"""End-to-end runs of `luastitch wrap-file`."""

import io
import sys
from pathlib import Path

import pytest

import luastitch.actions as mod_actions
import luastitch.cli as mod_cli
from luastitch.meta import Metadata
from tests.utils import patch_everywhere


def test_wrap_file_to_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    # --- setup ---
    (tmp_path / "script.luau").write_text("print(...)\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)

    # --- execute ---
    code = mod_cli.main(
        [
            "wrap-file",
            "-i",
            "script.luau",
            "-o",
            "out/wrapped.luau",
            "--proj-name",
            "demo",
            "--proj-version",
            "2.0",
        ]
    )

    # --- verify ---
    assert code == 0
    text = (tmp_path / "out" / "wrapped.luau").read_text(encoding="utf-8")
    assert text.startswith("-- demo 2.0\n")
    assert "local function __entrypoint(...)\nprint(...)\n" in text
    assert text.rstrip().endswith("return __entrypoint")


def test_wrap_file_stdin_to_stdout(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    # --- setup ---
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(sys, "stdin", io.StringIO("  return 42  \n"))

    # --- execute ---
    code = mod_cli.main(["wrap-file", "--proj-name", "demo", "--proj-version", "1"])

    # --- verify ---
    assert code == 0
    out = capsys.readouterr().out
    assert out.startswith("-- demo 1\n")
    assert "local function __entrypoint(...)\nreturn 42\nend\n" in out


def test_wrap_file_custom_template(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    # --- setup ---
    (tmp_path / "script.luau").write_text("print(1)", encoding="utf-8")
    (tmp_path / "tpl.luau").write_text(
        "-- {{ proj_name }}\ndo\n{{ body }}\nend\n", encoding="utf-8"
    )
    monkeypatch.chdir(tmp_path)

    # --- execute ---
    code = mod_cli.main(
        [
            "wrap-file",
            "-i",
            "script.luau",
            "-o",
            "w.luau",
            "--template",
            "tpl.luau",
            "--proj-name",
            "x",
        ]
    )

    # --- verify ---
    assert code == 0
    assert (tmp_path / "w.luau").read_text(encoding="utf-8") == (
        "-- x\ndo\nprint(1)\nend\n"
    )


def test_wrap_file_unknown_template_variable(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    # --- setup ---
    (tmp_path / "script.luau").write_text("print(1)", encoding="utf-8")
    (tmp_path / "tpl.luau").write_text("-- {{ author }}\n{{ body }}\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)

    # --- execute ---
    code = mod_cli.main(
        ["wrap-file", "-i", "script.luau", "-o", "w.luau", "--template", "tpl.luau"]
    )

    # --- verify ---
    assert code == 1
    assert "author" in capsys.readouterr().err
    assert not (tmp_path / "w.luau").exists()


def test_wrap_file_version_defaults_to_installed_version(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    # --- setup ---
    (tmp_path / "script.luau").write_text("print(1)\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    patch_everywhere(
        monkeypatch, mod_actions, "get_metadata", lambda: Metadata("4.5.6", "abc")
    )

    # --- execute ---
    code = mod_cli.main(
        ["wrap-file", "-i", "script.luau", "-o", "w.luau", "--proj-name", "demo"]
    )

    # --- verify ---
    assert code == 0
    text = (tmp_path / "w.luau").read_text(encoding="utf-8")
    assert text.startswith("-- demo 4.5.6\n")
