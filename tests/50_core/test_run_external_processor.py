# tests/50_core/test_run_external_processor.py
"""Tests for luastitch.external (process-file)."""

import io
import json
import subprocess
import sys
from pathlib import Path
from typing import Any

import pytest

import luastitch.external as mod_external


class _FakeRun:
    """Stands in for subprocess.run and records what it was asked to do."""

    def __init__(self, returncode: int = 0, stderr: str = "", output: str = "") -> None:
        self.returncode = returncode
        self.stderr = stderr
        self.output = output
        self.command: list[str] = []
        self.payload: Any = None
        self.input_text = ""

    def __call__(self, command: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
        self.command = command
        self.payload = json.loads(Path(command[3]).read_text(encoding="utf-8"))
        self.input_text = Path(command[4]).read_text(encoding="utf-8")
        if self.returncode == 0:
            Path(command[5]).write_text(self.output, encoding="utf-8")
        return subprocess.CompletedProcess(command, self.returncode, "", self.stderr)


@pytest.fixture
def fake_tool(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        mod_external.shutil, "which", lambda name: f"/usr/bin/{name}"
    )


def test_find_tool_executable_prefers_custom_path(tmp_path: Path) -> None:
    # --- setup ---
    tool = tmp_path / "darklua"
    tool.write_text("", encoding="utf-8")

    # --- execute and verify ---
    assert mod_external.find_tool_executable("darklua", tool) == str(tool.resolve())


def test_find_tool_executable_falls_back_to_path(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    # --- setup ---
    monkeypatch.setattr(mod_external.shutil, "which", lambda name: "/opt/" + name)

    # --- execute ---
    found = mod_external.find_tool_executable("darklua", tmp_path / "missing")

    # --- verify ---
    assert found == "/opt/darklua"
    assert "does not exist" in capsys.readouterr().err


def test_missing_tool(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    # --- setup ---
    monkeypatch.setattr(mod_external.shutil, "which", lambda name: None)

    # --- execute and verify ---
    with pytest.raises(RuntimeError, match="External processor 'darklua' not found"):
        mod_external.run_external_processor(tmp_path / "in.luau", tmp_path / "o.luau")


def test_processes_file_to_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, fake_tool: None
) -> None:
    # --- setup ---
    src = tmp_path / "in.luau"
    src.write_text("print(1)\n", encoding="utf-8")
    out = tmp_path / "out" / "result.luau"
    fake = _FakeRun(output="print(1)")
    monkeypatch.setattr(mod_external.subprocess, "run", fake)

    # --- execute ---
    mod_external.run_external_processor(src, out, config={"generator": "dense"})

    # --- verify ---
    assert fake.command[:3] == ["/usr/bin/darklua", "process", "--config"]
    assert fake.command[4:] == [str(src), str(out)]
    assert fake.payload == {"generator": "dense"}
    assert out.read_text(encoding="utf-8") == "print(1)"


def test_default_payload(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, fake_tool: None
) -> None:
    # --- setup ---
    src = tmp_path / "in.luau"
    src.write_text("print(1)\n", encoding="utf-8")
    fake = _FakeRun()
    monkeypatch.setattr(mod_external.subprocess, "run", fake)

    # --- execute ---
    mod_external.run_external_processor(src, tmp_path / "o.luau")

    # --- verify ---
    assert fake.payload["bundle"]["excludes"] == ["@antiraid/*"]


def test_stdin_and_stdout_are_staged(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    fake_tool: None,
) -> None:
    # --- setup ---
    monkeypatch.setattr(sys, "stdin", io.StringIO("print('in')\n"))
    fake = _FakeRun(output="print('out')")
    monkeypatch.setattr(mod_external.subprocess, "run", fake)

    # --- execute ---
    mod_external.run_external_processor("-", "-")

    # --- verify ---
    assert fake.input_text == "print('in')"
    assert "print('out')\n" in capsys.readouterr().out


def test_custom_tool_name(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, fake_tool: None
) -> None:
    # --- setup ---
    src = tmp_path / "in.luau"
    src.write_text("", encoding="utf-8")
    fake = _FakeRun()
    monkeypatch.setattr(mod_external.subprocess, "run", fake)

    # --- execute ---
    mod_external.run_external_processor(src, tmp_path / "o.luau", tool="mytool")

    # --- verify ---
    assert fake.command[0] == "/usr/bin/mytool"


def test_tool_failure(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, fake_tool: None
) -> None:
    # --- setup ---
    src = tmp_path / "in.luau"
    src.write_text("print(\n", encoding="utf-8")
    fake = _FakeRun(returncode=1, stderr="unexpected token\n")
    monkeypatch.setattr(mod_external.subprocess, "run", fake)

    # --- execute and verify ---
    with pytest.raises(RuntimeError, match="darklua exited with code 1: unexpected token"):
        mod_external.run_external_processor(src, tmp_path / "o.luau")


def test_missing_input_file(tmp_path: Path, fake_tool: None) -> None:
    # --- execute and verify ---
    with pytest.raises(FileNotFoundError, match="Input file not found"):
        mod_external.run_external_processor(tmp_path / "none.luau", "-")
