# src/luastitch/external.py
"""`process-file`: hand one file to an external source-to-source tool.

The tool (darklua by default) is called as
`<tool> process --config <json> <input> <output>` with the JSON payload
written to a temporary file. This path does not use the bundling core.
"""

import json
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Any

from .constants import (
    DEFAULT_PROCESSOR,
    DEFAULT_PROCESSOR_CONFIG,
    STDIN_ALIASES,
    STDOUT_ALIASES,
)
from .logs import get_app_logger
from .utils import read_input, write_output


def find_tool_executable(
    tool_name: str,
    custom_path: str | Path | None = None,
) -> str | None:
    """Find tool executable, checking custom_path first, then PATH."""
    if custom_path:
        path = Path(custom_path)
        if path.exists() and path.is_file():
            return str(path.resolve())
        get_app_logger().warning(
            "Processor path %s does not exist, looking for %s on PATH",
            path,
            tool_name,
        )

    return shutil.which(tool_name)


def build_processor_command(
    executable: str, config_path: Path, input_path: Path, output_path: Path
) -> list[str]:
    return [
        executable,
        "process",
        "--config",
        str(config_path),
        str(input_path),
        str(output_path),
    ]


def run_external_processor(
    input_loc: str | Path,
    output_loc: str | Path,
    *,
    tool: str = DEFAULT_PROCESSOR,
    tool_path: str | Path | None = None,
    config: dict[str, Any] | None = None,
) -> None:
    """Run the external processor over one file.

    `-`/`stdin` and `-`/`stdout` are staged through temporary files, since
    the tool only works on paths.

    Raises:
        RuntimeError: If the tool can't be found or exits non-zero. The
            message carries the tool's output.
    """
    logger = get_app_logger()
    executable = find_tool_executable(tool, tool_path)
    if executable is None:
        xmsg = f"External processor '{tool}' not found on PATH"
        raise RuntimeError(xmsg)

    payload = DEFAULT_PROCESSOR_CONFIG if config is None else config

    with tempfile.TemporaryDirectory(prefix="luastitch-") as tmp:
        tmp_dir = Path(tmp)
        config_path = tmp_dir / "processor.json"
        config_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

        if str(input_loc) in STDIN_ALIASES:
            input_path = tmp_dir / "input.luau"
            input_path.write_text(read_input(input_loc), encoding="utf-8")
        else:
            input_path = Path(input_loc)
            if not input_path.is_file():
                xmsg = f"Input file not found: {input_path}"
                raise FileNotFoundError(xmsg)

        to_stdout = str(output_loc) in STDOUT_ALIASES
        if to_stdout:
            output_path = tmp_dir / "output.luau"
        else:
            output_path = Path(output_loc)
            output_path.parent.mkdir(parents=True, exist_ok=True)

        command = build_processor_command(
            executable, config_path, input_path, output_path
        )
        logger.debug("Running %s", " ".join(command))
        result = subprocess.run(  # noqa: S603
            command,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            output = (result.stderr or result.stdout).strip()
            xmsg = f"{tool} exited with code {result.returncode}: {output}"
            raise RuntimeError(xmsg)
        if result.stdout.strip():
            logger.trace(f"[{tool}] {result.stdout.strip()}")

        if to_stdout:
            write_output(output_loc, output_path.read_text(encoding="utf-8"))

    logger.info("✅ %s processed %s → %s", tool, input_loc, output_loc)
