# src/luastitch/actions.py
import re
import subprocess
from contextlib import suppress
from importlib import metadata as importlib_metadata
from pathlib import Path

from .logs import get_app_logger
from .meta import PROGRAM_PACKAGE, Metadata


def _version_from_pyproject(root: Path) -> str | None:
    pyproject = root / "pyproject.toml"
    if not pyproject.exists():
        return None
    get_app_logger().trace(f"trying to read metadata from {pyproject}")
    text = pyproject.read_text(encoding="utf-8")
    match = re.search(r'(?m)^\s*version\s*=\s*["\']([^"\']+)["\']', text)
    return match.group(1) if match else None


def get_metadata() -> Metadata:
    """Return version and commit for this tool.

    - Installed → distribution metadata
    - Source checkout → pyproject.toml, plus git for the commit
    """
    logger = get_app_logger()
    root = Path(__file__).resolve().parents[2]

    version = "unknown"
    commit = "unknown"

    with suppress(importlib_metadata.PackageNotFoundError):
        version = importlib_metadata.version(PROGRAM_PACKAGE)
    if version == "unknown":
        version = _version_from_pyproject(root) or version

    with suppress(Exception):
        logger.trace("trying to get commit from git")
        result = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],  # noqa: S607
            cwd=root,
            capture_output=True,
            text=True,
            check=True,
        )
        commit = result.stdout.strip() or commit

    logger.trace(f"got package version {version} with commit {commit}")
    return Metadata(version, commit)
