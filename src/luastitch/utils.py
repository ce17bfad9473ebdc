# src/luastitch/utils.py

import json
import re
import sys
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Any, cast

from .constants import RECURSION_LIMIT, STDIN_ALIASES, STDOUT_ALIASES
from .logs import get_app_logger


# --- config files -------------------------------------------------------------


def load_toml(path: Path) -> dict[str, Any]:
    """Load and parse a TOML file, supporting Python 3.10 and 3.11+.

    Uses `tomllib` from the standard library when available and the
    `tomli` backport otherwise.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file cannot be parsed
    """
    if not path.exists():
        xmsg = f"TOML file not found: {path}"
        raise FileNotFoundError(xmsg)

    if sys.version_info >= (3, 11):
        import tomllib  # noqa: PLC0415
    else:
        import tomli as tomllib  # noqa: PLC0415

    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        xmsg = f"Invalid TOML syntax in {path}: {e}"
        raise ValueError(xmsg) from e


def _strip_jsonc_comments(text: str) -> str:
    """Strip //, # and /* */ comments from JSONC, leaving strings intact."""
    result: list[str] = []
    i = 0
    n = len(text)
    in_string = False

    while i < n:
        ch = text[i]

        if in_string:
            result.append(ch)
            if ch == "\\" and i + 1 < n:
                result.append(text[i + 1])
                i += 2
                continue
            if ch == '"':
                in_string = False
            i += 1
            continue

        if ch == '"':
            in_string = True
            result.append(ch)
            i += 1
        elif text.startswith("//", i) or ch == "#":
            end = text.find("\n", i)
            i = n if end == -1 else end
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            i = n if end == -1 else end + 2
        else:
            result.append(ch)
            i += 1

    return "".join(result)


def load_jsonc(path: Path) -> dict[str, Any] | list[Any] | None:
    """Load JSONC (JSON with comments and trailing commas)."""
    logger = get_app_logger()
    logger.trace("[load_jsonc] Loading from %s", path)

    if not path.exists():
        xmsg = f"JSONC file not found: {path}"
        raise FileNotFoundError(xmsg)

    if not path.is_file():
        xmsg = f"Expected a file: {path}"
        raise ValueError(xmsg)

    text = path.read_text(encoding="utf-8")
    text = _strip_jsonc_comments(text)

    # Remove trailing commas before } or ]
    text = re.sub(r",(?=\s*[}\]])", "", text).strip()

    if not text:
        # only comments: no config
        return None

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        xmsg = (
            f"Invalid JSONC syntax in {path}:"
            f" {e.msg} (line {e.lineno}, column {e.colno})"
        )
        raise ValueError(xmsg) from e

    if not isinstance(data, (dict, list)):
        xmsg = f"Invalid JSONC root type: {type(data).__name__}"
        raise ValueError(xmsg)  # noqa: TRY004

    return cast("dict[str, Any] | list[Any]", data)


def remove_path_in_error_message(inner_msg: str, path: Path) -> str:
    """Remove redundant file path mentions from an error message.

    Example:
        "Invalid JSONC syntax in /abs/path/.luastitch.jsonc: Expecting value"
        → "Invalid JSONC syntax: Expecting value"
    """
    full_path = str(path)
    filename = path.name

    clean_msg = inner_msg
    for needle in (full_path, filename):
        for quoted in (f"'{needle}'", f'"{needle}"', needle):
            clean_msg = clean_msg.replace(f" in {quoted}", "")
            clean_msg = clean_msg.replace(quoted, "")

    clean_msg = re.sub(r"\s{2,}", " ", clean_msg)
    clean_msg = re.sub(r"\s*:\s*", ": ", clean_msg)
    return clean_msg.strip(": ").strip()


def plural(obj: Any) -> str:
    """Return 's' if obj represents a plural count.

    Accepts ints and anything implementing __len__().
    """
    count: int | float
    try:
        count = len(obj)
    except TypeError:
        count = obj if isinstance(obj, (int, float)) else 0
    return "s" if count != 1 else ""


# --- input / output -------------------------------------------------------------


def read_input(loc: str | Path) -> str:
    """Read a file, or stdin when `loc` is `-` or `stdin`.

    Text read from stdin is stripped of surrounding whitespace.
    """
    if str(loc) in STDIN_ALIASES:
        return sys.stdin.read().strip()
    path = Path(loc)
    if not path.is_file():
        xmsg = f"Input file not found: {path}"
        raise FileNotFoundError(xmsg)
    return path.read_text(encoding="utf-8")


def write_output(loc: str | Path, text: str) -> None:
    """Write to a file (creating parent directories), or stdout for `-`/`stdout`."""
    if str(loc) in STDOUT_ALIASES:
        sys.stdout.write(text)
        if not text.endswith("\n"):
            sys.stdout.write("\n")
        sys.stdout.flush()
        return
    path = Path(loc)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


# --- deep trees -----------------------------------------------------------------


@contextmanager
def recursion_limit(limit: int = RECURSION_LIMIT) -> Generator[None, None, None]:
    """Raise the interpreter's recursion limit while the block runs.

    Long operator chains and deeply nested blocks make equally deep syntax
    trees, and every pass over them recurses once per level. The limit is
    never lowered, and the previous value comes back on exit.
    """
    previous = sys.getrecursionlimit()
    if limit > previous:
        sys.setrecursionlimit(limit)
    try:
        yield
    finally:
        sys.setrecursionlimit(previous)
