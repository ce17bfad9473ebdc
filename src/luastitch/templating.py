# src/luastitch/templating.py
"""`wrap-file`: wrap a script in the entrypoint template."""

import re
from pathlib import Path
from typing import Any

from .constants import DEFAULT_TEMPLATE_NAME
from .logs import get_app_logger
from .utils import read_input, write_output


_PLACEHOLDER_RE = re.compile(r"\{\{\s*(\w+)\s*\}\}")

DEFAULT_TEMPLATE_PATH = Path(__file__).parent / "templates" / DEFAULT_TEMPLATE_NAME


def load_template(path: Path | None = None) -> str:
    """Read a template file; the bundled entrypoint template by default."""
    path = path or DEFAULT_TEMPLATE_PATH
    if not path.is_file():
        xmsg = f"Template not found: {path}"
        raise FileNotFoundError(xmsg)
    return path.read_text(encoding="utf-8")


def render_template(template: str, context: dict[str, Any]) -> str:
    """Replace every `{{ name }}` with `context[name]`.

    Raises:
        ValueError: If the template uses a name missing from `context`.
    """
    missing = sorted(
        {m.group(1) for m in _PLACEHOLDER_RE.finditer(template)} - set(context)
    )
    if missing:
        xmsg = f"Template uses unknown variable(s): {', '.join(missing)}"
        raise ValueError(xmsg)
    return _PLACEHOLDER_RE.sub(lambda m: str(context[m.group(1)]), template)


def wrap_file(
    input_loc: str | Path,
    output_loc: str | Path,
    *,
    proj_name: str,
    proj_version: str,
    template: Path | None = None,
) -> str:
    """Wrap the script at `input_loc` and write the result to `output_loc`."""
    logger = get_app_logger()
    body = read_input(input_loc)
    logger.debug("Wrapping %s with %s", input_loc, template or DEFAULT_TEMPLATE_NAME)
    text = render_template(
        load_template(template),
        {"body": body, "proj_name": proj_name, "proj_version": proj_version},
    )
    write_output(output_loc, text)
    return text
