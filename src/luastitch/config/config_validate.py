# src/luastitch/config/config_validate.py


from dataclasses import dataclass, field
from difflib import get_close_matches
from typing import Any

from luastitch.constants import DEFAULT_STRICT_CONFIG
from luastitch.logs import get_app_logger
from luastitch.utils_logs import LEVEL_ORDER
from luastitch.utils_types import safe_isinstance, schema_from_typeddict, type_name

from .config_types import RootConfig


# --- constants ------------------------------------------------------

# Field-specific examples for better error messages
FIELD_EXAMPLES: dict[str, str] = {
    "input": '"src/"',
    "out": '"dist/bundle.luau"',
    "extensions": '[".luau", ".lua"]',
    "ignore_imports": '["@antiraid"]',
    "entry": '"main.luau"',
    "indent": '"\\t"',
    "processor_config": '{"generator": "readable"}',
    "log_level": '"debug"',
    "strict_config": "true",
}


@dataclass
class ValidationSummary:
    valid: bool = True
    errors: list[str] = field(default_factory=list)
    strict_warnings: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    strict: bool = DEFAULT_STRICT_CONFIG


def collect_msg(
    msg: str,
    *,
    strict: bool,
    summary: ValidationSummary,  # modified
    is_error: bool = False,
) -> None:
    """Record a message as an error, a strict warning or a plain warning."""
    if is_error:
        summary.errors.append(msg)
    elif strict:
        summary.strict_warnings.append(msg)
    else:
        summary.warnings.append(msg)


def _check_unknown_keys(
    parsed_cfg: dict[str, Any],
    schema: dict[str, Any],
    *,
    summary: ValidationSummary,  # modified
) -> None:
    for key in parsed_cfg:
        if key in schema:
            continue
        msg = f"Unknown key '{key}' in configuration"
        close = get_close_matches(key, list(schema), n=1, cutoff=0.6)
        if close:
            msg += f" (did you mean '{close[0]}'?)"
        collect_msg(msg, strict=summary.strict, summary=summary)


def _check_types(
    parsed_cfg: dict[str, Any],
    schema: dict[str, Any],
    *,
    summary: ValidationSummary,  # modified
) -> None:
    for key, expected in schema.items():
        if key not in parsed_cfg:
            continue
        value = parsed_cfg[key]
        if safe_isinstance(value, expected):
            continue
        msg = (
            f"Config key '{key}' must be {type_name(expected)},"
            f" got {type(value).__name__}"
        )
        example = FIELD_EXAMPLES.get(key)
        if example:
            msg += f" (e.g. {example})"
        collect_msg(msg, strict=True, summary=summary, is_error=True)


def _check_values(
    parsed_cfg: dict[str, Any],
    *,
    summary: ValidationSummary,  # modified
) -> None:
    extensions = parsed_cfg.get("extensions")
    if isinstance(extensions, list):
        bad = [e for e in extensions if isinstance(e, str) and not e.startswith(".")]
        if bad:
            collect_msg(
                f"Extensions must start with '.': {', '.join(bad)}",
                strict=True,
                summary=summary,
                is_error=True,
            )

    indent = parsed_cfg.get("indent")
    if isinstance(indent, str) and (not indent or indent.strip()):
        collect_msg(
            "Config key 'indent' must be non-empty whitespace",
            strict=True,
            summary=summary,
            is_error=True,
        )

    log_level = parsed_cfg.get("log_level")
    if isinstance(log_level, str) and log_level.lower() not in LEVEL_ORDER:
        collect_msg(
            f"Unknown log_level '{log_level}'"
            f" (expected one of: {', '.join(LEVEL_ORDER)})",
            strict=True,
            summary=summary,
            is_error=True,
        )


# ---------------------------------------------------------------------------
# main validator
# ---------------------------------------------------------------------------


def validate_config(
    parsed_cfg: dict[str, Any],
    *,
    strict: bool | None = None,
) -> ValidationSummary:
    """Validate a raw configuration mapping against `RootConfig`.

    Unknown keys are strict warnings when strict mode is on (the default,
    or the file's own `strict_config`), plain warnings otherwise. Wrong
    value types are always errors.
    """
    logger = get_app_logger()
    logger.trace(f"[validate_config] Validating {len(parsed_cfg)} keys")

    summary = ValidationSummary()
    strict_from_cfg = parsed_cfg.get("strict_config")
    if strict is not None:
        summary.strict = strict
    elif isinstance(strict_from_cfg, bool):
        summary.strict = strict_from_cfg

    schema = schema_from_typeddict(RootConfig)
    _check_unknown_keys(parsed_cfg, schema, summary=summary)
    _check_types(parsed_cfg, schema, summary=summary)
    _check_values(parsed_cfg, summary=summary)

    summary.valid = not summary.errors and not summary.strict_warnings
    return summary
