# src/luastitch/config/config_loader.py


import argparse
from pathlib import Path
from typing import Any, cast

from luastitch.logs import get_app_logger
from luastitch.meta import PROGRAM_CONFIG
from luastitch.utils import (
    load_jsonc,
    load_toml,
    plural,
    remove_path_in_error_message,
)

from .config_types import RootConfig
from .config_validate import ValidationSummary, validate_config


# preferred first when several exist in the same directory
CONFIG_CANDIDATES = (
    f".{PROGRAM_CONFIG}.jsonc",
    f".{PROGRAM_CONFIG}.json",
    f"{PROGRAM_CONFIG}.toml",
)


def find_config(
    args: argparse.Namespace,
    cwd: Path,
    *,
    missing_level: str = "debug",
) -> Path | None:
    """Locate a configuration file.

    Search order:
      1. Explicit path from CLI (--config)
      2. The candidate names in `cwd`, then in each parent directory

    Returns the first matching path, or None if no config was found.
    """
    logger = get_app_logger()

    # --- 1. Explicit config path ---
    if getattr(args, "config", None):
        config = Path(args.config).expanduser().resolve()
        logger.trace(f"[find_config] Checking explicit path: {config}")
        if not config.exists():
            xmsg = f"Specified config file not found: {config}"
            raise FileNotFoundError(xmsg)
        if config.is_dir():
            xmsg = f"Specified config path is a directory, not a file: {config}"
            raise ValueError(xmsg)
        return config

    # --- 2. Default candidates, closest to cwd wins ---
    current = cwd
    while True:
        found = [current / name for name in CONFIG_CANDIDATES]
        found = [p for p in found if p.is_file()]
        if found:
            if len(found) > 1:
                names = ", ".join(p.name for p in found)
                logger.warning(
                    "Multiple config files detected (%s); using %s.",
                    names,
                    found[0].name,
                )
            return found[0]
        parent = current.parent
        if parent == current:  # Reached filesystem root
            break
        current = parent

    logger.log_dynamic(missing_level, f"No config file found in {cwd} or parents")
    return None


def load_config(config_path: Path) -> dict[str, Any] | None:
    """Load configuration data from a JSON, JSONC or TOML file.

    Returns None for intentionally empty configs.

    Raises:
        ValueError: If the file can't be parsed.
        TypeError: If the top level is not an object.
    """
    logger = get_app_logger()
    logger.trace(f"[load_config] Loading from {config_path} ({config_path.suffix})")

    try:
        if config_path.suffix == ".toml":
            raw: Any = load_toml(config_path)
        else:
            raw = load_jsonc(config_path)
    except ValueError as e:
        clean_msg = remove_path_in_error_message(str(e), config_path)
        xmsg = (
            f"Error while loading configuration file '{config_path.name}': {clean_msg}"
        )
        raise ValueError(xmsg) from e

    if not raw:
        return None
    if not isinstance(raw, dict):
        xmsg = (
            f"Invalid top-level value in {config_path.name}:"
            f" {type(raw).__name__} (expected an object)"
        )
        raise TypeError(xmsg)
    return cast("dict[str, Any]", raw)


def _validation_summary(summary: ValidationSummary, config_path: Path) -> None:
    """Pretty-print a validation summary."""
    logger = get_app_logger()
    mode = "strict mode" if summary.strict else "lenient mode"

    counts = []
    if summary.errors:
        counts.append(f"{len(summary.errors)} error{plural(summary.errors)}")
    if summary.strict_warnings:
        counts.append(
            f"{len(summary.strict_warnings)} strict warning"
            f"{plural(summary.strict_warnings)}"
        )
    if summary.warnings:
        counts.append(f"{len(summary.warnings)} warning{plural(summary.warnings)}")
    counts_msg = f"\nFound {', '.join(counts)}." if counts else ""

    if not summary.valid:
        logger.error(
            "Failed to validate configuration file %s (%s).%s",
            config_path.name,
            mode,
            counts_msg,
        )
    elif counts:
        logger.warning(
            "Validated configuration file %s (%s) with warnings.%s",
            config_path.name,
            mode,
            counts_msg,
        )
    else:
        logger.debug("Validated %s (%s) successfully.", config_path.name, mode)

    if summary.errors:
        logger.error("\nErrors:\n  • %s", "\n  • ".join(summary.errors))
    if summary.strict_warnings:
        logger.error(
            "\nStrict warnings (treated as errors):\n  • %s",
            "\n  • ".join(summary.strict_warnings),
        )
    if summary.warnings:
        logger.warning(
            "\nWarnings (non-fatal):\n  • %s", "\n  • ".join(summary.warnings)
        )


def load_and_validate_config(
    args: argparse.Namespace,
    cwd: Path | None = None,
) -> tuple[Path, RootConfig, ValidationSummary] | None:
    """Find, load and validate the user's configuration.

    Also applies the config's `log_level` early (CLI and env still win).

    Returns:
        (config_path, root_cfg, validation_summary), or None if no config
        was found or it was empty.

    Raises:
        ValueError: If the configuration is invalid.
    """
    logger = get_app_logger()
    cwd = (cwd or Path.cwd()).resolve()

    config_path = find_config(args, cwd)
    if config_path is None:
        return None

    raw_config = load_config(config_path)
    if raw_config is None:
        return None

    summary = validate_config(raw_config)
    _validation_summary(summary, config_path)
    if not summary.valid:
        xmsg = f"Configuration file {config_path.name} contains validation errors."
        raise ValueError(xmsg)

    raw_log_level = raw_config.get("log_level")
    if isinstance(raw_log_level, str) and raw_log_level:
        logger.setLevel(
            logger.determine_log_level(args=args, root_log_level=raw_log_level)
        )

    return config_path, cast("RootConfig", raw_config), summary
