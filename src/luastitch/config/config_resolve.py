# src/luastitch/config/config_resolve.py


import argparse
import copy
from pathlib import Path
from typing import Any

from luastitch.constants import (
    DEFAULT_EXTENSIONS,
    DEFAULT_IGNORE_IMPORTS,
    DEFAULT_INDENT,
    DEFAULT_INPUT,
    DEFAULT_OUT,
    DEFAULT_PROCESSOR,
    DEFAULT_PROCESSOR_CONFIG,
    DEFAULT_REJECT_PREFIX_COLLISIONS,
    DEFAULT_SORT_INPUTS,
    DEFAULT_STRICT_CONFIG,
    STDIN_ALIASES,
    STDOUT_ALIASES,
)
from luastitch.logs import get_app_logger
from luastitch.meta import PROGRAM_PACKAGE
from luastitch.utils import load_jsonc

from .config_types import (
    BundleConfigResolved,
    MetaConfigResolved,
    OriginType,
    RootConfig,
)


# --------------------------------------------------------------------------- #
# helpers
# --------------------------------------------------------------------------- #


def _resolve_location(
    key: str,
    *,
    cli_value: str | None,
    root_cfg: RootConfig,
    config_dir: Path,
    cwd: Path,
    default: str,
    stdio: frozenset[str],
    origins: dict[str, OriginType],  # modified
) -> str:
    """Resolve an input/output location.

    CLI values are relative to cwd, config values to the config's directory.
    The stdio aliases (`-`, `stdin`, `stdout`) pass through untouched.
    """
    if cli_value is not None:
        raw, root, origins[key] = cli_value, cwd, "cli"
    elif key in root_cfg:
        raw, root, origins[key] = str(root_cfg[key]), config_dir, "config"  # type: ignore[literal-required]
    else:
        raw, root, origins[key] = default, cwd, "default"

    if raw in stdio:
        return raw
    return str((root / Path(raw).expanduser()).resolve())


def _resolve_optional_path(
    key: str,
    *,
    cli_value: str | None,
    root_cfg: RootConfig,
    config_dir: Path,
    cwd: Path,
    origins: dict[str, OriginType],  # modified
) -> Path | None:
    if cli_value is not None:
        origins[key] = "cli"
        return (cwd / Path(cli_value).expanduser()).resolve()
    raw = root_cfg.get(key)
    if isinstance(raw, str) and raw:
        origins[key] = "config"
        return (config_dir / Path(raw).expanduser()).resolve()
    origins[key] = "default"
    return None


def _pick(
    key: str,
    *,
    cli_value: Any,
    root_cfg: RootConfig,
    default: Any,
    origins: dict[str, OriginType],  # modified
) -> Any:
    """CLI → config → default, recording where the value came from."""
    if cli_value is not None:
        origins[key] = "cli"
        return cli_value
    if key in root_cfg:
        origins[key] = "config"
        return root_cfg[key]  # type: ignore[literal-required]
    origins[key] = "default"
    return copy.deepcopy(default)


def load_processor_config(path: Path) -> dict[str, Any]:
    """Load a JSON/JSONC payload for the external processor.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If it is not a JSON object.
    """
    data = load_jsonc(path)
    if not isinstance(data, dict):
        xmsg = f"Processor config {path.name} must contain a JSON object"
        raise ValueError(xmsg)  # noqa: TRY004
    return data


# --------------------------------------------------------------------------- #
# main resolver
# --------------------------------------------------------------------------- #


def resolve_config(
    root_input: RootConfig | None,
    args: argparse.Namespace,
    config_dir: Path | None = None,
    cwd: Path | None = None,
    config_path: Path | None = None,
) -> BundleConfigResolved:
    """Merge CLI arguments, a loaded RootConfig and defaults.

    CLI beats config, which beats defaults. Paths from the config file are
    relative to its directory; paths from the CLI are relative to `cwd`.
    Also syncs the app logger to the resolved log level.
    """
    logger = get_app_logger()
    root_cfg: RootConfig = dict(root_input or {})  # type: ignore[assignment]
    cwd = (cwd or Path.cwd()).resolve()
    config_dir = (config_dir or cwd).resolve()
    logger.trace(
        f"[resolve_config] Resolving {len(root_cfg)} config key(s)"
        f" (config_dir={config_dir}, cwd={cwd})"
    )

    origins: dict[str, OriginType] = {}

    # ------------------------------
    # Locations
    # ------------------------------
    input_loc = _resolve_location(
        "input",
        cli_value=getattr(args, "input", None),
        root_cfg=root_cfg,
        config_dir=config_dir,
        cwd=cwd,
        default=DEFAULT_INPUT,
        stdio=STDIN_ALIASES,
        origins=origins,
    )
    out_loc = _resolve_location(
        "out",
        cli_value=getattr(args, "out", None),
        root_cfg=root_cfg,
        config_dir=config_dir,
        cwd=cwd,
        default=DEFAULT_OUT,
        stdio=STDOUT_ALIASES,
        origins=origins,
    )
    template = _resolve_optional_path(
        "template",
        cli_value=getattr(args, "template", None),
        root_cfg=root_cfg,
        config_dir=config_dir,
        cwd=cwd,
        origins=origins,
    )
    processor_path = _resolve_optional_path(
        "processor_path",
        cli_value=getattr(args, "processor_path", None),
        root_cfg=root_cfg,
        config_dir=config_dir,
        cwd=cwd,
        origins=origins,
    )

    # ------------------------------
    # Bundling options
    # ------------------------------
    extensions = _pick(
        "extensions",
        cli_value=None,
        root_cfg=root_cfg,
        default=DEFAULT_EXTENSIONS,
        origins=origins,
    )

    # --ignore-import adds to the configured list instead of replacing it
    ignore_imports = list(
        _pick(
            "ignore_imports",
            cli_value=None,
            root_cfg=root_cfg,
            default=DEFAULT_IGNORE_IMPORTS,
            origins=origins,
        )
    )
    cli_ignores = getattr(args, "ignore_import", None) or []
    if cli_ignores:
        origins["ignore_imports"] = "cli"
        ignore_imports.extend(i for i in cli_ignores if i not in ignore_imports)

    sort_inputs = _pick(
        "sort_inputs",
        cli_value=False if getattr(args, "no_sort", False) else None,
        root_cfg=root_cfg,
        default=DEFAULT_SORT_INPUTS,
        origins=origins,
    )
    reject_prefix_collisions = _pick(
        "reject_prefix_collisions",
        cli_value=False if getattr(args, "allow_prefix_collisions", False) else None,
        root_cfg=root_cfg,
        default=DEFAULT_REJECT_PREFIX_COLLISIONS,
        origins=origins,
    )
    entry = _pick(
        "entry",
        cli_value=getattr(args, "entry", None),
        root_cfg=root_cfg,
        default=None,
        origins=origins,
    )
    indent = _pick(
        "indent",
        cli_value=None,
        root_cfg=root_cfg,
        default=DEFAULT_INDENT,
        origins=origins,
    )

    # ------------------------------
    # Template variables
    # ------------------------------
    proj_name = _pick(
        "proj_name",
        cli_value=getattr(args, "proj_name", None),
        root_cfg=root_cfg,
        default=PROGRAM_PACKAGE,
        origins=origins,
    )
    # None until wrap-file needs it; then the installed version fills in
    proj_version = _pick(
        "proj_version",
        cli_value=getattr(args, "proj_version", None),
        root_cfg=root_cfg,
        default=None,
        origins=origins,
    )

    # ------------------------------
    # External processor
    # ------------------------------
    processor = _pick(
        "processor",
        cli_value=None,
        root_cfg=root_cfg,
        default=DEFAULT_PROCESSOR,
        origins=origins,
    )
    cli_processor_config = getattr(args, "processor_config", None)
    if cli_processor_config is not None:
        origins["processor_config"] = "cli"
        processor_config = load_processor_config(
            (cwd / Path(cli_processor_config).expanduser()).resolve()
        )
    else:
        processor_config = _pick(
            "processor_config",
            cli_value=None,
            root_cfg=root_cfg,
            default=DEFAULT_PROCESSOR_CONFIG,
            origins=origins,
        )

    # ------------------------------
    # Log level and strictness
    # ------------------------------
    #  log_level: arg -> env -> root -> default
    log_level = logger.determine_log_level(
        args=args, root_log_level=root_cfg.get("log_level")
    )
    logger.setLevel(log_level)

    strict_config = root_cfg.get("strict_config")
    if not isinstance(strict_config, bool):
        strict_config = DEFAULT_STRICT_CONFIG

    meta: MetaConfigResolved = {
        "cli_root": cwd,
        "config_root": config_dir,
        "config_path": config_path,
        "origins": origins,
    }

    resolved: BundleConfigResolved = {
        "input": input_loc,
        "out": out_loc,
        "extensions": list(extensions),
        "ignore_imports": ignore_imports,
        "sort_inputs": bool(sort_inputs),
        "reject_prefix_collisions": bool(reject_prefix_collisions),
        "entry": entry,
        "indent": indent,
        "template": template,
        "proj_name": proj_name,
        "proj_version": proj_version,
        "processor": processor,
        "processor_path": processor_path,
        "processor_config": processor_config,
        "log_level": log_level,
        "strict_config": strict_config,
        "__meta__": meta,
    }
    logger.trace(f"[resolve_config] Origins: {origins}")
    return resolved
