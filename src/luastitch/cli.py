# src/luastitch/cli.py

import argparse
import platform
import sys
from dataclasses import dataclass
from difflib import get_close_matches
from pathlib import Path
from typing import cast

from .actions import get_metadata
from .bundle import check_bundle, run_bundle
from .config import (
    BundleConfigResolved,
    Operation,
    RootConfig,
    load_and_validate_config,
    resolve_config,
)
from .constants import STDOUT_ALIASES
from .diagnostics import BundleError
from .external import run_external_processor
from .logs import get_app_logger
from .meta import (
    PROGRAM_DISPLAY,
    PROGRAM_SCRIPT,
)
from .templating import wrap_file
from .utils import plural
from .utils_logs import LEVEL_ORDER, safe_log


OPERATIONS: tuple[Operation, ...] = ("bundle-dir", "check", "wrap-file", "process-file")


# --------------------------------------------------------------------------- #
# CLI setup and helpers
# --------------------------------------------------------------------------- #


class HintingArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        # Build known option strings: ["-v", "--verbose", "--log-level", ...]
        known_opts: list[str] = []
        for action in self._actions:
            known_opts.extend([s for s in action.option_strings if s])

        hint_lines: list[str] = []
        # Argparse message for bad flags is typically
        # "unrecognized arguments: --ignor-import ..."
        if "unrecognized arguments:" in message:
            bad = message.split("unrecognized arguments:", 1)[1].strip()
            bad_args = [tok for tok in bad.split() if tok.startswith("-")]
            for arg in bad_args:
                close = get_close_matches(arg, known_opts, n=1, cutoff=0.6)
                if close:
                    hint_lines.append(f"Hint: did you mean {close[0]}?")
        # "argument OPERATION: invalid choice: 'bundle' (choose from ...)"
        elif "invalid choice:" in message:
            bad = message.split("invalid choice:", 1)[1].split("(", 1)[0]
            close = get_close_matches(bad.strip(" '"), OPERATIONS, n=1, cutoff=0.5)
            if close:
                hint_lines.append(f"Hint: did you mean {close[0]}?")

        self.print_usage(sys.stderr)
        full = f"{self.prog}: error: {message}"
        if hint_lines:
            full += "\n" + "\n".join(hint_lines)
        self.exit(2, full + "\n")


def _setup_parser() -> argparse.ArgumentParser:
    """Define and return the CLI argument parser."""
    parser = HintingArgumentParser(
        prog=PROGRAM_SCRIPT,
        description="Bundle Luau modules into one module.",
    )

    parser.add_argument(
        "operation",
        nargs="?",
        choices=OPERATIONS,
        metavar="OPERATION",
        help=(
            "bundle-dir: bundle a directory (-i DIR). "
            "check: report every problem in a directory without writing. "
            "wrap-file: wrap one script in the entrypoint template. "
            "process-file: run one file through the external processor."
        ),
    )

    # --- Locations ---
    parser.add_argument(
        "-i",
        "--input",
        help="Input directory or file; '-' or 'stdin' reads stdin where allowed.",
    )
    parser.add_argument(
        "-o",
        "--out",
        "--output",
        dest="out",
        help="Output file; '-' or 'stdout' writes to stdout (default).",
    )
    parser.add_argument("-c", "--config", help="Path to config file.")

    # --- Bundling ---
    parser.add_argument(
        "--ignore-import",
        action="append",
        metavar="NAME",
        help=(
            "Leave require() calls for NAME (and NAME/...) untouched. "
            "Repeatable; extends the configured list."
        ),
    )
    parser.add_argument(
        "--entry",
        metavar="PATH",
        help="Module whose namespace table the bundle returns.",
    )
    parser.add_argument(
        "--no-sort",
        action="store_true",
        help="Visit input files in filesystem order instead of sorted order.",
    )
    parser.add_argument(
        "--allow-prefix-collisions",
        action="store_true",
        help="Warn instead of failing when two modules share a namespace.",
    )

    # --- wrap-file ---
    parser.add_argument("--template", help="Template for wrap-file.")
    parser.add_argument("--proj-name", help="Project name passed to the template.")
    parser.add_argument(
        "--proj-version", help="Project version passed to the template."
    )

    # --- process-file ---
    parser.add_argument(
        "--processor-path", help="Explicit path to the external processor."
    )
    parser.add_argument(
        "--processor-config",
        metavar="FILE",
        help="JSON/JSONC file replacing the processor configuration.",
    )

    # --- Color ---
    color = parser.add_mutually_exclusive_group()
    color.add_argument(
        "--no-color",
        dest="enable_color",
        action="store_const",
        const=False,
        help="Disable ANSI color output.",
    )
    color.add_argument(
        "--color",
        dest="enable_color",
        action="store_const",
        const=True,
        help="Force-enable ANSI color output (overrides auto-detect).",
    )
    color.set_defaults(enable_color=None)

    # --- Version and verbosity ---
    parser.add_argument("--version", action="store_true", help="Show version info.")

    log_level = parser.add_mutually_exclusive_group()
    log_level.add_argument(
        "-q",
        "--quiet",
        action="store_const",
        const="warning",
        dest="log_level",
        help="Suppress non-critical output (same as --log-level warning).",
    )
    log_level.add_argument(
        "-v",
        "--verbose",
        action="store_const",
        const="debug",
        dest="log_level",
        help="Verbose output (same as --log-level debug).",
    )
    log_level.add_argument(
        "--log-level",
        choices=LEVEL_ORDER,
        default=None,
        dest="log_level",
        help="Set log verbosity level.",
    )
    return parser


# --------------------------------------------------------------------------- #
# Main entry helpers
# --------------------------------------------------------------------------- #


@dataclass
class _LoadedConfig:
    """Container for loaded and resolved configuration data."""

    config_path: Path | None
    root_cfg: RootConfig
    resolved: BundleConfigResolved
    config_dir: Path
    cwd: Path


def _initialize_logger(args: argparse.Namespace) -> None:
    """Initialize logger with CLI args, env vars, and defaults."""
    logger = get_app_logger()
    log_level = logger.determine_log_level(args=args)
    logger.setLevel(log_level)
    if args.enable_color is not None:
        logger.enable_color = args.enable_color
    logger.trace(f"[BOOT] log-level initialized: {logger.level_name}")
    logger.debug(
        "Runtime: Python %s (%s)\n    %s",
        platform.python_version(),
        platform.python_implementation(),
        sys.version.replace("\n", " "),
    )


def _handle_early_exits(
    args: argparse.Namespace, parser: argparse.ArgumentParser
) -> int | None:
    """Handle --version and a missing operation.

    Returns exit code if we should exit early, None otherwise.
    """
    logger = get_app_logger()

    if getattr(args, "version", None):
        meta = get_metadata()
        logger.info("%s %s (%s)", PROGRAM_DISPLAY, meta.version, meta.commit)
        return 0

    if args.operation is None:
        parser.print_usage(sys.stderr)
        logger.error("No operation given (choose from: %s).", ", ".join(OPERATIONS))
        return 2

    return None


def _load_and_resolve_config(args: argparse.Namespace) -> _LoadedConfig:
    """Load config and resolve final configuration."""
    logger = get_app_logger()

    config_path: Path | None = None
    root_cfg: RootConfig | None = None
    config_result = load_and_validate_config(args)
    if config_result is not None:
        config_path, root_cfg, _validation_summary = config_result

    logger.trace(f"[CONFIG] log-level re-resolved from config: {logger.level_name}")

    cwd = Path.cwd().resolve()
    config_dir = config_path.parent if config_path else cwd

    if root_cfg is None:
        root_cfg = cast("RootConfig", {})

    resolved = resolve_config(root_cfg, args, config_dir, cwd, config_path)
    return _LoadedConfig(
        config_path=config_path,
        root_cfg=root_cfg,
        resolved=resolved,
        config_dir=config_dir,
        cwd=cwd,
    )


def _run_check(resolved: BundleConfigResolved) -> int:
    logger = get_app_logger()
    problems = check_bundle(resolved)
    for diag in problems:
        logger.log_diagnostic(diag)
    if problems:
        files = {d.path for d in problems}
        logger.error(
            "Found %d problem%s in %d file%s.",
            len(problems),
            plural(problems),
            len(files),
            plural(files),
        )
        return 1
    logger.info("✅ No problems found.")
    return 0


def _execute(operation: Operation, resolved: BundleConfigResolved) -> int:
    if operation == "check":
        return _run_check(resolved)

    if operation == "bundle-dir":
        run_bundle(resolved)
    elif operation == "wrap-file":
        proj_version = resolved["proj_version"]
        if proj_version is None:
            proj_version = get_metadata().version
        wrap_file(
            resolved["input"],
            resolved["out"],
            proj_name=resolved["proj_name"],
            proj_version=proj_version,
            template=resolved["template"],
        )
    else:
        run_external_processor(
            resolved["input"],
            resolved["out"],
            tool=resolved["processor"],
            tool_path=resolved["processor_path"],
            config=resolved["processor_config"],
        )
    return 0


# --------------------------------------------------------------------------- #
# Main entry
# --------------------------------------------------------------------------- #


def main(argv: list[str] | None = None) -> int:
    logger = get_app_logger()  # init (use env + defaults)

    try:
        parser = _setup_parser()
        args = parser.parse_args(argv)

        # --- Early runtime init (use CLI + env + defaults) ---
        _initialize_logger(args)

        early_exit_code = _handle_early_exits(args, parser)
        if early_exit_code is not None:
            return early_exit_code

        config = _load_and_resolve_config(args)
        operation = cast("Operation", args.operation)

        # keep stdout clean for the generated code
        writes_stdout = config.resolved["out"] in STDOUT_ALIASES
        logger.reserve_stdout(writes_stdout and operation != "check")

        if config.config_path:
            logger.debug("🔧 Using config: %s", config.config_path.name)
        else:
            logger.debug("🔧 Running in CLI-only mode (no config file).")
        logger.debug("📁 Config root: %s", config.config_dir)
        logger.debug("📂 Invoked from: %s", config.cwd)

        return _execute(operation, config.resolved)

    except BundleError as e:
        # problems in the input modules: show every diagnostic
        try:
            for diag in e.diagnostics:
                logger.log_diagnostic(diag)
        except Exception:  # noqa: BLE001
            safe_log(f"[FATAL] Logging failed while reporting: {e}")
        return 1

    except (FileNotFoundError, ValueError, TypeError, RuntimeError) as e:
        # controlled termination
        try:
            logger.error_if_not_debug(str(e))
        except Exception:  # noqa: BLE001
            safe_log(f"[FATAL] Logging failed while reporting: {e}")
        return 1

    except Exception as e:  # noqa: BLE001
        # unexpected internal error
        try:
            logger.critical_if_not_debug("Unexpected internal error: %s", e)
        except Exception:  # noqa: BLE001
            safe_log(f"[FATAL] Logging failed while reporting: {e}")
        return 1

    finally:
        logger.reserve_stdout(False)
