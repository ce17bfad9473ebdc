# src/luastitch/utils_logs.py
"""Terminal logging for the luastitch command line.

Progress (info, debug, trace) goes to stdout and problems (warning and up)
go to stderr, each level tagged and optionally colored. When stdout carries
a bundle, `reserve_stdout()` moves every record to stderr.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from contextlib import suppress
from typing import Any, TextIO, cast

from .constants import DEFAULT_ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL
from .meta import PROGRAM_ENV


# --- Levels and styles ---------------------------------------------------------

RESET = "\033[0m"
GRAY = "\033[90m"
CYAN = "\033[36m"
YELLOW = "\033[93m"
RED = "\033[91m"

TRACE_LEVEL = logging.DEBUG - 5
SILENT_LEVEL = logging.CRITICAL + 1

# accepted by --log-level and the `log_level` config key, most verbose first
LEVEL_ORDER = ["trace", "debug", "info", "warning", "error", "critical", "silent"]

# level name -> (color, prefix); info is printed bare
TAG_STYLES = {
    "TRACE": (GRAY, "[TRACE]"),
    "DEBUG": (CYAN, "[DEBUG]"),
    "WARNING": (YELLOW, "⚠️ "),
    "ERROR": (RED, "❌ "),
    "CRITICAL": (RED, "💥 "),
}


def safe_log(msg: str) -> None:
    """Write straight to the interpreter's original stderr.

    Used when the logger itself raised while reporting an error.
    """
    stream = cast("TextIO", sys.__stderr__)
    try:
        print(msg, file=stream)
    except Exception:  # noqa: BLE001
        with suppress(Exception):
            stream.write(f"[INTERNAL] {msg}\n")


def _env_log_level() -> str | None:
    for name in (f"{PROGRAM_ENV}_{DEFAULT_ENV_LOG_LEVEL}", DEFAULT_ENV_LOG_LEVEL):
        value = os.getenv(name)
        if value:
            return value
    return None


def _color_wanted() -> bool:
    if "NO_COLOR" in os.environ:
        return False
    if os.getenv("FORCE_COLOR", "").lower() in {"1", "true", "yes"}:
        return True
    return sys.stdout.isatty()


# --- Logger --------------------------------------------------------------------


class CLILogger(logging.Logger):
    """A logger that owns its single handler and knows the CLI's levels."""

    enable_color: bool = False

    _levels_registered: bool = False

    def __init__(
        self,
        name: str,
        level: int = logging.NOTSET,
        *,
        enable_color: bool | None = None,
    ) -> None:
        super().__init__(name, level)
        if self.level == logging.NOTSET:
            self.setLevel(self.determine_log_level())
        self.enable_color = _color_wanted() if enable_color is None else enable_color
        self.propagate = False
        self.stdout_reserved = False
        self._bound_streams: tuple[TextIO, TextIO] | None = None

    @classmethod
    def extend_logging_module(cls) -> bool:
        """Register TRACE and SILENT with `logging` and install this class.

        Only the first call does anything; it returns False afterwards.
        """
        if cls._levels_registered:
            return False
        cls._levels_registered = True
        logging.setLoggerClass(cls)
        for value, name in ((TRACE_LEVEL, "TRACE"), (SILENT_LEVEL, "SILENT")):
            logging.addLevelName(value, name)
            setattr(logging, name, value)
        return True

    # --- handler ---

    def _attach_handler(self) -> None:
        # tests and callers swap sys.stdout/sys.stderr; follow them
        streams = (sys.stdout, sys.stderr)
        if self.handlers and self._bound_streams == streams:
            return
        handler = DualStreamHandler()
        handler.setFormatter(TagFormatter("%(message)s"))
        handler.enable_color = self.enable_color
        handler.stdout_reserved = self.stdout_reserved
        self.handlers[:] = [handler]
        self._bound_streams = streams

    def _log(  # type: ignore[override]
        self, level: int, msg: str, args: tuple[Any, ...], **kwargs: Any
    ) -> None:
        self._attach_handler()
        super()._log(level, msg, args, **kwargs)

    def reserve_stdout(self, reserved: bool = True) -> None:
        """Send every record to stderr while stdout carries program output."""
        self.stdout_reserved = reserved
        for handler in self.handlers:
            if isinstance(handler, DualStreamHandler):
                handler.stdout_reserved = reserved

    # --- levels ---

    def setLevel(self, level: int | str) -> None:  # noqa: N802
        super().setLevel(level.upper() if isinstance(level, str) else level)

    @property
    def level_name(self) -> str:
        return logging.getLevelName(self.getEffectiveLevel())

    def determine_log_level(
        self,
        *,
        args: argparse.Namespace | None = None,
        root_log_level: str | None = None,
    ) -> str:
        """Pick the level name: --log-level, then the environment, then config."""
        for candidate in (
            getattr(args, "log_level", None),
            _env_log_level(),
            root_log_level,
        ):
            if candidate:
                return str(candidate).upper()
        return DEFAULT_LOG_LEVEL.upper()

    # --- emitting ---

    def trace(self, msg: str, *args: Any, **kwargs: Any) -> None:
        if self.isEnabledFor(TRACE_LEVEL):
            self._log(TRACE_LEVEL, msg, args, **kwargs)

    def log_dynamic(
        self, level: str | int, msg: str, *args: Any, **kwargs: Any
    ) -> None:
        """Log at a level given by name or number (e.g. from config)."""
        level_no = level
        if isinstance(level, str):
            level_no = logging.getLevelName(level.upper())
        if not isinstance(level_no, int):
            self.error("Unknown log level: %r", level)
            return
        if self.isEnabledFor(level_no):
            self._log(level_no, msg, args, **kwargs)

    def _report(self, level: int, msg: str, args: tuple[Any, ...], kwargs: Any) -> None:
        # the traceback is only worth showing to someone debugging
        if self.isEnabledFor(logging.DEBUG):
            kwargs.setdefault("exc_info", True)
            kwargs.setdefault("stacklevel", 3)
            self.log(level, msg, *args, **kwargs)
        else:
            self.log(level, msg, *args)

    def error_if_not_debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log an error; the active exception's traceback joins it at debug."""
        self._report(logging.ERROR, msg, args, kwargs)

    def critical_if_not_debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Like `error_if_not_debug`, at CRITICAL."""
        self._report(logging.CRITICAL, msg, args, kwargs)

    def colorize(
        self, text: str, color: str, *, enable_color: bool | None = None
    ) -> str:
        use_color = self.enable_color if enable_color is None else enable_color
        return f"{color}{text}{RESET}" if use_color else text


# --- Formatting and routing ----------------------------------------------------


class TagFormatter(logging.Formatter):
    """Prefix each message with its level tag, colored when asked to."""

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        color, tag = TAG_STYLES.get(record.levelname, ("", ""))
        if not tag:
            return text
        if color and getattr(record, "enable_color", False):
            tag = f"{color}{tag}{RESET}"
        return f"{tag} {text}"


class DualStreamHandler(logging.StreamHandler):  # type: ignore[type-arg]
    """Send info/debug/trace to stdout, everything else to stderr."""

    enable_color: bool = False
    stdout_reserved: bool = False

    def _stream_for(self, record: logging.LogRecord) -> TextIO:
        if record.levelno >= logging.WARNING or self.stdout_reserved:
            return sys.stderr
        return sys.stdout

    def emit(self, record: logging.LogRecord) -> None:
        self.stream = self._stream_for(record)
        record.enable_color = self.enable_color
        super().emit(record)
