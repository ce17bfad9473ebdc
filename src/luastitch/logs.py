# src/luastitch/logs.py

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, cast

from .meta import PROGRAM_PACKAGE
from .utils_logs import RED, YELLOW, CLILogger


if TYPE_CHECKING:
    from .diagnostics import Diagnostic


class AppLogger(CLILogger):
    """App-specific logger class."""

    def log_diagnostic(
        self, diag: Diagnostic, *, level: int = logging.ERROR
    ) -> None:
        """Render a Diagnostic with its location, excerpt and hint."""
        color = YELLOW if level == logging.WARNING else RED
        head = self.colorize(diag.location(), color)
        self.log(level, "%s: %s", head, diag.message)
        if diag.source_text:
            for line in diag.source_text.splitlines():
                self.log(level, "    | %s", line)
        if diag.hint:
            self.log(level, "    = %s", diag.hint)


# --- Logger initialization ---------------------------------------------------

# Force the logging module to use the Logger class globally.
# This must happen *before* any loggers are created.
AppLogger.extend_logging_module()
logging.setLoggerClass(AppLogger)

_APP_LOGGER = cast("AppLogger", logging.getLogger(PROGRAM_PACKAGE))


# --- Convenience utils ---------------------------------------------------------


def get_app_logger() -> AppLogger:
    """Return the configured app logger."""
    return _APP_LOGGER
