# src/luastitch/meta.py
"""Program identity: names used for the CLI, env vars and config files."""

from dataclasses import dataclass


PROGRAM_PACKAGE = "luastitch"
PROGRAM_SCRIPT = "luastitch"
PROGRAM_DISPLAY = "Luastitch"
PROGRAM_ENV = "LUASTITCH"
PROGRAM_CONFIG = "luastitch"


@dataclass(frozen=True)
class Metadata:
    """Version and commit of the running tool."""

    version: str
    commit: str

    def __str__(self) -> str:
        return f"{self.version} ({self.commit})"
