# src/luastitch/constants.py
"""Central constants used across the project."""

from typing import Any


# --- env keys ---
DEFAULT_ENV_LOG_LEVEL: str = "LOG_LEVEL"

# --- program defaults ---
DEFAULT_LOG_LEVEL: str = "info"

# --- config defaults ---
DEFAULT_STRICT_CONFIG: bool = True
DEFAULT_INPUT: str = "-"
DEFAULT_OUT: str = "-"
DEFAULT_EXTENSIONS: list[str] = [".luau", ".lua"]
DEFAULT_IGNORE_IMPORTS: list[str] = ["@antiraid"]
DEFAULT_SORT_INPUTS: bool = True
DEFAULT_REJECT_PREFIX_COLLISIONS: bool = True
DEFAULT_INDENT: str = "\t"

# --- stdio aliases for -i / -o ---
STDIN_ALIASES: frozenset[str] = frozenset({"-", "stdin"})
STDOUT_ALIASES: frozenset[str] = frozenset({"-", "stdout"})

# --- bundling ---
IMPORT_PRIMITIVE: str = "require"
PREFIX_JOINER: str = "__"
MAX_PARSE_ERRORS: int = 20
# syntax trees nest one level per operator or block
RECURSION_LIMIT: int = 10_000

# --- wrap-file template ---
DEFAULT_TEMPLATE_NAME: str = "entrypoint.luau"

# --- process-file (external tool) ---
DEFAULT_PROCESSOR: str = "darklua"

# Raw JSON payload handed to the external tool; a user file replaces it wholesale.
DEFAULT_PROCESSOR_CONFIG: dict[str, Any] = {
    "generator": "readable",
    "bundle": {
        "require_mode": "path",
        "excludes": ["@antiraid/*"],
    },
}
