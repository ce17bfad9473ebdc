# src/luastitch/config/config_types.py


from pathlib import Path
from typing import Any, Literal, TypedDict

from typing_extensions import NotRequired


OriginType = Literal["cli", "config", "default"]

Operation = Literal["bundle-dir", "check", "wrap-file", "process-file"]


class RootConfig(TypedDict, total=False):
    """Keys accepted in `.luastitch.jsonc` / `luastitch.toml`."""

    input: str
    out: str
    extensions: list[str]
    ignore_imports: list[str]
    sort_inputs: bool
    reject_prefix_collisions: bool
    entry: str
    indent: str
    template: str
    proj_name: str
    proj_version: str
    processor: str
    processor_path: str
    processor_config: dict[str, Any]
    log_level: str
    strict_config: bool


class MetaConfigResolved(TypedDict):
    # sources of parameters
    cli_root: Path
    config_root: Path
    config_path: Path | None
    origins: dict[str, OriginType]


# Resolved config - all fields are present with final values
class BundleConfigResolved(TypedDict):
    input: str  # path, or "-" for stdin
    out: str  # path, or "-" for stdout
    extensions: list[str]
    ignore_imports: list[str]
    sort_inputs: bool
    reject_prefix_collisions: bool
    entry: str | None
    indent: str
    template: Path | None
    proj_name: str
    proj_version: str | None
    processor: str
    processor_path: Path | None
    processor_config: dict[str, Any]
    log_level: str
    strict_config: bool

    # meta only
    __meta__: NotRequired[MetaConfigResolved]
