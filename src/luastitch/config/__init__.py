# src/luastitch/config/__init__.py

"""Configuration handling for luastitch.

This module provides configuration loading, validation and resolution.
"""

from .config_loader import (
    CONFIG_CANDIDATES,
    find_config,
    load_and_validate_config,
    load_config,
)
from .config_resolve import load_processor_config, resolve_config
from .config_types import (
    BundleConfigResolved,
    MetaConfigResolved,
    Operation,
    OriginType,
    RootConfig,
)
from .config_validate import ValidationSummary, validate_config


__all__ = [  # noqa: RUF022
    # config_loader
    "CONFIG_CANDIDATES",
    "find_config",
    "load_and_validate_config",
    "load_config",
    # config_resolve
    "load_processor_config",
    "resolve_config",
    # config_types
    "BundleConfigResolved",
    "MetaConfigResolved",
    "Operation",
    "OriginType",
    "RootConfig",
    # config_validate
    "ValidationSummary",
    "validate_config",
]
