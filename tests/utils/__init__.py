# tests/utils/__init__.py

from .bundleconfig import (
    make_bundle_cfg,
    make_meta,
    make_module,
    write_config_file,
    write_modules,
)
from .constants import DEFAULT_TEST_LOG_LEVEL, FIXTURES_DIR, PROJ_ROOT
from .patch_everywhere import patch_everywhere
from .test_trace import TEST_TRACE, make_test_trace


__all__ = [  # noqa: RUF022
    # bundleconfig
    "make_bundle_cfg",
    "make_meta",
    "make_module",
    "write_config_file",
    "write_modules",
    # constants
    "DEFAULT_TEST_LOG_LEVEL",
    "FIXTURES_DIR",
    "PROJ_ROOT",
    # patch_everywhere
    "patch_everywhere",
    # test_trace
    "TEST_TRACE",
    "make_test_trace",
]
