# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/mathops/settings.py

"""Environment-variable configuration for the command-line tools.

Configuration Precedence:
    1. Environment variable NAME
    2. Environment variable MATHOPS_NAME
    3. Default value

Functions:
    get_str_setting: Resolve string configuration
    get_int_setting: Resolve integer configuration (supports hex with 0x)

Recognized settings:
    BUILD_TYPE, BUILD_DIR, SOURCE_DIR, JOBS, VERBOSITY, CMAKE, CTEST,
    CI_PLATFORM

Example:
    >>> jobs = get_int_setting("JOBS", 4)
    >>> build_type = get_str_setting("BUILD_TYPE", "Release")
"""

from __future__ import annotations

import logging
import os

logger = logging.getLogger(__name__)

ENV_PREFIX = "MATHOPS_"


def _keys(name: str) -> tuple[str, str]:
    return name, f"{ENV_PREFIX}{name}"


def get_str_setting(name: str, default: str) -> str:
    """Resolve a string setting: NAME > MATHOPS_NAME > default (always returns str).

    Empty values are treated as unset, like ``${VAR:-default}`` in a shell.
    """
    for key in _keys(name):
        v = os.environ.get(key)
        if v:
            return v
    return default


def get_int_setting(name: str, default: int) -> int:
    """Resolve an int setting: NAME > MATHOPS_NAME > default (always returns int)."""
    for key in _keys(name):
        v = os.environ.get(key)
        if v is not None:
            try:
                return int(v, 0)  # supports 10/16 prefixes (e.g., "0x10")
            except ValueError:
                logger.warning("Ignoring non-integer %s=%r", key, v)
                continue  # try the MATHOPS_ variant, then fall through to default
    return default
