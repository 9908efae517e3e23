# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/mathops/__init__.py

"""mathops: fixed-width integer math and CMake/CTest CI automation.

Main Components:

math_operations:
    Two's-complement integer addition with a native 32-bit default width,
    selectable wraparound or trapping overflow, and the ``mathops-add`` CLI.

ci:
    Command-line tools that drive a CMake/CTest project:
    - ci-build: configure, build and test one configuration
    - ci-regress: run a YAML-defined matrix of ci-build jobs
    - ci-report: summarize build manifests

settings:
    Environment-variable configuration helpers

utils:
    Common utilities used across the package
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as pkg_version

from mathops.math_operations import INT_BITS, INT_MAX, INT_MIN, add

try:
    __version__ = pkg_version("mathops")
except PackageNotFoundError:
    __version__ = "0+local"

__all__ = ["INT_BITS", "INT_MAX", "INT_MIN", "add", "__version__"]
