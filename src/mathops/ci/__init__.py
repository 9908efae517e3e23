# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/mathops/ci/__init__.py

"""CI tools package.

This package provides command-line tools for configuring, building and
testing a CMake project with CTest, on Unix and Windows hosts.

Command-line tools:
- ci-build: Configure, build and test one build type (Release or Debug)
- ci-regress: Run a YAML-defined matrix of ci-build jobs
- ci-report: Generate reports from ci-build manifests
"""
