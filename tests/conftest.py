# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: tests/conftest.py

"""Shared fixtures: fake subprocess.run, clean env, root logger reset."""

from __future__ import annotations

import logging
import subprocess
from typing import Iterator

import pytest

from .helpers import FakeRun


@pytest.fixture
def fake_run(monkeypatch: pytest.MonkeyPatch) -> FakeRun:
    fake = FakeRun()
    monkeypatch.setattr(subprocess, "run", fake)
    return fake


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "BUILD_TYPE",
        "BUILD_DIR",
        "SOURCE_DIR",
        "JOBS",
        "VERBOSITY",
        "CMAKE",
        "CTEST",
        "CI_PLATFORM",
    ):
        monkeypatch.delenv(name, raising=False)
        monkeypatch.delenv(f"MATHOPS_{name}", raising=False)


@pytest.fixture(autouse=True)
def _restore_root_handlers() -> Iterator[None]:
    """Undo handlers installed by configure_logger during a test."""
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    yield
    for h in list(root.handlers):
        if h not in before:
            root.removeHandler(h)
            h.close()
    root.setLevel(level)
