# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: tests/helpers.py

"""Test doubles shared by the ci tool tests."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass, field
from typing import Callable, Sequence


@dataclass
class FakeRun:
    """Stand-in for subprocess.run: records commands, returns scripted codes."""

    rc_for: Callable[[list[str]], int] = lambda cmd: 0
    missing: set[str] = field(default_factory=set)
    calls: list[list[str]] = field(default_factory=list)

    def __call__(
        self, cmd: Sequence[str], check: bool = False, **kwargs: object
    ) -> subprocess.CompletedProcess:
        cmd = [str(c) for c in cmd]
        self.calls.append(cmd)
        if cmd[0] in self.missing:
            raise FileNotFoundError(cmd[0])
        return subprocess.CompletedProcess(cmd, self.rc_for(cmd))
