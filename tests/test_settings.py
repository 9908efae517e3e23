# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: tests/test_settings.py

from __future__ import annotations

import pytest

from mathops import settings


def test_defaults_when_unset() -> None:
    assert settings.get_str_setting("BUILD_TYPE", "Release") == "Release"
    assert settings.get_int_setting("JOBS", 2) == 2


def test_plain_name_beats_prefixed(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BUILD_TYPE", "Debug")
    monkeypatch.setenv("MATHOPS_BUILD_TYPE", "Release")
    assert settings.get_str_setting("BUILD_TYPE", "x") == "Debug"


def test_prefixed_name_used(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MATHOPS_JOBS", "0x10")
    assert settings.get_int_setting("JOBS", 2) == 16


def test_empty_string_is_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BUILD_DIR", "")
    assert settings.get_str_setting("BUILD_DIR", "build") == "build"


def test_bad_int_falls_through(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("JOBS", "many")
    monkeypatch.setenv("MATHOPS_JOBS", "3")
    assert settings.get_int_setting("JOBS", 2) == 3

