# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: tests/test_ci_build.py

from __future__ import annotations

import json
from pathlib import Path

import pytest

from mathops import utils
from mathops.ci import ci_build

from .helpers import FakeRun


def _cfg(tmp_path: Path, **kw: object) -> ci_build.BuildCfg:
    base: dict = {
        "build_type": "Release",
        "source_dir": tmp_path / "src",
        "build_dir": tmp_path / "build",
        "jobs": 4,
        "platform": "unix",
    }
    base.update(kw)
    return ci_build.BuildCfg(**base)


def test_unix_commands(tmp_path: Path) -> None:
    cfg = _cfg(tmp_path)
    b = str(cfg.build_dir)
    steps = ci_build.step_commands(cfg)
    assert [name for name, _ in steps] == ["configure", "build", "test"]
    assert steps[0][1] == [
        "cmake",
        "-S",
        str(cfg.source_dir),
        "-B",
        b,
        "-DCMAKE_BUILD_TYPE=Release",
    ]
    assert steps[1][1] == [
        "cmake", "--build", b, "--config", "Release", "--", "-j", "4"
    ]
    assert steps[2][1] == [
        "ctest", "--test-dir", b, "--output-on-failure", "-C", "Release", "-j", "4"
    ]


def test_windows_build_uses_parallel_flag(tmp_path: Path) -> None:
    cfg = _cfg(tmp_path, platform="windows", build_type="Debug", jobs=3)
    assert ci_build.build_cmd(cfg)[-4:] == ["--config", "Debug", "--parallel", "3"]
    assert "-C" in ci_build.ctest_cmd(cfg)


def test_cmake_args_appended_to_configure(tmp_path: Path) -> None:
    cfg = _cfg(tmp_path, cmake_args=["-G", "Ninja"])
    assert ci_build.configure_cmd(cfg)[-2:] == ["-G", "Ninja"]


def test_single_step_selection(tmp_path: Path) -> None:
    steps = ci_build.step_commands(_cfg(tmp_path), "test")
    assert [name for name, _ in steps] == ["test"]


def test_resolve_platform(monkeypatch: pytest.MonkeyPatch) -> None:
    assert ci_build.resolve_platform("windows") == "windows"
    assert ci_build.resolve_platform("unix") == "unix"
    monkeypatch.setattr(ci_build.os, "name", "nt")
    assert ci_build.resolve_platform("auto") == "windows"
    monkeypatch.setattr(ci_build.os, "name", "posix")
    assert ci_build.resolve_platform("auto") == "unix"


def test_resolve_jobs_precedence(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(utils, "cpu_jobs", lambda: 6)
    assert ci_build.resolve_jobs(None) == 6
    monkeypatch.setenv("JOBS", "3")
    assert ci_build.resolve_jobs(None) == 3
    assert ci_build.resolve_jobs(8) == 8
    monkeypatch.setenv("JOBS", "lots")
    assert ci_build.resolve_jobs(None) == 6


def test_parse_args_defaults() -> None:
    args = ci_build.parse_args([])
    assert args.build_type == "Release"
    assert args.cmd == "all"
    assert args.build_dir == Path("build")
    assert args.jobs is None


def test_parse_args_build_type_case_insensitive() -> None:
    assert ci_build.parse_args(["debug"]).build_type == "Debug"
    with pytest.raises(SystemExit):
        ci_build.parse_args(["Profile"])


def test_validate_rejects_zero_jobs() -> None:
    args = ci_build.parse_args(["--jobs=0"])
    with pytest.raises(SystemExit):
        ci_build.validate_args(args)


def test_env_build_type(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BUILD_TYPE", "Debug")
    assert ci_build.parse_args([]).build_type == "Debug"


def test_run_steps_all_pass(fake_run: FakeRun, tmp_path: Path) -> None:
    rc, results = ci_build.run_steps(ci_build.step_commands(_cfg(tmp_path)))
    assert rc == 0
    assert [r.name for r in results] == ["configure", "build", "test"]
    assert len(fake_run.calls) == 3


def test_run_steps_fail_fast(fake_run: FakeRun, tmp_path: Path) -> None:
    fake_run.rc_for = lambda cmd: 2 if "--build" in cmd else 0
    rc, results = ci_build.run_steps(ci_build.step_commands(_cfg(tmp_path)))
    assert rc == 2
    assert [r.name for r in results] == ["configure", "build"]
    assert not any(c[0] == "ctest" for c in fake_run.calls)


def test_missing_executable_is_127(fake_run: FakeRun, tmp_path: Path) -> None:
    fake_run.missing = {"cmake"}
    rc, results = ci_build.run_steps(ci_build.step_commands(_cfg(tmp_path)))
    assert rc == ci_build.RC_NOT_FOUND
    assert len(results) == 1


def test_run_build_writes_manifest(fake_run: FakeRun, tmp_path: Path) -> None:
    fake_run.rc_for = lambda cmd: 8 if cmd[0] == "ctest" else 0
    cfg = _cfg(tmp_path)
    assert ci_build.run_build(cfg) == 8
    data = json.loads((cfg.build_dir / ci_build.MANIFEST_NAME).read_text())
    assert data["status"] == "failed"
    assert data["build_type"] == "Release"
    assert [s["rc"] for s in data["steps"]] == [0, 0, 8]
    assert data["replay_cmd"].startswith("ci-build Release")
    assert "--jobs=4" in data["replay_cmd"]


def test_main_success(
    fake_run: FakeRun, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    build_dir = tmp_path / "b"
    rc = ci_build.main(
        ["Debug", f"--build-dir={build_dir}", "--jobs=2", "--platform=unix"]
    )
    assert rc == 0
    assert len(fake_run.calls) == 3
    assert fake_run.calls[0][-1] == "-DCMAKE_BUILD_TYPE=Debug"
    assert (build_dir / ci_build.LOG_NAME).is_file()
    data = json.loads((build_dir / ci_build.MANIFEST_NAME).read_text())
    assert data["status"] == "passed"
    assert "PASS" in capsys.readouterr().out


def test_main_propagates_first_failure(fake_run: FakeRun, tmp_path: Path) -> None:
    fake_run.rc_for = lambda cmd: 1 if "-S" in cmd else 0
    rc = ci_build.main([f"--build-dir={tmp_path / 'b'}", "--jobs=1"])
    assert rc == 1
    assert len(fake_run.calls) == 1


def test_main_dry_run(
    fake_run: FakeRun, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    build_dir = tmp_path / "never"
    rc = ci_build.main(
        [f"--build-dir={build_dir}", "--dry-run", "--jobs=5", "--platform=windows"]
    )
    assert rc == 0
    assert not fake_run.calls
    assert not build_dir.exists()
    out = capsys.readouterr().out
    assert "--parallel 5" in out
    assert "ctest" in out


def test_main_build_dir_is_a_file(fake_run: FakeRun, tmp_path: Path) -> None:
    not_a_dir = tmp_path / "build"
    not_a_dir.write_text("x")
    with pytest.raises(SystemExit) as exc:
        ci_build.main([f"--build-dir={not_a_dir}", "--jobs=1"])
    assert "[ci_build]: error:" in str(exc.value.code)
    assert not fake_run.calls
