# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/mathops/ci/ci_build.py

"""Configure, build and test a CMake project with CTest.

One cross-platform runner for the CI flow of a CMake/CTest project:

1. configure: cmake -S <source> -B <build> -DCMAKE_BUILD_TYPE=<type>
2. build:     cmake --build <build> --config <type> <parallel flag>
3. test:      ctest --test-dir <build> --output-on-failure -C <type> -j <jobs>

The parallel flag depends on the platform flavor. Unix passes ``-- -j N`` to
the native build tool; Windows uses ``--parallel N`` so multi-config
generators (Visual Studio) build in parallel too.

Steps run fail-fast: the first failing step stops the run and its exit status
becomes the exit status of ci-build. Every run records a ci_manifest.json in
the build directory for ci-report.

Command-line interface:
    ci-build [Release|Debug] [OPTIONS]

Typical usage:
    ci-build                          # Release, all steps, auto jobs
    ci-build Debug --jobs=8
    ci-build --cmd=test               # re-run tests on an existing build
    ci-build --dry-run --platform=windows
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import subprocess
import sys
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Final, Sequence

from mathops import settings, utils

logger = logging.getLogger(__name__)

DEFAULT_BUILD_DIR = "build"
DEFAULT_SOURCE_DIR = "."
DEFAULT_BUILD_TYPE = "Release"
BUILD_TYPES: Final[tuple[str, ...]] = ("Release", "Debug")
PLATFORMS: Final[tuple[str, ...]] = ("auto", "unix", "windows")
STEPS: Final[tuple[str, ...]] = ("configure", "build", "test")
MANIFEST_NAME = "ci_manifest.json"
LOG_NAME = "ci_build.log"
RC_NOT_FOUND = 127


@dataclass(frozen=True)
class BuildCfg:  # pylint: disable=too-many-instance-attributes
    """Build configuration."""

    build_type: str
    source_dir: Path
    build_dir: Path
    jobs: int
    platform: str
    cmake: str = "cmake"
    ctest: str = "ctest"
    cmake_args: list[str] = field(default_factory=list)


@dataclass
class StepResult:
    """Outcome of one CI step."""

    name: str
    cmd: list[str]
    rc: int
    duration_s: float


# === CLI ===


def _build_type(s: str) -> str:
    """argparse type: case-insensitive Release/Debug."""
    for t in BUILD_TYPES:
        if s.lower() == t.lower():
            return t
    raise argparse.ArgumentTypeError(
        f"invalid build type: '{s}' (choose from {', '.join(BUILD_TYPES)})"
    )


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments for ci-build.

    Args:
        argv: Command-line arguments to parse. If None, uses sys.argv[1:].

    Returns:
        Parsed argument namespace with all configuration parameters.
    """
    ap = argparse.ArgumentParser(
        description="Configure, build and test a CMake project with CTest",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    ap.add_argument(
        "build_type",
        nargs="?",
        type=_build_type,
        default=settings.get_str_setting("BUILD_TYPE", DEFAULT_BUILD_TYPE),
        help="CMake build type (Release, Debug)",
    )
    ap.add_argument(
        "--cmd",
        choices=["configure", "build", "test", "all"],
        default="all",
        help="run a single step or all steps",
    )
    ap.add_argument(
        "--source-dir",
        type=Path,
        default=Path(settings.get_str_setting("SOURCE_DIR", DEFAULT_SOURCE_DIR)),
        help="CMake source directory",
    )
    ap.add_argument(
        "--build-dir",
        type=Path,
        default=Path(settings.get_str_setting("BUILD_DIR", DEFAULT_BUILD_DIR)),
        help="CMake build directory",
    )
    ap.add_argument(
        "--jobs",
        type=int,
        default=None,
        help="parallel jobs (default: $JOBS, else CPU count, else 2)",
    )
    ap.add_argument(
        "--platform",
        choices=list(PLATFORMS),
        default=settings.get_str_setting("CI_PLATFORM", "auto"),
        help="command flavor (auto picks from the host)",
    )
    ap.add_argument(
        "--cmake-arg",
        dest="cmake_args",
        action="append",
        default=[],
        help="extra configure arg passed verbatim to cmake (repeatable), "
        "e.g. --cmake-arg=-DBUILD_TESTING=ON",
    )
    ap.add_argument(
        "--cmake",
        default=settings.get_str_setting("CMAKE", "cmake"),
        help="cmake executable",
    )
    ap.add_argument(
        "--ctest",
        default=settings.get_str_setting("CTEST", "ctest"),
        help="ctest executable",
    )
    ap.add_argument(
        "--dry-run", action="store_true", help="print commands without running them"
    )
    ap.add_argument(
        "--verbosity",
        choices=["critical", "error", "warning", "info", "debug", "notset"],
        default=settings.get_str_setting("VERBOSITY", "info"),
        help="logging level",
    )
    return ap.parse_args(argv)


def validate_args(args: argparse.Namespace) -> None:
    """Validate arguments and fail fast if invalid.

    Raises:
        SystemExit: If an argument is out of range.
    """
    if args.build_type not in BUILD_TYPES:
        raise SystemExit(f"[ci_build]: error: invalid build type {args.build_type!r}")
    if args.platform not in PLATFORMS:
        raise SystemExit(f"[ci_build]: error: invalid platform {args.platform!r}")
    if args.jobs is not None and args.jobs < 1:
        raise SystemExit(f"[ci_build]: error: {args.jobs=} must be >= 1")


# === Config ===


def resolve_platform(platform: str) -> str:
    """Map 'auto' to the host flavor ('windows' or 'unix')."""
    if platform != "auto":
        return platform
    return "windows" if os.name == "nt" else "unix"


def resolve_jobs(jobs: int | None) -> int:
    """Return the job count: explicit value > $JOBS > CPU count > 2."""
    if jobs is not None:
        return jobs
    env_jobs = settings.get_int_setting("JOBS", 0)
    if env_jobs > 0:
        return env_jobs
    return utils.cpu_jobs()


def make_build_cfg(args: argparse.Namespace) -> BuildCfg:
    """Create the build configuration from parsed arguments."""
    return BuildCfg(
        build_type=args.build_type,
        source_dir=Path(args.source_dir),
        build_dir=Path(args.build_dir),
        jobs=resolve_jobs(args.jobs),
        platform=resolve_platform(args.platform),
        cmake=args.cmake,
        ctest=args.ctest,
        cmake_args=[str(x) for x in args.cmake_args],
    )


# === Commands ===


def configure_cmd(cfg: BuildCfg) -> list[str]:
    """Return the CMake configure command."""
    return [
        cfg.cmake,
        "-S",
        str(cfg.source_dir),
        "-B",
        str(cfg.build_dir),
        f"-DCMAKE_BUILD_TYPE={cfg.build_type}",
        *cfg.cmake_args,
    ]


def build_cmd(cfg: BuildCfg) -> list[str]:
    """Return the CMake build command with the platform's parallel flag."""
    cmd = [cfg.cmake, "--build", str(cfg.build_dir), "--config", cfg.build_type]
    if cfg.platform == "windows":
        return [*cmd, "--parallel", str(cfg.jobs)]
    return [*cmd, "--", "-j", str(cfg.jobs)]


def ctest_cmd(cfg: BuildCfg) -> list[str]:
    """Return the CTest command."""
    return [
        cfg.ctest,
        "--test-dir",
        str(cfg.build_dir),
        "--output-on-failure",
        "-C",
        cfg.build_type,
        "-j",
        str(cfg.jobs),
    ]


def step_commands(cfg: BuildCfg, cmd: str = "all") -> list[tuple[str, list[str]]]:
    """Return the ordered (step, command) pairs selected by ``cmd``."""
    makers = {"configure": configure_cmd, "build": build_cmd, "test": ctest_cmd}
    names = STEPS if cmd == "all" else (cmd,)
    return [(name, makers[name](cfg)) for name in names]


def replay_cmd(cfg: BuildCfg, cmd: str = "all") -> list[str]:
    """Return a copy-pasteable ci-build command reproducing this run."""
    out = [
        "ci-build",
        cfg.build_type,
        f"--source-dir={cfg.source_dir}",
        f"--build-dir={cfg.build_dir}",
        f"--jobs={cfg.jobs}",
        f"--platform={cfg.platform}",
    ]
    if cmd != "all":
        out.append(f"--cmd={cmd}")
    if cfg.cmake != "cmake":
        out.append(f"--cmake={cfg.cmake}")
    if cfg.ctest != "ctest":
        out.append(f"--ctest={cfg.ctest}")
    out += [f"--cmake-arg={a}" for a in cfg.cmake_args]
    return out


# === Actions ===


def run_step(name: str, cmd: list[str]) -> StepResult:
    """Run one step, returning its exit status instead of raising."""
    print(f"\n[ci_build] {name}: {utils.pretty_cmd(cmd)}\n", flush=True)
    t0 = time.time()
    try:
        rc = subprocess.run(cmd, check=False).returncode
    except FileNotFoundError:
        logger.error("%s: executable not found: %s", name, cmd[0])
        rc = RC_NOT_FOUND
    duration = round(time.time() - t0, 3)
    logger.info("%s: rc=%d in %.2fs", name, rc, duration)
    return StepResult(name=name, cmd=list(cmd), rc=rc, duration_s=duration)


def run_steps(
    steps: Sequence[tuple[str, list[str]]],
) -> tuple[int, list[StepResult]]:
    """Run steps in order, stopping at the first failure.

    Returns:
        Tuple of (rc, results) where rc is 0 or the failing step's status.
    """
    results: list[StepResult] = []
    for name, cmd in steps:
        res = run_step(name, cmd)
        results.append(res)
        if res.rc != 0:
            logger.error("%s failed with rc=%d; stopping", name, res.rc)
            return res.rc, results
    return 0, results


def write_manifest(
    cfg: BuildCfg,
    *,
    status: str,
    cmd: str,
    started_at: str,
    results: Sequence[StepResult] = (),
) -> Path:
    """Write or update ci_manifest.json in the build directory.

    Args:
        cfg: Build configuration.
        status: Run status ("started", "passed" or "failed").
        cmd: Step selection ("configure", "build", "test" or "all").
        started_at: ISO8601 UTC start time.
        results: Step results collected so far.

    Returns:
        Path of the manifest file.
    """
    manifest = {
        "status": status,  # "started" | "passed" | "failed"
        "started_at": started_at,
        "updated_at": utils.iso_utc(),
        "build_type": cfg.build_type,
        "platform": cfg.platform,
        "jobs": cfg.jobs,
        "cmd": cmd,
        "source_dir": str(cfg.source_dir),
        "build_dir": str(cfg.build_dir),
        "cmake_args": cfg.cmake_args,
        "duration_s": round(sum(r.duration_s for r in results), 3),
        "steps": [asdict(r) for r in results],
        "replay_cmd": utils.pretty_cmd(replay_cmd(cfg, cmd)),
    }
    cfg.build_dir.mkdir(parents=True, exist_ok=True)
    path = cfg.build_dir / MANIFEST_NAME
    path.write_text(json.dumps(manifest, indent=2), encoding="utf-8")
    return path


def run_build(cfg: BuildCfg, cmd: str = "all") -> int:
    """Run the selected steps for ``cfg`` and record the manifest.

    Returns:
        0 if every step passed, else the first failing step's exit status.
    """
    started_at = utils.iso_utc()
    write_manifest(cfg, status="started", cmd=cmd, started_at=started_at)
    rc, results = run_steps(step_commands(cfg, cmd))
    status = "passed" if rc == 0 else "failed"
    path = write_manifest(
        cfg, status=status, cmd=cmd, started_at=started_at, results=results
    )
    logger.debug("Wrote manifest: %s", path)
    return rc


# === Main ===


def main(argv: Sequence[str] | None = None) -> int:
    """Command-line entry point for ci-build.

    Args:
        argv: Command-line arguments. If None, uses sys.argv[1:].

    Returns:
        0 if all steps succeed, otherwise the first failing step's exit status.
    """
    args = parse_args(argv)
    validate_args(args)
    cfg = make_build_cfg(args)

    if args.dry_run:
        utils.configure_logger(args.verbosity)
        for name, cmd in step_commands(cfg, args.cmd):
            print(f"[ci_build] {name}: {utils.pretty_cmd(cmd)}")
        return 0

    try:
        utils.ensure_dir(cfg.build_dir, True)
    except (NotADirectoryError, FileExistsError) as exc:
        raise SystemExit(f"[ci_build]: error: {exc}") from exc
    utils.configure_logger(args.verbosity, cfg.build_dir / LOG_NAME)
    print(
        f"\n[ci_build] build_type={cfg.build_type} platform={cfg.platform} "
        f"jobs={cfg.jobs} build_dir={cfg.build_dir}"
    )

    rc = run_build(cfg, args.cmd)
    replay = utils.pretty_cmd(replay_cmd(cfg, args.cmd))
    if rc == 0:
        print(f"\n{utils.green('PASS')}: {replay}")
    else:
        print(f"\n{utils.red('FAIL')} (rc={rc}): {replay}", file=sys.stderr)
    return rc


if __name__ == "__main__":
    raise SystemExit(main())
