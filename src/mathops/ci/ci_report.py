# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/mathops/ci/ci_report.py

"""Scan build directories and report ci-build results.

This module scans an output directory for ci_manifest.json files written by
ci-build and prints a table of every build it finds, followed by a
copy-pasteable replay command for each failed build.

Each ci_manifest.json contains:
- "status": Build result ("started", "passed" or "failed")
- "build_type": CMake build type
- "replay_cmd": Copy-pasteable command to rerun the build

A manifest still marked "started" belongs to a run that was interrupted and is
reported as a failure.

Usage:
    ci-report                    # Scan default output directory
    ci-report --outdir=<outdir>  # Scan custom output directory
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from tabulate import tabulate

from mathops import utils
from mathops.ci.ci_build import MANIFEST_NAME
from mathops.ci.ci_regress import DEFAULT_OUT_DIR


@dataclass(frozen=True)
class BuildRun:
    """A single ci-build run with its result."""

    path: Path
    status: str  # passed | failed | started
    build_type: str
    platform: str
    duration_s: float
    failed_step: str
    replay_cmd: str

    @property
    def passed(self) -> bool:
        return self.status == "passed"


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments for the report generator."""
    ap = argparse.ArgumentParser(
        description="ci-build report generator",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    ap.add_argument("--outdir", default=DEFAULT_OUT_DIR, help="output directory")
    return ap.parse_args(argv)


def collect(root: Path) -> list[BuildRun]:
    """Collect all build runs from manifest files under ``root``.

    Returns:
        List of BuildRun objects sorted by path for deterministic ordering.
    """
    if not root.is_dir():
        print(f"\n[ci_report] No directory found at {root}", file=sys.stderr)
        return []
    print(f"\n[ci_report] Scanning for build manifests in {root}")
    runs: list[BuildRun] = []
    for mpath in sorted(root.glob(f"**/{MANIFEST_NAME}")):
        run = _load_run(mpath)
        if run is not None:
            runs.append(run)
    runs.sort(key=lambda r: str(r.path))
    return runs


def _load_run(mpath: Path) -> BuildRun | None:
    """Load one manifest; None if it is unreadable or malformed."""
    try:
        data = json.loads(mpath.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError):
        return None
    if not isinstance(data, dict):
        return None
    status = str(data.get("status", "")).strip().lower()
    replay_cmd = str(data.get("replay_cmd", "")).strip()
    if status not in {"passed", "failed", "started"} or not replay_cmd:
        return None
    steps = data.get("steps") or []
    if not isinstance(steps, list):
        return None
    failed_step = next(
        (
            str(s.get("name", "?"))
            for s in steps
            if isinstance(s, dict) and s.get("rc", 0) != 0
        ),
        "",
    )
    try:
        duration_s = float(data.get("duration_s", 0.0))
    except (TypeError, ValueError):
        duration_s = 0.0
    return BuildRun(
        path=mpath.parent,
        status=status,
        build_type=str(data.get("build_type", "")),
        platform=str(data.get("platform", "")),
        duration_s=duration_s,
        failed_step=failed_step,
        replay_cmd=replay_cmd,
    )


def format_table(root: Path, runs: Sequence[BuildRun]) -> str:
    """Return a GitHub-style table of the runs."""
    rows: list[list[object]] = []
    for r in runs:
        try:
            where = r.path.relative_to(root)
        except ValueError:
            where = r.path
        status = r.status.upper()
        if r.failed_step:
            status += f" ({r.failed_step})"
        rows.append(
            [str(where), r.build_type, r.platform, status, f"{r.duration_s:.2f}"]
        )
    headers = ["Build dir", "Type", "Platform", "Status", "Time (s)"]
    return tabulate(rows, headers=headers, tablefmt="github")


def print_report(root: Path, runs: Sequence[BuildRun]) -> int:
    """Print a formatted report of build results.

    Returns:
        0 if every build passed, 1 if any failed or none were found.
    """
    if not runs:
        print(f"[ci_report] No build manifests found in {root}", file=sys.stderr)
        return 1
    print(f"[ci_report] Results from build manifests in {root}\n")
    print(format_table(root, runs))

    passes = [r for r in runs if r.passed]
    fails = [r for r in runs if not r.passed]

    if fails:
        print()
    for r in fails:
        print(f"{utils.red('FAIL')}: {r.replay_cmd}")

    print(f"\n[ci_report] TOTALS: {len(runs)}\n")
    if passes:
        print(f"{utils.green('PASS')}: {len(passes)}")
    if fails:
        print(f"{utils.red('FAIL')}: {len(fails)}")
        print(f"\n[ci_report] SUMMARY: {utils.red('FAIL')}")
        return 1
    print(f"\n[ci_report] SUMMARY: {utils.green('PASS')}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Command-line entry point for build report generation.

    Returns:
        0 if all builds passed, non-zero otherwise.
    """
    args = parse_args(argv)
    root = Path(args.outdir).resolve()
    runs = collect(root)
    return print_report(root, runs)


if __name__ == "__main__":
    raise SystemExit(main())
