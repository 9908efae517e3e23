# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/mathops/ci/ci_regress.py

"""YAML-driven build matrix runner.

Runs ``ci-build`` once per job listed in a YAML file. No build parameters are
accepted from the command line except the YAML file path and the output
directory.

Features:
- Global default arguments applied to all jobs
- Per-job argument overrides (job args come last and take precedence)
- One build directory per job under the output directory
- Colored pass/fail report with copy-pasteable replay commands

YAML Schema:
    defaults:
      args: ["--jobs=4"]                 # Optional global defaults

    jobs:
      - name: release
        args: ["Release"]
      - name: debug
        args: "Debug --cmake-arg=-DENABLE_COVERAGE=ON"  # or a single string

Usage:
    ci-regress --file=path/to/ci_regress.yaml [--outdir=out_ci]

After running all jobs, prints a report:
  PASS: <cmd>
  FAIL: <cmd>
where <cmd> is a copy-pasteable command to rerun that job.
"""

from __future__ import annotations

import argparse
import logging
import shlex
import subprocess
import sys
from pathlib import Path
from typing import Any, List, Sequence

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from mathops import settings, utils

logger = logging.getLogger(__name__)

DEFAULT_OUT_DIR = "out_ci"
CI_BUILD = "ci-build"


def _as_str_list(x: Any) -> list[str]:
    """Convert YAML value to a list of strings.

    Handles both string arguments (with shell-style splitting) and
    list arguments, converting None to an empty list.
    """
    if x is None:
        return []
    if isinstance(x, str):
        # allow a single string with spaces or a YAML list
        return shlex.split(x)
    if isinstance(x, (list, tuple)):
        return [str(t) for t in x]
    raise ValueError(f"args must be a string or a list, got {type(x).__name__}")


class DefaultsModel(BaseModel):
    """Arguments applied to every job."""

    args: List[str] = Field(default_factory=list)

    @field_validator("args", mode="before")
    @classmethod
    def split_args(cls, v: Any) -> list[str]:
        return _as_str_list(v)


class JobModel(BaseModel):
    """A single regression job."""

    name: str = Field(min_length=1, pattern=r"^[A-Za-z0-9_.-]+$")
    args: List[str] = Field(default_factory=list)

    @field_validator("args", mode="before")
    @classmethod
    def split_args(cls, v: Any) -> list[str]:
        return _as_str_list(v)


class RegressModel(BaseModel):
    """Top-level ci_regress.yaml document."""

    defaults: DefaultsModel = Field(default_factory=DefaultsModel)
    jobs: List[JobModel] = Field(min_length=1)

    @field_validator("defaults", mode="before")
    @classmethod
    def none_defaults(cls, v: Any) -> Any:
        return {} if v is None else v

    @field_validator("jobs", mode="before")
    @classmethod
    def name_jobs(cls, v: Any) -> Any:
        """Give unnamed jobs a positional name (job0, job1, ...)."""
        if not isinstance(v, list):
            return v
        out = []
        for idx, j in enumerate(v):
            if isinstance(j, dict) and not j.get("name"):
                j = {**j, "name": f"job{idx}"}
            out.append(j)
        return out

    @field_validator("jobs")
    @classmethod
    def unique_names(cls, v: list[JobModel]) -> list[JobModel]:
        names = [j.name for j in v]
        dups = sorted({n for n in names if names.count(n) > 1})
        if dups:
            raise ValueError(f"duplicate job names: {', '.join(dups)}")
        return v


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments for the regression runner.

    Args:
        argv: Command-line arguments. If None, uses sys.argv[1:].

    Returns:
        Parsed argument namespace containing file path and output directory.
    """
    ap = argparse.ArgumentParser(
        description="CMake/CTest build matrix (strict, YAML-only)",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    ap.add_argument(
        "--file", type=Path, default=Path("ci_regress.yaml"), help="ci_regress.yaml"
    )
    ap.add_argument("--outdir", default=DEFAULT_OUT_DIR, help="output directory")
    ap.add_argument(
        "--verbosity",
        choices=["critical", "error", "warning", "info", "debug", "notset"],
        default=settings.get_str_setting("VERBOSITY", "info"),
        help="logging level",
    )
    return ap.parse_args(argv)


def load_config(path: Path) -> RegressModel:
    """Load and validate the YAML regression configuration file.

    Raises:
        ValueError: If the YAML is not a mapping or fails validation.
    """
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path.name} must be a mapping")
    try:
        return RegressModel.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"{path.name}: {exc}") from exc


def _has_opt(args: Sequence[str], opt: str) -> bool:
    return any(a == opt or a.startswith(f"{opt}=") for a in args)


def job_cmd(defaults: Sequence[str], job: JobModel, outdir: str) -> list[str]:
    """Build the ci-build command for one job.

    Jobs that do not choose their own build directory get <outdir>/<name>.
    """
    cmd = [CI_BUILD, *defaults, *job.args]
    if not _has_opt(cmd, "--build-dir"):
        cmd.append(f"--build-dir={Path(outdir) / job.name}")
    return cmd


def run_regress(args: argparse.Namespace) -> int:
    """Execute all jobs defined in the YAML file.

    Loads the configuration, runs each job sequentially, and prints a summary
    report with pass/fail status and replay commands.

    Returns:
        0 if all jobs pass, 1 if any job fails or if config is invalid.
    """
    yaml_path = args.file.resolve()
    if not yaml_path.is_file():
        print(f"\n[ci_regress] No file found at {yaml_path}", file=sys.stderr)
        return 1
    print(f"\n[ci_regress] file: {yaml_path}")

    try:
        cfg = load_config(yaml_path)
    except (ValueError, yaml.YAMLError) as exc:
        print(f"[ci_regress] Invalid config: {exc}", file=sys.stderr)
        return 1

    passes: list[str] = []
    fails: list[str] = []

    for job in cfg.jobs:
        cmd = job_cmd(cfg.defaults.args, job, args.outdir)
        cmd_str = utils.pretty_cmd(cmd)
        print(f"\n[ci_regress] job: {job.name}")
        print(f"[ci_regress] cmd: {cmd_str}\n", flush=True)
        try:
            job_rc = subprocess.run(cmd, check=False).returncode
        except FileNotFoundError:
            logger.error("%s not found; is mathops installed?", CI_BUILD)
            job_rc = 127
        logger.info("job %s: rc=%d", job.name, job_rc)
        if job_rc == 0:
            passes.append(cmd_str)
        else:
            fails.append(cmd_str)

    print("\n[ci_regress] JOBS REPORT\n")
    for c in passes:
        print(f"{utils.green('PASS')}: {c}")
    for c in fails:
        print(f"{utils.red('FAIL')}: {c}")

    rep = f"ci-report --outdir={args.outdir}"
    print(f"\n[ci_regress] To see a detailed report of all builds: {utils.yellow(rep)}")

    if fails:
        print(f"\n[ci_regress] SUMMARY: {utils.red('FAIL')}")
        return 1
    print(f"\n[ci_regress] SUMMARY: {utils.green('PASS')}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Command-line entry point for the regression runner.

    Returns:
        0 if the regression passes, non-zero otherwise.
    """
    args = parse_args(argv)
    utils.configure_logger(args.verbosity)
    return run_regress(args)


if __name__ == "__main__":
    raise SystemExit(main())
