from __future__ import annotations

import logging
import os
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from .io import read_output_json, write_input_json
from .models import TestOutcome

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OracleRun:
    outcome: TestOutcome
    returncode: int
    wall_time_s: float
    stdout_path: Path
    stderr_path: Path
    input_path: Path
    output_path: Path
    workdir: Path


class OracleError(RuntimeError):
    """The test harness itself failed (as opposed to a test failing)."""


def run_external_test(
    *,
    command: List[str],
    workdir: str | Path,
    variant: str,
    test: str,
    source: str | Path,
    context: Optional[Dict] = None,
    timeout_s: int = 600,
    extra_args: Optional[List[str]] = None,
    env: Optional[Dict[str, str]] = None,
    input_filename: str = "input.json",
    output_filename: str = "output.json",
) -> OracleRun:
    """
    Run one test through an external oracle command following the contract:
      <command...> --input input.json --output output.json

    Writes input.json, runs the command, captures stdout/stderr and
    reads output.json into a TestOutcome.

    A timeout counts as a failed test. A missing or unreadable output.json
    means the harness is broken and raises OracleError.
    """
    if not command or not isinstance(command, list):
        raise ValueError("command must be a non-empty list of strings")

    workdir = Path(workdir)
    workdir.mkdir(parents=True, exist_ok=True)

    input_path = workdir / input_filename
    output_path = workdir / output_filename
    stdout_path = workdir / "stdout.txt"
    stderr_path = workdir / "stderr.txt"

    # A stale output.json from an earlier run must never be read back.
    if output_path.exists():
        output_path.unlink()

    write_input_json(input_path, variant=variant, test=test, source=source, context=context)

    cmd = list(command)
    cmd.extend(["--input", input_filename, "--output", output_filename])
    if extra_args:
        cmd.extend(extra_args)

    proc_env = os.environ.copy()
    if env:
        proc_env.update({str(k): str(v) for k, v in env.items()})

    t0 = time.time()
    try:
        with stdout_path.open("w", encoding="utf-8") as f_out, stderr_path.open("w", encoding="utf-8") as f_err:
            completed = subprocess.run(
                cmd,
                cwd=str(workdir),
                env=proc_env,
                stdout=f_out,
                stderr=f_err,
                timeout=timeout_s,
                check=False,
                text=True,
            )
    except subprocess.TimeoutExpired:
        wall = time.time() - t0
        logger.debug("test %s of %s timed out after %ss", test, variant, timeout_s)
        return OracleRun(
            outcome=TestOutcome(passed=False, values=(0.0,)),
            returncode=124,
            wall_time_s=wall,
            stdout_path=stdout_path,
            stderr_path=stderr_path,
            input_path=input_path,
            output_path=output_path,
            workdir=workdir,
        )
    except OSError as e:
        raise OracleError(f"Could not start oracle command {cmd[0]!r}: {e}") from e

    wall = time.time() - t0

    if not output_path.exists():
        raise OracleError(
            f"Oracle did not produce {output_filename} for test {test} of {variant}. "
            f"Return code: {completed.returncode}"
        )
    try:
        output = read_output_json(output_path)
    except ValueError as e:  # bad JSON or pydantic ValidationError
        raise OracleError(f"Oracle wrote an invalid {output_filename} for test {test} of {variant}: {e}") from e

    if output.error:
        logger.debug("oracle reported for %s/%s: %s", variant, test, output.error)

    return OracleRun(
        outcome=output.to_outcome(),
        returncode=completed.returncode,
        wall_time_s=wall,
        stdout_path=stdout_path,
        stderr_path=stderr_path,
        input_path=input_path,
        output_path=output_path,
        workdir=workdir,
    )
