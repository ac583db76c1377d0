"""Post-install smoke test for the downloaded binary.

Runs ``<binary> --version`` and echoes whatever it prints. The check is
best-effort unless ``strict`` is set: a failing binary is reported but the
bootstrap carries on to launch the server.
"""

from __future__ import annotations

import logging
import os
import subprocess
import sys
from pathlib import Path
from typing import Callable

from launchpad.core.contracts import SmokeTestResult
from launchpad.core.errors import SmokeTestError

logger = logging.getLogger(__name__)


def _echo(stdout: str, stderr: str) -> None:
    if stdout:
        sys.stdout.write(stdout)
        sys.stdout.flush()
    if stderr:
        sys.stderr.write(stderr)
        sys.stderr.flush()


def run_version_check(
    binary: str | Path,
    flag: str = "--version",
    *,
    strict: bool = False,
    timeout: float | None = 30.0,
    runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
) -> SmokeTestResult:
    path = Path(binary)
    if not path.is_file() or not os.access(path, os.X_OK):
        # The binary must be unpacked and executable before we get here.
        raise SmokeTestError(f"{path} is missing or not executable")

    cmd = [str(path.resolve()), flag]
    print(f"[launchpad] Smoke test: {' '.join(cmd)}")

    try:
        proc = runner(cmd, capture_output=True, text=True, timeout=timeout, check=False)
    except (OSError, subprocess.TimeoutExpired) as exc:
        result = SmokeTestResult(command=cmd, returncode=None, error=repr(exc))
    else:
        _echo(proc.stdout or "", proc.stderr or "")
        result = SmokeTestResult(
            command=cmd,
            returncode=proc.returncode,
            stdout=proc.stdout or "",
            stderr=proc.stderr or "",
        )

    if not result.ok:
        detail = result.error or f"exit status {result.returncode}"
        if strict:
            raise SmokeTestError(f"{path.name} {flag} failed: {detail}")
        logger.warning("%s %s failed (%s); continuing", path.name, flag, detail)

    return result
