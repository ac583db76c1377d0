from __future__ import annotations

import logging
import subprocess
import sys
from pathlib import Path
from typing import Callable

from launchpad.core.errors import DependencyInstallError

logger = logging.getLogger(__name__)


def pip_install_command(requirements: str | Path, python: str | None = None) -> list[str]:
    return [python or sys.executable, "-m", "pip", "install", "-r", str(requirements)]


def install_dependencies(
    requirements: str | Path,
    python: str | None = None,
    runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
) -> list[str]:
    """Install the requirements file with pip and return the command used.

    pip's own output goes straight to the console. A missing requirements
    file or a non-zero pip exit raises DependencyInstallError.
    """

    path = Path(requirements)
    if not path.is_file():
        raise DependencyInstallError(f"Requirements file not found: {path}")

    cmd = pip_install_command(path, python)
    print(f"[launchpad] Installing dependencies: {' '.join(cmd)}")

    try:
        proc = runner(cmd, check=False)
    except OSError as exc:
        raise DependencyInstallError(f"Could not run pip: {exc}") from exc

    if proc.returncode != 0:
        raise DependencyInstallError(f"pip install -r {path} exited with status {proc.returncode}")

    logger.info("Dependencies from %s installed", path)
    return cmd
