"""Start the web server in development or production mode.

DEV runs the application module directly (a single uvicorn process).
PROD hands the application object to gunicorn with a fixed worker pool and
access/error logs on stdout.
"""

from __future__ import annotations

import logging
import subprocess
import sys
from typing import Callable

from launchpad.config import SERVER, ServerConfig, ServerMode
from launchpad.core.contracts import LaunchPlan
from launchpad.core.errors import ServerLaunchError

logger = logging.getLogger(__name__)


def build_launch_plan(mode: ServerMode | str, cfg: ServerConfig = SERVER) -> LaunchPlan:
    mode = ServerMode(mode)

    if mode == ServerMode.DEV:
        argv = [sys.executable, "-m", cfg.dev_module]
    elif mode == ServerMode.PROD:
        argv = [
            "gunicorn",
            cfg.app_target,
            "-w",
            str(cfg.workers),
            "-k",
            cfg.worker_class,
            "-b",
            cfg.bind,
            "--log-file",
            "-",
        ]
    else:  # pragma: no cover - ServerMode() above rejects anything else
        raise ValueError(f"Unsupported server mode: {mode}")

    return LaunchPlan(mode=mode.value, argv=argv)


def launch_server(
    plan: LaunchPlan,
    runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
) -> int:
    """Run the server in the foreground and return its exit code.

    Blocks until the server process exits (normally: until it is signalled).
    """

    print(f"[launchpad] Starting {plan.mode} server: {' '.join(plan.argv)}")
    try:
        proc = runner(plan.argv, check=False)
    except OSError as exc:
        raise ServerLaunchError(f"Could not start {plan.argv[0]}: {exc}") from exc
    except KeyboardInterrupt:
        logger.info("Server interrupted")
        return 130

    logger.info("Server exited with status %s", proc.returncode)
    return int(proc.returncode)
