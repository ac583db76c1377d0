from __future__ import annotations

import argparse
import logging
import sys
import traceback
from typing import Any, Callable, Mapping

from launchpad import config
from launchpad.core.contracts import BootstrapRequest
from launchpad.core.errors import StepFailedError
from launchpad.pipeline import store
from launchpad.pipeline.steps import fetch_step, install_step, launch_step, verify_step
from launchpad.pipeline.types import STEP_ORDER, PipelineContext, RunStatus, StepName

logger = logging.getLogger(__name__)

StepFn = Callable[[str, BootstrapRequest, PipelineContext], Any]

DEFAULT_STEPS: dict[StepName, StepFn] = {
    StepName.INSTALL_DEPENDENCIES: install_step.run,
    StepName.FETCH_RELEASE: fetch_step.run,
    StepName.VERIFY_BINARY: verify_step.run,
    StepName.LAUNCH_SERVER: launch_step.run,
}


def _skipped(step: StepName, request: BootstrapRequest) -> bool:
    return step == StepName.INSTALL_DEPENDENCIES and request.skip_deps


def run_pipeline(
    request: BootstrapRequest,
    run_id: str,
    *,
    ctx: PipelineContext | None = None,
    steps: Mapping[StepName, StepFn] | None = None,
) -> RunStatus:
    """Run every step in STEP_ORDER, persisting status around each one.

    The first failing step is marked FAILED, later steps stay PENDING and
    StepFailedError is raised with the original exception as its cause.
    """

    ctx = ctx or PipelineContext()
    handlers = dict(DEFAULT_STEPS)
    if steps:
        handlers.update(steps)

    status = RunStatus(state="QUEUED", created_at_utc=store.utc_now_iso())
    store.write_request(run_id, request.to_dict())
    store.write_status(run_id, status)

    status.state = "RUNNING"
    status.started_at_utc = store.utc_now_iso()
    store.write_status(run_id, status)

    for step in STEP_ORDER:
        step_status = status.steps[step.value]

        if _skipped(step, request):
            step_status.state = "SKIPPED"
            store.write_status(run_id, status)
            print(f"[launchpad] Skipping {step.value}")
            continue

        step_status.state = "RUNNING"
        step_status.started_at_utc = store.utc_now_iso()
        store.write_status(run_id, status)
        logger.info("Step %s started", step.value)

        try:
            handlers[step](run_id, request, ctx)
        except Exception as exc:  # noqa: BLE001
            step_status.state = "FAILED"
            step_status.finished_at_utc = store.utc_now_iso()
            step_status.error = repr(exc)
            step_status.traceback = traceback.format_exc()
            status.state = "FAILED"
            status.failed_step = step.value
            status.error = repr(exc)
            status.finished_at_utc = store.utc_now_iso()
            store.write_status(run_id, status)
            raise StepFailedError(step.value, exc) from exc

        step_status.state = "SUCCEEDED"
        step_status.finished_at_utc = store.utc_now_iso()
        store.write_status(run_id, status)
        logger.info("Step %s finished", step.value)

    status.exit_code = ctx.exit_code
    status.state = "SUCCEEDED" if not ctx.exit_code else "FAILED"
    if ctx.exit_code:
        status.failed_step = StepName.LAUNCH_SERVER.value
        status.error = f"server exited with status {ctx.exit_code}"
    status.finished_at_utc = store.utc_now_iso()
    store.write_status(run_id, status)
    return status


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        description=(
            "Install dependencies, fetch the latest dominant_colours release, "
            "smoke-test it and start the web server. Run state is persisted "
            "under runs/<run_id>."
        )
    )
    p.add_argument(
        "--mode",
        choices=[m.value for m in config.ServerMode],
        default=None,
        help="Server mode. Defaults to 'dev' when DEBUG=yes, otherwise 'prod'.",
    )
    p.add_argument("--run-id", type=str, default=None, help="Run identifier (default: UTC timestamp).")
    p.add_argument(
        "--requirements",
        type=str,
        default=None,
        help="Requirements file to install (default: LAUNCHPAD_REQUIREMENTS or requirements.txt).",
    )
    p.add_argument("--skip-deps", action="store_true", help="Do not pip-install the requirements file.")
    p.add_argument(
        "--strict-smoke-test",
        action="store_true",
        help="Abort when '<binary> --version' fails instead of only warning.",
    )
    p.add_argument("--dry-run", action="store_true", help="Print the server command instead of running it.")
    return p


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=config.log_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    request = BootstrapRequest(
        mode=config.resolve_server_mode(args.mode).value,
        requirements=args.requirements or config.requirements_path(),
        skip_deps=bool(args.skip_deps),
        strict_smoke_test=bool(args.strict_smoke_test),
        dry_run=bool(args.dry_run),
    )
    run_id = args.run_id or store.create_run_id()

    try:
        status = run_pipeline(request, run_id)
    except StepFailedError as exc:
        print(f"[launchpad] {exc}", file=sys.stderr)
        return 1

    return int(status.exit_code or 0)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
