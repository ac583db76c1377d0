from __future__ import annotations

from launchpad.core.contracts import BootstrapRequest
from launchpad.launcher import build_launch_plan, launch_server
from launchpad.pipeline import store
from launchpad.pipeline.types import PipelineContext, StepName


def run(run_id: str, request: BootstrapRequest, ctx: PipelineContext) -> int:
    """Start the server for ``request.mode`` and block until it exits.

    With ``dry_run`` the plan is recorded and printed but nothing is started.
    """

    plan = build_launch_plan(request.mode, ctx.server)
    ctx.plan = plan
    store.write_step_result(run_id, StepName.LAUNCH_SERVER.value, plan.to_dict())

    if request.dry_run:
        print(f"[launchpad] Dry run; would start: {' '.join(plan.argv)}")
        ctx.exit_code = 0
        return 0

    ctx.exit_code = launch_server(plan)
    return ctx.exit_code
