from __future__ import annotations

from launchpad.core.contracts import BootstrapRequest, SmokeTestResult
from launchpad.pipeline import store
from launchpad.pipeline.types import PipelineContext, StepName
from launchpad.smoke import run_version_check


def run(run_id: str, request: BootstrapRequest, ctx: PipelineContext) -> SmokeTestResult:
    # Fall back to the configured location when fetch_release did not run
    # in this context (e.g. a custom step list).
    binary = ctx.fetch.binary_path if ctx.fetch else ctx.release.binary_path()

    result = run_version_check(
        binary,
        ctx.release.version_flag,
        strict=request.strict_smoke_test,
    )
    ctx.smoke = result
    store.write_step_result(run_id, StepName.VERIFY_BINARY.value, result.to_dict())
    return result
