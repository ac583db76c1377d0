from __future__ import annotations

from launchpad.core.contracts import BootstrapRequest, FetchResult
from launchpad.pipeline import store
from launchpad.pipeline.types import PipelineContext, StepName
from launchpad.releases import install_latest_release


def run(run_id: str, request: BootstrapRequest, ctx: PipelineContext) -> FetchResult:
    """Download and unpack the latest platform release.

    Result:
    - steps/fetch_release.json (asset URL, tag, archive and binary paths)
    """

    result = install_latest_release(ctx.release, session=ctx.session)
    ctx.fetch = result
    store.write_step_result(run_id, StepName.FETCH_RELEASE.value, result.to_dict())
    return result
