from __future__ import annotations

from launchpad import deps
from launchpad.core.contracts import BootstrapRequest
from launchpad.pipeline import store
from launchpad.pipeline.types import PipelineContext, StepName


def run(run_id: str, request: BootstrapRequest, ctx: PipelineContext) -> list[str]:
    """Install the requirements file; must succeed before anything is fetched."""

    cmd = deps.install_dependencies(request.requirements)
    store.write_step_result(run_id, StepName.INSTALL_DEPENDENCIES.value, {"command": cmd})
    return cmd
