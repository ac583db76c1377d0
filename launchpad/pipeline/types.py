from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Literal

import requests

from launchpad.config import ReleaseConfig, ServerConfig
from launchpad.core.contracts import FetchResult, LaunchPlan, SmokeTestResult


class StepName(str, Enum):
    INSTALL_DEPENDENCIES = "install_dependencies"
    FETCH_RELEASE = "fetch_release"
    VERIFY_BINARY = "verify_binary"
    LAUNCH_SERVER = "launch_server"


# Execution order of a bootstrap run.
STEP_ORDER: tuple[StepName, ...] = (
    StepName.INSTALL_DEPENDENCIES,
    StepName.FETCH_RELEASE,
    StepName.VERIFY_BINARY,
    StepName.LAUNCH_SERVER,
)


StepState = Literal["PENDING", "RUNNING", "SUCCEEDED", "FAILED", "SKIPPED"]
RunState = Literal["QUEUED", "RUNNING", "SUCCEEDED", "FAILED"]


@dataclass
class StepStatus:
    state: StepState = "PENDING"
    started_at_utc: str | None = None
    finished_at_utc: str | None = None
    error: str | None = None
    traceback: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class RunStatus:
    state: RunState
    created_at_utc: str
    started_at_utc: str | None = None
    finished_at_utc: str | None = None
    failed_step: str | None = None
    exit_code: int | None = None
    error: str | None = None
    steps: dict[str, StepStatus] = field(
        default_factory=lambda: {s.value: StepStatus() for s in STEP_ORDER}
    )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "RunStatus":
        data = dict(d)
        steps = data.pop("steps", None) or {}
        status = cls(**data)
        for name, raw in steps.items():
            status.steps[name] = StepStatus(**raw)
        return status


@dataclass
class PipelineContext:
    """Configuration and step outputs shared along one run.

    Steps read what earlier steps produced (``fetch`` feeds ``verify_binary``)
    and write their own output back.
    """

    release: ReleaseConfig = field(default_factory=ReleaseConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    session: requests.Session | None = None

    fetch: FetchResult | None = None
    smoke: SmokeTestResult | None = None
    plan: LaunchPlan | None = None
    exit_code: int | None = None
