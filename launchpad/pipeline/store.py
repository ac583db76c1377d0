from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from launchpad.config import base_dir
from launchpad.pipeline.types import RunStatus


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def create_run_id(ts: datetime | None = None) -> str:
    """Create a sortable run id (UTC)."""

    t = ts or datetime.now(timezone.utc)
    return t.strftime("%Y%m%dT%H%M%SZ")


def repo_root() -> Path:
    # Working directory (or LAUNCHPAD_BASE_DIR), not the installed package.
    return Path(base_dir())


def runs_root() -> Path:
    return repo_root() / "runs"


def run_dir(run_id: str) -> Path:
    return runs_root() / str(run_id)


def request_path(run_id: str) -> Path:
    return run_dir(run_id) / "request.json"


def status_path(run_id: str) -> Path:
    return run_dir(run_id) / "status.json"


def step_result_path(run_id: str, step: str) -> Path:
    return run_dir(run_id) / "steps" / f"{step}.json"


def ensure_run_dir(run_id: str) -> Path:
    d = run_dir(run_id)
    d.mkdir(parents=True, exist_ok=True)
    return d


def write_json(path: Path, obj: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(obj, indent=2, ensure_ascii=False), encoding="utf-8")


def read_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8") or "null")


def write_status(run_id: str, status: RunStatus) -> None:
    ensure_run_dir(run_id)
    write_json(status_path(run_id), status.to_dict())


def read_status(run_id: str) -> RunStatus | None:
    p = status_path(run_id)
    if not p.exists():
        return None
    data = read_json(p)
    if not isinstance(data, dict):
        return None
    try:
        return RunStatus.from_dict(data)
    except (TypeError, ValueError):
        return None


def write_request(run_id: str, request_obj: Any) -> None:
    ensure_run_dir(run_id)
    write_json(request_path(run_id), request_obj)


def write_step_result(run_id: str, step: str, result_obj: Any) -> str:
    """Persist one step's output and return the file path as string."""
    p = step_result_path(run_id, step)
    write_json(p, result_obj)
    return str(p)
