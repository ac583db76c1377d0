"""Tests for the ordered bootstrap pipeline (no network, no subprocesses)."""

from __future__ import annotations

import os

import pytest

from conftest import FakeResponse, FakeSession, make_tar_gz
from launchpad.core.contracts import BootstrapRequest
from launchpad.core.errors import DependencyInstallError, StepFailedError
from launchpad.pipeline import run as pipeline_run
from launchpad.pipeline import store
from launchpad.pipeline.steps import fetch_step, verify_step
from launchpad.pipeline.types import PipelineContext, StepName

LATEST = "https://api.example.test/repos/alexwlchan/dominant_colours/releases/latest"
LINUX_URL = "https://example.test/dominant_colours-x86_64-unknown-linux-gnu.tar.gz"


def _request(**overrides) -> BootstrapRequest:
    d = {"mode": "prod", "requirements": "requirements.txt", "dry_run": True}
    d.update(overrides)
    return BootstrapRequest(**d)


def _recording_steps(order: list[str], fail_at: StepName | None = None):
    def _make(step: StepName):
        def _run(run_id, request, ctx):
            order.append(step.value)
            if step == fail_at:
                raise DependencyInstallError("pip exploded")
            return None

        return _run

    return {s: _make(s) for s in StepName}


def test_steps_run_in_order_and_status_is_persisted(runs_tmp) -> None:
    order: list[str] = []

    status = pipeline_run.run_pipeline(_request(), "run1", steps=_recording_steps(order))

    assert order == ["install_dependencies", "fetch_release", "verify_binary", "launch_server"]
    assert status.state == "SUCCEEDED"

    saved = store.read_status("run1")
    assert saved is not None
    assert saved.state == "SUCCEEDED"
    assert all(s.state == "SUCCEEDED" for s in saved.steps.values())
    assert store.read_json(runs_tmp / "run1" / "request.json")["mode"] == "prod"


def test_failed_install_prevents_any_fetch(runs_tmp) -> None:
    order: list[str] = []
    session = FakeSession({})
    steps = _recording_steps(order, fail_at=StepName.INSTALL_DEPENDENCIES)
    steps[StepName.FETCH_RELEASE] = fetch_step.run

    with pytest.raises(StepFailedError) as excinfo:
        pipeline_run.run_pipeline(_request(), "run2", ctx=PipelineContext(session=session), steps=steps)

    assert excinfo.value.step == "install_dependencies"
    assert isinstance(excinfo.value.cause, DependencyInstallError)
    assert order == ["install_dependencies"]
    assert session.calls == []

    saved = store.read_status("run2")
    assert saved.state == "FAILED"
    assert saved.failed_step == "install_dependencies"
    assert saved.steps["install_dependencies"].state == "FAILED"
    assert "pip exploded" in saved.steps["install_dependencies"].error
    assert saved.steps["fetch_release"].state == "PENDING"
    assert saved.steps["launch_server"].state == "PENDING"


def test_skip_deps_marks_step_skipped(runs_tmp) -> None:
    order: list[str] = []

    status = pipeline_run.run_pipeline(_request(skip_deps=True), "run3", steps=_recording_steps(order))

    assert order == ["fetch_release", "verify_binary", "launch_server"]
    assert status.steps["install_dependencies"].state == "SKIPPED"


def test_binary_is_extracted_and_executable_before_smoke_test(runs_tmp, release_cfg) -> None:
    archive = make_tar_gz({"dominant_colours": b"#!/bin/sh\necho dominant_colours 1.4.1\n"})
    session = FakeSession(
        {
            LATEST: FakeResponse(
                json_data={"tag_name": "v1.4.1", "assets": [{"browser_download_url": LINUX_URL}]}
            ),
            LINUX_URL: FakeResponse(content=archive),
        }
    )
    observed = {}

    def _verify(run_id, request, ctx):
        path = ctx.fetch.binary_path
        observed["exists"] = os.path.isfile(path)
        observed["executable"] = os.access(path, os.X_OK)
        return verify_step.run(run_id, request, ctx)

    order: list[str] = []
    steps = _recording_steps(order)
    steps[StepName.FETCH_RELEASE] = fetch_step.run
    steps[StepName.VERIFY_BINARY] = _verify
    ctx = PipelineContext(release=release_cfg, session=session)

    status = pipeline_run.run_pipeline(_request(), "run4", ctx=ctx, steps=steps)

    assert status.state == "SUCCEEDED"
    assert observed == {"exists": True, "executable": True}
    assert ctx.smoke is not None and ctx.smoke.ok
    fetched = store.read_json(runs_tmp / "run4" / "steps" / "fetch_release.json")
    assert fetched["asset_url"] == LINUX_URL


def test_no_matching_asset_is_attributed_to_fetch_step(runs_tmp, release_cfg) -> None:
    session = FakeSession(
        {LATEST: FakeResponse(json_data={"assets": [{"browser_download_url": "https://x/tool-darwin.tar.gz"}]})}
    )
    steps = _recording_steps([])
    steps[StepName.FETCH_RELEASE] = fetch_step.run

    with pytest.raises(StepFailedError, match="step fetch_release failed: No release asset matches"):
        pipeline_run.run_pipeline(
            _request(), "run5", ctx=PipelineContext(release=release_cfg, session=session), steps=steps
        )


def test_dry_run_launch_records_plan_without_starting(runs_tmp, monkeypatch) -> None:
    def _boom(plan, runner=None):  # pragma: no cover - must not be reached
        raise AssertionError("server must not start in dry run")

    monkeypatch.setattr("launchpad.pipeline.steps.launch_step.launch_server", _boom)
    steps = _recording_steps([])
    del steps[StepName.LAUNCH_SERVER]
    ctx = PipelineContext()

    status = pipeline_run.run_pipeline(_request(mode="dev"), "run6", ctx=ctx, steps=steps)

    assert status.exit_code == 0
    assert ctx.plan.mode == "dev"
    plan = store.read_json(runs_tmp / "run6" / "steps" / "launch_server.json")
    assert plan["argv"][-2:] == ["-m", "api.main"]


def test_server_exit_code_is_reported(runs_tmp, monkeypatch) -> None:
    monkeypatch.setattr("launchpad.pipeline.steps.launch_step.launch_server", lambda plan: 3)
    steps = _recording_steps([])
    del steps[StepName.LAUNCH_SERVER]

    status = pipeline_run.run_pipeline(_request(dry_run=False), "run7", steps=steps)

    assert status.exit_code == 3
    assert status.state == "FAILED"
    assert status.failed_step == "launch_server"


def test_main_returns_one_and_prints_failed_step(runs_tmp, monkeypatch, capsys, tmp_path) -> None:
    monkeypatch.setattr(
        pipeline_run,
        "DEFAULT_STEPS",
        _recording_steps([], fail_at=StepName.INSTALL_DEPENDENCIES),
    )

    code = pipeline_run.main(["--run-id", "cli1", "--mode", "prod", "--requirements", str(tmp_path / "r.txt")])

    assert code == 1
    assert "step install_dependencies failed" in capsys.readouterr().err
    assert store.read_status("cli1").failed_step == "install_dependencies"


def test_main_resolves_mode_from_debug_env(runs_tmp, monkeypatch) -> None:
    monkeypatch.setenv("DEBUG", "yes")
    monkeypatch.setattr(pipeline_run, "DEFAULT_STEPS", _recording_steps([]))

    assert pipeline_run.main(["--run-id", "cli2", "--dry-run"]) == 0
    assert store.read_json(runs_tmp / "cli2" / "request.json")["mode"] == "dev"


def test_main_defaults_resolve_against_working_directory(tmp_path, monkeypatch) -> None:
    for var in ("LAUNCHPAD_BASE_DIR", "LAUNCHPAD_INSTALL_DIR", "LAUNCHPAD_REQUIREMENTS"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    seen = {}

    def _install(run_id, request, ctx):
        seen["requirements"] = request.requirements
        seen["install_dir"] = ctx.release.install_dir

    steps = _recording_steps([])
    steps[StepName.INSTALL_DEPENDENCIES] = _install
    monkeypatch.setattr(pipeline_run, "DEFAULT_STEPS", steps)

    assert pipeline_run.main(["--run-id", "cwd1", "--mode", "prod", "--dry-run"]) == 0

    root = tmp_path.resolve()
    assert seen["requirements"] == str(root / "requirements.txt")
    assert seen["install_dir"] == str(root)
    assert (root / "runs" / "cwd1" / "status.json").exists()


def test_request_json_round_trips(runs_tmp) -> None:
    request = _request(mode="dev", skip_deps=True, strict_smoke_test=True)

    pipeline_run.run_pipeline(request, "run8", steps=_recording_steps([]))

    saved = store.read_json(runs_tmp / "run8" / "request.json")
    assert BootstrapRequest.from_dict(saved) == request
