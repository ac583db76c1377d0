"""Pytest configuration to make the project root importable.

This ensures that ``import launchpad`` and ``import api`` work when tests are
run from the repository root or other locations without installing the
project.
"""

from __future__ import annotations

import io
import os
import sys
import tarfile
from pathlib import Path

import pytest

# Project root = parent directory of this tests/ folder
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from launchpad.config import ReleaseConfig  # noqa: E402
from launchpad.pipeline import store  # noqa: E402


@pytest.fixture
def runs_tmp(tmp_path, monkeypatch) -> Path:
    """Isolate runs/ under tmp_path so tests don't touch the repo."""
    monkeypatch.setattr(store, "repo_root", lambda: tmp_path)
    return tmp_path / "runs"


@pytest.fixture
def release_cfg(tmp_path) -> ReleaseConfig:
    return ReleaseConfig(
        repo="alexwlchan/dominant_colours",
        api_base="https://api.example.test",
        platform_marker="linux",
        binary_name="dominant_colours",
        install_dir=str(tmp_path / "bin"),
        github_token=None,
        timeout_seconds=5.0,
    )


def make_tar_gz(members: dict[str, bytes]) -> bytes:
    """Build an in-memory .tar.gz with the given {name: content} regular files."""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tf:
        for name, content in members.items():
            info = tarfile.TarInfo(name=name)
            info.size = len(content)
            info.mode = 0o644
            tf.addfile(info, io.BytesIO(content))
    return buf.getvalue()


class FakeResponse:
    def __init__(self, *, status_code: int = 200, json_data=None, content: bytes = b"", json_error: bool = False):
        self.status_code = status_code
        self._json = json_data
        self._json_error = json_error
        self.content = content

    def raise_for_status(self) -> None:
        import requests

        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)

    def json(self):
        if self._json_error:
            raise ValueError("No JSON object could be decoded")
        return self._json

    def iter_content(self, chunk_size: int = 1):
        for i in range(0, len(self.content), chunk_size):
            yield self.content[i : i + chunk_size]

    def __enter__(self):
        return self

    def __exit__(self, *exc) -> None:
        return None


class FakeSession:
    """Minimal stand-in for requests.Session keyed by URL."""

    def __init__(self, routes: dict[str, FakeResponse | Exception]):
        self.routes = routes
        self.calls: list[tuple[str, dict]] = []

    def get(self, url: str, **kwargs):
        self.calls.append((url, kwargs))
        resp = self.routes.get(url)
        if resp is None:
            return FakeResponse(status_code=404)
        if isinstance(resp, Exception):
            raise resp
        return resp
