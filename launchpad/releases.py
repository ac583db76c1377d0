"""Fetch the latest platform release of the external binary.

Flow
- GET ``/repos/<repo>/releases/latest`` from the GitHub API.
- Keep the asset download URLs, pick the first one containing the platform
  marker (``linux`` by default).
- Download it (redirects followed) to ``<binary_name>.tar.gz``.
- Unpack, move the executable to ``<install_dir>/<binary_name>`` and mark it
  executable.

Every failure raises a ``BootstrapError`` subclass so the pipeline can
attribute it to the fetch step.
"""

from __future__ import annotations

import logging
import os
import shutil
import stat
import tarfile
import tempfile
from pathlib import Path
from typing import Callable, Iterable

import requests

from launchpad.config import RELEASE, ReleaseConfig
from launchpad.core.contracts import FetchResult, ReleaseAsset, ReleaseInfo
from launchpad.core.errors import (
    DownloadError,
    ExtractionError,
    NoMatchingAssetError,
    ReleaseMetadataError,
)

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024


def _headers(cfg: ReleaseConfig, accept: str = "application/vnd.github+json") -> dict[str, str]:
    headers = {
        "Accept": accept,
        "User-Agent": "launchpad-bootstrap",
    }
    if cfg.github_token:
        headers["Authorization"] = f"Bearer {cfg.github_token}"
    return headers


def fetch_latest_release(
    cfg: ReleaseConfig = RELEASE,
    session: requests.Session | None = None,
) -> ReleaseInfo:
    """Query the latest-release endpoint and return its tag and assets."""

    http = session or requests.Session()
    url = cfg.latest_release_url()
    logger.info("Fetching latest release metadata from %s", url)

    try:
        r = http.get(url, headers=_headers(cfg), timeout=cfg.timeout_seconds)
        r.raise_for_status()
    except requests.RequestException as exc:
        raise ReleaseMetadataError(f"Could not fetch release metadata from {url}: {exc}") from exc

    try:
        data = r.json()
    except ValueError as exc:
        raise ReleaseMetadataError(f"Release metadata from {url} is not valid JSON") from exc

    if not isinstance(data, dict) or not isinstance(data.get("assets"), list):
        raise ReleaseMetadataError(f"Release metadata from {url} has no 'assets' list")

    assets = []
    for raw in data["assets"]:
        asset = ReleaseAsset.from_api(raw)
        if asset is not None:
            assets.append(asset)

    tag = data.get("tag_name")
    logger.info("Latest release %s has %d downloadable asset(s)", tag, len(assets))
    return ReleaseInfo(tag_name=str(tag) if tag is not None else None, assets=assets)


def platform_predicate(marker: str) -> Callable[[str], bool]:
    """Return a predicate matching URLs that contain ``marker``.

    An empty marker would match every asset, so it is rejected.
    """

    if not marker:
        raise ValueError("platform marker must be a non-empty string")

    def _matches(url: str) -> bool:
        return marker in url

    _matches.description = f"platform marker {marker!r}"  # type: ignore[attr-defined]
    return _matches


def select_asset(
    assets: Iterable[ReleaseAsset | str],
    predicate: Callable[[str], bool],
) -> str:
    """Return the first asset URL satisfying ``predicate``.

    Raises NoMatchingAssetError when nothing matches, including when
    ``assets`` is empty.
    """

    urls = [a.url if isinstance(a, ReleaseAsset) else str(a) for a in assets]
    for url in urls:
        if predicate(url):
            return url

    description = getattr(predicate, "description", getattr(predicate, "__name__", "predicate"))
    raise NoMatchingAssetError(description, urls)


def download_asset(
    url: str,
    dest: str | Path,
    cfg: ReleaseConfig = RELEASE,
    session: requests.Session | None = None,
) -> Path:
    """Stream ``url`` to ``dest``, following redirects.

    The body is written to a temporary file next to ``dest`` and renamed on
    success, so a failed transfer never leaves a truncated archive behind.
    """

    http = session or requests.Session()
    dest = Path(dest)
    dest.parent.mkdir(parents=True, exist_ok=True)
    logger.info("Downloading %s -> %s", url, dest)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{dest.name}.", dir=str(dest.parent))
    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as fh:
            with http.get(
                url,
                headers=_headers(cfg, accept="application/octet-stream"),
                timeout=cfg.timeout_seconds,
                stream=True,
                allow_redirects=True,
            ) as r:
                r.raise_for_status()
                for chunk in r.iter_content(chunk_size=_CHUNK_SIZE):
                    if chunk:
                        fh.write(chunk)
        os.replace(tmp, dest)
    except requests.RequestException as exc:
        tmp.unlink(missing_ok=True)
        raise DownloadError(f"Download of {url} failed: {exc}") from exc
    except OSError as exc:
        tmp.unlink(missing_ok=True)
        raise DownloadError(f"Could not write {dest}: {exc}") from exc

    return dest


def make_executable(path: str | Path) -> Path:
    """Add execute bits for user/group/other, like ``chmod +x``."""

    p = Path(path)
    mode = p.stat().st_mode
    p.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return p


def _is_within(root: Path, target: Path) -> bool:
    try:
        target.resolve().relative_to(root.resolve())
    except ValueError:
        return False
    return True


def extract_binary(archive: str | Path, binary_name: str, dest_dir: str | Path) -> Path:
    """Unpack ``archive`` and move the ``binary_name`` member to ``dest_dir``.

    Release archives may carry the executable at the top level or inside a
    versioned directory; the first regular file whose basename equals
    ``binary_name`` wins. The result is marked executable.
    """

    archive = Path(archive)
    dest_dir = Path(dest_dir)
    dest_dir.mkdir(parents=True, exist_ok=True)
    target = dest_dir / binary_name

    with tempfile.TemporaryDirectory(prefix="launchpad-extract-", dir=str(dest_dir)) as work:
        work_dir = Path(work)
        try:
            with tarfile.open(archive, "r:gz") as tf:
                members = tf.getmembers()
                for m in members:
                    if not _is_within(work_dir, work_dir / m.name):
                        raise ExtractionError(f"Archive member {m.name!r} escapes the extraction directory")
                candidate = next(
                    (m for m in members if m.isfile() and Path(m.name).name == binary_name),
                    None,
                )
                if candidate is None:
                    names = ", ".join(m.name for m in members) or "<empty>"
                    raise ExtractionError(f"{archive.name} does not contain {binary_name!r} (members: {names})")
                if hasattr(tarfile, "data_filter"):
                    tf.extract(candidate, path=work_dir, filter="data")
                else:
                    # No extraction filters on this interpreter; members were
                    # already checked against the extraction directory above.
                    tf.extract(candidate, path=work_dir)
        except (tarfile.TarError, OSError) as exc:
            raise ExtractionError(f"Could not unpack {archive}: {exc}") from exc

        extracted = work_dir / candidate.name
        if target.exists():
            target.unlink()
        shutil.move(str(extracted), str(target))

    make_executable(target)
    logger.info("Installed %s", target)
    return target


def install_latest_release(
    cfg: ReleaseConfig = RELEASE,
    session: requests.Session | None = None,
) -> FetchResult:
    """Fetch, select, download and unpack the latest platform release."""

    http = session or requests.Session()
    release = fetch_latest_release(cfg, session=http)
    url = select_asset(release.assets, platform_predicate(cfg.platform_marker))
    print(f"[launchpad] Selected asset {url}")

    archive = download_asset(url, cfg.archive_path(), cfg, session=http)
    binary = extract_binary(archive, cfg.binary_name, cfg.install_dir)

    return FetchResult(
        asset_url=url,
        tag_name=release.tag_name,
        archive_path=str(archive),
        binary_path=str(binary),
    )
