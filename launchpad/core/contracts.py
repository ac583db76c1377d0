from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Literal


@dataclass(frozen=True)
class ReleaseAsset:
    url: str
    name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_api(cls, d: dict[str, Any]) -> "ReleaseAsset | None":
        """Build an asset from one element of the GitHub ``assets`` array.

        Returns None when the element has no usable ``browser_download_url``.
        """
        url = d.get("browser_download_url") if isinstance(d, dict) else None
        if not isinstance(url, str) or not url:
            return None
        name = d.get("name")
        return cls(url=url, name=str(name) if name is not None else None)


@dataclass(frozen=True)
class ReleaseInfo:
    tag_name: str | None
    assets: list[ReleaseAsset] = field(default_factory=list)

    def urls(self) -> list[str]:
        return [a.url for a in self.assets]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class FetchResult:
    asset_url: str
    tag_name: str | None
    archive_path: str
    binary_path: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SmokeTestResult:
    command: list[str]
    returncode: int | None
    stdout: str = ""
    stderr: str = ""
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.returncode == 0

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["ok"] = self.ok
        return d


@dataclass(frozen=True)
class LaunchPlan:
    mode: Literal["dev", "prod"]
    argv: list[str]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class BootstrapRequest:
    mode: Literal["dev", "prod"]
    requirements: str
    skip_deps: bool = False
    strict_smoke_test: bool = False
    dry_run: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "BootstrapRequest":
        return cls(**d)
