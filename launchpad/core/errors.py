"""Exceptions raised by the bootstrap.

Every failure the pipeline can attribute to a step derives from
``BootstrapError``; ``StepFailedError`` wraps one with the step's name.
"""

from __future__ import annotations

from typing import Iterable


class BootstrapError(RuntimeError):
    pass


class DependencyInstallError(BootstrapError):
    pass


class ReleaseMetadataError(BootstrapError):
    pass


class NoMatchingAssetError(BootstrapError):
    """No release asset URL satisfied the platform predicate."""

    def __init__(self, description: str, candidates: Iterable[str] = ()) -> None:
        self.description = description
        self.candidates = list(candidates)
        if self.candidates:
            listing = ", ".join(self.candidates)
            msg = f"No release asset matches {description}; candidates were: {listing}"
        else:
            msg = f"No release asset matches {description}; the release has no downloadable assets"
        super().__init__(msg)


class DownloadError(BootstrapError):
    pass


class ExtractionError(BootstrapError):
    pass


class SmokeTestError(BootstrapError):
    pass


class ServerLaunchError(BootstrapError):
    pass


class StepFailedError(BootstrapError):
    def __init__(self, step: str, cause: BaseException) -> None:
        self.step = str(step)
        self.cause = cause
        super().__init__(f"step {self.step} failed: {cause}")
