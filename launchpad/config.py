# launchpad/config.py

import os
from dataclasses import dataclass, field
from enum import Enum

# --- Base paths ---
# Resolved at call time: the working directory the bootstrap is started from,
# unless LAUNCHPAD_BASE_DIR overrides it.
def base_dir() -> str:
    return os.path.abspath(os.getenv("LAUNCHPAD_BASE_DIR") or os.getcwd())


# ---------------------------
# Structured configuration
# ---------------------------

class ServerMode(str, Enum):
    DEV = "dev"
    PROD = "prod"


# Legacy deployment flag: DEBUG=yes selects the development server.
DEBUG_SENTINEL = "yes"


@dataclass(frozen=True)
class ReleaseConfig:
    """Where the external binary comes from and where it is installed.

    Values can be overridden via environment variables:
    - LAUNCHPAD_RELEASE_REPO
    - LAUNCHPAD_GITHUB_API
    - LAUNCHPAD_PLATFORM_MARKER
    - LAUNCHPAD_BINARY_NAME
    - LAUNCHPAD_INSTALL_DIR
    - LAUNCHPAD_HTTP_TIMEOUT
    - GITHUB_TOKEN
    """

    repo: str = field(
        default_factory=lambda: os.getenv("LAUNCHPAD_RELEASE_REPO", "alexwlchan/dominant_colours")
    )
    api_base: str = field(
        default_factory=lambda: os.getenv("LAUNCHPAD_GITHUB_API", "https://api.github.com")
    )
    platform_marker: str = field(
        default_factory=lambda: os.getenv("LAUNCHPAD_PLATFORM_MARKER", "linux")
    )
    binary_name: str = field(
        default_factory=lambda: os.getenv("LAUNCHPAD_BINARY_NAME", "dominant_colours")
    )
    install_dir: str = field(
        default_factory=lambda: os.getenv("LAUNCHPAD_INSTALL_DIR") or base_dir()
    )
    github_token: str | None = field(default_factory=lambda: os.getenv("GITHUB_TOKEN") or None)
    timeout_seconds: float = field(
        default_factory=lambda: float(os.getenv("LAUNCHPAD_HTTP_TIMEOUT", "30"))
    )
    version_flag: str = "--version"

    @property
    def archive_name(self) -> str:
        return f"{self.binary_name}.tar.gz"

    def latest_release_url(self) -> str:
        return f"{self.api_base.rstrip('/')}/repos/{self.repo}/releases/latest"

    def archive_path(self) -> str:
        return os.path.join(self.install_dir, self.archive_name)

    def binary_path(self) -> str:
        return os.path.join(self.install_dir, self.binary_name)


@dataclass(frozen=True)
class ServerConfig:
    """How the web application is served.

    ``app_target`` is the import path handed to gunicorn in production;
    ``dev_module`` is the module run directly for the development server.
    """

    host: str = field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "8000")))
    workers: int = field(default_factory=lambda: int(os.getenv("LAUNCHPAD_WORKERS", "4")))
    app_target: str = "api.main:app"
    dev_module: str = "api.main"
    worker_class: str = "uvicorn_worker.UvicornWorker"

    @property
    def bind(self) -> str:
        return f"{self.host}:{self.port}"


def resolve_server_mode(value: str | None = None, *, debug: str | None = None) -> ServerMode:
    """Pick the server mode.

    An explicit ``value`` ("dev" / "prod", case-insensitive) always wins.
    Otherwise the ``DEBUG`` flag decides: exactly ``"yes"`` means DEV, any
    other value (including unset) means PROD. ``debug`` defaults to the
    current ``DEBUG`` environment variable.
    """

    if value is not None:
        normalized = str(value).strip().lower()
        try:
            return ServerMode(normalized)
        except ValueError:
            options = ", ".join(m.value for m in ServerMode)
            raise ValueError(f"Unknown server mode {value!r}; expected one of: {options}") from None

    flag = os.getenv("DEBUG") if debug is None else debug
    return ServerMode.DEV if flag == DEBUG_SENTINEL else ServerMode.PROD


def requirements_path() -> str:
    """Path of the pip requirements file installed before anything else."""
    return os.getenv("LAUNCHPAD_REQUIREMENTS") or os.path.join(base_dir(), "requirements.txt")


def log_level() -> str:
    return os.getenv("LAUNCHPAD_LOG_LEVEL", "INFO").upper()


# ---------------------------
# Singletons
# ---------------------------

RELEASE = ReleaseConfig()
SERVER = ServerConfig()
