import os
import subprocess

import uvicorn
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from launchpad import __version__
from launchpad.config import RELEASE, SERVER

app = FastAPI(
    title="Dominant Colours Web",
    description="Web front for the dominant_colours command-line tool.",
    version=__version__,
)


class ToolVersion(BaseModel):
    binary: str
    version: str


@app.get("/health", summary="Health check", response_description="API health status")
async def health_check():
    """
    Checks the health of the API.
    """
    return {"status": "ok"}


@app.get("/version", response_model=ToolVersion, summary="Installed tool version")
def tool_version():
    """
    Reports the version string of the installed dominant_colours binary.
    """
    binary = RELEASE.binary_path()
    if not os.path.isfile(binary) or not os.access(binary, os.X_OK):
        raise HTTPException(status_code=503, detail=f"{RELEASE.binary_name} is not installed")

    try:
        proc = subprocess.run(
            [binary, RELEASE.version_flag],
            capture_output=True,
            text=True,
            timeout=10,
            check=False,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        raise HTTPException(status_code=503, detail=f"Could not run {RELEASE.binary_name}: {e}")

    if proc.returncode != 0:
        raise HTTPException(status_code=503, detail=f"{RELEASE.binary_name} exited with status {proc.returncode}")

    return ToolVersion(binary=RELEASE.binary_name, version=proc.stdout.strip())


def main() -> None:
    """Development server: a single uvicorn process on HOST/PORT."""
    uvicorn.run(app, host=SERVER.host, port=SERVER.port)


if __name__ == "__main__":
    main()
