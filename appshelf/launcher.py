"""App launch helper for Android activity manager starts.

Runs ``am start`` and turns a failed exit or an ``Error`` line on stderr into
``LaunchError``. Callers on the runtime side convert that into a result event.
"""

from __future__ import annotations

import logging
import subprocess

from .errors import LaunchError

AM_BINARY = "am"
LAUNCH_TIMEOUT_SECONDS = 15.0

logger = logging.getLogger(__name__)


def launch_command(package: str, activity: str = "") -> list[str]:
    """Build the activity-manager argv; no activity starts the default one."""
    if activity:
        return [AM_BINARY, "start", "-n", f"{package}/{activity}"]
    return [AM_BINARY, "start", package]


def launch_app(package: str, activity: str = "") -> None:
    cmd = launch_command(package, activity)
    logger.debug("running %s", cmd)
    try:
        completed = subprocess.run(
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
            text=True,
            errors="replace",
            check=False,
            timeout=LAUNCH_TIMEOUT_SECONDS,
        )
    except FileNotFoundError as exc:
        raise LaunchError(f"{AM_BINARY} not found: {exc}") from exc
    except (OSError, subprocess.SubprocessError) as exc:
        raise LaunchError(f"failed to run {AM_BINARY}: {exc}") from exc

    stderr = completed.stderr or ""
    if completed.returncode != 0:
        raise LaunchError(stderr or f"{AM_BINARY} exited with status {completed.returncode}")
    if "Error" in stderr:
        raise LaunchError(stderr)
