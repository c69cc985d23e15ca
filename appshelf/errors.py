"""Error model and exit code contract.

Only configuration problems surface as process exits; every runtime error
kind below is recovered inside the launcher session.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class ExitCode(IntEnum):
    SUCCESS = 0
    INVALID_ARGS = 2
    CONFIG_ERROR = 3
    RUNTIME_ERROR = 4


@dataclass
class ShelfError(Exception):
    message: str
    code: ExitCode = ExitCode.RUNTIME_ERROR
    hint: str = ""

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message} Hint: {self.hint}"
        return self.message


class ConfigError(ShelfError):
    def __init__(self, message: str, *, hint: str = "") -> None:
        super().__init__(message, ExitCode.CONFIG_ERROR, hint)


class LaunchError(ShelfError):
    """App start failed; ``message`` carries the launcher diagnostic text."""

    def __init__(self, message: str) -> None:
        super().__init__(message.strip() or "launch failed")


class GeometryUnavailableError(ShelfError):
    def __init__(self, message: str) -> None:
        super().__init__(message)


class IconLoadError(ShelfError):
    def __init__(self, message: str) -> None:
        super().__init__(message)


def user_facing_error(message: str, *, hint: str = "") -> str:
    if hint:
        return f"Error: {message}. Next step: {hint}"
    return f"Error: {message}."
