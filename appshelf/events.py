"""Typed messages exchanged between the dispatcher and its collaborators.

Events flow into ``dispatch``; commands flow out of it. Every asynchronous
command produces exactly one event back on the runtime queue.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from PIL import Image

from .geometry import CellDim


# Events


@dataclass(frozen=True)
class WindowSize:
    columns: int
    rows: int


@dataclass(frozen=True)
class TerminalGeometryReport:
    cell: CellDim


@dataclass(frozen=True)
class IconsLoaded:
    icons: tuple[Image.Image, ...]


MOUSE_PRESS = "press"
MOUSE_RELEASE = "release"
MOUSE_WHEEL = "wheel"


@dataclass(frozen=True)
class MouseEvent:
    """Pointer event in zero-based terminal cell coordinates."""

    action: str
    x: int
    y: int
    button: str = "left"


@dataclass(frozen=True)
class KeyPress:
    key: str


@dataclass(frozen=True)
class LaunchResult:
    index: int
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class ClearSelection:
    index: int
    serial: int


@dataclass(frozen=True)
class ClearError:
    index: int
    serial: int


@dataclass(frozen=True)
class Tick:
    clock_label: str


@dataclass(frozen=True)
class FramePainted:
    icons_drawn: bool


Event = Union[
    WindowSize,
    TerminalGeometryReport,
    IconsLoaded,
    MouseEvent,
    KeyPress,
    LaunchResult,
    ClearSelection,
    ClearError,
    Tick,
    FramePainted,
]


# Commands


@dataclass(frozen=True)
class QueryTerminalGeometry:
    pass


@dataclass(frozen=True)
class LoadIcons:
    pass


@dataclass(frozen=True)
class LaunchApp:
    index: int
    package: str
    activity: str = ""


@dataclass(frozen=True)
class Defer:
    delay_seconds: float
    event: Any


@dataclass(frozen=True)
class ClearScreen:
    pass


@dataclass(frozen=True)
class Redraw:
    pass


@dataclass(frozen=True)
class Quit:
    pass


Command = Union[QueryTerminalGeometry, LoadIcons, LaunchApp, Defer, ClearScreen, Redraw, Quit]
