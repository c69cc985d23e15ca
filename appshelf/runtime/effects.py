"""Background execution of dispatcher commands.

Each asynchronous command runs on its own daemon thread (or timer) and posts
exactly one completion event onto the shared runtime queue. Workers never
touch session state; failures become events rather than exceptions.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from queue import Queue

from PIL import Image

from ..config import AppEntry
from ..errors import GeometryUnavailableError, LaunchError
from ..events import (
    Defer,
    IconsLoaded,
    LaunchApp,
    LaunchResult,
    LoadIcons,
    QueryTerminalGeometry,
    TerminalGeometryReport,
)
from ..geometry import FALLBACK_CELL, TerminalGeometry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EffectCollaborators:
    """Blocking operations the runner calls off the dispatcher thread."""

    query_geometry: Callable[[], TerminalGeometry]
    load_icons: Callable[[Sequence[AppEntry]], list[Image.Image]]
    launch_app: Callable[[str, str], None]


class EffectRunner:
    """Start one-shot workers for asynchronous commands."""

    def __init__(
        self,
        events: Queue,
        apps: Sequence[AppEntry],
        collaborators: EffectCollaborators,
    ) -> None:
        self._events = events
        self._apps = tuple(apps)
        self._collaborators = collaborators
        self._timers: list[threading.Timer] = []

    def _spawn(self, target: Callable[[], None], name: str) -> threading.Thread:
        worker = threading.Thread(target=target, name=name, daemon=True)
        worker.start()
        return worker

    def _query_geometry(self) -> None:
        try:
            cell = self._collaborators.query_geometry().cell
        except GeometryUnavailableError as exc:
            logger.debug("using fallback cell size: %s", exc)
            cell = FALLBACK_CELL
        except Exception:
            logger.exception("geometry query failed; using fallback cell size")
            cell = FALLBACK_CELL
        self._events.put(TerminalGeometryReport(cell))

    def _load_icons(self) -> None:
        try:
            icons = tuple(self._collaborators.load_icons(self._apps))
        except Exception:
            logger.exception("icon batch failed; cells stay empty")
            icons = ()
        self._events.put(IconsLoaded(icons))

    def _launch(self, command: LaunchApp) -> None:
        try:
            self._collaborators.launch_app(command.package, command.activity)
        except LaunchError as exc:
            self._events.put(LaunchResult(command.index, error=exc.message))
            return
        except Exception as exc:
            logger.exception("launch of %s crashed", command.package)
            self._events.put(LaunchResult(command.index, error=str(exc) or type(exc).__name__))
            return
        self._events.put(LaunchResult(command.index))

    def _defer(self, command: Defer) -> None:
        timer = threading.Timer(command.delay_seconds, self._events.put, args=(command.event,))
        timer.daemon = True
        self._timers = [pending for pending in self._timers if pending.is_alive()]
        self._timers.append(timer)
        timer.start()

    def run(self, command: object) -> bool:
        """Start ``command`` if it is asynchronous; return whether it was."""
        if isinstance(command, QueryTerminalGeometry):
            self._spawn(self._query_geometry, "appshelf-geometry")
            return True
        if isinstance(command, LoadIcons):
            self._spawn(self._load_icons, "appshelf-icons")
            return True
        if isinstance(command, LaunchApp):
            self._spawn(lambda: self._launch(command), f"appshelf-launch-{command.index}")
            return True
        if isinstance(command, Defer):
            self._defer(command)
            return True
        return False

    def shutdown(self) -> None:
        """Stop pending timers; in-flight workers are daemons and simply exit."""
        for timer in self._timers:
            timer.cancel()
        self._timers = []
