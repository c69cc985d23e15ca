"""Main interactive event loop for the launcher bar.

Every event, whether decoded input, a worker completion, or a timer, goes
through one queue and is dispatched to completion before the next. This
loop is intentionally wiring-heavy; state transitions live in ``dispatch``.
"""

from __future__ import annotations

import logging
import shutil
import time
from collections.abc import Callable
from dataclasses import dataclass
from queue import Empty, Queue

from ..config import ShelfConfig
from ..dispatcher import dispatch, initial_commands
from ..events import ClearScreen, FramePainted, Quit, Redraw, Tick, WindowSize
from ..input import read_key, token_to_event
from ..render import ShelfRenderer
from ..render_cache import RenderCache
from ..state import SessionState
from .effects import EffectRunner
from .terminal import TerminalController

logger = logging.getLogger(__name__)


def clock_label() -> str:
    return time.strftime("%H:%M")


@dataclass(frozen=True)
class RuntimeLoopTiming:
    """Timing constants controlling interactive loop behavior."""

    poll_timeout_ms: int = 120


@dataclass
class LoopSession:
    """Everything the loop threads through each dispatch call."""

    state: SessionState
    cache: RenderCache
    config: ShelfConfig
    events: Queue
    runner: EffectRunner
    renderer: ShelfRenderer
    terminal: TerminalController
    redraw_requested: bool = False
    quit_requested: bool = False
    handled_events: int = 0

    def execute(self, command: object) -> None:
        if isinstance(command, Quit):
            self.quit_requested = True
            return
        if isinstance(command, ClearScreen):
            self.terminal.clear_screen()
            self.redraw_requested = True
            return
        if isinstance(command, Redraw):
            self.redraw_requested = True
            return
        if not self.runner.run(command):
            logger.debug("no executor for command %r", command)

    def handle(self, event: object) -> None:
        self.handled_events += 1
        for command in dispatch(self.state, self.cache, self.config, event):
            self.execute(command)

    def drain(self) -> None:
        """Dispatch queued events one at a time until the queue is empty."""
        while not self.quit_requested:
            try:
                event = self.events.get_nowait()
            except Empty:
                return
            self.handle(event)

    def paint_if_requested(self) -> None:
        if not self.redraw_requested or self.quit_requested:
            return
        self.redraw_requested = False
        icons_drawn = self.renderer.paint(self.state)
        self.handle(FramePainted(icons_drawn))


def run_main_loop(
    session: LoopSession,
    stdin_fd: int,
    timing: RuntimeLoopTiming,
    get_terminal_size: Callable[[tuple[int, int]], object] = shutil.get_terminal_size,
    current_clock_label: Callable[[], str] = clock_label,
) -> None:
    """Run the launcher until a quit command is dispatched."""
    last_size: tuple[int, int] | None = None
    last_clock = ""
    try:
        with session.terminal.raw_mode():
            for command in initial_commands():
                session.execute(command)
            while not session.quit_requested and session.state.running:
                term = get_terminal_size((80, 24))
                size = (term.columns, term.lines)
                if size != last_size:
                    last_size = size
                    session.events.put(WindowSize(columns=size[0], rows=size[1]))

                label = current_clock_label()
                if label != last_clock:
                    last_clock = label
                    session.events.put(Tick(label))

                session.drain()
                session.paint_if_requested()
                if session.quit_requested:
                    break

                try:
                    token = read_key(stdin_fd, timeout_ms=timing.poll_timeout_ms)
                except KeyboardInterrupt:
                    token = "CTRL_C"
                event = token_to_event(token)
                if event is not None:
                    session.events.put(event)
    finally:
        session.runner.shutdown()
