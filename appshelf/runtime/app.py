"""Runtime composition for the interactive launcher session."""

from __future__ import annotations

import logging
import sys
from queue import Queue

from ..config import ShelfConfig
from ..icons import load_icons
from ..launcher import launch_app
from ..render import ShelfRenderer
from ..render_cache import RenderCache
from ..state import SessionState
from .effects import EffectCollaborators, EffectRunner
from .loop import LoopSession, RuntimeLoopTiming, run_main_loop
from .terminal import TerminalController

logger = logging.getLogger(__name__)


def build_session(config: ShelfConfig, terminal: TerminalController) -> LoopSession:
    """Wire state, cache, workers and renderer around one terminal."""
    apps = config.display_apps()
    events: Queue = Queue()
    cache = RenderCache()
    runner = EffectRunner(
        events,
        apps,
        EffectCollaborators(
            query_geometry=terminal.query_geometry,
            load_icons=load_icons,
            launch_app=launch_app,
        ),
    )
    return LoopSession(
        state=SessionState(app_count=len(apps)),
        cache=cache,
        config=config,
        events=events,
        runner=runner,
        renderer=ShelfRenderer(terminal, cache, config),
        terminal=terminal,
    )


def run_shelf(config: ShelfConfig, timing: RuntimeLoopTiming | None = None) -> None:
    """Run the launcher on the process's controlling terminal."""
    stdin_fd = sys.stdin.fileno()
    stdout_fd = sys.stdout.fileno()
    terminal = TerminalController(stdin_fd, stdout_fd)
    session = build_session(config, terminal)
    logger.info(
        "starting shelf: %d apps, grid %dx%d",
        len(config.display_apps()),
        config.grid.rows,
        config.grid.columns,
    )
    run_main_loop(session, stdin_fd, timing or RuntimeLoopTiming())
    logger.info("shelf stopped after %d events", session.handled_events)
