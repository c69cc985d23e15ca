"""Single-threaded event reducer for the launcher session.

``dispatch`` consumes one event, updates ``SessionState`` and the render
cache in place, and returns the commands the runtime should execute. It never
performs I/O or blocks; asynchronous work is always requested as a command
whose completion comes back as a later event.
"""

from __future__ import annotations

import logging

from .config import ShelfConfig
from .events import (
    ClearError,
    ClearScreen,
    ClearSelection,
    Command,
    Defer,
    FramePainted,
    IconsLoaded,
    KeyPress,
    LaunchApp,
    LaunchResult,
    LoadIcons,
    MOUSE_RELEASE,
    MouseEvent,
    QueryTerminalGeometry,
    Quit,
    Redraw,
    TerminalGeometryReport,
    Tick,
    WindowSize,
)
from .geometry import ShelfGeometry
from .render_cache import RenderCache
from .state import SessionState

SELECTION_FLASH_SECONDS = 0.3
ERROR_FLASH_SECONDS = 0.6
QUIT_KEYS = frozenset({"q", "Q", "ESC", "CTRL_C"})

logger = logging.getLogger(__name__)


def session_geometry(state: SessionState, config: ShelfConfig) -> ShelfGeometry:
    return ShelfGeometry.for_config(config, state.term_width, state.term_height)


def _on_window_size(
    state: SessionState,
    cache: RenderCache,
    config: ShelfConfig,
    event: WindowSize,
) -> list[Command]:
    first_report = state.term_width == 0 and state.term_height == 0
    if not first_report:
        if not config.behavior.reflow_on_resize:
            logger.debug("ignoring resize to %dx%d", event.columns, event.rows)
            return []
        if (event.columns, event.rows) == (state.term_width, state.term_height):
            return []
    state.term_width = event.columns
    state.term_height = event.rows
    state.needs_full_redraw = True
    cache.clear()
    # Pixel metrics in the size report are unreliable; ask the terminal again.
    return [QueryTerminalGeometry()]


def _on_geometry_report(
    state: SessionState,
    cache: RenderCache,
    event: TerminalGeometryReport,
) -> list[Command]:
    state.cell_px = event.cell
    state.ready = True
    state.needs_full_redraw = True
    cache.clear()
    logger.debug("cell size %dx%d px", event.cell.width, event.cell.height)
    return [ClearScreen()]


def _on_icons_loaded(state: SessionState, event: IconsLoaded) -> list[Command]:
    icons = list(event.icons[: state.app_count])
    icons.extend([None] * (state.app_count - len(icons)))
    state.icons = icons
    state.icons_loaded = True
    state.needs_full_redraw = True
    return [Redraw()]


def _on_mouse(state: SessionState, config: ShelfConfig, event: MouseEvent) -> list[Command]:
    if event.action != MOUSE_RELEASE or event.button != "left":
        return []
    if not state.ready:
        return []
    index = session_geometry(state, config).hit_test(event.x, event.y)
    if index is None or not state.valid_index(index):
        return []

    app = config.display_apps()[index]
    state.selected = index
    state.selection_serial += 1
    logger.info("launching %s (%s)", app.name, app.package)
    return [
        LaunchApp(index=index, package=app.package, activity=app.activity),
        Defer(SELECTION_FLASH_SECONDS, ClearSelection(index, state.selection_serial)),
        Redraw(),
    ]


def _on_launch_result(state: SessionState, config: ShelfConfig, event: LaunchResult) -> list[Command]:
    if event.ok:
        if config.behavior.close_on_launch:
            state.running = False
            return [Quit()]
        return []
    if not state.valid_index(event.index):
        return []
    logger.warning("launch of app %d failed: %s", event.index, event.error)
    state.error_flash[event.index] = True
    state.error_serials[event.index] += 1
    return [
        Defer(ERROR_FLASH_SECONDS, ClearError(event.index, state.error_serials[event.index])),
        Redraw(),
    ]


def _on_clear_selection(state: SessionState, event: ClearSelection) -> list[Command]:
    if state.selected != event.index or state.selection_serial != event.serial:
        return []
    state.selected = None
    return [Redraw()]


def _on_clear_error(state: SessionState, event: ClearError) -> list[Command]:
    if not state.valid_index(event.index):
        return []
    if not state.error_flash[event.index]:
        return []
    if state.error_serials[event.index] != event.serial:
        return []
    state.error_flash[event.index] = False
    return [Redraw()]


def _on_tick(state: SessionState, event: Tick) -> list[Command]:
    if event.clock_label == state.clock_label:
        return []
    state.clock_label = event.clock_label
    return [Redraw()] if state.ready else []


def dispatch(
    state: SessionState,
    cache: RenderCache,
    config: ShelfConfig,
    event: object,
) -> list[Command]:
    """Apply one event to ``state`` and return follow-up commands."""
    if isinstance(event, KeyPress):
        if event.key in QUIT_KEYS:
            state.running = False
            return [Quit()]
        return []
    if isinstance(event, WindowSize):
        return _on_window_size(state, cache, config, event)
    if isinstance(event, TerminalGeometryReport):
        return _on_geometry_report(state, cache, event)
    if isinstance(event, IconsLoaded):
        return _on_icons_loaded(state, event)
    if isinstance(event, MouseEvent):
        return _on_mouse(state, config, event)
    if isinstance(event, LaunchResult):
        return _on_launch_result(state, config, event)
    if isinstance(event, ClearSelection):
        return _on_clear_selection(state, event)
    if isinstance(event, ClearError):
        return _on_clear_error(state, event)
    if isinstance(event, Tick):
        return _on_tick(state, event)
    if isinstance(event, FramePainted):
        if event.icons_drawn:
            state.needs_full_redraw = False
        return []
    logger.debug("unhandled event %r", event)
    return []


def initial_commands() -> list[Command]:
    """Commands issued once at startup, before any event arrives."""
    return [LoadIcons()]
