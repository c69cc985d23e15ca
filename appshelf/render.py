"""Screen painting for the launcher bar.

Text (cell borders, labels, the top-row clock) is composed into one escape
sequence string per frame. Icons are painted through Kitty graphics only when
the session asks for a full redraw; border-only frames leave them in place.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from .config import ShelfConfig
from .geometry import CellBounds, CellDim, ShelfGeometry
from .icons import RenderedIcon, render_icon
from .render_cache import CacheKey, RenderCache
from .runtime.terminal import TerminalController
from .state import SessionState

RESET = "\x1b[0m"
BORDER_COLOR = "\x1b[90m"
SELECTED_COLOR = "\x1b[96m"
ERROR_COLOR = "\x1b[91m"
LABEL_COLOR = "\x1b[37m"
CLOCK_COLOR = "\x1b[1m"

TOP_LEFT = "╭"
TOP_RIGHT = "╮"
BOTTOM_LEFT = "╰"
BOTTOM_RIGHT = "╯"
HORIZONTAL = "─"
VERTICAL = "│"


def _move(x: int, y: int) -> str:
    """Cursor-position escape for zero-based ``(x, y)``."""
    return f"\x1b[{y + 1};{x + 1}H"


def _truncate(text: str, width: int) -> str:
    if width <= 0:
        return ""
    if len(text) <= width:
        return text
    if width == 1:
        return text[:1]
    return text[: width - 1] + "…"


def border_color(state: SessionState, index: int) -> str:
    if index < len(state.error_flash) and state.error_flash[index]:
        return ERROR_COLOR
    if state.selected == index:
        return SELECTED_COLOR
    return BORDER_COLOR


def cell_border(bounds: CellBounds, color: str, label: str = "") -> str:
    """Return the rounded border of one cell, with ``label`` in its bottom edge."""
    if bounds.width < 2 or bounds.height < 2:
        return ""
    inner = bounds.width - 2
    out = [color, _move(bounds.x, bounds.y), TOP_LEFT, HORIZONTAL * inner, TOP_RIGHT]
    for dy in range(1, bounds.height - 1):
        out.append(_move(bounds.x, bounds.y + dy) + VERTICAL)
        out.append(_move(bounds.x + bounds.width - 1, bounds.y + dy) + VERTICAL)

    text = _truncate(label, inner)
    left = (inner - len(text)) // 2
    bottom = HORIZONTAL * left
    if text:
        bottom += LABEL_COLOR + text + color
    bottom += HORIZONTAL * (inner - left - len(text))
    out.append(_move(bounds.x, bounds.y + bounds.height - 1) + BOTTOM_LEFT + bottom + BOTTOM_RIGHT)
    out.append(RESET)
    return "".join(out)


def cell_label(bounds: CellBounds, label: str) -> str:
    """Borderless cells print their label on the last row."""
    text = _truncate(label, bounds.width)
    if not text or bounds.height < 2:
        return ""
    x = bounds.x + (bounds.width - len(text)) // 2
    return f"{_move(x, bounds.y + bounds.height - 1)}{LABEL_COLOR}{text}{RESET}"


def clock_line(geometry: ShelfGeometry, label: str) -> str:
    top = geometry.top_row_height()
    if top <= 0 or not label:
        return ""
    text = _truncate(label, geometry.term_width)
    y = top // 2
    x = max(0, (geometry.term_width - len(text)) // 2)
    return f"{_move(0, y)}\x1b[2K{_move(x, y)}{CLOCK_COLOR}{text}{RESET}"


def build_frame(state: SessionState, config: ShelfConfig, geometry: ShelfGeometry) -> str:
    """Compose the text layer: clock plus every visible cell."""
    apps = config.display_apps()
    out = [clock_line(geometry, state.clock_label)]
    for index, bounds in geometry.visible_cells():
        name = apps[index].name
        if config.style.border:
            out.append(cell_border(bounds, border_color(state, index), name))
        else:
            out.append(cell_label(bounds, name))
    out.append(_move(0, max(0, geometry.term_height - 1)))
    return "".join(out)


@dataclass(frozen=True)
class IconPlacement:
    index: int
    x: int
    y: int
    width_cells: int
    height_cells: int
    icon: RenderedIcon


def icon_footprint(geometry: ShelfGeometry, index: int) -> tuple[int, int]:
    """Return the scaled icon box in cells, never larger than the cell interior."""
    icon_w, icon_h = geometry.icon_cell_size()
    bounds = geometry.cell_bounds(index)
    if bounds is None:
        return icon_w, icon_h
    border = 2 if geometry.style.border else 0
    max_w = max(1, bounds.width - border)
    max_h = max(1, bounds.height - border)
    scale = geometry.icon_scale(index)
    width = min(max_w, max(1, round(icon_w * scale)))
    height = min(max_h, max(1, round(icon_h * scale)))
    return width, height


def place_icons(
    state: SessionState,
    geometry: ShelfGeometry,
    cache: RenderCache,
    cell_px: CellDim,
) -> list[IconPlacement]:
    """Render (or reuse) every loaded icon and center it in its cell."""
    placements: list[IconPlacement] = []
    for index, bounds in geometry.visible_cells():
        source = state.icons[index] if index < len(state.icons) else None
        if source is None:
            continue
        width_cells, height_cells = icon_footprint(geometry, index)
        key = CacheKey(index, width_cells, height_cells)
        icon = cache.get_or_render(
            key,
            lambda source=source, w=width_cells, h=height_cells: render_icon(
                source, w * cell_px.width, h * cell_px.height
            ),
        )
        shown_w = min(width_cells, max(1, math.ceil(icon.width_px / cell_px.width)))
        shown_h = min(height_cells, max(1, math.ceil(icon.height_px / cell_px.height)))
        placements.append(
            IconPlacement(
                index=index,
                x=bounds.x + (bounds.width - shown_w) // 2,
                y=bounds.y + (bounds.height - shown_h) // 2,
                width_cells=shown_w,
                height_cells=shown_h,
                icon=icon,
            )
        )
    return placements


class ShelfRenderer:
    """Paint session state onto the terminal from the dispatcher thread."""

    def __init__(self, terminal: TerminalController, cache: RenderCache, config: ShelfConfig) -> None:
        self.terminal = terminal
        self.cache = cache
        self.config = config

    def paint(self, state: SessionState) -> bool:
        """Draw one frame and return whether icons were (re)painted."""
        if not state.ready:
            return False
        geometry = ShelfGeometry.for_config(self.config, state.term_width, state.term_height)
        icons_drawn = False
        if state.needs_full_redraw and state.icons_loaded and state.cell_px is not None:
            self.terminal.kitty_clear_images()
            for placement in place_icons(state, geometry, self.cache, state.cell_px):
                self.terminal.kitty_draw_png(
                    placement.icon.payload,
                    col=placement.x + 1,
                    row=placement.y + 1,
                )
            icons_drawn = True
        self.terminal.write(build_frame(state, self.config, geometry))
        return icons_drawn


def describe_layout(geometry: ShelfGeometry, names: list[str] | None = None) -> list[str]:
    """Human-readable geometry summary used by the ``--layout`` CLI mode."""
    cell_w, cell_h = geometry.grid_cell_size()
    grid_w, grid_h = geometry.icon_grid_dimensions()
    icon_w, icon_h = geometry.icon_cell_size()
    lines = [
        f"terminal: {geometry.term_width}x{geometry.term_height}",
        f"grid: {geometry.grid.rows} rows x {geometry.grid.columns} columns",
        f"cell: {cell_w}x{cell_h}",
        f"icon grid: {grid_w}x{grid_h}",
        f"top row: {geometry.top_row_height()}",
        f"icon area: {icon_w}x{icon_h}",
    ]
    for index, bounds in geometry.visible_cells():
        label = names[index] if names and index < len(names) else f"app {index}"
        lines.append(f"[{index}] {label}: x={bounds.x} y={bounds.y} w={bounds.width} h={bounds.height}")
    return lines
