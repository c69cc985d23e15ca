"""Grid geometry for the launcher bar.

Everything here is a pure function of terminal size, grid shape and cell
style. Units are terminal character cells unless a name says ``px``.
The icon grid is anchored to the bottom of the terminal; whatever rows remain
above it form the top row.
"""

from __future__ import annotations

from dataclasses import dataclass

from .config import GridSpec, ShelfConfig, StyleSpec

BORDER_CELLS = 2
FALLBACK_CELL_WIDTH_PX = 10
FALLBACK_CELL_HEIGHT_PX = 20


@dataclass(frozen=True)
class CellDim:
    """Pixel size of one terminal character cell."""

    width: int
    height: int


FALLBACK_CELL = CellDim(FALLBACK_CELL_WIDTH_PX, FALLBACK_CELL_HEIGHT_PX)


@dataclass(frozen=True)
class TerminalGeometry:
    columns: int
    rows: int
    pixel_width: int
    pixel_height: int

    @property
    def cell(self) -> CellDim:
        """Derive per-cell pixels, falling back per axis when unreported."""
        width = FALLBACK_CELL_WIDTH_PX
        height = FALLBACK_CELL_HEIGHT_PX
        if self.pixel_width > 0 and self.columns > 0:
            width = max(1, self.pixel_width // self.columns)
        if self.pixel_height > 0 and self.rows > 0:
            height = max(1, self.pixel_height // self.rows)
        return CellDim(width, height)


@dataclass(frozen=True)
class CellBounds:
    x: int
    y: int
    width: int
    height: int

    def contains(self, x: int, y: int) -> bool:
        return self.x <= x < self.x + self.width and self.y <= y < self.y + self.height


@dataclass(frozen=True)
class ShelfGeometry:
    """Layout snapshot for one terminal size."""

    term_width: int
    term_height: int
    grid: GridSpec
    style: StyleSpec
    app_count: int
    icon_scales: tuple[float, ...] = ()

    @classmethod
    def for_config(cls, config: ShelfConfig, term_width: int, term_height: int) -> ShelfGeometry:
        apps = config.display_apps()
        return cls(
            term_width=term_width,
            term_height=term_height,
            grid=config.grid,
            style=config.style,
            app_count=len(apps),
            icon_scales=tuple(config.icon_scale(app) for app in apps),
        )

    def grid_cell_size(self) -> tuple[int, int]:
        """Return ``(width, height)`` of one grid cell.

        Character cells are roughly twice as tall as they are wide, so half
        the width gives a cell that looks square.
        """
        if self.grid.degenerate:
            return 0, 0
        width = self.term_width // self.grid.columns
        height = max(1, width // 2)
        return width, height

    def icon_grid_dimensions(self) -> tuple[int, int]:
        if self.grid.degenerate:
            return 0, 0
        _cell_w, cell_h = self.grid_cell_size()
        height = min(cell_h * self.grid.rows, self.term_height - 1)
        return self.term_width, height

    def top_row_height(self) -> int:
        _width, grid_height = self.icon_grid_dimensions()
        if grid_height >= self.term_height - 1:
            return 0
        return self.term_height - grid_height

    def icon_cell_size(self) -> tuple[int, int]:
        """Return the drawable icon area inside a cell after padding and border."""
        cell_w, cell_h = self.grid_cell_size()
        inset = 2 * self.style.padding + (BORDER_CELLS if self.style.border else 0)
        return max(1, cell_w - inset), max(1, cell_h - inset)

    def _column_remainder(self) -> int:
        cell_w, _cell_h = self.grid_cell_size()
        return self.term_width - cell_w * self.grid.columns

    def cell_width_for_column(self, col: int) -> int:
        """Return the width of column ``col``.

        The first ``remainder`` columns are one cell wider so the columns
        exactly fill the terminal width.
        """
        cell_w, _cell_h = self.grid_cell_size()
        if col < self._column_remainder():
            return cell_w + 1
        return cell_w

    def cell_x_position(self, col: int) -> int:
        cell_w, _cell_h = self.grid_cell_size()
        remainder = self._column_remainder()
        if col <= remainder:
            return col * (cell_w + 1)
        return remainder * (cell_w + 1) + (col - remainder) * cell_w

    def column_at(self, x: int) -> int | None:
        """Invert ``cell_x_position``: map an x offset to its column."""
        cell_w, _cell_h = self.grid_cell_size()
        if cell_w <= 0 or x < 0:
            return None
        remainder = self._column_remainder()
        wide_span = remainder * (cell_w + 1)
        if x < wide_span:
            col = x // (cell_w + 1)
        else:
            col = remainder + (x - wide_span) // cell_w
        if col >= self.grid.columns:
            return None
        return col

    def cell_bounds(self, index: int) -> CellBounds | None:
        """Return the terminal-cell rectangle of app ``index``, row-major."""
        cell_w, cell_h = self.grid_cell_size()
        if cell_w <= 0 or cell_h <= 0:
            return None
        if index < 0 or index >= self.app_count:
            return None
        row, col = divmod(index, self.grid.columns)
        if row >= self.grid.rows:
            return None
        return CellBounds(
            x=self.cell_x_position(col),
            y=self.top_row_height() + row * cell_h,
            width=self.cell_width_for_column(col),
            height=cell_h,
        )

    def hit_test(self, x: int, y: int) -> int | None:
        """Return the app index under zero-based ``(x, y)``, or ``None``."""
        cell_w, cell_h = self.grid_cell_size()
        if cell_w <= 0 or cell_h <= 0:
            return None
        top_height = self.top_row_height()
        if y < top_height:
            return None

        col = self.column_at(x)
        row = (y - top_height) // cell_h
        if col is None or row >= self.grid.rows:
            return None

        index = row * self.grid.columns + col
        if index >= self.app_count:
            return None
        return index

    def icon_scale(self, index: int) -> float:
        if 0 <= index < len(self.icon_scales):
            return self.icon_scales[index]
        return 1.0

    def visible_cells(self) -> list[tuple[int, CellBounds]]:
        """Return ``(index, bounds)`` for every app that has a grid slot."""
        out: list[tuple[int, CellBounds]] = []
        for index in range(self.app_count):
            bounds = self.cell_bounds(index)
            if bounds is None:
                break
            out.append((index, bounds))
        return out
