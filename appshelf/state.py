from __future__ import annotations

from dataclasses import dataclass, field

from PIL import Image

from .geometry import CellDim


@dataclass
class SessionState:
    """Mutable launcher session record; only ``dispatch`` writes to it."""

    app_count: int
    term_width: int = 0
    term_height: int = 0
    cell_px: CellDim | None = None
    ready: bool = False
    needs_full_redraw: bool = True
    selected: int | None = None
    selection_serial: int = 0
    error_flash: list[bool] = field(default_factory=list)
    error_serials: list[int] = field(default_factory=list)
    icons: list[Image.Image | None] = field(default_factory=list)
    icons_loaded: bool = False
    clock_label: str = ""
    running: bool = True

    def __post_init__(self) -> None:
        if not self.error_flash:
            self.error_flash = [False] * self.app_count
        if not self.error_serials:
            self.error_serials = [0] * self.app_count
        if not self.icons:
            self.icons = [None] * self.app_count

    def valid_index(self, index: int) -> bool:
        return 0 <= index < self.app_count
