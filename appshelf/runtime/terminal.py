"""Terminal control helpers for the launcher session.

Enters and leaves raw alternate-screen mode with click reporting on.
Also queries window pixel geometry and wraps the Kitty graphics protocol calls
used to paint icons.
"""

from __future__ import annotations

import base64
import contextlib
import fcntl
import os
import struct
import termios
import tty

from ..errors import GeometryUnavailableError
from ..geometry import TerminalGeometry

KITTY_CHUNK_SIZE = 4096


def query_terminal_geometry(fd: int) -> TerminalGeometry:
    """Read character and pixel window size via ``TIOCGWINSZ``."""
    try:
        packed = fcntl.ioctl(fd, termios.TIOCGWINSZ, b"\x00" * 8)
    except OSError as exc:
        raise GeometryUnavailableError(f"TIOCGWINSZ failed: {exc}") from exc
    rows, columns, pixel_width, pixel_height = struct.unpack("HHHH", packed)
    if columns <= 0 or rows <= 0:
        raise GeometryUnavailableError("terminal reported zero size")
    return TerminalGeometry(
        columns=columns,
        rows=rows,
        pixel_width=pixel_width,
        pixel_height=pixel_height,
    )


def kitty_png_sequence(
    png: bytes,
    col: int,
    row: int,
    width_cells: int | None = None,
    height_cells: int | None = None,
) -> bytes:
    """Encode a PNG as chunked Kitty direct-transmission escapes.

    ``col``/``row`` are one-based. The cursor is saved and restored around
    the image so text drawing is unaffected. Without a cell box the image is
    shown at its own pixel size.
    """
    box = ""
    if width_cells is not None:
        box += f",c={max(1, width_cells)}"
    if height_cells is not None:
        box += f",r={max(1, height_cells)}"
    encoded = base64.b64encode(png).decode("ascii")
    chunks = [encoded[i : i + KITTY_CHUNK_SIZE] for i in range(0, len(encoded), KITTY_CHUNK_SIZE)] or [""]
    parts = [f"\x1b7\x1b[{max(1, row)};{max(1, col)}H"]
    for idx, chunk in enumerate(chunks):
        more = 1 if idx < len(chunks) - 1 else 0
        if idx == 0:
            control = f"a=T,t=d,f=100,q=2,C=1{box},m={more}"
        else:
            control = f"m={more}"
        parts.append(f"\x1b_G{control};{chunk}\x1b\\")
    parts.append("\x1b8")
    return "".join(parts).encode("ascii")


ENTER_TUI = b"\x1b[?1049h\x1b[?25l\x1b[?1000h\x1b[?1006h"
LEAVE_TUI = b"\x1b[?1000l\x1b[?1006l\x1b[?25h\x1b[?1049l"
KITTY_DELETE_ALL = b"\x1b_Ga=d,d=A,q=2;\x1b\\"


class TerminalController:
    """Own the tty for one launcher session and paint onto it."""

    def __init__(self, stdin_fd: int, stdout_fd: int) -> None:
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        self._saved_tty_state = termios.tcgetattr(stdin_fd)

    def _write_bytes(self, data: bytes) -> None:
        # Icon payloads can exceed what one write() to a tty accepts.
        view = memoryview(data)
        while view:
            written = os.write(self.stdout_fd, view)
            view = view[written:]

    def enable_tui_mode(self) -> None:
        """Switch to raw input, the alternate screen and SGR click reporting."""
        tty.setraw(self.stdin_fd, termios.TCSAFLUSH)
        self._write_bytes(ENTER_TUI)

    def disable_tui_mode(self) -> None:
        self._write_bytes(LEAVE_TUI)
        termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, self._saved_tty_state)

    def write(self, text: str) -> None:
        self._write_bytes(text.encode("utf-8"))

    def clear_screen(self) -> None:
        self.kitty_clear_images()
        self._write_bytes(b"\x1b[2J\x1b[H")

    def query_geometry(self) -> TerminalGeometry:
        return query_terminal_geometry(self.stdout_fd)

    def kitty_clear_images(self) -> None:
        self._write_bytes(KITTY_DELETE_ALL)

    def kitty_draw_png(
        self,
        png: bytes,
        *,
        col: int,
        row: int,
        width_cells: int | None = None,
        height_cells: int | None = None,
    ) -> None:
        """Draw PNG bytes at one-based cell coordinates."""
        self._write_bytes(kitty_png_sequence(png, col, row, width_cells, height_cells))

    @contextlib.contextmanager
    def raw_mode(self):
        """Hold the terminal in TUI mode, restoring it however the block exits."""
        try:
            self.enable_tui_mode()
            yield
        finally:
            self.disable_tui_mode()
