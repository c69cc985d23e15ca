"""Raw stdin decoding for the launcher.

Turns bytes read in raw mode into short string tokens (keys and clicks).
Handles ESC-sequence timing and SGR mouse events, then maps tokens onto the
typed events consumed by the dispatcher.
"""

from __future__ import annotations

import os
import select

from .events import MOUSE_PRESS, MOUSE_RELEASE, MOUSE_WHEEL, KeyPress, MouseEvent

ESC_SEQUENCE_TIMEOUT_MS = 25
_PENDING_BYTES: list[bytes] = []


def _read_ready_byte(fd: int, timeout_ms: int) -> bytes | None:
    ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
    if not ready:
        return None
    ch = os.read(fd, 1)
    if not ch:
        return None
    return ch


def _read_sgr_mouse(fd: int) -> str:
    # SGR mouse: ESC [ < btn ; col ; row (M press / m release)
    payload = []
    while True:
        part = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if part is None:
            return "ESC"
        if part in {b"M", b"m"}:
            break
        payload.append(part)
        if len(payload) > 64:
            return "ESC"
    try:
        btn_s, col_s, row_s = b"".join(payload).decode("ascii").split(";")
        btn = int(btn_s)
        col = int(col_s)
        row = int(row_s)
    except ValueError:
        return "ESC"
    button = btn & 0b11
    if btn & 0b0100_0000:
        direction = "UP" if button == 0 else "DOWN"
        return f"MOUSE_WHEEL_{direction}:{col}:{row}"
    if btn & 0b0010_0000:
        return "MOUSE"
    if button == 0:
        suffix = "DOWN" if part == b"M" else "UP"
        return f"MOUSE_LEFT_{suffix}:{col}:{row}"
    return "MOUSE"


_SINGLE_BYTE_KEYS = {b"\x03": "CTRL_C", b"\r": "ENTER", b"\n": "ENTER"}
_CSI_ARROWS = {b"A": "UP", b"B": "DOWN", b"C": "RIGHT", b"D": "LEFT"}


def _next_byte(fd: int, timeout_ms: int | None) -> bytes | None:
    if _PENDING_BYTES:
        return _PENDING_BYTES.pop(0)
    if timeout_ms is None:
        return os.read(fd, 1) or None
    return _read_ready_byte(fd, timeout_ms)


def read_key(fd: int, timeout_ms: int | None = None) -> str:
    """Read one key token, or ``""`` when ``timeout_ms`` elapses first.

    A lone ESC is reported as ``"ESC"`` once no sequence byte follows within
    ``ESC_SEQUENCE_TIMEOUT_MS``; a non-sequence byte after it is kept for the
    next call.
    """
    ch = _next_byte(fd, timeout_ms)
    if ch is None:
        return ""
    if ch in _SINGLE_BYTE_KEYS:
        return _SINGLE_BYTE_KEYS[ch]
    if ch != b"\x1b":
        return ch.decode("utf-8", errors="replace")

    introducer = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if introducer is None:
        return "ESC"
    if introducer != b"[":
        _PENDING_BYTES.append(introducer)
        return "ESC"
    final = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if final == b"<":
        return _read_sgr_mouse(fd)
    return _CSI_ARROWS.get(final, "ESC")


def _parse_mouse_col_row(mouse_key: str) -> tuple[int, int] | None:
    parts = mouse_key.split(":")
    if len(parts) < 3:
        return None
    try:
        return int(parts[1]), int(parts[2])
    except ValueError:
        return None


def token_to_event(token: str) -> KeyPress | MouseEvent | None:
    """Convert a ``read_key`` token into a dispatcher event.

    SGR reports one-based columns and rows; events carry zero-based
    coordinates with the origin at the top-left cell.
    """
    if not token:
        return None
    if not token.startswith("MOUSE"):
        return KeyPress(token)
    position = _parse_mouse_col_row(token)
    if position is None:
        return None
    col, row = position
    if token.startswith("MOUSE_LEFT_DOWN:"):
        action = MOUSE_PRESS
    elif token.startswith("MOUSE_LEFT_UP:"):
        action = MOUSE_RELEASE
    elif token.startswith("MOUSE_WHEEL_"):
        action = MOUSE_WHEEL
    else:
        return None
    button = "wheel" if action == MOUSE_WHEEL else "left"
    return MouseEvent(action=action, x=col - 1, y=row - 1, button=button)
