"""Icon loading and scaling backed by Pillow.

Loading never fails a batch: a missing or undecodable icon is replaced by a
generated placeholder. Rendering produces PNG bytes ready for the Kitty
graphics protocol together with the realized pixel size.
"""

from __future__ import annotations

import io
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from PIL import Image, ImageDraw

from .config import AppEntry
from .errors import IconLoadError

PLACEHOLDER_SIZE = 64
PLACEHOLDER_FILL = (96, 96, 104, 255)
PLACEHOLDER_OUTLINE = (160, 160, 168, 255)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderedIcon:
    payload: bytes
    width_px: int
    height_px: int


def load_image(path: str | Path) -> Image.Image:
    """Decode ``path`` into an RGBA image or raise ``IconLoadError``."""
    target = Path(path).expanduser()
    try:
        with Image.open(target) as img:
            img.load()
            return img.convert("RGBA")
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        raise IconLoadError(f"cannot load icon {target}: {exc}") from exc


def create_placeholder(width: int = PLACEHOLDER_SIZE, height: int = PLACEHOLDER_SIZE) -> Image.Image:
    """Generate a rounded grey tile used in place of a missing icon."""
    width = max(1, width)
    height = max(1, height)
    img = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    draw = ImageDraw.Draw(img)
    radius = min(width, height) // 6
    if radius < 1:
        draw.rectangle((0, 0, width - 1, height - 1), fill=PLACEHOLDER_FILL)
        return img
    draw.rounded_rectangle(
        (0, 0, width - 1, height - 1),
        radius=radius,
        fill=PLACEHOLDER_FILL,
        outline=PLACEHOLDER_OUTLINE,
    )
    return img


def load_icon(app: AppEntry) -> Image.Image:
    if not app.icon:
        return create_placeholder()
    try:
        return load_image(app.icon)
    except IconLoadError as exc:
        logger.warning("%s: %s", app.name, exc)
        return create_placeholder()


def load_icons(apps: Sequence[AppEntry]) -> list[Image.Image]:
    """Load every app icon in order; the result always parallels ``apps``."""
    return [load_icon(app) for app in apps]


def scale_image(src: Image.Image, target_w: int, target_h: int) -> Image.Image:
    if target_w <= 0 or target_h <= 0:
        return src
    return src.resize((target_w, target_h), Image.LANCZOS)


def scale_image_aspect_fit(src: Image.Image, max_w: int, max_h: int) -> Image.Image:
    """Scale ``src`` to fit inside ``max_w`` x ``max_h`` keeping aspect ratio."""
    if max_w <= 0 or max_h <= 0:
        return src
    src_w, src_h = src.size
    scale = min(max_w / src_w, max_h / src_h)
    target_w = max(1, int(src_w * scale))
    target_h = max(1, int(src_h * scale))
    return scale_image(src, target_w, target_h)


def encode_png(img: Image.Image) -> bytes:
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


def render_icon(src: Image.Image, width_px: int, height_px: int, *, fit: bool = True) -> RenderedIcon:
    """Scale ``src`` into the pixel box and encode it for display."""
    if fit:
        scaled = scale_image_aspect_fit(src, width_px, height_px)
    else:
        scaled = scale_image(src, width_px, height_px)
    realized_w, realized_h = scaled.size
    return RenderedIcon(payload=encode_png(scaled), width_px=realized_w, height_px=realized_h)
