"""Pillow-backed raster surface and PNG encoding.

``RasterSurface`` rasterizes one frame of primitives into an RGBA
``PIL.Image``. Coordinates are layout pixels; ``pixel_ratio`` multiplies them
so exports stay sharp on high-density displays.
"""

from __future__ import annotations

import io
import logging
from functools import lru_cache
from typing import Sequence

from PIL import Image, ImageDraw, ImageFont

from .primitives import Circle, Clear, Polyline, Primitive, Surface, Text

__all__ = ["RasterSurface"]

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


@lru_cache(maxsize=16)
def _font(size: int) -> ImageFont.ImageFont | ImageFont.FreeTypeFont:
    try:
        return ImageFont.load_default(size=size)
    except TypeError:  # Pillow < 10.1 has no sized default font
        return ImageFont.load_default()


class RasterSurface(Surface):
    """Draw frames into an in-memory image.

    Parameters
    ----------
    width, height : float
        Layout size of the surface.
    pixel_ratio : float, default=1.0
        Device pixels per layout pixel.
    """

    def __init__(self, width: float, height: float, pixel_ratio: float = 1.0) -> None:
        if width <= 0 or height <= 0 or pixel_ratio <= 0:
            raise ValueError("width, height and pixel_ratio must be > 0")
        self.width = float(width)
        self.height = float(height)
        self.pixel_ratio = float(pixel_ratio)
        self.image = self._blank()

    def _blank(self) -> Image.Image:
        size = (
            max(1, round(self.width * self.pixel_ratio)),
            max(1, round(self.height * self.pixel_ratio)),
        )
        return Image.new("RGBA", size, (0, 0, 0, 0))

    def _px(self, point: tuple[float, float]) -> tuple[float, float]:
        return point[0] * self.pixel_ratio, point[1] * self.pixel_ratio

    def render(self, primitives: Sequence[Primitive]) -> None:
        self.image = self._blank()
        draw = ImageDraw.Draw(self.image, "RGBA")
        for prim in primitives:
            if isinstance(prim, Clear):
                draw.rectangle([(0, 0), self.image.size], fill=prim.color)
            elif isinstance(prim, Polyline):
                if len(prim.points) < 2:
                    continue
                width = max(1, round(prim.width * self.pixel_ratio))
                draw.line([self._px(p) for p in prim.points], fill=prim.color, width=width, joint="curve")
            elif isinstance(prim, Circle):
                cx, cy = self._px(prim.center)
                r = prim.radius * self.pixel_ratio
                draw.ellipse([(cx - r, cy - r), (cx + r, cy + r)], fill=prim.color)
            elif isinstance(prim, Text):
                self._draw_text(draw, prim)
            else:
                raise TypeError(f"Unsupported primitive: {type(prim).__name__}")

    def _draw_text(self, draw: ImageDraw.ImageDraw, prim: Text) -> None:
        font = _font(max(1, round(prim.size * self.pixel_ratio)))
        left, top, right, bottom = draw.textbbox((0, 0), prim.text, font=font)
        w, h = right - left, bottom - top
        x, y = self._px(prim.position)
        if prim.align == "center":
            x -= w / 2
        elif prim.align == "right":
            x -= w
        if prim.baseline == "middle":
            y -= h / 2
        elif prim.baseline == "bottom":
            y -= h
        draw.text((x - left, y - top), prim.text, fill=prim.color, font=font)

    def to_png(self) -> bytes:
        """Encode the current image as PNG."""
        with io.BytesIO() as buffer:
            self.image.save(buffer, format="PNG")
            data = buffer.getvalue()
        logger.debug("Encoded %dx%d PNG (%d bytes)", *self.image.size, len(data))
        return data
