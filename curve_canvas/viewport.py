"""Affine mapping between drawing-surface pixels and mathematical coordinates.

Purpose
-------
This module defines ``Viewport``, the pan/zoom state of one drawing surface.
Pixel rows grow downward while mathematical ``y`` grows upward, so the y axis
is inverted in both transforms.

Conventions
-----------
- ``offset_x``/``offset_y`` are the pixel position of the mathematical origin
  relative to the surface centre.
- ``scale`` is pixels per mathematical unit and is always > 0.
- Panning is unbounded; zooming clamps ``scale`` into
  ``[min_scale, max_scale]``.

Examples
--------
>>> vp = Viewport(width=400, height=300)
>>> vp.to_math(200, 150)
(0.0, -0.0)
>>> vp.zoom_at(300, 150, 2.0)
>>> vp.to_math(300, 150)[0]
2.5
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

__all__ = ["Viewport"]


def _require_positive(name: str, value: float) -> float:
    value = float(value)
    if not (math.isfinite(value) and value > 0):
        raise ValueError(f"{name} must be a positive finite number, got {value!r}")
    return value


@dataclass
class Viewport:
    """Pan/zoom state and coordinate transforms for one surface.

    Parameters
    ----------
    width, height : float
        Surface size in layout pixels.
    scale : float
        Pixels per mathematical unit.
    offset_x, offset_y : float
        Pixel offset of the mathematical origin from the surface centre.
    default_scale : float
        Scale restored by :meth:`reset`.
    min_scale, max_scale : float
        Bounds applied after every zoom.
    """

    width: float
    height: float
    scale: float = 40.0
    offset_x: float = 0.0
    offset_y: float = 0.0
    default_scale: float = 40.0
    min_scale: float = 1e-6
    max_scale: float = 1e8

    def __post_init__(self) -> None:
        self.width = _require_positive("width", self.width)
        self.height = _require_positive("height", self.height)
        self.scale = _require_positive("scale", self.scale)
        self.default_scale = _require_positive("default_scale", self.default_scale)
        if not (0 < self.min_scale <= self.max_scale):
            raise ValueError("min_scale and max_scale must satisfy 0 < min_scale <= max_scale")
        self.offset_x = float(self.offset_x)
        self.offset_y = float(self.offset_y)

    # --- transforms -----------------------------------------------------

    @property
    def origin(self) -> tuple[float, float]:
        """Pixel position of the mathematical origin."""
        return self.width / 2 + self.offset_x, self.height / 2 + self.offset_y

    def to_math(self, px: float, py: float) -> tuple[float, float]:
        ox, oy = self.origin
        return (px - ox) / self.scale, -(py - oy) / self.scale

    def to_pixel(self, x: float, y: float) -> tuple[float, float]:
        ox, oy = self.origin
        return x * self.scale + ox, oy - y * self.scale

    def columns_to_math(self, columns: np.ndarray) -> np.ndarray:
        """Vectorized x part of :meth:`to_math`."""
        return (np.asarray(columns, dtype=float) - self.origin[0]) / self.scale

    def values_to_rows(self, ys: np.ndarray) -> np.ndarray:
        """Vectorized y part of :meth:`to_pixel`."""
        return self.origin[1] - np.asarray(ys, dtype=float) * self.scale

    @property
    def x_range(self) -> tuple[float, float]:
        """Mathematical x interval covered by the surface."""
        return self.to_math(0.0, 0.0)[0], self.to_math(self.width, 0.0)[0]

    @property
    def y_range(self) -> tuple[float, float]:
        """Mathematical y interval covered by the surface (bottom, top)."""
        return self.to_math(0.0, self.height)[1], self.to_math(0.0, 0.0)[1]

    # --- mutation -------------------------------------------------------

    def pan(self, dx: float, dy: float) -> None:
        self.offset_x += float(dx)
        self.offset_y += float(dy)

    def set_offset(self, offset_x: float, offset_y: float) -> None:
        self.offset_x = float(offset_x)
        self.offset_y = float(offset_y)

    def zoom_at(self, px: float, py: float, factor: float) -> None:
        """Scale by ``factor`` keeping the math point under ``(px, py)`` fixed.

        Raises
        ------
        ValueError
            If ``factor`` is not a positive finite number.
        """
        factor = _require_positive("factor", factor)
        mx, my = self.to_math(px, py)
        self.scale = min(max(self.scale * factor, self.min_scale), self.max_scale)
        # Solve to_pixel(mx, my) == (px, py) for the offsets.
        self.offset_x = px - self.width / 2 - mx * self.scale
        self.offset_y = py - self.height / 2 + my * self.scale

    def zoom(self, factor: float) -> None:
        """Zoom about the surface centre (toolbar buttons)."""
        self.zoom_at(self.width / 2, self.height / 2, factor)

    def reset(self) -> None:
        self.scale = self.default_scale
        self.offset_x = 0.0
        self.offset_y = 0.0

    def resize(self, width: float, height: float) -> None:
        """Adopt a new surface size; scale and offsets are kept."""
        self.width = _require_positive("width", width)
        self.height = _require_positive("height", height)
