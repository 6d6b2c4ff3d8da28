"""Scene painting: viewport + curves + markers -> drawing primitives.

Purpose
-------
``paint_scene`` is the single place that decides what a frame contains, in
back-to-front order:

1. ``Clear`` with the theme background,
2. grid lines at "nice" math steps (1, 2 or 5 times a power of ten) at least
   ``min_grid_spacing_px`` apart,
3. the two axes (when visible),
4. tick labels along the axes plus the origin label,
5. every curve's polylines, in insertion order,
6. point markers,
7. the info overlay (curve count and scale), when requested.

The function is pure: it samples curves but does not store anything on them.
Callers that want to refresh a curve's cached samples use the returned
``CurveSamples``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Sequence

from .config import CanvasConfig, CanvasTheme
from .primitives import Circle, Clear, Polyline, Primitive, Text
from .sampler import CurveSamples, sample_curve
from .viewport import Viewport

__all__ = ["Marker", "format_tick_label", "grid_step", "paint_scene", "PaintedScene"]

_LABEL_GAP = 5.0
_OVERLAY_MARGIN = 10.0


@dataclass(frozen=True)
class Marker:
    """Filled circle anchored at mathematical coordinates."""

    x: float
    y: float
    color: str
    radius: float


@dataclass(frozen=True)
class PaintedScene:
    """Primitives of one frame and the samples computed for each curve."""

    primitives: tuple[Primitive, ...]
    samples: tuple[CurveSamples, ...]


def _strip_zeros(text: str) -> str:
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def format_tick_label(value: float) -> str:
    """Format an axis value with magnitude-dependent precision.

    ``0 < |v| < 1e-4`` and ``|v| >= 1e6`` use exponential notation with two
    decimals; otherwise 3, 2 or 1 decimals for ``|v| < 10``, ``< 100`` and
    larger values, with trailing zeros removed.

    >>> format_tick_label(2.5), format_tick_label(12.346), format_tick_label(2e-5)
    ('2.5', '12.35', '2.00e-5')
    """
    magnitude = abs(value)
    if (magnitude < 1e-4 and value != 0) or magnitude >= 1e6:
        mantissa, exponent = f"{value:.2e}".split("e")
        return f"{mantissa}e{int(exponent):+d}"
    if magnitude < 10:
        return _strip_zeros(f"{value:.3f}")
    if magnitude < 100:
        return _strip_zeros(f"{value:.2f}")
    return _strip_zeros(f"{value:.1f}")


def grid_step(scale: float, min_spacing_px: float) -> float:
    """Smallest 1/2/5 x 10^k math step whose pixel spacing is >= ``min_spacing_px``."""
    raw = min_spacing_px / scale
    power = 10.0 ** math.floor(math.log10(raw))
    for mult in (1.0, 2.0, 5.0, 10.0):
        step = mult * power
        if step * scale >= min_spacing_px * (1 - 1e-9):
            return step
    return 10.0 * power


def _tick_indices(lo: float, hi: float, step: float) -> range:
    return range(math.ceil(lo / step), math.floor(hi / step) + 1)


def _grid_and_axes(viewport: Viewport, step: float, theme: CanvasTheme) -> list[Primitive]:
    w, h = viewport.width, viewport.height
    ox, oy = viewport.origin
    out: list[Primitive] = []

    x_lo, x_hi = viewport.x_range
    y_lo, y_hi = viewport.y_range
    for k in _tick_indices(x_lo, x_hi, step):
        px = viewport.to_pixel(k * step, 0.0)[0]
        out.append(Polyline(((px, 0.0), (px, h)), theme.grid_color, theme.grid_width))
    for k in _tick_indices(y_lo, y_hi, step):
        py = viewport.to_pixel(0.0, k * step)[1]
        out.append(Polyline(((0.0, py), (w, py)), theme.grid_color, theme.grid_width))

    if 0 <= oy <= h:
        out.append(Polyline(((0.0, oy), (w, oy)), theme.axis_color, theme.axis_width))
    if 0 <= ox <= w:
        out.append(Polyline(((ox, 0.0), (ox, h)), theme.axis_color, theme.axis_width))
    return out


def _axis_labels(viewport: Viewport, step: float, theme: CanvasTheme) -> list[Primitive]:
    w, h = viewport.width, viewport.height
    ox, oy = viewport.origin
    size = theme.label_font_size
    color = theme.label_color
    # Labels follow the axes but stay on screen when an axis is panned away.
    label_y = min(max(oy + _LABEL_GAP, 0.0), h - size)
    label_x = min(max(ox - _LABEL_GAP, 4 * size), w)
    out: list[Primitive] = []

    x_lo, x_hi = viewport.x_range
    for k in _tick_indices(x_lo, x_hi, step):
        if k == 0:
            continue
        px = viewport.to_pixel(k * step, 0.0)[0]
        out.append(Text((px, label_y), format_tick_label(k * step), color, size, "center", "top"))

    y_lo, y_hi = viewport.y_range
    for k in _tick_indices(y_lo, y_hi, step):
        if k == 0:
            continue
        py = viewport.to_pixel(0.0, k * step)[1]
        out.append(Text((label_x, py), format_tick_label(k * step), color, size, "right", "middle"))

    if 0 <= ox <= w and 0 <= oy <= h:
        out.append(Text((ox - _LABEL_GAP, oy + _LABEL_GAP), "0", color, size, "right", "top"))
    return out


def _overlay(viewport: Viewport, curve_count: int, theme: CanvasTheme) -> list[Primitive]:
    if curve_count == 0:
        return []
    size = theme.overlay_font_size
    color = theme.overlay_color
    return [
        Text((_OVERLAY_MARGIN, _OVERLAY_MARGIN), f"Graphs: {curve_count}", color, size, "left", "top"),
        Text(
            (viewport.width - _OVERLAY_MARGIN, _OVERLAY_MARGIN),
            f"Scale: 1 unit = {format_tick_label(viewport.scale)}px",
            color,
            size,
            "right",
            "top",
        ),
    ]


def paint_scene(
    viewport: Viewport,
    curves: Sequence,
    *,
    config: CanvasConfig,
    markers: Iterable[Marker] = (),
    overlay: bool = True,
) -> PaintedScene:
    """Build one frame for ``curves`` (objects with ``evaluator``, ``color``, ``line_width``)."""
    theme = config.theme
    step = grid_step(viewport.scale, config.min_grid_spacing_px)

    prims: list[Primitive] = [Clear(theme.background)]
    prims.extend(_grid_and_axes(viewport, step, theme))
    prims.extend(_axis_labels(viewport, step, theme))

    all_samples: list[CurveSamples] = []
    for curve in curves:
        samples = sample_curve(curve.evaluator, viewport)
        all_samples.append(samples)
        for line in samples.polylines:
            if len(line) >= 2:
                prims.append(Polyline(line, curve.color, curve.line_width))

    for marker in markers:
        px, py = viewport.to_pixel(marker.x, marker.y)
        r = marker.radius
        if -r <= px <= viewport.width + r and -r <= py <= viewport.height + r:
            prims.append(Circle((px, py), r, marker.color))

    if overlay:
        prims.extend(_overlay(viewport, len(curves), theme))

    return PaintedScene(primitives=tuple(prims), samples=tuple(all_samples))
