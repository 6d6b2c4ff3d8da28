"""Configuration records for a graph canvas.

Purpose
-------
Collects every tunable default of the plotter in two frozen dataclasses so a
``GraphCanvas`` can be built with explicit, inspectable settings instead of
module-level globals.

- ``CanvasTheme`` holds colours, stroke widths and font sizes used by the
  painter.
- ``CanvasConfig`` holds viewport, input, scheduling and numeric-query
  defaults, plus a theme.

Examples
--------
>>> from curve_canvas.config import CanvasConfig
>>> cfg = CanvasConfig().replace(default_scale=80.0)
>>> cfg.default_scale
80.0
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Any

__all__ = ["CanvasTheme", "CanvasConfig", "DEFAULT_CONFIG"]


@dataclass(frozen=True)
class CanvasTheme:
    """Visual styling of the scene.

    Parameters
    ----------
    background : str
        Fill colour used by the ``Clear`` primitive.
    grid_color, axis_color, label_color, overlay_color : str
        Colours of grid lines, axes, tick labels and the info overlay.
    grid_width, axis_width : float
        Stroke widths in layout pixels.
    label_font_size, overlay_font_size : int
        Font sizes in layout pixels.
    marker_color : str
        Default fill colour of point markers.
    marker_radius : float
        Default marker radius in layout pixels.
    """

    background: str = "#1e1e1e"
    grid_color: str = "#666666"
    axis_color: str = "#a0a0a0"
    label_color: str = "#a0a0a0"
    overlay_color: str = "#e0e0e0"
    grid_width: float = 1.0
    axis_width: float = 2.0
    label_font_size: int = 12
    overlay_font_size: int = 14
    marker_color: str = "#03dac6"
    marker_radius: float = 4.0


@dataclass(frozen=True)
class CanvasConfig:
    """Defaults for viewport behaviour, input handling and numeric queries."""

    default_scale: float = 40.0
    min_scale: float = 1e-6
    max_scale: float = 1e8
    zoom_in_factor: float = 1.2
    zoom_out_factor: float = 0.8
    wheel_intensity: float = 0.1
    min_grid_spacing_px: float = 40.0
    frame_interval_ms: int = 16
    pixel_ratio: float = 1.0
    show_overlay: bool = True

    default_color: str = "#bb86fc"
    default_line_width: float = 2.0

    root_interval: tuple[float, float] = (-10.0, 10.0)
    root_steps: int = 200
    root_precision: float = 1e-3
    bisection_max_iterations: int = 100

    integration_method: str = "simpson"
    integration_intervals: int = 1000

    theme: CanvasTheme = field(default_factory=CanvasTheme)

    def __post_init__(self) -> None:
        if not (0 < self.min_scale <= self.default_scale <= self.max_scale):
            raise ValueError(
                "Scale bounds must satisfy 0 < min_scale <= default_scale <= max_scale."
            )
        for name in ("zoom_in_factor", "zoom_out_factor", "wheel_intensity", "pixel_ratio"):
            value = getattr(self, name)
            if not (math.isfinite(value) and value > 0):
                raise ValueError(f"{name} must be a positive finite number, got {value!r}")
        if self.frame_interval_ms <= 0:
            raise ValueError("frame_interval_ms must be > 0")
        if self.root_steps <= 0 or self.bisection_max_iterations <= 0:
            raise ValueError("root_steps and bisection_max_iterations must be > 0")
        if self.integration_intervals <= 0:
            raise ValueError("integration_intervals must be > 0")

    def replace(self, **changes: Any) -> "CanvasConfig":
        """Return a copy with ``changes`` applied (validated again)."""
        return replace(self, **changes)


DEFAULT_CONFIG = CanvasConfig()
