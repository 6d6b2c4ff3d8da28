"""Graph canvas orchestration: curves, viewport, input and repaints.

Purpose
-------
This module provides ``GraphCanvas``, the public entry point of
``curve_canvas``. One canvas owns exactly one viewport, one ordered list of
curves, one input controller and one render loop, all wired together at
construction. There is no global "current canvas": hosts hold the object and
pass it around.

Concepts and structure
----------------------
- ``Viewport`` (``viewport.py``) holds pan/zoom state and the transforms.
- ``Curve`` (``curve.py``) pairs an expression with its compiled evaluator.
- ``InputController`` (``input_controller.py``) turns events into viewport
  changes and asks for repaints.
- ``RenderLoop`` (``render_loop.py``) coalesces repaint requests; each paint
  calls ``paint_scene`` (``painter.py``) and hands the primitives to the
  surface.
- Root finding (``roots.py``) and integration (``quadrature.py``) are
  pull-based queries against one curve's evaluator.

Error policy
------------
- ``plot`` raises ``ExpressionCompileError``; ``add_curve`` logs it and returns
  ``False``. Either way nothing is added.
- ``remove_curve`` returns ``False`` for an absent index; queries raise
  ``CurveIndexError``. Neither has side effects.
- Per-point evaluation failures never surface: they are gaps in the drawing,
  skipped scan pairs in root finding and zero-weight nodes in integration.

Examples
--------
>>> from curve_canvas import GraphCanvas
>>> canvas = GraphCanvas(width=400, height=300)
>>> canvas.add_curve("x^2 - 2")
True
>>> [round(r, 3) for r in canvas.find_roots(0, (-5, 5))]  # doctest: +SKIP
[-1.414, 1.414]
>>> canvas.integrate(0, 0, 3, "simpson")  # doctest: +SKIP
3.0000000000000004

Discoverability
---------------
See next:

- ``painter.py`` for what a frame contains.
- ``expression.py`` to plug in another expression evaluator.
- ``config.py`` for every default.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any, Optional, Sequence, Union

import plotly.graph_objects as go

from .config import CanvasConfig
from .curve import Curve
from .curve_style import normalize_color, resolve_style_aliases
from .errors import CurveIndexError, ExpressionCompileError
from .expression import ExpressionEvaluator, SympyExpressionEvaluator
from .input_controller import InputController, InputEvent
from .painter import Marker, paint_scene
from .plotly_surface import PlotlySurface
from .primitives import Primitive, RecordingSurface, Surface
from .quadrature import QuadratureResult, integrate_detailed
from .raster import RasterSurface
from .render_loop import RenderLoop
from .roots import find_roots
from .viewport import Viewport

__all__ = ["GraphCanvas"]

# Module logger
# - Uses a NullHandler so importing this module never configures global logging.
# - Callers can enable logs via standard logging configuration.
logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


class GraphCanvas:
    """Pannable, zoomable function plotter with numeric queries.

    Parameters
    ----------
    width, height : float, default=(800, 600)
        Layout size of the drawing surface.
    evaluator : ExpressionEvaluator, optional
        Compiles expression strings. Defaults to
        :class:`SympyExpressionEvaluator`.
    surface : Surface, optional
        Receives live frames. Defaults to a :class:`RecordingSurface`.
    config : CanvasConfig, optional
        Defaults for scale, zoom steps, colours and numeric queries.
    """

    def __init__(
        self,
        width: float = 800,
        height: float = 600,
        *,
        evaluator: Optional[ExpressionEvaluator] = None,
        surface: Optional[Surface] = None,
        config: Optional[CanvasConfig] = None,
    ) -> None:
        self.config = config or CanvasConfig()
        self.evaluator = evaluator or SympyExpressionEvaluator()
        self.viewport = Viewport(
            width=width,
            height=height,
            scale=self.config.default_scale,
            default_scale=self.config.default_scale,
            min_scale=self.config.min_scale,
            max_scale=self.config.max_scale,
        )
        self._curves: list[Curve] = []
        self._markers: list[Marker] = []
        self.surface = surface or RecordingSurface()
        self.render_loop = RenderLoop(
            self._paint_live,
            self.surface,
            frame_interval_ms=self.config.frame_interval_ms,
        )
        self.input = InputController(
            self.viewport,
            on_change=self.request_repaint,
            wheel_intensity=self.config.wheel_intensity,
        )
        self._debug_last_log_t = 0.0

    # === SECTION: curves ===

    @property
    def curves(self) -> tuple[Curve, ...]:
        return tuple(self._curves)

    def __len__(self) -> int:
        return len(self._curves)

    def curve(self, index: int) -> Curve:
        """Return the curve at ``index`` (negative indices count from the end).

        Raises
        ------
        CurveIndexError
            If there is no such curve.
        """
        count = len(self._curves)
        if isinstance(index, bool) or not isinstance(index, int) or not (-count <= index < count):
            raise CurveIndexError(index, count)
        return self._curves[index]

    def plot(
        self,
        expression: str,
        color: Optional[str] = None,
        line_width: Any = None,
        *,
        width: Any = None,
        thickness: Any = None,
    ) -> Curve:
        """Compile ``expression`` and append it as a new curve.

        Raises
        ------
        ExpressionCompileError
            If the expression is malformed; nothing is added.
        ValueError
            If the colour or width is invalid.
        """
        line_width = resolve_style_aliases(line_width=line_width, width=width, thickness=thickness)
        handle = self.evaluator.compile(expression)
        curve = Curve(
            expression,
            handle,
            color if color is not None else self.config.default_color,
            line_width if line_width is not None else self.config.default_line_width,
        )
        self._curves.append(curve)
        logger.debug("plot: added %r as curve %d", curve.expression, len(self._curves) - 1)
        self.request_repaint("curve_added")
        return curve

    def add_curve(self, expression: str, color: Optional[str] = None, line_width: Any = None) -> bool:
        """Like :meth:`plot` but report failure as ``False`` instead of raising."""
        try:
            self.plot(expression, color, line_width)
        except (ExpressionCompileError, ValueError) as exc:
            logger.warning("add_curve(%r) failed: %s", expression, exc)
            return False
        return True

    def remove_curve(self, index: int) -> bool:
        """Remove the curve at ``index``; ``False`` if there is none."""
        if isinstance(index, bool) or not isinstance(index, int) or not (0 <= index < len(self._curves)):
            return False
        del self._curves[index]
        self.request_repaint("curve_removed")
        return True

    def clear_curves(self) -> None:
        self._curves.clear()
        self.request_repaint("curves_cleared")

    def set_last_curve_color(self, color: str) -> bool:
        """Recolour the most recently added curve; ``False`` on an empty graph."""
        if not self._curves:
            return False
        self._curves[-1].color = normalize_color(color)
        self.request_repaint("style")
        return True

    def set_last_curve_line_width(self, line_width: Any) -> bool:
        """Change the width of the most recently added curve; ``False`` on an empty graph."""
        if not self._curves:
            return False
        self._curves[-1].line_width = line_width
        self.request_repaint("style")
        return True

    def curve_points(self, index: int) -> tuple[tuple[float, float], ...]:
        """Pixel points of curve ``index`` from the last live paint."""
        return self.curve(index).pixel_points

    # === SECTION: numeric queries ===

    def evaluate_curve(self, index: int, x: float) -> Optional[float]:
        """Return f(x) for curve ``index``, or ``None`` where undefined."""
        return self.curve(index).evaluate(x)

    def find_roots(
        self,
        index: int,
        interval: Optional[Sequence[Any]] = None,
        precision: Optional[float] = None,
        coarse_step: Optional[float] = None,
        *,
        mark: bool = False,
    ) -> list[float]:
        """Roots of curve ``index`` inside ``interval`` (default from config).

        With ``mark=True`` every root is also added as a marker.
        """
        curve = self.curve(index)
        cfg = self.config
        if interval is None:
            interval = cfg.root_interval
        if coarse_step is None:
            # Invalid intervals fall through to find_roots, which reports them.
            try:
                a, b = interval
                span = float(b) - float(a)
            except (TypeError, ValueError):
                span = 0.0
            if span > 0:
                coarse_step = span / cfg.root_steps
        roots = find_roots(
            curve.evaluator,
            interval,
            coarse_step=coarse_step,
            precision=cfg.root_precision if precision is None else precision,
            max_iterations=cfg.bisection_max_iterations,
        )
        if mark:
            for r in roots:
                self._markers.append(Marker(r, 0.0, curve.color, cfg.theme.marker_radius))
            if roots:
                self.request_repaint("markers")
        return roots

    def integrate_detailed(
        self,
        index: int,
        a: Any,
        b: Any,
        method: Optional[str] = None,
        n: Any = None,
    ) -> QuadratureResult:
        curve = self.curve(index)
        return integrate_detailed(
            curve.evaluator,
            a,
            b,
            method=method or self.config.integration_method,
            n=self.config.integration_intervals if n is None else n,
        )

    def integrate(
        self,
        index: int,
        a: Any,
        b: Any,
        method: Optional[str] = None,
        n: Any = None,
    ) -> float:
        """Definite integral of curve ``index`` over ``[a, b]``."""
        return self.integrate_detailed(index, a, b, method, n).value

    # === SECTION: markers ===

    @property
    def markers(self) -> tuple[Marker, ...]:
        return tuple(self._markers)

    def add_marker(self, x: float, y: float, color: Optional[str] = None, radius: Optional[float] = None) -> Marker:
        theme = self.config.theme
        marker = Marker(
            float(x),
            float(y),
            normalize_color(color if color is not None else theme.marker_color),
            float(radius if radius is not None else theme.marker_radius),
        )
        self._markers.append(marker)
        self.request_repaint("markers")
        return marker

    def clear_markers(self) -> None:
        self._markers.clear()
        self.request_repaint("markers")

    # === SECTION: view ===

    def pan(self, dx: float, dy: float) -> None:
        self.viewport.pan(dx, dy)
        self.request_repaint("pan")

    def zoom(self, factor: float) -> None:
        """Zoom about the centre of the surface."""
        self.viewport.zoom(factor)
        self.request_repaint("zoom")

    def zoom_at(self, px: float, py: float, factor: float) -> None:
        self.viewport.zoom_at(px, py, factor)
        self.request_repaint("zoom")

    def zoom_in(self) -> None:
        self.zoom(self.config.zoom_in_factor)

    def zoom_out(self) -> None:
        self.zoom(self.config.zoom_out_factor)

    def reset_view(self) -> None:
        self.viewport.reset()
        self.request_repaint("reset")

    def resize(self, width: float, height: float) -> None:
        """Adopt a new surface size before the next paint reads it."""
        self.viewport.resize(width, height)
        for attr in ("width", "height"):
            if hasattr(self.surface, attr):
                setattr(self.surface, attr, getattr(self.viewport, attr))
        self.request_repaint("resize")

    def handle_event(self, event: InputEvent) -> None:
        """Forward a pointer, wheel or touch event to the input controller."""
        self.input.handle(event)

    # === SECTION: rendering ===

    def request_repaint(self, reason: str = "") -> None:
        self.render_loop.request_repaint(reason)

    def tick(self) -> bool:
        """Run a pending repaint (host frame callback)."""
        return self.render_loop.tick()

    def render(self, reason: str = "manual") -> tuple[Primitive, ...]:
        """Paint now and return the frame's primitives."""
        return self.render_loop.paint_now(reason)

    def _paint_live(self) -> tuple[Primitive, ...]:
        scene = paint_scene(
            self.viewport,
            self._curves,
            config=self.config,
            markers=self._markers,
            overlay=self.config.show_overlay,
        )
        for curve, samples in zip(self._curves, scene.samples):
            curve._store_samples(samples)

        now = time.monotonic()
        if logger.isEnabledFor(logging.DEBUG) and (now - self._debug_last_log_t) > 0.5:
            self._debug_last_log_t = now
            logger.debug("ranges x=%s y=%s", self.viewport.x_range, self.viewport.y_range)
        return scene.primitives

    def _paint_offscreen(self, surface: Surface, *, overlay: bool) -> None:
        scene = paint_scene(
            self.viewport,
            self._curves,
            config=self.config,
            markers=self._markers,
            overlay=overlay,
        )
        surface.render(scene.primitives)

    def export_png(self, path: Union[str, Path, None] = None, *, pixel_ratio: Optional[float] = None) -> bytes:
        """Render the current scene (without the info overlay) to PNG bytes.

        The live viewport, curve caches and surface are left untouched. When
        ``path`` is given the bytes are also written there.
        """
        raster = RasterSurface(
            self.viewport.width,
            self.viewport.height,
            pixel_ratio=self.config.pixel_ratio if pixel_ratio is None else pixel_ratio,
        )
        self._paint_offscreen(raster, overlay=False)
        data = raster.to_png()
        if path is not None:
            Path(path).write_bytes(data)
            logger.info("Exported graph to %s", path)
        return data

    def to_plotly(self) -> go.Figure:
        """Render the current scene into a Plotly figure."""
        surface = PlotlySurface(self.viewport.width, self.viewport.height)
        self._paint_offscreen(surface, overlay=self.config.show_overlay)
        if surface.figure is None:
            raise RuntimeError("PlotlySurface produced no figure")
        return surface.figure

    def _repr_png_(self) -> bytes:
        return self.export_png()

    def __repr__(self) -> str:
        vp = self.viewport
        return f"GraphCanvas({vp.width:g}x{vp.height:g}, curves={len(self._curves)}, scale={vp.scale:g})"
