"""Top-level public API for the ``curve_canvas`` package.

This module re-exports the plotting surface so users can import from a single
namespace, for example:

>>> from curve_canvas import GraphCanvas  # doctest: +SKIP

Both the high-level ``GraphCanvas`` and the lower-level building blocks
(viewport, sampler, numeric queries, primitives and surfaces) are exposed for
hosts that wire their own canvas.
"""

from .config import DEFAULT_CONFIG, CanvasConfig, CanvasTheme
from .curve import Curve
from .errors import (
    CurveCanvasError,
    CurveIndexError,
    EvaluationUndefined,
    ExpressionCompileError,
    InvalidIntervalError,
)
from .expression import (
    CallableExpression,
    CompiledExpression,
    ExpressionEvaluator,
    SympyExpressionEvaluator,
    as_compiled,
    evaluate_point,
    evaluate_points,
)
from .graph_canvas import GraphCanvas
from .input_controller import (
    InputController,
    InputState,
    PointerEvent,
    TouchEvent,
    WheelEvent,
)
from .numpify import numpify, numpify_cached
from .painter import Marker, format_tick_label, paint_scene
from .plotly_surface import PlotlySurface
from .primitives import Circle, Clear, Polyline, RecordingSurface, Surface, Text
from .quadrature import QuadratureResult, integrate, integrate_detailed
from .raster import RasterSurface
from .render_loop import RenderLoop
from .roots import bisect, find_roots
from .sampler import CurveSamples, sample_curve
from .viewport import Viewport

__version__ = "0.1.0"
