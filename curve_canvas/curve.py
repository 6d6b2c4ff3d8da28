"""Per-curve model used by :mod:`curve_canvas.graph_canvas`.

Purpose
-------
Defines ``Curve``: one expression, its exclusively-owned compiled evaluator,
presentation attributes, and the samples from the last live paint.

Important gotchas
-----------------
- ``expression`` and ``evaluator`` are fixed at construction; plot a new
  curve to change the function.
- ``sample_points``/``pixel_points`` are an advisory cache refreshed wholesale
  by every live paint. Numeric queries re-evaluate the function instead of
  reading them.
"""

from __future__ import annotations

from typing import Any, Optional

from .curve_style import normalize_color
from .expression import CompiledExpression, evaluate_point
from .InputConvert import InputConvert
from .sampler import CurveSamples

__all__ = ["Curve"]

Point = tuple[float, float]


class Curve:
    """A plotted function and how to draw it.

    Parameters
    ----------
    expression : str
        Source text the evaluator was compiled from.
    evaluator : CompiledExpression
        Compiled handle; owned by this curve only.
    color : str
        Stroke colour.
    line_width : float
        Stroke width in layout pixels, > 0.
    """

    def __init__(
        self,
        expression: str,
        evaluator: CompiledExpression,
        color: str,
        line_width: Any,
    ) -> None:
        self._expression = str(expression)
        self._evaluator = evaluator
        self._color = normalize_color(color)
        self._line_width = self._check_width(line_width)
        self._samples: Optional[CurveSamples] = None

    @staticmethod
    def _check_width(value: Any) -> float:
        width = InputConvert(value, float, finite=True, name="line_width")
        if width <= 0:
            raise ValueError(f"line_width must be > 0, got {value!r}")
        return width

    @property
    def expression(self) -> str:
        return self._expression

    @property
    def evaluator(self) -> CompiledExpression:
        return self._evaluator

    @property
    def color(self) -> str:
        return self._color

    @color.setter
    def color(self, value: str) -> None:
        self._color = normalize_color(value)

    @property
    def line_width(self) -> float:
        return self._line_width

    @line_width.setter
    def line_width(self, value: Any) -> None:
        self._line_width = self._check_width(value)

    @property
    def sample_points(self) -> tuple[Point, ...]:
        """Math ``(x, y)`` pairs drawn by the last live paint."""
        return self._samples.samples if self._samples is not None else ()

    @property
    def pixel_points(self) -> tuple[Point, ...]:
        """Pixel ``(px, py)`` points drawn by the last live paint."""
        return self._samples.pixel_points if self._samples is not None else ()

    def _store_samples(self, samples: CurveSamples) -> None:
        self._samples = samples

    def evaluate(self, x: float) -> Optional[float]:
        """Return f(x), or ``None`` where the function is undefined."""
        return evaluate_point(self._evaluator, float(x))

    def __repr__(self) -> str:
        return f"Curve({self._expression!r}, color={self._color!r}, line_width={self._line_width:g})"
