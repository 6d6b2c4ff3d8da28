"""Exception taxonomy for curve_canvas.

Only compile errors, bad intervals and bad curve indices ever reach callers.
``EvaluationUndefined`` is the per-point "no value here" signal used by
expression adapters; the sampler, root finder and integrator absorb it.
"""

from __future__ import annotations

__all__ = [
    "CurveCanvasError",
    "ExpressionCompileError",
    "EvaluationUndefined",
    "InvalidIntervalError",
    "CurveIndexError",
]


class CurveCanvasError(Exception):
    """Base class for errors raised by curve_canvas."""


class ExpressionCompileError(CurveCanvasError, ValueError):
    """Raised when an expression string cannot be parsed or compiled.

    Parameters
    ----------
    expression : str
        The offending source text.
    reason : str
        Human-readable explanation.
    """

    def __init__(self, expression: str, reason: str) -> None:
        self.expression = expression
        self.reason = reason
        super().__init__(f"Could not compile {expression!r}: {reason}")


class EvaluationUndefined(CurveCanvasError, ArithmeticError):
    """Raised by an evaluator when the function has no real value at a point."""


class InvalidIntervalError(CurveCanvasError, ValueError):
    """Raised when a numeric query receives ``a >= b`` or non-finite bounds."""

    def __init__(self, a: float, b: float) -> None:
        self.a = a
        self.b = b
        super().__init__(
            f"Invalid interval [{a!r}, {b!r}]: bounds must be finite with a < b."
        )


class CurveIndexError(CurveCanvasError, IndexError):
    """Raised when a curve index does not exist in the graph."""

    def __init__(self, index: int, count: int) -> None:
        self.index = index
        self.count = count
        super().__init__(f"No curve at index {index!r} (graph has {count} curve(s)).")
