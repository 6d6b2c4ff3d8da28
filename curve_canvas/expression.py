"""Expression evaluator capability and its adapters.

Purpose
-------
The plotting core never parses mathematics itself. It consumes a small
capability:

- ``ExpressionEvaluator.compile(text) -> CompiledExpression``
- ``CompiledExpression.evaluate(x) -> float``

Any failure inside ``evaluate`` (an exception, a non-real value, NaN, ±inf) means
"the function is undefined here". The core funnels every evaluation through
:func:`evaluate_point` and :func:`evaluate_points`, which turn all of those
signals into ``None``/``NaN`` so that repaints and numeric queries always
produce a best-effort result.

Adapters
--------
- :class:`SympyExpressionEvaluator` parses calculator-style input (``x^2``,
  ``2x``, ``ln(x)``, ``e``, ``pi``) with SymPy and compiles it to NumPy through
  :func:`numpify_cached`.
- :class:`CallableExpression` wraps an ordinary Python callable.

:func:`as_compiled` resolves strings, SymPy expressions, callables and existing
handles to a ``CompiledExpression``.
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from typing import Any, Callable, Mapping, Optional

import numpy as np
import sympy as sp
from sympy.parsing.sympy_parser import (
    convert_xor,
    implicit_multiplication_application,
    parse_expr,
    standard_transformations,
)

from .errors import EvaluationUndefined, ExpressionCompileError
from .numpify import NumpifiedFunction, numpify_cached

__all__ = [
    "ExpressionEvaluator",
    "CompiledExpression",
    "SympyExpressionEvaluator",
    "SympyCompiledExpression",
    "CallableExpression",
    "as_compiled",
    "evaluate_point",
    "evaluate_points",
]

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


class CompiledExpression(ABC):
    """Opaque handle returned by :meth:`ExpressionEvaluator.compile`."""

    #: Source text (or a readable description) of the compiled function.
    expression: str = ""

    @abstractmethod
    def evaluate(self, x: float) -> float:
        """Return f(x). May raise or return a non-finite value where undefined."""

    def evaluate_many(self, xs: np.ndarray) -> np.ndarray:
        """Return f over an array of points.

        The default loops over :meth:`evaluate` and stores ``NaN`` where a point
        is undefined. Adapters with a vectorized backend override it.
        """
        xs = np.asarray(xs, dtype=float)
        out = np.empty(xs.shape, dtype=float)
        for i, x in enumerate(xs.flat):
            value = evaluate_point(self, float(x))
            out.flat[i] = np.nan if value is None else value
        return out

    def __call__(self, x: float) -> float:
        return self.evaluate(x)


class ExpressionEvaluator(ABC):
    """Compiles expression strings in one free variable."""

    @abstractmethod
    def compile(self, expression: str) -> CompiledExpression:
        """Compile ``expression``.

        Raises
        ------
        ExpressionCompileError
            If the text is malformed or uses unsupported names.
        """


def _real_part_or_nan(values: np.ndarray) -> np.ndarray:
    """Map complex entries with a non-zero imaginary part to NaN."""
    if np.iscomplexobj(values):
        return np.where(values.imag == 0, values.real, np.nan).astype(float)
    return values.astype(float, copy=False)


def _to_real_scalar(value: Any) -> float:
    arr = np.asarray(value)
    if arr.size != 1:
        raise EvaluationUndefined(f"Expected a scalar result, got shape {arr.shape}")
    item = arr.reshape(()).item()
    if isinstance(item, complex):
        if item.imag != 0:
            raise EvaluationUndefined(f"Non-real value {item!r}")
        return float(item.real)
    return float(item)


def evaluate_point(handle: CompiledExpression, x: float) -> Optional[float]:
    """Evaluate ``handle`` at ``x``; return ``None`` wherever it is undefined."""
    try:
        value = _to_real_scalar(handle.evaluate(x))
    except Exception as exc:
        logger.debug("Undefined at x=%r: %s", x, exc)
        return None
    if not math.isfinite(value):
        return None
    return value


def evaluate_points(handle: CompiledExpression, xs: np.ndarray) -> np.ndarray:
    """Evaluate ``handle`` over ``xs``; undefined entries become ``NaN``.

    Batch evaluation is tried first. If it raises or returns the wrong shape,
    every point is evaluated on its own so one failure only affects its own
    entry.
    """
    xs = np.asarray(xs, dtype=float)
    try:
        with np.errstate(all="ignore"):
            values = np.asarray(handle.evaluate_many(xs))
        if values.shape != xs.shape:
            values = np.broadcast_to(values, xs.shape)
        values = _real_part_or_nan(values)
    except Exception as exc:
        logger.debug("Batch evaluation failed (%s); falling back to per-point", exc)
        values = np.full(xs.shape, np.nan, dtype=float)
        for i, x in enumerate(xs.flat):
            value = evaluate_point(handle, float(x))
            if value is not None:
                values.flat[i] = value
    return np.where(np.isfinite(values), values, np.nan)


# === SECTION: SymPy adapter [id: sympy-adapter]===

_TRANSFORMATIONS = standard_transformations + (
    implicit_multiplication_application,
    convert_xor,
)

_CALCULATOR_NAMES: Mapping[str, Any] = {
    "e": sp.E,
    "E": sp.E,
    "pi": sp.pi,
    "ln": sp.log,
    "log": sp.log,
    "log10": lambda arg: sp.log(arg, 10),
    "log2": lambda arg: sp.log(arg, 2),
    "abs": sp.Abs,
    "sqrt": sp.sqrt,
    "cbrt": sp.cbrt,
    "exp": sp.exp,
    "sin": sp.sin,
    "cos": sp.cos,
    "tan": sp.tan,
    "asin": sp.asin,
    "acos": sp.acos,
    "atan": sp.atan,
    "sec": sp.sec,
    "csc": sp.csc,
    "cot": sp.cot,
    "sinh": sp.sinh,
    "cosh": sp.cosh,
    "tanh": sp.tanh,
    "floor": sp.floor,
    "ceil": sp.ceiling,
    "sign": sp.sign,
}


class SympyCompiledExpression(CompiledExpression):
    """Handle produced by :class:`SympyExpressionEvaluator`."""

    def __init__(self, expression: str, symbolic: sp.Expr, fn: NumpifiedFunction) -> None:
        self.expression = expression
        self.symbolic = symbolic
        self._fn = fn

    def evaluate(self, x: float) -> float:
        with np.errstate(all="ignore"):
            value = self._fn(x)
        return _to_real_scalar(value)

    def evaluate_many(self, xs: np.ndarray) -> np.ndarray:
        xs = np.asarray(xs, dtype=float)
        with np.errstate(all="ignore"):
            values = np.asarray(self._fn(xs))
        return _real_part_or_nan(np.broadcast_to(values, xs.shape))

    def __repr__(self) -> str:
        return f"SympyCompiledExpression({self.expression!r})"


class SympyExpressionEvaluator(ExpressionEvaluator):
    """Calculator-grammar evaluator backed by SymPy and NumPy.

    Parameters
    ----------
    variable : str, default="x"
        Name of the single free variable.

    Notes
    -----
    ``^`` is exponentiation and implicit multiplication is accepted
    (``2x sin x`` parses as ``2*x*sin(x)``). ``log`` is the natural logarithm.
    Parsing goes through SymPy's ``parse_expr``, which evaluates Python code;
    do not feed it untrusted input.
    """

    def __init__(self, variable: str = "x") -> None:
        if not variable.isidentifier():
            raise ValueError(f"variable must be an identifier, got {variable!r}")
        self.variable = variable
        self.symbol = sp.Symbol(variable)

    def parse(self, expression: str) -> sp.Expr:
        """Parse ``expression`` into a SymPy expression in :attr:`symbol`."""
        if not isinstance(expression, str):
            raise ExpressionCompileError(repr(expression), "expression must be a string")
        text = expression.strip()
        if not text:
            raise ExpressionCompileError(expression, "expression is empty")

        local_dict = dict(_CALCULATOR_NAMES)
        local_dict[self.variable] = self.symbol
        try:
            parsed = parse_expr(text, local_dict=local_dict, transformations=_TRANSFORMATIONS)
        except Exception as exc:
            raise ExpressionCompileError(expression, f"{type(exc).__name__}: {exc}") from exc

        if not isinstance(parsed, sp.Expr):
            raise ExpressionCompileError(
                expression, f"expected an algebraic expression, got {type(parsed).__name__}"
            )
        unknown = sorted(s.name for s in parsed.free_symbols if s != self.symbol)
        if unknown:
            raise ExpressionCompileError(
                expression,
                f"unknown name(s) {', '.join(unknown)}; only {self.variable!r} may vary",
            )
        return parsed

    def compile(self, expression: str) -> SympyCompiledExpression:
        symbolic = self.parse(expression)
        try:
            fn = numpify_cached(symbolic, self.symbol)
        except (TypeError, ValueError) as exc:
            raise ExpressionCompileError(expression, str(exc)) from exc
        return SympyCompiledExpression(expression.strip(), symbolic, fn)

    def __repr__(self) -> str:
        return f"SympyExpressionEvaluator(variable={self.variable!r})"

# === END OF SECTION: SymPy adapter [id: sympy-adapter]===


class CallableExpression(CompiledExpression):
    """Wrap a plain ``f(x) -> float`` callable as a compiled handle."""

    def __init__(self, fn: Callable[[float], Any], expression: str = "") -> None:
        if not callable(fn):
            raise TypeError(f"CallableExpression expects a callable, got {type(fn)}")
        self._fn = fn
        self.expression = expression or getattr(fn, "__name__", "<callable>")

    def evaluate(self, x: float) -> float:
        return self._fn(x)

    def __repr__(self) -> str:
        return f"CallableExpression({self.expression!r})"


_DEFAULT_EVALUATOR = SympyExpressionEvaluator()


def as_compiled(obj: Any, evaluator: Optional[ExpressionEvaluator] = None) -> CompiledExpression:
    """Resolve ``obj`` to a :class:`CompiledExpression`.

    Accepts an existing handle, an expression string (compiled by ``evaluator``
    or the default SymPy evaluator), a SymPy expression in ``x``, or a callable.
    """
    if isinstance(obj, CompiledExpression):
        return obj
    ev = evaluator or _DEFAULT_EVALUATOR
    if isinstance(obj, str):
        return ev.compile(obj)
    if isinstance(obj, sp.Basic):
        return ev.compile(str(obj))
    if callable(obj):
        return CallableExpression(obj)
    raise TypeError(f"Cannot build an evaluator from {type(obj).__name__}")
