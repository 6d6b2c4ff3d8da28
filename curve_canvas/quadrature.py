"""Numerical integration of a compiled curve over a finite interval.

Three fixed-node rules (Simpson, trapezoidal, midpoint) evaluate every node
with one vectorized call. A fourth method, ``"quad"``, delegates to SciPy's
adaptive ``quad`` and is useful as a reference value.

Nodes where the function is undefined contribute zero to the weighted sum.
This biases results near singularities, so :func:`integrate_detailed` also
reports how many nodes were skipped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import numpy as np

from .expression import CompiledExpression, evaluate_point, evaluate_points
from .InputConvert import InputConvert
from .roots import check_interval

__all__ = ["QuadratureResult", "integrate", "integrate_detailed", "METHODS"]

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

METHODS = ("simpson", "trapezoidal", "midpoint", "quad")


@dataclass(frozen=True)
class QuadratureResult:
    """Value of a definite integral plus bookkeeping.

    Parameters
    ----------
    value : float
        Approximation of the integral.
    method : str
        Rule used.
    n : int
        Number of sub-intervals actually used (Simpson rounds odd ``n`` up).
    failed_nodes : int
        Nodes where the function was undefined and counted as zero.
    """

    value: float
    method: str
    n: int
    failed_nodes: int


def _weighted_sum(evaluator: CompiledExpression, nodes: np.ndarray, weights: np.ndarray) -> tuple[float, int]:
    values = evaluate_points(evaluator, nodes)
    undefined = np.isnan(values)
    total = float(np.dot(weights, np.where(undefined, 0.0, values)))
    return total, int(undefined.sum())


def _simpson(evaluator: CompiledExpression, a: float, b: float, n: int) -> tuple[float, int, int]:
    if n % 2:
        n += 1
    h = (b - a) / n
    nodes = a + h * np.arange(n + 1, dtype=float)
    nodes[-1] = b
    weights = np.where(np.arange(n + 1) % 2 == 1, 4.0, 2.0)
    weights[0] = weights[-1] = 1.0
    total, failed = _weighted_sum(evaluator, nodes, weights)
    return h / 3 * total, n, failed


def _trapezoidal(evaluator: CompiledExpression, a: float, b: float, n: int) -> tuple[float, int, int]:
    h = (b - a) / n
    nodes = a + h * np.arange(n + 1, dtype=float)
    nodes[-1] = b
    weights = np.ones(n + 1)
    weights[0] = weights[-1] = 0.5
    total, failed = _weighted_sum(evaluator, nodes, weights)
    return h * total, n, failed


def _midpoint(evaluator: CompiledExpression, a: float, b: float, n: int) -> tuple[float, int, int]:
    h = (b - a) / n
    nodes = a + h * (np.arange(n, dtype=float) + 0.5)
    total, failed = _weighted_sum(evaluator, nodes, np.ones(n))
    return h * total, n, failed


def _adaptive(evaluator: CompiledExpression, a: float, b: float, n: int) -> tuple[float, int, int]:
    from scipy.integrate import quad

    failed = 0

    def _integrand(t: float) -> float:
        nonlocal failed
        value = evaluate_point(evaluator, t)
        if value is None:
            failed += 1
            return 0.0
        return value

    value, _error = quad(_integrand, a, b, limit=max(50, n))
    return float(value), n, failed


_RULES = {
    "simpson": _simpson,
    "trapezoidal": _trapezoidal,
    "midpoint": _midpoint,
    "quad": _adaptive,
}


def integrate_detailed(
    evaluator: CompiledExpression,
    a: Any,
    b: Any,
    method: str = "simpson",
    n: Any = 1000,
) -> QuadratureResult:
    """Integrate ``evaluator`` over ``[a, b]`` and report skipped nodes.

    Raises
    ------
    InvalidIntervalError
        If ``a >= b`` or a bound is not finite.
    ValueError
        If ``method`` is unknown or ``n`` is not a positive integer.
    """
    lo, hi = check_interval(a, b)
    key = str(method).strip().lower()
    if key not in _RULES:
        raise ValueError(f"Unknown integration method {method!r}; choose one of {', '.join(METHODS)}")
    count = InputConvert(n, int, finite=True, name="n")
    if count <= 0:
        raise ValueError(f"n must be a positive integer, got {n!r}")

    value, used_n, failed = _RULES[key](evaluator, lo, hi, count)
    if failed:
        logger.info("integrate(%s) over [%g, %g]: %d undefined node(s) counted as zero", key, lo, hi, failed)
    return QuadratureResult(value=value, method=key, n=used_n, failed_nodes=failed)


def integrate(
    evaluator: CompiledExpression,
    a: Any,
    b: Any,
    method: str = "simpson",
    n: Any = 1000,
) -> float:
    """Return the approximate integral of ``evaluator`` over ``[a, b]``.

    See :func:`integrate_detailed` for parameters and errors.
    """
    return integrate_detailed(evaluator, a, b, method=method, n=n).value
