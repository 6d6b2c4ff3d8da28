"""Root finding by sign-change scan plus bisection.

The interval is scanned with a coarse step; every sub-interval whose endpoint
values have opposite signs is refined by bisection. A node where the function
is exactly zero is reported when it is an interval endpoint or the function
changes sign across it.

Limitations
-----------
- Tangential roots (``x**2`` at 0) produce no sign change and are not found.
- Sub-intervals with an undefined endpoint are skipped, so roots inside them
  are missed.
- A sign change across a pole (``tan`` at pi/2) is refined like a root; the
  iteration cap guarantees termination.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Optional, Sequence

import numpy as np

from .errors import InvalidIntervalError
from .expression import CompiledExpression, evaluate_point, evaluate_points
from .InputConvert import InputConvert

__all__ = ["find_roots", "bisect", "check_interval", "DEFAULT_STEPS", "MAX_BISECTION_ITERATIONS"]

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

DEFAULT_STEPS = 200
MAX_BISECTION_ITERATIONS = 100
MAX_SCAN_STEPS = 1_000_000


def check_interval(a: Any, b: Any) -> tuple[float, float]:
    """Coerce bounds to floats and require ``a < b`` with both finite.

    Raises
    ------
    InvalidIntervalError
        If the bounds are non-finite or out of order.
    """
    lo = InputConvert(a, float, name="a")
    hi = InputConvert(b, float, name="b")
    if not (math.isfinite(lo) and math.isfinite(hi) and lo < hi):
        raise InvalidIntervalError(lo, hi)
    return lo, hi


def _zero_crosses(values: np.ndarray, i: int) -> bool:
    """Whether the exact zero at node ``i`` is a sign change.

    Interval endpoints always count. Inside, the nearest defined non-zero
    values on either side must have opposite signs; a run of zeros is reported
    at its first node only.
    """
    last = len(values) - 1
    if i == 0 or i == last:
        return True
    if values[i - 1] == 0:
        return False
    defined = ~np.isnan(values) & (values != 0)
    left = np.flatnonzero(defined[:i])
    right = np.flatnonzero(defined[i + 1 :])
    if not len(left) or not len(right):
        return False
    return bool(values[left[-1]] * values[i + 1 + right[0]] < 0)


def bisect(
    evaluator: CompiledExpression,
    lo: float,
    hi: float,
    precision: float = 1e-3,
    max_iterations: int = MAX_BISECTION_ITERATIONS,
    *,
    f_lo: Optional[float] = None,
) -> Optional[float]:
    """Refine a bracketed root of ``evaluator`` in ``[lo, hi]``.

    Returns the midpoint once ``|f(m)| < precision``, once ``f(m)`` is undefined,
    or after ``max_iterations`` halvings. Returns ``None`` if ``[lo, hi]`` is
    not a bracket.
    """
    if f_lo is None:
        f_lo = evaluate_point(evaluator, lo)
    f_hi = evaluate_point(evaluator, hi)
    if f_lo is None or f_hi is None or f_lo * f_hi >= 0:
        return None

    m = (lo + hi) / 2
    for _ in range(max_iterations):
        m = (lo + hi) / 2
        f_m = evaluate_point(evaluator, m)
        if f_m is None or abs(f_m) < precision:
            return m
        if (f_m > 0) == (f_lo > 0):
            lo, f_lo = m, f_m
        else:
            hi = m
    return m


def find_roots(
    evaluator: CompiledExpression,
    interval: Sequence[Any] = (-10.0, 10.0),
    coarse_step: Optional[float] = None,
    precision: float = 1e-3,
    max_iterations: int = MAX_BISECTION_ITERATIONS,
) -> list[float]:
    """Return the roots of ``evaluator`` found in ``interval``, ascending.

    Parameters
    ----------
    evaluator : CompiledExpression
        Function to scan.
    interval : (a, b)
        Scan interval; requires finite ``a < b``.
    coarse_step : float, optional
        Scan step. Defaults to ``(b - a) / 200``.
    precision : float
        Bisection stops once ``|f(m)| < precision``.
    max_iterations : int
        Bisection iteration cap.

    Raises
    ------
    InvalidIntervalError
        If ``interval`` is invalid. Nothing is evaluated in that case.
    ValueError
        If ``coarse_step`` or ``precision`` is not a positive finite number.
    """
    try:
        a, b = interval
    except (TypeError, ValueError) as exc:
        raise TypeError("interval must be a pair (a, b)") from exc
    a, b = check_interval(a, b)

    step = (b - a) / DEFAULT_STEPS if coarse_step is None else InputConvert(coarse_step, float, name="coarse_step")
    precision = InputConvert(precision, float, name="precision")
    for name, value in (("coarse_step", step), ("precision", precision)):
        if not (math.isfinite(value) and value > 0):
            raise ValueError(f"{name} must be a positive finite number, got {value!r}")

    steps = max(1, math.ceil((b - a) / step))
    if steps > MAX_SCAN_STEPS:
        raise ValueError(
            f"coarse_step={step!r} needs {steps} steps over [{a}, {b}]; the limit is {MAX_SCAN_STEPS}"
        )
    grid = a + step * np.arange(steps, dtype=float)
    nodes = np.unique(np.append(grid[grid < b], b))
    count = len(nodes) - 1
    values = evaluate_points(evaluator, nodes)

    roots: list[float] = []
    for i in range(count + 1):
        f0 = values[i]
        if f0 == 0:
            if _zero_crosses(values, i):
                roots.append(float(nodes[i]))
            continue
        if i == count:
            break
        f1 = values[i + 1]
        if np.isnan(f0) or np.isnan(f1) or f0 * f1 >= 0:
            continue
        root = bisect(
            evaluator,
            float(nodes[i]),
            float(nodes[i + 1]),
            precision,
            max_iterations,
            f_lo=float(f0),
        )
        if root is not None:
            roots.append(root)

    logger.debug("find_roots: [%g, %g] step=%g -> %d root(s)", a, b, step, len(roots))
    return roots
