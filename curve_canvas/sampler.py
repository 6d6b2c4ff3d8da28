"""Per-column curve sampling with discontinuity breaks.

Purpose
-------
``sample_curve`` walks every integer pixel column of a ``Viewport``, maps it
to a mathematical ``x``, evaluates the function there and emits polylines in
pixel space. A polyline is broken wherever the function is undefined,
non-finite, or off the visible rows, so vertical asymptotes are never drawn
as near-vertical strokes.

Important gotchas
-----------------
- Runs of a single point are kept in ``polylines`` but cannot be stroked;
  the painter skips them.
- ``samples`` only contains the points that were appended to a polyline
  (visible, defined points), in column order.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .expression import CompiledExpression, evaluate_points
from .viewport import Viewport

__all__ = ["CurveSamples", "sample_curve", "split_runs"]

Point = tuple[float, float]


@dataclass(frozen=True)
class CurveSamples:
    """Result of sampling one curve against one viewport.

    Parameters
    ----------
    polylines : tuple[tuple[Point, ...], ...]
        Connected runs of ``(px, py)`` pixel points.
    samples : tuple[Point, ...]
        The ``(x, y)`` mathematical pairs behind every emitted pixel point.
    """

    polylines: tuple[tuple[Point, ...], ...]
    samples: tuple[Point, ...]

    @property
    def pixel_points(self) -> tuple[Point, ...]:
        return tuple(p for line in self.polylines for p in line)


def split_runs(mask: np.ndarray) -> list[tuple[int, int]]:
    """Return ``[start, stop)`` index pairs of the True runs in ``mask``."""
    padded = np.concatenate(([False], np.asarray(mask, dtype=bool), [False]))
    edges = np.flatnonzero(padded[1:] != padded[:-1])
    return [(int(edges[i]), int(edges[i + 1])) for i in range(0, len(edges), 2)]


def sample_curve(evaluator: CompiledExpression, viewport: Viewport) -> CurveSamples:
    """Sample ``evaluator`` at every pixel column of ``viewport``."""
    columns = np.arange(int(viewport.width), dtype=float)
    xs = viewport.columns_to_math(columns)
    ys = evaluate_points(evaluator, xs)

    with np.errstate(all="ignore"):
        rows = viewport.values_to_rows(ys)
    visible = np.isfinite(ys) & np.isfinite(rows) & (rows >= 0) & (rows < viewport.height)

    polylines: list[tuple[Point, ...]] = []
    samples: list[Point] = []
    for start, stop in split_runs(visible):
        polylines.append(
            tuple(zip(columns[start:stop].tolist(), rows[start:stop].tolist()))
        )
        samples.extend(zip(xs[start:stop].tolist(), ys[start:stop].tolist()))
    return CurveSamples(polylines=tuple(polylines), samples=tuple(samples))
