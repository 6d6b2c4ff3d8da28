"""Drawing primitives and the surface contract.

A paint produces a flat tuple of immutable primitives in layout-pixel
coordinates. Surfaces consume a whole frame at once through
:meth:`Surface.render`; no drawing state survives between frames.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Literal, Sequence, Union

__all__ = [
    "Clear",
    "Polyline",
    "Circle",
    "Text",
    "Primitive",
    "Surface",
    "RecordingSurface",
]

Point = tuple[float, float]
HAlign = Literal["left", "center", "right"]
VAlign = Literal["top", "middle", "bottom"]


@dataclass(frozen=True)
class Clear:
    """Fill the whole surface with ``color``."""

    color: str


@dataclass(frozen=True)
class Polyline:
    """Stroke the connected ``points`` with ``color`` and ``width``."""

    points: tuple[Point, ...]
    color: str
    width: float


@dataclass(frozen=True)
class Circle:
    """Filled circle (point marker)."""

    center: Point
    radius: float
    color: str


@dataclass(frozen=True)
class Text:
    """Single-line text anchored at ``position``."""

    position: Point
    text: str
    color: str
    size: int
    align: HAlign = "left"
    baseline: VAlign = "top"


Primitive = Union[Clear, Polyline, Circle, Text]


class Surface(ABC):
    """Target of one full frame of primitives."""

    @abstractmethod
    def render(self, primitives: Sequence[Primitive]) -> None:
        """Draw ``primitives`` in order, replacing the previous frame."""


class RecordingSurface(Surface):
    """Surface that keeps the emitted frames (headless hosts and tests).

    Parameters
    ----------
    keep : int, default=1
        Number of most recent frames to retain.
    """

    def __init__(self, keep: int = 1) -> None:
        if keep <= 0:
            raise ValueError("keep must be > 0")
        self._keep = keep
        self.frames: list[tuple[Primitive, ...]] = []

    def render(self, primitives: Sequence[Primitive]) -> None:
        self.frames.append(tuple(primitives))
        del self.frames[: -self._keep]

    @property
    def last_frame(self) -> tuple[Primitive, ...]:
        return self.frames[-1] if self.frames else ()
