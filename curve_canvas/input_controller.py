"""Pointer, wheel and touch handling as an explicit state machine.

States
------
``IDLE`` and ``DRAGGING``.

- ``pointer_down`` (IDLE or DRAGGING) -> DRAGGING, capturing a
  :class:`PointerSession`.
- ``pointer_move`` while DRAGGING assigns
  ``offset = session offset + (pointer - drag start)``. Assigning instead of
  accumulating deltas keeps the offset free of drift.
- ``pointer_up`` / ``pointer_leave`` -> IDLE.
- ``wheel`` zooms about the cursor in any state without changing it.
- Touch input mirrors the pointer for a single contact; moves with more than
  one contact are ignored.

Every viewport change is reported through ``on_change(reason)``; the
controller itself never draws.
"""

from __future__ import annotations

import enum
import logging
import math
from dataclasses import dataclass
from typing import Callable, Literal, Optional, Sequence, Union

from .viewport import Viewport

__all__ = [
    "InputState",
    "PointerSession",
    "PointerEvent",
    "WheelEvent",
    "TouchEvent",
    "InputController",
]

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

TouchPoints = Sequence[tuple[float, float]]


class InputState(enum.Enum):
    IDLE = "idle"
    DRAGGING = "dragging"


@dataclass(frozen=True)
class PointerSession:
    """Drag-start pixel and the viewport offset at that moment."""

    start_x: float
    start_y: float
    offset_x: float
    offset_y: float


@dataclass(frozen=True)
class PointerEvent:
    kind: Literal["down", "move", "up", "leave"]
    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True)
class WheelEvent:
    x: float
    y: float
    delta_y: float


@dataclass(frozen=True)
class TouchEvent:
    kind: Literal["start", "move", "end"]
    touches: tuple[tuple[float, float], ...] = ()


InputEvent = Union[PointerEvent, WheelEvent, TouchEvent]


class InputController:
    """Translate low-level input into ``Viewport`` mutations.

    Parameters
    ----------
    viewport : Viewport
        The viewport to mutate.
    on_change : callable, optional
        Called with a reason string after every viewport change.
    wheel_intensity : float, default=0.1
        One wheel notch zooms by ``exp(wheel_intensity)``.
    """

    def __init__(
        self,
        viewport: Viewport,
        on_change: Optional[Callable[[str], None]] = None,
        *,
        wheel_intensity: float = 0.1,
    ) -> None:
        if not (math.isfinite(wheel_intensity) and wheel_intensity > 0):
            raise ValueError("wheel_intensity must be a positive finite number")
        self.viewport = viewport
        self._on_change = on_change
        self.wheel_intensity = float(wheel_intensity)
        self._session: Optional[PointerSession] = None

    @property
    def state(self) -> InputState:
        return InputState.DRAGGING if self._session is not None else InputState.IDLE

    @property
    def session(self) -> Optional[PointerSession]:
        return self._session

    def _changed(self, reason: str) -> None:
        if self._on_change is not None:
            self._on_change(reason)

    # --- pointer --------------------------------------------------------

    def pointer_down(self, x: float, y: float) -> None:
        vp = self.viewport
        self._session = PointerSession(float(x), float(y), vp.offset_x, vp.offset_y)

    def pointer_move(self, x: float, y: float) -> None:
        session = self._session
        if session is None:
            return
        self.viewport.set_offset(
            session.offset_x + (x - session.start_x),
            session.offset_y + (y - session.start_y),
        )
        self._changed("pan")

    def pointer_up(self) -> None:
        self._session = None

    pointer_leave = pointer_up

    def wheel(self, x: float, y: float, delta_y: float) -> None:
        """Zoom in for ``delta_y < 0``, out for ``delta_y > 0``; ignore 0."""
        if delta_y == 0 or math.isnan(delta_y):
            return
        direction = 1.0 if delta_y < 0 else -1.0
        self.viewport.zoom_at(x, y, math.exp(direction * self.wheel_intensity))
        self._changed("wheel")

    # --- touch ----------------------------------------------------------

    def touch_start(self, touches: TouchPoints) -> None:
        if not touches:
            return
        self.pointer_down(*touches[0])

    def touch_move(self, touches: TouchPoints) -> None:
        if len(touches) != 1:
            logger.debug("touch_move with %d contacts ignored", len(touches))
            return
        self.pointer_move(*touches[0])

    def touch_end(self, touches: TouchPoints = ()) -> None:
        self.pointer_up()

    # --- dispatch -------------------------------------------------------

    def handle(self, event: InputEvent) -> None:
        """Dispatch a ``PointerEvent``, ``WheelEvent`` or ``TouchEvent``."""
        if isinstance(event, PointerEvent):
            if event.kind == "down":
                self.pointer_down(event.x, event.y)
            elif event.kind == "move":
                self.pointer_move(event.x, event.y)
            elif event.kind in ("up", "leave"):
                self.pointer_up()
            else:
                raise ValueError(f"Unknown pointer event kind: {event.kind!r}")
        elif isinstance(event, WheelEvent):
            self.wheel(event.x, event.y, event.delta_y)
        elif isinstance(event, TouchEvent):
            if event.kind == "start":
                self.touch_start(event.touches)
            elif event.kind == "move":
                self.touch_move(event.touches)
            elif event.kind == "end":
                self.touch_end(event.touches)
            else:
                raise ValueError(f"Unknown touch event kind: {event.kind!r}")
        else:
            raise TypeError(f"Unsupported input event: {type(event).__name__}")
