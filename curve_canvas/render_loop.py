"""Single-pending repaint scheduling.

``RenderLoop`` coalesces repaint requests: while one paint is pending, new
requests replace it instead of queueing another. When an asyncio loop is
running the pending paint fires after ``frame_interval_ms``; otherwise it waits
for the host to call :meth:`RenderLoop.tick` (for example from its own frame
callback). Everything happens on the caller's thread.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence
import asyncio
import logging
import time

from .primitives import Primitive, Surface

__all__ = ["RenderLoop"]

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


@dataclass
class _PendingRepaint:
    reason: str
    superseded: int = 0


class RenderLoop:
    """Coalesce repaint requests into at most one paint per frame tick.

    Parameters
    ----------
    paint:
        Callable building one frame of primitives.
    surface:
        Receives every painted frame.
    frame_interval_ms:
        Delay before a scheduled tick when an asyncio loop is running.
    """

    def __init__(
        self,
        paint: Callable[[], Sequence[Primitive]],
        surface: Surface,
        *,
        frame_interval_ms: int = 16,
    ) -> None:
        if frame_interval_ms <= 0:
            raise ValueError("frame_interval_ms must be > 0")
        self._paint = paint
        self.surface = surface
        self._frame_interval_s = frame_interval_ms / 1000.0

        self._pending: Optional[_PendingRepaint] = None
        self._handle: Optional[Any] = None
        self.frames_painted = 0
        self.last_frame: tuple[Primitive, ...] = ()
        self._info_last_log_t = 0.0

    @property
    def is_pending(self) -> bool:
        return self._pending is not None

    def request_repaint(self, reason: str = "") -> None:
        if self._pending is not None:
            self._pending.reason = reason
            self._pending.superseded += 1
            if self._handle is None:
                self._schedule()
            return
        self._pending = _PendingRepaint(reason=reason)
        self._schedule()

    def _schedule(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._handle = loop.call_later(self._frame_interval_s, self._on_tick)

    def _on_tick(self) -> None:
        self._handle = None
        try:
            self.tick()
        except Exception:
            logger.exception("RenderLoop repaint failed")

    def tick(self) -> bool:
        """Run the pending paint, if any. Returns whether a frame was painted."""
        pending = self._pending
        if pending is None:
            return False
        self._pending = None
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        if pending.superseded:
            logger.debug("repaint(reason=%s) coalesced %d request(s)", pending.reason, pending.superseded)
        self._run(pending.reason)
        return True

    flush = tick

    def paint_now(self, reason: str = "") -> tuple[Primitive, ...]:
        """Paint synchronously, dropping any pending request."""
        self.cancel()
        return self._run(reason)

    def cancel(self) -> None:
        """Forget the pending request without painting."""
        self._pending = None
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _run(self, reason: str) -> tuple[Primitive, ...]:
        frame = tuple(self._paint())
        self.surface.render(frame)
        self.last_frame = frame
        self.frames_painted += 1

        now = time.monotonic()
        if logger.isEnabledFor(logging.INFO) and (now - self._info_last_log_t) > 1.0:
            self._info_last_log_t = now
            logger.info("render(reason=%s) primitives=%d", reason, len(frame))
        return frame
