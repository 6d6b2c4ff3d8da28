from __future__ import annotations

import math

import pytest

from curve_canvas.input_controller import (
    InputController,
    InputState,
    PointerEvent,
    TouchEvent,
    WheelEvent,
)
from curve_canvas.viewport import Viewport


@pytest.fixture
def wired():
    vp = Viewport(width=400, height=300)
    reasons: list[str] = []
    return vp, InputController(vp, on_change=reasons.append), reasons


def test_drag_moves_offset_absolutely(wired) -> None:
    vp, ctrl, reasons = wired
    assert ctrl.state is InputState.IDLE
    ctrl.pointer_down(100, 100)
    assert ctrl.state is InputState.DRAGGING
    ctrl.pointer_move(110, 95)
    ctrl.pointer_move(130, 120)
    assert (vp.offset_x, vp.offset_y) == (30.0, 20.0)
    ctrl.pointer_up()
    assert ctrl.state is InputState.IDLE
    assert ctrl.session is None
    assert reasons == ["pan", "pan"]


def test_session_captures_start_offset(wired) -> None:
    vp, ctrl, _ = wired
    vp.pan(7, -3)
    ctrl.pointer_down(50, 60)
    assert ctrl.session.offset_x == 7.0
    assert ctrl.session.offset_y == -3.0
    ctrl.pointer_move(50, 60)
    assert (vp.offset_x, vp.offset_y) == (7.0, -3.0)


def test_moves_while_idle_are_ignored(wired) -> None:
    vp, ctrl, reasons = wired
    ctrl.pointer_move(300, 300)
    assert (vp.offset_x, vp.offset_y) == (0.0, 0.0)
    assert reasons == []


def test_leave_ends_the_drag(wired) -> None:
    vp, ctrl, _ = wired
    ctrl.pointer_down(0, 0)
    ctrl.pointer_leave()
    ctrl.pointer_move(40, 40)
    assert ctrl.state is InputState.IDLE
    assert vp.offset_x == 0.0


def test_second_down_restarts_session(wired) -> None:
    vp, ctrl, _ = wired
    ctrl.pointer_down(0, 0)
    ctrl.pointer_move(10, 0)
    ctrl.pointer_down(100, 100)
    ctrl.pointer_move(105, 100)
    assert vp.offset_x == 15.0


def test_wheel_zooms_about_cursor(wired) -> None:
    vp, ctrl, reasons = wired
    before = vp.to_math(320, 40)
    ctrl.wheel(320, 40, -120)
    assert vp.scale == pytest.approx(40 * math.exp(0.1))
    assert vp.to_math(320, 40) == pytest.approx(before, abs=1e-9)
    ctrl.wheel(320, 40, 3)
    assert vp.scale == pytest.approx(40.0)
    assert reasons == ["wheel", "wheel"]


def test_zero_wheel_delta_is_ignored(wired) -> None:
    vp, ctrl, reasons = wired
    ctrl.wheel(10, 10, 0)
    ctrl.wheel(10, 10, float("nan"))
    assert vp.scale == 40.0
    assert reasons == []


def test_wheel_during_drag_keeps_dragging(wired) -> None:
    _, ctrl, _ = wired
    ctrl.pointer_down(1, 1)
    ctrl.wheel(1, 1, -1)
    assert ctrl.state is InputState.DRAGGING


def test_single_touch_pans(wired) -> None:
    vp, ctrl, _ = wired
    ctrl.touch_start([(10, 10)])
    ctrl.touch_move([(25, 5)])
    ctrl.touch_end()
    assert (vp.offset_x, vp.offset_y) == (15.0, -5.0)
    assert ctrl.state is InputState.IDLE


def test_multi_touch_moves_are_ignored(wired) -> None:
    vp, ctrl, reasons = wired
    ctrl.touch_start([(10, 10), (50, 50)])
    ctrl.touch_move([(20, 20), (60, 60)])
    assert (vp.offset_x, vp.offset_y) == (0.0, 0.0)
    assert reasons == []
    ctrl.touch_start([])
    assert ctrl.state is InputState.DRAGGING


def test_handle_dispatches_events(wired) -> None:
    vp, ctrl, _ = wired
    ctrl.handle(PointerEvent("down", 0, 0))
    ctrl.handle(PointerEvent("move", 4, 6))
    ctrl.handle(PointerEvent("up"))
    ctrl.handle(WheelEvent(200, 150, -1))
    ctrl.handle(TouchEvent("start", ((0, 0),)))
    ctrl.handle(TouchEvent("move", ((1, 1),)))
    ctrl.handle(TouchEvent("end"))
    assert ctrl.state is InputState.IDLE
    assert vp.scale > 40.0


def test_handle_rejects_unknown_events(wired) -> None:
    _, ctrl, _ = wired
    with pytest.raises(ValueError, match="pointer event kind"):
        ctrl.handle(PointerEvent("click"))  # type: ignore[arg-type]
    with pytest.raises(TypeError):
        ctrl.handle("down")  # type: ignore[arg-type]


def test_controller_works_without_callback() -> None:
    vp = Viewport(width=100, height=100)
    ctrl = InputController(vp)
    ctrl.pointer_down(0, 0)
    ctrl.pointer_move(5, 5)
    assert vp.offset_x == 5.0
    with pytest.raises(ValueError):
        InputController(vp, wheel_intensity=0)
