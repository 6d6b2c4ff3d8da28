from __future__ import annotations

import io
import logging
from unittest.mock import patch

import plotly.graph_objects as go
import pytest
from PIL import Image

from curve_canvas import (
    CanvasConfig,
    CurveIndexError,
    ExpressionCompileError,
    GraphCanvas,
    InvalidIntervalError,
    PointerEvent,
    WheelEvent,
)
from curve_canvas.primitives import Circle, Polyline, RecordingSurface, Text


def _texts(frame) -> list[str]:
    return [p.text for p in frame if isinstance(p, Text)]


def test_add_and_query_curves(canvas: GraphCanvas) -> None:
    assert canvas.add_curve("x^2 - 4") is True
    assert len(canvas) == 1
    assert canvas.evaluate_curve(0, 3) == pytest.approx(5.0)
    assert canvas.evaluate_curve(0, -1) == pytest.approx(-3.0)
    roots = canvas.find_roots(0, (-10, 10))
    assert roots == [pytest.approx(-2, abs=1e-3), pytest.approx(2, abs=1e-3)]
    assert canvas.integrate(0, 0, 3) == pytest.approx(-3.0, abs=1e-9)


def test_failed_add_curve_logs_and_adds_nothing(canvas: GraphCanvas, caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="curve_canvas.graph_canvas"):
        assert canvas.add_curve("x +* 2") is False
    assert len(canvas) == 0
    assert any("add_curve" in rec.getMessage() for rec in caplog.records)
    assert canvas.add_curve("x", color="not-a-colour") is False
    assert len(canvas) == 0


def test_plot_raises_and_returns_curve(canvas: GraphCanvas) -> None:
    with pytest.raises(ExpressionCompileError):
        canvas.plot("sin(")
    curve = canvas.plot("sin(x)", color="red", thickness=3)
    assert curve is canvas.curve(0)
    assert (curve.color, curve.line_width) == ("red", 3.0)
    with pytest.raises(ValueError, match="line_width"):
        canvas.plot("x", line_width=2, width=4)


def test_defaults_come_from_config() -> None:
    cfg = CanvasConfig(default_color="#123456", default_line_width=5)
    canvas = GraphCanvas(200, 100, config=cfg)
    canvas.add_curve("x")
    curve = canvas.curve(-1)
    assert (curve.color, curve.line_width) == ("#123456", 5.0)
    assert canvas.viewport.scale == cfg.default_scale


def test_evaluate_curve_undefined_and_missing(canvas: GraphCanvas) -> None:
    canvas.add_curve("1/x")
    assert canvas.evaluate_curve(0, 0) is None
    assert canvas.evaluate_curve(0, 2) == pytest.approx(0.5)
    with pytest.raises(CurveIndexError):
        canvas.evaluate_curve(1, 0)
    with pytest.raises(CurveIndexError):
        canvas.find_roots(5)
    with pytest.raises(CurveIndexError):
        canvas.integrate(-2, 0, 1)


def test_remove_and_clear(canvas: GraphCanvas) -> None:
    for text in ("x", "2x", "3x"):
        canvas.add_curve(text)
    assert canvas.remove_curve(1) is True
    assert [c.expression for c in canvas.curves] == ["x", "3x"]
    assert canvas.remove_curve(2) is False
    assert canvas.remove_curve(-1) is False
    assert len(canvas) == 2
    canvas.clear_curves()
    assert canvas.curves == ()


def test_last_curve_edits(canvas: GraphCanvas) -> None:
    assert canvas.set_last_curve_color("blue") is False
    assert canvas.set_last_curve_line_width(4) is False
    canvas.add_curve("x")
    canvas.add_curve("x^2")
    assert canvas.set_last_curve_color("#00ff00") is True
    assert canvas.set_last_curve_line_width("3") is True
    assert canvas.curve(1).color == "#00ff00"
    assert canvas.curve(1).line_width == 3.0
    assert canvas.curve(0).color == CanvasConfig().default_color
    with pytest.raises(ValueError):
        canvas.set_last_curve_line_width(0)


def test_invalid_intervals(canvas: GraphCanvas) -> None:
    canvas.add_curve("x")
    with pytest.raises(InvalidIntervalError):
        canvas.find_roots(0, (1, -1))
    with pytest.raises(InvalidIntervalError):
        canvas.integrate(0, 2, 2)


def test_integrate_methods_and_details(canvas: GraphCanvas) -> None:
    canvas.add_curve("x^2")
    for method in ("simpson", "trapezoidal", "midpoint", "quad"):
        assert canvas.integrate(0, 0, 3, method) == pytest.approx(9.0, abs=1e-3)
    details = canvas.integrate_detailed(0, 0, 3, "simpson", 11)
    assert details.n == 12
    assert details.failed_nodes == 0


def test_render_draws_curves_in_order(canvas: GraphCanvas) -> None:
    canvas.add_curve("x", "#ff0000")
    canvas.add_curve("-x", "#0000ff")
    frame = canvas.render()
    colors = [p.color for p in frame if isinstance(p, Polyline) and p.color in ("#ff0000", "#0000ff")]
    assert colors == ["#ff0000", "#0000ff"]
    assert _texts(frame)[-2:] == ["Graphs: 2", "Scale: 1 unit = 40px"]
    assert canvas.surface.last_frame == frame


def test_repeated_render_is_idempotent(canvas: GraphCanvas) -> None:
    canvas.add_curve("sin(x)")
    canvas.add_curve("1/x")
    assert canvas.render() == canvas.render()


def test_render_refreshes_sample_cache(canvas: GraphCanvas) -> None:
    canvas.add_curve("x")
    assert canvas.curve_points(0) == ()
    canvas.render()
    points = canvas.curve_points(0)
    assert len(points) == 300  # the line leaves the 300px high window
    assert len(canvas.curve(0).sample_points) == len(points)
    canvas.pan(50, 0)
    canvas.render()
    assert canvas.curve_points(0) != points


def test_requests_coalesce_into_one_tick(canvas: GraphCanvas) -> None:
    painted = canvas.render_loop.frames_painted
    canvas.add_curve("x")
    canvas.zoom_in()
    canvas.pan(3, 4)
    assert canvas.render_loop.is_pending
    assert canvas.tick() is True
    assert canvas.tick() is False
    assert canvas.render_loop.frames_painted == painted + 1


def test_view_operations(canvas: GraphCanvas) -> None:
    vp = canvas.viewport
    canvas.zoom_in()
    assert vp.scale == pytest.approx(48.0)
    canvas.zoom_out()
    assert vp.scale == pytest.approx(38.4)
    before = vp.to_math(10, 20)
    canvas.zoom_at(10, 20, 2.5)
    assert vp.to_math(10, 20) == pytest.approx(before, abs=1e-9)
    canvas.pan(5, -5)
    canvas.reset_view()
    assert (vp.scale, vp.offset_x, vp.offset_y) == (40.0, 0.0, 0.0)
    canvas.resize(640, 480)
    assert (vp.width, vp.height) == (640.0, 480.0)


def test_events_drive_the_viewport(canvas: GraphCanvas) -> None:
    canvas.handle_event(PointerEvent("down", 10, 10))
    canvas.handle_event(PointerEvent("move", 30, 0))
    canvas.handle_event(PointerEvent("up"))
    canvas.handle_event(WheelEvent(200, 150, -1))
    assert canvas.viewport.offset_x != 0
    assert canvas.render_loop.is_pending


def test_markers_and_marked_roots(canvas: GraphCanvas) -> None:
    canvas.add_curve("x - 1", "#ff0000")
    roots = canvas.find_roots(0, (-5, 5), mark=True)
    assert len(canvas.markers) == len(roots) == 1
    assert canvas.markers[0].color == "#ff0000"
    canvas.add_marker(0, 0)
    frame = canvas.render()
    assert sum(isinstance(p, Circle) for p in frame) == 2
    canvas.clear_markers()
    assert canvas.markers == ()
    assert not any(isinstance(p, Circle) for p in canvas.render())


def test_export_png_omits_overlay_and_leaves_state(canvas: GraphCanvas, tmp_path) -> None:
    canvas.add_curve("x^2")
    frame = canvas.render()
    cached = canvas.curve_points(0)
    painted = canvas.render_loop.frames_painted

    target = tmp_path / "graph.png"
    data = canvas.export_png(target, pixel_ratio=2)
    assert data.startswith(b"\x89PNG")
    assert target.read_bytes() == data
    assert Image.open(io.BytesIO(data)).size == (800, 600)

    assert canvas.curve_points(0) == cached
    assert canvas.render_loop.frames_painted == painted
    assert canvas.surface.last_frame == frame
    assert canvas._repr_png_().startswith(b"\x89PNG")


def test_export_skips_overlay_text() -> None:
    surface = RecordingSurface()
    canvas = GraphCanvas(100, 100, surface=surface)
    canvas.add_curve("x")
    scene_calls: list[bool] = []
    original = canvas._paint_offscreen

    def spy(target, *, overlay):
        scene_calls.append(overlay)
        return original(target, overlay=overlay)

    canvas._paint_offscreen = spy  # type: ignore[method-assign]
    canvas.export_png()
    assert scene_calls == [False]


def test_to_plotly(canvas: GraphCanvas) -> None:
    canvas.add_curve("x")
    fig = canvas.to_plotly()
    assert isinstance(fig, go.Figure)
    assert len(fig.data) >= 1
    assert any(a.text == "Graphs: 1" for a in fig.layout.annotations)


def test_to_plotly_raises_when_no_figure_is_built(canvas: GraphCanvas) -> None:
    with patch("curve_canvas.graph_canvas.PlotlySurface.render", return_value=None):
        with pytest.raises(RuntimeError, match="no figure"):
            canvas.to_plotly()


def test_repr(canvas: GraphCanvas) -> None:
    canvas.add_curve("x")
    assert repr(canvas) == "GraphCanvas(400x300, curves=1, scale=40)"
