from __future__ import annotations

import io

import plotly.graph_objects as go
import pytest
from PIL import Image

from curve_canvas.plotly_surface import PlotlySurface
from curve_canvas.primitives import Circle, Clear, Polyline, RecordingSurface, Text
from curve_canvas.raster import RasterSurface

FRAME = (
    Clear("#1e1e1e"),
    Polyline(((0.0, 10.0), (99.0, 10.0)), "#ff0000", 4.0),
    Polyline(((5.0, 5.0),), "#ff0000", 2.0),
    Circle((50.0, 40.0), 4.0, "#00ff00"),
    Text((95.0, 48.0), "Graphs: 1", "#e0e0e0", 12, "right", "top"),
)


def test_recording_surface_keeps_latest_frames() -> None:
    surface = RecordingSurface(keep=2)
    assert surface.last_frame == ()
    for i in range(3):
        surface.render((Clear(f"#00000{i}"),))
    assert len(surface.frames) == 2
    assert surface.last_frame == (Clear("#000002"),)
    with pytest.raises(ValueError):
        RecordingSurface(keep=0)


def test_raster_surface_draws_primitives() -> None:
    surface = RasterSurface(100, 60)
    surface.render(FRAME)
    img = surface.image
    assert img.size == (100, 60)
    assert img.getpixel((2, 50))[:3] == (0x1E, 0x1E, 0x1E)
    assert img.getpixel((50, 10))[:3] == (255, 0, 0)
    assert img.getpixel((50, 40))[:3] == (0, 255, 0)


def test_raster_surface_scales_by_pixel_ratio() -> None:
    surface = RasterSurface(100, 60, pixel_ratio=2)
    surface.render(FRAME)
    assert surface.image.size == (200, 120)
    assert surface.image.getpixel((100, 80))[:3] == (0, 255, 0)


def test_png_encoding() -> None:
    surface = RasterSurface(40, 30)
    surface.render((Clear("#123456"),))
    data = surface.to_png()
    assert data.startswith(b"\x89PNG\r\n\x1a\n")
    decoded = Image.open(io.BytesIO(data))
    assert decoded.size == (40, 30)
    assert decoded.convert("RGB").getpixel((0, 0)) == (0x12, 0x34, 0x56)


def test_raster_rejects_unknown_primitives_and_sizes() -> None:
    with pytest.raises(ValueError):
        RasterSurface(0, 10)
    with pytest.raises(TypeError, match="Unsupported primitive"):
        RasterSurface(10, 10).render(["not a primitive"])


def test_plotly_surface_builds_figure() -> None:
    surface = PlotlySurface(100, 60)
    surface.render(FRAME)
    fig = surface.figure
    assert isinstance(fig, go.Figure)
    # The single-point polyline is not stroked.
    modes = [trace.mode for trace in fig.data]
    assert modes == ["lines", "markers"]
    assert tuple(fig.data[0].x) == (0.0, 99.0)
    assert fig.layout.plot_bgcolor == "#1e1e1e"
    assert tuple(fig.layout.yaxis.range) == (60, 0)
    assert fig.layout.annotations[0].text == "Graphs: 1"
    assert fig.layout.annotations[0].xanchor == "right"


def test_plotly_text_anchors_follow_alignment() -> None:
    surface = PlotlySurface(100, 60)
    surface.render(
        (
            Text((50.0, 30.0), "mid", "#ffffff", 12, "center", "middle"),
            Text((0.0, 60.0), "low", "#ffffff", 12, "left", "bottom"),
        )
    )
    first, second = surface.figure.layout.annotations
    assert (first.xanchor, first.yanchor) == ("center", "middle")
    assert (second.xanchor, second.yanchor) == ("left", "bottom")
