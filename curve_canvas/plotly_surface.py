"""Plotly rendering of a frame, for notebook display.

``PlotlySurface`` turns one frame of primitives into a
``plotly.graph_objects.Figure`` laid out in pixel space: the y axis is
reversed so pixel rows grow downward, and axes/grid/legend of Plotly itself
are hidden because the frame already carries its own grid and labels.
"""

from __future__ import annotations

from typing import Optional, Sequence

import plotly.graph_objects as go

from .primitives import Circle, Clear, Polyline, Primitive, Surface, Text

__all__ = ["PlotlySurface"]


class PlotlySurface(Surface):
    """Build a Plotly figure for each rendered frame."""

    def __init__(self, width: float, height: float) -> None:
        self.width = float(width)
        self.height = float(height)
        self.figure: Optional[go.Figure] = None

    def render(self, primitives: Sequence[Primitive]) -> None:
        fig = go.Figure()
        background = None
        annotations = []
        for prim in primitives:
            if isinstance(prim, Clear):
                background = prim.color
            elif isinstance(prim, Polyline):
                if len(prim.points) < 2:
                    continue
                xs, ys = zip(*prim.points)
                fig.add_trace(
                    go.Scatter(
                        x=xs,
                        y=ys,
                        mode="lines",
                        line={"color": prim.color, "width": prim.width},
                        hoverinfo="skip",
                        showlegend=False,
                    )
                )
            elif isinstance(prim, Circle):
                fig.add_trace(
                    go.Scatter(
                        x=[prim.center[0]],
                        y=[prim.center[1]],
                        mode="markers",
                        marker={"color": prim.color, "size": 2 * prim.radius},
                        showlegend=False,
                    )
                )
            elif isinstance(prim, Text):
                annotations.append(
                    {
                        "x": prim.position[0],
                        "y": prim.position[1],
                        "text": prim.text,
                        "showarrow": False,
                        "xanchor": prim.align,
                        "yanchor": prim.baseline,
                        "font": {"color": prim.color, "size": prim.size},
                    }
                )
            else:
                raise TypeError(f"Unsupported primitive: {type(prim).__name__}")

        hidden_axis = {"visible": False, "showgrid": False, "zeroline": False}
        fig.update_layout(
            width=self.width,
            height=self.height,
            margin={"l": 0, "r": 0, "t": 0, "b": 0},
            plot_bgcolor=background,
            paper_bgcolor=background,
            xaxis={**hidden_axis, "range": [0, self.width]},
            yaxis={**hidden_axis, "range": [self.height, 0]},
            annotations=annotations,
        )
        self.figure = fig
