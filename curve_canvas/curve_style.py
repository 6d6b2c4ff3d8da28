"""Curve-style option contracts shared by the plotting entry points.

This module centralizes the discoverable style keyword metadata and alias
resolution rules used by :meth:`GraphCanvas.plot` and
:meth:`GraphCanvas.add_curve`, plus colour validation for ``Curve``.
"""

from __future__ import annotations

from PIL import ImageColor

CURVE_STYLE_OPTIONS: dict[str, str] = {
    "color": "Line color. Accepts CSS-like names (e.g., red), hex (#RRGGBB), or rgb()/rgba() strings.",
    "line_width": "Line width in layout pixels. Larger values draw thicker lines.",
    "width": "Alias for line_width.",
    "thickness": "Alias for line_width.",
}


def resolve_style_aliases(
    *,
    line_width: int | float | str | None,
    width: int | float | str | None = None,
    thickness: int | float | str | None = None,
) -> int | float | str | None:
    """Resolve ``width``/``thickness`` aliases into a single ``line_width``.

    Raises
    ------
    ValueError
        If more than one spelling is given with different values.
    """
    given = [v for v in (line_width, width, thickness) if v is not None]
    if not given:
        return None
    if any(v != given[0] for v in given[1:]):
        raise ValueError(
            "received more than one of line_width=, width= and thickness= with different values; use only one."
        )
    return given[0]


def normalize_color(value: str) -> str:
    """Validate a colour string and return it stripped.

    Raises
    ------
    ValueError
        If Pillow's colour parser does not recognise ``value``.
    """
    if not isinstance(value, str):
        raise ValueError(f"color must be a string, got {type(value).__name__}")
    color = value.strip()
    try:
        ImageColor.getrgb(color)
    except ValueError as exc:
        raise ValueError(f"Unrecognised color: {value!r}") from exc
    return color


__all__ = ["CURVE_STYLE_OPTIONS", "resolve_style_aliases", "normalize_color"]
