"""2D geometry primitives used to lay out lanes and their markings."""

from .polyline import (
    EPSILON_DIST,
    Line,
    PointLike,
    PolyLine,
    angle_to,
    as_point,
    opposite,
    perp_line,
    project_away,
    rotate_degs,
)

__all__ = [
    "EPSILON_DIST",
    "Line",
    "PointLike",
    "PolyLine",
    "angle_to",
    "as_point",
    "opposite",
    "perp_line",
    "project_away",
    "rotate_degs",
]
