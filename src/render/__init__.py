"""Lane rendering: colours, marking geometry and drawable lanes.

The command-line pipeline lives in :mod:`src.render.pipeline` and is
not imported here.
"""

from .style import ColorScheme, Fill, load_color_scheme
from .batch import Canvas, Drawable, GeomBatch, ShapeBatch
from .markings import (
    calculate_driving_lines,
    calculate_parking_lines,
    calculate_sidewalk_lines,
    calculate_turn_markings,
    dashed_lines,
)
from .lane import AlmostDrawLane, DrawLane, Renderable
from .draw_map import DrawMap, build_lanes

__all__ = [
    "ColorScheme",
    "Fill",
    "load_color_scheme",
    "Canvas",
    "Drawable",
    "GeomBatch",
    "ShapeBatch",
    "calculate_driving_lines",
    "calculate_parking_lines",
    "calculate_sidewalk_lines",
    "calculate_turn_markings",
    "dashed_lines",
    "AlmostDrawLane",
    "DrawLane",
    "Renderable",
    "DrawMap",
    "build_lanes",
]
