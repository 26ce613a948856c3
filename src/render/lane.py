"""Two-phase construction of drawable lanes.

:meth:`DrawLane.new` computes everything about a lane's appearance
(fill polygon, markings, colours, z-order) into an :class:`AlmostDrawLane`.
That step reads only immutable inputs, so many lanes can be built at once.
:meth:`AlmostDrawLane.finish` then uploads the shapes to the single
:class:`~src.render.batch.Canvas` and yields the :class:`DrawLane` used for
drawing and hit-testing.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Optional

from shapely.geometry import Point
from shapely.geometry.base import BaseGeometry

from ..geom import PointLike, as_point
from ..roadmodel import LANE_THICKNESS, Lane, LaneID, LaneType, Map, Road, check_exhaustive
from .batch import Canvas, Drawable, GeomBatch, ShapeBatch
from .markings import (
    MARKING_THICKNESS,
    calculate_driving_lines,
    calculate_parking_lines,
    calculate_sidewalk_lines,
    calculate_turn_markings,
)
from .style import ColorScheme, Fill, osm_rank_to_road_center_line_color, osm_rank_to_zoomed_color

OUTLINE_THICKNESS = 0.5
"""Width of the selection outline drawn around an object."""

DEFAULT_ZORDER = -5
"""Z-order of renderables without one of their own; below sunken roads at -1."""


class Renderable:
    """Something on the map that can be drawn, outlined and clicked."""

    def get_id(self):
        raise NotImplementedError

    def draw(self, canvas: Canvas, color: Optional[Fill] = None) -> None:
        raise NotImplementedError

    def get_outline(self, map_: Map) -> BaseGeometry:
        raise NotImplementedError

    def get_zorder(self) -> int:
        # Higher z-ordered objects are drawn later.
        return DEFAULT_ZORDER

    def contains_pt(self, pt: PointLike, map_: Map) -> bool:
        return self.get_outline(map_).contains(Point(as_point(pt)))


def _rank_color(cs: ColorScheme, rank: int) -> Fill:
    return osm_rank_to_zoomed_color(cs, rank)


LANE_FILL: Dict[LaneType, Callable[[ColorScheme, int], Fill]] = {
    LaneType.DRIVING: _rank_color,
    LaneType.PARKING: _rank_color,
    LaneType.SHARED_LEFT_TURN: _rank_color,
    LaneType.BUS: lambda cs, rank: cs.get("bus lane"),
    LaneType.SIDEWALK: lambda cs, rank: cs.get("sidewalk"),
    LaneType.BIKING: lambda cs, rank: cs.get("bike lane"),
    LaneType.CONSTRUCTION: lambda cs, rank: cs.get("construction background"),
}


def lane_fill(cs: ColorScheme, lane_type: LaneType, rank: int) -> Fill:
    return LANE_FILL[lane_type](cs, rank)


@dataclass(frozen=True)
class MarkingContext:
    lane: Lane
    road: Road
    map: Map
    cs: ColorScheme
    polygon: BaseGeometry


def _sidewalk_markings(draw: GeomBatch, ctx: MarkingContext) -> None:
    draw.extend(ctx.cs.get("sidewalk lines"), calculate_sidewalk_lines(ctx.lane))


def _parking_markings(draw: GeomBatch, ctx: MarkingContext) -> None:
    draw.extend(ctx.cs.get("general road marking"), calculate_parking_lines(ctx.lane))


def _driving_markings(draw: GeomBatch, ctx: MarkingContext) -> None:
    color = ctx.cs.get("general road marking")
    draw.extend(color, calculate_driving_lines(ctx.lane, ctx.road))
    draw.extend(color, calculate_turn_markings(ctx.map, ctx.lane))


def _shared_left_turn_markings(draw: GeomBatch, ctx: MarkingContext) -> None:
    color = osm_rank_to_road_center_line_color(ctx.cs, ctx.road.rank)
    center = ctx.lane.lane_center_pts
    draw.push(color, center.shift_right(LANE_THICKNESS / 2.0).make_polygons(MARKING_THICKNESS))
    draw.push(color, center.shift_left(LANE_THICKNESS / 2.0).make_polygons(MARKING_THICKNESS))


def _construction_markings(draw: GeomBatch, ctx: MarkingContext) -> None:
    draw.push(ctx.cs.get("construction hatching"), ctx.polygon)


def _no_markings(draw: GeomBatch, ctx: MarkingContext) -> None:
    pass


LANE_MARKINGS: Dict[LaneType, Callable[[GeomBatch, MarkingContext], None]] = {
    LaneType.SIDEWALK: _sidewalk_markings,
    LaneType.PARKING: _parking_markings,
    LaneType.DRIVING: _driving_markings,
    LaneType.BUS: _driving_markings,
    LaneType.SHARED_LEFT_TURN: _shared_left_turn_markings,
    LaneType.CONSTRUCTION: _construction_markings,
    LaneType.BIKING: _no_markings,
}

check_exhaustive(LANE_FILL, "lane fill colours")
check_exhaustive(LANE_MARKINGS, "lane markings")


@dataclass(frozen=True, eq=False)
class AlmostDrawLane:
    """A lane's finished geometry, not yet uploaded."""

    id: LaneID
    polygon: BaseGeometry
    zorder: int
    draw_default: ShapeBatch

    def finish(self, canvas: Canvas) -> "DrawLane":
        return DrawLane(
            id=self.id,
            polygon=self.polygon,
            zorder=self.zorder,
            draw_default=canvas.upload(self.draw_default),
        )


@dataclass(frozen=True, eq=False)
class DrawLane(Renderable):
    id: LaneID
    polygon: BaseGeometry
    zorder: int
    draw_default: Drawable

    @staticmethod
    def new(lane: Lane, map_: Map, draw_lane_markings: bool, cs: ColorScheme) -> AlmostDrawLane:
        """Build the fill and markings of ``lane``.

        Parameters
        ----------
        lane : Lane
            The lane to draw.
        map_ : Map
            Read-only map, for the parent road and turns.
        draw_lane_markings : bool
            If False only the fill polygon is produced.
        cs : ColorScheme
            Colours for fills and markings.
        """
        road = map_.get_r(lane.parent)
        polygon = lane.lane_center_pts.make_polygons(LANE_THICKNESS)

        draw = GeomBatch()
        draw.push(lane_fill(cs, lane.lane_type, road.rank), polygon)
        if draw_lane_markings:
            ctx = MarkingContext(lane=lane, road=road, map=map_, cs=cs, polygon=polygon)
            LANE_MARKINGS[lane.lane_type](draw, ctx)

        return AlmostDrawLane(id=lane.id, polygon=polygon, zorder=road.zorder, draw_default=draw.freeze())

    def get_id(self) -> LaneID:
        return self.id

    def draw(self, canvas: Canvas, color: Optional[Fill] = None) -> None:
        if color is not None:
            canvas.draw_polygon(color, self.polygon)
        else:
            canvas.redraw(self.draw_default)

    def get_outline(self, map_: Map) -> BaseGeometry:
        outline = map_.get_l(self.id).lane_center_pts.to_thick_boundary(LANE_THICKNESS, OUTLINE_THICKNESS)
        return outline if outline is not None else self.polygon

    def contains_pt(self, pt: PointLike, map_: Map) -> bool:
        return self.polygon.contains(Point(as_point(pt)))

    def get_zorder(self) -> int:
        return self.zorder
