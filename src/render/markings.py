"""Road marking geometry for individual lanes.

Each ``calculate_*`` function takes a lane (plus whatever map context it
needs) and returns the marking polygons for one lane type.  None of
them touch colours or the rendering context; :mod:`src.render.lane`
decides how the polygons are painted.

"Inner" always means towards the road centre, which for a lane centre
line is its left side.
"""

from typing import List

from shapely.geometry import Polygon

from ..geom import EPSILON_DIST, Line, PolyLine, perp_line, project_away, rotate_degs, opposite
from ..roadmodel import LANE_THICKNESS, PARKING_SPOT_LENGTH, Lane, LaneType, Map, Road

MARKING_THICKNESS = 0.25
"""Width of painted lines in metres."""

DASH_LENGTH = 1.0
DASH_SEPARATION = 1.5

PARKING_LEG_LENGTH = 1.0
PARKING_T_INSET = 0.3 * LANE_THICKNESS
"""Distance from the lane centre to the stall markings, towards the road centre."""

TURN_MARKING_THICKNESS = 0.2
TURN_MARKING_START = 7.0
"""Turn arrows start this far before the lane's end."""
TURN_MARKING_END = 5.0


def dashed_lines(pl: PolyLine, width: float, dash_len: float, dash_separation: float) -> List[Polygon]:
    """Dashed stroke along ``pl``.

    Lines too short to hold a gap at both ends become one solid stroke.
    Otherwise the dashes keep ``dash_separation`` clear of both ends.
    """
    if pl.length < dash_separation * 2.0 + EPSILON_DIST:
        return [pl.make_polygons(width)]
    return pl.exact_slice(dash_separation, pl.length - dash_separation).dashed_polygons(
        width, dash_len, dash_separation
    )


def calculate_sidewalk_lines(lane: Lane) -> List[Polygon]:
    """Paving joints across a sidewalk, one per lane width."""
    tile_every = LANE_THICKNESS
    length = lane.length

    result = []
    # Start away from the intersections
    dist_along = tile_every
    while dist_along < length - tile_every:
        pt, angle = lane.dist_along(dist_along)
        pt2 = project_away(pt, 1.0, angle)
        result.append(perp_line(Line.new(pt, pt2), LANE_THICKNESS).make_polygons(MARKING_THICKNESS))
        dist_along += tile_every
    return result


def calculate_parking_lines(lane: Lane) -> List[Polygon]:
    """Stall separators plus the line between parking and traffic.

    Every stall boundary gets a "T": a short leg pointing away from the
    road centre and two legs along the lane.  With no stalls only the
    inner boundary line is drawn.
    """
    result = []
    num_spots = lane.number_parking_spots()
    if num_spots > 0:
        for idx in range(num_spots + 1):
            pt, lane_angle = lane.dist_along(PARKING_SPOT_LENGTH * (1 + idx))
            perp_angle = rotate_degs(lane_angle, 90.0)
            # Stop short of the edge so the line's own width stays inside the lane.
            t_pt = project_away(pt, PARKING_T_INSET, perp_angle)
            for leg_angle in (opposite(perp_angle), lane_angle, opposite(lane_angle)):
                leg_end = project_away(t_pt, PARKING_LEG_LENGTH, leg_angle)
                result.append(Line.new(t_pt, leg_end).make_polygons(MARKING_THICKNESS))

    result.append(lane.lane_center_pts.shift_left(LANE_THICKNESS / 2.0).make_polygons(MARKING_THICKNESS))
    return result


def calculate_driving_lines(lane: Lane, parent: Road) -> List[Polygon]:
    """Dashed separator on the inner edge of a driving or bus lane."""
    fwd, idx = parent.dir_and_offset(lane.id)
    # The innermost lane borders the centre line, not another lane.
    if idx == 0:
        return []
    if fwd and parent.children_forwards[idx - 1][1] == LaneType.SHARED_LEFT_TURN:
        return []
    lane_edge_pts = lane.lane_center_pts.shift_left(LANE_THICKNESS / 2.0)
    return dashed_lines(lane_edge_pts, MARKING_THICKNESS, DASH_LENGTH, DASH_SEPARATION)


def calculate_turn_markings(map_: Map, lane: Lane) -> List[Polygon]:
    """Turn arrows painted near the end of a multi-lane approach.

    Returns nothing when the lane is the only driving lane on its side,
    when it is too short to hold the arrows, or when every turn from it
    is a lane change.
    """
    if map_.find_closest_lane(lane.id, [LaneType.DRIVING]) is None:
        return []
    if lane.length < TURN_MARKING_START:
        return []

    turns = [t for t in map_.get_turns_from_lane(lane.id) if not t.turn_type.is_lane_change()]
    if not turns:
        return []

    common_base = lane.lane_center_pts.exact_slice(
        lane.length - TURN_MARKING_START, lane.length - TURN_MARKING_END
    )
    results = [common_base.make_polygons(TURN_MARKING_THICKNESS)]
    base_end = common_base.last_pt()
    for turn in turns:
        arrow = PolyLine([base_end, project_away(base_end, LANE_THICKNESS / 2.0, turn.angle())])
        results.append(arrow.make_arrow(TURN_MARKING_THICKNESS))
    return results
