"""Read-only map model: roads, lanes and turns.

The render package only ever reads from a :class:`Map`.  It is built
once by :func:`make_map` from raw roads and edits, and nothing mutates
it afterwards, which is what allows lane geometry to be built from
several threads at once.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from ..geom import PolyLine, angle_to
from ..utils.logging import get_logger
from .classifier import osm_rank, osm_zorder
from .errors import LaneGeometryError, MapBuildError, RoadBuildError
from .lane_types import LaneType
from .lanes import LaneSpec, build_all_lane_specs, lane_center_line
from .raw_data import RawRoad, RoadEdits

logger = get_logger(__name__)

PARKING_SPOT_LENGTH = 8.0
"""Length of one parallel parking stall in metres."""

LaneID = int


class TurnType(Enum):
    STRAIGHT = "straight"
    LEFT = "left"
    RIGHT = "right"
    LANE_CHANGE_LEFT = "lane_change_left"
    LANE_CHANGE_RIGHT = "lane_change_right"

    def is_lane_change(self) -> bool:
        return self in (TurnType.LANE_CHANGE_LEFT, TurnType.LANE_CHANGE_RIGHT)


@dataclass(frozen=True)
class TurnID:
    src: LaneID
    dst: LaneID

    def __str__(self) -> str:
        return f"turn {self.src}->{self.dst}"


@dataclass(frozen=True, eq=False)
class Turn:
    id: TurnID
    turn_type: TurnType
    geom: PolyLine

    def angle(self) -> float:
        """Heading from the start of the turn to its end."""
        return angle_to(self.geom.first_pt(), self.geom.last_pt())


@dataclass(frozen=True, eq=False)
class Lane:
    id: LaneID
    parent: Any
    lane_type: LaneType
    lane_center_pts: PolyLine

    @property
    def length(self) -> float:
        return self.lane_center_pts.length

    def dist_along(self, dist: float) -> Tuple[np.ndarray, float]:
        return self.lane_center_pts.dist_along(dist)

    def number_parking_spots(self) -> int:
        """Stalls that fit, keeping one stall length clear at each end."""
        spots = math.floor(self.length / PARKING_SPOT_LENGTH) - 2
        return spots if spots >= 1 else 0


@dataclass(frozen=True, eq=False)
class Road:
    id: Any
    rank: int
    zorder: int
    center_pts: PolyLine
    children_forwards: Tuple[Tuple[LaneID, LaneType], ...]
    """Forward lanes ordered from the centre outwards."""
    children_backwards: Tuple[Tuple[LaneID, LaneType], ...]

    def all_lanes(self) -> List[LaneID]:
        return [lid for lid, _ in self.children_forwards + self.children_backwards]

    def dir_and_offset(self, lane: LaneID) -> Tuple[bool, int]:
        """(is forward, offset within that side) of one of this road's lanes."""
        for idx, (lid, _) in enumerate(self.children_forwards):
            if lid == lane:
                return True, idx
        for idx, (lid, _) in enumerate(self.children_backwards):
            if lid == lane:
                return False, idx
        raise KeyError(f"lane {lane} is not a child of road {self.id}")

    def find_closest_lane(self, lane: LaneID, types: Sequence[LaneType]) -> Optional[LaneID]:
        """Nearest other lane of one of ``types`` on the same side, if any."""
        fwd, offset = self.dir_and_offset(lane)
        siblings = self.children_forwards if fwd else self.children_backwards
        candidates = [
            (abs(idx - offset), lid)
            for idx, (lid, lt) in enumerate(siblings)
            if lid != lane and lt in types
        ]
        if not candidates:
            return None
        return min(candidates)[1]


@dataclass
class Map:
    """Query surface over the built roads, lanes and turns."""

    roads: Dict[Any, Road] = field(default_factory=dict)
    lanes: Dict[LaneID, Lane] = field(default_factory=dict)
    turns: Dict[TurnID, Turn] = field(default_factory=dict)
    failed_roads: Dict[Any, RoadBuildError] = field(default_factory=dict)
    turns_from: Dict[LaneID, List[Turn]] = field(default_factory=dict, repr=False)
    """Turns indexed by source lane, each list ordered by destination."""

    def get_r(self, road_id: Any) -> Road:
        return self.roads[road_id]

    def get_l(self, lane_id: LaneID) -> Lane:
        return self.lanes[lane_id]

    def get_t(self, turn_id: TurnID) -> Turn:
        return self.turns[turn_id]

    def all_roads(self) -> List[Road]:
        return list(self.roads.values())

    def all_lanes(self) -> List[Lane]:
        return [self.lanes[lid] for lid in sorted(self.lanes)]

    def lane_at(self, road_id: Any, forwards: bool, offset: int) -> LaneID:
        """Id of the lane at ``offset`` on one side of a road."""
        road = self.get_r(road_id)
        side = road.children_forwards if forwards else road.children_backwards
        if not 0 <= offset < len(side):
            raise KeyError(f"road {road_id} has no {'forward' if forwards else 'backward'} lane {offset}")
        return side[offset][0]

    def find_closest_lane(self, lane: LaneID, types: Sequence[LaneType]) -> Optional[LaneID]:
        return self.get_r(self.get_l(lane).parent).find_closest_lane(lane, types)

    def get_turns_from_lane(self, lane: LaneID) -> List[Turn]:
        return list(self.turns_from.get(lane, ()))


def _turn_geometry(src: Lane, dst: Lane) -> PolyLine:
    start = src.lane_center_pts.last_pt()
    end = dst.lane_center_pts.first_pt()
    if np.linalg.norm(end - start) < 1e-6:
        end, _ = dst.dist_along(min(1.0, dst.length))
    return PolyLine([start, end])


def make_map(
    raw_roads: Iterable[RawRoad],
    edits: Optional[RoadEdits] = None,
    turns: Iterable[Tuple[LaneID, LaneID, TurnType]] = (),
    strict: bool = True,
    specs_by_road: Optional[Mapping[Any, List[LaneSpec]]] = None,
) -> Map:
    """Build the read-only map from raw roads.

    Parameters
    ----------
    raw_roads : iterable of RawRoad
        Roads with tags and centre lines.
    edits : RoadEdits, optional
        Manual lane overrides.
    turns : iterable of (int, int, TurnType)
        Movements between lanes, by source and destination lane id.
    strict : bool
        Abort on the first road whose lanes cannot be assembled or placed
        (True) or leave it out and record it in ``Map.failed_roads`` (False).
    specs_by_road : mapping, optional
        Lane specs already assembled by :func:`build_all_lane_specs`.
        Roads missing from it are left out; ``edits`` is then unused.

    Raises
    ------
    MapBuildError
        In strict mode, when a road fails lane assembly or placement.
    ValueError
        If a road lacks a centre line or a turn references an unknown lane.
    """
    raw_roads = list(raw_roads)
    if specs_by_road is None:
        specs_by_road, failures = build_all_lane_specs(raw_roads, edits, strict=strict)
    else:
        failures = {}

    result = Map(failed_roads=dict(failures))
    next_lane_id = 0
    for raw in raw_roads:
        specs = specs_by_road.get(raw.id)
        if specs is None:
            continue
        if raw.center_points is None:
            raise ValueError(f"road {raw.id} has no centre line")
        try:
            center = PolyLine(raw.center_points)
            lane_centers = [lane_center_line(center, spec) for spec in specs]
        except ValueError as err:
            geometry_err = LaneGeometryError(raw.id, str(err))
            if strict:
                raise MapBuildError(f"map build stopped at road {raw.id}: {geometry_err}") from geometry_err
            logger.warning("Skipping road %s: %s", raw.id, geometry_err)
            result.failed_roads[raw.id] = geometry_err
            continue

        forwards: List[Tuple[LaneID, LaneType]] = []
        backwards: List[Tuple[LaneID, LaneType]] = []
        for spec, lane_center_pts in zip(specs, lane_centers):
            lane = Lane(
                id=next_lane_id,
                parent=raw.id,
                lane_type=spec.lane_type,
                lane_center_pts=lane_center_pts,
            )
            result.lanes[lane.id] = lane
            (backwards if spec.reverse_pts else forwards).append((lane.id, spec.lane_type))
            next_lane_id += 1
        result.roads[raw.id] = Road(
            id=raw.id,
            rank=osm_rank(raw.osm_tags),
            zorder=osm_zorder(raw.osm_tags),
            center_pts=center,
            children_forwards=tuple(forwards),
            children_backwards=tuple(backwards),
        )

    add_turns(result, turns)

    logger.info("Built map with %d roads, %d lanes, %d turns (%d roads skipped)",
                len(result.roads), len(result.lanes), len(result.turns), len(result.failed_roads))
    return result


def add_turns(map_: Map, turns: Iterable[Tuple[LaneID, LaneID, TurnType]]) -> None:
    """Attach turns to a map that is still being built."""
    for src, dst, turn_type in turns:
        if src not in map_.lanes or dst not in map_.lanes:
            raise ValueError(f"turn {src}->{dst} references an unknown lane")
        tid = TurnID(src, dst)
        turn = Turn(tid, turn_type, _turn_geometry(map_.lanes[src], map_.lanes[dst]))
        map_.turns[tid] = turn
        from_src = [t for t in map_.turns_from.get(src, []) if t.id != tid]
        from_src.append(turn)
        from_src.sort(key=lambda t: t.id.dst)
        map_.turns_from[src] = from_src
