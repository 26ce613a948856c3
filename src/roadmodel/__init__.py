"""Road model construction: from raw road tags to typed, ordered lanes."""

from .lane_types import LaneType, check_exhaustive
from .roadspec import RoadSpec
from .classifier import get_lanes, osm_rank, osm_zorder
from .raw_data import LaneOverride, RawRoad, RoadEdits, load_raw_roads, load_road_edits
from .lanes import (
    LANE_THICKNESS,
    LaneSpec,
    build_all_lane_specs,
    get_lane_specs,
    lane_center_line,
    lane_specs_to_frame,
)
from .map import PARKING_SPOT_LENGTH, Lane, LaneID, Map, Road, Turn, TurnID, TurnType, add_turns, make_map
from .errors import LaneGeometryError, MalformedSyntheticLanesError, MapBuildError, NoLanesError, RoadBuildError

__all__ = [
    "LaneType",
    "check_exhaustive",
    "RoadSpec",
    "get_lanes",
    "osm_rank",
    "osm_zorder",
    "LaneOverride",
    "RawRoad",
    "RoadEdits",
    "load_raw_roads",
    "load_road_edits",
    "LANE_THICKNESS",
    "LaneSpec",
    "build_all_lane_specs",
    "get_lane_specs",
    "lane_center_line",
    "lane_specs_to_frame",
    "PARKING_SPOT_LENGTH",
    "Lane",
    "LaneID",
    "Map",
    "Road",
    "Turn",
    "TurnID",
    "TurnType",
    "add_turns",
    "make_map",
    "LaneGeometryError",
    "MalformedSyntheticLanesError",
    "MapBuildError",
    "NoLanesError",
    "RoadBuildError",
]
