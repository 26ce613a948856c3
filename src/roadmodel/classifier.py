"""Derive per-direction lane types from OSM-style road tags.

The classifier is a pure function of the tag mapping.  It never fails on
missing or unexpected values; those fall back to defaults.  The one
exception is a malformed ``synthetic_lanes`` tag, which means a
hand-authored road is broken and must not be guessed at.

Heuristics:

- ``lanes`` counts driving lanes for the whole road (default 2), split
  evenly between directions unless the road is oneway.
- Any ``bus:lanes`` tag converts one driving lane per side into a bus
  lane (the tag value itself is not interpreted).
- Everything except motorways gets parking and a sidewalk.
"""

from typing import Any, List, Mapping, Optional, Tuple

from ..utils.logging import get_logger
from .errors import MalformedSyntheticLanesError
from .lane_types import LaneType
from .roadspec import RoadSpec

logger = get_logger(__name__)

DEFAULT_DRIVING_LANES = 2
ONEWAY_VALUES = ("yes", "reversible")
MOTORWAY_HIGHWAYS = ("motorway", "motorway_link")

# Higher is a more important road.
HIGHWAY_RANKS = {
    "motorway": 20,
    "motorway_link": 19,
    "trunk": 17,
    "trunk_link": 16,
    "primary": 15,
    "primary_link": 14,
    "secondary": 13,
    "secondary_link": 12,
    "tertiary": 10,
    "tertiary_link": 9,
    "residential": 5,
    "footway": 1,
    "unclassified": 0,
    "road": 0,
    "crossing": 0,
}

LaneTypes = List[LaneType]


def _parse_lane_count(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    text = str(value).strip()
    if not text.isdigit():
        return None
    return int(text)


def get_lanes(tags: Mapping[str, str], road_id: Any = None) -> Tuple[LaneTypes, LaneTypes]:
    """Classify a road into (forward, backward) lane types.

    Parameters
    ----------
    tags : mapping
        Raw string tags of the road.
    road_id : optional
        Identity used in the error raised for a bad ``synthetic_lanes``.

    Returns
    -------
    (list of LaneType, list of LaneType)
        Lanes in the road's original direction, then the reversed one.
        Each side is ordered from the road's centre outwards.

    Raises
    ------
    MalformedSyntheticLanesError
        If ``synthetic_lanes`` is present but does not decode.
    """
    # Synthetic maps spell their lanes out explicitly.
    synthetic = tags.get("synthetic_lanes")
    if synthetic is not None:
        spec = RoadSpec.parse(synthetic)
        if spec is None:
            raise MalformedSyntheticLanesError(road_id, synthetic)
        return list(spec.fwd), list(spec.back)

    if tags.get("junction") == "roundabout":
        return [LaneType.DRIVING, LaneType.SIDEWALK], []
    if tags.get("highway") == "footway":
        return [LaneType.SIDEWALK], []

    oneway = tags.get("oneway") in ONEWAY_VALUES
    num_driving_lanes = _parse_lane_count(tags.get("lanes"))
    if num_driving_lanes is None:
        if "lanes" in tags:
            logger.debug("Road %s: unparseable lanes=%r, assuming %d",
                         road_id, tags["lanes"], DEFAULT_DRIVING_LANES)
        num_driving_lanes = DEFAULT_DRIVING_LANES

    per_side = num_driving_lanes if oneway else max(1, num_driving_lanes // 2)
    driving_lanes_per_side = [LaneType.DRIVING] * per_side

    has_bus_lane = "bus:lanes" in tags
    if has_bus_lane and len(driving_lanes_per_side) > 1:
        driving_lanes_per_side.pop()

    has_bike_lane = tags.get("cycleway") == "lane"
    has_sidewalk = tags.get("highway") not in MOTORWAY_HIGHWAYS
    has_parking = has_sidewalk

    full_side = driving_lanes_per_side
    if has_bus_lane:
        full_side.append(LaneType.BUS)
    if has_bike_lane:
        full_side.append(LaneType.BIKING)
    if has_parking:
        full_side.append(LaneType.PARKING)
    if has_sidewalk:
        full_side.append(LaneType.SIDEWALK)

    if oneway:
        # Only residential streets keep a sidewalk on the far side.
        if has_sidewalk and tags.get("highway") == "residential":
            other_side = [LaneType.SIDEWALK]
        else:
            other_side = []
        return full_side, other_side
    return full_side, list(full_side)


def osm_rank(tags: Mapping[str, str]) -> int:
    """Ordinal importance of a road from its ``highway`` tag."""
    highway = tags.get("highway")
    if highway is None:
        return 0
    rank = HIGHWAY_RANKS.get(highway)
    if rank is None:
        logger.debug("Unknown highway=%r, ranking as 0", highway)
        return 0
    return rank


def osm_zorder(tags: Mapping[str, str]) -> int:
    """Drawing layer of a road from its ``layer`` tag (default 0)."""
    layer = tags.get("layer")
    if layer is None:
        return 0
    try:
        return int(str(layer).strip())
    except ValueError:
        logger.debug("Unparseable layer=%r, using 0", layer)
        return 0
