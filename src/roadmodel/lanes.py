"""Lane specification assembly and lane centre line construction.

For every road the classifier (or a manual edit) yields two ordered
lists of lane types.  This module flattens them into
:class:`LaneSpec` entries, offset-indexed per side, and places each
lane's centre line next to the road centre line: forward lanes to the
right of the road's direction, backward lanes to the right of the
reversed direction.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

import pandas as pd

from ..geom import PolyLine
from ..utils.logging import get_logger
from .classifier import get_lanes
from .errors import MapBuildError, NoLanesError, RoadBuildError
from .lane_types import LaneType
from .raw_data import RawRoad, RoadEdits

logger = get_logger(__name__)

LANE_THICKNESS = 2.5
"""Width of every lane in metres."""


@dataclass(frozen=True)
class LaneSpec:
    """One lane of a road before it has geometry."""

    lane_type: LaneType
    offset: int
    """Zero-based position within its own side, counted from the centre."""

    reverse_pts: bool
    """True for lanes running against the road's original direction."""


def get_lane_specs(road: RawRoad, edits: Optional[RoadEdits] = None) -> List[LaneSpec]:
    """Assemble the ordered lane specs for one road.

    Parameters
    ----------
    road : RawRoad
        The road to classify.
    edits : RoadEdits, optional
        Manual overrides; an entry for ``road.id`` replaces the
        classifier output entirely.

    Returns
    -------
    list of LaneSpec
        All forward lanes (offsets 0..n-1) followed by all backward
        lanes (offsets 0..m-1).

    Raises
    ------
    NoLanesError
        If neither side has any lanes.
    MalformedSyntheticLanesError
        Propagated from the classifier.
    """
    override = edits.get(road.id) if edits is not None else None
    if override is not None:
        logger.info("Using edits for road %s", road.id)
        fwd_types, back_types = override.forwards_lanes, override.backwards_lanes
    else:
        fwd_types, back_types = get_lanes(road.osm_tags, road.id)

    specs = [LaneSpec(lt, idx, False) for idx, lt in enumerate(fwd_types)]
    specs.extend(LaneSpec(lt, idx, True) for idx, lt in enumerate(back_types))
    if not specs:
        raise NoLanesError(road.id, dict(road.osm_tags))
    return specs


def build_all_lane_specs(
    roads: Iterable[RawRoad],
    edits: Optional[RoadEdits] = None,
    strict: bool = True,
) -> Tuple[Dict[Any, List[LaneSpec]], Dict[Any, RoadBuildError]]:
    """Assemble lane specs for every road of a map.

    Parameters
    ----------
    roads : iterable of RawRoad
        All roads of the map.
    edits : RoadEdits, optional
        Manual overrides.
    strict : bool
        If True the first failing road aborts the build with a
        :class:`MapBuildError`.  If False failing roads are logged,
        left out of the result and reported in the failure mapping.

    Returns
    -------
    (dict, dict)
        Lane specs keyed by road id, and failures keyed by road id.
    """
    specs: Dict[Any, List[LaneSpec]] = {}
    failures: Dict[Any, RoadBuildError] = {}
    for road in roads:
        try:
            specs[road.id] = get_lane_specs(road, edits)
        except RoadBuildError as err:
            if strict:
                raise MapBuildError(f"map build stopped at road {road.id}: {err}") from err
            logger.warning("Skipping road %s: %s", road.id, err)
            failures[road.id] = err
    return specs, failures


def lane_center_line(road_center: PolyLine, spec: LaneSpec) -> PolyLine:
    """Centre line of the lane described by ``spec``."""
    base = road_center.reversed() if spec.reverse_pts else road_center
    return base.shift_right((spec.offset + 0.5) * LANE_THICKNESS)


def lane_specs_to_frame(specs_by_road: Mapping[Any, List[LaneSpec]]) -> pd.DataFrame:
    """Tabulate lane specs, one row per lane, for export and inspection."""
    rows = [
        {
            "road_id": road_id,
            "lane_type": spec.lane_type.value,
            "offset": spec.offset,
            "reverse_pts": spec.reverse_pts,
        }
        for road_id, specs in specs_by_road.items()
        for spec in specs
    ]
    return pd.DataFrame(rows, columns=["road_id", "lane_type", "offset", "reverse_pts"])
