"""Drawable lanes for a whole map.

Lane geometry is built on a thread pool; shapely releases the GIL for
its heavy operations, and every lane is an independent pure function of
the read-only map.  Uploads then run one at a time on the canvas owner
thread, in lane id order.
"""

import concurrent.futures
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from ..geom import PointLike
from ..roadmodel import LaneID, Map
from ..utils.logging import get_logger
from .batch import Canvas
from .lane import AlmostDrawLane, DrawLane
from .style import ColorScheme, Fill

logger = get_logger(__name__)


def build_lanes(map_: Map, cs: ColorScheme, draw_lane_markings: bool = True,
                workers: Optional[int] = None) -> List[AlmostDrawLane]:
    """Compute every lane's shapes, in lane id order.

    Parameters
    ----------
    map_ : Map
        The map; must not be mutated while this runs.
    cs : ColorScheme
        Colours.
    draw_lane_markings : bool
        Whether to include markings.
    workers : int, optional
        Thread count; ``1`` builds on the calling thread.
    """
    lanes = map_.all_lanes()
    if workers == 1:
        return [DrawLane.new(lane, map_, draw_lane_markings, cs) for lane in lanes]
    with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [executor.submit(DrawLane.new, lane, map_, draw_lane_markings, cs) for lane in lanes]
        return [f.result() for f in futures]


@dataclass
class DrawMap:
    """Uploaded lanes of one map, ready to draw and hit-test."""

    lanes: Dict[LaneID, DrawLane] = field(default_factory=dict)

    @classmethod
    def new(cls, map_: Map, cs: ColorScheme, canvas: Canvas, draw_lane_markings: bool = True,
            workers: Optional[int] = None) -> "DrawMap":
        almost = build_lanes(map_, cs, draw_lane_markings, workers)
        lanes = {}
        for lane in almost:
            lanes[lane.id] = lane.finish(canvas)
        logger.info("Prepared %d lanes (markings %s)", len(lanes), "on" if draw_lane_markings else "off")
        return cls(lanes=lanes)

    def get_l(self, lane_id: LaneID) -> DrawLane:
        return self.lanes[lane_id]

    def draw(self, canvas: Canvas, override_colors: Optional[Mapping[LaneID, Fill]] = None) -> None:
        """Paint all lanes, lowest z-order first."""
        override_colors = override_colors or {}
        for lane in sorted(self.lanes.values(), key=lambda l: (l.get_zorder(), l.id)):
            lane.draw(canvas, override_colors.get(lane.id))

    def lanes_at(self, pt: PointLike, map_: Map) -> List[LaneID]:
        """Lanes whose footprint contains ``pt``, topmost first."""
        hits = [l for l in self.lanes.values() if l.contains_pt(pt, map_)]
        hits.sort(key=lambda l: (l.get_zorder(), l.id), reverse=True)
        return [l.id for l in hits]
