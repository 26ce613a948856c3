"""Raw road input and manual lane edits.

Both are loaded once per map and treated as immutable afterwards.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from ..utils.config import load_config
from .lane_types import LaneType
from .roadspec import RoadSpec


def _tag_value(value: Any) -> str:
    # YAML reads unquoted yes/no as booleans; tags spell them out.
    if isinstance(value, bool):
        return "yes" if value else "no"
    return str(value)


@dataclass(frozen=True, eq=False)
class RawRoad:
    """A road as it comes out of the source data."""

    id: Any
    """Identity used for edit lookup and error reporting."""

    osm_tags: Mapping[str, str] = field(default_factory=dict)
    """String tags describing the physical road."""

    center_points: Optional[np.ndarray] = None
    """Optional (N, 2) road centre line in metres."""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RawRoad":
        """Build from a ``{id, tags, points}`` mapping as found in YAML input."""
        if "id" not in data:
            raise ValueError(f"road entry without an id: {data!r}")
        tags = {str(k): _tag_value(v) for k, v in (data.get("tags") or {}).items()}
        points = data.get("points")
        center = np.asarray(points, dtype=float) if points is not None else None
        return cls(id=data["id"], osm_tags=tags, center_points=center)


@dataclass(frozen=True)
class LaneOverride:
    """Manually edited lanes replacing the classifier output for one road."""

    forwards_lanes: Tuple[LaneType, ...]
    backwards_lanes: Tuple[LaneType, ...]


def _parse_side(value: Union[str, Sequence[str]]) -> Tuple[LaneType, ...]:
    return tuple(LaneType.from_name(v) for v in value)


def parse_override(value: Union[str, Mapping[str, Any]]) -> LaneOverride:
    """Read one edit, either a RoadSpec string or explicit lane-type lists."""
    if isinstance(value, str):
        spec = RoadSpec.parse(value)
        if spec is None:
            raise ValueError(f"invalid RoadSpec in edits: {value!r}")
        return LaneOverride(tuple(spec.fwd), tuple(spec.back))
    return LaneOverride(
        forwards_lanes=_parse_side(value.get("forwards_lanes") or []),
        backwards_lanes=_parse_side(value.get("backwards_lanes") or []),
    )


@dataclass(frozen=True)
class RoadEdits:
    """Manual lane overrides keyed by road id."""

    roads: Mapping[Any, LaneOverride] = field(default_factory=dict)

    def get(self, road_id: Any) -> Optional[LaneOverride]:
        return self.roads.get(road_id)

    def __len__(self) -> int:
        return len(self.roads)

    @classmethod
    def from_dict(cls, data: Mapping[Any, Any]) -> "RoadEdits":
        return cls(roads={road_id: parse_override(v) for road_id, v in data.items()})


def load_road_edits(path: Union[str, Path]) -> RoadEdits:
    """Load edits from a YAML file with a top-level ``roads:`` mapping."""
    cfg = load_config(path)
    return RoadEdits.from_dict(cfg.get("roads") or {})


def load_raw_roads(entries: Sequence[Mapping[str, Any]]) -> List[RawRoad]:
    roads = [RawRoad.from_dict(e) for e in entries]
    seen = set()
    for road in roads:
        if road.id in seen:
            raise ValueError(f"duplicate road id {road.id!r}")
        seen.add(road.id)
    return roads
