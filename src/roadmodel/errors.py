"""Failures raised while turning raw roads into lanes.

A :class:`RoadBuildError` is local to one road.  The map builder either
contains it (skipping and reporting the road) or escalates it into a
:class:`MapBuildError` that stops the whole build.
"""

from typing import Any


class RoadBuildError(Exception):
    """A single road could not be turned into lanes."""

    def __init__(self, road_id: Any, message: str):
        super().__init__(f"road {road_id}: {message}")
        self.road_id = road_id


class MalformedSyntheticLanesError(RoadBuildError):
    """The ``synthetic_lanes`` tag is present but not a valid RoadSpec."""

    def __init__(self, road_id: Any, value: str):
        super().__init__(road_id, f"bad synthetic_lanes RoadSpec {value!r}")
        self.value = value


class NoLanesError(RoadBuildError):
    """Lane assembly produced no lanes on either side of the road."""

    def __init__(self, road_id: Any, tags: Any = None):
        super().__init__(road_id, f"wound up with no lanes (tags={tags!r})")
        self.tags = tags


class LaneGeometryError(RoadBuildError):
    """A lane centre line could not be placed beside the road centre line."""


class MapBuildError(Exception):
    """The map build as a whole has to stop."""
