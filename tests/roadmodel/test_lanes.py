"""Unit tests for lane spec assembly."""

import numpy as np
import pandas as pd
import pytest
import yaml

from src.geom import PolyLine
from src.roadmodel.classifier import get_lanes
from src.roadmodel.errors import MalformedSyntheticLanesError, MapBuildError, NoLanesError
from src.roadmodel.lane_types import LaneType
from src.roadmodel.lanes import (
    LaneSpec,
    build_all_lane_specs,
    get_lane_specs,
    lane_center_line,
    lane_specs_to_frame,
)
from src.roadmodel.raw_data import LaneOverride, RawRoad, RoadEdits, load_raw_roads, load_road_edits

D, P, S, B, U = (LaneType.DRIVING, LaneType.PARKING, LaneType.SIDEWALK,
                 LaneType.BIKING, LaneType.BUS)


def road(road_id, **tags):
    return RawRoad(id=road_id, osm_tags=tags)


class TestGetLaneSpecs:
    """Test suite for get_lane_specs."""

    def test_forward_then_backward(self):
        specs = get_lane_specs(road(1, synthetic_lanes="dps/db"))
        assert specs == [
            LaneSpec(D, 0, False),
            LaneSpec(P, 1, False),
            LaneSpec(S, 2, False),
            LaneSpec(D, 0, True),
            LaneSpec(B, 1, True),
        ]

    def test_offsets_count_per_side(self):
        """Offsets are 0..k-1 within each side, and the total matches both sides."""
        specs = get_lane_specs(road(1, lanes="4"))
        fwd = [s.offset for s in specs if not s.reverse_pts]
        back = [s.offset for s in specs if s.reverse_pts]
        assert fwd == list(range(len(fwd)))
        assert back == list(range(len(back)))
        assert len(specs) == 8

    def test_edits_replace_classifier(self):
        edits = RoadEdits({7: LaneOverride((U, D), (S,))})
        specs = get_lane_specs(road(7, lanes="6"), edits)
        assert [s.lane_type for s in specs] == [U, D, S]
        assert [s.reverse_pts for s in specs] == [False, False, True]

    def test_edits_for_other_road_ignored(self):
        edits = RoadEdits({8: LaneOverride((U,), ())})
        specs = get_lane_specs(road(7), edits)
        assert [s.lane_type for s in specs] == [D, P, S, D, P, S]

    def test_no_lanes(self):
        with pytest.raises(NoLanesError) as exc_info:
            get_lane_specs(road("empty", synthetic_lanes="/"))
        assert exc_info.value.road_id == "empty"

    def test_malformed_synthetic_propagates(self):
        with pytest.raises(MalformedSyntheticLanesError):
            get_lane_specs(road(3, synthetic_lanes="q/"))


class TestBuildAllLaneSpecs:
    """Test suite for map-wide assembly in strict and lenient mode."""

    @pytest.fixture
    def roads(self):
        return [road(1), road(2, synthetic_lanes="bad"), road(3, highway="footway")]

    def test_strict_aborts(self, roads):
        with pytest.raises(MapBuildError) as exc_info:
            build_all_lane_specs(roads, strict=True)
        assert isinstance(exc_info.value.__cause__, MalformedSyntheticLanesError)

    def test_lenient_skips(self, roads):
        specs, failures = build_all_lane_specs(roads, strict=False)
        assert sorted(specs) == [1, 3]
        assert list(failures) == [2]
        assert isinstance(failures[2], MalformedSyntheticLanesError)

    def test_all_good(self):
        specs, failures = build_all_lane_specs([road(1), road(2)])
        assert len(specs) == 2
        assert failures == {}


class TestLaneCenterLine:
    """Test suite for lane placement next to the road centre line."""

    @pytest.fixture
    def center(self):
        return PolyLine([(0.0, 0.0), (100.0, 0.0)])

    def test_forward_lanes_right_of_road(self, center):
        first = lane_center_line(center, LaneSpec(D, 0, False))
        second = lane_center_line(center, LaneSpec(D, 1, False))
        np.testing.assert_allclose(first.points, [[0.0, -1.25], [100.0, -1.25]], atol=1e-9)
        np.testing.assert_allclose(second.points, [[0.0, -3.75], [100.0, -3.75]], atol=1e-9)

    def test_backward_lanes_reversed(self, center):
        back = lane_center_line(center, LaneSpec(S, 0, True))
        np.testing.assert_allclose(back.points, [[100.0, 1.25], [0.0, 1.25]], atol=1e-9)


class TestRawData:
    """Test suite for raw road and edit loading."""

    def test_from_dict_stringifies_tags(self):
        raw = RawRoad.from_dict({"id": "a", "tags": {"lanes": 4, "layer": -1}, "points": [[0, 0], [1, 0]]})
        assert raw.osm_tags == {"lanes": "4", "layer": "-1"}
        assert raw.center_points.shape == (2, 2)

    def test_from_dict_needs_id(self):
        with pytest.raises(ValueError):
            RawRoad.from_dict({"tags": {}})

    def test_unquoted_yaml_booleans(self):
        """YAML reads bare yes/no as booleans; they must still classify as oneway tags."""
        entries = yaml.safe_load(
            "- id: elm\n"
            "  tags: {highway: residential, oneway: yes, lanes: 2, junction: no}\n"
            "  points: [[0, 0], [40, 0]]\n"
        )
        raw = load_raw_roads(entries)[0]
        assert raw.osm_tags["oneway"] == "yes"
        assert raw.osm_tags["junction"] == "no"
        assert raw.osm_tags["lanes"] == "2"
        fwd, back = get_lanes(raw.osm_tags)
        assert fwd == [D, D, P, S]
        assert back == [S]

    def test_duplicate_ids(self):
        with pytest.raises(ValueError):
            load_raw_roads([{"id": 1}, {"id": 1}])

    def test_load_road_edits(self, tmp_path):
        path = tmp_path / "edits.yaml"
        path.write_text(
            "roads:\n"
            "  main: \"ub/s\"\n"
            "  side:\n"
            "    forwards_lanes: [driving, shared_left_turn]\n"
            "    backwards_lanes: [construction]\n"
        )
        edits = load_road_edits(path)
        assert len(edits) == 2
        assert edits.get("main") == LaneOverride((U, B), (S,))
        assert edits.get("side") == LaneOverride((D, LaneType.SHARED_LEFT_TURN), (LaneType.CONSTRUCTION,))
        assert edits.get("other") is None

    def test_bad_edit_spec(self):
        with pytest.raises(ValueError):
            RoadEdits.from_dict({"main": "no separator"})


def test_lane_specs_to_frame():
    frame = lane_specs_to_frame({"a": [LaneSpec(D, 0, False), LaneSpec(S, 0, True)], "b": []})
    assert isinstance(frame, pd.DataFrame)
    assert list(frame.columns) == ["road_id", "lane_type", "offset", "reverse_pts"]
    assert frame["lane_type"].tolist() == ["driving", "sidewalk"]
    assert frame["reverse_pts"].tolist() == [False, True]
