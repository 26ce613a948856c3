"""Unit tests for the RoadSpec string codec."""

import pytest

from src.roadmodel.lane_types import LaneType
from src.roadmodel.roadspec import RoadSpec

D, P, S, B, U = (LaneType.DRIVING, LaneType.PARKING, LaneType.SIDEWALK,
                 LaneType.BIKING, LaneType.BUS)


class TestRoadSpec:
    """Test suite for RoadSpec encode/parse."""

    def test_encode(self):
        """Forward symbols, separator, backward symbols."""
        spec = RoadSpec(fwd=[D, D, P, S], back=[D, B, U])
        assert spec.encode() == "ddps/dbu"
        assert str(spec) == "ddps/dbu"

    @pytest.mark.parametrize("spec", [
        RoadSpec([D, P, S], [D, P, S]),
        RoadSpec([S], []),
        RoadSpec([], [U, B]),
        RoadSpec([], []),
        RoadSpec([B, U, S, P, D], [D]),
    ])
    def test_round_trip(self, spec):
        """Decoding an encoded spec gives the same spec back."""
        assert RoadSpec.parse(spec.encode()) == spec

    def test_parse(self):
        spec = RoadSpec.parse("dpsb/u")
        assert spec.fwd == [D, P, S, B]
        assert spec.back == [U]

    def test_parse_empty_sides(self):
        spec = RoadSpec.parse("/")
        assert spec.fwd == []
        assert spec.back == []

    @pytest.mark.parametrize("text", ["", "dd", "d/d/", "dx/d", "d/D", "d /d", "//"])
    def test_parse_rejects(self, text):
        """Missing separator, a second separator or foreign symbols fail."""
        assert RoadSpec.parse(text) is None

    @pytest.mark.parametrize("lane_type", [LaneType.SHARED_LEFT_TURN, LaneType.CONSTRUCTION])
    def test_encode_rejects_derived_types(self, lane_type):
        with pytest.raises(ValueError):
            RoadSpec(fwd=[D, lane_type], back=[]).encode()


class TestLaneType:
    """Test suite for LaneType lookups."""

    def test_from_name(self):
        assert LaneType.from_name("bus") == LaneType.BUS
        assert LaneType.from_name("SHARED_LEFT_TURN") == LaneType.SHARED_LEFT_TURN
        assert LaneType.from_name(" Parking ") == LaneType.PARKING

    def test_from_name_unknown(self):
        with pytest.raises(ValueError):
            LaneType.from_name("tram")
