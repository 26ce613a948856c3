"""Unit tests for building and drawing a whole map."""

import numpy as np
import pytest

from src.render.batch import Canvas
from src.render.draw_map import DrawMap, build_lanes
from src.render.style import ColorScheme, Fill
from src.roadmodel import RawRoad, TurnType, make_map


@pytest.fixture
def crossing():
    """A bridge (layer 1) running east over a street running north."""
    roads = [
        RawRoad(id="bridge", osm_tags={"synthetic_lanes": "dd/d", "layer": "1"},
                center_points=np.array([[0.0, 0.0], [100.0, 0.0]])),
        RawRoad(id="street", osm_tags={"synthetic_lanes": "d/s"},
                center_points=np.array([[50.0, -50.0], [50.0, 50.0]])),
    ]
    return make_map(roads, turns=[(0, 1, TurnType.LANE_CHANGE_RIGHT)])


@pytest.fixture
def canvas():
    canvas = Canvas(figsize=(4, 4), dpi=50)
    yield canvas
    canvas.close()


class TestBuildLanes:
    """Test suite for build_lanes."""

    def test_lane_id_order(self, crossing):
        almost = build_lanes(crossing, ColorScheme.default(), workers=4)
        assert [a.id for a in almost] == [0, 1, 2, 3, 4]

    def test_parallel_matches_serial(self, crossing):
        cs = ColorScheme.default()
        serial = build_lanes(crossing, cs, workers=1)
        parallel = build_lanes(crossing, cs, workers=4)
        for a, b in zip(serial, parallel):
            assert a.id == b.id
            assert a.zorder == b.zorder
            assert len(a.draw_default) == len(b.draw_default)
            assert a.polygon.equals(b.polygon)


class TestDrawMap:
    """Test suite for DrawMap."""

    def test_new(self, crossing, canvas):
        draw_map = DrawMap.new(crossing, ColorScheme.default(), canvas)
        assert sorted(draw_map.lanes) == [0, 1, 2, 3, 4]
        assert draw_map.get_l(3).get_zorder() == 0
        assert draw_map.get_l(0).get_zorder() == 1

    def test_draw(self, crossing, canvas):
        draw_map = DrawMap.new(crossing, ColorScheme.default(), canvas, draw_lane_markings=False)
        draw_map.draw(canvas)
        assert len(canvas.ax.patches) == 5

    def test_draw_with_override(self, crossing, canvas):
        draw_map = DrawMap.new(crossing, ColorScheme.default(), canvas)
        expected = sum(len(l.draw_default) for l in draw_map.lanes.values()) - len(draw_map.get_l(1).draw_default) + 1
        draw_map.draw(canvas, {1: Fill.parse("red")})
        assert len(canvas.ax.patches) == expected

    def test_lanes_at_topmost_first(self, crossing, canvas):
        draw_map = DrawMap.new(crossing, ColorScheme.default(), canvas)
        # Inside bridge lane 0 and the street's forward lane 3.
        assert draw_map.lanes_at((51.0, -1.25), crossing) == [0, 3]
        assert draw_map.lanes_at((500.0, 500.0), crossing) == []
