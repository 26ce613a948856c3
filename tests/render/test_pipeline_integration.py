"""Integration tests for the lane rendering pipeline."""

import logging
import tempfile
from pathlib import Path

import pandas as pd
import pytest
import yaml

from src.render.pipeline import LanePipeline, main, resolve_lane_ref
from src.roadmodel import MapBuildError


class TestPipelineIntegration:
    """Integration tests for LanePipeline."""

    def create_input(self, bad_road=False):
        """Small junction: a four-lane avenue, a oneway side street and a path."""
        roads = [
            {"id": "avenue", "tags": {"highway": "secondary", "lanes": 4},
             "points": [[0, 0], [120, 0]]},
            {"id": "side", "tags": {"highway": "residential", "oneway": "yes"},
             "points": [[130, 5], [130, 100]]},
            {"id": "path", "tags": {"highway": "footway"},
             "points": [[0, 20], [60, 40], [120, 20]]},
        ]
        if bad_road:
            roads.append({"id": "broken", "tags": {"synthetic_lanes": "dd"}, "points": [[0, -30], [50, -30]]})
        return {
            "roads": roads,
            "turns": [
                {"from": {"road": "avenue", "side": "fwd", "offset": 0},
                 "to": {"road": "side", "side": "fwd", "offset": 0}, "type": "left"},
                {"from": {"road": "avenue", "side": "fwd", "offset": 0},
                 "to": {"road": "avenue", "side": "fwd", "offset": 1}, "type": "lane_change_right"},
            ],
            "edits": {"path": "s/s"},
        }

    def test_pipeline_end_to_end(self):
        """Test complete pipeline from input to image and spec table."""
        with tempfile.TemporaryDirectory() as tmpdir:
            output_dir = Path(tmpdir)
            pipeline = LanePipeline(output_path=output_dir / "lanes.png", workers=2)

            summary = pipeline.run(self.create_input(), specs_csv=output_dir / "specs.csv")

            # avenue: 2x(D, D, P, S); side: D, D, P, S + S; path edited to s/s
            assert summary["roads"] == 3
            assert summary["roads_built"] == 3
            assert summary["roads_failed"] == []
            assert summary["lanes"] == 15
            assert summary["turns"] == 2
            assert summary["drawn_lanes"] == 15
            assert (output_dir / "lanes.png").stat().st_size > 0

            frame = pd.read_csv(output_dir / "specs.csv")
            assert len(frame) == 15
            assert frame[frame["road_id"] == "path"]["lane_type"].tolist() == ["sidewalk", "sidewalk"]

    def test_strict_mode_fails(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            pipeline = LanePipeline(output_path=Path(tmpdir) / "lanes.png")
            with pytest.raises(MapBuildError):
                pipeline.run(self.create_input(bad_road=True))

    def test_lenient_mode_skips(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            pipeline = LanePipeline(output_path=Path(tmpdir) / "lanes.png", strict=False)
            summary = pipeline.run(self.create_input(bad_road=True))
            assert summary["roads_failed"] == ["broken"]
            assert summary["roads_built"] == 3
            assert "broken" not in pipeline.map.roads

    def test_roads_classified_once(self, caplog):
        """Step 3 reuses the specs assembled in step 2."""
        caplog.set_level(logging.INFO, logger="src.roadmodel.lanes")
        with tempfile.TemporaryDirectory() as tmpdir:
            pipeline = LanePipeline(output_path=Path(tmpdir) / "lanes.png")
            pipeline.run(self.create_input())
        edit_logs = [r for r in caplog.records if r.getMessage() == "Using edits for road path"]
        assert len(edit_logs) == 1

    def test_lenient_skips_unplaceable_road(self):
        data = self.create_input()
        data["roads"].append({"id": "hairpin", "tags": {"synthetic_lanes": "dd/dd"},
                              "points": [[0, -40], [30, -40], [30, -38], [0, -38]]})
        with tempfile.TemporaryDirectory() as tmpdir:
            pipeline = LanePipeline(output_path=Path(tmpdir) / "lanes.png", strict=False)
            summary = pipeline.run(data)
        assert summary["roads_failed"] == ["hairpin"]
        assert summary["roads_built"] == 3
        assert summary["lanes"] == 15

    def test_resolve_lane_ref(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            pipeline = LanePipeline(output_path=Path(tmpdir) / "lanes.png")
            pipeline.step_1_load_input(self.create_input())
            pipeline.step_2_assemble_specs()
            map_ = pipeline.step_3_build_map()
            assert resolve_lane_ref(map_, 3) == 3
            assert resolve_lane_ref(map_, {"road": "avenue", "side": "back", "offset": 0}) == 4
            with pytest.raises(ValueError):
                resolve_lane_ref(map_, {"road": "avenue", "side": "left"})


class TestMain:
    """Tests for the command-line entry point."""

    def write_input(self, directory, data):
        path = Path(directory) / "roads.yaml"
        with open(path, 'w') as f:
            yaml.safe_dump(data, f)
        return path

    def test_main(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            data = TestPipelineIntegration().create_input()
            input_path = self.write_input(tmpdir, data)
            colors = Path(tmpdir) / "colors.yaml"
            colors.write_text("colors:\n  sidewalk: \"#cccccc\"\n")
            output = Path(tmpdir) / "out.png"

            code = main(["--input", str(input_path), "--output", str(output),
                         "--colors", str(colors), "--no-markings", "--workers", "1"])

            assert code == 0
            assert output.exists()

    def test_main_strict_failure(self, capsys):
        with tempfile.TemporaryDirectory() as tmpdir:
            data = TestPipelineIntegration().create_input(bad_road=True)
            input_path = self.write_input(tmpdir, data)

            code = main(["--input", str(input_path), "--output", str(Path(tmpdir) / "out.png")])

            assert code == 1
            assert "broken" in capsys.readouterr().out

    def test_main_lenient(self, capsys):
        with tempfile.TemporaryDirectory() as tmpdir:
            data = TestPipelineIntegration().create_input(bad_road=True)
            input_path = self.write_input(tmpdir, data)

            code = main(["--input", str(input_path), "--output", str(Path(tmpdir) / "out.png"), "--lenient"])

            assert code == 0
            assert "Skipped:      broken" in capsys.readouterr().out
