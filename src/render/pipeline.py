"""End-to-end lane rendering pipeline.

Reads a YAML description of roads (tags plus centre lines) and optional
turns and edits, derives lanes for every road, builds their geometry
and renders the result to an image.

Usage:
    python -m src.render.pipeline --input roads.yaml --output lanes.png

Input layout::

    roads:
      - id: main
        tags: {highway: primary, lanes: "4"}
        points: [[0, 0], [120, 0]]
    turns:
      - from: {road: main, side: fwd, offset: 0}
        to: {road: side, side: fwd, offset: 0}
        type: left
    edits:
      main: "dd/dd"
"""

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from ..roadmodel import (
    LaneID,
    LaneSpec,
    Map,
    MapBuildError,
    RawRoad,
    RoadBuildError,
    RoadEdits,
    TurnType,
    add_turns,
    build_all_lane_specs,
    lane_specs_to_frame,
    load_raw_roads,
    load_road_edits,
    make_map,
)
from ..utils.config import load_config
from ..utils.logging import get_logger
from .batch import Canvas
from .draw_map import DrawMap
from .style import ColorScheme, load_color_scheme

logger = get_logger(__name__)

LaneRef = Union[int, Mapping[str, Any]]


def resolve_lane_ref(map_: Map, ref: LaneRef) -> LaneID:
    """Lane id from either a raw id or a ``{road, side, offset}`` mapping."""
    if isinstance(ref, int):
        return ref
    side = str(ref.get("side", "fwd")).lower()
    if side not in ("fwd", "back"):
        raise ValueError(f"lane side must be 'fwd' or 'back', got {side!r}")
    return map_.lane_at(ref["road"], side == "fwd", int(ref.get("offset", 0)))


class LanePipeline:
    """Roads in, rendered lanes out."""

    def __init__(
        self,
        output_path: Path,
        cs: Optional[ColorScheme] = None,
        draw_lane_markings: bool = True,
        strict: bool = True,
        workers: Optional[int] = None,
    ):
        """Initialize the pipeline.

        Parameters
        ----------
        output_path : Path
            Image file to write.
        cs : ColorScheme, optional
            Colours; defaults to the built-in scheme.
        draw_lane_markings : bool, optional
            Draw markings on top of lane fills (default True).
        strict : bool, optional
            Abort on the first road that cannot be classified (default
            True).  When False such roads are skipped and reported.
        workers : int, optional
            Threads used to build lane geometry.
        """
        self.output_path = Path(output_path)
        self.cs = cs or ColorScheme.default()
        self.draw_lane_markings = draw_lane_markings
        self.strict = strict
        self.workers = workers

        self.roads: List[RawRoad] = []
        self.edits = RoadEdits()
        self.turn_entries: List[Mapping[str, Any]] = []
        self.specs: Dict[Any, List[LaneSpec]] = {}
        self.failures: Dict[Any, RoadBuildError] = {}
        self.map: Optional[Map] = None

    def step_1_load_input(self, data: Mapping[str, Any], edits: Optional[RoadEdits] = None) -> List[RawRoad]:
        """Read roads, turns and edits from the parsed input document."""
        self.roads = load_raw_roads(data.get("roads") or [])
        if edits is not None:
            self.edits = edits
        else:
            self.edits = RoadEdits.from_dict(data.get("edits") or {})
        self.turn_entries = list(data.get("turns") or [])
        logger.info("Loaded %d roads, %d turns, %d edits", len(self.roads), len(self.turn_entries), len(self.edits))
        return self.roads

    def step_2_assemble_specs(self) -> Dict[Any, List[LaneSpec]]:
        self.specs, self.failures = build_all_lane_specs(self.roads, self.edits, strict=self.strict)
        logger.info("Assembled %d lanes over %d roads",
                    sum(len(s) for s in self.specs.values()), len(self.specs))
        return self.specs

    def step_3_build_map(self) -> Map:
        self.map = make_map(self.roads, strict=self.strict, specs_by_road=self.specs)
        self.failures.update(self.map.failed_roads)
        turns: List[Tuple[LaneID, LaneID, TurnType]] = []
        for entry in self.turn_entries:
            turns.append((
                resolve_lane_ref(self.map, entry["from"]),
                resolve_lane_ref(self.map, entry["to"]),
                TurnType(str(entry.get("type", "straight")).lower()),
            ))
        add_turns(self.map, turns)
        return self.map

    def step_4_render(self, canvas: Canvas) -> DrawMap:
        draw_map = DrawMap.new(self.map, self.cs, canvas, self.draw_lane_markings, self.workers)
        draw_map.draw(canvas)
        canvas.save(self.output_path)
        logger.info("Rendered %d lanes to %s", len(draw_map.lanes), self.output_path)
        return draw_map

    def step_5_export_specs(self, path: Path) -> None:
        lane_specs_to_frame(self.specs).to_csv(path, index=False)
        logger.info("Lane specs written to %s", path)

    def run(self, data: Mapping[str, Any], edits: Optional[RoadEdits] = None,
            specs_csv: Optional[Path] = None) -> Dict[str, Any]:
        """Run every step and return summary statistics.

        Raises
        ------
        MapBuildError
            In strict mode, when a road cannot be turned into lanes.
        """
        self.step_1_load_input(data, edits)
        self.step_2_assemble_specs()
        self.step_3_build_map()
        canvas = Canvas()
        try:
            draw_map = self.step_4_render(canvas)
        finally:
            canvas.close()
        if specs_csv is not None:
            self.step_5_export_specs(Path(specs_csv))

        return {
            "roads": len(self.roads),
            "roads_built": len(self.map.roads),
            "roads_failed": sorted(str(r) for r in self.failures),
            "lanes": len(self.map.lanes),
            "turns": len(self.map.turns),
            "drawn_lanes": len(draw_map.lanes),
            "output": str(self.output_path),
        }


def main(argv: Optional[List[str]] = None) -> int:
    """Command-line entry point."""
    parser = argparse.ArgumentParser(description="Derive lanes from road tags and render them")
    parser.add_argument("--input", type=str, required=True, help="YAML file describing roads and turns")
    parser.add_argument("--output", type=str, required=True, help="Image file to write (e.g. lanes.png)")
    parser.add_argument("--edits", type=str, default=None, help="YAML file with manual lane edits")
    parser.add_argument("--colors", type=str, default=None, help="YAML file with colour overrides")
    parser.add_argument("--no-markings", action="store_true", help="Draw lane fills only")
    parser.add_argument("--specs-csv", type=str, default=None, help="Also write the lane spec table as CSV")
    parser.add_argument("--lenient", action="store_true", help="Skip roads that cannot be classified")
    parser.add_argument("--workers", type=int, default=None, help="Threads for building lane geometry")
    args = parser.parse_args(argv)

    data = load_config(args.input)
    edits = load_road_edits(args.edits) if args.edits else None
    pipeline = LanePipeline(
        output_path=Path(args.output),
        cs=load_color_scheme(args.colors),
        draw_lane_markings=not args.no_markings,
        strict=not args.lenient,
        workers=args.workers,
    )
    try:
        summary = pipeline.run(data, edits=edits, specs_csv=args.specs_csv)
    except MapBuildError as err:
        print(f"Error: {err}")
        return 1

    print(f"Roads:        {summary['roads_built']}/{summary['roads']}")
    print(f"Lanes:        {summary['lanes']}")
    print(f"Turns:        {summary['turns']}")
    if summary["roads_failed"]:
        print(f"Skipped:      {', '.join(summary['roads_failed'])}")
    print(f"Output:       {summary['output']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
