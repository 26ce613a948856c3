"""Immutable colour table for lane rendering.

Every colour the lane builder asks for is listed in :data:`DEFAULT_COLORS`.
A :class:`ColorScheme` is built once at start-up, optionally with
overrides from a YAML file, and validated up front so that a missing or
misspelled key fails at load time instead of halfway through a render.

Override file layout::

    colors:
      bus lane: "#c03030"
      construction hatching:
        color: "#202020"
        hatch: "xx"
"""

from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from matplotlib.colors import to_rgba

from ..utils.config import load_config

RGBA = Tuple[float, float, float, float]

HIGHWAY_RANK = 16
ARTERIAL_RANK = 6


@dataclass(frozen=True)
class Fill:
    """How a polygon is painted: a solid colour, or hatching in that colour."""

    rgba: RGBA
    hatch: Optional[str] = None

    @classmethod
    def parse(cls, value: Any) -> "Fill":
        if isinstance(value, Fill):
            return value
        if isinstance(value, Mapping):
            if "color" not in value:
                raise ValueError(f"fill mapping needs a 'color': {value!r}")
            return cls(to_rgba(value["color"]), value.get("hatch"))
        return cls(to_rgba(value))


DEFAULT_COLORS: Dict[str, Any] = {
    "highway road": "#7c7c7c",
    "arterial road": "#2a2a2a",
    "residential road": "#5b5b5b",
    "highway center line": "#f4da22",
    "arterial center line": "#db952e",
    "residential center line": "#d8b830",
    "bus lane": "#ad302d",
    "sidewalk": "#d6d6d6",
    "bike lane": "#72ce36",
    "construction background": "#ff6d00",
    "construction hatching": {"color": "#000000", "hatch": "//"},
    "sidewalk lines": "#707070",
    "general road marking": "#d6d6d6",
}


@dataclass(frozen=True)
class ColorScheme:
    """Read-only mapping from descriptive keys to fills."""

    colors: Mapping[str, Fill]

    def __post_init__(self):
        missing = sorted(set(DEFAULT_COLORS) - set(self.colors))
        if missing:
            raise ValueError(f"colour scheme is missing keys: {', '.join(missing)}")
        object.__setattr__(self, "colors", MappingProxyType(dict(self.colors)))

    def get(self, key: str) -> Fill:
        return self.colors[key]

    @classmethod
    def default(cls) -> "ColorScheme":
        return cls.from_overrides({})

    @classmethod
    def from_overrides(cls, overrides: Mapping[str, Any]) -> "ColorScheme":
        """Defaults with ``overrides`` applied; unknown keys are rejected."""
        unknown = sorted(set(overrides) - set(DEFAULT_COLORS))
        if unknown:
            raise ValueError(f"unknown colour keys: {', '.join(unknown)}")
        merged = dict(DEFAULT_COLORS)
        merged.update(overrides)
        return cls({key: Fill.parse(value) for key, value in merged.items()})


def load_color_scheme(path: Union[str, Path, None]) -> ColorScheme:
    """Build the colour scheme from an optional YAML override file."""
    if path is None:
        return ColorScheme.default()
    cfg = load_config(path)
    return ColorScheme.from_overrides(cfg.get("colors") or {})


def _rank_tier(rank: int) -> str:
    if rank >= HIGHWAY_RANK:
        return "highway"
    if rank >= ARTERIAL_RANK:
        return "arterial"
    return "residential"


def osm_rank_to_zoomed_color(cs: ColorScheme, rank: int) -> Fill:
    """Road surface colour for the class of road ``rank`` belongs to."""
    return cs.get(f"{_rank_tier(rank)} road")


def osm_rank_to_road_center_line_color(cs: ColorScheme, rank: int) -> Fill:
    return cs.get(f"{_rank_tier(rank)} center line")
