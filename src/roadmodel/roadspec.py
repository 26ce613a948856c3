"""Compact string encoding of a road's lanes.

A RoadSpec lists the lane types of both directions of a road, written
as ``<forward chars>/<backward chars>``, for example ``"dps/dps"`` for a
two-way street with a driving lane, parking and a sidewalk per side.
Hand-authored synthetic maps store this string in the
``synthetic_lanes`` tag, so the alphabet must never change meaning.

======  ==========
Symbol  Lane type
======  ==========
``d``   driving
``p``   parking
``s``   sidewalk
``b``   biking
``u``   bus
======  ==========

Shared left-turn and construction lanes are only ever derived, so they
have no symbol.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .lane_types import LaneType

SEPARATOR = "/"

LANE_TYPE_TO_CHAR: Dict[LaneType, str] = {
    LaneType.DRIVING: "d",
    LaneType.PARKING: "p",
    LaneType.SIDEWALK: "s",
    LaneType.BIKING: "b",
    LaneType.BUS: "u",
}
CHAR_TO_LANE_TYPE: Dict[str, LaneType] = {c: lt for lt, c in LANE_TYPE_TO_CHAR.items()}


def lane_type_to_char(lane_type: LaneType) -> str:
    try:
        return LANE_TYPE_TO_CHAR[lane_type]
    except KeyError:
        raise ValueError(f"{lane_type.name} lanes have no RoadSpec symbol") from None


@dataclass
class RoadSpec:
    """Forward and backward lane types of one road."""

    fwd: List[LaneType] = field(default_factory=list)
    back: List[LaneType] = field(default_factory=list)

    def encode(self) -> str:
        """Return the ``fwd/back`` string form.

        Raises
        ------
        ValueError
            If a lane type without a symbol is present.
        """
        return (
            "".join(lane_type_to_char(lt) for lt in self.fwd)
            + SEPARATOR
            + "".join(lane_type_to_char(lt) for lt in self.back)
        )

    def __str__(self) -> str:
        return self.encode()

    @classmethod
    def parse(cls, text: str) -> Optional["RoadSpec"]:
        """Decode a ``fwd/back`` string.

        Returns None when ``text`` has no separator, a second separator,
        or any character outside the alphabet.  Callers that accept user
        input are expected to turn None into a validation message.
        """
        fwd: List[LaneType] = []
        back: List[LaneType] = []
        seen_separator = False
        for c in text:
            if c == SEPARATOR and not seen_separator:
                seen_separator = True
                continue
            lane_type = CHAR_TO_LANE_TYPE.get(c)
            if lane_type is None:
                return None
            (back if seen_separator else fwd).append(lane_type)
        if not seen_separator:
            return None
        return cls(fwd=fwd, back=back)
