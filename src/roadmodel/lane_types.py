"""Lane type enumeration and exhaustive dispatch helper."""

from enum import Enum
from typing import Iterable, Mapping


class LaneType(Enum):
    """Functional class of a lane."""

    DRIVING = "driving"
    PARKING = "parking"
    SIDEWALK = "sidewalk"
    BIKING = "biking"
    BUS = "bus"
    SHARED_LEFT_TURN = "shared_left_turn"
    CONSTRUCTION = "construction"

    @classmethod
    def from_name(cls, name: str) -> "LaneType":
        """Look a lane type up by value (``"bus"``) or member name (``"BUS"``)."""
        key = str(name).strip()
        try:
            return cls(key.lower())
        except ValueError:
            pass
        try:
            return cls[key.upper()]
        except KeyError:
            raise ValueError(f"unknown lane type {name!r}") from None


def check_exhaustive(table: Mapping[LaneType, object], what: str,
                     members: Iterable[LaneType] = LaneType) -> None:
    """Fail at import time if a dispatch table misses a lane type."""
    missing = [lt.name for lt in members if lt not in table]
    if missing:
        raise TypeError(f"{what} does not handle lane types: {', '.join(missing)}")
