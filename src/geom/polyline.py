"""Polyline and line primitives for lane geometry.

A polyline is stored as a float array of shape (N, 2) and mirrored by a
shapely ``LineString`` for the operations shapely does well (offsetting,
buffering, substrings, set operations).  Arc-length lookups are done
directly on the vertex array with cumulative segment lengths.

Angles are in radians, measured counter-clockwise from the +x axis.
"Left" is the counter-clockwise side of the direction of travel.
"""

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np
from shapely.geometry import LineString, Polygon
from shapely.ops import substring, unary_union

EPSILON_DIST = 0.01
"""Distances closer than this (metres) are treated as equal."""

PointLike = Union[Sequence[float], np.ndarray]


def as_point(pt: PointLike) -> np.ndarray:
    """Return ``pt`` as a float array of shape (2,)."""
    arr = np.asarray(pt, dtype=float)
    if arr.shape != (2,):
        raise ValueError(f"expected a 2D point, got shape {arr.shape}")
    return arr


def project_away(pt: PointLike, dist: float, angle: float) -> np.ndarray:
    """Move ``pt`` by ``dist`` in the direction ``angle``."""
    p = as_point(pt)
    return p + dist * np.array([math.cos(angle), math.sin(angle)])


def rotate_degs(angle: float, degrees: float) -> float:
    """Rotate an angle counter-clockwise by ``degrees``."""
    return (angle + math.radians(degrees)) % (2.0 * math.pi)


def opposite(angle: float) -> float:
    return rotate_degs(angle, 180.0)


def angle_to(pt1: PointLike, pt2: PointLike) -> float:
    """Heading from ``pt1`` towards ``pt2``."""
    d = as_point(pt2) - as_point(pt1)
    return math.atan2(d[1], d[0])


@dataclass(frozen=True)
class Line:
    """A directed two-point segment."""

    pt1: Tuple[float, float]
    pt2: Tuple[float, float]

    def __post_init__(self):
        if np.linalg.norm(as_point(self.pt2) - as_point(self.pt1)) < 1e-9:
            raise ValueError(f"degenerate line at {self.pt1}")

    @classmethod
    def new(cls, pt1: PointLike, pt2: PointLike) -> "Line":
        a, b = as_point(pt1), as_point(pt2)
        return cls((float(a[0]), float(a[1])), (float(b[0]), float(b[1])))

    def angle(self) -> float:
        return angle_to(self.pt1, self.pt2)

    def length(self) -> float:
        return float(np.linalg.norm(as_point(self.pt2) - as_point(self.pt1)))

    def shift_left(self, dist: float) -> "Line":
        normal = rotate_degs(self.angle(), 90.0)
        return Line.new(project_away(self.pt1, dist, normal), project_away(self.pt2, dist, normal))

    def shift_right(self, dist: float) -> "Line":
        return self.shift_left(-dist)

    def to_polyline(self) -> "PolyLine":
        return PolyLine([self.pt1, self.pt2])

    def make_polygons(self, width: float) -> Polygon:
        return self.to_polyline().make_polygons(width)


def perp_line(line: Line, length: float) -> Line:
    """Segment of ``length`` centred on ``line.pt1``, perpendicular to it.

    The result runs from the right side of ``line`` to its left side.
    """
    pt1 = line.shift_right(length / 2.0).pt1
    pt2 = line.shift_left(length / 2.0).pt1
    return Line.new(pt1, pt2)


class PolyLine:
    """An immutable open polyline with at least two distinct vertices."""

    def __init__(self, points: Union[Sequence[PointLike], np.ndarray]):
        pts = np.array(points, dtype=float)
        if pts.ndim != 2 or pts.shape[1] != 2:
            raise ValueError(f"polyline points must have shape (N, 2), got {pts.shape}")
        # Drop consecutive duplicates; they carry no direction.
        if len(pts) > 1:
            keep = np.ones(len(pts), dtype=bool)
            keep[1:] = np.linalg.norm(np.diff(pts, axis=0), axis=1) > 1e-9
            pts = pts[keep]
        if len(pts) < 2:
            raise ValueError("a polyline needs at least two distinct points")
        pts.setflags(write=False)
        self._pts = pts
        seg_lengths = np.linalg.norm(np.diff(pts, axis=0), axis=1)
        self._cumulative = np.concatenate(([0.0], np.cumsum(seg_lengths)))
        self._line_string: Optional[LineString] = None

    def __repr__(self) -> str:
        return f"PolyLine({len(self._pts)} pts, length={self.length:.2f})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, PolyLine):
            return NotImplemented
        return self._pts.shape == other._pts.shape and np.allclose(self._pts, other._pts)

    __hash__ = None  # type: ignore[assignment]

    @property
    def points(self) -> np.ndarray:
        return self._pts

    @property
    def length(self) -> float:
        return float(self._cumulative[-1])

    @property
    def line_string(self) -> LineString:
        if self._line_string is None:
            self._line_string = LineString(self._pts)
        return self._line_string

    def first_pt(self) -> np.ndarray:
        return self._pts[0]

    def last_pt(self) -> np.ndarray:
        return self._pts[-1]

    def reversed(self) -> "PolyLine":
        return PolyLine(self._pts[::-1])

    def dist_along(self, dist: float) -> Tuple[np.ndarray, float]:
        """Point and heading at ``dist`` metres along the polyline.

        Parameters
        ----------
        dist : float
            Arc length from the first vertex.  Must lie within
            ``[0, length]`` up to :data:`EPSILON_DIST`.

        Returns
        -------
        (numpy.ndarray, float)
            The interpolated point and the heading of the segment it
            lies on.
        """
        if dist < -EPSILON_DIST or dist > self.length + EPSILON_DIST:
            raise ValueError(f"dist_along({dist}) outside polyline of length {self.length}")
        dist = min(max(dist, 0.0), self.length)
        idx = int(np.searchsorted(self._cumulative, dist, side='right')) - 1
        idx = min(max(idx, 0), len(self._pts) - 2)
        start, end = self._pts[idx], self._pts[idx + 1]
        seg_len = self._cumulative[idx + 1] - self._cumulative[idx]
        t = (dist - self._cumulative[idx]) / seg_len
        return start + t * (end - start), angle_to(start, end)

    def exact_slice(self, start: float, end: float) -> "PolyLine":
        """Sub-polyline between two arc-length positions."""
        if start < -EPSILON_DIST or end > self.length + EPSILON_DIST or end - start < 1e-9:
            raise ValueError(f"bad slice [{start}, {end}] of polyline with length {self.length}")
        piece = substring(self.line_string, max(start, 0.0), min(end, self.length))
        return PolyLine(np.asarray(piece.coords)[:, :2])

    def shift_left(self, dist: float) -> "PolyLine":
        """Parallel polyline ``dist`` metres to the left (negative: right)."""
        if dist == 0:
            return self
        shifted = self.line_string.offset_curve(dist, join_style='mitre', mitre_limit=5.0)
        if shifted.is_empty or shifted.length < 1e-9:
            raise ValueError(f"offset of {dist} collapses a polyline of length {self.length:.2f}")
        if shifted.geom_type != 'LineString':
            # Self-intersecting offsets break apart; keep the dominant piece.
            shifted = max(shifted.geoms, key=lambda g: g.length)
        return PolyLine(np.asarray(shifted.coords)[:, :2])

    def shift_right(self, dist: float) -> "PolyLine":
        return self.shift_left(-dist)

    def make_polygons(self, width: float) -> Polygon:
        """Thicken the polyline into a polygon ``width`` metres wide."""
        return self.line_string.buffer(width / 2.0, cap_style='flat', join_style='mitre')

    def dashed_polygons(self, width: float, dash_len: float, dash_separation: float) -> List[Polygon]:
        """Cut the polyline into full-length dashes separated by gaps."""
        polygons: List[Polygon] = []
        start = 0.0
        while start + dash_len < self.length:
            polygons.append(self.exact_slice(start, start + dash_len).make_polygons(width))
            start += dash_len + dash_separation
        return polygons

    def make_arrow(self, thickness: float) -> Polygon:
        """Arrow along the polyline with its head at the last point."""
        head_size = thickness * 2.0
        triangle_height = head_size / math.sqrt(2.0)
        tip = self.last_pt()
        _, tip_angle = self.dist_along(self.length)
        head = Polygon([
            tip,
            project_away(tip, head_size, rotate_degs(tip_angle, -135.0)),
            project_away(tip, head_size, rotate_degs(tip_angle, 135.0)),
        ])
        if self.length <= triangle_height:
            return head
        # Run the shaft halfway into the head so the union is a single polygon.
        shaft = self.exact_slice(0.0, self.length - triangle_height / 2.0).make_polygons(thickness)
        return unary_union([shaft, head])

    def to_thick_boundary(self, self_width: float, boundary_width: float) -> Optional[Polygon]:
        """Ring of ``boundary_width`` tracing the edge of the thickened polyline.

        Returns None when the boundary would be as wide as the shape itself.
        """
        half = self_width / 2.0
        if half <= boundary_width:
            return None
        outer = self.make_polygons(self_width)
        inner = self.line_string.buffer(half - boundary_width, cap_style='flat', join_style='mitre')
        ring = outer.difference(inner)
        if ring.is_empty:
            return None
        return ring
