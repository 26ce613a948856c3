"""Shape batches and the single rendering context they are uploaded to.

Lane geometry is produced as a :class:`GeomBatch` of (fill, polygon)
pairs, frozen into an immutable :class:`ShapeBatch`.  Building batches
is pure and may happen on any thread.  Turning a batch into something
drawable happens on a :class:`Canvas`, which wraps one matplotlib
figure and only accepts uploads from the thread that created it.
"""

import threading
from dataclasses import dataclass
from pathlib import Path as FilePath
from typing import Iterable, List, Optional, Tuple, Union

import matplotlib
matplotlib.use('Agg')  # Non-interactive backend
import matplotlib.pyplot as plt
import numpy as np
from matplotlib.patches import PathPatch
from matplotlib.path import Path
from shapely.geometry.base import BaseGeometry

from .style import Fill

ShapeItem = Tuple[Fill, BaseGeometry]


@dataclass(frozen=True)
class ShapeBatch:
    """Immutable, CPU-side list of shapes ready for upload."""

    items: Tuple[ShapeItem, ...] = ()

    def __len__(self) -> int:
        return len(self.items)

    def polygons(self) -> List[BaseGeometry]:
        return [poly for _, poly in self.items]


class GeomBatch:
    """Mutable builder for a :class:`ShapeBatch`."""

    def __init__(self):
        self._items: List[ShapeItem] = []

    def __len__(self) -> int:
        return len(self._items)

    def push(self, fill: Fill, polygon: BaseGeometry) -> None:
        self._items.append((fill, polygon))

    def extend(self, fill: Fill, polygons: Iterable[BaseGeometry]) -> None:
        for polygon in polygons:
            self.push(fill, polygon)

    def freeze(self) -> ShapeBatch:
        return ShapeBatch(tuple(self._items))


def polygon_to_path(polygon: BaseGeometry) -> Optional[Path]:
    """Compound matplotlib path of a (multi)polygon, holes included."""
    if polygon.is_empty:
        return None
    parts = getattr(polygon, "geoms", [polygon])
    rings = []
    for part in parts:
        if part.geom_type != "Polygon" or part.is_empty:
            continue
        rings.append(part.exterior)
        rings.extend(part.interiors)
    if not rings:
        return None
    return Path.make_compound_path(
        *[Path(np.asarray(ring.coords)[:, :2], closed=True) for ring in rings]
    )


def _patch(path: Path, fill: Fill) -> PathPatch:
    if fill.hatch:
        return PathPatch(path, facecolor='none', edgecolor=fill.rgba, hatch=fill.hatch, linewidth=0)
    return PathPatch(path, facecolor=fill.rgba, edgecolor='none')


@dataclass(frozen=True)
class Drawable:
    """Handle to a batch that has been uploaded to a :class:`Canvas`."""

    canvas_id: int
    paths: Tuple[Tuple[Path, Fill], ...]

    def __len__(self) -> int:
        return len(self.paths)


class Canvas:
    """The one rendering context shapes are uploaded to and drawn on.

    Parameters
    ----------
    figsize : (float, float)
        Figure size in inches.
    dpi : int
        Output resolution.
    background : str
        Axes background colour.
    """

    def __init__(self, figsize: Tuple[float, float] = (10.0, 10.0), dpi: int = 100,
                 background: str = "#e8e8e8"):
        self.figure, self.ax = plt.subplots(figsize=figsize, dpi=dpi)
        self.ax.set_facecolor(background)
        self.ax.set_aspect('equal')
        self._owner = threading.get_ident()

    def _check_owner(self) -> None:
        if threading.get_ident() != self._owner:
            raise RuntimeError("Canvas used from a thread other than the one that created it")

    def upload(self, batch: ShapeBatch) -> Drawable:
        """Convert a shape batch into a drawable handle owned by this canvas."""
        self._check_owner()
        paths = []
        for fill, polygon in batch.items:
            path = polygon_to_path(polygon)
            if path is not None:
                paths.append((path, fill))
        return Drawable(id(self), tuple(paths))

    def redraw(self, drawable: Drawable) -> None:
        self._check_owner()
        if drawable.canvas_id != id(self):
            raise ValueError("drawable was uploaded to a different canvas")
        for path, fill in drawable.paths:
            self.ax.add_patch(_patch(path, fill))

    def draw_polygon(self, fill: Fill, polygon: BaseGeometry) -> None:
        self._check_owner()
        path = polygon_to_path(polygon)
        if path is not None:
            self.ax.add_patch(_patch(path, fill))

    def save(self, path: Union[str, FilePath]) -> None:
        self._check_owner()
        self.ax.autoscale_view()
        self.figure.savefig(path, bbox_inches='tight')

    def close(self) -> None:
        plt.close(self.figure)
