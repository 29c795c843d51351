from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Tuple


TILE_SIZE = 256
MIN_ZOOM = 0
MAX_ZOOM = 22


@dataclass(frozen=True, slots=True)
class TileCoordinate:
    """
    XYZ tile address.

    Attributes:
        zoom: pyramid level, valid range [MIN_ZOOM, MAX_ZOOM] (checked by the resolver).
        x: column, 0 at the antimeridian, increasing eastward.
        y: row, 0 at the top of the world, increasing southward.
    """
    zoom: int
    x: int
    y: int

    @property
    def zxy(self) -> Tuple[int, int, int]:
        return (self.zoom, self.x, self.y)

    def to_meta(self) -> Dict[str, Any]:
        return {"z": self.zoom, "x": self.x, "y": self.y}


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """
    Tile extent in EPSG:3857 (spherical-Mercator) meters.

    Invariant: min_x < max_x and min_y < max_y.
    """
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.min_x, self.min_y, self.max_x, self.max_y)

    def to_wms(self) -> str:
        """WMS 1.3.0 BBOX value: "minX,minY,maxX,maxY" with 6 decimals."""
        return ",".join(f"{v:.6f}" for v in self.as_tuple())
