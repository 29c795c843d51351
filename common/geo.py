from __future__ import annotations

import math

from common.types import TILE_SIZE, BoundingBox


# --- Spherical-Mercator (EPSG:3857) constants ---
_MERC_RADIUS_M = 6378137.0
_MERC_ORIGIN_X = -20037508.3427892
_MERC_ORIGIN_Y = 20037508.3427892


# -------------------------
# XYZ tile helpers
# -------------------------
def resolution_m_per_px(zoom: int, tile_size: int = TILE_SIZE) -> float:
    """Ground resolution (meters/pixel) of a web-mercator tile pyramid at `zoom`."""
    return (2.0 * math.pi * _MERC_RADIUS_M) / tile_size / math.pow(2, zoom)


def tile_span_m(zoom: int, tile_size: int = TILE_SIZE) -> float:
    """Edge length of one tile in meters at `zoom`."""
    return resolution_m_per_px(zoom, tile_size) * tile_size


def tile_to_bbox(x: int, y: int, zoom: int) -> BoundingBox:
    """
    Convert XYZ tile indices to an EPSG:3857 bounding box.

    The origin is the top-left corner of the world; x grows east, y grows south.
    NOTE: x/y are not range-checked. Indices outside [0, 2**zoom) give a box that
    is mathematically valid but lies off the map.
    """
    span = tile_span_m(zoom)
    min_x = _MERC_ORIGIN_X + x * span
    max_y = _MERC_ORIGIN_Y - y * span
    max_x = min_x + span
    min_y = max_y - span
    return BoundingBox(min_x=min_x, min_y=min_y, max_x=max_x, max_y=max_y)
