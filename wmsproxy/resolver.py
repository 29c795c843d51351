from __future__ import annotations

import io
import logging
import re
from dataclasses import dataclass
from typing import List, Optional

from PIL import Image

from common.geo import tile_to_bbox
from common.types import MAX_ZOOM, MIN_ZOOM, TileCoordinate
from common.utils import parse_bool
from wmsproxy.areas import HAZARDS, Area, AreaConfig
from wmsproxy.compositor import composite
from wmsproxy.errors import ClientError, GatewayError, NoTimestampAvailable, UpstreamError
from wmsproxy.timestamp_cache import TimestampCache
from wmsproxy.wms_client import WmsClient


log = logging.getLogger(__name__)

_INT_RE = re.compile(r"[+-]?[0-9]+", re.ASCII)


@dataclass
class TileResult:
    """Encoded tile plus what was actually rendered (for headers/logging)."""
    png: bytes
    tile: TileCoordinate
    area: Area
    timestamp: str
    alerts_applied: bool

    media_type = "image/png"


def parse_tile_path(path: str) -> TileCoordinate:
    """
    "/tiles/{z}/{x}/{y}.png" -> TileCoordinate.

    Only the segment count, the ".png" suffix and integer-ness are checked here;
    zoom range is validated separately.
    """
    parts = path.split("/")
    if len(parts) != 5 or parts[1] != "tiles" or not parts[4].endswith(".png"):
        raise ClientError("invalid tile path")
    fields = (parts[2], parts[3], parts[4][: -len(".png")])
    # optional sign + ASCII digits, nothing else
    if not all(_INT_RE.fullmatch(f) for f in fields):
        raise ClientError("invalid tile path")
    z, x, y = (int(f) for f in fields)
    return TileCoordinate(zoom=z, x=x, y=y)


def encode_png(img: Image.Image) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


class TileRequestResolver:
    """
    Single-pass handling of one tile request:

        parse path -> validate zoom -> resolve area -> resolve timestamp
          -> fetch base -> [fetch hazards] -> composite -> PNG

    Anything before the base fetch fails fast with ClientError (400). A failed
    base fetch aborts the request; a failed hazards fetch only drops the overlay.
    """

    def __init__(self, client: WmsClient, cache: TimestampCache, hazards: AreaConfig = HAZARDS):
        self.client = client
        self.cache = cache
        self.hazards = hazards

    # -------- tiles --------

    def resolve_tile(
        self,
        path: str,
        area: Optional[str] = None,
        alerts: Optional[str] = None,
        time: Optional[str] = None,
    ) -> TileResult:
        tile = parse_tile_path(path)
        if not (MIN_ZOOM <= tile.zoom <= MAX_ZOOM):
            raise ClientError("invalid zoom")
        area_ = Area.parse(area)
        show_alerts = parse_bool(alerts)

        timestamp = time or self.latest_timestamp(area_)
        bbox = tile_to_bbox(tile.x, tile.y, tile.zoom)
        log.info(
            "tile request",
            extra={"extra": {**tile.to_meta(), "area": area_.value, "time": timestamp, "alerts": show_alerts}},
        )

        img = self.client.fetch_tile(area_.config, bbox, timestamp)

        applied = False
        if show_alerts:
            try:
                hazards = self.client.fetch_tile(self.hazards, bbox, timestamp)
            except UpstreamError as e:
                log.warning("hazards overlay unavailable for %s, serving radar only: %s", tile.zxy, e)
            else:
                img = composite(img, hazards)
                applied = True

        return TileResult(
            png=encode_png(img),
            tile=tile,
            area=area_,
            timestamp=timestamp,
            alerts_applied=applied,
        )

    def latest_timestamp(self, area: Area) -> str:
        try:
            timestamps = self.cache.get_timestamps(area)
        except GatewayError as e:
            log.error("could not resolve latest timestamp for '%s': %s", area.value, e)
            raise NoTimestampAvailable() from e
        if not timestamps:
            raise NoTimestampAvailable()
        return timestamps[-1]

    # -------- frames --------

    def list_frames(self, area: Optional[str] = None) -> List[str]:
        """Most recent frame timestamps for an area (oldest first), as served by /frames."""
        area_ = Area.parse(area)
        return list(self.cache.get_timestamps(area_))
