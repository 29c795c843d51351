from __future__ import annotations

"""
WMS 1.3.0 adapter for the NCEP OpenGeo GeoServer.

Usage:
    client = WmsClient(timeout=15.0)
    img = client.fetch_tile(Area.CONUS.config, tile_to_bbox(79, 98, 8), "2025-06-01T12:00:00.000Z")
    # img -> PIL.Image (RGBA, 256x256)
    times = client.fetch_capabilities(Area.CONUS.config)
    # times -> ["2025-06-01T10:00:00.000Z", ..., "2025-06-01T12:00:00.000Z"] (ascending)
"""

import io
import logging
import xml.etree.ElementTree as ET
from typing import Dict, List, Optional
from urllib.parse import urlencode

import requests
from PIL import Image, UnidentifiedImageError

from common.types import TILE_SIZE, BoundingBox
from wmsproxy.areas import AreaConfig
from wmsproxy.errors import (
    CapabilitiesParseError,
    DecodeError,
    UpstreamStatusError,
    UpstreamUnavailable,
)


log = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 15.0

_GETMAP_PARAMS = {
    "SERVICE": "WMS",
    "VERSION": "1.3.0",
    "REQUEST": "GetMap",
    "FORMAT": "image/png",
    "TRANSPARENT": "true",
    "WIDTH": str(TILE_SIZE),
    "HEIGHT": str(TILE_SIZE),
    "CRS": "EPSG:3857",
    "STYLES": "",
}

_CAPABILITIES_PARAMS = {
    "service": "wms",
    "version": "1.3.0",
    "request": "GetCapabilities",
}


def _local(tag: str) -> str:
    # "{http://www.opengis.net/wms}Layer" -> "Layer"
    return tag.rsplit("}", 1)[-1]


def _child(elem: ET.Element, name: str) -> Optional[ET.Element]:
    for c in elem:
        if _local(c.tag) == name:
            return c
    return None


def parse_time_dimension(xml_bytes: bytes) -> List[str]:
    """
    Extract the timestamp list from a GetCapabilities document.

    Reads Capability/Layer/Layer/Dimension (the first sub-layer's dimension),
    ignoring XML namespaces, and splits its text on commas. Empty text gives [].
    """
    try:
        root = ET.fromstring(xml_bytes)
    except ET.ParseError as e:
        raise CapabilitiesParseError(f"capabilities is not valid XML: {e}") from e

    node: Optional[ET.Element] = root
    for name in ("Capability", "Layer", "Layer"):
        node = _child(node, name)
        if node is None:
            raise CapabilitiesParseError(f"capabilities missing <{name}> element")

    dims = [c for c in node if _local(c.tag) == "Dimension"]
    if not dims:
        raise CapabilitiesParseError("capabilities missing <Dimension> element")
    # Prefer the time dimension when a layer advertises several (e.g. elevation)
    dim = next((d for d in dims if (d.get("name") or "").lower() == "time"), dims[0])

    text = (dim.text or "").strip()
    return [t.strip() for t in text.split(",") if t.strip()]


class WmsClient:
    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT_S,
        session: Optional[requests.Session] = None,
        user_agent: Optional[str] = None,
    ):
        """
        Params:
            timeout: hard limit (seconds) applied to every upstream call
            session: optional requests.Session for connection reuse (shared across threads)
            user_agent: optional User-Agent header for upstream requests
        """
        self.timeout = float(timeout)
        self.session = session or requests.Session()
        if user_agent:
            self.session.headers["User-Agent"] = user_agent

    # ----------------------------
    # Public API
    # ----------------------------
    def build_getmap_params(
        self, area: AreaConfig, bbox: BoundingBox, timestamp: Optional[str] = None
    ) -> Dict[str, str]:
        params = dict(_GETMAP_PARAMS)
        params["LAYERS"] = area.layer_name
        params["BBOX"] = bbox.to_wms()
        if timestamp:
            params["TIME"] = timestamp
        return params

    def build_url(self, area: AreaConfig, bbox: BoundingBox, timestamp: Optional[str] = None) -> str:
        """Fully-qualified GetMap URL (no request performed); handy for logs and debugging."""
        return f"{area.base_url}?{urlencode(self.build_getmap_params(area, bbox, timestamp))}"

    def fetch_tile(
        self, area: AreaConfig, bbox: BoundingBox, timestamp: Optional[str] = None
    ) -> Image.Image:
        """
        GetMap one 256x256 transparent PNG for `bbox`.

        Raises:
            UpstreamUnavailable: transport error or timeout
            UpstreamStatusError: HTTP status other than 200
            DecodeError: body is not a decodable image
        """
        params = self.build_getmap_params(area, bbox, timestamp)
        r = self._get(area.base_url, params)
        try:
            img = Image.open(io.BytesIO(r.content))
            img.load()
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
            ctype = r.headers.get("Content-Type", "?")
            log.warning("GetMap %s returned undecodable body (%s, %d bytes)", area.layer_name, ctype, len(r.content))
            raise DecodeError(f"could not decode {area.layer_name} image: {e}") from e
        return img.convert("RGBA")

    def fetch_capabilities(self, area: AreaConfig) -> List[str]:
        """
        GetCapabilities for `area` and return its advertised timestamps in document
        order (the server lists them oldest first).

        Raises:
            UpstreamUnavailable, UpstreamStatusError, CapabilitiesParseError
        """
        r = self._get(area.base_url, dict(_CAPABILITIES_PARAMS))
        times = parse_time_dimension(r.content)
        log.debug("GetCapabilities %s: %d timestamps", area.layer_name, len(times))
        return times

    # ----------------------------
    # Transport
    # ----------------------------
    def _get(self, url: str, params: Dict[str, str]) -> requests.Response:
        try:
            r = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            log.warning("WMS request to %s failed: %s", url, e)
            raise UpstreamUnavailable(f"upstream request failed: {e}") from e
        if r.status_code != 200:
            body = r.text[:500]
            log.warning("WMS request to %s returned %s: %s", url, r.status_code, body[:200])
            raise UpstreamStatusError(r.status_code, body, url=url)
        return r
