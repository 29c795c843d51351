from __future__ import annotations

"""
Closed error taxonomy for the tile gateway.

Every failure raised by the gateway is a GatewayError carrying the HTTP status it
maps to and a short machine-readable `kind`. The server turns these into
{"error": kind, "detail": message} JSON responses.
"""

from typing import Optional


class GatewayError(Exception):
    status_code = 500
    kind = "gateway_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# -------- client errors (400) --------

class ClientError(GatewayError):
    """Malformed tile path, zoom out of range, or unknown area. No upstream call is made."""
    status_code = 400
    kind = "bad_request"


# -------- upstream errors (500) --------

class UpstreamError(GatewayError):
    status_code = 500
    kind = "upstream_error"


class UpstreamUnavailable(UpstreamError):
    """Transport failure: DNS, connect, TLS, or the client timeout."""
    kind = "upstream_unavailable"


class UpstreamStatusError(UpstreamError):
    kind = "upstream_status"

    def __init__(self, code: int, body: str = "", url: Optional[str] = None):
        super().__init__(f"WMS server returned status {code}")
        self.code = code
        self.body = body
        self.url = url


class DecodeError(UpstreamError):
    """Upstream answered 200 but the body is not a decodable image."""
    kind = "decode_error"


class CapabilitiesParseError(UpstreamError):
    """GetCapabilities response is not XML or lacks the Capability/Layer/Layer/Dimension path."""
    kind = "capabilities_parse_error"


# -------- resolution errors (500) --------

class NoTimestampAvailable(GatewayError):
    kind = "no_timestamp"

    def __init__(self, message: str = "no timestamp available"):
        super().__init__(message)
