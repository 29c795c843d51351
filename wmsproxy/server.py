from __future__ import annotations

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import uvicorn
from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from common.logging_setup import setup_logging
from common.utils import iso_now_ms
from wmsproxy.areas import Area
from wmsproxy.config import load_config
from wmsproxy.errors import GatewayError
from wmsproxy.resolver import TileRequestResolver
from wmsproxy.timestamp_cache import TimestampCache
from wmsproxy.wms_client import WmsClient


log = logging.getLogger(__name__)


def _gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    if exc.status_code >= 500:
        log.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        log.info("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return JSONResponse({"error": exc.kind, "detail": exc.message}, status_code=exc.status_code)


def create_app(config: Optional[Dict[str, Any]] = None, client: Optional[WmsClient] = None) -> FastAPI:
    """
    Build the gateway app. One WmsClient, TimestampCache and resolver are created
    here and shared by every request through app.state.

    Handlers are plain `def` functions, so each request runs on its own worker
    thread and may block on the upstream for up to upstream.timeout_s.
    """
    P = config if config is not None else load_config()
    setup_logging(P["logging"].get("level"))

    up = P["upstream"]
    client = client or WmsClient(timeout=up["timeout_s"], user_agent=up.get("user_agent"))
    cache = TimestampCache(client, ttl_s=P["cache"]["ttl_s"], frame_count=P["cache"]["frame_count"])

    app = FastAPI(title="wmsproxy", version="1.0.0")
    app.state.config = P
    app.state.cache = cache
    app.state.resolver = TileRequestResolver(client, cache)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=P["server"].get("cors_origins", ["*"]),
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.add_exception_handler(GatewayError, _gateway_error_handler)

    @app.get("/health")
    def health(request: Request):
        return {
            "status": "ok",
            "time": iso_now_ms(),
            "areas": [a.value for a in Area],
            "cache": request.app.state.cache.stats(),
        }

    @app.get("/frames")
    def frames(request: Request, area: Optional[str] = Query(None)):
        """JSON list of the most recent (up to 12) frame timestamps for `area`."""
        return request.app.state.resolver.list_frames(area)

    @app.get("/tiles/{tile_path:path}")
    def tiles(
        request: Request,
        tile_path: str,
        area: Optional[str] = Query(None),
        alerts: Optional[str] = Query(None),
        time: Optional[str] = Query(None),
    ):
        """
        Return a 256x256 PNG for /tiles/{z}/{x}/{y}.png.

        Query:
          area   conus|alaska|hawaii|carib|guam (default conus, case-insensitive)
          alerts true -> composite the NWS hazards layer on top (best effort)
          time   ISO-8601 frame time; latest available frame when omitted
        """
        result = request.app.state.resolver.resolve_tile(
            f"/tiles/{tile_path}", area=area, alerts=alerts, time=time
        )
        headers = {
            "Cache-Control": "public, max-age=60",
            # header values must be latin-1; `time` is caller-supplied
            "X-Frame-Time": quote(result.timestamp, safe=":+-._~,/"),
        }
        return Response(content=result.png, media_type=result.media_type, headers=headers)

    return app


app = create_app()


# -------- local dev entrypoint --------
if __name__ == "__main__":
    server_cfg = app.state.config["server"]
    log.info("wmsproxy started on %s", server_cfg["port"])
    uvicorn.run(app, host=server_cfg["host"], port=int(server_cfg["port"]), log_config=None)
