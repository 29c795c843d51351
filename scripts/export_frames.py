#!/usr/bin/env python3
"""
Export one tile for every available radar frame (offline animation strip).

Writes {out}/{area}_{z}_{x}_{y}_{i:02d}.png, oldest frame first, using the same
WMS client + resolver as the gateway (no server needed).

Examples:
  python scripts/export_frames.py --tile 8/79/98 --out runtime/frames
  python scripts/export_frames.py --area alaska --tile 5/3/8 --alerts --out runtime/ak
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Tuple

from common.logging_setup import get_logger
from wmsproxy.areas import Area
from wmsproxy.config import load_config
from wmsproxy.errors import GatewayError
from wmsproxy.resolver import TileRequestResolver
from wmsproxy.timestamp_cache import TimestampCache
from wmsproxy.wms_client import WmsClient


log = get_logger("export_frames")


def parse_tile(s: str) -> Tuple[int, int, int]:
    parts = s.strip("/").split("/")
    if len(parts) != 3:
        raise argparse.ArgumentTypeError("tile must be z/x/y")
    try:
        z, x, y = (int(p) for p in parts)
    except ValueError:
        raise argparse.ArgumentTypeError("tile must be z/x/y integers") from None
    return z, x, y


def export_frames(
    resolver: TileRequestResolver,
    area: str,
    tile: Tuple[int, int, int],
    out_dir: Path,
    alerts: bool = False,
) -> List[Path]:
    z, x, y = tile
    frames = resolver.list_frames(area)
    out_dir.mkdir(parents=True, exist_ok=True)
    written: List[Path] = []
    for i, ts in enumerate(frames):
        res = resolver.resolve_tile(
            f"/tiles/{z}/{x}/{y}.png", area=area, alerts="true" if alerts else None, time=ts
        )
        fn = out_dir / f"{res.area.value}_{z}_{x}_{y}_{i:02d}.png"
        fn.write_bytes(res.png)
        written.append(fn)
        log.info("wrote %s (%s)", fn, ts)
    return written


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--area", default="conus", choices=[a.value for a in Area])
    ap.add_argument("--tile", type=parse_tile, required=True, help="z/x/y, e.g. 8/79/98")
    ap.add_argument("--alerts", action="store_true", help="Composite the hazards layer")
    ap.add_argument("--out", default="runtime/frames", help="Output directory")
    ap.add_argument("--config", default=None, help="YAML config (default config/params.yaml)")
    args = ap.parse_args()

    P = load_config(args.config)
    client = WmsClient(timeout=P["upstream"]["timeout_s"], user_agent=P["upstream"].get("user_agent"))
    cache = TimestampCache(client, ttl_s=P["cache"]["ttl_s"], frame_count=P["cache"]["frame_count"])
    resolver = TileRequestResolver(client, cache)

    try:
        written = export_frames(resolver, args.area, args.tile, Path(args.out), alerts=args.alerts)
    except GatewayError as e:
        raise SystemExit(f"export failed: {e.message}")

    print(f"Exported {len(written)} frames to {args.out}", file=sys.stderr)


if __name__ == "__main__":
    main()
