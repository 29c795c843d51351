"""
wmsproxy: XYZ tile gateway over NOAA WMS radar

- Serves /tiles/{z}/{x}/{y}.png (PNG bytes) rendered by an upstream WMS GetMap
- Optional hazard (watch/warning) overlay composited on top (?alerts=true)
- Serves /frames (JSON list of the most recent radar timestamps, TTL-cached)
- /health for liveness + cache stats

Run:
    python -m wmsproxy.server
    uvicorn wmsproxy.server:app --port 8080
"""
