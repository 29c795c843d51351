from __future__ import annotations

import json
import logging
import os
import sys
import time
from typing import Optional


_ROUTED_TO_ROOT = ("uvicorn", "uvicorn.error", "uvicorn.access")


class JsonFormatter(logging.Formatter):
    """
    Single-line JSON log formatter:
      { "t": 169, "lvl": "INFO", "name": "wmsproxy.resolver", "msg": "text", "extra": {...} }
    """

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload = {
            "t": int(time.time() * 1000),
            "lvl": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        # Callers attach structured fields with extra={"extra": {...}}
        if hasattr(record, "extra") and isinstance(record.extra, dict):  # type: ignore[attr-defined]
            payload["extra"] = record.extra  # type: ignore[attr-defined]
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_logging(level: Optional[str] = None) -> None:
    """
    Configure root logger once with JSON formatting.
    Level precedence:
      - env LOG_LEVEL (e.g., DEBUG/INFO/WARNING/ERROR)
      - explicit `level` arg (usually from config/params.yaml)
      - default INFO
    """
    root = logging.getLogger()
    if getattr(root, "_wmsproxy_configured", False):  # idempotent
        return

    lvl_name = (os.environ.get("LOG_LEVEL") or level or "INFO").upper()
    lvl = getattr(logging, lvl_name, None)
    if not isinstance(lvl, int):
        lvl = logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())

    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(lvl)

    # uvicorn (run with log_config=None) logs through the root JSON handler
    for name in _ROUTED_TO_ROOT:
        lg = logging.getLogger(name)
        lg.handlers.clear()
        lg.propagate = True
    # one line per upstream connection is noise at INFO
    logging.getLogger("urllib3").setLevel(max(lvl, logging.WARNING))
    root._wmsproxy_configured = True  # type: ignore[attr-defined]


def get_logger(name: str) -> logging.Logger:
    """Get a module logger; ensures root is configured."""
    setup_logging()
    return logging.getLogger(name)
