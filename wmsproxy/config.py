from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


DEFAULT_CONFIG_PATH = "config/params.yaml"

DEFAULTS: Dict[str, Any] = {
    "server": {"host": "0.0.0.0", "port": 8080, "cors_origins": ["*"]},
    "upstream": {"timeout_s": 15.0, "user_agent": "wmsproxy/1.0"},
    "cache": {"ttl_s": 300.0, "frame_count": 12},
    "logging": {"level": "INFO"},
}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    out = copy.deepcopy(base)
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load gateway settings from YAML, merged over DEFAULTS.

    Path precedence: explicit `path`, env WMSPROXY_CONFIG, config/params.yaml.
    A missing file is not an error (defaults are used). Env PORT overrides server.port.
    """
    path = path or os.environ.get("WMSPROXY_CONFIG") or DEFAULT_CONFIG_PATH
    loaded: Dict[str, Any] = {}
    if Path(path).exists():
        with open(path, "r") as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f"{path}: top level must be a mapping")
    cfg = _deep_merge(DEFAULTS, loaded)

    port = os.environ.get("PORT")
    if port:
        cfg["server"]["port"] = int(port)
    return cfg
