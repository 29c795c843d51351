"""
Unit tests for YAML configuration loading
"""

import pytest
import os
import sys
from unittest.mock import patch

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.append(project_root)

from wmsproxy.config import DEFAULTS, load_config


class TestLoadConfig:
    """Test cases for load_config"""

    def test_missing_file_gives_defaults(self, tmp_path):
        with patch.dict(os.environ, {}, clear=True):
            cfg = load_config(str(tmp_path / "nope.yaml"))
        assert cfg == DEFAULTS
        assert cfg is not DEFAULTS

    def test_partial_override_merges(self, tmp_path):
        p = tmp_path / "params.yaml"
        p.write_text("cache:\n  ttl_s: 60\nupstream:\n  timeout_s: 5\n")
        with patch.dict(os.environ, {}, clear=True):
            cfg = load_config(str(p))
        assert cfg["cache"] == {"ttl_s": 60, "frame_count": 12}
        assert cfg["upstream"]["timeout_s"] == 5
        assert cfg["upstream"]["user_agent"] == "wmsproxy/1.0"
        assert cfg["server"]["port"] == 8080

    def test_env_path_and_port(self, tmp_path):
        p = tmp_path / "alt.yaml"
        p.write_text("server:\n  port: 9000\n")
        with patch.dict(os.environ, {"WMSPROXY_CONFIG": str(p)}, clear=True):
            assert load_config()["server"]["port"] == 9000
        with patch.dict(os.environ, {"WMSPROXY_CONFIG": str(p), "PORT": "8181"}, clear=True):
            assert load_config()["server"]["port"] == 8181

    def test_non_mapping_rejected(self, tmp_path):
        p = tmp_path / "bad.yaml"
        p.write_text("- just\n- a list\n")
        with pytest.raises(ValueError):
            load_config(str(p))

    def test_shipped_params_file(self):
        cfg = load_config(os.path.join(project_root, "config", "params.yaml"))
        assert cfg["cache"]["frame_count"] == 12
        assert cfg["upstream"]["timeout_s"] == 15.0
