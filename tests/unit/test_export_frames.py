"""
Unit tests for scripts/export_frames.py
"""

import pytest
import argparse
import os
import sys
from unittest.mock import Mock

from PIL import Image

# Add project root + scripts to path
project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.append(project_root)
sys.path.append(os.path.join(project_root, "scripts"))

from export_frames import export_frames, parse_tile
from wmsproxy.resolver import TileRequestResolver


class TestExportFrames:
    """Test cases for the frame export helper"""

    def test_parse_tile(self):
        assert parse_tile("8/79/98") == (8, 79, 98)
        with pytest.raises(argparse.ArgumentTypeError):
            parse_tile("8/79")
        with pytest.raises(argparse.ArgumentTypeError):
            parse_tile("8/x/98")

    def test_writes_one_png_per_frame(self, tmp_path):
        client = Mock()
        client.fetch_tile.return_value = Image.new("RGBA", (256, 256), (0, 0, 0, 0))
        cache = Mock()
        cache.get_timestamps.return_value = ("t0", "t1", "t2")
        resolver = TileRequestResolver(client, cache)

        written = export_frames(resolver, "carib", (6, 19, 28), tmp_path / "out")

        assert [p.name for p in written] == [
            "carib_6_19_28_00.png",
            "carib_6_19_28_01.png",
            "carib_6_19_28_02.png",
        ]
        assert all(p.exists() for p in written)
        assert [c.args[2] for c in client.fetch_tile.call_args_list] == ["t0", "t1", "t2"]
