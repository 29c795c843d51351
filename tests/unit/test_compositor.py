"""
Unit tests for two-layer alpha compositing
"""

import pytest
import numpy as np
import os
import sys
from PIL import Image

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.append(project_root)

from wmsproxy.compositor import composite


def _radar_like(size=(256, 256)) -> Image.Image:
    """Semi-transparent random pixels, like a sparse reflectivity render"""
    rng = np.random.default_rng(42)
    arr = rng.integers(0, 256, size=(size[1], size[0], 4), dtype=np.uint8)
    return Image.fromarray(arr, "RGBA")


class TestComposite:
    """Test cases for composite()"""

    def test_transparent_overlay_is_identity(self):
        """A fully transparent overlay leaves the base pixel-equal"""
        base = _radar_like()
        overlay = Image.new("RGBA", base.size, (255, 0, 0, 0))
        out = composite(base, overlay)
        assert out.mode == "RGBA"
        assert out.size == base.size
        assert np.array_equal(np.asarray(out), np.asarray(base))

    def test_opaque_overlay_replaces(self):
        """An opaque overlay wins everywhere"""
        base = _radar_like()
        overlay = Image.new("RGBA", base.size, (10, 20, 30, 255))
        out = np.asarray(composite(base, overlay))
        assert (out == np.array([10, 20, 30, 255], dtype=np.uint8)).all()

    def test_half_alpha_blend(self):
        """50% red over opaque blue mixes channels"""
        base = Image.new("RGBA", (4, 4), (0, 0, 255, 255))
        overlay = Image.new("RGBA", (4, 4), (255, 0, 0, 128))
        r, g, b, a = composite(base, overlay).getpixel((1, 1))
        assert r == pytest.approx(128, abs=1)
        assert g == 0
        assert b == pytest.approx(127, abs=1)
        assert a == 255

    def test_does_not_mutate_inputs(self):
        base = Image.new("RGBA", (8, 8), (0, 0, 255, 255))
        overlay = Image.new("RGBA", (8, 8), (255, 0, 0, 255))
        composite(base, overlay)
        assert base.getpixel((0, 0)) == (0, 0, 255, 255)

    def test_rgb_base_is_promoted(self):
        """Non-RGBA base (e.g. palette PNG decoded as RGB) still composites"""
        base = Image.new("RGB", (8, 8), (0, 255, 0))
        overlay = Image.new("RGBA", (8, 8), (0, 0, 0, 0))
        out = composite(base, overlay)
        assert out.mode == "RGBA"
        assert out.getpixel((3, 3)) == (0, 255, 0, 255)

    def test_smaller_overlay_cropped_to_base(self):
        """Mismatched sizes keep base bounds; uncovered area is untouched"""
        base = Image.new("RGBA", (8, 8), (0, 0, 255, 255))
        overlay = Image.new("RGBA", (4, 4), (255, 0, 0, 255))
        out = composite(base, overlay)
        assert out.size == (8, 8)
        assert out.getpixel((1, 1)) == (255, 0, 0, 255)
        assert out.getpixel((6, 6)) == (0, 0, 255, 255)
