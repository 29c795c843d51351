from __future__ import annotations

from PIL import Image


def composite(base: Image.Image, overlay: Image.Image) -> Image.Image:
    """
    Alpha-over `overlay` onto `base` and return a new RGBA image of base's size.

    The base is copied as-is (its own alpha included), then each overlay pixel is
    blended with out = overlay * a + base * (1 - a). Both layers are normally
    256x256 renders of the same bbox; if the overlay differs in size it is
    cropped to base's bounds and any uncovered area counts as transparent.
    """
    out = Image.new("RGBA", base.size)
    out.paste(base.convert("RGBA"), (0, 0))

    top = overlay.convert("RGBA")
    if top.size != out.size:
        top = top.crop((0, 0, out.width, out.height))
    return Image.alpha_composite(out, top)
