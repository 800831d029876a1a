"""Fit artwork onto the fixed-size now-playing canvas."""
from __future__ import annotations

from io import BytesIO
from typing import Tuple

from PIL import Image, ImageOps

from core.errors import CompositeError

BACKGROUND = (0, 0, 0, 255)


def fit_size(source: Tuple[int, int], target: Tuple[int, int]) -> Tuple[int, int]:
    """
    Largest size with the source aspect ratio that fits inside target.
    The constrained axis matches the target exactly.
    """
    src_w, src_h = source
    dst_w, dst_h = target
    if src_w * dst_h > src_h * dst_w:
        return dst_w, max(1, round(src_h * dst_w / src_w))
    return max(1, round(src_w * dst_h / src_h)), dst_h


def composite(image: Image.Image, target_width: int, target_height: int) -> Image.Image:
    """
    Scale ``image`` to fit ``target_width`` x ``target_height`` (Lanczos,
    aspect preserved, never cropped) and center it on an opaque black canvas.
    The result is always exactly the target size.
    """
    if target_width <= 0 or target_height <= 0:
        raise CompositeError(f"Invalid canvas size {target_width}x{target_height}")
    if image.width <= 0 or image.height <= 0:
        raise CompositeError(f"Degenerate source image {image.width}x{image.height}")

    # EXIF orientation first, so the fit uses the displayed size.
    source = ImageOps.exif_transpose(image).convert("RGBA")
    size = fit_size(source.size, (target_width, target_height))
    if size != source.size:
        source = source.resize(size, Image.LANCZOS)

    canvas = Image.new("RGBA", (target_width, target_height), BACKGROUND)
    x = (target_width - source.width) // 2
    y = (target_height - source.height) // 2
    canvas.alpha_composite(source, (x, y))
    return canvas


def encode_png(image: Image.Image) -> bytes:
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()
