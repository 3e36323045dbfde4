from __future__ import annotations

import base64
import io
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from .core_types import Dimensions

"""
Image decode/encode helpers and the pre-quantization normalizer
(portrait rotation and exact Lanczos resize).
"""

ImageLike = Union[Image.Image, np.ndarray]


def as_pil_image(image: ImageLike) -> Image.Image:
    """Wrap a uint8 (H,W,3|4) array as a PIL image; PIL images pass through."""
    if isinstance(image, Image.Image):
        return image
    arr = np.asarray(image)
    if arr.dtype != np.uint8 or arr.ndim != 3 or arr.shape[-1] not in (3, 4):
        raise TypeError("expected uint8 (H,W,3/4) image")
    return Image.fromarray(arr)


def _has_alpha(im: Image.Image) -> bool:
    return "A" in im.getbands() or "transparency" in im.info


def _decoded(im: Image.Image) -> Image.Image:
    im = ImageOps.exif_transpose(im)
    return im.convert("RGBA" if _has_alpha(im) else "RGB")


def load_image_bytes(data: bytes) -> Image.Image:
    """Decode an encoded image to an RGB or RGBA PIL image."""
    try:
        with Image.open(io.BytesIO(data)) as im0:
            im0.load()
            return _decoded(im0)
    except UnidentifiedImageError as exc:
        raise ValueError(f"cannot decode image: {exc}") from exc


def load_image_path(path: Path) -> Image.Image:
    """Decode an image file to an RGB or RGBA PIL image."""
    try:
        with Image.open(path) as im0:
            im0.load()
            return _decoded(im0)
    except UnidentifiedImageError as exc:
        raise ValueError(f"cannot decode image {path}: {exc}") from exc


def encode_png(image: Image.Image) -> bytes:
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


def png_data_url(image: Image.Image) -> str:
    """PNG-encode an image as a 'data:image/png;base64,...' URL."""
    enc = base64.b64encode(encode_png(image)).decode("ascii")
    return f"data:image/png;base64,{enc}"


# Normalizer


def rotate_if_portrait(image: Image.Image, auto_rotate: bool) -> Image.Image:
    """Rotate 90 degrees clockwise when auto_rotate is set and width < height."""
    if auto_rotate and image.width < image.height:
        return image.transpose(Image.Transpose.ROTATE_270)
    return image


def normalize(
    image: ImageLike, target_dim: Dimensions, auto_rotate: bool
) -> Image.Image:
    """
    Optionally rotate portrait images to landscape, then resize to exactly
    target_dim (width, height) with Lanczos. Aspect ratio is not kept.
    """
    im = rotate_if_portrait(as_pil_image(image), auto_rotate)
    width, height = int(target_dim[0]), int(target_dim[1])
    if im.size == (width, height):
        return im.copy()
    return im.resize((width, height), resample=Image.Resampling.LANCZOS)


__all__ = [
    "ImageLike",
    "as_pil_image",
    "load_image_bytes",
    "load_image_path",
    "encode_png",
    "png_data_url",
    "rotate_if_portrait",
    "normalize",
]
