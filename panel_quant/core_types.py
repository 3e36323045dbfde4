from __future__ import annotations

"""
Core type aliases and small helpers shared across the package.
"""

from typing import Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

# Basic aliases

RGBTuple = Tuple[int, int, int]
HexStr = str
Dimensions = Tuple[int, int]  # (width, height)

U8Image = NDArray[np.uint8]  # (H, W, 3) or (H, W, 4)
Lab = NDArray[np.float32]  # (..., 3) CIE Lab


# Small helpers


def rgb_to_hex(rgb: RGBTuple) -> HexStr:
    """RGB tuple to lowercase hex string '#rrggbb'."""
    return f"#{rgb[0]:02x}{rgb[1]:02x}{rgb[2]:02x}"


def hex_to_rgb(hex_str: str) -> RGBTuple:
    """Parse '#rgb' or '#rrggbb' (case-insensitive) into an RGB tuple."""
    s = hex_str.strip().lower()
    if not s.startswith("#"):
        raise ValueError("hex must start with '#'")
    if len(s) == 4:
        r, g, b = s[1], s[2], s[3]
        s = f"#{r}{r}{g}{g}{b}{b}"
    if len(s) != 7:
        raise ValueError("hex must be '#rrggbb' or '#rgb'")
    try:
        return (int(s[1:3], 16), int(s[3:5], 16), int(s[5:7], 16))
    except ValueError:
        raise ValueError(f"invalid hex digits in {hex_str!r}") from None


def coerce_to_rgb_tuple(value: Union[Sequence[int], NDArray[np.generic]]) -> RGBTuple:
    """
    Coerce a 3-length sequence or array to an (int, int, int) RGB tuple.
    Values outside 0..255 are rejected.
    """
    if isinstance(value, np.ndarray):
        value = value.reshape(-1).tolist()
    if len(value) != 3:
        raise ValueError(f"expected 3 channels, got {len(value)}")
    rgb = (int(value[0]), int(value[1]), int(value[2]))
    if any(c < 0 or c > 255 for c in rgb):
        raise ValueError(f"channel out of range 0..255: {rgb}")
    return rgb


def assert_u8_image(image: np.ndarray, channels: int) -> U8Image:
    """Validate a uint8 (H,W,channels) image and return it typed as U8Image."""
    if image.dtype != np.uint8 or image.ndim != 3 or image.shape[-1] != channels:
        raise TypeError(f"expected uint8 (H,W,{channels}) image")
    return image  # type: ignore[return-value]


__all__ = [
    # aliases / types
    "RGBTuple",
    "HexStr",
    "Dimensions",
    "U8Image",
    "Lab",
    # helpers
    "rgb_to_hex",
    "hex_to_rgb",
    "coerce_to_rgb_tuple",
    "assert_u8_image",
]
