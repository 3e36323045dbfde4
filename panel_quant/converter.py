from __future__ import annotations

"""
Panel converter: normalize -> per-pixel nearest palette colour -> raster.

Exports:
  PaletteConverter(config=DEFAULT_CONFIG, *, search="kdtree", workers=1, debug=False)
    .process(image, auto_rotate)                    -> RGB PIL image
    .process_alpha(image, auto_rotate, fallback)    -> RGBA PIL image, alpha 255
    .convert(rgb)                                   uint8 [H,W,3], in place
    .convert_alpha(rgba, fallback)                  uint8 [H,W,4], in place
  ImageResult(img, name, base64)
  convert_bytes(converter, data, name, auto_rotate) -> ImageResult

Notes:
  The converter holds no mutable state after __init__ and can be shared
  between threads. Each distinct colour is looked up once per call and
  scattered back to its pixels; workers > 1 splits those lookups over a
  thread pool. Neither changes the result.
"""

import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
from PIL import Image

from .core_types import Dimensions, U8Image, assert_u8_image, coerce_to_rgb_tuple
from .image_io import ImageLike, load_image_bytes, normalize, png_data_url
from .palette_data import DEFAULT_CONFIG, ConverterConfig
from .palette_index import PaletteIndex
from .utils import debug_log, format_seconds_compact, split_into_parts

# below this many distinct colours the pool costs more than it saves
_MIN_ROWS_PER_WORKER = 64


class PaletteConverter:
    def __init__(
        self,
        config: ConverterConfig = DEFAULT_CONFIG,
        *,
        search: str = "kdtree",
        workers: int = 1,
        debug: bool = False,
    ) -> None:
        self._config = config
        self._index = PaletteIndex(config.palette, search=search)
        self._workers = max(1, int(workers))
        self._debug = debug

    @classmethod
    def from_palette(
        cls,
        palette: Sequence[Sequence[int]],
        dimensions: Dimensions,
        **kwargs,
    ) -> "PaletteConverter":
        return cls(ConverterConfig(tuple(palette), dimensions), **kwargs)

    @property
    def config(self) -> ConverterConfig:
        return self._config

    @property
    def dimensions(self) -> Dimensions:
        return self._config.dimensions

    @property
    def index(self) -> PaletteIndex:
        return self._index

    # pixel mapping

    def _map_rows(self, rows: U8Image) -> U8Image:
        """Nearest palette colour for uint8 [N,3] rows, one lookup per distinct colour."""
        if rows.shape[0] == 0:
            return rows.copy()
        uniques, inverse = np.unique(rows, axis=0, return_inverse=True)
        inverse = inverse.reshape(-1)

        n = int(uniques.shape[0])
        workers = min(self._workers, max(1, n // _MIN_ROWS_PER_WORKER))
        if workers <= 1:
            mapped = self._index.nearest_many(uniques)
        else:
            spans = split_into_parts(n, workers)
            with ThreadPoolExecutor(max_workers=workers) as pool:
                futures = [
                    pool.submit(self._index.nearest_many, uniques[s:e])
                    for s, e in spans
                ]
                mapped = np.vstack([f.result() for f in futures])

        if self._debug:
            debug_log(f"distinct colours: {n:,}  workers: {workers}")
        return mapped[inverse]

    def convert(self, rgb: U8Image) -> U8Image:
        """Replace every pixel of a uint8 [H,W,3] array with its nearest palette colour."""
        assert_u8_image(rgb, 3)
        rgb[...] = self._map_rows(rgb.reshape(-1, 3)).reshape(rgb.shape)
        return rgb

    def convert_alpha(
        self, rgba: U8Image, fallback_rgb: Sequence[int]
    ) -> U8Image:
        """
        Quantize fully opaque pixels of a uint8 [H,W,4] array; every other
        pixel becomes fallback_rgb. Alpha is set to 255 throughout.
        """
        assert_u8_image(rgba, 4)
        fallback = np.array(coerce_to_rgb_tuple(fallback_rgb), dtype=np.uint8)
        opaque = rgba[..., 3] == 255
        if np.any(opaque):
            rgba[opaque, :3] = self._map_rows(rgba[opaque, :3])
        rgba[~opaque, :3] = fallback
        rgba[..., 3] = 255
        return rgba

    # full pipeline

    def process(self, image: ImageLike, auto_rotate: bool) -> Image.Image:
        """Normalize to the configured size, drop alpha, quantize. Returns RGB."""
        t0 = time.perf_counter()
        im = normalize(image, self.dimensions, auto_rotate).convert("RGB")
        if self._debug:
            debug_log(f"resized: {im.width}x{im.height}")
        arr = np.array(im, dtype=np.uint8)
        self.convert(arr)
        if self._debug:
            debug_log(
                f"converted: {arr.shape[1]}x{arr.shape[0]} in "
                f"{format_seconds_compact(time.perf_counter() - t0)}"
            )
        return Image.fromarray(arr)

    def process_alpha(
        self, image: ImageLike, auto_rotate: bool, fallback_rgb: Sequence[int]
    ) -> Image.Image:
        """Normalize keeping alpha, then convert_alpha. Returns RGBA, alpha 255."""
        im = normalize(image, self.dimensions, auto_rotate).convert("RGBA")
        if self._debug:
            debug_log(f"resized: {im.width}x{im.height}")
        arr = np.array(im, dtype=np.uint8)
        self.convert_alpha(arr, fallback_rgb)
        return Image.fromarray(arr)


@dataclass(frozen=True)
class ImageResult:
    """A converted image with its display name and PNG data URL."""

    img: Image.Image
    name: str
    base64: str

    @classmethod
    def from_image(cls, img: Image.Image, name: str) -> "ImageResult":
        return cls(img=img, name=name, base64=png_data_url(img))


def convert_bytes(
    converter: PaletteConverter,
    data: bytes,
    name: str,
    auto_rotate: bool = True,
    fallback_rgb: Optional[Sequence[int]] = None,
) -> ImageResult:
    """
    Decode encoded image bytes and run them through the converter.
    With fallback_rgb set, non-opaque pixels take that colour instead of
    having their alpha dropped.
    """
    img = load_image_bytes(data)
    if fallback_rgb is None:
        out = converter.process(img, auto_rotate)
    else:
        out = converter.process_alpha(img, auto_rotate, fallback_rgb)
    return ImageResult.from_image(out, name)


__all__ = ["PaletteConverter", "ImageResult", "convert_bytes"]
