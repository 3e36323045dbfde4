"""
panel_quant package.

Purpose:
  Reduce photos to a small fixed palette for low-colour LED / flip-dot panels.
  See convert_image.py for the CLI.

Public API:
  PaletteConverter : normalize + quantize pipeline (process, process_alpha, convert, convert_alpha).
  PaletteIndex     : nearest palette colour under CIEDE2000 (k-d tree or linear scan).
  ConverterConfig  : palette + output size; DEFAULT_CONFIG is the 18-colour 87x60 panel.
  normalize        : portrait rotation and exact Lanczos resize.
  colour_convert   : rgb_to_lab, delta_e2000_pair, etc.

Quick start:
  from panel_quant import PaletteConverter, load_image_path
  out = PaletteConverter().process(load_image_path(path), auto_rotate=True)
"""

__version__ = "0.1.0"

from . import colour_convert
from . import core_types
from . import palette_data
from . import utils

from .converter import ImageResult, PaletteConverter, convert_bytes
from .image_io import load_image_bytes, load_image_path, normalize
from .palette_data import DEFAULT_CONFIG, ConverterConfig
from .palette_index import KdTree, PaletteIndex, PaletteIndexError

__all__ = [
    "__version__",
    "colour_convert",
    "core_types",
    "palette_data",
    "utils",
    "PaletteConverter",
    "ImageResult",
    "convert_bytes",
    "PaletteIndex",
    "PaletteIndexError",
    "KdTree",
    "ConverterConfig",
    "DEFAULT_CONFIG",
    "normalize",
    "load_image_bytes",
    "load_image_path",
]
