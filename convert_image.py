#!/usr/bin/env python3
"""
convert_image.py
Reduce a photo to the panel palette and resize it to the panel raster.

Usage:
  python convert_image.py INPUT [OUTPUT] [--no-rotate] [--size WxH]
                          [--fallback #rrggbb] [--search kdtree|linear]
                          [--workers N] [--debug]

Input:
  Any Pillow-readable image. Alpha is dropped unless --fallback is given, in
  which case every pixel that is not fully opaque takes the fallback colour.

Output:
  PNG. If OUTPUT is omitted, writes <stem>_panel.png next to INPUT.
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path
from typing import Optional, Sequence

import numpy as np

from panel_quant.converter import PaletteConverter
from panel_quant.core_types import Dimensions, hex_to_rgb
from panel_quant.image_io import load_image_path
from panel_quant.palette_data import DEFAULT_CONFIG, ConverterConfig
from panel_quant.utils import (
    colour_usage_report,
    enable_line_buffered_stdout,
    error,
    format_seconds_compact,
    log,
    print_banner,
    print_config_line,
    warn,
)


def _parse_size(text: str) -> Dimensions:
    """Parse 'WxH' into (width, height)."""
    try:
        w_txt, h_txt = text.lower().split("x")
        width, height = int(w_txt), int(h_txt)
    except ValueError:
        raise argparse.ArgumentTypeError(f"size must be WxH, got {text!r}") from None
    if width <= 0 or height <= 0:
        raise argparse.ArgumentTypeError("size must be positive")
    return width, height


def _parse_hex(text: str):
    try:
        return hex_to_rgb(text if text.startswith("#") else f"#{text}")
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from None


def parse_cli_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """
    Parse CLI arguments.

    Returns:
      argparse.Namespace with:
        src: Path to the input image
        dst: optional Path for the PNG output
        rotate: bool, rotate portrait inputs to landscape
        size: (width, height) of the output raster
        fallback: optional RGB tuple for non-opaque pixels
        search: "kdtree" | "linear"
        workers: threads for colour lookups
        debug: bool for verbose output
    """
    parser = argparse.ArgumentParser(
        prog="convert_image",
        description="Reduce an image to the panel palette at the panel size.",
    )
    parser.add_argument("src", type=Path, help="Input image")
    parser.add_argument("dst", type=Path, nargs="?", default=None, help="Output PNG")
    parser.add_argument(
        "--no-rotate",
        dest="rotate",
        action="store_false",
        help="Keep portrait images upright instead of rotating them",
    )
    parser.add_argument(
        "--size",
        type=_parse_size,
        default=DEFAULT_CONFIG.dimensions,
        help="Output raster as WxH (default %(default)s)",
    )
    parser.add_argument(
        "--fallback",
        type=_parse_hex,
        default=None,
        help="Colour for pixels that are not fully opaque, e.g. #000000",
    )
    parser.add_argument(
        "--search",
        choices=["kdtree", "linear"],
        default="kdtree",
        help="Palette search strategy.",
    )
    parser.add_argument("--workers", type=int, default=1, help="Lookup threads")
    parser.add_argument("--debug", action="store_true", help="Verbose details")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point. Returns the process exit code."""
    enable_line_buffered_stdout()
    args = parse_cli_args(argv)

    src: Path = args.src
    if not src.is_file():
        error(f"not found: {src}")
        return 2

    config = ConverterConfig(DEFAULT_CONFIG.palette, args.size, DEFAULT_CONFIG.names)
    converter = PaletteConverter(
        config, search=args.search, workers=args.workers, debug=args.debug
    )
    dst: Path = args.dst or src.with_name(f"{src.stem}_panel.png")
    if dst.suffix.lower() != ".png":
        dst = dst.with_suffix(".png")

    print_banner(src.name)
    print_config_line(
        "convert",
        [
            ("Size", f"{config.dimensions[0]}x{config.dimensions[1]}"),
            ("Auto rotate", bool(args.rotate)),
            ("Palette", len(config.palette)),
            ("Search", args.search),
            ("Workers", args.workers),
        ],
        debug=args.debug,
    )

    t_start = time.perf_counter()
    try:
        img = load_image_path(src)
    except (ValueError, OSError) as exc:
        error(str(exc))
        return 2
    log(f"Loaded {img.width}x{img.height} ({img.mode})")

    if args.fallback is not None:
        if img.mode != "RGBA":
            warn("image has no alpha channel; --fallback has no effect")
        out = converter.process_alpha(img, args.rotate, args.fallback).convert("RGB")
    else:
        out = converter.process(img, args.rotate)

    out.save(dst, format="PNG")
    log(f"Wrote {dst.name} | size={out.width}x{out.height}")
    log("Colours used:")
    for hex_code, name, count in colour_usage_report(
        np.asarray(out), config.name_of()
    ):
        log(f"  {hex_code}  {name}: {count:,}")
    log(f"Total time {format_seconds_compact(time.perf_counter() - t_start)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
