from __future__ import annotations

"""
Shared utilities for panel_quant.

Includes time formatting, a colour usage report, row/chunk partitioning for
threaded lookups, and tidy print-based logging.
"""

import sys
from typing import Any, Iterable, List, Mapping, Tuple

import numpy as np

from .core_types import U8Image, rgb_to_hex


#  Time formatting


def format_seconds_compact(seconds: float) -> str:
    """Human-friendly seconds: '<ms>ms', '<s>s', or 'Mm Ss'."""
    if seconds < 1.0:
        return f"{seconds * 1000.0:.1f}ms"
    if seconds < 60.0:
        return f"{seconds:.3f}s"
    minutes = int(seconds // 60)
    return f"{minutes}m {seconds - 60 * minutes:.1f}s"


# Reports / partitioning


def colour_usage_report(
    mapped_rgb: U8Image, name_of: Mapping[str, str]
) -> List[Tuple[str, str, int]]:
    """
    Count every colour in an (H,W,3|4) image.

    Returns a list of (hex, name, count) sorted by count descending.
    """
    flat = np.asarray(mapped_rgb)[..., :3].reshape(-1, 3)
    if flat.shape[0] == 0:
        return []
    uniques, counts = np.unique(flat, axis=0, return_counts=True)
    report: List[Tuple[str, str, int]] = []
    for rgb_row, count in sorted(zip(uniques, counts), key=lambda x: -int(x[1])):
        hex_str = rgb_to_hex((int(rgb_row[0]), int(rgb_row[1]), int(rgb_row[2])))
        report.append((hex_str, name_of.get(hex_str, "?"), int(count)))
    return report


def split_into_parts(length: int, parts: int) -> List[Tuple[int, int]]:
    """Partition range [0, length) into ~parts contiguous [start, end) spans."""
    parts = max(1, int(parts))
    step = max(1, (length + parts - 1) // parts)
    return [(start, min(start + step, length)) for start in range(0, length, step)]


#  CLI output


def enable_line_buffered_stdout() -> None:
    """
    Enable line-buffered stdout when supported.
    Keeps log lines in order with stderr in terminals that expose .reconfigure().
    """
    reconfig = getattr(sys.stdout, "reconfigure", None)
    if callable(reconfig):
        reconfig(line_buffering=True, write_through=True)


# Pretty logging


def format_bool_on_off(value: Any) -> str:
    """Pretty boolean: 'on'/'off' for bools; str(value) otherwise."""
    if isinstance(value, bool):
        return "on" if value else "off"
    return str(value)


def format_number_compact(value: Any) -> str:
    """Pretty number: 1,234 style for ints; compact for floats; passthrough otherwise."""
    if isinstance(value, int):
        return f"{value:,}"
    if isinstance(value, float):
        text = f"{value:.3f}".rstrip("0").rstrip(".")
        return text
    return str(value)


def key_value_pairs_to_string(
    pairs: Iterable[Tuple[str, Any]], sep: str = "  ", eq: str = ": "
) -> str:
    """
    Format (name, value) pairs as 'Name: value' blocks separated by sep.
    Uses format_bool_on_off / format_number_compact for readability.
    """
    out: List[str] = []
    for name, value in pairs:
        display = (
            format_bool_on_off(value)
            if isinstance(value, bool)
            else format_number_compact(value)
        )
        out.append(f"{name}{eq}{display}")
    return sep.join(out)


def print_config_line(
    section: str, pairs: Iterable[Tuple[str, Any]], debug: bool
) -> None:
    """
    Emit a single human-readable config line, e.g.:
      [convert] Size: 87x60  Auto rotate: on  Palette: 18  Search: kdtree
    Routes to debug_log() when debug=True, else to log().
    """
    line = f"[{section}] {key_value_pairs_to_string(pairs)}"
    (debug_log if debug else log)(line)


def print_banner(title: str) -> None:
    """Section banner."""
    print(f"\n=== {title} ===", flush=True)


def log(message: str) -> None:
    """Plain log line."""
    print(message, flush=True)


def debug_log(message: str) -> None:
    """Debug log line."""
    print(f"[debug] {message}", flush=True)


def warn(message: str) -> None:
    """Warning log line."""
    print(f"[warn] {message}", flush=True)


def error(message: str) -> None:
    """Error log line to stderr."""
    print(f"[error] {message}", file=sys.stderr, flush=True)


__all__ = [
    "format_seconds_compact",
    "colour_usage_report",
    "split_into_parts",
    "enable_line_buffered_stdout",
    "format_bool_on_off",
    "format_number_compact",
    "key_value_pairs_to_string",
    "print_config_line",
    "print_banner",
    "log",
    "debug_log",
    "warn",
    "error",
]
