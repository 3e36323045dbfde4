from __future__ import annotations

"""
Palette definitions and converter configuration.

Exports:
  PALETTE: list[tuple[str, str]]  # [(hex, name), ...]
  DIMENSIONS: (width, height) of the panel raster
  ConverterConfig(palette, dimensions, names)
  DEFAULT_CONFIG: ConverterConfig built from PALETTE and DIMENSIONS
  build_palette(hex_name_pairs=PALETTE) -> (rgbs, names)
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from .core_types import (
    Dimensions,
    RGBTuple,
    coerce_to_rgb_tuple,
    hex_to_rgb,
    rgb_to_hex,
)


# Panel palette. Black appears twice; entries are addressed by position.
PALETTE: List[Tuple[str, str]] = [
    ("#000000", "Black"),
    ("#000000", "Black"),
    ("#ffffff", "White"),
    ("#ff0000", "Red"),
    ("#ff7c7b", "Light Red"),
    ("#780002", "Dark Red"),
    ("#0a0dff", "Blue"),
    ("#7d86ff", "Light Blue"),
    ("#03007a", "Dark Blue"),
    ("#00ff0a", "Green"),
    ("#96ff9a", "Light Green"),
    ("#007304", "Dark Green"),
    ("#ffe800", "Yellow"),
    ("#fff58c", "Light Yellow"),
    ("#6e5e00", "Dark Yellow"),
    ("#ff6300", "Orange"),
    ("#ffb383", "Light Orange"),
    ("#713712", "Brown"),
]

DIMENSIONS: Dimensions = (87, 60)


def build_palette(
    hex_name_pairs: Sequence[Tuple[str, str]] = PALETTE,
) -> Tuple[Tuple[RGBTuple, ...], Tuple[str, ...]]:
    """
    Convert a list of (hex, name) into parallel tuples of RGB entries and names.
    Order and duplicates are kept as given.
    """
    rgbs = tuple(hex_to_rgb(hx) for hx, _ in hex_name_pairs)
    names = tuple(name for _, name in hex_name_pairs)
    return rgbs, names


@dataclass(frozen=True)
class ConverterConfig:
    """Palette and output raster size for one converter."""

    palette: Tuple[RGBTuple, ...]
    dimensions: Dimensions = DIMENSIONS
    names: Tuple[str, ...] = field(default=())

    def __post_init__(self) -> None:
        palette = tuple(coerce_to_rgb_tuple(c) for c in self.palette)
        if not palette:
            raise ValueError("palette must contain at least one colour")
        width, height = (int(v) for v in self.dimensions)
        if width <= 0 or height <= 0:
            raise ValueError(f"dimensions must be positive, got {width}x{height}")
        names = tuple(self.names)
        if names and len(names) != len(palette):
            raise ValueError("names must match palette length")
        object.__setattr__(self, "palette", palette)
        object.__setattr__(self, "dimensions", (width, height))
        object.__setattr__(self, "names", names)

    @classmethod
    def from_hex(
        cls,
        hex_name_pairs: Sequence[Tuple[str, str]],
        dimensions: Optional[Dimensions] = None,
    ) -> "ConverterConfig":
        rgbs, names = build_palette(hex_name_pairs)
        return cls(rgbs, dimensions or DIMENSIONS, names)

    def name_of(self) -> Dict[str, str]:
        """Map '#rrggbb' -> name. The first name wins for duplicate colours."""
        out: Dict[str, str] = {}
        for i, rgb in enumerate(self.palette):
            hx = rgb_to_hex(rgb)
            if hx not in out:
                out[hx] = self.names[i] if self.names else "?"
        return out


DEFAULT_CONFIG = ConverterConfig.from_hex(PALETTE, DIMENSIONS)


__all__ = [
    "PALETTE",
    "DIMENSIONS",
    "build_palette",
    "ConverterConfig",
    "DEFAULT_CONFIG",
]
