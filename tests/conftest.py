import numpy as np
import pytest

from panel_quant.converter import PaletteConverter
from panel_quant.palette_data import ConverterConfig


@pytest.fixture
def small_palette():
    return [(0, 0, 0), (255, 255, 255), (255, 0, 0)]


@pytest.fixture
def small_converter(small_palette):
    return PaletteConverter(ConverterConfig(tuple(small_palette), (4, 2)))


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def noise_image(rng):
    """Random uint8 RGB array, 40x30."""
    return rng.integers(0, 256, size=(30, 40, 3), dtype=np.uint8)
