import numpy as np
import pytest

from panel_quant.colour_convert import (
    axis_distance,
    delta_e2000_pair,
    delta_e2000_vec,
    rgb_to_lab,
    rgb_to_linear,
)


def test_black_and_white_lab():
    lab = rgb_to_lab(np.array([[0, 0, 0], [255, 255, 255]], dtype=np.uint8))
    assert lab.dtype == np.float32
    assert lab[0] == pytest.approx([0.0, 0.0, 0.0], abs=1e-3)
    assert lab[1] == pytest.approx([100.0, 0.0, 0.0], abs=0.1)


def test_primary_red_lab():
    lab = rgb_to_lab(np.array([255, 0, 0], dtype=np.uint8))
    assert lab == pytest.approx([53.24, 80.09, 67.20], abs=0.1)


def test_float_input_matches_uint8():
    u8 = np.array([[12, 200, 77], [3, 3, 3]], dtype=np.uint8)
    np.testing.assert_allclose(
        rgb_to_lab(u8), rgb_to_lab(u8.astype(np.float64) / 255.0), atol=1e-4
    )


def test_near_black_uint8_read_as_0_to_255():
    # an all-dark uint8 input must not be mistaken for 0..1 floats
    lab = rgb_to_lab(np.array([1, 1, 1], dtype=np.uint8))
    assert lab[0] < 1.0


def test_shape_preserved():
    img = np.zeros((5, 7, 3), dtype=np.uint8)
    assert rgb_to_lab(img).shape == (5, 7, 3)


def test_linear_is_monotonic():
    ramp = np.linspace(0.0, 1.0, 64)
    lin = rgb_to_linear(ramp)
    assert np.all(np.diff(lin) > 0)
    assert lin[0] == 0.0
    assert lin[-1] == pytest.approx(1.0, abs=1e-6)


def test_delta_e_identical_is_zero():
    lab = [52.0, -14.5, 33.1]
    assert delta_e2000_pair(lab, lab) == 0.0


def test_delta_e_reference_pairs():
    # Sharma, Wu & Dalal (2005) test data
    assert delta_e2000_pair(
        [50.0, 2.6772, -79.7751], [50.0, 0.0, -82.7485]
    ) == pytest.approx(2.0425, abs=1e-4)
    assert delta_e2000_pair(
        [50.0, 2.5, 0.0], [73.0, 25.0, -18.0]
    ) == pytest.approx(27.1492, abs=1e-4)
    assert delta_e2000_pair(
        [2.0776, 0.0795, -1.1350], [0.9033, -0.0636, -0.5514]
    ) == pytest.approx(0.9082, abs=1e-4)


def test_delta_e_symmetric():
    a = [30.0, 40.0, -20.0]
    b = [60.0, -10.0, 15.0]
    assert delta_e2000_pair(a, b) == pytest.approx(delta_e2000_pair(b, a))


def test_delta_e_vec_matches_pair():
    src = np.array([40.0, 10.0, 10.0], dtype=np.float32)
    cands = np.array([[40.0, 10.0, 10.0], [80.0, 0.0, 0.0]], dtype=np.float32)
    out = delta_e2000_vec(src, cands)
    assert out.shape == (2,)
    assert out[0] == pytest.approx(0.0, abs=1e-6)
    assert out[1] == pytest.approx(delta_e2000_pair(src, cands[1]), rel=1e-5)


def test_axis_distance():
    assert axis_distance(3.0, 7.5) == 4.5
    assert axis_distance(-2.0, -2.0) == 0.0
