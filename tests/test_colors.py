# tests/test_colors.py
import numpy as np
import pytest

from markus_colors import (
    LinearRamp,
    Gradient,
    ChannelRamp,
    DEFAULT_RAMP,
    DEFAULT_GRADIENT,
    SENTINEL_COLOR,
    colorize,
    make_color_map,
)
from markus_utils import ColorPalettes


def channel(packed, shift):
    return (np.asarray(packed) >> shift) & 0xFF


def test_ramp_channels_at_zero():
    color = DEFAULT_RAMP(0.0)
    assert isinstance(color, int)
    assert channel(color, 16) == 243   # 196 + 59 * 0.8
    assert channel(color, 8) == 255


def test_ramp_rounds_half_away_from_zero():
    # blue: 10 + 45 * 0.5 = 32.5
    color = DEFAULT_RAMP(-1.0)
    assert channel(color, 0) == 33
    assert channel(color, 8) == 0       # green only covers [-0.5, 0]
    assert channel(color, 16) == 220    # 196 + 59 * 0.4 = 219.6


def test_ramp_is_zero_outside_every_channel_domain():
    assert DEFAULT_RAMP(-3.0) == 0
    assert DEFAULT_RAMP(np.nan) == 0
    assert DEFAULT_RAMP(-np.inf) == 0


def test_ramp_channel_is_monotonic_inside_and_zero_outside():
    ramp = ChannelRamp(-0.5, 0.0, 0.0, 255.0)
    inside = np.linspace(-0.5, 0.0, 64)
    values = LinearRamp.map_channel(inside, ramp, 8) >> 8
    assert np.all(np.diff(values.astype(np.int64)) >= 0)
    assert values[0] == 0 and values[-1] == 255

    outside = np.array([-0.51, -2.0, 0.01, 3.0])
    assert np.all(LinearRamp.map_channel(outside, ramp, 8) == 0)


def test_ramp_descending_output_is_non_increasing():
    ramp = LinearRamp(red=(-1.0, 0.0, 255.0, 0.0), green=(-1.0, 0.0, 0.0, 0.0), blue=(-1.0, 0.0, 0.0, 0.0))
    reds = channel(ramp(np.linspace(-1.0, 0.0, 32)), 16).astype(np.int64)
    assert np.all(np.diff(reds) <= 0)


def test_ramp_output_is_clamped_to_a_byte():
    ramp = LinearRamp(red=(0.0, 1.0, -100.0, 400.0), green=(0.0, 1.0, 0.0, 0.0), blue=(0.0, 1.0, 0.0, 0.0))
    assert channel(ramp(0.0), 16) == 0
    assert channel(ramp(1.0), 16) == 255


def test_ramp_rejects_empty_input_range():
    with pytest.raises(ValueError):
        LinearRamp(red=(1.0, 1.0, 0.0, 255.0), green=(0.0, 1.0, 0.0, 255.0), blue=(0.0, 1.0, 0.0, 255.0))


def test_gradient_bracket_selection():
    assert DEFAULT_GRADIENT.bracket(-0.3) == 3
    assert DEFAULT_GRADIENT.bracket(-2.5) == 1
    assert DEFAULT_GRADIENT.bracket(-0.2) == 3
    assert DEFAULT_GRADIENT.bracket(0.0) == 4


def test_gradient_interpolates_between_neighbour_stops():
    lo, hi = 0xb75f74, 0xf29a6b
    color = DEFAULT_GRADIENT(-0.3)
    assert lo < color < hi
    assert 0xb7 < channel(color, 16) < 0xf2


def test_gradient_hits_stops_at_breakpoints():
    assert DEFAULT_GRADIENT(-2.5) == 0x161c31
    assert DEFAULT_GRADIENT(-0.8) == 0xb75f74
    assert DEFAULT_GRADIENT(0.0) == 0xfaec70


def test_gradient_saturates_below_first_breakpoint():
    assert DEFAULT_GRADIENT(-1e6) == 0
    assert DEFAULT_GRADIENT(np.nan) == 0


@pytest.mark.parametrize("breakpoints, stops", [
    ([0.0], [0x000000]),
    ([0.0, -1.0, 1.0], [1, 2, 3]),
    ([0.0, 1.0, 2.0], [1]),
    ([0.0, 1.0, 2.0], [1, 2, 3, 4]),
])
def test_gradient_rejects_invalid_configuration(breakpoints, stops):
    with pytest.raises(ValueError):
        Gradient(breakpoints, stops)


def test_gradient_from_palette():
    gradient = Gradient.from_palette(ColorPalettes.zircon_zity, -2.0, 0.0)
    assert gradient.breakpoints.tolist() == [-2.0, -1.5, -1.0, -0.5, 0.0]
    assert gradient(-2.0) == 0x161c31
    assert gradient(0.0) == 0xfaec70


@pytest.mark.parametrize("name", ["ramp", "gradient"])
def test_positive_exponents_get_the_sentinel(name):
    lambdas = np.array([0.1, 0.0, -0.3, 2.0])
    colors = colorize(lambdas, name)
    strategy = make_color_map(name)
    assert colors[0] == SENTINEL_COLOR
    assert colors[3] == SENTINEL_COLOR
    assert colors[1] == strategy(0.0)
    assert colors[2] == strategy(-0.3)


def test_custom_sentinel():
    assert colorize(0.5, DEFAULT_GRADIENT, sentinel=0x000014) == 0x000014


def test_make_color_map_rejects_unknown_names():
    with pytest.raises(ValueError):
        make_color_map("rainbow")
    with pytest.raises(ValueError):
        make_color_map(42)
