"""
Color strategies mapping a Lyapunov exponent to a packed 0xRRGGBB integer.

Two strategies are available, a per channel linear ramp and a gradient
interpolated between color stops. Both accept scalars and numpy arrays.
Positive exponents (chaos) are not colorized by magnitude: `colorize` forces
them to the sentinel color whatever the strategy.
"""

from collections import namedtuple
import numpy as np

from markus_core import map_range
from markus_utils import RED_SHIFT, GREEN_SHIFT, BLUE_SHIFT, hex_to_int

SENTINEL_COLOR = 0x000000
MAX_COLOR = 0xFFFFFF

ChannelRamp = namedtuple("ChannelRamp", ["input_lo", "input_hi", "output_lo", "output_hi"])


def _round_half_away(values):
    return np.copysign(np.floor(np.abs(values) + 0.5), values)


def _packed_result(packed):
    if packed.ndim == 0:
        return int(packed)
    return packed


class LinearRamp:
    """Each channel follows its own linear ramp and is 0 outside of its input range."""

    def __init__(self, red, green, blue):
        self.channels = ((ChannelRamp(*red), RED_SHIFT),
                         (ChannelRamp(*green), GREEN_SHIFT),
                         (ChannelRamp(*blue), BLUE_SHIFT))
        for ramp, _ in self.channels:
            if not ramp.input_lo < ramp.input_hi:
                raise ValueError(f"channel input range {ramp.input_lo}..{ramp.input_hi} is empty")

    def __repr__(self):
        red, green, blue = (ramp for ramp, _ in self.channels)
        return f"LinearRamp(red={tuple(red)}, green={tuple(green)}, blue={tuple(blue)})"

    @staticmethod
    def map_channel(lambdas, ramp, shift):
        lambdas = np.asarray(lambdas, dtype=np.float64)
        with np.errstate(invalid="ignore", over="ignore"):
            # NaN fails both comparisons and ends up outside
            inside = (lambdas >= ramp.input_lo) & (lambdas <= ramp.input_hi)
            value = map_range(lambdas, ramp.input_lo, ramp.input_hi, ramp.output_lo, ramp.output_hi)
            value = np.clip(_round_half_away(value), 0, 255)
            value = np.where(inside, value, 0).astype(np.uint32)
        return np.left_shift(value, np.uint32(shift))

    def map_array(self, lambdas):
        lambdas = np.asarray(lambdas, dtype=np.float64)
        packed = np.zeros(lambdas.shape, dtype=np.uint32)
        # shifts are disjoint so the sum never carries into another channel
        for ramp, shift in self.channels:
            packed += self.map_channel(lambdas, ramp, shift)
        return packed

    def __call__(self, lambdas):
        return _packed_result(self.map_array(lambdas))


class Gradient:
    """
    Piecewise linear gradient over ascending breakpoints.

    `stops` holds one packed color per breakpoint, or one less than the number
    of breakpoints. The interpolation runs on the packed integers, not in a
    perceptual color space.
    """

    def __init__(self, breakpoints, stops):
        self.breakpoints = np.asarray(breakpoints, dtype=np.float64)
        self.stops = np.asarray(stops, dtype=np.float64)

        if self.breakpoints.ndim != 1 or self.breakpoints.size < 2:
            raise ValueError("a gradient needs at least two breakpoints")
        if np.any(np.diff(self.breakpoints) <= 0):
            raise ValueError("gradient breakpoints must be strictly ascending")
        if self.stops.size not in (self.breakpoints.size, self.breakpoints.size - 1):
            raise ValueError(f"{self.breakpoints.size} breakpoints need {self.breakpoints.size} "
                             f"or {self.breakpoints.size - 1} color stops, got {self.stops.size}")
        if self.stops.size < 2:
            raise ValueError("a gradient needs at least two color stops")

    @classmethod
    def from_palette(cls, colors, lo, hi):
        """Spread a list of "#rrggbb" colors evenly over [lo, hi]."""
        stops = [hex_to_int(color) for color in colors]
        return cls(np.linspace(lo, hi, len(stops)), stops)

    def __repr__(self):
        stops = ", ".join(f"0x{int(stop):06x}" for stop in self.stops)
        return f"Gradient(breakpoints={self.breakpoints.tolist()}, stops=[{stops}])"

    def bracket(self, lambdas):
        """
        Index `pos` of the smallest breakpoint >= lambda, searched from index 1.

        Values past the last usable stop keep the last bracket.
        """
        lambdas = np.asarray(lambdas, dtype=np.float64)
        pos = np.searchsorted(self.breakpoints[1:], lambdas, side="left") + 1
        return np.minimum(pos, self.stops.size - 1)

    def map_array(self, lambdas):
        lambdas = np.asarray(lambdas, dtype=np.float64)
        pos = self.bracket(lambdas)
        with np.errstate(invalid="ignore", over="ignore"):
            value = map_range(lambdas, self.breakpoints[pos - 1], self.breakpoints[pos],
                              self.stops[pos - 1], self.stops[pos])
            # saturating float -> int conversion, NaN becomes 0
            value = np.clip(np.nan_to_num(np.trunc(value), nan=0.0), 0, MAX_COLOR)
        return value.astype(np.uint32)

    def __call__(self, lambdas):
        return _packed_result(self.map_array(lambdas))


DEFAULT_RAMP = LinearRamp(red=(-2.0, 0.5, 196.0, 255.0),
                          green=(-0.5, 0.0, 0.0, 255.0),
                          blue=(-2.5, 0.5, 10.0, 55.0))

DEFAULT_GRADIENT = Gradient([-2.5, -1.5, -0.8, -0.2, 0.0, 4.0],
                            [0x161c31, 0x613c62, 0xb75f74, 0xf29a6b, 0xfaec70])

COLOR_MAPS = {
    "ramp": DEFAULT_RAMP,
    "gradient": DEFAULT_GRADIENT,
}


def make_color_map(color_map):
    """Resolve a strategy name from COLOR_MAPS, strategy objects are returned as is."""
    if isinstance(color_map, str):
        if color_map not in COLOR_MAPS:
            raise ValueError(f"unknown color map '{color_map}', choose from {', '.join(COLOR_MAPS)}")
        return COLOR_MAPS[color_map]
    if not callable(getattr(color_map, "map_array", None)):
        raise ValueError(f"{color_map!r} is not a color map")
    return color_map


def colorize(lambdas, color_map, sentinel=SENTINEL_COLOR):
    lambdas = np.asarray(lambdas, dtype=np.float64)
    packed = make_color_map(color_map).map_array(lambdas)
    with np.errstate(invalid="ignore"):
        chaotic = lambdas > 0
    return _packed_result(np.where(chaotic, np.uint32(sentinel), packed).astype(np.uint32))
