import numpy as np
from numba import njit, prange

AXIS_SYMBOLS = ("A", "B")
DIVERGENCE_BOUND = 1e12


class MarkusError(Exception):
    """Base error for the Lyapunov-Markus renderer."""


class InvalidSequenceSymbol(MarkusError, ValueError):
    """Raised when a sequence rule is empty or contains a symbol outside its alphabet."""
    def __init__(self, symbol, position, alphabet=AXIS_SYMBOLS):
        self.symbol = symbol
        self.position = position
        self.alphabet = tuple(alphabet)
        if symbol:
            msg = (f"invalid symbol {symbol!r} at position {position} of the sequence rule, "
                   f"expected one of {', '.join(self.alphabet)}")
        else:
            msg = "the sequence rule must contain at least one symbol"
        super().__init__(msg)


class InvalidIterationConfig(MarkusError, ValueError):
    """Raised when the iteration depth does not leave any term after the warmup."""
    def __init__(self, iteration_depth, warmup):
        self.iteration_depth = iteration_depth
        self.warmup = warmup
        super().__init__(
            f"iteration depth ({iteration_depth}) must be greater than warmup ({warmup}) "
            f"and warmup must not be negative")


# map / lerp between two ranges, works on scalars and numpy arrays alike
def map_range(value, src_lo, src_hi, dst_lo, dst_hi):
    return dst_lo + (dst_hi - dst_lo) * ((value - src_lo) / (src_hi - src_lo))

_map_range = njit(cache=True)(map_range)


def pixel_to_parameters(index, width, height, x_range, y_range):
    """Return the (a, b) parameter point of a row-major pixel index."""
    row, col = divmod(index, width)
    a = map_range(float(col), 0.0, float(width), *x_range)
    b = map_range(float(row), 0.0, float(height), *y_range)
    return a, b


def parse_sequence_rule(pattern, alphabet=AXIS_SYMBOLS):
    """
    Translate a rule such as "BBBBBBAAAAAA" into indexes of `alphabet`.

    The whole rule is checked up front, the first unknown symbol raises
    InvalidSequenceSymbol.
    """
    if len(pattern) == 0:
        raise InvalidSequenceSymbol("", 0, alphabet)
    lookup = {symbol: idx for idx, symbol in enumerate(alphabet)}
    for position, symbol in enumerate(pattern):
        if symbol not in lookup:
            raise InvalidSequenceSymbol(symbol, position, alphabet)
    return np.array([lookup[symbol] for symbol in pattern], dtype=np.int64)


def validate_iterations(iteration_depth, warmup):
    if warmup < 0 or iteration_depth <= warmup:
        raise InvalidIterationConfig(iteration_depth, warmup)


class ResolvedSequence:
    """Growth rates of a sequence rule bound to one (a, b) point, read cyclically."""

    def __init__(self, values):
        self.values = np.asarray(values, dtype=np.float64)

    def __len__(self):
        return len(self.values)

    def __call__(self, n):
        return self.values[n % len(self.values)]


class SequenceRule:
    """
    A validated sequence rule.

    "A" and "B" always stand for the two image axes. `constants` extends the
    alphabet with symbols bound to fixed growth rates, e.g. {"C": 3.2}.
    """

    def __init__(self, pattern, constants=None):
        constants = dict(constants or {})
        for symbol in constants:
            if len(symbol) != 1 or symbol in AXIS_SYMBOLS:
                raise ValueError(f"constant symbol {symbol!r} must be a single character other than "
                                 f"{' or '.join(AXIS_SYMBOLS)}")

        self.pattern = pattern
        self.alphabet = AXIS_SYMBOLS + tuple(constants)
        self.constants = np.array(list(constants.values()), dtype=np.float64)
        self.indices = parse_sequence_rule(pattern, self.alphabet)

    def __len__(self):
        return len(self.indices)

    def __repr__(self):
        return f"SequenceRule({self.pattern!r}, alphabet={''.join(self.alphabet)})"

    def resolve(self, a, b):
        axes = np.concatenate((np.array([a, b], dtype=np.float64), self.constants))
        return ResolvedSequence(axes[self.indices])


@njit(cache=True)
def _estimate(values, iteration_depth, warmup, divergence_bound):
    n_values = values.shape[0]
    x_n = 0.5  # unstable fixed point of the map
    lambda_n = 0.0
    steps = 0

    for n in range(iteration_depth):
        r = values[n % n_values]
        # (1 - 2*0.5) = 0, skip the log until the orbit has left the start point
        if n > warmup or x_n != 0.5:
            lambda_n += np.log(abs(r * (1.0 - 2.0 * x_n)))

        x_n = r * x_n * (1.0 - x_n)
        steps += 1

        if abs(lambda_n) > divergence_bound:
            break

    # the divisor stays fixed even when the loop ended early
    return lambda_n / (iteration_depth - warmup), steps


def lyapunov_exponent(values, iteration_depth, warmup, divergence_bound=DIVERGENCE_BOUND):
    """
    Estimate the Lyapunov exponent of the logistic map driven by `values`.

    `values` holds the growth rate of each step of one period of the sequence,
    as given by ResolvedSequence.values. Returns (lambda, steps) where steps is
    the number of iterations executed before the loop finished or diverged.
    """
    validate_iterations(iteration_depth, warmup)
    values = np.asarray(values, dtype=np.float64)
    lam, steps = _estimate(values, int(iteration_depth), int(warmup), float(divergence_bound))
    return float(lam), int(steps)


@njit(parallel=True, cache=True)
def lyapunov_rows(indices, constants, row_start, row_stop, width, height,
                  x_min, x_max, y_min, y_max,
                  iteration_depth, warmup, divergence_bound,
                  out, row_min, row_max):
    """
    Compute the exponents of rows [row_start, row_stop) into the flat `out` array.

    Rows run in parallel. Each row only writes its own slots of `out` and its own
    entries of row_min / row_max, the caller reduces those afterwards.
    """
    seq_len = indices.shape[0]
    n_constants = constants.shape[0]

    for j in prange(row_start, row_stop):
        axes = np.empty(2 + n_constants, dtype=np.float64)
        values = np.empty(seq_len, dtype=np.float64)
        axes[1] = _map_range(float(j), 0.0, float(height), y_min, y_max)
        for k in range(n_constants):
            axes[2 + k] = constants[k]

        lo = np.inf
        hi = -np.inf
        for i in range(width):
            axes[0] = _map_range(float(i), 0.0, float(width), x_min, x_max)
            for k in range(seq_len):
                values[k] = axes[indices[k]]

            lam, _ = _estimate(values, iteration_depth, warmup, divergence_bound)
            out[j * width + i] = lam

            if lam < lo:
                lo = lam
            if lam > hi:
                hi = lam

        row_min[j - row_start] = lo
        row_max[j - row_start] = hi


EMPTY_RANGE = (np.inf, -np.inf)

def combine_ranges(first, second):
    """Merge two (min, max) pairs, order does not matter."""
    return min(first[0], second[0]), max(first[1], second[1])
