import numpy as np
from PIL import Image

from markus_core import (SequenceRule, validate_iterations, lyapunov_rows, combine_ranges,
                         EMPTY_RANGE, DIVERGENCE_BOUND)
from markus_colors import make_color_map, colorize, SENTINEL_COLOR
from markus_utils import unpack_rgb


class ComputeDiagram:
    DEFAULT_PARAMS = {
        "pattern": "BBBBBBAAAAAA",
        "constants": {},
        "x_min": 3.4,
        "x_max": 4.0,
        "y_min": 2.5,
        "y_max": 3.4,
        "width": 800,
        "height": 800,
        "num_iter": 300,  # everything from 100 on looks fine
        "warmup": 20,
        "divergence_bound": DIVERGENCE_BOUND,
        "color_map": "ramp",
        "sentinel": SENTINEL_COLOR,
    }

    def __init__(self, verbose=True, **kwargs):
        self.verbose = verbose
        self.progress_callback = None
        self.total_stage_number = 3

        self.aborted = False
        self.rows_done = 0
        self.lambda_range = EMPTY_RANGE

        self.set_parameters(**{**ComputeDiagram.DEFAULT_PARAMS, **kwargs})

    # @param x_min, x_max, y_min, y_max the parameter rectangle, a runs along x and b along y.
    # @param width, height the size of the image in pixels.
    # @param pattern a string of A and B (plus the symbols of constants) selecting
    # the growth rate of each iteration.
    # @param constants extra symbols bound to fixed growth rates, e.g. {"C": 3.2}.
    # @param num_iter, warmup iteration depth and number of leading iterations
    # where the exponent is only summed once the orbit has left 0.5.
    # @param color_map "ramp", "gradient" or a LinearRamp / Gradient instance.
    # @param sentinel color of pixels with a positive exponent.
    def set_parameters(self, **kwargs):
        for key in kwargs:
            if key not in ComputeDiagram.DEFAULT_PARAMS:
                raise TypeError(f"set_parameters() got an unexpected argument '{key}'")

        def is_new(attr):
            return attr in kwargs and kwargs[attr] != getattr(self, attr, None)

        params = {key: getattr(self, key, default) for key, default in ComputeDiagram.DEFAULT_PARAMS.items()}
        params.update(kwargs)

        # validate everything before touching the current state
        validate_iterations(params["num_iter"], params["warmup"])
        for dim in ("width", "height"):
            if int(params[dim]) != params[dim] or params[dim] < 1:
                raise ValueError(f"{dim} must be a positive integer, got {params[dim]}")
            params[dim] = int(params[dim])
        # instances never share the default dict
        params["constants"] = dict(params["constants"])

        sequence_rule = getattr(self, "sequence_rule", None)
        if is_new("pattern") or is_new("constants"):
            sequence_rule = SequenceRule(params["pattern"], params["constants"])

        strategy = getattr(self, "strategy", None)
        if is_new("color_map"):
            strategy = make_color_map(params["color_map"])

        new_size = is_new("width") or is_new("height")

        for key in kwargs:
            setattr(self, key, params[key])
        self.sequence_rule = sequence_rule
        self.strategy = strategy

        if new_size:
            self.allocate_buffers()

    def set_progress_callback(self, progress_callback):
        self.progress_callback = progress_callback

    def report(self, message, stage):
        if self.progress_callback is not None:
            self.progress_callback(message, stage)

    def allocate_buffers(self):
        self.lambdas = np.full(self.width * self.height, np.nan, dtype=np.float64)
        self.buffer = np.zeros(self.width * self.height, dtype=np.uint32)

    def compute_rows(self, row_start, row_stop):
        """
        Compute and color rows [row_start, row_stop).

        Returns the (min, max) exponent over those rows.
        """
        num_rows = row_stop - row_start
        row_min = np.empty(num_rows, dtype=np.float64)
        row_max = np.empty(num_rows, dtype=np.float64)

        self.report(f"Executing Lyapunov kernel (rows {row_start}-{row_stop} of {self.height})", 1)
        lyapunov_rows(self.sequence_rule.indices, self.sequence_rule.constants,
                      row_start, row_stop, self.width, self.height,
                      float(self.x_min), float(self.x_max), float(self.y_min), float(self.y_max),
                      int(self.num_iter), int(self.warmup), float(self.divergence_bound),
                      self.lambdas, row_min, row_max)

        self.report("Applying color map", 2)
        start, stop = row_start * self.width, row_stop * self.width
        self.buffer[start:stop] = colorize(self.lambdas[start:stop], self.strategy, self.sentinel)

        return float(np.min(row_min)), float(np.max(row_max))

    def compute_diagram(self, should_abort=None, batch_rows=None):
        """
        Fill the image buffer, batch_rows rows at a time.

        `should_abort` is polled before every batch. When it returns True the
        sweep stops, rows computed so far stay in the buffer and `aborted` is set.
        """
        if batch_rows is None:
            batch_rows = self.height
        if batch_rows < 1:
            raise ValueError(f"batch_rows must be at least 1, got {batch_rows}")

        self.allocate_buffers()
        self.aborted = False
        self.rows_done = 0
        lambda_range = EMPTY_RANGE

        for row_start in range(0, self.height, batch_rows):
            if should_abort is not None and should_abort():
                self.aborted = True
                break
            row_stop = min(row_start + batch_rows, self.height)
            lambda_range = combine_ranges(lambda_range, self.compute_rows(row_start, row_stop))
            self.rows_done = row_stop

        self.lambda_range = lambda_range
        self.report("Sweep finished" if not self.aborted else "Sweep aborted", 3)
        if self.verbose:
            if self.rows_done == 0:
                print("λ: sweep aborted before any row was computed")
            else:
                print(f"λ: ({lambda_range[0]}..{lambda_range[1]})")

        return self.buffer

    def to_rgb_array(self):
        return unpack_rgb(self.buffer).reshape((self.height, self.width, 3))

    def to_image(self):
        return Image.fromarray(self.to_rgb_array())


def render_image(width, height, x_range, y_range, sequence_rule, iteration_depth, warmup,
                 color_map="ramp"):
    """Render a full diagram and return its flat buffer of packed RGB integers."""
    diagram = ComputeDiagram(verbose=False, width=width, height=height,
                             x_min=x_range[0], x_max=x_range[1],
                             y_min=y_range[0], y_max=y_range[1],
                             pattern=sequence_rule, num_iter=iteration_depth, warmup=warmup,
                             color_map=color_map)
    return diagram.compute_diagram()
