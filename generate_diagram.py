import argparse

from markus_diagram import ComputeDiagram
from markus_colors import COLOR_MAPS, Gradient
from markus_utils import get_palette, palette_names

def parse_constant(text):
    symbol, sep, value = text.partition("=")
    if not sep or len(symbol) != 1:
        raise argparse.ArgumentTypeError(f"'{text}' is not of the form SYMBOL=VALUE")
    try:
        return symbol, float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"'{value}' is not a number") from None

def build_parser():
    defaults = ComputeDiagram.DEFAULT_PARAMS
    parser = argparse.ArgumentParser(
        prog="lyapunov-markus",
        description="Render a Lyapunov-Markus diagram of the logistic map.")
    parser.add_argument("pattern", nargs="?", default=defaults["pattern"],
                        help="sequence of A and B selecting the growth rate of each step (default: %(default)s)")
    parser.add_argument("--x-range", nargs=2, type=float, metavar=("LO", "HI"),
                        default=(defaults["x_min"], defaults["x_max"]), help="range of a")
    parser.add_argument("--y-range", nargs=2, type=float, metavar=("LO", "HI"),
                        default=(defaults["y_min"], defaults["y_max"]), help="range of b")
    parser.add_argument("--size", nargs=2, type=int, metavar=("WIDTH", "HEIGHT"),
                        default=(defaults["width"], defaults["height"]))
    parser.add_argument("--iterations", type=int, default=defaults["num_iter"])
    parser.add_argument("--warmup", type=int, default=defaults["warmup"])
    parser.add_argument("--color-map", choices=sorted(COLOR_MAPS), default=defaults["color_map"])
    parser.add_argument("--palette", choices=palette_names(),
                        help="spread a named palette over --palette-range, implies a gradient")
    parser.add_argument("--palette-range", nargs=2, type=float, metavar=("LO", "HI"), default=(-2.5, 0.0))
    parser.add_argument("--constant", action="append", type=parse_constant, default=[],
                        metavar="SYMBOL=VALUE", help="bind an extra pattern symbol to a fixed growth rate")
    parser.add_argument("--viewer", choices=("pygame", "pil", "none"), default="pygame",
                        help="pygame window, PIL image viewer, or compute only")
    parser.add_argument("--quiet", action="store_true", help="do not print the λ range")
    return parser

def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    # configuration errors end the run before any window is opened
    try:
        color_map = args.color_map
        if args.palette is not None:
            color_map = Gradient.from_palette(get_palette(args.palette), *args.palette_range)

        params = dict(pattern=args.pattern, constants=dict(args.constant),
                      x_min=args.x_range[0], x_max=args.x_range[1],
                      y_min=args.y_range[0], y_max=args.y_range[1],
                      width=args.size[0], height=args.size[1],
                      num_iter=args.iterations, warmup=args.warmup, color_map=color_map)

        if args.viewer == "pygame":
            from pygame_viewer import DiagramViewer
            diagram = DiagramViewer(verbose=not args.quiet, **params)
        else:
            diagram = ComputeDiagram(verbose=not args.quiet, **params)
    except ValueError as e:
        parser.error(str(e))

    if args.viewer == "pygame":
        diagram.run()
    else:
        diagram.compute_diagram()
        if args.viewer == "pil":
            diagram.to_image().show()
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
