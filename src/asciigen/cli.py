import argparse
import logging
import sys
from pathlib import Path

from asciigen.charsets import CHARSETS
from asciigen.converter import format_colour, format_plain
from asciigen.palettes import Palette
from asciigen.pipeline import Pipeline
from asciigen.settings import RenderSettings


def _bounded(kind, lo, hi):
    def parse(text):
        value = kind(text)
        if not lo <= value <= hi:
            raise argparse.ArgumentTypeError(f"must be between {lo} and {hi}")
        return value

    return parse


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(format="%(levelname)s: %(message)s", stream=sys.stderr)
    logging.getLogger("asciigen").setLevel(logging.DEBUG if verbose else logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Render an image as ASCII art")
    parser.add_argument("image", help="Path to input image")
    parser.add_argument(
        "-w", "--width", type=_bounded(int, 50, 300), default=200, help="Output width in characters, 50-300 (default: 200)"
    )
    parser.add_argument(
        "-n", "--samples", type=_bounded(int, 1, 3), default=1, help="Samples per character axis, 1-3 (default: 1)"
    )
    parser.add_argument("-c", "--contrast", type=_bounded(float, -1.0, 1.0), default=0.0, help="Contrast, -1 to 1")
    parser.add_argument("-b", "--brightness", type=_bounded(float, -1.0, 1.0), default=0.0, help="Brightness, -1 to 1")
    parser.add_argument(
        "-p",
        "--palette",
        default=Palette.GREY_2BIT.value,
        choices=[p.value for p in Palette],
        help="Colour palette (default: grey2bit)",
    )
    parser.add_argument("--charset", default="default", choices=sorted(CHARSETS), help="Character set, light to dark")
    parser.add_argument("--ink", default="#000000", help="Character colour for monochrome and tinting")
    parser.add_argument("--background", default="#ffffff", help="Background colour")
    parser.add_argument("--transparent", action="store_true", help="Export with a transparent background")
    parser.add_argument(
        "--tint",
        type=_bounded(float, 0.0, 2.0),
        default=1.0,
        help="Blend with the ink colour: below 1 toward it, above 1 away from it (default: 1)",
    )
    parser.add_argument("--alpha", type=_bounded(float, -1.0, 1.0), default=0.0, help="Character alpha adjustment")
    parser.add_argument("--scale", type=_bounded(int, 1, 10), default=2, help="Export scale multiplier (default: 2)")
    parser.add_argument("--export", metavar="DIR", type=Path, default=None, help="Also write a PNG into DIR")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    return parser


def main():
    args = build_parser().parse_args()
    setup_logging(args.verbose)

    image_path = Path(args.image)
    if not image_path.exists():
        print(f"File not found: {image_path}", file=sys.stderr)
        sys.exit(1)

    settings = RenderSettings(
        characters=CHARSETS[args.charset],
        width=args.width,
        sample_count=args.samples,
        contrast=args.contrast,
        brightness=args.brightness,
        palette=Palette(args.palette),
        ink=args.ink,
        background=args.background,
        transparent=args.transparent,
        tint=args.tint,
        alpha=args.alpha,
        export_scale=args.scale,
    )
    pipeline = Pipeline(settings)
    if not pipeline.load(image_path):
        print(f"Could not decode image: {image_path}", file=sys.stderr)
        sys.exit(1)

    if settings.palette is Palette.MONOCHROME:
        print(format_plain(pipeline.frame))
    else:
        background = None if settings.transparent else settings.background_rgb
        print(format_colour(pipeline.frame, background))

    if args.export is not None:
        try:
            path = pipeline.export(args.export)
        except RuntimeError as exc:
            print(f"Could not export: {exc}", file=sys.stderr)
            sys.exit(1)
        print(f"Saved {path}", file=sys.stderr)


if __name__ == "__main__":
    main()
