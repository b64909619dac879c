# Copyright (c) 2026 Pixpal
# SPDX-License-Identifier: MIT

"""
Command-line palette detection.

Usage:
  pixpal IMAGE [--threshold F] [--min-alpha N] [--max-colors N] [--format FMT] [--debug]

Prints the palette of IMAGE in display order. A trailing "+" (natural format)
or "overflowed": true (JSON) means the image has more colors than --max-colors.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from pixpal.measure.extract import (
    DEFAULT_MAX_COLORS,
    DEFAULT_MIN_ALPHA,
    DEFAULT_THRESHOLD,
    PaletteConfig,
    extract_palette,
)
from pixpal.runtime.serializers import SerializerFormat, to_output


def parse_cli_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """
    Parse CLI arguments.

    Returns:
      argparse.Namespace with:
        image: Path to the input image
        threshold: ΔE near-duplicate threshold
        min_alpha: alpha cut-off (exclusive)
        max_colors: palette cap
        format: output format name
        debug: bool for verbose logging
    """
    parser = argparse.ArgumentParser(
        prog="pixpal",
        description="Detect every distinct colour of a pixel art image.",
    )
    parser.add_argument("image", type=Path, help="Input image")
    parser.add_argument(
        "--threshold",
        type=float,
        default=DEFAULT_THRESHOLD,
        help="Suppress colours within this delta E of an earlier one (0 = exact only).",
    )
    parser.add_argument(
        "--min-alpha",
        type=int,
        default=DEFAULT_MIN_ALPHA,
        help="Ignore pixels with alpha <= this value.",
    )
    parser.add_argument(
        "--max-colors",
        type=int,
        default=DEFAULT_MAX_COLORS,
        help="Palette cap.",
    )
    parser.add_argument(
        "--format",
        choices=[f.value for f in SerializerFormat],
        default=SerializerFormat.NATURAL.value,
        help="Output format.",
    )
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point. Returns the process exit code."""
    args = parse_cli_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.image.is_file():
        print(f"error: not found: {args.image}", file=sys.stderr)
        return 2

    try:
        config = PaletteConfig(
            threshold=args.threshold,
            min_alpha=args.min_alpha,
            max_colors=args.max_colors,
        )
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    from PIL import UnidentifiedImageError
    from pixpal.measure.image_io import load_rgba

    try:
        pixels = load_rgba(args.image)
    except (UnidentifiedImageError, OSError):
        print(f"error: cannot decode image: {args.image}", file=sys.stderr)
        return 1

    result = extract_palette(pixels, config)
    print(to_output(result, SerializerFormat(args.format)))
    return 0


if __name__ == "__main__":
    sys.exit(main())
