#!/usr/bin/env python3
"""Create raw row-major RGB input files for rgbblit.

Either converts an existing image (any format Pillow reads, resized to
the canvas) or writes a synthetic gradient test pattern.

Usage:
    python scripts/make_raw.py out.rgb --image photo.jpg
    python scripts/make_raw.py out.rgb --width 400 --height 400
"""

import argparse
from pathlib import Path

import numpy as np
from PIL import Image

from rgbblit.core.constants import DEFAULT_HEIGHT, DEFAULT_WIDTH


def gradient_pattern(width: int, height: int) -> np.ndarray:
    """Red grows left to right, green top to bottom, blue along the diagonal."""
    xs = np.linspace(0, 255, width, dtype=np.float32)
    ys = np.linspace(0, 255, height, dtype=np.float32)
    X, Y = np.meshgrid(xs, ys)
    rgb = np.stack([X, Y, (X + Y) / 2], axis=-1)
    return rgb.astype(np.uint8)


def image_pattern(path: Path, width: int, height: int) -> np.ndarray:
    with Image.open(path) as img:
        return np.asarray(img.convert("RGB").resize((width, height)), dtype=np.uint8)


def main():
    parser = argparse.ArgumentParser(
        description="Write a raw RGB file for rgbblit",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("output", type=Path, help="Destination raw file")
    parser.add_argument("--image", type=Path, default=None, help="Source image (default: gradient)")
    parser.add_argument("--width", type=int, default=DEFAULT_WIDTH)
    parser.add_argument("--height", type=int, default=DEFAULT_HEIGHT)
    args = parser.parse_args()

    if args.image is not None:
        rgb = image_pattern(args.image, args.width, args.height)
    else:
        rgb = gradient_pattern(args.width, args.height)

    args.output.write_bytes(rgb.tobytes())
    print(f"Wrote {rgb.nbytes} bytes ({args.width}x{args.height}) to {args.output}")


if __name__ == "__main__":
    main()
