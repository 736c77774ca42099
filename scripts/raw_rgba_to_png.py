#!/usr/bin/env python3

# Converts a raw RGBA framebuffer dump (R, G, B, A per pixel, row-major,
# no header) into a png file.
import argparse
import io
import sys
from dataclasses import dataclass

import numpy as np
from PIL import Image

# Pixel parameters
WIDTH, HEIGHT = 64, 64
CHANNELS = 4  # RGBA [R, G, B, A]

INPUT_FILE = "dump.data"
OUTPUT_FILE = "output.png"


class BufferTooShortError(IndexError):
    """Raised when the dump ends before every pixel could be read."""

    def __init__(self, pixel, offset, length):
        self.pixel = pixel
        self.offset = offset
        self.length = length
        super().__init__(
            f"pixel {pixel} at offset {offset} reads past end of buffer "
            f"(buffer length {length})"
        )


@dataclass(frozen=True)
class RasterConfig:
    width: int = WIDTH
    height: int = HEIGHT
    input_path: str = INPUT_FILE
    output_path: str = OUTPUT_FILE
    strict: bool = False


def rasterize(buffer, width, height, strict=False):
    """Unpack a flat RGBA byte buffer into a (height, width, 4) uint8 grid.

    Pixel (x, y) is read from ``buffer[4 * (y * width + x):][:4]`` and ends
    up at ``grid[y, x]``. Extra bytes past the last pixel are ignored
    unless ``strict`` is set.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"invalid resolution {width}x{height}")

    expected = width * height * CHANNELS
    data = np.frombuffer(buffer, dtype=np.uint8)

    if strict and len(data) != expected:
        raise ValueError(f"input size mismatch: got={len(data)} expected={expected}")
    if len(data) < expected:
        # first pixel whose four bytes are not all present
        pixel = len(data) // CHANNELS
        raise BufferTooShortError(
            (pixel % width, pixel // width), pixel * CHANNELS, len(data)
        )

    return data[:expected].reshape((height, width, CHANNELS)).copy()


def encode_png(grid):
    buf = io.BytesIO()
    Image.fromarray(grid).save(buf, format="PNG")
    return buf.getvalue()


def write_png(grid, path):
    Image.fromarray(grid).save(path, format="PNG")


def read_buffer(path):
    with open(path, "rb") as f:
        return f.read()


def convert(config):
    raw_data = read_buffer(config.input_path)
    grid = rasterize(raw_data, config.width, config.height, strict=config.strict)
    write_png(grid, config.output_path)
    return grid


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Convert a raw RGBA dump to PNG.")
    parser.add_argument("input", nargs="?", default=INPUT_FILE,
                        help=f"Raw RGBA file (default: {INPUT_FILE})")
    parser.add_argument("output", nargs="?", default=OUTPUT_FILE,
                        help=f"Output PNG path (default: {OUTPUT_FILE})")
    parser.add_argument("--width", type=int, default=WIDTH,
                        help=f"Frame width in pixels (default: {WIDTH})")
    parser.add_argument("--height", type=int, default=HEIGHT,
                        help=f"Frame height in pixels (default: {HEIGHT})")
    parser.add_argument("--strict", action="store_true", help="Reject input with trailing bytes")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    config = RasterConfig(
        width=args.width,
        height=args.height,
        input_path=args.input,
        output_path=args.output,
        strict=args.strict,
    )
    try:
        convert(config)
    except (OSError, ValueError, IndexError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    print(f"Resolution: {config.width}x{config.height}")
    print(f"Output file: {config.output_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
