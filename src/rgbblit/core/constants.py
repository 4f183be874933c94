"""Constants shared across the pipeline."""

PROGNAME = "rgbblit"

# Default canvas geometry
DEFAULT_WIDTH = 400
DEFAULT_HEIGHT = 400

# Bytes per pixel in the source file (one RGB triplet)
BYTES_PER_PIXEL = 3

# Coordinates travel as uint16 on the wire
MAX_DIMENSION = 0xFFFF


def row_stride(width: int) -> int:
    """Bytes occupied by one image row."""
    return width * BYTES_PER_PIXEL
