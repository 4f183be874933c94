"""Per-pixel color filters.

Every filter takes a uint8 array whose last axis holds (r, g, b) and
returns a new uint8 array of the same shape. A single pixel is just an
array of shape (3,), so workers run the same code on a whole chunk at
once.

Filter codes used on the command line:

    g  grayscale   r = g = b = floor((r + g + b) / 3)
    i  invert      c = 255 - c
    l  lighten     c = c + (255 - c) * 0.25   (truncated)
    d  darken      c = c * 0.75               (truncated)
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass

import numpy as np

logger = logging.getLogger(__name__)

TINT_FACTOR = 0.25
SHADE_FACTOR = 0.25

FilterFn = Callable[[np.ndarray], np.ndarray]


def grayscale(rgb: np.ndarray) -> np.ndarray:
    """Replace every channel with the integer mean of the three."""
    avg = (rgb.astype(np.uint16).sum(axis=-1) // 3).astype(np.uint8)
    return np.repeat(avg[..., np.newaxis], 3, axis=-1)


def invert(rgb: np.ndarray) -> np.ndarray:
    return 255 - np.asarray(rgb, dtype=np.uint8)


def lighten(rgb: np.ndarray) -> np.ndarray:
    """Move each channel a quarter of the way towards white."""
    c = rgb.astype(np.float32)
    return (c + (255.0 - c) * TINT_FACTOR).astype(np.uint8)


def darken(rgb: np.ndarray) -> np.ndarray:
    """Scale each channel down by a quarter."""
    c = rgb.astype(np.float32)
    return (c * (1.0 - SHADE_FACTOR)).astype(np.uint8)


FILTERS: dict[str, tuple[str, FilterFn]] = {
    "g": ("grayscale", grayscale),
    "i": ("invert", invert),
    "l": ("lighten", lighten),
    "d": ("darken", darken),
}


@dataclass(frozen=True)
class FilterChain:
    """Ordered, immutable sequence of filter codes.

    Unknown codes are dropped when parsing, so ``codes`` only ever holds
    keys of :data:`FILTERS`.
    """

    codes: tuple[str, ...] = ()

    @classmethod
    def parse(cls, text: str | None) -> "FilterChain":
        """Build a chain from a string such as ``"gid"``."""
        if not text:
            return cls()

        codes = []
        for code in text:
            if code in FILTERS:
                codes.append(code)
            else:
                logger.debug(f"ignoring unknown filter {code!r}")
        return cls(tuple(codes))

    @property
    def names(self) -> list[str]:
        return [FILTERS[code][0] for code in self.codes]

    def __str__(self) -> str:
        return "".join(self.codes)

    def __len__(self) -> int:
        return len(self.codes)

    def apply(self, rgb: np.ndarray) -> np.ndarray:
        """Run every filter in order over ``rgb``."""
        out = np.asarray(rgb, dtype=np.uint8)
        for code in self.codes:
            out = FILTERS[code][1](out)
        return out

    def apply_triple(self, r: int, g: int, b: int) -> tuple[int, int, int]:
        out = self.apply(np.array([r, g, b], dtype=np.uint8))
        return int(out[0]), int(out[1]), int(out[2])
