"""Chunk partitioning and offset-to-coordinate mapping.

Workers receive a contiguous byte range each. Two modes are supported:

- aligned (default): chunk boundaries fall on whole pixels, so no RGB
  triplet is ever split between two workers.
- byte-exact: ``floor(length / n)`` bytes per worker regardless of the
  3-byte pixel stride. Boundaries may land inside a triplet; workers
  refuse such chunks rather than paint shifted colors.

When ``n`` divides ``length / 3`` both modes produce identical chunks.
"""

import numpy as np

from rgbblit.core.constants import BYTES_PER_PIXEL
from rgbblit.pipeline.data import Chunk


def _check_args(length: int, num_workers: int, index: int) -> None:
    if length < 0:
        raise ValueError(f"length must be >= 0, got {length}")
    if num_workers < 1:
        raise ValueError(f"num_workers must be >= 1, got {num_workers}")
    if not 0 <= index < num_workers:
        raise ValueError(f"index {index} outside [0, {num_workers})")


def byte_exact_chunk(length: int, num_workers: int, index: int) -> Chunk:
    """Split ``length`` bytes into ``num_workers`` ranges by byte count.

    Workers ``0..n-2`` get ``floor(length / n)`` bytes; the last worker
    absorbs the remainder and always ends at ``length - 1``.
    """
    _check_args(length, num_workers, index)

    chunk_len = length // num_workers
    start = chunk_len * index
    if index == num_workers - 1:
        end = length - 1
    else:
        end = min(length, start + chunk_len) - 1
    return Chunk(start=start, end=end)


def aligned_chunk(length: int, num_workers: int, index: int) -> Chunk:
    """Split ``length`` bytes into ranges that start and end on pixel boundaries.

    Same scheme as :func:`byte_exact_chunk` but counted in pixels. Any
    trailing partial pixel stays with the last worker.
    """
    _check_args(length, num_workers, index)

    pixels_per_worker = (length // BYTES_PER_PIXEL) // num_workers
    start = pixels_per_worker * BYTES_PER_PIXEL * index
    if index == num_workers - 1:
        end = length - 1
    else:
        end = start + pixels_per_worker * BYTES_PER_PIXEL - 1
    return Chunk(start=start, end=end)


def chunk_for_worker(length: int, num_workers: int, index: int, align: bool = True) -> Chunk:
    """Chunk assigned to worker ``index`` of ``num_workers``."""
    if align:
        return aligned_chunk(length, num_workers, index)
    return byte_exact_chunk(length, num_workers, index)


def partition(length: int, num_workers: int, align: bool = True) -> list[Chunk]:
    """All chunks of a run, in worker order."""
    return [chunk_for_worker(length, num_workers, i, align=align) for i in range(num_workers)]


def offset_to_coord(offset: int, width: int) -> tuple[int, int]:
    """Map the byte offset of a triplet to its (x, y) pixel coordinate."""
    idx = offset // BYTES_PER_PIXEL
    return idx % width, idx // width


def chunk_coords(chunk: Chunk, width: int) -> tuple[np.ndarray, np.ndarray]:
    """Vectorized coordinates for every whole triplet in ``chunk``."""
    first = chunk.start // BYTES_PER_PIXEL
    idx = np.arange(first, first + chunk.num_pixels, dtype=np.int64)
    return idx % width, idx // width
