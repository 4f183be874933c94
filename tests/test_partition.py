"""Tests for chunk partitioning and coordinate mapping."""

import numpy as np
import pytest

from rgbblit.pipeline.data import Chunk
from rgbblit.pipeline.partition import (
    aligned_chunk,
    byte_exact_chunk,
    chunk_coords,
    chunk_for_worker,
    offset_to_coord,
    partition,
)


def _covered(chunks: list[Chunk]) -> list[int]:
    covered = []
    for c in chunks:
        covered.extend(range(c.start, c.end + 1))
    return covered


class TestByteExactChunks:
    """Tests for the floor(length / n) byte split."""

    def test_single_worker_covers_file(self):
        """N=1 should get the whole file."""
        assert byte_exact_chunk(12, 1, 0) == Chunk(0, 11)

    def test_even_split(self):
        chunks = partition(12, 2, align=False)
        assert chunks == [Chunk(0, 5), Chunk(6, 11)]

    def test_chunk_lengths(self):
        """Workers 0..N-2 get floor(L/N) bytes, the last absorbs the rest."""
        length, n = 1000, 7
        chunks = partition(length, n, align=False)

        for c in chunks[:-1]:
            assert c.length == length // n
        assert chunks[-1].end == length - 1
        assert chunks[-1].length == length - (n - 1) * (length // n)

    @pytest.mark.parametrize("length,n", [(12, 5), (1200, 7), (30, 30), (6, 10)])
    def test_exact_cover(self, length, n):
        """Chunks should cover [0, L) once with no gaps or overlap."""
        assert _covered(partition(length, n, align=False)) == list(range(length))

    def test_boundary_can_split_triplet(self):
        """Byte-exact boundaries are not guaranteed to fall on pixels."""
        chunks = partition(12, 5, align=False)
        assert any(c.start % 3 for c in chunks if not c.is_empty)


class TestAlignedChunks:
    """Tests for the pixel-aligned split."""

    @pytest.mark.parametrize("length,n", [(12, 5), (1200, 7), (480000, 13), (6, 2), (6, 5)])
    def test_exact_cover(self, length, n):
        assert _covered(partition(length, n)) == list(range(length))

    @pytest.mark.parametrize("n", [1, 2, 3, 7, 11])
    def test_boundaries_on_pixels(self, n):
        """Every chunk should start and end on whole pixels."""
        for c in partition(1200, n):
            assert c.start % 3 == 0
            assert c.length % 3 == 0

    @pytest.mark.parametrize("length,n", [(12, 2), (12, 4), (1200, 4), (480000, 8)])
    def test_matches_byte_exact_when_divisible(self, length, n):
        """When N divides L/3 both modes agree."""
        assert partition(length, n, align=True) == partition(length, n, align=False)

    def test_more_workers_than_pixels(self):
        """Surplus workers get empty chunks; the last one still ends at L-1."""
        chunks = partition(6, 5)
        assert [c.is_empty for c in chunks] == [True, True, True, True, False]
        assert chunks[-1] == Chunk(0, 5)

    def test_single_worker(self):
        assert aligned_chunk(480000, 1, 0) == Chunk(0, 479999)


class TestPartitionArguments:
    """Invalid arguments should be rejected."""

    @pytest.mark.parametrize("length,n,i", [(12, 0, 0), (12, 2, 2), (12, 2, -1), (-3, 1, 0)])
    def test_invalid(self, length, n, i):
        with pytest.raises(ValueError):
            chunk_for_worker(length, n, i)


class TestCoordinates:
    """Tests for offset -> (x, y) mapping."""

    def test_offset_to_coord(self):
        assert offset_to_coord(0, 2) == (0, 0)
        assert offset_to_coord(3, 2) == (1, 0)
        assert offset_to_coord(6, 2) == (0, 1)
        assert offset_to_coord(3 * (5 * 400 + 17), 400) == (17, 5)

    def test_chunk_coords(self):
        """Vectorized mapping should agree with the scalar one."""
        chunk = Chunk(start=9, end=20)  # pixels 3..6
        xs, ys = chunk_coords(chunk, width=4)

        expected = [offset_to_coord(o, 4) for o in range(9, 21, 3)]
        assert list(zip(xs.tolist(), ys.tolist())) == expected

    def test_unique_across_workers(self):
        """Every coordinate of the image is produced exactly once."""
        width, height, n = 5, 4, 3
        seen = []
        for chunk in partition(width * height * 3, n):
            xs, ys = chunk_coords(chunk, width)
            seen.extend(zip(xs.tolist(), ys.tolist()))

        assert len(seen) == width * height
        assert sorted(seen) == sorted((x, y) for x in range(width) for y in range(height))

    def test_empty_chunk_has_no_coords(self):
        xs, ys = chunk_coords(Chunk(0, -1), width=4)
        assert len(xs) == 0 and len(ys) == 0
        assert xs.dtype == np.int64
