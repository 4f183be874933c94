"""Data classes for pipeline communication."""

from dataclasses import dataclass

import numpy as np

from rgbblit.core.constants import BYTES_PER_PIXEL

# Wire layout of one point record: packed little-endian, no padding
POINT_DTYPE = np.dtype(
    [
        ("x", "<u2"),
        ("y", "<u2"),
        ("r", "u1"),
        ("g", "u1"),
        ("b", "u1"),
    ]
)
RECORD_SIZE = POINT_DTYPE.itemsize  # 7 bytes


@dataclass(frozen=True)
class RunContext:
    """Identity of one task in a run.

    Passed explicitly into every component instead of living in
    process-wide state.
    """

    index: int
    size: int
    is_renderer: bool = False

    @property
    def tag(self) -> str:
        """Short label used in log lines (r0, w3, ...)."""
        return f"r{self.index}" if self.is_renderer else f"w{self.index}"

    @classmethod
    def renderer(cls, num_workers: int) -> "RunContext":
        return cls(index=0, size=num_workers, is_renderer=True)


@dataclass(frozen=True)
class Chunk:
    """Inclusive byte range of the source file owned by one worker."""

    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    @property
    def is_empty(self) -> bool:
        return self.length <= 0

    @property
    def num_pixels(self) -> int:
        return max(self.length, 0) // BYTES_PER_PIXEL


@dataclass(frozen=True)
class PixelPoint:
    """One painted pixel: coordinate plus color."""

    x: int
    y: int
    r: int
    g: int
    b: int

    @property
    def rgb(self) -> tuple[int, int, int]:
        return (self.r, self.g, self.b)

    def to_record(self) -> np.ndarray:
        """Single-element structured array in wire layout."""
        return np.array([(self.x, self.y, self.r, self.g, self.b)], dtype=POINT_DTYPE)

    @classmethod
    def from_record(cls, record) -> "PixelPoint":
        return cls(
            x=int(record["x"]),
            y=int(record["y"]),
            r=int(record["r"]),
            g=int(record["g"]),
            b=int(record["b"]),
        )


@dataclass(frozen=True)
class WorkerFailure:
    """Posted on the channel by a worker that could not finish its chunk."""

    worker_index: int
    kind: str
    message: str
    operation: str | None = None


@dataclass
class RenderStats:
    """Counters reported by the renderer after draining the channel."""

    expected: int
    points_received: int = 0
    batches_received: int = 0
    duplicates: int = 0
    elapsed: float = 0.0

    @property
    def complete(self) -> bool:
        return self.points_received == self.expected
