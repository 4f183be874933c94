"""Point channel between workers and the renderer.

Messages on the channel are either a batch of point records (``bytes``,
a concatenation of fixed-size records in :data:`POINT_DTYPE` layout) or a
:class:`WorkerFailure`. Any number of workers send into the same channel;
a single renderer receives. No ordering across senders is implied.

All transport problems surface as :class:`TransportError`.
"""

import multiprocessing
import queue

import numpy as np

from rgbblit.core.errors import TransportError
from rgbblit.pipeline.data import POINT_DTYPE, RECORD_SIZE, PixelPoint, WorkerFailure


def encode_points(records: np.ndarray) -> bytes:
    """Serialize a structured point array to wire bytes."""
    if records.dtype != POINT_DTYPE:
        records = records.astype(POINT_DTYPE)
    return records.tobytes()


def decode_points(payload: bytes) -> np.ndarray:
    """Parse wire bytes back into a structured point array."""
    if len(payload) % RECORD_SIZE:
        raise TransportError(
            f"batch of {len(payload)} bytes is not a multiple of the "
            f"{RECORD_SIZE}-byte record size",
            operation="decode",
        )
    return np.frombuffer(payload, dtype=POINT_DTYPE)


def build_records(x: np.ndarray, y: np.ndarray, rgb: np.ndarray) -> np.ndarray:
    """Assemble a structured point array from coordinates and colors."""
    records = np.empty(len(x), dtype=POINT_DTYPE)
    records["x"] = x
    records["y"] = y
    records["r"] = rgb[:, 0]
    records["g"] = rgb[:, 1]
    records["b"] = rgb[:, 2]
    return records


class PointChannel:
    """Bounded many-to-one message channel.

    Wraps either a ``multiprocessing`` queue (process workers) or a plain
    ``queue.Queue`` (thread workers). Sends block while the channel is
    full; they never wait for a matching receive.
    """

    def __init__(self, backing_queue):
        self._queue = backing_queue

    @classmethod
    def for_processes(cls, maxsize: int, start_method: str = "spawn") -> "PointChannel":
        ctx = multiprocessing.get_context(start_method)
        return cls(ctx.Queue(maxsize=maxsize))

    @classmethod
    def for_threads(cls, maxsize: int) -> "PointChannel":
        return cls(queue.Queue(maxsize=maxsize))

    def _put(self, item, operation: str) -> None:
        try:
            self._queue.put(item)
        except (OSError, ValueError, AssertionError) as e:
            raise TransportError(str(e) or type(e).__name__, operation=operation) from e

    def send(self, records: np.ndarray) -> int:
        """Send a batch of point records. Returns the number of points sent."""
        if len(records) == 0:
            return 0
        self._put(encode_points(records), operation="send")
        return len(records)

    def send_point(self, point: PixelPoint) -> None:
        self.send(point.to_record())

    def report_failure(self, failure: WorkerFailure) -> None:
        self._put(failure, operation="report_failure")

    def recv(self, timeout: float | None = None) -> np.ndarray | WorkerFailure | None:
        """Receive the next message from any sender.

        Returns a structured point array, a :class:`WorkerFailure`, or
        ``None`` if ``timeout`` expired with nothing to read.
        """
        try:
            item = self._queue.get(timeout=timeout)
        except queue.Empty:
            return None
        except (OSError, EOFError, ValueError) as e:
            raise TransportError(str(e) or type(e).__name__, operation="recv") from e

        if isinstance(item, WorkerFailure):
            return item
        if not isinstance(item, (bytes, bytearray)):
            raise TransportError(f"unexpected message type {type(item).__name__}", operation="recv")
        return decode_points(item)

    def close(self) -> None:
        """Release the underlying queue (process channels only)."""
        close = getattr(self._queue, "close", None)
        if close is not None:
            close()
