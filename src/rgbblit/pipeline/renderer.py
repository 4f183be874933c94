"""Renderer: drains the point channel and paints the canvas.

Consumes points from any worker in any order until the expected count is
reached. Every point carries its own coordinate, so arrival order has no
effect on the final image.
"""

import logging
import sys
import time
from collections.abc import Callable

import numpy as np

from rgbblit.core.constants import PROGNAME
from rgbblit.core.errors import TransportError, error_from_kind
from rgbblit.pipeline.channel import PointChannel
from rgbblit.pipeline.data import RenderStats, RunContext, WorkerFailure
from rgbblit.viz.canvas import Canvas

# Configure module logger
logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)


class Renderer:
    """Single consumer of the point channel.

    ``liveness`` is called whenever a receive times out. It returns True
    while workers may still send, False once all of them have exited, and
    raises if a worker failed.
    """

    def __init__(
        self,
        context: RunContext,
        canvas: Canvas,
        channel: PointChannel,
        expected: int,
        flush_interval: int = 4000,
        poll_interval: float = 0.5,
        stall_polls: int = 2,
        hold_open: bool = True,
        liveness: Callable[[], bool] | None = None,
        log_fn=None,
    ):
        self.context = context
        self.canvas = canvas
        self.channel = channel
        self.expected = expected
        self.flush_interval = flush_interval
        self.poll_interval = poll_interval
        self.stall_polls = stall_polls
        self.hold_open = hold_open
        self.liveness = liveness
        self.log = log_fn or logger.info

        self.stats = RenderStats(expected=expected)
        self._seen = np.zeros(canvas.width * canvas.height, dtype=bool)

    def _log(self, message: str):
        self.log(f"{PROGNAME}({self.context.tag}): {message}")

    def _check_records(self, records: np.ndarray):
        if (records["x"] >= self.canvas.width).any() or (records["y"] >= self.canvas.height).any():
            raise TransportError(
                f"point outside {self.canvas.width}x{self.canvas.height} canvas",
                operation="recv",
            )
        if self.stats.points_received + len(records) > self.expected:
            raise TransportError(
                f"received more than the expected {self.expected} points",
                operation="recv",
            )

    def _count_duplicates(self, records: np.ndarray) -> int:
        idx = records["y"].astype(np.int64) * self.canvas.width + records["x"]
        unique = np.unique(idx)
        repeated = len(idx) - len(unique) + int(self._seen[unique].sum())
        self._seen[unique] = True
        return repeated

    def _handle_failure(self, failure: WorkerFailure):
        raise error_from_kind(
            failure.kind,
            f"worker {failure.worker_index} failed: {failure.message}",
            operation=failure.operation,
        )

    def _wait_for_batch(self) -> np.ndarray:
        """Block until the next point batch arrives.

        Once every worker has exited, the channel is polled at least
        ``stall_polls`` more times (never fewer than one) before giving up,
        so a batch sent just before the last exit is still drained.
        """
        # Empty polls since all workers were first seen exited
        dead_polls = None
        while True:
            item = self.channel.recv(timeout=self.poll_interval)
            if isinstance(item, WorkerFailure):
                self._handle_failure(item)
            if item is not None:
                return item

            if dead_polls is None:
                if self.liveness is None or self.liveness():
                    continue
                dead_polls = 0
                continue

            dead_polls += 1
            if dead_polls >= max(self.stall_polls, 1):
                raise TransportError(
                    f"all workers exited after {self.stats.points_received} "
                    f"of {self.expected} points",
                    operation="recv",
                )

    def drain(self) -> RenderStats:
        """Receive and paint until the expected point count is reached."""
        start = time.time()
        since_flush = 0

        while self.stats.points_received < self.expected:
            records = self._wait_for_batch()
            if len(records) == 0:
                continue

            self._check_records(records)
            self.stats.duplicates += self._count_duplicates(records)
            self.canvas.paint(records)

            self.stats.points_received += len(records)
            self.stats.batches_received += 1
            since_flush += len(records)
            if since_flush >= self.flush_interval:
                self.canvas.flush()
                since_flush = 0

        self.canvas.flush()
        self.stats.elapsed = time.time() - start

        if self.stats.duplicates:
            logger.warning(
                f"{PROGNAME}({self.context.tag}): {self.stats.duplicates} pixels painted more than once"
            )
        return self.stats

    def run(self) -> RenderStats:
        """Open the canvas, drain the channel, then hold until closed."""
        self._log(f"opening {self.canvas.width}x{self.canvas.height} canvas")
        self.canvas.open()

        try:
            stats = self.drain()
        except BaseException:
            self.canvas.abort()
            raise

        self._log(
            f"received {stats.points_received} points in {stats.batches_received} batches "
            f"({stats.elapsed:.2f}s)"
        )
        try:
            if self.hold_open:
                self.canvas.wait_closed()
        finally:
            self.canvas.close()
        return stats
