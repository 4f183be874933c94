"""Worker task: reads one chunk of the source file and streams its pixels.

Each worker opens the file independently, reads only its own byte range,
maps every triplet to a coordinate, runs the filter chain and sends the
resulting points to the renderer in fixed-size record batches.
"""

import logging
import sys
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from rgbblit.core.constants import BYTES_PER_PIXEL, PROGNAME
from rgbblit.core.errors import BlitError, InputError
from rgbblit.pipeline.channel import PointChannel, build_records
from rgbblit.pipeline.data import Chunk, RunContext, WorkerFailure
from rgbblit.pipeline.filters import FilterChain
from rgbblit.pipeline.partition import chunk_coords, chunk_for_worker

# Configure module logger
logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)


@dataclass(frozen=True)
class WorkerJob:
    """Everything a worker needs, shared by all workers of a run.

    Must stay picklable: it is shipped to worker processes as-is.
    """

    input_path: str
    length: int
    width: int
    filters: FilterChain = FilterChain()
    batch_size: int = 1024
    align_chunks: bool = True
    log_level: int = logging.INFO


class Worker:
    """Reads one chunk and sends one point per triplet."""

    def __init__(
        self,
        context: RunContext,
        chunk: Chunk,
        filters: FilterChain,
        channel: PointChannel,
        input_path: str | Path,
        width: int,
        batch_size: int = 1024,
        log_fn=None,
    ):
        self.context = context
        self.chunk = chunk
        self.filters = filters
        self.channel = channel
        self.input_path = Path(input_path)
        self.width = width
        self.batch_size = batch_size
        self.log = log_fn or logger.info

        self.points_sent = 0

    def _log(self, message: str):
        self.log(f"{PROGNAME}({self.context.tag}): {message}")

    def _check_alignment(self):
        if self.chunk.is_empty:
            return
        if self.chunk.start % BYTES_PER_PIXEL or self.chunk.length % BYTES_PER_PIXEL:
            raise InputError(
                f"chunk [{self.chunk.start}, {self.chunk.end}] ({self.chunk.length} bytes) "
                f"does not hold whole {BYTES_PER_PIXEL}-byte pixels",
                operation="partition",
            )

    def read_chunk(self) -> bytes:
        """Random-access read of exactly this worker's byte range."""
        if self.chunk.is_empty:
            return b""

        try:
            with open(self.input_path, "rb") as f:
                f.seek(self.chunk.start)
                data = f.read(self.chunk.length)
        except OSError as e:
            raise InputError(f"{self.input_path}: {e.strerror or e}", operation="read") from e

        if len(data) != self.chunk.length:
            raise InputError(
                f"short read from {self.input_path}: expected {self.chunk.length} bytes, "
                f"got {len(data)}",
                operation="read",
            )
        return data

    def run(self) -> int:
        """Process the chunk. Returns the number of points sent."""
        self._log(f"{self.chunk.length} bytes: [{self.chunk.start}, {self.chunk.end}]")
        self._check_alignment()

        data = self.read_chunk()
        if not data:
            return 0

        rgb = np.frombuffer(data, dtype=np.uint8).reshape(-1, BYTES_PER_PIXEL)
        rgb = self.filters.apply(rgb)
        x, y = chunk_coords(self.chunk, self.width)
        records = build_records(x, y, rgb)

        for start in range(0, len(records), self.batch_size):
            self.points_sent += self.channel.send(records[start : start + self.batch_size])

        logger.debug(f"{PROGNAME}({self.context.tag}): sent {self.points_sent} points")
        return self.points_sent


def worker_main(context: RunContext, job: WorkerJob, channel: PointChannel) -> int:
    """Launcher entry point for one worker.

    Returns a process exit code. Failures are reported on the channel so
    the renderer can abort the run instead of waiting forever.
    """
    logger.setLevel(job.log_level)
    chunk = chunk_for_worker(job.length, context.size, context.index, align=job.align_chunks)
    worker = Worker(
        context=context,
        chunk=chunk,
        filters=job.filters,
        channel=channel,
        input_path=job.input_path,
        width=job.width,
        batch_size=job.batch_size,
    )

    try:
        worker.run()
    except BlitError as e:
        logger.error(f"{PROGNAME}({context.tag}): {e}")
        try:
            channel.report_failure(
                WorkerFailure(
                    worker_index=context.index,
                    kind=type(e).__name__,
                    message=e.message,
                    operation=e.operation,
                )
            )
        except BlitError as report_error:
            logger.error(f"{PROGNAME}({context.tag}): could not report failure: {report_error}")
        return 1

    return 0
