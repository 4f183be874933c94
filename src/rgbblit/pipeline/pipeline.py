"""Coordinator - validates a run, starts the workers and becomes the renderer."""

import logging
import sys
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from rgbblit.core.config import Settings, get_settings
from rgbblit.core.constants import BYTES_PER_PIXEL, PROGNAME, row_stride
from rgbblit.core.errors import ArgumentError, InputError, TransportError
from rgbblit.pipeline.data import RenderStats, RunContext
from rgbblit.pipeline.filters import FilterChain
from rgbblit.pipeline.launcher import Launcher, TaskHandle, make_launcher
from rgbblit.pipeline.renderer import Renderer
from rgbblit.pipeline.worker import WorkerJob, worker_main
from rgbblit.viz.canvas import Canvas, make_canvas

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)


def parse_num_workers(value: str | int) -> int:
    """Parse the worker count argument. Must be a positive integer."""
    try:
        num_workers = int(value)
    except (TypeError, ValueError):
        raise ArgumentError(f"invalid number of workers ({value!r})", operation="parse") from None

    if num_workers < 1:
        raise ArgumentError(f"invalid number of workers ({num_workers})", operation="parse")
    return num_workers


def validate_input(input_path: str | Path, width: int, height: int) -> int:
    """Check the source file and return its length in bytes.

    The length must be a positive whole number of rows and must fit on
    the canvas.
    """
    path = Path(input_path)
    try:
        length = path.stat().st_size
    except OSError as e:
        raise InputError(f"{path}: {e.strerror or e}", operation="open") from e

    if not path.is_file():
        raise InputError(f"{path}: not a regular file", operation="open")

    stride = row_stride(width)
    if length == 0 or length % stride:
        raise InputError(
            f"invalid input length. Expected a multiple of {stride} but got {length}.",
            operation="validate",
        )

    rows = length // stride
    if rows > height:
        raise InputError(
            f"input holds {rows} rows but the canvas is only {height} rows high",
            operation="validate",
        )
    return length


@dataclass
class RunResult:
    """Outcome of one blit run."""

    num_workers: int
    length: int
    filters: FilterChain
    stats: RenderStats
    pixels: np.ndarray


class Coordinator:
    """Runs one blit job from validation to a finished canvas.

    Architecture:
    ┌─────────────┐     ┌──────────────┐     ┌──────────────┐
    │  Worker x N │────▶│ PointChannel │────▶│   Renderer   │
    │ (chunks)    │     │ (records)    │     │  (Canvas)    │
    └─────────────┘     └──────────────┘     └──────────────┘
    """

    def __init__(
        self,
        settings: Settings | None = None,
        launcher: Launcher | None = None,
        canvas: Canvas | None = None,
        log_fn=None,
    ):
        self.settings = settings or get_settings()
        self.launcher = launcher or make_launcher(
            self.settings.workers.launcher,
            self.settings.workers.start_method,
        )
        self.canvas = canvas
        self.log = log_fn or logger.info

        self._handles: list[TaskHandle] = []

    def _log(self, message: str):
        self.log(f"{PROGNAME}(r0): {message}")

    def _workers_running(self) -> bool:
        """Liveness hook for the renderer."""
        for handle in self._handles:
            code = handle.exitcode
            if code is not None and code != 0:
                raise TransportError(f"worker {handle.index} exited with status {code}", operation="wait")
        return any(handle.is_alive() for handle in self._handles)

    def _terminate_workers(self):
        for handle in self._handles:
            handle.terminate()
        for handle in self._handles:
            handle.join(timeout=1.0)

    def run(
        self,
        num_workers: str | int,
        input_path: str | Path,
        filters: str | FilterChain | None = None,
    ) -> RunResult:
        """Validate, spawn workers, render. Raises BlitError on any failure."""
        canvas_cfg = self.settings.canvas
        transport_cfg = self.settings.transport

        n = parse_num_workers(num_workers)
        self._log(f"opening file `{input_path}' for reading")
        length = validate_input(input_path, canvas_cfg.width, canvas_cfg.height)

        chain = filters if isinstance(filters, FilterChain) else FilterChain.parse(filters)
        if chain:
            self._log(f"filters: {', '.join(chain.names)}")

        job = WorkerJob(
            input_path=str(input_path),
            length=length,
            width=canvas_cfg.width,
            filters=chain,
            batch_size=transport_cfg.batch_size,
            align_chunks=self.settings.workers.align_chunks,
            log_level=logging.DEBUG if self.settings.debug else logging.INFO,
        )

        canvas = self.canvas or make_canvas(canvas_cfg)
        channel = self.launcher.make_channel(transport_cfg.queue_size)

        self._log(f"spawning {n} workers")
        self._handles = self.launcher.spawn(worker_main, (job, channel), n)

        renderer = Renderer(
            context=RunContext.renderer(n),
            canvas=canvas,
            channel=channel,
            expected=length // BYTES_PER_PIXEL,
            flush_interval=canvas_cfg.flush_interval,
            poll_interval=transport_cfg.poll_interval,
            stall_polls=transport_cfg.stall_polls,
            hold_open=canvas_cfg.hold_open,
            liveness=self._workers_running,
            log_fn=self.log,
        )

        try:
            stats = renderer.run()
        except BaseException:
            self._terminate_workers()
            raise
        else:
            self._join_workers()
        finally:
            channel.close()

        return RunResult(num_workers=n, length=length, filters=chain, stats=stats, pixels=canvas.pixels)

    def _join_workers(self):
        for handle in self._handles:
            handle.join(timeout=5.0)


def run_pipeline(
    num_workers: str | int,
    input_path: str | Path,
    filters: str | None = None,
    settings: Settings | None = None,
) -> RunResult:
    """Convenience function to run one blit job.

    Args:
        num_workers: Number of worker tasks (parsed, must be > 0)
        input_path: Raw row-major RGB file
        filters: Filter string over {g, i, l, d}
        settings: Configuration (None = load from environment)

    Returns:
        RunResult with the rendered pixels and receive statistics
    """
    return Coordinator(settings=settings).run(num_workers, input_path, filters)
