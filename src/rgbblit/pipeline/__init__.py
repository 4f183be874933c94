"""Parallel blit pipeline.

Architecture:
┌─────────────────┐     ┌──────────────────┐     ┌─────────────────┐
│  Workers (N)    │────▶│  Point Channel   │────▶│  Renderer       │
│  read + filter  │     │  (7-byte records)│     │  (Canvas)       │
└─────────────────┘     └──────────────────┘     └─────────────────┘

- Each worker reads a disjoint chunk of the source file
- Every point carries its own coordinate, so arrival order is irrelevant
- The renderer stops after exactly one point per source pixel
"""

from rgbblit.pipeline.channel import PointChannel
from rgbblit.pipeline.data import Chunk, PixelPoint, RenderStats, RunContext, WorkerFailure
from rgbblit.pipeline.filters import FilterChain
from rgbblit.pipeline.launcher import ProcessLauncher, ThreadLauncher, make_launcher
from rgbblit.pipeline.partition import chunk_for_worker, offset_to_coord, partition
from rgbblit.pipeline.pipeline import Coordinator, RunResult, run_pipeline
from rgbblit.pipeline.renderer import Renderer
from rgbblit.pipeline.worker import Worker, WorkerJob, worker_main

__all__ = [
    "Chunk",
    "Coordinator",
    "FilterChain",
    "PixelPoint",
    "PointChannel",
    "ProcessLauncher",
    "RenderStats",
    "Renderer",
    "RunContext",
    "RunResult",
    "ThreadLauncher",
    "Worker",
    "WorkerFailure",
    "WorkerJob",
    "chunk_for_worker",
    "make_launcher",
    "offset_to_coord",
    "partition",
    "run_pipeline",
    "worker_main",
]
