"""Configuration and settings for the blitter."""

from enum import Enum
from pathlib import Path
from typing import Self

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from rgbblit.core.constants import DEFAULT_HEIGHT, DEFAULT_WIDTH, MAX_DIMENSION


class CanvasBackend(str, Enum):
    """Canvas implementation selected at startup."""

    MEMORY = "memory"  # numpy buffer only (headless)
    PNG = "png"  # numpy buffer written to a PNG file on close
    WINDOW = "window"  # interactive matplotlib window


class LauncherKind(str, Enum):
    """How worker tasks are started."""

    PROCESS = "process"  # one OS process per worker
    THREAD = "thread"  # in-process threads (debugging, tests)


class CanvasSettings(BaseSettings):
    """Canvas geometry and display configuration."""

    model_config = SettingsConfigDict(env_prefix="RGBBLIT_CANVAS_", populate_by_name=True)

    width: int = Field(default=DEFAULT_WIDTH, ge=1, le=MAX_DIMENSION)
    height: int = Field(default=DEFAULT_HEIGHT, ge=1, le=MAX_DIMENSION)

    backend: CanvasBackend = CanvasBackend.WINDOW

    # Destination for the png backend
    output_path: Path = Path("rgbblit.png")

    # Display target, only consulted by the window backend
    display: str | None = Field(
        default=None,
        validation_alias=AliasChoices("RGBBLIT_CANVAS_DISPLAY", "DISPLAY"),
    )

    # Points painted between canvas flushes
    flush_interval: int = Field(default=4000, ge=1)

    # Keep the canvas open until it is closed externally
    hold_open: bool = True


class TransportSettings(BaseSettings):
    """Point channel configuration."""

    model_config = SettingsConfigDict(env_prefix="RGBBLIT_TRANSPORT_")

    # Point records per channel message
    batch_size: int = Field(default=1024, ge=1)

    # Maximum channel messages in flight before senders block
    queue_size: int = Field(default=256, ge=1)

    # Seconds the renderer waits on an empty channel before checking workers
    poll_interval: float = Field(default=0.5, gt=0)

    # Empty polls tolerated after all workers exited
    stall_polls: int = Field(default=2, ge=1)


class WorkerSettings(BaseSettings):
    """Worker spawning and partitioning configuration."""

    model_config = SettingsConfigDict(env_prefix="RGBBLIT_WORKER_")

    launcher: LauncherKind = LauncherKind.PROCESS

    # multiprocessing start method for the process launcher
    start_method: str = "spawn"

    # Align chunk boundaries to whole pixels (False = byte-exact split)
    align_chunks: bool = True


class Settings(BaseSettings):
    """Master configuration aggregating all subsystems."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    canvas: CanvasSettings = Field(default_factory=CanvasSettings)
    transport: TransportSettings = Field(default_factory=TransportSettings)
    workers: WorkerSettings = Field(default_factory=WorkerSettings)

    # Debug logging
    debug: bool = False

    @model_validator(mode="after")
    def check_start_method(self) -> Self:
        """Reject start methods multiprocessing does not know."""
        if self.workers.start_method not in ("spawn", "fork", "forkserver"):
            raise ValueError(f"unknown start method: {self.workers.start_method}")
        return self


def get_settings() -> Settings:
    """Load settings from environment and .env file."""
    return Settings()
