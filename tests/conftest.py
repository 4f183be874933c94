"""Pytest fixtures shared across the rgbblit tests."""

import numpy as np
import pytest

from rgbblit.core.config import (
    CanvasBackend,
    CanvasSettings,
    LauncherKind,
    Settings,
    TransportSettings,
    WorkerSettings,
)


@pytest.fixture
def write_raw(tmp_path):
    """Factory writing raw bytes to a temp file and returning its path."""

    def _write(data, name: str = "input.rgb"):
        path = tmp_path / name
        if isinstance(data, np.ndarray):
            data = data.astype(np.uint8).tobytes()
        path.write_bytes(bytes(data))
        return path

    return _write


@pytest.fixture
def random_image():
    """Deterministic random (height, width, 3) image."""

    def _make(width: int, height: int, seed: int = 7) -> np.ndarray:
        rng = np.random.default_rng(seed)
        return rng.integers(0, 256, size=(height, width, 3), dtype=np.uint8)

    return _make


@pytest.fixture
def make_settings():
    """Headless settings for fast in-process runs."""

    def _make(
        width: int = 2,
        height: int = 2,
        launcher: LauncherKind = LauncherKind.THREAD,
        align_chunks: bool = True,
        batch_size: int = 4,
    ) -> Settings:
        return Settings(
            canvas=CanvasSettings(
                width=width,
                height=height,
                backend=CanvasBackend.MEMORY,
                hold_open=False,
            ),
            transport=TransportSettings(batch_size=batch_size, poll_interval=0.05),
            workers=WorkerSettings(launcher=launcher, align_chunks=align_chunks),
        )

    return _make


@pytest.fixture
def solid_red_2x2():
    """12 bytes: a 2x2 image of pure red."""
    return bytes([255, 0, 0] * 4)
