"""Canvas backends.

All backends keep the image in an ``(height, width, 3)`` uint8 numpy
buffer and differ only in where it ends up:

- MemoryCanvas: nowhere, the buffer is the result (tests, benchmarks)
- PngCanvas: written to a PNG file with Pillow when closed
- WindowCanvas: shown in an interactive matplotlib window

The backend is picked once at startup via :func:`make_canvas`.
"""

import os
import sys
from pathlib import Path

import numpy as np

from rgbblit.core.config import CanvasBackend, CanvasSettings
from rgbblit.core.constants import PROGNAME
from rgbblit.core.errors import CanvasError


class Canvas:
    """Base canvas: a pixel buffer with open/paint/flush/close hooks."""

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self.pixels = np.zeros((height, width, 3), dtype=np.uint8)
        self.is_open = False

    def open(self) -> None:
        self.is_open = True

    def set_pixel(self, x: int, y: int, r: int, g: int, b: int) -> None:
        self.pixels[y, x] = (r, g, b)

    def paint(self, records: np.ndarray) -> None:
        """Set every pixel of a structured point array."""
        ys, xs = records["y"], records["x"]
        self.pixels[ys, xs, 0] = records["r"]
        self.pixels[ys, xs, 1] = records["g"]
        self.pixels[ys, xs, 2] = records["b"]

    def flush(self) -> None:
        pass

    def wait_closed(self) -> None:
        """Block until the surface is closed externally."""

    def close(self) -> None:
        self.is_open = False

    def abort(self) -> None:
        """Release the surface without producing any output."""
        self.close()


class MemoryCanvas(Canvas):
    """Headless canvas; the close signal arrives immediately."""


class PngCanvas(Canvas):
    """Writes the finished image to a PNG file on close."""

    def __init__(self, width: int, height: int, output_path: str | Path):
        super().__init__(width, height)
        self.output_path = Path(output_path)

    def open(self) -> None:
        parent = self.output_path.parent
        if not parent.is_dir():
            raise CanvasError(f"output directory {parent} does not exist", operation="open")
        super().open()

    def close(self) -> None:
        if not self.is_open:
            return

        from PIL import Image

        try:
            Image.fromarray(self.pixels).save(self.output_path, format="PNG")
        except OSError as e:
            raise CanvasError(f"could not write {self.output_path}: {e}", operation="close") from e
        finally:
            super().close()

    def abort(self) -> None:
        # An incomplete image is never written.
        Canvas.close(self)


class WindowCanvas(Canvas):
    """Interactive matplotlib window."""

    def __init__(self, width: int, height: int, display: str | None = None):
        super().__init__(width, height)
        self.display = display
        self._fig = None
        self._image = None

    def open(self) -> None:
        if sys.platform.startswith("linux"):
            if self.display:
                os.environ["DISPLAY"] = self.display
            elif not (os.environ.get("DISPLAY") or os.environ.get("WAYLAND_DISPLAY")):
                raise CanvasError("could not open display: no display set", operation="open")

        import matplotlib.pyplot as plt

        backend = plt.get_backend().lower()
        if backend in ("agg", "pdf", "ps", "svg", "cairo", "template"):
            raise CanvasError(f"could not open display: non-interactive backend {backend}", operation="open")

        try:
            plt.ion()
            fig, ax = plt.subplots(figsize=(self.width / 100, self.height / 100), dpi=100)
            ax.set_position([0, 0, 1, 1])
            ax.set_axis_off()
            self._image = ax.imshow(self.pixels, interpolation="nearest", origin="upper")
            if fig.canvas.manager is not None:
                fig.canvas.manager.set_window_title(PROGNAME)
            plt.show(block=False)
        except Exception as e:
            raise CanvasError(f"could not open display: {e}", operation="open") from e

        self._fig = fig
        super().open()

    def flush(self) -> None:
        if self._fig is None:
            return
        self._image.set_data(self.pixels)
        self._fig.canvas.draw_idle()
        self._fig.canvas.flush_events()

    def wait_closed(self) -> None:
        import matplotlib.pyplot as plt

        if self._fig is None:
            return
        self.flush()
        plt.ioff()
        plt.show()

    def close(self) -> None:
        import matplotlib.pyplot as plt

        if self._fig is not None:
            plt.close(self._fig)
            self._fig = None
        super().close()


def make_canvas(settings: CanvasSettings) -> Canvas:
    """Instantiate the configured canvas backend."""
    backend = CanvasBackend(settings.backend)
    if backend is CanvasBackend.MEMORY:
        return MemoryCanvas(settings.width, settings.height)
    if backend is CanvasBackend.PNG:
        return PngCanvas(settings.width, settings.height, settings.output_path)
    return WindowCanvas(settings.width, settings.height, display=settings.display)
