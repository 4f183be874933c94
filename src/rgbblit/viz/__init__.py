"""Canvas backends for displaying and saving the rendered image."""

from rgbblit.viz.canvas import (
    Canvas,
    MemoryCanvas,
    PngCanvas,
    WindowCanvas,
    make_canvas,
)

__all__ = [
    "Canvas",
    "MemoryCanvas",
    "PngCanvas",
    "WindowCanvas",
    "make_canvas",
]
