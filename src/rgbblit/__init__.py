"""rgbblit - parallel raw RGB blitter.

Splits a flat row-major RGB file across worker processes, filters every
pixel and streams the results to a single renderer that paints a canvas.
"""

__version__ = "0.1.0"
