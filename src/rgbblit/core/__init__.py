"""Core configuration, constants and errors."""

from rgbblit.core.config import Settings, get_settings
from rgbblit.core.errors import (
    ArgumentError,
    BlitError,
    CanvasError,
    InputError,
    TransportError,
)

__all__ = [
    "ArgumentError",
    "BlitError",
    "CanvasError",
    "InputError",
    "Settings",
    "TransportError",
    "get_settings",
]
