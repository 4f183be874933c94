"""Exception hierarchy.

Every error is fatal for the whole run. Each exception records the
operation that failed so the CLI can print a useful diagnostic.
"""


class BlitError(Exception):
    """Base class for all rgbblit failures."""

    def __init__(self, message: str, operation: str | None = None):
        super().__init__(message)
        self.message = message
        self.operation = operation

    def __str__(self) -> str:
        if self.operation:
            return f"{self.operation}: {self.message}"
        return self.message


class ArgumentError(BlitError):
    """Invalid command-line arguments (e.g. bad worker count)."""


class InputError(BlitError):
    """Source file missing, unreadable or of the wrong length."""


class TransportError(BlitError):
    """Failure sending or receiving point messages."""


class CanvasError(BlitError):
    """Display surface could not be opened or written."""


_ERROR_KINDS: dict[str, type[BlitError]] = {
    cls.__name__: cls for cls in (ArgumentError, InputError, TransportError, CanvasError)
}


def error_from_kind(kind: str, message: str, operation: str | None = None) -> BlitError:
    """Rebuild a typed error from its class name.

    Used to re-raise worker failures on the renderer side. Unknown kinds
    map to TransportError.
    """
    cls = _ERROR_KINDS.get(kind, TransportError)
    return cls(message, operation=operation)
