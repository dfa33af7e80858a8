"""Terminal helper functions."""

import os

__all__ = [
    "is_terminal",
    "terminal_columns",
]


def is_terminal(stream) -> bool:
    """True if the stream is attached to a tty."""
    isatty = getattr(stream, "isatty", None)
    if isatty is None:
        return False
    try:
        return bool(isatty())
    except (OSError, ValueError):
        return False


def terminal_columns(stream, default: int = 80) -> int:
    """Return the width of the terminal behind stream, or default."""
    try:
        return os.get_terminal_size(stream.fileno()).columns
    except (AttributeError, OSError, ValueError):
        return default
