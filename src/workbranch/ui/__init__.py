"""UI components for terminal output."""

from workbranch.ui.output import (
    BLUE,
    GRAY,
    GREEN,
    MAGENTA,
    NC,
    RED,
    YELLOW,
    error,
    log,
    status_stream,
    success,
    use_stderr,
    warn,
)
from workbranch.ui.timer import LiveTimer

__all__ = [
    # Colors
    "RED",
    "GREEN",
    "YELLOW",
    "BLUE",
    "GRAY",
    "MAGENTA",
    "NC",
    # Functions
    "log",
    "success",
    "warn",
    "error",
    "status_stream",
    "use_stderr",
    # Classes
    "LiveTimer",
]
