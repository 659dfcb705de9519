"""Terminal output helpers with colors."""

import sys
from typing import TextIO

# Colors
RED = "\033[0;31m"
GREEN = "\033[0;32m"
YELLOW = "\033[1;33m"
BLUE = "\033[0;34m"
GRAY = "\033[90m"
MAGENTA = "\033[0;35m"
NC = "\033[0m"

PREFIX = "[workbranch]"

_to_stderr = False


def use_stderr(enabled: bool = True) -> None:
    """Send status lines to stderr so stdout carries only output meant for eval/pipes."""
    global _to_stderr
    _to_stderr = enabled


def status_stream() -> TextIO:
    return sys.stderr if _to_stderr else sys.stdout


def log(msg: str) -> None:
    print(f"\r\033[K{BLUE}{PREFIX}{NC} {msg}", file=status_stream())


def success(msg: str) -> None:
    print(f"\r\033[K{GREEN}{PREFIX}{NC} {msg}", file=status_stream())


def warn(msg: str) -> None:
    print(f"\r\033[K{YELLOW}{PREFIX}{NC} {msg}", file=status_stream())


def error(msg: str) -> None:
    print(f"\r\033[K{RED}{PREFIX}{NC} {msg}", file=status_stream())
