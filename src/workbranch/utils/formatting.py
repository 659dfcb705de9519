"""Formatting utilities for durations and command lines."""

import shlex


def fmt_duration(seconds: float) -> str:
    """Format duration as human readable string."""
    if seconds < 60:
        return f"{seconds:.0f}s"
    elif seconds < 3600:
        mins, secs = divmod(int(seconds), 60)
        return f"{mins}m {secs}s"
    else:
        hours, remainder = divmod(int(seconds), 3600)
        mins, secs = divmod(remainder, 60)
        return f"{hours}h {mins}m {secs}s"


def fmt_command(cmd: list[str]) -> str:
    """Render an argv list as a copy-pasteable shell command."""
    return shlex.join(cmd)


def first_line(text: str, limit: int = 120) -> str:
    """First non-empty line of command output, truncated for one-line messages."""
    for line in text.splitlines():
        line = line.strip()
        if line:
            return line if len(line) <= limit else f"{line[: limit - 3]}..."
    return ""
