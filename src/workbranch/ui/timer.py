"""Live updating timer for blocking external calls."""

import threading
import time
from typing import Optional

from workbranch.ui.output import BLUE, NC, PREFIX, YELLOW, log, status_stream
from workbranch.utils.formatting import fmt_duration


class LiveTimer:
    """Display a live updating timer while a task runs. Can be used as context manager."""

    def __init__(self, label: str, print_final: bool = True):
        self.label = label
        self.print_final = print_final
        self.task_start = time.time()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def __enter__(self) -> "LiveTimer":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop(print_final=self.print_final)

    def _run(self) -> None:
        while not self._stop.is_set():
            elapsed = fmt_duration(time.time() - self.task_start)
            print(
                f"\r\033[K{BLUE}{PREFIX}{NC} {self.label} {YELLOW}{elapsed}{NC}",
                end="",
                flush=True,
                file=status_stream(),
            )
            self._stop.wait(1.0)

    def start(self) -> None:
        self.task_start = time.time()
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

    def clear_line(self) -> None:
        """Clear the timer line for other output."""
        print("\r\033[K", end="", flush=True, file=status_stream())

    def get_elapsed(self) -> str:
        """Get formatted elapsed time since task start."""
        return fmt_duration(time.time() - self.task_start)

    def stop(self, print_final: bool = True) -> None:
        self._stop.set()
        if self._thread:
            self._thread.join(timeout=0.5)
        self._thread = None
        self.clear_line()
        if print_final:
            log(f"{self.label} done in {self.get_elapsed()}")
