"""
audioscribe.transcribe.progress - Simulated transcription progress.

The transcription request gives no progress feedback, so a ticker advances
an estimate on a fixed interval, easing towards a ceiling until the real
response arrives.
"""

from __future__ import annotations

import threading
from collections.abc import Callable

PROGRESS_CEILING = 90.0
MIN_STEP = 0.5
EASING_DIVISOR = 20.0


def next_progress(prev: float) -> float:
    """Advance a simulated progress value by one tick.

    Steps shrink as the value approaches the ceiling and stop there.
    """
    if prev >= PROGRESS_CEILING:
        return prev
    increment = max(MIN_STEP, (PROGRESS_CEILING - prev) / EASING_DIVISOR)
    return prev + increment


class SimulatedProgress:
    """Background ticker that reports simulated progress through a callback."""

    def __init__(
        self,
        on_progress: Callable[[float], None] | None = None,
        interval: float = 1.0,
    ) -> None:
        self.on_progress = on_progress
        self.interval = interval
        self.value = 0.0
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()

    def _report(self) -> None:
        if self.on_progress:
            self.on_progress(self.value)

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            with self._lock:
                self.value = next_progress(self.value)
                self._report()

    def tick(self) -> float:
        """Advance one step synchronously and return the new value."""
        with self._lock:
            self.value = next_progress(self.value)
            self._report()
            return self.value

    def start(self) -> None:
        """Reset to 0 and start ticking in the background."""
        self.stop()
        with self._lock:
            self.value = 0.0
            self._report()
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="transcribe-progress", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join()
        self._thread = None

    def complete(self) -> None:
        """Stop ticking and jump to 100."""
        self.stop()
        with self._lock:
            self.value = 100.0
            self._report()

    def reset(self) -> None:
        """Stop ticking and discard any simulated progress."""
        self.stop()
        with self._lock:
            self.value = 0.0
            self._report()

    def __enter__(self) -> SimulatedProgress:
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.complete()
        else:
            self.reset()
