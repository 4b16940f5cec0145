"""Background timer driving periodic metric exports."""

from __future__ import annotations

import threading
from typing import Optional, Protocol

from .logging_setup import get_logger

logger = get_logger(__name__)


class Exporter(Protocol):
    def export(self) -> bool:
        ...


class ExportScheduler:
    """Call ``exporter.export()`` every ``interval_seconds`` on a daemon thread."""

    def __init__(self, exporter: Exporter, interval_seconds: float) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.exporter = exporter
        self.interval_seconds = interval_seconds
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()
        self.ticks = 0

    @property
    def running(self) -> bool:
        return (
            self._thread is not None and self._thread.is_alive() and not self._stop.is_set()
        )

    def run_once(self) -> bool:
        self.ticks += 1
        try:
            return self.exporter.export()
        except Exception:
            logger.exception("scheduler.tick_failed", tick=self.ticks)
            return False

    def _loop(self, stop: threading.Event) -> None:
        while not stop.wait(self.interval_seconds):
            self.run_once()

    def start(self) -> None:
        with self._lock:
            previous = self._thread
            if previous is not None and previous.is_alive():
                if not self._stop.is_set():
                    return
                # a stopped loop may still be finishing its last export
                previous.join()
            self._stop = threading.Event()
            self._thread = threading.Thread(
                target=self._loop, args=(self._stop,), name="metrics-export", daemon=True
            )
            self._thread.start()
        logger.info("scheduler.started", interval_seconds=self.interval_seconds)

    def stop(self, timeout: float | None = None) -> None:
        """Stop scheduling; an export already in flight is allowed to finish."""

        with self._lock:
            self._stop.set()
            thread = self._thread
        if thread is not None:
            thread.join(timeout)
            with self._lock:
                if self._thread is thread and not thread.is_alive():
                    self._thread = None
        logger.info("scheduler.stopped", ticks=self.ticks)

    def __enter__(self) -> "ExportScheduler":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()


__all__ = ["ExportScheduler"]
