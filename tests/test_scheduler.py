import threading
import time

import pytest

from batch_metrics.scheduler import ExportScheduler


class CountingExporter:
    def __init__(self, fail_first: bool = False) -> None:
        self.calls = 0
        self.fail_first = fail_first
        self.called = threading.Event()

    def export(self) -> bool:
        self.calls += 1
        self.called.set()
        if self.fail_first and self.calls == 1:
            raise RuntimeError("boom")
        return True


def test_run_once_swallows_unexpected_errors():
    exporter = CountingExporter(fail_first=True)
    scheduler = ExportScheduler(exporter, interval_seconds=60)

    assert scheduler.run_once() is False
    assert scheduler.run_once() is True
    assert scheduler.ticks == 2


def test_scheduler_exports_periodically_until_stopped():
    exporter = CountingExporter(fail_first=True)
    scheduler = ExportScheduler(exporter, interval_seconds=0.01)

    with scheduler:
        assert exporter.called.wait(timeout=5)
        assert scheduler.running

    assert not scheduler.running
    assert exporter.calls >= 1


def test_interval_must_be_positive():
    with pytest.raises(ValueError):
        ExportScheduler(CountingExporter(), interval_seconds=0)


class SlowExporter:
    def __init__(self, delay: float) -> None:
        self.delay = delay
        self.exporting_threads: list[int] = []
        self.started = threading.Event()

    def export(self) -> bool:
        self.exporting_threads.append(threading.get_ident())
        self.started.set()
        time.sleep(self.delay)
        return True


def test_restart_after_timed_out_stop_runs_a_single_loop():
    exporter = SlowExporter(delay=0.2)
    scheduler = ExportScheduler(exporter, interval_seconds=0.01)

    scheduler.start()
    assert exporter.started.wait(timeout=5)
    scheduler.stop(timeout=0.01)
    scheduler.start()
    restarted_at = len(exporter.exporting_threads)
    time.sleep(1.0)
    scheduler.stop()

    assert len(set(exporter.exporting_threads[restarted_at:])) == 1
    assert not scheduler.running
