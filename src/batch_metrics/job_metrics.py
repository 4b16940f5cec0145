"""Run-scoped metric helpers used by job code."""

from __future__ import annotations

from dataclasses import dataclass

from .registry import COUNTER_PREFIX, GAUGE_PREFIX, GaugeSummary, MetricRegistry


@dataclass(slots=True)
class BatchMetrics:
    """Record counters and gauges for a single job execution."""

    registry: MetricRegistry
    run_identifier: str

    def counter_name(self, key: str) -> str:
        return f"{COUNTER_PREFIX}{self.run_identifier}.{_check_key(key)}"

    def gauge_name(self, key: str) -> str:
        return f"{GAUGE_PREFIX}{self.run_identifier}.{_check_key(key)}"

    def increment(self, key: str, delta: int = 1) -> int:
        return self.registry.increment(self.counter_name(key), delta)

    def decrement(self, key: str, delta: int = 1) -> int:
        return self.registry.decrement(self.counter_name(key), delta)

    def submit(self, key: str, value: float) -> GaugeSummary:
        return self.registry.submit(self.gauge_name(key), value)

    def reset(self, key: str) -> None:
        self.registry.reset(self.counter_name(key))
        self.registry.reset(self.gauge_name(key))


def _check_key(key: str) -> str:
    key = key.strip()
    if not key:
        raise ValueError("Metric key must not be empty")
    return key


__all__ = ["BatchMetrics"]
