"""In-process metric registry holding counters and gauges by name."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Protocol

COUNTER_PREFIX = "counter.batch."
GAUGE_PREFIX = "gauge.batch."


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class GaugeSummary:
    """Statistical summary of the observations submitted to a gauge."""

    value: float
    mean: float
    min: float
    max: float
    count: int = 1

    @classmethod
    def single(cls, value: float) -> "GaugeSummary":
        value = float(value)
        return cls(value=value, mean=value, min=value, max=value, count=1)

    def observe(self, value: float) -> "GaugeSummary":
        value = float(value)
        count = self.count + 1
        return GaugeSummary(
            value=value,
            mean=self.mean + (value - self.mean) / count,
            min=min(self.min, value),
            max=max(self.max, value),
            count=count,
        )

    def as_dict(self) -> Dict[str, float | int]:
        return {
            "value": self.value,
            "mean": self.mean,
            "min": self.min,
            "max": self.max,
            "count": self.count,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GaugeSummary":
        """Rebuild a summary from a mapping, filling gaps from whatever is present."""

        mean = data.get("mean", data.get("value"))
        if mean is None:
            raise ValueError("Gauge summary requires at least a 'mean' or 'value'")
        mean = float(mean)
        value = float(data.get("value", mean))
        return cls(
            value=value,
            mean=mean,
            min=float(data.get("min", value)),
            max=float(data.get("max", value)),
            count=int(data.get("count", 1)),
        )


@dataclass(frozen=True, slots=True)
class Metric:
    """A named registry entry with the time it was last updated."""

    name: str
    value: Any
    timestamp: datetime = field(default_factory=_utcnow)


class MetricRepository(Protocol):
    """The registry operations the listener and exporter rely on."""

    def find_all(self) -> List[Metric]:
        ...

    def reset(self, name: str) -> None:
        ...


class MetricRegistry:
    """Process-wide, thread-safe mapping from metric name to current value."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._metrics: Dict[str, Metric] = {}

    def increment(self, name: str, delta: int = 1) -> int:
        with self._lock:
            current = self._metrics.get(name)
            base = current.value if current is not None else 0
            if not isinstance(base, int) or isinstance(base, bool):
                raise TypeError(f"Metric '{name}' does not hold an integer counter")
            value = base + int(delta)
            self._metrics[name] = Metric(name=name, value=value)
            return value

    def decrement(self, name: str, delta: int = 1) -> int:
        return self.increment(name, -int(delta))

    def submit(self, name: str, value: float) -> GaugeSummary:
        """Record a gauge observation and return the updated summary."""

        with self._lock:
            current = self._metrics.get(name)
            if current is None or not isinstance(current.value, GaugeSummary):
                summary = GaugeSummary.single(value)
            else:
                summary = current.value.observe(value)
            self._metrics[name] = Metric(name=name, value=summary)
            return summary

    def set(self, name: str, value: Any) -> None:
        with self._lock:
            self._metrics[name] = Metric(name=name, value=value)

    def reset(self, name: str) -> None:
        with self._lock:
            self._metrics.pop(name, None)

    def find_one(self, name: str) -> Optional[Metric]:
        with self._lock:
            return self._metrics.get(name)

    def find_all(self) -> List[Metric]:
        with self._lock:
            return list(self._metrics.values())

    def count(self) -> int:
        with self._lock:
            return len(self._metrics)


__all__ = [
    "COUNTER_PREFIX",
    "GAUGE_PREFIX",
    "GaugeSummary",
    "Metric",
    "MetricRegistry",
    "MetricRepository",
]
