"""Select the metrics recorded by one job execution and freeze them into a snapshot."""

from __future__ import annotations

import numbers
from dataclasses import dataclass
from typing import Iterable

from .logging_setup import get_logger
from .registry import COUNTER_PREFIX, GAUGE_PREFIX, GaugeSummary, Metric, MetricRepository

logger = get_logger(__name__)


class MetricExtractionError(ValueError):
    """Raised when a registry entry scoped to a run cannot be used."""


class MalformedMetricName(MetricExtractionError):
    """Raised when a scoped metric name carries no short key."""


class TypeMismatch(MetricExtractionError):
    """Raised when a metric value does not fit the kind implied by its name."""


@dataclass(frozen=True, slots=True)
class CounterEntry:
    name: str
    key: str
    value: int


@dataclass(frozen=True, slots=True)
class GaugeEntry:
    name: str
    key: str
    value: GaugeSummary


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Counters and gauges harvested for one job-completion event."""

    counters: tuple[CounterEntry, ...] = ()
    gauges: tuple[GaugeEntry, ...] = ()

    @property
    def names(self) -> list[str]:
        return [entry.name for entry in self.counters] + [entry.name for entry in self.gauges]

    def __len__(self) -> int:
        return len(self.counters) + len(self.gauges)


def short_key(name: str, prefix: str, run_identifier: str) -> str:
    """Strip ``prefix + run_identifier + "."`` from ``name``."""

    scope = f"{prefix}{run_identifier}."
    if len(name) <= len(scope):
        raise MalformedMetricName(f"Metric name '{name}' has no key after '{scope}'")
    return name[len(scope):]


def _in_scope(name: str, prefix: str, run_identifier: str) -> bool:
    scope = prefix + run_identifier
    if not name.startswith(scope):
        return False
    # "run1" must not pick up entries of "run10"
    return len(name) == len(scope) or name[len(scope)] == "."


def _counter_entry(metric: Metric, run_identifier: str) -> CounterEntry:
    key = short_key(metric.name, COUNTER_PREFIX, run_identifier)
    if not isinstance(metric.value, int) or isinstance(metric.value, bool):
        raise TypeMismatch(
            f"Counter '{metric.name}' holds {type(metric.value).__name__}, expected int"
        )
    return CounterEntry(name=metric.name, key=key, value=metric.value)


def _gauge_entry(metric: Metric, run_identifier: str) -> GaugeEntry:
    key = short_key(metric.name, GAUGE_PREFIX, run_identifier)
    value = metric.value
    if isinstance(value, GaugeSummary):
        return GaugeEntry(name=metric.name, key=key, value=value)
    if isinstance(value, numbers.Real) and not isinstance(value, bool):
        return GaugeEntry(name=metric.name, key=key, value=GaugeSummary.single(value))
    raise TypeMismatch(f"Gauge '{metric.name}' holds non-numeric {type(value).__name__}")


class MetricSnapshotExtractor:
    """Build snapshots from a registry without ever modifying it."""

    def extract(self, registry: MetricRepository, run_identifier: str) -> Snapshot:
        return extract_snapshot(registry.find_all(), run_identifier)


def extract_snapshot(metrics: Iterable[Metric], run_identifier: str) -> Snapshot:
    """Collect the counters and gauges scoped to ``run_identifier`` in enumeration order."""

    counters: list[CounterEntry] = []
    gauges: list[GaugeEntry] = []

    for metric in metrics:
        try:
            if _in_scope(metric.name, COUNTER_PREFIX, run_identifier):
                counters.append(_counter_entry(metric, run_identifier))
            elif _in_scope(metric.name, GAUGE_PREFIX, run_identifier):
                gauges.append(_gauge_entry(metric, run_identifier))
        except MalformedMetricName as exc:
            logger.warning(
                "extraction.malformed_name",
                run_identifier=run_identifier,
                metric=metric.name,
                error=str(exc),
            )
        except TypeMismatch as exc:
            logger.warning(
                "extraction.type_mismatch",
                run_identifier=run_identifier,
                metric=metric.name,
                error=str(exc),
            )

    return Snapshot(counters=tuple(counters), gauges=tuple(gauges))


__all__ = [
    "CounterEntry",
    "GaugeEntry",
    "MalformedMetricName",
    "MetricExtractionError",
    "MetricSnapshotExtractor",
    "Snapshot",
    "TypeMismatch",
    "extract_snapshot",
    "short_key",
]
