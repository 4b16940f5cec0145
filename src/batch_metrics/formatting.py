"""Human-readable rendering of harvested job metrics."""

from __future__ import annotations

from typing import Callable, Protocol, Sequence

from .extraction import CounterEntry, GaugeEntry

BANNER_START = "\n########## Metrics Start ##########\n"
BANNER_END = "########## Metrics End ############"


class MetricsOutputFormatter(Protocol):
    def format(self, counters: Sequence[CounterEntry], gauges: Sequence[GaugeEntry]) -> str:
        ...


FormatFunction = Callable[[Sequence[CounterEntry], Sequence[GaugeEntry]], str]


class SimpleMetricsOutputFormatter:
    """Banner-delimited report with one line per counter and gauge."""

    def format(self, counters: Sequence[CounterEntry], gauges: Sequence[GaugeEntry]) -> str:
        lines = [BANNER_START]
        for counter in counters:
            lines.append(f"counter {counter.key} = {counter.value}\n")
        for gauge in gauges:
            summary = gauge.value
            lines.append(
                f"gauge {gauge.key}: value={summary.value:g} mean={summary.mean:g} "
                f"min={summary.min:g} max={summary.max:g} count={summary.count}\n"
            )
        lines.append(BANNER_END)
        return "".join(lines)


class CallableFormatter:
    """Adapt a plain function to the formatter interface."""

    def __init__(self, func: FormatFunction) -> None:
        self._func = func

    def format(self, counters: Sequence[CounterEntry], gauges: Sequence[GaugeEntry]) -> str:
        return self._func(counters, gauges)


def resolve_formatter(
    formatter: MetricsOutputFormatter | FormatFunction | None,
) -> MetricsOutputFormatter:
    if formatter is None:
        return SimpleMetricsOutputFormatter()
    if isinstance(formatter, str):
        raise TypeError("formatter must provide format(counters, gauges) or be callable")
    if callable(getattr(formatter, "format", None)):
        return formatter  # type: ignore[return-value]
    if callable(formatter):
        return CallableFormatter(formatter)
    raise TypeError("formatter must provide format(counters, gauges) or be callable")


__all__ = [
    "BANNER_END",
    "BANNER_START",
    "CallableFormatter",
    "MetricsOutputFormatter",
    "SimpleMetricsOutputFormatter",
    "resolve_formatter",
]
