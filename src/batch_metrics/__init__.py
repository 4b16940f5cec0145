"""Job-scoped metrics aggregation and export for batch jobs."""

from .config import AppConfig, load_config
from .context import ExecutionContext, merge
from .exporter import InfluxdbMetricsExporter, SinkUnreachable
from .extraction import MetricSnapshotExtractor, Snapshot, extract_snapshot
from .listener import MetricsListener
from .registry import GaugeSummary, MetricRegistry
from .runner import JobRunner
from .scheduler import ExportScheduler

__all__ = [
    "AppConfig",
    "ExecutionContext",
    "ExportScheduler",
    "GaugeSummary",
    "InfluxdbMetricsExporter",
    "JobRunner",
    "MetricRegistry",
    "MetricSnapshotExtractor",
    "MetricsListener",
    "SinkUnreachable",
    "Snapshot",
    "extract_snapshot",
    "load_config",
    "merge",
]
