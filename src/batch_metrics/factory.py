"""Build metrics components from an :class:`AppConfig`."""
from __future__ import annotations

from .config import AppConfig
from .context_store import ExecutionContextStore, StoreConfig
from .database import create_engine_from_url
from .exporter import InfluxdbMetricsExporter
from .formatting import FormatFunction, MetricsOutputFormatter
from .listener import MetricsListener
from .registry import MetricRegistry
from .scheduler import ExportScheduler


def create_context_store(config: AppConfig) -> ExecutionContextStore:
    engine = create_engine_from_url(
        config.context_store.url,
        connection_timeout=config.context_store.connection_timeout,
    )
    return ExecutionContextStore(
        engine,
        StoreConfig(
            retry_attempts=config.retry.attempts,
            backoff_seconds=config.retry.backoff_seconds,
            backoff_max_seconds=config.retry.backoff_max_seconds,
        ),
    )


def create_listener(
    config: AppConfig,
    registry: MetricRegistry,
    context_store: ExecutionContextStore | None = None,
    formatter: MetricsOutputFormatter | FormatFunction | None = None,
) -> MetricsListener:
    return MetricsListener(
        registry,
        delete_metrics_on_job_finish=config.listener.delete_metrics_on_job_finish,
        formatter=formatter,
        context_store=context_store,
    )


def create_exporter(config: AppConfig, registry: MetricRegistry, **kwargs) -> InfluxdbMetricsExporter:
    """Connect an exporter to the configured InfluxDB; raises ``SinkUnreachable``."""

    influx = config.influxdb
    return InfluxdbMetricsExporter(
        registry,
        influx.server,
        influx.port,
        influx.database,
        influx.user,
        influx.password,
        influx.environment,
        timeout_seconds=influx.timeout_seconds,
        use_https=influx.use_https,
        **kwargs,
    )


def create_export_scheduler(
    config: AppConfig, exporter: InfluxdbMetricsExporter
) -> ExportScheduler:
    return ExportScheduler(exporter, config.influxdb.export_interval_seconds)


__all__ = [
    "create_context_store",
    "create_export_scheduler",
    "create_exporter",
    "create_listener",
]
