"""Job listener copying run-scoped metrics into the job instance's execution context.

Counters recorded as ``counter.batch.<run-identifier>.<key>`` and gauges recorded as
``gauge.batch.<run-identifier>.<key>`` are written to the execution context under
``<key>``. Counters accumulate over all executions belonging to one job instance, so a
restarted job reports the total of every attempt; gauges keep the latest value only.
All harvested metrics are logged through the configured formatter.

With ``delete_metrics_on_job_finish`` the harvested entries are removed from the
registry, but only after the merged context has been persisted.
"""

from __future__ import annotations

from dataclasses import dataclass

from .context import ExecutionContextMerger
from .context_store import ExecutionContextStore
from .extraction import MetricSnapshotExtractor, Snapshot
from .formatting import FormatFunction, MetricsOutputFormatter, resolve_formatter
from .job import JobExecution
from .logging_setup import get_logger
from .registry import MetricRepository
from .retention import RetentionPolicy

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class JobMetricsReport:
    run_identifier: str
    snapshot: Snapshot
    text: str
    reset_count: int = 0


class MetricsListener:
    def __init__(
        self,
        registry: MetricRepository,
        *,
        delete_metrics_on_job_finish: bool = False,
        formatter: MetricsOutputFormatter | FormatFunction | None = None,
        context_store: ExecutionContextStore | None = None,
        extractor: MetricSnapshotExtractor | None = None,
        merger: ExecutionContextMerger | None = None,
        retention: RetentionPolicy | None = None,
    ) -> None:
        self.registry = registry
        self.delete_metrics_on_job_finish = delete_metrics_on_job_finish
        self.formatter = resolve_formatter(formatter)
        self.context_store = context_store
        self.extractor = extractor or MetricSnapshotExtractor()
        self.merger = merger or ExecutionContextMerger()
        self.retention = retention or RetentionPolicy()

    def after_job(self, execution: JobExecution) -> JobMetricsReport:
        run_identifier = execution.run_identifier
        snapshot = self.extractor.extract(self.registry, run_identifier)
        _context, merged = self.merger.merge(snapshot, execution.execution_context)

        text = self.formatter.format(merged.counters, merged.gauges)
        logger.info(
            "listener.after_job",
            run_identifier=run_identifier,
            instance_key=execution.instance_key,
            status=execution.status.value,
            report=text,
        )

        if self.context_store is not None and execution.execution_context.dirty:
            self.context_store.save(execution.instance_key, execution.execution_context)

        reset_count = self.retention.apply(
            self.registry, snapshot, self.delete_metrics_on_job_finish
        )
        return JobMetricsReport(
            run_identifier=run_identifier,
            snapshot=merged,
            text=text,
            reset_count=reset_count,
        )


__all__ = ["JobMetricsReport", "MetricsListener"]
