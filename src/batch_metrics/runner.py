"""Minimal driver executing job work and signalling completion to the metrics listener."""
from __future__ import annotations

import time
from typing import Callable
from uuid import uuid4

from .context_store import ExecutionContextStore
from .job import JobExecution, JobStatus
from .job_metrics import BatchMetrics
from .listener import MetricsListener
from .logging_setup import get_logger
from .registry import MetricRegistry

logger = get_logger(__name__)

JobWork = Callable[[BatchMetrics], None]


class JobRunner:
    """Run job work items one execution at a time.

    Each call allocates a new execution of the given job instance. The instance's
    execution context is restored from the store first, so counters left behind by a
    failed attempt are added to the totals of the next one.
    """

    def __init__(
        self,
        registry: MetricRegistry,
        listener: MetricsListener,
        context_store: ExecutionContextStore | None = None,
    ) -> None:
        self.registry = registry
        self.listener = listener
        self.context_store = context_store

    def run(self, job_name: str, instance_key: str, work: JobWork) -> JobExecution:
        if not job_name or not instance_key:
            raise ValueError("job_name and instance_key are required")

        context = (
            self.context_store.load(instance_key) if self.context_store is not None else None
        )
        execution = JobExecution(
            job_name=job_name,
            instance_key=instance_key,
            execution_id=uuid4().hex,
        )
        if context is not None:
            execution.execution_context = context

        execution.status = JobStatus.STARTED
        logger.info(
            "runner.start",
            run_identifier=execution.run_identifier,
            instance_key=instance_key,
        )
        start = time.perf_counter()
        try:
            work(BatchMetrics(self.registry, execution.run_identifier))
        except Exception as exc:
            execution.status = JobStatus.FAILED
            execution.failure = exc
            logger.exception("runner.failed", run_identifier=execution.run_identifier)
        else:
            execution.status = JobStatus.COMPLETED

        self.listener.after_job(execution)
        logger.info(
            "runner.complete",
            run_identifier=execution.run_identifier,
            status=execution.status.value,
            elapsed_seconds=round(time.perf_counter() - start, 3),
        )
        return execution


__all__ = ["JobRunner", "JobWork"]
