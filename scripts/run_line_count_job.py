#!/usr/bin/env python3
"""Run a small line-counting batch job with job-scoped metrics."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

from batch_metrics.config import ConfigurationError, load_config
from batch_metrics.exporter import SinkUnreachable
from batch_metrics.factory import (
    create_context_store,
    create_export_scheduler,
    create_exporter,
    create_listener,
)
from batch_metrics.job import JobStatus
from batch_metrics.job_metrics import BatchMetrics
from batch_metrics.logging_setup import configure_logging, get_logger
from batch_metrics.registry import MetricRegistry
from batch_metrics.runner import JobRunner

logger = get_logger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Count the lines of a text file as a batch job")
    parser.add_argument("--config", dest="config_path", required=True, help="Path to the YAML configuration")
    parser.add_argument("--input", dest="input_path", required=True, help="Text file to process")
    parser.add_argument("--instance", dest="instance_key", help="Job instance key (defaults to the file name)")
    return parser.parse_args(argv)


def count_lines(path: Path):
    def _work(metrics: BatchMetrics) -> None:
        with path.open("r", encoding="utf-8") as handle:
            for line in handle:
                metrics.increment("itemsRead")
                if line.strip():
                    metrics.increment("itemsWritten")
                    metrics.submit("lineLength", len(line.rstrip("\n")))
                else:
                    metrics.increment("itemsSkipped")

    return _work


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        config = load_config(args.config_path)
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    configure_logging(config.logging.model_dump())
    registry = MetricRegistry()
    store = create_context_store(config)
    runner = JobRunner(registry, create_listener(config, registry, store), store)

    scheduler = None
    if config.influxdb.enabled:
        try:
            scheduler = create_export_scheduler(config, create_exporter(config, registry))
        except SinkUnreachable as exc:
            logger.error("job.sink_unreachable", error=str(exc))
            return 3
        scheduler.start()

    input_path = Path(args.input_path)
    try:
        execution = runner.run("lineCount", args.instance_key or input_path.name, count_lines(input_path))
    finally:
        if scheduler is not None:
            scheduler.stop()
            scheduler.run_once()
            scheduler.exporter.close()

    return 0 if execution.status is JobStatus.COMPLETED else 1


if __name__ == "__main__":
    sys.exit(main())
