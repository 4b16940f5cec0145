import pytest
from structlog.testing import capture_logs

from batch_metrics.extraction import (
    MalformedMetricName,
    MetricSnapshotExtractor,
    TypeMismatch,
    extract_snapshot,
    short_key,
)
from batch_metrics.registry import GaugeSummary, MetricRegistry


def _registry() -> MetricRegistry:
    registry = MetricRegistry()
    registry.increment("counter.batch.job.run1.itemsRead", 42)
    registry.increment("counter.batch.job.run1.itemsWritten", 40)
    registry.submit("gauge.batch.job.run1.throughput", 3.5)
    registry.increment("counter.batch.job.run2.itemsRead", 7)
    registry.increment("counter.http.requests", 9)
    return registry


def test_extract_selects_entries_of_the_run_only():
    snapshot = MetricSnapshotExtractor().extract(_registry(), "job.run1")

    assert [(entry.key, entry.value) for entry in snapshot.counters] == [
        ("itemsRead", 42),
        ("itemsWritten", 40),
    ]
    assert [(entry.key, entry.value.mean) for entry in snapshot.gauges] == [("throughput", 3.5)]
    assert snapshot.counters[0].name == "counter.batch.job.run1.itemsRead"


def test_extract_does_not_pick_up_runs_sharing_a_prefix():
    registry = MetricRegistry()
    registry.increment("counter.batch.job.run1.items", 1)
    registry.increment("counter.batch.job.run10.items", 10)

    snapshot = MetricSnapshotExtractor().extract(registry, "job.run1")

    assert [entry.value for entry in snapshot.counters] == [1]


def test_extract_is_idempotent_and_leaves_registry_untouched():
    registry = _registry()
    before = registry.find_all()
    extractor = MetricSnapshotExtractor()

    first = extractor.extract(registry, "job.run1")
    second = extractor.extract(registry, "job.run1")

    assert first == second
    assert registry.find_all() == before


@pytest.mark.parametrize("key", ["itemsRead", "read_count", "a", "items-skipped"])
def test_short_key_round_trip(key):
    registry = MetricRegistry()
    registry.increment(f"counter.batch.job.7.{key}", 5)

    snapshot = MetricSnapshotExtractor().extract(registry, "job.7")

    assert [entry.key for entry in snapshot.counters] == [key]


def test_short_key_requires_a_key_after_the_scope():
    with pytest.raises(MalformedMetricName):
        short_key("counter.batch.job.7.", "counter.batch.", "job.7")


def test_malformed_names_are_skipped_with_a_warning():
    registry = MetricRegistry()
    registry.increment("counter.batch.job.7", 3)
    registry.increment("counter.batch.job.7.", 4)
    registry.increment("counter.batch.job.7.ok", 5)

    with capture_logs() as logs:
        snapshot = MetricSnapshotExtractor().extract(registry, "job.7")

    assert [entry.key for entry in snapshot.counters] == ["ok"]
    warnings = [log for log in logs if log["event"] == "extraction.malformed_name"]
    assert len(warnings) == 2
    assert all(log["log_level"] == "warning" for log in warnings)


def test_non_integer_counters_are_skipped():
    registry = MetricRegistry()
    registry.set("counter.batch.job.7.ratio", 0.25)
    registry.set("counter.batch.job.7.flag", True)
    registry.increment("counter.batch.job.7.items", 2)

    with capture_logs() as logs:
        snapshot = MetricSnapshotExtractor().extract(registry, "job.7")

    assert [entry.key for entry in snapshot.counters] == ["items"]
    assert [log["metric"] for log in logs if log["event"] == "extraction.type_mismatch"] == [
        "counter.batch.job.7.ratio",
        "counter.batch.job.7.flag",
    ]


def test_plain_numbers_under_gauge_names_become_summaries():
    registry = MetricRegistry()
    registry.set("gauge.batch.job.7.memory", 128)
    registry.set("gauge.batch.job.7.label", "fast")

    snapshot = MetricSnapshotExtractor().extract(registry, "job.7")

    assert [(entry.key, entry.value) for entry in snapshot.gauges] == [
        ("memory", GaugeSummary.single(128))
    ]


def test_extract_snapshot_of_empty_registry():
    snapshot = extract_snapshot([], "job.7")

    assert snapshot.counters == ()
    assert snapshot.gauges == ()
    assert len(snapshot) == 0


def test_type_mismatch_is_an_extraction_error():
    assert issubclass(TypeMismatch, ValueError)
