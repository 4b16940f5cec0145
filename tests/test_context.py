from batch_metrics.context import ExecutionContext, ExecutionContextMerger, merge
from batch_metrics.extraction import MetricSnapshotExtractor
from batch_metrics.registry import GaugeSummary, MetricRegistry


def _snapshot(registry: MetricRegistry, run_identifier: str):
    return MetricSnapshotExtractor().extract(registry, run_identifier)


def test_counter_scenario_accumulates_over_runs():
    registry = MetricRegistry()
    registry.increment("counter.batch.run1.itemsRead", 42)
    context = ExecutionContext()

    context, merged = merge(_snapshot(registry, "run1"), context)
    assert context == {"itemsRead": 42}
    assert merged.counters[0].value == 42

    registry.increment("counter.batch.run2.itemsRead", 17)
    context, merged = merge(_snapshot(registry, "run2"), context)

    assert context == {"itemsRead": 59}
    assert merged.counters[0].value == 59


def test_gauge_scenario_keeps_latest_value_only():
    registry = MetricRegistry()
    registry.submit("gauge.batch.run1.throughput", 3.5)
    context, _ = merge(_snapshot(registry, "run1"), ExecutionContext())
    assert context.get("throughput").mean == 3.5

    registry.submit("gauge.batch.run2.throughput", 7.0)
    context, merged = merge(_snapshot(registry, "run2"), context)

    assert context.get("throughput") == GaugeSummary.single(7.0)
    assert merged.gauges[0].value.mean == 7.0


def test_counters_sum_while_gauges_replace_across_many_runs():
    registry = MetricRegistry()
    context = ExecutionContext()
    deltas = [5, 11, 0, 23]
    gauges = [1.0, 8.0, 2.5, 4.0]

    for index, (delta, gauge) in enumerate(zip(deltas, gauges)):
        run = f"job.{index}"
        registry.increment(f"counter.batch.{run}.items", delta)
        registry.submit(f"gauge.batch.{run}.rate", gauge)
        context, _ = merge(_snapshot(registry, run), context)

    assert context.get("items") == sum(deltas)
    assert context.get("rate").mean == gauges[-1]
    assert context.get("rate").count == 1


def test_merge_mutates_passed_context_and_keeps_other_keys():
    registry = MetricRegistry()
    registry.increment("counter.batch.run1.items", 3)
    context = ExecutionContext({"checkpoint": "chunk-4"})

    updated, _ = ExecutionContextMerger().merge(_snapshot(registry, "run1"), context)

    assert updated is context
    assert context.get("checkpoint") == "chunk-4"
    assert context.contains_key("items")
    assert context.dirty


def test_merge_does_not_touch_registry():
    registry = MetricRegistry()
    registry.increment("counter.batch.run1.items", 3)
    before = registry.find_all()

    merge(_snapshot(registry, "run1"), ExecutionContext({"items": 10}))

    assert registry.find_all() == before


def test_non_counter_prior_value_is_replaced():
    registry = MetricRegistry()
    registry.increment("counter.batch.run1.items", 3)

    context, _ = merge(_snapshot(registry, "run1"), ExecutionContext({"items": "stale"}))

    assert context.get("items") == 3
