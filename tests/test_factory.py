import httpx

from batch_metrics.config import AppConfig
from batch_metrics.factory import (
    create_context_store,
    create_export_scheduler,
    create_exporter,
    create_listener,
)
from batch_metrics.registry import MetricRegistry


def _config(tmp_path) -> AppConfig:
    return AppConfig.model_validate(
        {
            "listener": {"delete_metrics_on_job_finish": True},
            "context_store": {"url": f"sqlite:///{tmp_path / 'ctx.db'}"},
            "influxdb": {"environment": "test", "export_interval_seconds": 15},
            "retry": {"attempts": 4},
        }
    )


def test_create_listener_wires_configuration(tmp_path):
    config = _config(tmp_path)
    store = create_context_store(config)

    listener = create_listener(config, MetricRegistry(), store)

    assert listener.delete_metrics_on_job_finish is True
    assert listener.context_store is store
    assert store.config.retry_attempts == 4


def test_create_exporter_and_scheduler(tmp_path):
    config = _config(tmp_path)
    transport = httpx.MockTransport(lambda request: httpx.Response(204))

    exporter = create_exporter(config, MetricRegistry(), transport=transport)
    scheduler = create_export_scheduler(config, exporter)

    assert exporter.environment == "test"
    assert exporter.base_url == "http://localhost:8086"
    assert scheduler.interval_seconds == 15
    exporter.close()
