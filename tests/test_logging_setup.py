import logging

import pytest
import structlog

from batch_metrics.logging_setup import configure_logging, get_logger


@pytest.fixture(autouse=True)
def restore_logging():
    yield
    structlog.reset_defaults()
    logging.basicConfig(handlers=[logging.NullHandler()], force=True)


def test_key_value_output_leads_with_event_and_run_identifier(capsys):
    configure_logging({"level": "info", "json_format": False, "log_file": None})

    get_logger("batch_metrics.test").info("listener.after_job", run_identifier="job.1")

    line = capsys.readouterr().out.strip()
    assert line.startswith("event='listener.after_job' level='info' run_identifier='job.1'")


def test_log_file_receives_json_lines(tmp_path):
    log_file = tmp_path / "logs" / "metrics.log"
    configure_logging({"level": "debug", "json_format": True, "log_file": str(log_file)})

    get_logger("batch_metrics.test").debug("exporter.skip_metric", metric="m")
    logging.shutdown()

    content = log_file.read_text(encoding="utf-8")
    assert '"event": "exporter.skip_metric"' in content
    assert '"metric": "m"' in content
