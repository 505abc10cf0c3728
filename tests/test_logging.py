from __future__ import annotations

import logging
import time

from taskboard.app.core.logging_config import LOG_FORMAT, SafeFormatter, resolve_level
from taskboard.app.utils.timing import log_op_timing


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("taskboard.test", logging.INFO, __file__, 1, "hello", None, None)
    record.__dict__.update(extra)
    return record


def test_formatter_fills_missing_extras() -> None:
    line = SafeFormatter(LOG_FORMAT).format(_record(op="create"))
    assert "op=create" in line
    assert "task=- " in line
    assert "backend=- " in line
    assert line.endswith("hello")


def test_formatter_maps_task_id_to_task() -> None:
    line = SafeFormatter(LOG_FORMAT).format(_record(task_id="abc123"))
    assert "task=abc123" in line


def test_resolve_level(monkeypatch) -> None:
    monkeypatch.delenv("APP_LOG_LEVEL", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    assert resolve_level() == logging.INFO
    assert resolve_level("debug") == logging.DEBUG
    assert resolve_level("not-a-level") == logging.INFO

    monkeypatch.setenv("APP_LOG_LEVEL", "warning")
    assert resolve_level() == logging.WARNING


def test_op_timing_carries_extras(caplog) -> None:
    logger = logging.getLogger("taskboard.timing-test")
    with caplog.at_level(logging.INFO, logger="taskboard.timing-test"):
        log_op_timing(logger, op="list", start_time=time.perf_counter(), backend="memory", count=3)

    (record,) = caplog.records
    assert record.op == "list"
    assert record.backend == "memory"
    assert isinstance(record.elapsed_ms, int)
    assert "'count': 3" in record.getMessage()
