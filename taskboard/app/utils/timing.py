from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every stored datetime takes."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def log_op_timing(
    logger,
    *,
    op: str,
    start_time: float,
    task_id: str | None = None,
    backend: str | None = None,
    count: int | None = None,
) -> None:
    elapsed_ms = int((time.perf_counter() - start_time) * 1000)
    payload: dict[str, Any] = {"op": op, "elapsed_ms": elapsed_ms}
    if task_id:
        payload["task"] = task_id
    if backend:
        payload["backend"] = backend
    if count is not None:
        payload["count"] = count
    logger.info("op_timing %s", payload, extra={k: v for k, v in payload.items() if k != "count"})
