"""Logging setup for the ``taskboard`` logger namespace.

Records from ``taskboard.*`` may carry ``task``, ``op``, ``backend`` and
``elapsed_ms`` extras; the formatter fills any a call site leaves out so
one format string serves every module.
"""

import logging
import os
from typing import Optional

APP_LOGGER = "taskboard"
LOG_EXTRAS = ("task", "op", "backend", "elapsed_ms")
LOG_FORMAT = (
    "%(asctime)s %(levelname)s %(name)s "
    "task=%(task)s op=%(op)s backend=%(backend)s elapsed_ms=%(elapsed_ms)s "
    "%(message)s"
)

_CONFIGURED = False


class SafeFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        if "task" not in record.__dict__ and "task_id" in record.__dict__:
            record.__dict__["task"] = record.__dict__["task_id"]
        for key in LOG_EXTRAS:
            record.__dict__.setdefault(key, "-")
        return super().format(record)


def resolve_level(level: Optional[str] = None) -> int:
    name = (level or os.getenv("APP_LOG_LEVEL") or os.getenv("LOG_LEVEL") or "INFO").strip().upper()
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.INFO


def build_handler() -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setFormatter(SafeFormatter(LOG_FORMAT))
    return handler


def configure_logging(level: Optional[str] = None) -> None:
    """Attach the taskboard handler once and align uvicorn to the same level."""
    global _CONFIGURED
    if _CONFIGURED:
        return

    resolved_level = resolve_level(level)

    app_logger = logging.getLogger(APP_LOGGER)
    if not any(isinstance(h.formatter, SafeFormatter) for h in app_logger.handlers):
        app_logger.addHandler(build_handler())
    app_logger.setLevel(resolved_level)

    # Blocking ORM calls run in worker threads; keep SQL echo out of app logs.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(resolved_level)

    _CONFIGURED = True
