from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from contextvars import ContextVar
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterator, Optional

from platformdirs import user_log_dir

APP_NAME = "Capacity Pilot"
APP_AUTHOR = "CapacityPilot"
LOG_LEVEL = os.getenv("CAPACITY_PILOT_LOG_LEVEL", "INFO").upper()
LOG_DIR = Path(os.getenv("CAPACITY_PILOT_LOG_DIR") or user_log_dir(APP_NAME, APP_AUTHOR))
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] job=%(job)s %(message)s"

_current_job: ContextVar[str] = ContextVar("capacity_pilot_job", default="-")
_INITIALIZED = False


class JobContextFilter(logging.Filter):
    """Stamp each record with the job running in the current task."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.job = _current_job.get()
        return True


@contextmanager
def job_scope(job_id: str) -> Iterator[None]:
    token = _current_job.set(job_id)
    try:
        yield
    finally:
        _current_job.reset(token)


def configure_logging(level: Optional[str] = None, *, log_path: Optional[Path] = None) -> None:
    """Send application logs to the console and to a rotating file in the user log directory.

    Jobs run concurrently on one event loop, so every line carries the id set by
    :func:`job_scope`. Calling this more than once is a no-op.
    """

    global _INITIALIZED
    if _INITIALIZED:
        return

    log_file = log_path or LOG_DIR / "capacity_pilot.log"
    log_file.parent.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    job_filter = JobContextFilter()
    handlers: list[logging.Handler] = [
        RotatingFileHandler(str(log_file), maxBytes=2_000_000, backupCount=3, encoding="utf-8"),
        logging.StreamHandler(),
    ]

    root = logging.getLogger()
    root.setLevel(getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO))
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(job_filter)
        root.addHandler(handler)

    _INITIALIZED = True
    logging.getLogger(__name__).debug("Logging to %s", log_file)


__all__ = ["configure_logging", "job_scope", "JobContextFilter"]
