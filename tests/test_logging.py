from __future__ import annotations

import asyncio
import logging

from capacity_pilot.logging import JobContextFilter, job_scope


def _record() -> logging.LogRecord:
    return logging.LogRecord("capacity_pilot.test", logging.INFO, __file__, 1, "hello", None, None)


def test_filter_stamps_current_job() -> None:
    job_filter = JobContextFilter()
    inside = _record()
    outside = _record()

    with job_scope("abc123"):
        assert job_filter.filter(inside)
    job_filter.filter(outside)

    assert inside.job == "abc123"
    assert outside.job == "-"


async def test_job_scope_is_isolated_per_task() -> None:
    job_filter = JobContextFilter()

    async def stamp(job_id: str) -> str:
        with job_scope(job_id):
            await asyncio.sleep(0)
            record = _record()
            job_filter.filter(record)
            return record.job

    assert await asyncio.gather(stamp("first"), stamp("second")) == ["first", "second"]
