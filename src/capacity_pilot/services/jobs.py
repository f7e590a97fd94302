from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Optional
from uuid import uuid4

from ..domain import CapacityJob, JobOutcome, JobStatus
from ..logging import job_scope
from .capacity import CapacityJobService

logger = logging.getLogger(__name__)


@dataclass
class JobRecord:
    job_id: str
    job: CapacityJob
    submitted_at: datetime
    status: JobStatus = JobStatus.PENDING
    outcome: Optional[JobOutcome] = None
    task: Optional["asyncio.Task[None]"] = field(default=None, repr=False)

    def to_dict(self) -> Dict[str, object]:
        payload: Dict[str, object] = {
            "jobId": self.job_id,
            "status": self.status.value,
            "submittedAt": self.submitted_at.isoformat(),
        }
        if self.outcome is not None:
            payload.update(self.outcome.to_dict(include_report=self.job.debug))
        return payload


class JobTracker:
    """In-memory registry of background jobs; nothing survives a restart."""

    def __init__(self, service: CapacityJobService, *, retention: int = 200) -> None:
        self.service = service
        self.retention = retention
        self._records: Dict[str, JobRecord] = {}

    def submit(self, job: CapacityJob) -> JobRecord:
        record = JobRecord(job_id=uuid4().hex, job=job, submitted_at=datetime.now(timezone.utc))
        self._records[record.job_id] = record
        record.task = asyncio.create_task(self._run(record))
        logger.info("Queued job %s for %s", record.job_id, job.target.describe())
        return record

    def get(self, job_id: str) -> Optional[JobRecord]:
        return self._records.get(job_id)

    async def _run(self, record: JobRecord) -> None:
        with job_scope(record.job_id):
            record.outcome = await self.service.run(record.job)
        record.status = JobStatus.DONE
        record.task = None
        self._prune()

    def _prune(self) -> None:
        finished = [record for record in self._records.values() if record.status is JobStatus.DONE]
        excess = len(finished) - self.retention
        for record in sorted(finished, key=lambda item: item.submitted_at)[: max(0, excess)]:
            self._records.pop(record.job_id, None)
