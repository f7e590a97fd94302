from __future__ import annotations

from dataclasses import dataclass, field

from ..services import CapacityJobService, JobTracker, ServiceContext


@dataclass(slots=True)
class ApiState:
    context: ServiceContext = field(default_factory=ServiceContext)
    capacity: CapacityJobService = field(init=False)
    jobs: JobTracker = field(init=False)

    def __post_init__(self) -> None:
        self.capacity = CapacityJobService(self.context)
        self.jobs = JobTracker(self.capacity, retention=self.context.settings.service.finished_job_retention)


api_state = ApiState()
