from __future__ import annotations

from typing import Any, Dict, Optional

from ..domain import CapacityJob
from .models import CapacityJobRequest
from .registry import operation
from .state import api_state


def _job(
    *,
    day: str,
    time: str,
    name: Optional[str],
    capacity: int,
    strict_name_required: bool,
    dry_run: bool,
) -> CapacityJob:
    # pydantic.ValidationError is a ValueError; the HTTP layer answers 400.
    request = CapacityJobRequest(
        day=day,
        time=time,
        name=name,
        capacity=capacity,
        strict_name_required=strict_name_required,
        debug=True,
        dry_run=dry_run,
    )
    return request.to_job()


@operation(
    "update_class_capacity",
    description="Find one class by date, start time and optional name, confirm it, and set its capacity.",
    mutates=True,
)
async def update_class_capacity(
    day: str,
    time: str,
    capacity: int,
    name: Optional[str] = None,
    strict_name_required: bool = True,
) -> Dict[str, Any]:
    job = _job(
        day=day,
        time=time,
        name=name,
        capacity=capacity,
        strict_name_required=strict_name_required,
        dry_run=False,
    )
    outcome = await api_state.capacity.run(job)
    return outcome.to_dict(include_report=True)


@operation(
    "locate_class",
    description="Resolve and confirm a class without changing it; reports the candidates that were considered.",
)
async def locate_class(
    day: str,
    time: str,
    name: Optional[str] = None,
    strict_name_required: bool = True,
) -> Dict[str, Any]:
    job = _job(
        day=day,
        time=time,
        name=name,
        capacity=0,
        strict_name_required=strict_name_required,
        dry_run=True,
    )
    outcome = await api_state.capacity.run(job)
    return outcome.to_dict(include_report=True)
