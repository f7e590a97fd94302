"""Application services around the resolution engine."""

from __future__ import annotations

from .auth import Credentials, LoginService
from .capacity import CapacityJobService
from .context import ServiceContext
from .jobs import JobRecord, JobTracker

__all__ = [
    "CapacityJobService",
    "Credentials",
    "JobRecord",
    "JobTracker",
    "LoginService",
    "ServiceContext",
]
