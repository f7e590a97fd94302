"""Domain models for class resolution and capacity jobs."""

from __future__ import annotations

from .enums import ErrorKind, JobStatus, MatchResult
from .errors import (
    CapacityWriteFailure,
    FormRejected,
    LoginFailure,
    NavigationFailure,
    NoCandidate,
    OverlayRejected,
    ResolutionError,
)
from .models import (
    CapacityJob,
    ConfirmedTarget,
    EventCandidate,
    JobOutcome,
    ResolutionReport,
    ScoredCandidate,
    TargetSpec,
)

__all__ = [
    "CapacityJob",
    "CapacityWriteFailure",
    "ConfirmedTarget",
    "ErrorKind",
    "EventCandidate",
    "FormRejected",
    "JobOutcome",
    "JobStatus",
    "LoginFailure",
    "MatchResult",
    "NavigationFailure",
    "NoCandidate",
    "OverlayRejected",
    "ResolutionError",
    "ResolutionReport",
    "ScoredCandidate",
    "TargetSpec",
]
