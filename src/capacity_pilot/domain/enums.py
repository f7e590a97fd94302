from __future__ import annotations

from enum import Enum


class MatchResult(str, Enum):
    NOT_AN_EVENT_SURFACE = "not_an_event_surface"
    MISMATCH = "mismatch"
    CONFIRMED = "confirmed"


class ErrorKind(str, Enum):
    NAVIGATION_FAILURE = "NavigationFailure"
    NO_CANDIDATE = "NoCandidate"
    OVERLAY_REJECTED = "OverlayRejected"
    FORM_REJECTED = "FormRejected"
    LOGIN_FAILURE = "LoginFailure"
    CAPACITY_WRITE_FAILURE = "CapacityWriteFailure"
    DEADLINE_EXCEEDED = "DeadlineExceeded"
    DRIVER_ERROR = "DriverError"


class JobStatus(str, Enum):
    PENDING = "pending"
    DONE = "done"
