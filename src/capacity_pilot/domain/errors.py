from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from .enums import ErrorKind

if TYPE_CHECKING:
    from .models import TargetSpec


class ResolutionError(RuntimeError):
    """Base class for fatal failures reported back to the caller."""

    kind: ErrorKind = ErrorKind.DRIVER_ERROR

    def __init__(self, detail: str, *, target: Optional["TargetSpec"] = None) -> None:
        super().__init__(detail)
        self.detail = detail
        self.target = target

    def __str__(self) -> str:
        if self.target is None:
            return self.detail
        return f"{self.detail} ({self.target.describe()})"


class NavigationFailure(ResolutionError):
    """Raised when the calendar cannot be brought to the target date."""

    kind = ErrorKind.NAVIGATION_FAILURE


class NoCandidate(ResolutionError):
    """Raised when no rendered event belongs to the target date."""

    kind = ErrorKind.NO_CANDIDATE


class OverlayRejected(ResolutionError):
    kind = ErrorKind.OVERLAY_REJECTED


class FormRejected(ResolutionError):
    kind = ErrorKind.FORM_REJECTED


class LoginFailure(ResolutionError):
    kind = ErrorKind.LOGIN_FAILURE


class CapacityWriteFailure(ResolutionError):
    kind = ErrorKind.CAPACITY_WRITE_FAILURE
