from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

from .enums import ErrorKind, MatchResult


def collapse_text(value: Optional[str]) -> str:
    """Collapse runs of whitespace and lower-case ``value``."""

    return " ".join((value or "").split()).lower()


@dataclass(frozen=True)
class TargetSpec:
    day: date
    time: str
    name: Optional[str] = None
    strict_name_required: bool = True

    @property
    def name_key(self) -> Optional[str]:
        key = collapse_text(self.name)
        return key or None

    def describe(self) -> str:
        parts = [f"date={self.day.isoformat()}", f"time={self.time!r}"]
        if self.name_key:
            parts.append(f"name~={self.name!r}")
        parts.append("strict name on" if self.strict_name_required else "strict name off")
        return ", ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.day.isoformat(),
            "time": self.time,
            "name": self.name,
            "strictNameRequired": self.strict_name_required,
        }


@dataclass(frozen=True)
class EventCandidate:
    handle: Any
    preview_text: str
    date_match: bool


@dataclass(frozen=True)
class ScoredCandidate:
    candidate: EventCandidate
    time_score: int
    name_score: int
    start_minutes: Optional[int] = None

    @property
    def total_score(self) -> int:
        return self.time_score + self.name_score

    @property
    def handle(self) -> Any:
        return self.candidate.handle

    @property
    def preview_text(self) -> str:
        return self.candidate.preview_text

    def to_dict(self) -> Dict[str, Any]:
        return {
            "preview": self.preview_text,
            "startMinutes": self.start_minutes,
            "timeScore": self.time_score,
            "nameScore": self.name_score,
            "totalScore": self.total_score,
        }


@dataclass(frozen=True)
class ConfirmedTarget:
    """A calendar entry that passed both gate stages.

    The capacity writer only accepts this type, so a write cannot happen unless
    the overlay check and the form check both confirmed the same target.
    """

    target: TargetSpec
    candidate: ScoredCandidate
    form: Any
    overlay_result: MatchResult
    form_result: MatchResult

    def __post_init__(self) -> None:
        if self.overlay_result is not MatchResult.CONFIRMED or self.form_result is not MatchResult.CONFIRMED:
            raise ValueError("ConfirmedTarget requires a confirmed overlay and a confirmed form.")


@dataclass
class ResolutionReport:
    target: TargetSpec
    navigation: Optional[str] = None
    candidates: List[ScoredCandidate] = field(default_factory=list)
    attempts: int = 0
    overlay_result: Optional[MatchResult] = None
    form_result: Optional[MatchResult] = None
    closed_via: Optional[str] = None
    capacity_applied: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "target": self.target.to_dict(),
            "navigation": self.navigation,
            "candidates": [candidate.to_dict() for candidate in self.candidates],
            "attempts": self.attempts,
            "overlayResult": self.overlay_result.value if self.overlay_result else None,
            "formResult": self.form_result.value if self.form_result else None,
            "closedVia": self.closed_via,
            "capacityApplied": self.capacity_applied,
        }


@dataclass(frozen=True)
class CapacityJob:
    target: TargetSpec
    capacity: int
    debug: bool = False
    dry_run: bool = False
    email: Optional[str] = None
    password: Optional[str] = None


@dataclass(frozen=True)
class JobOutcome:
    ok: bool
    error_kind: Optional[ErrorKind] = None
    detail: Optional[str] = None
    report: Optional[ResolutionReport] = None

    def to_dict(self, *, include_report: bool = False) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"ok": self.ok}
        if not self.ok:
            payload["errorKind"] = self.error_kind.value if self.error_kind else None
            payload["detail"] = self.detail
        if include_report and self.report is not None:
            payload["report"] = self.report.to_dict()
        return payload
