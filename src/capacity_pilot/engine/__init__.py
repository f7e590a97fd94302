"""Target resolution and confirmation engine."""

from __future__ import annotations

from .capacity import CapacityWriter
from .gate import MatchConfirmGate, SurfaceCheck, is_close_label, is_destructive_label
from .navigator import CalendarNavigator, PagingWalk
from .orchestrator import ResolutionOrchestrator
from .scorer import CandidateScorer, rank_candidates, score_candidate
from .timeparse import extract_start_time, normalize, to_minutes

__all__ = [
    "CalendarNavigator",
    "CandidateScorer",
    "CapacityWriter",
    "MatchConfirmGate",
    "PagingWalk",
    "ResolutionOrchestrator",
    "SurfaceCheck",
    "extract_start_time",
    "is_close_label",
    "is_destructive_label",
    "normalize",
    "rank_candidates",
    "score_candidate",
    "to_minutes",
]
