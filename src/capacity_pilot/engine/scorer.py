from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from ..config import ResolutionSettings, SelectorSettings
from ..domain import EventCandidate, ScoredCandidate, TargetSpec
from ..domain.models import collapse_text
from ..driver import PageDriver
from .timeparse import extract_start_time, format_minutes, normalize, to_minutes

logger = logging.getLogger(__name__)

EXACT_TIME_SCORE = 100
NAME_SCORE = 50


def time_score(start_minutes: Optional[int], target_minutes: Optional[int]) -> int:
    if start_minutes is None or target_minutes is None:
        return 0
    if start_minutes == target_minutes:
        return EXACT_TIME_SCORE
    return max(0, EXACT_TIME_SCORE - abs(start_minutes - target_minutes))


def name_score(preview_text: str, name_key: Optional[str]) -> int:
    if not name_key or name_key in preview_text:
        return NAME_SCORE
    return 0


def name_key_for(target: TargetSpec) -> Optional[str]:
    """Name constraint in the same normalized form as preview text."""

    return normalize(target.name_key) if target.name_key else None


def score_candidate(candidate: EventCandidate, target: TargetSpec) -> ScoredCandidate:
    start = extract_start_time(candidate.preview_text)
    return ScoredCandidate(
        candidate=candidate,
        time_score=time_score(start, to_minutes(target.time)),
        name_score=name_score(candidate.preview_text, name_key_for(target)),
        start_minutes=start,
    )


def rank_candidates(candidates: List[EventCandidate], target: TargetSpec) -> List[ScoredCandidate]:
    """Score date members and order them best first; ties keep enumeration order."""

    scored = [score_candidate(candidate, target) for candidate in candidates if candidate.date_match]
    return sorted(scored, key=lambda item: item.total_score, reverse=True)


@dataclass(slots=True)
class CandidateScorer:
    selectors: SelectorSettings
    resolution: ResolutionSettings

    async def enumerate(self, page: PageDriver, day: date) -> List[EventCandidate]:
        marker = day.isoformat()
        candidates: list[EventCandidate] = []
        for element in await page.query_all(self.selectors.event_item):
            owner_date = await page.attribute_of(element, self.resolution.date_marker_attribute, inherit=True)
            preview = normalize(collapse_text(await page.text_of(element)))[: self.resolution.preview_length]
            candidates.append(
                EventCandidate(
                    handle=element,
                    preview_text=preview,
                    date_match=(owner_date or "").strip()[:10] == marker,
                )
            )
        return candidates

    async def rank(self, page: PageDriver, target: TargetSpec) -> List[ScoredCandidate]:
        candidates = await self.enumerate(page, target.day)
        ranked = rank_candidates(candidates, target)
        logger.info(
            "Found %s events on the page, %s on %s",
            len(candidates),
            len(ranked),
            target.day.isoformat(),
        )
        for item in ranked:
            logger.debug(
                "Candidate %r starts %s score=%s+%s",
                item.preview_text,
                format_minutes(item.start_minutes),
                item.time_score,
                item.name_score,
            )
        return ranked

    async def find_best(self, page: PageDriver, target: TargetSpec) -> Optional[ScoredCandidate]:
        ranked = await self.rank(page, target)
        return ranked[0] if ranked else None
