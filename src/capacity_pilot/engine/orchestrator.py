from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional

from ..config import AppSettings, ResolutionSettings
from ..domain import (
    ConfirmedTarget,
    FormRejected,
    MatchResult,
    NoCandidate,
    OverlayRejected,
    ResolutionError,
    ResolutionReport,
    ScoredCandidate,
    TargetSpec,
)
from ..driver import DriverTimeout, PageDriver, settle
from .gate import MatchConfirmGate
from .navigator import CalendarNavigator
from .scorer import CandidateScorer

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ResolutionOrchestrator:
    navigator: CalendarNavigator
    scorer: CandidateScorer
    gate: MatchConfirmGate
    resolution: ResolutionSettings

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "ResolutionOrchestrator":
        return cls(
            navigator=CalendarNavigator(settings.selectors, settings.resolution),
            scorer=CandidateScorer(settings.selectors, settings.resolution),
            gate=MatchConfirmGate(settings.selectors, settings.resolution),
            resolution=settings.resolution,
        )

    async def resolve(
        self,
        page: PageDriver,
        target: TargetSpec,
        report: Optional[ResolutionReport] = None,
    ) -> ConfirmedTarget:
        """Find the one calendar entry matching ``target`` and confirm it at both gates."""

        report = report if report is not None else ResolutionReport(target=target)
        try:
            logger.info("Selecting date %s", target.day.isoformat())
            report.navigation = await self.navigator.goto_date(page, target.day)

            logger.info("Looking for class %s", target.describe())
            ranked = await self.scorer.rank(page, target)
            report.candidates = ranked
            if not ranked:
                raise NoCandidate("no event rendered on the target date", target=target)

            attempts = self.candidates_to_try(ranked)
            if not attempts:
                raise NoCandidate("no candidate allowed by candidate_attempts", target=target)
            rejection: Optional[ResolutionError] = None
            for candidate in attempts:
                report.attempts += 1
                try:
                    return await self._confirm(page, target, candidate, report)
                except (OverlayRejected, FormRejected) as exc:
                    rejection = exc
            raise rejection
        except ResolutionError as exc:
            if exc.target is None:
                exc.target = target
            raise

    def candidates_to_try(self, ranked: List[ScoredCandidate]) -> List[ScoredCandidate]:
        # The only place that decides whether a rejected top candidate falls back to the next one.
        return ranked[: self.resolution.candidate_attempts]

    async def _confirm(
        self,
        page: PageDriver,
        target: TargetSpec,
        candidate: ScoredCandidate,
        report: ResolutionReport,
    ) -> ConfirmedTarget:
        logger.info("Opening %r (score %s)", candidate.preview_text, candidate.total_score)
        await page.click(candidate.handle)
        await settle(
            page,
            pause_ms=self.resolution.settle_ms,
            idle_timeout_ms=self.resolution.network_idle_timeout_ms,
        )

        stage = "overlay"
        surface: Any = None
        try:
            overlay = await self.gate.confirm_overlay(page, target)
            surface = overlay.surface
            report.overlay_result = overlay.result
            if overlay.result is not MatchResult.CONFIRMED:
                raise OverlayRejected(f"overlay check returned {overlay.result.value}", target=target)

            stage = "form"
            await self.gate.advance_to_form(page, overlay.surface)
            form = await self.gate.confirm_form(page, target)
            surface = form.surface
            report.form_result = form.result
            if form.result is not MatchResult.CONFIRMED:
                raise FormRejected(f"form check returned {form.result.value}", target=target)

            return ConfirmedTarget(
                target=target,
                candidate=candidate,
                form=form.surface,
                overlay_result=overlay.result,
                form_result=form.result,
            )
        except DriverTimeout as exc:
            report.closed_via = await self._close_quietly(page, surface)
            error_cls = OverlayRejected if stage == "overlay" else FormRejected
            raise error_cls(f"{stage} did not appear: {exc}", target=target) from exc
        except Exception:
            report.closed_via = await self._close_quietly(page, surface)
            raise

    async def _close_quietly(self, page: PageDriver, surface: Any) -> Optional[str]:
        try:
            return await self.gate.close_safely(page, surface)
        except Exception:  # noqa: BLE001
            logger.warning("Non-destructive close failed", exc_info=True)
            return None
