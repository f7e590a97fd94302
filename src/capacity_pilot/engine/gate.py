from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from ..config import ResolutionSettings, SelectorSettings
from ..domain import MatchResult, TargetSpec
from ..domain.models import collapse_text
from ..driver import PageDriver, label_of, settle
from .scorer import name_key_for
from .timeparse import extract_start_time, format_minutes, normalize, to_minutes

logger = logging.getLogger(__name__)

CLOSED_VIA_CONTROL = "control"
CLOSED_VIA_ESCAPE = "escape"

_BARE_CLOSE_LABELS = {"x"}


def _contains_any(text: str, phrases: Iterable[str]) -> bool:
    return any(phrase and phrase in text for phrase in phrases)


def is_destructive_label(label: str, destructive_labels: Iterable[str]) -> bool:
    return _contains_any(collapse_text(label), destructive_labels)


def is_close_label(label: str, close_labels: Iterable[str]) -> bool:
    """True when the label says nothing but "close".

    "Cerrar" and "× Cerrar" qualify; "Cerrar inscripciones" does not, since the
    extra words name an action on the class.
    """

    key = collapse_text(label)
    if not key:
        return False
    phrases = [re.escape(phrase) for phrase in (*close_labels, *_BARE_CLOSE_LABELS) if phrase]
    if not phrases:
        return False
    alternation = "|".join(sorted(phrases, key=len, reverse=True))
    pattern = re.compile(rf"(?<!\w)(?:{alternation})(?!\w)")
    remainder, removed = pattern.subn(" ", key)
    return removed > 0 and not re.search(r"\w", remainder)


@dataclass(frozen=True)
class SurfaceCheck:
    result: MatchResult
    surface: Any
    text: str


@dataclass(slots=True)
class MatchConfirmGate:
    selectors: SelectorSettings
    resolution: ResolutionSettings

    def looks_like_creation(self, text: str) -> bool:
        """A blank "new class" surface, or one with none of the existing-event markers."""

        key = collapse_text(text)
        if _contains_any(key, self.resolution.creation_markers):
            return True
        return not _contains_any(key, self.resolution.editor_markers)

    def matches_time_and_name(self, text: str, target: TargetSpec) -> bool:
        # strict_name_required does not relax this conjunction.
        start = extract_start_time(text)
        target_minutes = to_minutes(target.time)
        time_ok = start is not None and target_minutes is not None and start == target_minutes
        name_key = name_key_for(target)
        name_ok = name_key is None or name_key in normalize(collapse_text(text))
        logger.debug(
            "Surface starts %s (want %s), name ok=%s",
            format_minutes(start),
            format_minutes(target_minutes),
            name_ok,
        )
        return time_ok and name_ok

    def classify_overlay(self, text: str, target: TargetSpec) -> MatchResult:
        if self.looks_like_creation(text):
            return MatchResult.NOT_AN_EVENT_SURFACE
        if self.matches_time_and_name(text, target):
            return MatchResult.CONFIRMED
        return MatchResult.MISMATCH

    def classify_form(self, text: str, page_text: str, target: TargetSpec) -> MatchResult:
        if self.looks_like_creation(text):
            return MatchResult.NOT_AN_EVENT_SURFACE
        if not self.matches_time_and_name(text, target):
            return MatchResult.MISMATCH
        if not self.page_shows_date(page_text, target):
            logger.info("Edit page does not mention %s", target.day.isoformat())
            return MatchResult.MISMATCH
        return MatchResult.CONFIRMED

    def page_shows_date(self, page_text: str, target: TargetSpec) -> bool:
        renderings = {target.day.isoformat()}
        renderings.update(target.day.strftime(pattern) for pattern in self.resolution.date_formats)
        return any(rendering in page_text for rendering in renderings)

    async def confirm_overlay(self, page: PageDriver, target: TargetSpec) -> SurfaceCheck:
        surface = await page.wait_for(self.selectors.overlay, timeout_ms=self.resolution.overlay_timeout_ms)
        text = await page.text_of(surface)
        result = self.classify_overlay(text, target)
        logger.info("Overlay check: %s", result.value)
        return SurfaceCheck(result=result, surface=surface, text=text)

    async def advance_to_form(self, page: PageDriver, overlay: Any) -> None:
        control = await page.query(self.selectors.edit_control, within=overlay)
        if control is None:
            # Some portals open the full editor directly.
            logger.debug("No edit control in the overlay; treating it as the editor")
            return
        label = await label_of(page, control)
        if is_destructive_label(label, self.resolution.destructive_labels):
            logger.warning("Edit control %r looks destructive; not clicking it", label)
            return
        await page.click(control)
        await self._settle(page)

    async def confirm_form(self, page: PageDriver, target: TargetSpec) -> SurfaceCheck:
        form = await page.wait_for(self.selectors.edit_form, timeout_ms=self.resolution.form_timeout_ms)
        text = await page.text_of(form)
        page_text = await page.body_text()
        result = self.classify_form(text, page_text, target)
        logger.info("Form check: %s", result.value)
        return SurfaceCheck(result=result, surface=form, text=text)

    async def close_safely(self, page: PageDriver, surface: Optional[Any]) -> str:
        """Dismiss ``surface`` without touching anything that could delete or cancel the class."""

        if surface is not None:
            for control in await page.query_all(self.selectors.close_controls, within=surface):
                label = await label_of(page, control)
                if is_destructive_label(label, self.resolution.destructive_labels):
                    logger.debug("Skipping destructive control %r", label)
                    continue
                if is_close_label(label, self.resolution.close_labels):
                    logger.info("Closing surface through %r", label)
                    await page.click(control)
                    await self._settle(page)
                    return CLOSED_VIA_CONTROL
        logger.info("Closing surface with Escape")
        await page.press("Escape")
        await self._settle(page)
        return CLOSED_VIA_ESCAPE

    async def _settle(self, page: PageDriver) -> None:
        await settle(
            page,
            pause_ms=self.resolution.settle_ms,
            idle_timeout_ms=self.resolution.network_idle_timeout_ms,
        )
