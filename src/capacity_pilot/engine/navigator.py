from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..config import ResolutionSettings, SelectorSettings
from ..domain import NavigationFailure
from ..driver import DriverTimeout, PageDriver, settle

logger = logging.getLogger(__name__)

STRATEGY_DATE_INPUT = "date-input"
STRATEGY_CELL = "cell"
STRATEGY_PAGING = "paging"


@dataclass
class PagingWalk:
    """Bounded walk over calendar pages: forward to ``+bound``, then back to ``-bound``.

    Pages between the origin and ``+bound`` are crossed again on the way back but
    are not re-checked.
    """

    bound: int
    offset: int = 0
    direction: int = 1
    visited: int = 0

    def next_step(self) -> Optional[int]:
        if self.direction > 0:
            if self.offset < self.bound:
                return 1
            self.direction = -1
        if self.offset > -self.bound:
            return -1
        return None

    def turn_back(self) -> None:
        self.direction = -1

    def advance(self, step: int) -> None:
        self.offset += step
        if self.on_fresh_page:
            self.visited += 1

    @property
    def on_fresh_page(self) -> bool:
        return self.offset > 0 if self.direction > 0 else self.offset < 0


@dataclass(slots=True)
class CalendarNavigator:
    selectors: SelectorSettings
    resolution: ResolutionSettings

    async def goto_date(self, page: PageDriver, day: date) -> str:
        """Bring the calendar to ``day`` and return the strategy that got there."""

        cell_selector = self.selectors.day_cell_for(day)
        if await self._inject_date(page, day, cell_selector):
            return STRATEGY_DATE_INPUT
        if await self._activate_cell(page, cell_selector):
            return STRATEGY_CELL
        if await self._page_to_cell(page, cell_selector):
            return STRATEGY_PAGING
        raise NavigationFailure(
            f"date not reachable within {self.resolution.paging_bound} pages in either direction"
        )

    async def _settle(self, page: PageDriver) -> None:
        await settle(
            page,
            pause_ms=self.resolution.settle_ms,
            idle_timeout_ms=self.resolution.network_idle_timeout_ms,
        )

    async def _inject_date(self, page: PageDriver, day: date, cell_selector: str) -> bool:
        field = await page.query(self.selectors.date_input)
        if field is None:
            return False
        await page.set_value(field, day.isoformat())
        await self._settle(page)
        try:
            await page.wait_for(cell_selector, timeout_ms=self.resolution.ack_timeout_ms)
        except DriverTimeout:
            logger.info("Date input did not bring %s into view; trying other strategies", day.isoformat())
            return False
        logger.debug("Reached %s through the date input", day.isoformat())
        return True

    async def _activate_cell(self, page: PageDriver, cell_selector: str) -> bool:
        cell = await page.query(cell_selector)
        if cell is None:
            return False
        await page.click(cell)
        await self._settle(page)
        return True

    async def _page_to_cell(self, page: PageDriver, cell_selector: str) -> bool:
        walk = PagingWalk(bound=self.resolution.paging_bound)
        while True:
            step = walk.next_step()
            if step is None:
                break
            control_selector = self.selectors.next_page if step > 0 else self.selectors.previous_page
            control = await page.query(control_selector)
            if control is None:
                if step > 0:
                    logger.debug("No forward paging control; searching backward")
                    walk.turn_back()
                    continue
                logger.debug("No backward paging control")
                break
            await page.click(control)
            walk.advance(step)
            await self._settle(page)
            if walk.on_fresh_page and await self._activate_cell(page, cell_selector):
                logger.debug("Found target cell at page offset %s after %s pages", walk.offset, walk.visited)
                return True
        logger.info("Paging exhausted after visiting %s pages", walk.visited)
        return False
