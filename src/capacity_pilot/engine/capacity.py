from __future__ import annotations

import logging
from dataclasses import dataclass

from ..config import ResolutionSettings, SelectorSettings
from ..domain import CapacityWriteFailure, ConfirmedTarget
from ..driver import DriverTimeout, PageDriver, label_of
from .gate import is_destructive_label

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CapacityWriter:
    selectors: SelectorSettings
    resolution: ResolutionSettings

    async def apply(self, page: PageDriver, confirmed: ConfirmedTarget, capacity: int) -> None:
        if not isinstance(confirmed, ConfirmedTarget):
            raise TypeError("capacity can only be written to a ConfirmedTarget")
        if capacity < 0:
            raise CapacityWriteFailure(f"capacity must be non-negative, got {capacity}", target=confirmed.target)

        try:
            field = await page.wait_for(
                self.selectors.capacity_input,
                timeout_ms=self.resolution.form_timeout_ms,
                within=confirmed.form,
            )
        except DriverTimeout as exc:
            raise CapacityWriteFailure("capacity input did not appear", target=confirmed.target) from exc

        logger.info("Setting capacity to %s", capacity)
        await page.fill(field, str(capacity))

        for control in await page.query_all(self.selectors.save_button, within=confirmed.form):
            label = await label_of(page, control)
            if is_destructive_label(label, self.resolution.destructive_labels):
                logger.debug("Skipping destructive save candidate %r", label)
                continue
            await page.click(control)
            break
        else:
            raise CapacityWriteFailure("no save control found in the edit form", target=confirmed.target)

        try:
            await page.wait_for_network_idle(timeout_ms=self.resolution.network_idle_timeout_ms)
        except DriverTimeout:
            logger.debug("Network did not go idle after saving; assuming the save went through")
        logger.info("Capacity updated to %s", capacity)
