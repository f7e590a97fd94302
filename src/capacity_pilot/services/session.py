from __future__ import annotations

import logging
from typing import Any, Optional

from playwright.async_api import Browser, Playwright, async_playwright

from ..config import BrowserSettings
from ..driver.playwright import PlaywrightPageDriver

logger = logging.getLogger(__name__)


class BrowserSession:
    """One headless Chromium with a single tab, owned by exactly one job.

    ``async with BrowserSession(settings) as page`` yields a page driver; the
    browser is torn down on exit whether the job succeeded, failed, or was
    cancelled by its deadline.
    """

    def __init__(self, settings: BrowserSettings) -> None:
        self.settings = settings
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None

    async def __aenter__(self) -> PlaywrightPageDriver:
        self._playwright = await async_playwright().start()
        try:
            self._browser = await self._playwright.chromium.launch(
                headless=self.settings.headless,
                executable_path=self.settings.executable_path or None,
                args=list(self.settings.launch_args),
            )
            context = await self._browser.new_context(
                viewport={"width": self.settings.viewport_width, "height": self.settings.viewport_height},
            )
            page = await context.new_page()
        except Exception:
            await self.close()
            raise
        page.set_default_timeout(self.settings.default_timeout_ms)
        logger.debug("Browser session started")
        return PlaywrightPageDriver(page)

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def close(self) -> None:
        # Teardown problems are logged, never raised over the job's own outcome.
        if self._browser is not None:
            try:
                await self._browser.close()
            except Exception:  # noqa: BLE001
                logger.warning("Error closing browser", exc_info=True)
            self._browser = None
        if self._playwright is not None:
            try:
                await self._playwright.stop()
            except Exception:  # noqa: BLE001
                logger.warning("Error stopping Playwright", exc_info=True)
            self._playwright = None
        logger.debug("Browser session closed")
