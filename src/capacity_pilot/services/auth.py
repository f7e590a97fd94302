from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..config import PortalSettings, ResolutionSettings, SelectorSettings
from ..domain import LoginFailure
from ..driver import DriverError, DriverTimeout, PageDriver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Credentials:
    email: str
    password: str


@dataclass(slots=True)
class LoginService:
    portal: PortalSettings
    selectors: SelectorSettings
    resolution: ResolutionSettings

    def credentials(self, email: Optional[str] = None, password: Optional[str] = None) -> Credentials:
        resolved_email = email or self.portal.email
        resolved_password = password or self.portal.password
        if not resolved_email or not resolved_password:
            raise LoginFailure("portal credentials are missing; set PORTAL_EMAIL and PORTAL_PASSWORD")
        return Credentials(email=resolved_email, password=resolved_password)

    async def login(self, page: PageDriver, credentials: Credentials) -> None:
        """Sign in and leave ``page`` on the schedule view."""

        if not self.portal.login_url:
            raise LoginFailure("LOGIN_URL is not configured")
        timeout_ms = self.resolution.login_timeout_ms
        try:
            logger.info("Logging in")
            await page.goto(self.portal.login_url, timeout_ms=timeout_ms)
            email_field = await page.wait_for(self.selectors.email_input, timeout_ms=timeout_ms)
            await page.fill(email_field, credentials.email)
            password_field = await page.wait_for(self.selectors.password_input, timeout_ms=timeout_ms)
            await page.fill(password_field, credentials.password)
            submit = await page.wait_for(self.selectors.login_submit, timeout_ms=timeout_ms)
            await page.click(submit)
        except (DriverTimeout, DriverError) as exc:
            raise LoginFailure(f"login form could not be completed: {exc}") from exc

        try:
            await page.wait_for_network_idle(timeout_ms=timeout_ms)
        except DriverTimeout:
            logger.debug("Navigation after login did not settle; continuing")

        if self.portal.schedule_url:
            logger.info("Opening schedule")
            try:
                await page.goto(self.portal.schedule_url, timeout_ms=timeout_ms)
            except (DriverTimeout, DriverError) as exc:
                raise LoginFailure(f"schedule page did not load: {exc}") from exc
            try:
                await page.wait_for_network_idle(timeout_ms=timeout_ms)
            except DriverTimeout:
                logger.debug("Schedule page did not settle; continuing")
