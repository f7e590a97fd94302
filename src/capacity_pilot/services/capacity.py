from __future__ import annotations

import asyncio
import logging
from typing import AsyncContextManager, Awaitable, Callable, Optional

from ..domain import CapacityJob, ErrorKind, JobOutcome, ResolutionError, ResolutionReport
from ..driver import DriverError, DriverTimeout, PageDriver
from .auth import Credentials
from .context import ServiceContext
from .session import BrowserSession

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], AsyncContextManager[PageDriver]]
Authenticator = Callable[[PageDriver, Credentials], Awaitable[None]]


class CapacityJobService:
    """Runs one capacity job end to end on its own browser session."""

    def __init__(
        self,
        context: ServiceContext,
        *,
        session_factory: Optional[SessionFactory] = None,
        authenticator: Optional[Authenticator] = None,
    ) -> None:
        self.context = context
        self.session_factory = session_factory or (lambda: BrowserSession(context.settings.browser))
        self.authenticator = authenticator or context.login.login
        self._slots = asyncio.Semaphore(context.settings.service.max_concurrent_jobs)

    async def run(self, job: CapacityJob) -> JobOutcome:
        report = ResolutionReport(target=job.target)
        deadline = self.context.settings.service.job_deadline_seconds
        try:
            async with self._slots:
                await asyncio.wait_for(self._execute(job, report), timeout=deadline)
        except ResolutionError as exc:
            logger.error("Job failed (%s): %s", exc.kind.value, exc)
            return JobOutcome(ok=False, error_kind=exc.kind, detail=str(exc), report=report)
        except (DriverTimeout, DriverError) as exc:
            logger.error("Browser interaction failed: %s", exc)
            return JobOutcome(
                ok=False,
                error_kind=ErrorKind.DRIVER_ERROR,
                detail=f"{exc} ({job.target.describe()})",
                report=report,
            )
        except asyncio.TimeoutError:
            logger.error("Job exceeded its %ss deadline; session discarded", deadline)
            return JobOutcome(
                ok=False,
                error_kind=ErrorKind.DEADLINE_EXCEEDED,
                detail=f"job exceeded its {deadline:g}s deadline ({job.target.describe()})",
                report=report,
            )
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected failure while running capacity job")
            return JobOutcome(
                ok=False,
                error_kind=ErrorKind.DRIVER_ERROR,
                detail=f"{exc} ({job.target.describe()})",
                report=report,
            )
        logger.info("Job finished for %s", job.target.describe())
        return JobOutcome(ok=True, report=report)

    async def _execute(self, job: CapacityJob, report: ResolutionReport) -> None:
        credentials = self.context.login.credentials(job.email, job.password)
        async with self.session_factory() as page:
            await self.authenticator(page, credentials)
            confirmed = await self.context.orchestrator.resolve(page, job.target, report)
            if job.dry_run:
                logger.info("Dry run; leaving capacity untouched")
                report.closed_via = await self.context.orchestrator.gate.close_safely(page, confirmed.form)
                return
            try:
                await self.context.writer.apply(page, confirmed, job.capacity)
            except Exception:
                report.closed_via = await self._close_quietly(page, confirmed.form)
                raise
            report.capacity_applied = job.capacity

    async def _close_quietly(self, page: PageDriver, surface: object) -> Optional[str]:
        try:
            return await self.context.orchestrator.gate.close_safely(page, surface)
        except Exception:  # noqa: BLE001
            logger.warning("Non-destructive close after a failed write also failed", exc_info=True)
            return None
