from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from dataclasses import replace
from datetime import date

import pytest

from capacity_pilot.domain import CapacityJob, ErrorKind, JobStatus, LoginFailure, TargetSpec
from capacity_pilot.driver import DriverError
from capacity_pilot.services import CapacityJobService, JobTracker, ServiceContext
from capacity_pilot.services.auth import Credentials

from .fakes import make_settings

DAY = date(2025, 3, 10)


def _job(**overrides) -> CapacityJob:
    values = dict(target=TargetSpec(day=DAY, time="07:00", name="Reformer"), capacity=18)
    values.update(overrides)
    return CapacityJob(**values)


@pytest.fixture
def logins() -> list:
    return []


@pytest.fixture
def service(portal, logins) -> CapacityJobService:
    @asynccontextmanager
    async def session():
        yield portal.page

    async def authenticate(page, credentials: Credentials) -> None:
        logins.append(credentials)

    return CapacityJobService(
        ServiceContext(make_settings()),
        session_factory=session,
        authenticator=authenticate,
    )


async def test_run_updates_capacity(portal, service, logins) -> None:
    fake = portal.add_class("2025-03-10", "07:00 Reformer")

    outcome = await service.run(_job())

    assert outcome.ok
    assert outcome.report.capacity_applied == 18
    assert fake.saved_capacity == "18"
    assert logins == [Credentials(email="coach@example.com", password="secret")]


async def test_request_credentials_override_environment(portal, service, logins) -> None:
    portal.add_class("2025-03-10", "07:00 Reformer")

    await service.run(_job(email="other@example.com", password="pw"))

    assert logins[0].email == "other@example.com"


async def test_dry_run_confirms_but_leaves_capacity(portal, service) -> None:
    fake = portal.add_class("2025-03-10", "07:00 Reformer")

    outcome = await service.run(_job(dry_run=True))

    assert outcome.ok
    assert fake.saved_capacity is None
    assert outcome.report.capacity_applied is None
    assert outcome.report.closed_via == "control"
    assert portal.form is None


async def test_failure_reports_kind_and_target(portal, service) -> None:
    portal.add_day("2025-03-10")

    outcome = await service.run(_job())

    assert not outcome.ok
    assert outcome.error_kind is ErrorKind.NO_CANDIDATE
    assert "time='07:00'" in outcome.detail
    assert outcome.to_dict() == {"ok": False, "errorKind": "NoCandidate", "detail": outcome.detail}


async def test_login_failure_is_reported(portal) -> None:
    @asynccontextmanager
    async def session():
        yield portal.page

    async def reject(page, credentials) -> None:
        raise LoginFailure("bad password")

    service = CapacityJobService(ServiceContext(make_settings()), session_factory=session, authenticator=reject)
    outcome = await service.run(_job())

    assert outcome.error_kind is ErrorKind.LOGIN_FAILURE


async def test_driver_error_is_reported(portal) -> None:
    @asynccontextmanager
    async def session():
        raise DriverError("browser crashed")
        yield portal.page

    service = CapacityJobService(ServiceContext(make_settings()), session_factory=session, authenticator=None)
    outcome = await service.run(_job())

    assert outcome.error_kind is ErrorKind.DRIVER_ERROR
    assert "browser crashed" in outcome.detail


async def test_deadline_exceeded(portal) -> None:
    settings = make_settings()
    settings = replace(settings, service=replace(settings.service, job_deadline_seconds=0.01))

    @asynccontextmanager
    async def session():
        yield portal.page

    async def hang(page, credentials) -> None:
        await asyncio.sleep(1)

    service = CapacityJobService(ServiceContext(settings), session_factory=session, authenticator=hang)
    outcome = await service.run(_job())

    assert outcome.error_kind is ErrorKind.DEADLINE_EXCEEDED


async def test_tracker_runs_job_in_background(portal, service) -> None:
    portal.add_class("2025-03-10", "07:00 Reformer")
    tracker = JobTracker(service, retention=1)

    record = tracker.submit(_job(debug=True))
    assert record.status is JobStatus.PENDING
    assert tracker.get(record.job_id) is record

    await asyncio.wait_for(_wait_done(record), timeout=1)

    payload = record.to_dict()
    assert payload["status"] == "done"
    assert payload["ok"] is True
    assert payload["report"]["capacityApplied"] == 18


async def test_tracker_prunes_old_records(portal, service) -> None:
    portal.add_day("2025-03-10")
    tracker = JobTracker(service, retention=1)

    first = tracker.submit(_job())
    await _wait_done(first)
    second = tracker.submit(_job())
    await _wait_done(second)

    assert tracker.get(first.job_id) is None
    assert tracker.get(second.job_id) is second


async def _wait_done(record) -> None:
    while record.status is not JobStatus.DONE:
        await asyncio.sleep(0)


async def test_failed_write_closes_the_form(portal, service) -> None:
    fake = portal.add_class("2025-03-10", "07:00 Reformer")
    fake.save_labels = ["Cancelar clase"]

    outcome = await service.run(_job())

    assert outcome.error_kind is ErrorKind.CAPACITY_WRITE_FAILURE
    assert outcome.report.closed_via == "control"
    assert outcome.report.capacity_applied is None
    assert portal.form is None
    assert not fake.destroyed
    assert fake.saved_capacity is None

