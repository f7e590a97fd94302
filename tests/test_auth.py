from __future__ import annotations

from dataclasses import replace

import pytest

from capacity_pilot.domain import LoginFailure
from capacity_pilot.services import Credentials, LoginService

from .fakes import FakeElement, FakePage, make_settings


@pytest.fixture
def login_page(selectors) -> FakePage:
    page = FakePage()
    page.add(selectors.email_input, FakeElement())
    page.add(selectors.password_input, FakeElement())
    page.add(selectors.login_submit, FakeElement("Entrar"))
    return page


def _service(**portal_overrides) -> LoginService:
    settings = make_settings()
    return LoginService(
        portal=replace(settings.portal, **portal_overrides),
        selectors=settings.selectors,
        resolution=settings.resolution,
    )


async def test_login_fills_form_and_opens_schedule(login_page, selectors) -> None:
    await _service().login(login_page, Credentials(email="coach@example.com", password="secret"))

    assert login_page.elements[selectors.email_input][0].value == "coach@example.com"
    assert login_page.elements[selectors.password_input][0].value == "secret"
    assert login_page.elements[selectors.login_submit][0].clicks == 1
    assert login_page.visited == ["https://portal.example/login", "https://portal.example/schedule"]


async def test_login_tolerates_busy_network(login_page) -> None:
    login_page.idle_times_out = True

    await _service(schedule_url=None).login(login_page, Credentials(email="a@b.c", password="pw"))

    assert login_page.visited == ["https://portal.example/login"]
    assert login_page.settle_timeouts == 1


async def test_missing_login_form_is_a_login_failure(selectors) -> None:
    with pytest.raises(LoginFailure):
        await _service().login(FakePage(), Credentials(email="a@b.c", password="pw"))


async def test_missing_login_url(login_page) -> None:
    with pytest.raises(LoginFailure):
        await _service(login_url=None).login(login_page, Credentials(email="a@b.c", password="pw"))


def test_credentials_prefer_request_values() -> None:
    credentials = _service().credentials("other@example.com", "pw")
    assert credentials == Credentials(email="other@example.com", password="pw")


def test_credentials_fall_back_to_environment() -> None:
    assert _service().credentials().email == "coach@example.com"


def test_missing_credentials() -> None:
    with pytest.raises(LoginFailure):
        _service(email=None, password=None).credentials()
