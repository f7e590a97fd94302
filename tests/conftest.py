from __future__ import annotations

import os
import tempfile

# Keep test runs from writing into the real per-user log directory.
os.environ.setdefault("CAPACITY_PILOT_LOG_DIR", tempfile.mkdtemp(prefix="capacity-pilot-logs-"))

import pytest  # noqa: E402

from capacity_pilot.config import AppSettings, ResolutionSettings, SelectorSettings  # noqa: E402

from .fakes import TEST_SELECTORS, FakePortal, make_resolution, make_settings  # noqa: E402


@pytest.fixture
def selectors() -> SelectorSettings:
    return TEST_SELECTORS


@pytest.fixture
def resolution() -> ResolutionSettings:
    return make_resolution()


@pytest.fixture
def settings() -> AppSettings:
    return make_settings()


@pytest.fixture
def portal() -> FakePortal:
    return FakePortal()
