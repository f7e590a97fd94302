from __future__ import annotations

from dataclasses import dataclass, field

from ..config import AppSettings, get_settings
from ..engine import CapacityWriter, ResolutionOrchestrator
from .auth import LoginService


@dataclass(slots=True)
class ServiceContext:
    """Aggregate root for services to share settings and engine components."""

    settings: AppSettings = field(default_factory=get_settings)
    orchestrator: ResolutionOrchestrator = field(init=False)
    writer: CapacityWriter = field(init=False)
    login: LoginService = field(init=False)

    def __post_init__(self) -> None:
        self.orchestrator = ResolutionOrchestrator.from_settings(self.settings)
        self.writer = CapacityWriter(self.settings.selectors, self.settings.resolution)
        self.login = LoginService(
            portal=self.settings.portal,
            selectors=self.settings.selectors,
            resolution=self.settings.resolution,
        )
