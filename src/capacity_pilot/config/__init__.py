"""Configuration models and helpers."""

from __future__ import annotations

from .settings import (
    AppSettings,
    BrowserSettings,
    PortalSettings,
    ResolutionSettings,
    SelectorSettings,
    ServiceSettings,
    get_settings,
)

__all__ = [
    "AppSettings",
    "BrowserSettings",
    "PortalSettings",
    "ResolutionSettings",
    "SelectorSettings",
    "ServiceSettings",
    "get_settings",
]
