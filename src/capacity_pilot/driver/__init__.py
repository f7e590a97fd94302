"""Page-driver protocol and the Playwright implementation."""

from __future__ import annotations

from .base import DriverError, DriverTimeout, PageDriver, label_of, settle

__all__ = ["DriverError", "DriverTimeout", "PageDriver", "label_of", "settle"]
