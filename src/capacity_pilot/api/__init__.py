"""Operations shared by the HTTP server and the CLI."""

from __future__ import annotations

from .registry import Operation, invoke, list_operations, operation
from .state import api_state

from . import endpoints  # noqa: F401  (registers operations)

__all__ = ["Operation", "api_state", "invoke", "list_operations", "operation"]
