"""HTTP service for Capacity Pilot."""

from .server import app, run_local_server

__all__ = ["app", "run_local_server"]
