"""Capacity Pilot: resolve one class on a scheduling portal and change its capacity."""

from __future__ import annotations


def main() -> None:
    from .cli import main as cli_main

    cli_main()
