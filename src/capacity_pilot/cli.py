from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from datetime import date
from typing import Optional, Sequence

from .config import get_settings
from .domain import CapacityJob, TargetSpec
from .logging import configure_logging, job_scope


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() == "true"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Capacity Pilot command line interface.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    settings = get_settings()
    api_parser = subparsers.add_parser("api", help="Start the HTTP server that accepts capacity jobs.")
    api_parser.add_argument("--host", default=settings.service.host)
    api_parser.add_argument("--port", type=int, default=settings.service.port)

    run_parser = subparsers.add_parser("run", help="Run a single capacity job in this process.")
    run_parser.add_argument("--date", default=os.getenv("TARGET_DATE"), help="Class date, YYYY-MM-DD.")
    run_parser.add_argument("--time", default=os.getenv("TARGET_TIME"), help="Start time, e.g. 07:00 or 7:00 a.m.")
    run_parser.add_argument("--name", default=os.getenv("TARGET_NAME", ""), help="Substring of the class name.")
    run_parser.add_argument("--capacity", type=int, default=_int_or_none(os.getenv("NEW_CAPACITY")))
    run_parser.add_argument(
        "--lenient-name",
        dest="strict_name_required",
        action="store_false",
        default=_env_flag("STRICT_REQUIRE_NAME", True),
    )
    run_parser.add_argument("--dry-run", action="store_true", help="Confirm the class but do not change it.")
    run_parser.add_argument("--debug", action="store_true", default=_env_flag("DEBUG", False))
    return parser


def _int_or_none(value: Optional[str]) -> Optional[int]:
    try:
        return int(value) if value else None
    except ValueError:
        return None


def _job_from_args(args: argparse.Namespace) -> Optional[CapacityJob]:
    if not args.date or not args.time or (args.capacity is None and not args.dry_run):
        return None
    return CapacityJob(
        target=TargetSpec(
            day=date.fromisoformat(args.date),
            time=args.time,
            name=args.name or None,
            strict_name_required=args.strict_name_required,
        ),
        capacity=args.capacity if args.capacity is not None else 0,
        debug=args.debug,
        dry_run=args.dry_run,
    )


def _run_job(args: argparse.Namespace) -> int:
    from .services import CapacityJobService, ServiceContext

    logger = logging.getLogger(__name__)
    try:
        job = _job_from_args(args)
    except ValueError as exc:
        logger.error("Invalid date %r: %s", args.date, exc)
        return 2
    if job is None:
        logger.error("Missing required input: --date, --time and --capacity (or TARGET_DATE, TARGET_TIME, NEW_CAPACITY)")
        return 2

    service = CapacityJobService(ServiceContext())
    with job_scope("cli"):
        outcome = asyncio.run(service.run(job))
    print(json.dumps(outcome.to_dict(include_report=job.debug), indent=2))
    return 0 if outcome.ok else 1


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging("DEBUG" if getattr(args, "debug", False) else None)
    logging.getLogger(__name__).info("Capacity Pilot CLI starting")

    if args.command == "api":
        from .services.http import run_local_server

        run_local_server(host=args.host, port=args.port)
    elif args.command == "run":
        sys.exit(_run_job(args))
    else:  # pragma: no cover - argparse enforces choices
        parser.print_help()


if __name__ == "__main__":
    main()
