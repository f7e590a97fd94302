from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import date
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


DATE_PLACEHOLDER = "{date}"


@dataclass(frozen=True)
class PortalSettings:
    login_url: Optional[str]
    schedule_url: Optional[str]
    email: Optional[str]
    password: Optional[str]

    @property
    def is_configured(self) -> bool:
        return bool(self.login_url and self.email and self.password)

    @property
    def missing_env_vars(self) -> list[str]:
        missing = []
        if not self.login_url:
            missing.append("LOGIN_URL")
        if not self.email:
            missing.append("PORTAL_EMAIL")
        if not self.password:
            missing.append("PORTAL_PASSWORD")
        return missing


@dataclass(frozen=True)
class BrowserSettings:
    executable_path: Optional[str]
    headless: bool
    viewport_width: int
    viewport_height: int
    default_timeout_ms: int
    launch_args: tuple[str, ...]


@dataclass(frozen=True)
class SelectorSettings:
    email_input: str
    password_input: str
    login_submit: str
    date_input: str
    day_cell: str
    next_page: str
    previous_page: str
    event_item: str
    overlay: str
    edit_control: str
    edit_form: str
    capacity_input: str
    save_button: str
    close_controls: str

    def day_cell_for(self, day: date) -> str:
        return self.day_cell.replace(DATE_PLACEHOLDER, day.isoformat())


@dataclass(frozen=True)
class ResolutionSettings:
    paging_bound: int
    settle_ms: int
    ack_timeout_ms: int
    overlay_timeout_ms: int
    form_timeout_ms: int
    network_idle_timeout_ms: int
    login_timeout_ms: int
    preview_length: int
    candidate_attempts: int
    date_marker_attribute: str
    date_formats: tuple[str, ...]
    creation_markers: tuple[str, ...]
    editor_markers: tuple[str, ...]
    close_labels: tuple[str, ...]
    destructive_labels: tuple[str, ...]


@dataclass(frozen=True)
class ServiceSettings:
    job_deadline_seconds: float
    max_concurrent_jobs: int
    finished_job_retention: int
    host: str
    port: int


@dataclass(frozen=True)
class AppSettings:
    portal: PortalSettings
    browser: BrowserSettings
    selectors: SelectorSettings
    resolution: ResolutionSettings
    service: ServiceSettings


DEFAULT_LAUNCH_ARGS = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
)

DEFAULT_CREATION_MARKERS = (
    "nueva clase",
    "crear clase",
    "agregar clase",
    "nuevo evento",
    "crear evento",
    "new class",
    "create class",
    "add class",
    "new event",
    "create event",
)

DEFAULT_EDITOR_MARKERS = (
    "editar",
    "edit",
    "capacidad",
    "capacity",
    "cupo",
    "lugares",
    "reservaciones",
    "reservations",
    "asistentes",
    "attendees",
)

DEFAULT_CLOSE_LABELS = (
    "cerrar",
    "close",
    "dismiss",
    "volver",
    "regresar",
    "back",
    "×",
    "✕",
    "✖",
)

DEFAULT_DESTRUCTIVE_LABELS = (
    "eliminar",
    "borrar",
    "cancelar",
    "anular",
    "suspender",
    "delete",
    "remove",
    "cancel",
    "trash",
)


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _float_from_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _bool_from_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _phrases_from_env(name: str, default: tuple[str, ...], *, lower: bool = True) -> tuple[str, ...]:
    # Pipe separated; phrases may contain commas.
    raw = os.getenv(name)
    if not raw:
        return default
    parts = (part.strip() for part in raw.split("|"))
    return tuple(part.lower() if lower else part for part in parts if part)


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    portal = PortalSettings(
        login_url=os.getenv("LOGIN_URL"),
        schedule_url=os.getenv("SCHEDULE_URL") or None,
        email=os.getenv("PORTAL_EMAIL") or os.getenv("EMAIL"),
        password=os.getenv("PORTAL_PASSWORD") or os.getenv("PASSWORD"),
    )

    browser = BrowserSettings(
        executable_path=os.getenv("BROWSER_EXECUTABLE_PATH") or os.getenv("PUPPETEER_EXECUTABLE_PATH"),
        headless=_bool_from_env("BROWSER_HEADLESS", True),
        viewport_width=_int_from_env("BROWSER_VIEWPORT_WIDTH", 1440),
        viewport_height=_int_from_env("BROWSER_VIEWPORT_HEIGHT", 900),
        default_timeout_ms=_int_from_env("BROWSER_DEFAULT_TIMEOUT_MS", 45_000),
        launch_args=DEFAULT_LAUNCH_ARGS,
    )

    selectors = SelectorSettings(
        email_input=os.getenv("SEL_EMAIL", 'input[name="email"], input[type="email"], #email'),
        password_input=os.getenv("SEL_PASSWORD", 'input[name="password"], input[type="password"], #password'),
        login_submit=os.getenv("SEL_SUBMIT", 'button[type="submit"], button[data-testid="login"], .btn-primary'),
        date_input=os.getenv("SEL_DATE_INPUT", 'input[type="date"]'),
        day_cell=os.getenv("SEL_DAY_CELL", 'td[data-date="{date}"], [data-date="{date}"]'),
        next_page=os.getenv(
            "SEL_NEXT_PAGE",
            '.fc-next-button, button[aria-label="next"], button[title="Next"], button[title="Siguiente"]',
        ),
        previous_page=os.getenv(
            "SEL_PREVIOUS_PAGE",
            '.fc-prev-button, button[aria-label="prev"], button[title="Previous"], button[title="Anterior"]',
        ),
        event_item=os.getenv(
            "SEL_CLASS_ROW",
            '.fc-event, [data-testid="class-row"], .class-row, .class-item, li[role="row"]',
        ),
        overlay=os.getenv("SEL_OVERLAY", '.fc-popover, [role="dialog"], .modal.show, .popover'),
        edit_control=os.getenv(
            "SEL_CLASS_OPEN",
            '[data-testid="edit-class"], .edit, button:has-text("Editar"), a:has-text("Editar")',
        ),
        edit_form=os.getenv("SEL_EDIT_FORM", 'form:has(input[name="capacity"]), form:has(#capacity), form'),
        capacity_input=os.getenv("SEL_CAPACITY_INPUT", 'input[name="capacity"], #capacity, [data-testid="capacity"]'),
        save_button=os.getenv(
            "SEL_SAVE",
            'button[type="submit"], button:has-text("Guardar"), [data-testid="save"], .btn-primary',
        ),
        close_controls=os.getenv("SEL_CLOSE_CONTROLS", 'button, a, [role="button"]'),
    )

    resolution = ResolutionSettings(
        paging_bound=_int_from_env("RESOLVE_PAGING_BOUND", 24),
        settle_ms=_int_from_env("RESOLVE_SETTLE_MS", 1_000),
        ack_timeout_ms=_int_from_env("RESOLVE_ACK_TIMEOUT_MS", 5_000),
        overlay_timeout_ms=_int_from_env("RESOLVE_OVERLAY_TIMEOUT_MS", 15_000),
        form_timeout_ms=_int_from_env("RESOLVE_FORM_TIMEOUT_MS", 30_000),
        network_idle_timeout_ms=_int_from_env("RESOLVE_NETWORK_IDLE_TIMEOUT_MS", 20_000),
        login_timeout_ms=_int_from_env("RESOLVE_LOGIN_TIMEOUT_MS", 60_000),
        preview_length=_int_from_env("RESOLVE_PREVIEW_LENGTH", 160),
        candidate_attempts=max(1, _int_from_env("RESOLVE_CANDIDATE_ATTEMPTS", 1)),
        date_marker_attribute=os.getenv("RESOLVE_DATE_ATTRIBUTE", "data-date"),
        date_formats=_phrases_from_env("RESOLVE_DATE_FORMATS", ("%Y-%m-%d",), lower=False),
        creation_markers=_phrases_from_env("RESOLVE_CREATION_MARKERS", DEFAULT_CREATION_MARKERS),
        editor_markers=_phrases_from_env("RESOLVE_EDITOR_MARKERS", DEFAULT_EDITOR_MARKERS),
        close_labels=_phrases_from_env("RESOLVE_CLOSE_LABELS", DEFAULT_CLOSE_LABELS),
        destructive_labels=_phrases_from_env("RESOLVE_DESTRUCTIVE_LABELS", DEFAULT_DESTRUCTIVE_LABELS),
    )

    service = ServiceSettings(
        job_deadline_seconds=_float_from_env("JOB_DEADLINE_SECONDS", 240.0),
        max_concurrent_jobs=max(1, _int_from_env("MAX_CONCURRENT_JOBS", 2)),
        finished_job_retention=_int_from_env("FINISHED_JOB_RETENTION", 200),
        host=os.getenv("HOST", "127.0.0.1"),
        port=_int_from_env("PORT", 3000),
    )

    return AppSettings(
        portal=portal,
        browser=browser,
        selectors=selectors,
        resolution=resolution,
        service=service,
    )
