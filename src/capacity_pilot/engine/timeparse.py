"""Parsing helpers for the free-text times rendered by scheduling portals.

Portals print start times in many shapes ("07:00", "7.00 a. m.", "07:00am -
07:50am Reformer"). Everything is reduced to a minute-of-day integer so two
expressions compare equal only when they name the same minute. ``None`` means
unparseable and never equals anything.
"""

from __future__ import annotations

import re
from typing import Optional

_LETTER = r"[^\W\d_]"

# "am", "a.m", "a.m.", "a. m.", "p.m." ... only when standing alone as a token.
# Trailing periods belong to the marker.
_MERIDIEM = re.compile(rf"(?<!{_LETTER})([ap])(?:\.\s*)?m(?!{_LETTER})\.*")

_TIME_EXPRESSION = re.compile(r"(\d{1,2})[:.](\d{2})\s*(am|pm)?")

# Dotted dates such as 10.03.2025 are not times.
_TIME_IN_TEXT = re.compile(rf"(?<![\d.:])\d{{1,2}}[:.]\d{{2}}(?![\d]|[.:]\d)(?:\s*(?:am|pm)(?!{_LETTER}))?")


def normalize(text: Optional[str]) -> str:
    """Lower-case ``text`` and collapse meridiem variants into ``am``/``pm``."""

    return _MERIDIEM.sub(lambda match: f"{match.group(1)}m", (text or "").lower())


def to_minutes(expression: Optional[str]) -> Optional[int]:
    if not expression:
        return None
    match = _TIME_EXPRESSION.fullmatch(normalize(expression).strip())
    if not match:
        return None
    hour = int(match.group(1))
    minute = int(match.group(2))
    marker = match.group(3)
    if minute > 59:
        return None
    if marker:
        if not 1 <= hour <= 12:
            return None
    elif hour > 23:
        return None
    if hour == 12:
        hour = 12 if marker == "pm" else 0
    elif marker == "pm":
        hour += 12
    return hour * 60 + minute


def extract_start_time(text: Optional[str]) -> Optional[int]:
    """Minute-of-day of the first time-like substring in ``text``."""

    match = _TIME_IN_TEXT.search(normalize(text))
    if not match:
        return None
    return to_minutes(match.group(0))


def format_minutes(minutes: Optional[int]) -> str:
    if minutes is None:
        return "unparseable"
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


__all__ = ["extract_start_time", "format_minutes", "normalize", "to_minutes"]
