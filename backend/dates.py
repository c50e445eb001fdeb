"""Parsing and display helpers for exercise dates.

Exercises carry a calendar date only. It is stored as a naive UTC midnight
``datetime`` (BSON has no date-only type) and shown to clients as
``Www Mmm dd yyyy``, e.g. ``Thu Jan 05 2023``.
"""

from __future__ import annotations

from datetime import date, datetime, time

DISPLAY_FORMAT = "%a %b %d %Y"


def parse_date(value: str | date | datetime) -> date:
    """Return the calendar date named by ``value``.

    Accepts ``YYYY-MM-DD``, ISO-8601 date-times (the date is taken as
    written, offsets are ignored) and the display format itself.
    Raises ``ValueError`` for anything else.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Unsupported date value: {value!r}")

    text = value.strip()
    if not text:
        raise ValueError("Empty date")

    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass
    try:
        return datetime.strptime(text, DISPLAY_FORMAT).date()
    except ValueError:
        raise ValueError(f"Invalid date: {value!r}") from None


def format_date(value: date | datetime) -> str:
    if isinstance(value, datetime):
        value = value.date()
    return value.strftime(DISPLAY_FORMAT)


def to_storage(value: date) -> datetime:
    return datetime.combine(value, time.min)


def from_storage(value: datetime) -> date:
    return value.date()
