"""UTC-focused helpers for run metadata and Wikibase time values."""

from __future__ import annotations

from datetime import date, datetime, timezone


def utc_timestamp_iso() -> str:
    return datetime.now(tz=timezone.utc).isoformat(timespec="milliseconds")


def parse_iso_day(value: str | None) -> date | None:
    """Return the calendar day of an ISO date or datetime string, or None."""
    if not value:
        return None
    text = value.strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def wikibase_day_timestamp(day: date) -> str:
    return f"+{day.isoformat()}T00:00:00Z"
