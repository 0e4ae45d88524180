# gamenight/utils/date_utils.py

"""Date helpers shared by the ingestion jobs and the filter pipeline.

Catalog dates are stored as ISO ``YYYY-MM-DD`` strings and bookkeeping
timestamps as ISO-8601 UTC strings. The store reports release dates as
free text ("21 Dec, 2020", "Dec 21, 2020", "Q1 2025", "Coming soon"),
so parsing is best-effort and returns None when nothing matches.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

__all__ = [
    "days_since",
    "iso_from_unix",
    "parse_iso_date",
    "parse_release_date",
    "utc_now_iso",
]

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

_RELEASE_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%d %b, %Y",
    "%b %d, %Y",
    "%d %B, %Y",
    "%B %d, %Y",
    "%d %b %Y",
    "%d %B %Y",
    "%b %Y",
    "%B %Y",
    "%Y",
)


def utc_now_iso(now: datetime | None = None) -> str:
    """Returns the current (or given) instant as an ISO-8601 UTC string."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="microseconds")


def parse_release_date(text: str | None) -> str | None:
    """Parses a storefront release date into ``YYYY-MM-DD``.

    Formats without a day resolve to the first of the month (or year).

    Args:
        text: Raw release date text from the storefront.

    Returns:
        The ISO date, or None when the text is empty or unparseable.
    """
    if not text or not text.strip():
        return None

    cleaned = " ".join(text.replace(".", "").split())

    for fmt in _RELEASE_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt).date().isoformat()
        except ValueError:
            continue

    return None


def iso_from_unix(timestamp: int | None) -> str | None:
    """Converts a Unix timestamp to ISO-8601 UTC; 0 or None means never."""
    if not timestamp:
        return None
    return datetime.fromtimestamp(int(timestamp), tz=timezone.utc).isoformat(timespec="seconds")


def parse_iso_date(value: str | None) -> date | None:
    """Reads the date part of an ISO date or timestamp string."""
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def days_since(value: str | None, today: date | None = None) -> int | None:
    """Days elapsed from an ISO date to today (negative for future dates).

    Args:
        value: ISO date or timestamp string.
        today: Reference date, defaults to the current UTC date.

    Returns:
        Whole days elapsed, or None if the value cannot be parsed.
    """
    parsed = parse_iso_date(value)
    if parsed is None:
        return None
    today = today or datetime.now(timezone.utc).date()
    return (today - parsed).days
