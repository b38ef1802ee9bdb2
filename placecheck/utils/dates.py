"""Date helpers for evidence stamping.

Access dates are ISO calendar dates in the configured timezone. Passing an
explicit ``now`` makes a run deterministic; otherwise the wall clock is used.
Publish dates from providers arrive in many shapes and are parsed with
python-dateutil.
"""

from datetime import date, datetime, timezone
from typing import Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dateutil import parser as date_parser

from placecheck.config.settings import settings

NowLike = Union[str, datetime, date, None]


def _zone(tz: Optional[str]) -> timezone | ZoneInfo:
    try:
        return ZoneInfo(tz or settings.timezone)
    except (ZoneInfoNotFoundError, ValueError):
        return timezone.utc


def resolve_now(now: NowLike = None, tz: Optional[str] = None) -> datetime:
    """Return ``now`` as an aware datetime in ``tz`` (settings timezone by default).

    Strings are parsed with dateutil; naive values are taken to be UTC.
    Unparseable strings fall back to the wall clock.
    """
    zone = _zone(tz)
    if now is None:
        return datetime.now(zone)
    if isinstance(now, str):
        try:
            now = date_parser.isoparse(now)
        except (ValueError, OverflowError):
            try:
                now = date_parser.parse(now)
            except (ValueError, OverflowError):
                return datetime.now(zone)
    if not isinstance(now, datetime):
        now = datetime(now.year, now.month, now.day, tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(zone)


def resolve_access_date(now: NowLike = None, tz: Optional[str] = None) -> str:
    """ISO date (``YYYY-MM-DD``) this run accessed its sources."""
    return resolve_now(now, tz).date().isoformat()


def parse_publish_date(value: Optional[str]) -> Optional[str]:
    """
    Normalize a provider publish date to an ISO timestamp.

    Returns None for empty or unparseable input. Date-only values stay
    date-only (``2024-03-01``); values with a time keep it.
    """
    if not value or not str(value).strip():
        return None
    text = str(value).strip()
    try:
        parsed = date_parser.parse(text)
    except (ValueError, OverflowError):
        return None
    if len(text) <= 10 and parsed.hour == parsed.minute == parsed.second == 0:
        return parsed.date().isoformat()
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.isoformat()
