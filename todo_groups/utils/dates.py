"""
Calendar-day helpers.

A "day key" is the viewer's local calendar day formatted as YYYY-MM-DD.
Day keys compare correctly as plain strings, which the daily generation
watermark relies on.

Offsets follow the browser convention (``Date.getTimezoneOffset``): the
number of minutes to add to local time to get UTC, so UTC+7 is ``-420``.
"""
from datetime import date, datetime, timedelta, timezone
from typing import Optional, Union

from .errors import ValidationError

DayLike = Union[date, datetime]

DAY_KEY_FORMAT = '%Y-%m-%d'


def local_date(instant: DayLike, tz_offset_minutes: Optional[int] = None) -> date:
    """Return the local calendar day an instant falls on.

    Naive datetimes are taken as local wall time already. Aware datetimes are
    shifted by ``tz_offset_minutes`` when given, otherwise converted to the
    host's local timezone.
    """
    if not isinstance(instant, datetime):
        return instant
    if instant.tzinfo is None:
        return instant.date()
    if tz_offset_minutes is not None:
        utc = instant.astimezone(timezone.utc)
        return (utc - timedelta(minutes=tz_offset_minutes)).date()
    return instant.astimezone().date()


def local_day_key(instant: DayLike, tz_offset_minutes: Optional[int] = None) -> str:
    """Format the local calendar day of an instant as YYYY-MM-DD"""
    return local_date(instant, tz_offset_minutes).strftime(DAY_KEY_FORMAT)


def local_weekday(instant: DayLike, tz_offset_minutes: Optional[int] = None) -> int:
    """Weekday of the local calendar day, 0=Sunday .. 6=Saturday"""
    return local_date(instant, tz_offset_minutes).isoweekday() % 7


def parse_day_key(text: str) -> date:
    """Parse a YYYY-MM-DD day key"""
    try:
        return datetime.strptime(text, DAY_KEY_FORMAT).date()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date '{text}' (YYYY-MM-DD required)")


def is_day_key(text: str) -> bool:
    try:
        parse_day_key(text)
    except ValidationError:
        return False
    return True


class Clock:
    """Source of the current time"""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def today(self, tz_offset_minutes: Optional[int] = None) -> date:
        return local_date(self.now(), tz_offset_minutes)
