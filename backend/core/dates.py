"""Calendar-day helpers.

Everything in the brewery plan is day-granular: cook dates, packaging dates,
transfer dates. Values are normalised to plain ``date`` objects so comparisons
never depend on the server's timezone.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Union

DayLike = Union[date, datetime, str]


def parse_day(value: DayLike) -> date:
    """
    Normalise a day to a ``date``.

    - ``YYYY-MM-DD`` strings are parsed as calendar days.
    - Longer ISO strings (timestamps) and ``datetime`` values are reduced to
      their UTC day; naive datetimes are taken as already being UTC.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value

    text = (value or "").strip()
    if not text:
        raise ValueError("date is required")
    if len(text) > 10:
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return parse_day(datetime.fromisoformat(text))
    try:
        return datetime.strptime(text, "%Y-%m-%d").date()
    except ValueError:
        raise ValueError(f"invalid date {value!r}, expected YYYY-MM-DD") from None


def add_days(day: date, days: int) -> date:
    return day + timedelta(days=int(days))


def format_day(day: date) -> str:
    return day.isoformat()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(moment: datetime) -> datetime:
    """Aware UTC datetime; naive values are taken as UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)
