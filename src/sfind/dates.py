"""
Date handling for the sfind search configuration.

This module resolves the user-facing ``--from`` values (``today``, ``yesterday``,
a number of days, or an ISO-8601 calendar date) into timezone-aware instants.
All relative values are anchored at local midnight.
"""

import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Union


EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)

_DAYS_PATTERN = re.compile(r'^[+-]?\d+$')


def local_midnight(day: date) -> datetime:
    """Return the start of ``day`` in the local timezone."""
    return datetime.combine(day, time.min).astimezone()


def _midnight_in_range(compute_day, text: str, what: str) -> datetime:
    """Midnight of ``compute_day()``, reporting calendar overflow as a bad value."""
    try:
        return local_midnight(compute_day())
    except (OverflowError, OSError, ValueError):
        raise ValueError(f"Invalid from value {text!r}: {what} out of range") from None


def parse_from(text: str, today: Optional[date] = None) -> datetime:
    """
    Parse a ``--from`` value into an aware datetime.

    Args:
        text: ``today``, ``yesterday``, a non-negative number of days, or ``YYYY-MM-DD``
        today: Reference day for relative values (defaults to the local date)

    Returns:
        Local midnight of the requested day

    Raises:
        ValueError: If the value cannot be interpreted or lies outside the supported range
    """
    if today is None:
        today = date.today()

    value = text.strip().lower()
    if not value:
        raise ValueError("from value cannot be empty")

    if value == 'today':
        return local_midnight(today)
    if value == 'yesterday':
        return local_midnight(today - timedelta(days=1))

    if _DAYS_PATTERN.match(value):
        days = int(value)
        if days < 0:
            raise ValueError(f"Invalid from value {text!r}: number of days cannot be negative")
        return _midnight_in_range(lambda: today - timedelta(days=days), text, "number of days")

    try:
        day = datetime.strptime(value, '%Y-%m-%d').date()
    except ValueError:
        raise ValueError(
            f"Invalid from value {text!r}: expected 'today', 'yesterday', "
            f"a number of days, or a YYYY-MM-DD date"
        ) from None
    return _midnight_in_range(lambda: day, text, "date")


def coerce_from(value: Union[str, int, date, datetime, None]) -> datetime:
    """Convert any accepted ``from`` representation to an aware datetime."""
    if value is None:
        return EPOCH
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value
        # Naive datetimes are taken as local time
        try:
            return value.astimezone()
        except (OverflowError, OSError):
            raise ValueError(f"Invalid from value {value.isoformat()!r}: date out of range") from None
    if isinstance(value, date):
        return _midnight_in_range(lambda: value, value.isoformat(), "date")
    if isinstance(value, bool):
        raise ValueError(f"Invalid from value: {value!r}")
    if isinstance(value, int):
        return parse_from(str(value))
    if isinstance(value, str):
        try:
            return parse_from(value)
        except ValueError:
            # Full ISO timestamps, as written by SearchConfig.to_dict()
            try:
                moment = datetime.fromisoformat(value.strip())
            except ValueError:
                moment = None
            if moment is None:
                raise
            return coerce_from(moment)
    raise ValueError(f"Invalid from value type: {type(value).__name__}")
