"""
Worked-hours arithmetic for check-in / check-out wall-clock times (pure functions).

Rules:
- Times are HH:MM (or datetime.time); only the time of day matters, the calendar date is a fixed placeholder.
- Check-out earlier than check-in is an overnight shift: check-out rolls over to the next day.
  e.g. 22:00 -> 06:00 = 8.00 hours.
- Equal times give 0.00. Results are never negative.
- Hours are rounded half-up to 2 decimal places.
"""
from datetime import date, datetime, time, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Tuple, Union

TimeLike = Union[str, time]

_PLACEHOLDER_DATE = date(2000, 1, 1)
_TWO_PLACES = Decimal("0.01")


def parse_hhmm(value: TimeLike) -> time:
    """Parse 'HH:MM' (seconds tolerated) into a time; time objects pass through."""
    if isinstance(value, time):
        return value
    text = str(value or "").strip()
    parts = text.split(":")
    if len(parts) not in (2, 3):
        raise ValueError(f"time must be HH:MM, got {value!r}")
    try:
        hour, minute = int(parts[0]), int(parts[1])
        second = int(parts[2]) if len(parts) == 3 else 0
    except ValueError:
        raise ValueError(f"time must be HH:MM, got {value!r}")
    if not (0 <= hour <= 23 and 0 <= minute <= 59 and 0 <= second <= 59):
        raise ValueError(f"time out of range: {value!r}")
    return time(hour, minute, second)


def format_hhmm(value: Optional[Union[time, datetime]]) -> str:
    """time/datetime -> 'HH:MM'; None -> ''."""
    if value is None:
        return ""
    return value.strftime("%H:%M")


def shift_span(on_date: date, start: TimeLike, end: TimeLike) -> Tuple[datetime, datetime]:
    """Anchor a start/end pair on on_date; end rolls over to the next day when it is earlier than start."""
    st = datetime.combine(on_date, parse_hhmm(start))
    et = datetime.combine(on_date, parse_hhmm(end))
    if et < st:
        et += timedelta(days=1)
    return st, et


def hours_between(start: TimeLike, end: TimeLike) -> Decimal:
    """Hours from start to end, rounded half-up to 2 places (overnight rollover, never negative)."""
    st, et = shift_span(_PLACEHOLDER_DATE, start, end)
    seconds = Decimal(int((et - st).total_seconds()))
    return (seconds / Decimal(3600)).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)


def hours_worked(check_in: Optional[TimeLike], check_out: Optional[TimeLike]) -> Optional[Decimal]:
    """Worked hours for an attendance entry; None unless both check-in and check-out are present."""
    if not check_in or not check_out:
        return None
    return hours_between(check_in, check_out)
