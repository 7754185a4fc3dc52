"""Date and time utilities."""

from datetime import date, datetime, time, timedelta
from typing import Optional, Union


def parse_target_time(value: Union[str, int, datetime], day: Optional[date] = None) -> datetime:
    """Parse a serving time given as ISO timestamp or 'HH:MM' on a given day.

    An int is minutes after midnight, which is how YAML 1.1 loads an
    unquoted 18:00.
    """
    if isinstance(value, datetime):
        return value

    if isinstance(value, int) and not isinstance(value, bool):
        hours, minutes = divmod(value, 60)
        if not 0 <= hours < 24:
            raise ValueError(f"Unrecognized target time: {value!r}")
        return datetime.combine(day or date.today(), time(hours, minutes))

    text = str(value).strip()
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass

    try:
        clock = time.fromisoformat(text)
    except ValueError:
        raise ValueError(f"Unrecognized target time: {value!r}")

    return datetime.combine(day or date.today(), clock)


def slot_end_time(target_time: datetime, slot: int, slot_minutes: int) -> datetime:
    """End time of a slot counted backwards from the target."""
    return target_time - timedelta(minutes=slot * slot_minutes)


def minutes_between(earlier: datetime, later: datetime) -> float:
    """Minutes from earlier to later."""
    return (later - earlier).total_seconds() / 60
