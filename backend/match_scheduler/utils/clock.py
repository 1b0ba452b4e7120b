"""
Minute-of-day helpers.

The scheduler works on integer minutes since midnight; storage and the API use
datetime.time / "HH:MM" strings.
"""
from datetime import time
from typing import Union


def time_to_minutes(value: Union[str, time]) -> int:
    """Convert a time or an "HH:MM[:SS]" string to minutes since midnight."""
    if isinstance(value, time):
        return value.hour * 60 + value.minute
    hhmm = str(value).strip()[:5]
    try:
        hours, minutes = hhmm.split(":")
        result = int(hours) * 60 + int(minutes)
    except ValueError:
        raise ValueError(f"Invalid time '{value}', expected HH:MM")
    if not 0 <= int(hours) <= 23 or not 0 <= int(minutes) <= 59:
        raise ValueError(f"Invalid time '{value}', expected HH:MM")
    return result


def minutes_to_time(minutes: int) -> time:
    """Convert minutes since midnight to a datetime.time (wraps past midnight)."""
    minutes = minutes % (24 * 60)
    return time(hour=minutes // 60, minute=minutes % 60)


def format_hhmm(minutes: int) -> str:
    return minutes_to_time(minutes).strftime("%H:%M")
