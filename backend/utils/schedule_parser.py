import re
from typing import Optional, Tuple

from exceptions import BadRequestError

_HHMM_PATTERN = re.compile(r'^([01]?\d|2[0-3]):([0-5]\d)$')


def parse_hhmm(value: str) -> Tuple[int, int]:
    match = _HHMM_PATTERN.match((value or '').strip())
    if not match:
        raise BadRequestError(f'Invalid time "{value}". Expected HH:MM (24-hour).')
    return (int(match.group(1)), int(match.group(2)))


def time_to_minutes(value) -> int:
    """Convert "HH:MM", a time or a datetime into minutes since midnight."""
    if hasattr(value, 'hour') and hasattr(value, 'minute'):
        return value.hour * 60 + value.minute
    hours, minutes = parse_hhmm(value)
    return hours * 60 + minutes


def start_window(start_time: str, end_time: str, grace_minutes: int) -> Tuple[int, int]:
    """Minute range in which a session for this slot may be started."""
    return (time_to_minutes(start_time) - grace_minutes, time_to_minutes(end_time) + grace_minutes)


def is_within_window(moment, start_time: str, end_time: str, grace_minutes: int) -> bool:
    # Inclusive at both edges; no wrap-around past midnight
    window_start, window_end = start_window(start_time, end_time, grace_minutes)
    current = time_to_minutes(moment)
    return window_start <= current <= window_end


def validate_slot(start_time: str, end_time: str) -> Optional[str]:
    """Return an error message for an unusable slot, or None."""
    try:
        if time_to_minutes(start_time) >= time_to_minutes(end_time):
            return 'Start time must be before end time.'
    except BadRequestError as exc:
        return exc.message
    return None
