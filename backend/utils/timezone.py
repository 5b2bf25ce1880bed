from datetime import datetime

DAY_NAMES = ('MONDAY', 'TUESDAY', 'WEDNESDAY', 'THURSDAY', 'FRIDAY', 'SATURDAY', 'SUNDAY')


def local_now_naive():
    """Server-local wall clock time without tzinfo.

    Schedules are stored as local "HH:MM" strings, so every comparison
    against them uses the server's local clock, not UTC.
    """
    return datetime.now()


def day_name(moment):
    return DAY_NAMES[moment.weekday()]


def to_iso(value):
    return value.isoformat() if value else None
