import enum


class AttendanceStatus(enum.Enum):
    # Absence is derived from the roster, never stored
    PRESENT = 'PRESENT'
