from extensions import db
from .section import Section
from .subject import Subject
from .faculty import Faculty
from .student import Student
from .device import Device
from .subject_instance import SubjectInstance
from .scheduled_class import ScheduledClass, DayOfWeek
from .class_session import ClassSession
from .attendance_status import AttendanceStatus
from .attendance_record import AttendanceRecord

__all__ = [
    'db',
    'Section',
    'Subject',
    'Faculty',
    'Student',
    'Device',
    'SubjectInstance',
    'ScheduledClass',
    'DayOfWeek',
    'ClassSession',
    'AttendanceStatus',
    'AttendanceRecord',
]
