import argparse
import os
import random
import sys
from datetime import date, datetime, timedelta
from typing import List, Optional

BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if BASE_DIR not in sys.path:
    sys.path.insert(0, BASE_DIR)
from app import create_app
from extensions import db
from models import (
    AttendanceRecord,
    AttendanceStatus,
    ClassSession,
    DayOfWeek,
    Device,
    Faculty,
    ScheduledClass,
    Section,
    Student,
    Subject,
    SubjectInstance,
)
from utils.timezone import day_name, local_now_naive

PRESENT_PROBABILITY = 0.8
SAMPLE_STUDENTS = [
    ('CSE2026001', 'Aarav Sharma', 'A1B2C301'),
    ('CSE2026002', 'Diya Patel', 'A1B2C302'),
    ('CSE2026003', 'Kabir Singh', 'A1B2C303'),
    ('CSE2026004', 'Meera Iyer', 'A1B2C304'),
    ('CSE2026005', 'Rohan Das', 'A1B2C305'),
]


def parse_end_date(value: Optional[str]) -> date:
    if not value:
        return date.today()
    return datetime.strptime(value, '%Y-%m-%d').date()


def get_or_create(model, defaults=None, **filters):
    instance = model.query.filter_by(**filters).first()
    if instance:
        return (instance, False)
    instance = model(**filters, **(defaults or {}))
    db.session.add(instance)
    db.session.flush()
    return (instance, True)


def seed_directory(device_mac: str, device_secret: str):
    section, _ = get_or_create(Section, name='CSE-A')
    subject, _ = get_or_create(Subject, code='CS301', defaults={'name': 'Operating Systems'})
    faculty, _ = get_or_create(Faculty, emp_id='EMP001', defaults={'name': 'Dr. Anita Rao', 'email': 'anita.rao@example.edu', 'rfid_uid': 'F0F0F001'})
    students = []
    for enrollment_no, name, rfid_uid in SAMPLE_STUDENTS:
        student, _ = get_or_create(Student, enrollment_no=enrollment_no, defaults={'name': name, 'rfid_uid': rfid_uid, 'section_id': section.id})
        students.append(student)
    device = Device.query.filter_by(mac_addr=device_mac).first()
    if device is None:
        device = Device(mac_addr=device_mac, name='Reader 1', location='Room 101')
        db.session.add(device)
    device.set_secret(device_secret)
    instance, _ = get_or_create(SubjectInstance, subject_id=subject.id, section_id=section.id, faculty_id=faculty.id)
    return (section, faculty, students, instance)


def ensure_slot_for_now(instance: SubjectInstance) -> ScheduledClass:
    """A one hour slot on today's weekday that contains the current time."""
    now = local_now_naive()
    start = now.replace(minute=0)
    end = start + timedelta(hours=1)
    if end.date() != start.date():
        start, end = start - timedelta(hours=1), start
    slot, _ = get_or_create(
        ScheduledClass,
        day_of_week=DayOfWeek(day_name(now)),
        subject_id=instance.subject_id,
        section_id=instance.section_id,
        start_time=start.strftime('%H:%M'),
        end_time=end.strftime('%H:%M'),
        defaults={'subject_instance_id': instance.id, 'faculty_id': instance.faculty_id},
    )
    return slot


def backfill_closed_sessions(instance: SubjectInstance, students: List[Student], days: int, end_date: date) -> int:
    created = 0
    for offset in range(1, days + 1):
        started_at = datetime.combine(end_date - timedelta(days=offset), datetime.min.time()).replace(hour=10)
        exists = ClassSession.query.filter_by(subject_instance_id=instance.id, started_at=started_at).first()
        if exists:
            continue
        session = ClassSession(
            subject_instance_id=instance.id,
            teacher_id=instance.faculty_id,
            started_at=started_at,
            closed_at=started_at + timedelta(hours=1),
            is_closed=True,
        )
        db.session.add(session)
        db.session.flush()
        for index, student in enumerate(students):
            if random.random() > PRESENT_PROBABILITY:
                continue
            db.session.add(AttendanceRecord(
                session_id=session.id,
                student_id=student.id,
                timestamp=started_at + timedelta(minutes=2 + index),
                status=AttendanceStatus.PRESENT,
            ))
        created += 1
    return created


def main():
    parser = argparse.ArgumentParser(description='Seed a section, students, a teacher, a reader and a schedule for local testing.')
    parser.add_argument('--device-mac', default='AA:BB:CC:DD:EE:01', help='MAC address of the sample reader')
    parser.add_argument('--device-secret', default='reader-secret', help='Shared secret of the sample reader')
    parser.add_argument('--days', type=int, default=0, help='Backfill this many past days of closed sessions (default 0)')
    parser.add_argument('--end-date', type=str, default=None, help='Last backfilled day is the day before this YYYY-MM-DD (default today)')
    args = parser.parse_args()
    app = create_app()
    with app.app_context():
        section, faculty, students, instance = seed_directory(args.device_mac, args.device_secret)
        slot = ensure_slot_for_now(instance)
        backfilled = backfill_closed_sessions(instance, students, max(0, args.days), parse_end_date(args.end_date))
        db.session.commit()
        print(f'Section {section.name}: {len(students)} students, faculty id {faculty.id}, '
              f'slot {slot.day_of_week.value} {slot.start_time}-{slot.end_time}, {backfilled} past sessions')


if __name__ == '__main__':
    main()
