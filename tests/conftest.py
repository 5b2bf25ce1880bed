from datetime import datetime
from types import SimpleNamespace

import pytest

from app import create_app
from config import TestingConfig
from extensions import db, socketio
from models import (
    Device,
    DayOfWeek,
    Faculty,
    ScheduledClass,
    Section,
    Student,
    Subject,
    SubjectInstance,
)
from utils.auth_tokens import encode_token
from utils.broadcaster import EnrollmentRegistry, broadcaster

# 2026-10-12 is a Monday
MONDAY_MORNING = datetime(2026, 10, 12, 9, 30)
DEVICE_MAC = 'AA:BB:CC:DD:EE:01'
DEVICE_SECRET = 'reader-secret'


@pytest.fixture
def app(monkeypatch):
    # Left unpushed so every request gets a fresh flask.g
    monkeypatch.setattr(broadcaster, 'registry', EnrollmentRegistry())
    app = create_app(TestingConfig)
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def app_ctx(app):
    """For tests that call the services directly."""
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def socket_client(app, client):
    test_client = socketio.test_client(app, flask_test_client=client)
    yield test_client
    if test_client.is_connected():
        test_client.disconnect()


@pytest.fixture
def directory(app):
    """Section S with students Alice, Bob and Carol, two teachers and one reader.

    Teacher 1 teaches CS301 to S on Mondays 09:00-10:00.
    """
    with app.app_context():
        section = Section(name='S')
        other_section = Section(name='T')
        subject = Subject(code='CS301', name='Operating Systems')
        teacher = Faculty(emp_id='EMP001', name='Anita Rao', rfid_uid='F0F0F001')
        other_teacher = Faculty(emp_id='EMP002', name='Vikram Nair', rfid_uid='F0F0F002')
        db.session.add_all([section, other_section, subject, teacher, other_teacher])
        db.session.flush()

        # Inserted out of name order so roster ordering is exercised
        carol = Student(enrollment_no='E003', name='Carol', rfid_uid='CARD-C', section_id=section.id)
        alice = Student(enrollment_no='E001', name='Alice', rfid_uid='CARD-A', section_id=section.id)
        bob = Student(enrollment_no='E002', name='Bob', rfid_uid='CARD-B', section_id=section.id)
        outsider = Student(enrollment_no='E900', name='Zed', rfid_uid='CARD-Z', section_id=other_section.id)
        db.session.add_all([carol, alice, bob, outsider])

        device = Device(mac_addr=DEVICE_MAC, name='Reader 1', location='Room 101')
        device.set_secret(DEVICE_SECRET)
        db.session.add(device)
        db.session.flush()

        instance = SubjectInstance(subject_id=subject.id, section_id=section.id, faculty_id=teacher.id)
        db.session.add(instance)
        db.session.flush()

        slot = ScheduledClass(
            day_of_week=DayOfWeek.MONDAY,
            start_time='09:00',
            end_time='10:00',
            subject_instance_id=instance.id,
            subject_id=subject.id,
            section_id=section.id,
            faculty_id=teacher.id,
        )
        db.session.add(slot)
        db.session.flush()

        ids = SimpleNamespace(
            section_id=section.id,
            other_section_id=other_section.id,
            subject_id=subject.id,
            teacher_id=teacher.id,
            other_teacher_id=other_teacher.id,
            alice_id=alice.id,
            bob_id=bob.id,
            carol_id=carol.id,
            outsider_id=outsider.id,
            device_id=device.id,
            instance_id=instance.id,
            slot_id=slot.id,
        )
        db.session.commit()
    return ids


@pytest.fixture
def auth_headers(app):
    def make(role, faculty_id=None, user_id=1, expires_in=None):
        with app.app_context():
            token = encode_token(user_id, role, faculty_id, expires_in=expires_in)
        return {'Authorization': f'Bearer {token}'}
    return make


@pytest.fixture
def device_headers():
    return {'x-device-mac': DEVICE_MAC, 'x-device-secret': DEVICE_SECRET}


@pytest.fixture
def at_monday_morning(monkeypatch):
    """Pin the scheduler's clock for requests that start sessions over HTTP."""
    monkeypatch.setattr('utils.session_scheduler.local_now_naive', lambda: MONDAY_MORNING)
    return MONDAY_MORNING
