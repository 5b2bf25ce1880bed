import logging
from datetime import datetime
from typing import Dict, List, Optional

from flask import current_app

from exceptions import ForbiddenError, InvalidStateError, NotFoundError
from extensions import db
from models import ClassSession, DayOfWeek, Faculty, ScheduledClass, Subject, SubjectInstance
from utils.broadcaster import broadcaster
from utils.schedule_parser import is_within_window, time_to_minutes
from utils.session_manager import SessionManager
from utils.timezone import day_name, local_now_naive

logger = logging.getLogger(__name__)


class SessionScheduler:
    """Infers which scheduled class a teacher is starting and opens its session.

    Day and minute-of-day come from the server's local clock. A slot admits
    a start from GRACE minutes before its start time until GRACE minutes
    after its end time, both edges included.
    """
    GRACE_PERIOD_MINUTES = 15

    @staticmethod
    def grace_minutes() -> int:
        return int(current_app.config.get('SESSION_START_GRACE_MINUTES', SessionScheduler.GRACE_PERIOD_MINUTES))

    @staticmethod
    def is_slot_active(slot: ScheduledClass, now: datetime, grace: Optional[int] = None) -> bool:
        if grace is None:
            grace = SessionScheduler.grace_minutes()
        if slot.day_of_week is None or slot.day_of_week.value != day_name(now):
            return False
        return is_within_window(now, slot.start_time, slot.end_time, grace)

    @staticmethod
    def todays_slots(faculty_id: int, now: datetime) -> List[ScheduledClass]:
        slots = ScheduledClass.query.filter_by(faculty_id=faculty_id, day_of_week=DayOfWeek(day_name(now))).all()
        # "HH:MM" strings are not guaranteed zero padded on legacy rows
        return sorted(slots, key=lambda slot: (time_to_minutes(slot.start_time), slot.id))

    @staticmethod
    def current_slot(faculty_id: int, now: datetime) -> Optional[ScheduledClass]:
        grace = SessionScheduler.grace_minutes()
        for slot in SessionScheduler.todays_slots(faculty_id, now):
            if is_within_window(now, slot.start_time, slot.end_time, grace):
                return slot
        return None

    @staticmethod
    def resolve_and_start(faculty_id: int, scheduled_class_id: Optional[int] = None,
                          now: Optional[datetime] = None) -> ClassSession:
        now = now or local_now_naive()
        if db.session.get(Faculty, faculty_id) is None:
            raise NotFoundError('Faculty not found.')

        if scheduled_class_id is not None:
            slot = db.session.get(ScheduledClass, scheduled_class_id)
            if slot is None:
                raise NotFoundError('Scheduled class not found.')
            if slot.faculty_id != faculty_id:
                raise ForbiddenError('Forbidden: This scheduled class is not assigned to you.')
            if not SessionScheduler.is_slot_active(slot, now):
                raise InvalidStateError(
                    f'Cannot start session: This class is not scheduled for now. It is scheduled for '
                    f'{slot.day_of_week.value} from {slot.start_time} to {slot.end_time}.'
                )
        else:
            slot = SessionScheduler.current_slot(faculty_id, now)
            if slot is None:
                raise InvalidStateError(
                    f'No class scheduled for you at this time ({now.strftime("%H:%M")} on {day_name(now)}).'
                )

        instance = SubjectInstance.query.filter_by(
            subject_id=slot.subject_id,
            section_id=slot.section_id,
            faculty_id=slot.faculty_id,
        ).first()
        if instance is None:
            raise NotFoundError(
                'Corresponding SubjectInstance not found for the scheduled class. Please contact administration.'
            )

        session = SessionManager.open(instance.id, faculty_id, now=now)
        logger.info('Faculty %s started scheduled class %s as session %s', faculty_id, slot.id, session.id)
        broadcaster.publish_session_status(session.to_dict())
        return session

    @staticmethod
    def teacher_subject_instances(faculty_id: int, now: Optional[datetime] = None) -> List[Dict]:
        """Dashboard view: each of the faculty's classes with today's slots and its open session."""
        now = now or local_now_naive()
        grace = SessionScheduler.grace_minutes()
        instances = (
            SubjectInstance.query
            .join(Subject, SubjectInstance.subject_id == Subject.id)
            .filter(SubjectInstance.faculty_id == faculty_id)
            .order_by(Subject.name, SubjectInstance.id)
            .all()
        )
        slots_by_instance = {}
        for slot in SessionScheduler.todays_slots(faculty_id, now):
            slots_by_instance.setdefault(slot.subject_instance_id, []).append(slot)

        result = []
        for instance in instances:
            open_session = ClassSession.query.filter_by(subject_instance_id=instance.id, is_closed=False).first()
            entry = instance.to_dict()
            entry['todaysSchedule'] = [
                dict(slot.to_dict(), isActiveNow=is_within_window(now, slot.start_time, slot.end_time, grace))
                for slot in slots_by_instance.get(instance.id, [])
            ]
            entry['activeSessionId'] = open_session.id if open_session else None
            result.append(entry)
        return result
