import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import false, update
from sqlalchemy.exc import IntegrityError

from decorators import is_ownership_restricted
from exceptions import ConflictError, ForbiddenError, NotFoundError
from extensions import db
from models import ClassSession
from utils.broadcaster import broadcaster
from utils.timezone import local_now_naive

logger = logging.getLogger(__name__)

ACTIVE_SESSION_CONFLICT = 'An active session for this class is already running.'


class SessionManager:
    """OPEN -> CLOSED lifecycle of class sessions. CLOSED is terminal."""

    @staticmethod
    def open(subject_instance_id: int, teacher_id: int, now: Optional[datetime] = None) -> ClassSession:
        existing = ClassSession.query.filter_by(subject_instance_id=subject_instance_id, is_closed=False).first()
        if existing is not None:
            raise ConflictError(ACTIVE_SESSION_CONFLICT)

        session = ClassSession(
            subject_instance_id=subject_instance_id,
            teacher_id=teacher_id,
            started_at=now or local_now_naive(),
            is_closed=False,
        )
        db.session.add(session)
        try:
            db.session.commit()
        except IntegrityError:
            # Lost the race to a concurrent open; the partial unique index caught it
            db.session.rollback()
            raise ConflictError(ACTIVE_SESSION_CONFLICT)
        logger.info('Opened session %s for subject instance %s by faculty %s', session.id, subject_instance_id, teacher_id)
        return session

    @staticmethod
    def close(session_id: int, requester_id, requester_role: str, now: Optional[datetime] = None) -> ClassSession:
        session = db.session.get(ClassSession, session_id)
        if session is None:
            raise NotFoundError('Session not found.')
        if is_ownership_restricted(requester_role) and requester_id != session.teacher_id:
            raise ForbiddenError('Forbidden: You can only close your own sessions.')
        if session.is_closed:
            raise ConflictError('Session is already closed.')

        result = db.session.execute(
            update(ClassSession)
            .where(ClassSession.id == session_id, ClassSession.is_closed == false())
            .values(is_closed=True, closed_at=now or local_now_naive())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            db.session.rollback()
            raise ConflictError('Session is already closed.')
        db.session.commit()
        db.session.refresh(session)
        logger.info('Closed session %s (requested by %s %s)', session_id, requester_role, requester_id)

        broadcaster.publish_session_status(session.to_dict())
        return session

    @staticmethod
    def get_by_id(session_id: int) -> ClassSession:
        session = db.session.get(ClassSession, session_id)
        if session is None:
            raise NotFoundError('Session not found.')
        return session

    @staticmethod
    def list_active() -> List[ClassSession]:
        return (
            ClassSession.query
            .filter(ClassSession.is_closed == false())
            .order_by(ClassSession.started_at.desc(), ClassSession.id.desc())
            .all()
        )

    @staticmethod
    def get_active_for_teacher(teacher_id: int) -> Optional[ClassSession]:
        return (
            ClassSession.query
            .filter(ClassSession.teacher_id == teacher_id, ClassSession.is_closed == false())
            .order_by(ClassSession.started_at.desc(), ClassSession.id.desc())
            .first()
        )
