import logging
from datetime import date, datetime, time, timedelta
from typing import Dict, List, Optional

from sqlalchemy.exc import IntegrityError

from exceptions import BadRequestError, ConflictError, InvalidStateError, NotFoundError
from extensions import db
from models import AttendanceRecord, AttendanceStatus, ClassSession, Device, Student, SubjectInstance
from utils.timezone import local_now_naive, to_iso

logger = logging.getLogger(__name__)

DUPLICATE_SCAN_MESSAGE = 'Student already marked present for this session.'


class AttendanceLedger:
    """Append-only attendance facts plus the reads derived from them."""

    @staticmethod
    def record_scan(rfid_uid: str, device_mac: str, session_id: int, now: Optional[datetime] = None) -> AttendanceRecord:
        """Turn one RFID scan into a PRESENT record.

        Raises BadRequestError for missing input, NotFoundError for an unknown
        device or card, InvalidStateError when the session is closed or
        missing, and ConflictError when the student is already present.
        Retrying the same scan never creates a second record.
        """
        if not rfid_uid or not device_mac or not session_id:
            raise BadRequestError('RFID UID, device MAC address, and session ID are required.')

        device = Device.query.filter_by(mac_addr=device_mac).first()
        if device is None:
            raise NotFoundError('Device not found in database.')

        # Shared row lock: a close racing with this scan waits for our commit
        session = (
            db.session.query(ClassSession)
            .filter(ClassSession.id == session_id)
            .with_for_update(read=True)
            .first()
        )
        if session is None or session.is_closed:
            logger.warning('Scan from %s rejected: session %s is not active', device_mac, session_id)
            raise InvalidStateError('Session is not active or does not exist.')

        student = Student.query.filter_by(rfid_uid=rfid_uid).first()
        if student is None:
            logger.warning('Scan from %s rejected: unknown card %s', device_mac, rfid_uid)
            raise NotFoundError('Student with this RFID UID not found.')

        existing = AttendanceRecord.query.filter_by(session_id=session.id, student_id=student.id).first()
        if existing is not None:
            raise ConflictError(DUPLICATE_SCAN_MESSAGE)

        record = AttendanceRecord(
            session_id=session.id,
            student_id=student.id,
            timestamp=now or local_now_naive(),
            status=AttendanceStatus.PRESENT,
            device_mac=device_mac,
            device_id=device.id,
        )
        db.session.add(record)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise ConflictError(DUPLICATE_SCAN_MESSAGE)
        logger.info('Student %s marked present in session %s via %s', student.id, session.id, device_mac)
        return record

    @staticmethod
    def get_snapshot(session_id: int) -> Dict:
        session = db.session.get(ClassSession, session_id)
        if session is None:
            raise NotFoundError('Session not found.')

        roster = (
            Student.query
            .filter_by(section_id=session.subject_instance.section_id)
            .order_by(Student.name, Student.id)
            .all()
        )
        roster_ids = {student.id for student in roster}
        records = (
            AttendanceRecord.query
            .filter_by(session_id=session.id, status=AttendanceStatus.PRESENT)
            .order_by(AttendanceRecord.timestamp, AttendanceRecord.id)
            .all()
        )

        present = []
        present_ids = set()
        for record in records:
            # Only roster members are partitioned
            if record.student_id not in roster_ids or record.student_id in present_ids:
                continue
            present_ids.add(record.student_id)
            present.append(dict(record.student.to_summary(), timestamp=to_iso(record.timestamp), status='PRESENT'))

        absent = [
            dict(student.to_summary(), status='ABSENT')
            for student in roster
            if student.id not in present_ids
        ]

        return {
            'present': present,
            'absent': absent,
            'totalInSection': len(roster),
            'presentCount': len(present),
            'absentCount': len(absent),
        }

    @staticmethod
    def session_report(session_id: int) -> Dict:
        session = db.session.get(ClassSession, session_id)
        if session is None:
            raise NotFoundError('Session not found.')
        report = session.to_dict()
        report['records'] = [record.to_dict() for record in session.records]
        return report

    @staticmethod
    def teacher_day_report(faculty_id: Optional[int], subject_id: int, section_id: int, day: date) -> List[Dict]:
        """Sessions of one class started on ``day`` (local time), each with its records."""
        start_of_day = datetime.combine(day, time.min)
        query = (
            ClassSession.query
            .join(SubjectInstance, ClassSession.subject_instance_id == SubjectInstance.id)
            .filter(
                SubjectInstance.subject_id == subject_id,
                SubjectInstance.section_id == section_id,
                ClassSession.started_at >= start_of_day,
                ClassSession.started_at < start_of_day + timedelta(days=1),
            )
        )
        if faculty_id is not None:
            query = query.filter(ClassSession.teacher_id == faculty_id)

        report = []
        for session in query.order_by(ClassSession.started_at, ClassSession.id).all():
            entry = session.to_dict()
            entry['records'] = [record.to_dict() for record in session.records]
            report.append(entry)
        return report

    @staticmethod
    def aggregate_report(section_id: int, start: Optional[date] = None, end: Optional[date] = None,
                         subject_id: Optional[int] = None) -> List[Dict]:
        """Per-student totals over closed sessions of a section in [start, end]."""
        students = Student.query.filter_by(section_id=section_id).order_by(Student.name, Student.id).all()
        if not students:
            return []

        query = (
            db.session.query(ClassSession.id)
            .join(SubjectInstance, ClassSession.subject_instance_id == SubjectInstance.id)
            .filter(SubjectInstance.section_id == section_id, ClassSession.is_closed.is_(True))
        )
        if subject_id is not None:
            query = query.filter(SubjectInstance.subject_id == subject_id)
        if start is not None:
            query = query.filter(ClassSession.started_at >= datetime.combine(start, time.min))
        if end is not None:
            query = query.filter(ClassSession.started_at < datetime.combine(end, time.min) + timedelta(days=1))
        session_ids = [row.id for row in query.all()]
        total_classes = len(session_ids)

        present_counts = {}
        if session_ids:
            rows = (
                db.session.query(AttendanceRecord.student_id, db.func.count(AttendanceRecord.id))
                .filter(
                    AttendanceRecord.session_id.in_(session_ids),
                    AttendanceRecord.status == AttendanceStatus.PRESENT,
                )
                .group_by(AttendanceRecord.student_id)
                .all()
            )
            present_counts = dict(rows)

        report = []
        for student in students:
            present_count = present_counts.get(student.id, 0)
            percentage = round(present_count / total_classes * 100, 2) if total_classes else 0
            report.append({
                'studentId': student.id,
                'name': student.name,
                'enrollmentNo': student.enrollment_no,
                'presentCount': present_count,
                'absentCount': total_classes - present_count,
                'attendancePercentage': percentage,
                'totalClasses': total_classes,
            })
        return report
