from extensions import db
from sqlalchemy import Column, Integer, DateTime, ForeignKey, Boolean, false
from utils.timezone import local_now_naive, to_iso


class ClassSession(db.Model):
    """A live run of one subject instance, opened by a teacher and closed once."""
    __tablename__ = 'class_sessions'

    id = Column(Integer, primary_key=True)
    subject_instance_id = Column(Integer, ForeignKey('subject_instances.id'), nullable=False, index=True)
    teacher_id = Column(Integer, ForeignKey('faculty.id'), nullable=False, index=True)
    started_at = Column(DateTime, nullable=False, default=local_now_naive)
    closed_at = Column(DateTime, nullable=True)
    is_closed = Column(Boolean, nullable=False, default=False, server_default=false())

    subject_instance = db.relationship('SubjectInstance')
    teacher = db.relationship('Faculty')
    records = db.relationship(
        'AttendanceRecord',
        back_populates='session',
        order_by='AttendanceRecord.timestamp',
        lazy='dynamic',
    )

    def __repr__(self):
        state = 'closed' if self.is_closed else 'open'
        return f'<ClassSession {self.id}: instance={self.subject_instance_id} {state}>'

    def to_dict(self):
        instance = self.subject_instance
        return {
            'id': self.id,
            'subjectInstanceId': self.subject_instance_id,
            'teacherId': self.teacher_id,
            'startedAt': to_iso(self.started_at),
            'closedAt': to_iso(self.closed_at),
            'isClosed': bool(self.is_closed),
            'subjectInstance': instance.to_dict() if instance else None,
            'teacher': self.teacher.to_summary() if self.teacher else None,
        }


# At most one open session per subject instance, enforced by the database
db.Index(
    'uq_class_sessions_open_per_instance',
    ClassSession.subject_instance_id,
    unique=True,
    postgresql_where=ClassSession.is_closed == false(),
    sqlite_where=ClassSession.is_closed == false(),
)
