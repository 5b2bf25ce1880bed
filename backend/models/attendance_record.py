from extensions import db
from .attendance_status import AttendanceStatus
from utils.timezone import local_now_naive, to_iso


class AttendanceRecord(db.Model):
    __tablename__ = 'attendance_records'
    __table_args__ = (
        db.UniqueConstraint('session_id', 'student_id', name='uq_attendance_records_session_student'),
    )

    id = db.Column(db.Integer, primary_key=True)
    session_id = db.Column(db.Integer, db.ForeignKey('class_sessions.id'), nullable=False, index=True)
    student_id = db.Column(db.Integer, db.ForeignKey('students.id'), nullable=False)
    timestamp = db.Column(db.DateTime, nullable=False, default=local_now_naive)
    status = db.Column(
        db.Enum(
            AttendanceStatus,
            name='attendancestatus',
            values_callable=lambda enum: [status.value for status in enum],
        ),
        nullable=False,
        default=AttendanceStatus.PRESENT,
    )
    device_mac = db.Column(db.String(32), nullable=True)
    device_id = db.Column(db.Integer, db.ForeignKey('devices.id'), nullable=True)

    # Relationships
    session = db.relationship('ClassSession', back_populates='records')
    student = db.relationship('Student', lazy='joined')
    device = db.relationship('Device')

    def __repr__(self):
        return f'<AttendanceRecord {self.id}: session={self.session_id} student={self.student_id}>'

    def to_dict(self):
        return {
            'id': self.id,
            'sessionId': self.session_id,
            'studentId': self.student_id,
            'timestamp': to_iso(self.timestamp),
            'status': self.status.value if self.status else None,
            'deviceMac': self.device_mac,
            'deviceId': self.device_id,
            'student': self.student.to_summary() if self.student else None,
        }
