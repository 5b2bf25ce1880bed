from extensions import db
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from utils.timezone import local_now_naive


class Student(db.Model):
    __tablename__ = 'students'

    id = Column(Integer, primary_key=True)
    enrollment_no = Column(String(30), unique=True, nullable=False)
    name = Column(String(120), nullable=False, index=True)
    rfid_uid = Column(String(64), unique=True, nullable=True)
    section_id = Column(Integer, ForeignKey('sections.id'), nullable=False, index=True)
    created_at = Column(DateTime, default=local_now_naive)

    section = db.relationship('Section', back_populates='students')

    def __repr__(self):
        return f'<Student {self.enrollment_no}: {self.name}>'

    def to_summary(self):
        return {'id': self.id, 'name': self.name, 'enrollmentNo': self.enrollment_no}
