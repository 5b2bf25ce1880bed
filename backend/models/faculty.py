from extensions import db
from sqlalchemy import Column, Integer, String, DateTime
from utils.timezone import local_now_naive


class Faculty(db.Model):
    __tablename__ = 'faculty'

    id = Column(Integer, primary_key=True)
    emp_id = Column(String(20), unique=True, nullable=False)
    name = Column(String(120), nullable=False)
    email = Column(String(120), unique=True, nullable=True)
    rfid_uid = Column(String(64), unique=True, nullable=True)  # teacher card used to unlock a reader
    created_at = Column(DateTime, default=local_now_naive)

    subject_instances = db.relationship('SubjectInstance', back_populates='faculty')

    def __repr__(self):
        return f'<Faculty {self.emp_id}: {self.name}>'

    def to_summary(self):
        return {'id': self.id, 'name': self.name, 'empId': self.emp_id}
