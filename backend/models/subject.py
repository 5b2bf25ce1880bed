from extensions import db
from sqlalchemy import Column, Integer, String, DateTime
from utils.timezone import local_now_naive


class Subject(db.Model):
    __tablename__ = 'subjects'

    id = Column(Integer, primary_key=True)
    code = Column(String(20), unique=True, nullable=False)
    name = Column(String(200), nullable=False)
    created_at = Column(DateTime, default=local_now_naive)

    def __repr__(self):
        return f'<Subject {self.code}>'

    def to_dict(self):
        return {'id': self.id, 'code': self.code, 'name': self.name}
