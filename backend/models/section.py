from extensions import db
from sqlalchemy import Column, Integer, String, DateTime
from utils.timezone import local_now_naive


class Section(db.Model):
    __tablename__ = 'sections'

    id = Column(Integer, primary_key=True)
    name = Column(String(50), nullable=False)
    created_at = Column(DateTime, default=local_now_naive)

    students = db.relationship('Student', back_populates='section', order_by='Student.name')

    def __repr__(self):
        return f'<Section {self.id}: {self.name}>'

    def to_dict(self):
        return {'id': self.id, 'name': self.name}
