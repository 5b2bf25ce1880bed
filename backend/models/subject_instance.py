from extensions import db
from sqlalchemy import Column, Integer, DateTime, ForeignKey, UniqueConstraint
from utils.timezone import local_now_naive


class SubjectInstance(db.Model):
    """One subject taught to one section by one faculty member."""
    __tablename__ = 'subject_instances'
    __table_args__ = (
        UniqueConstraint('subject_id', 'section_id', 'faculty_id', name='uq_subject_instances_assignment'),
    )

    id = Column(Integer, primary_key=True)
    subject_id = Column(Integer, ForeignKey('subjects.id'), nullable=False)
    section_id = Column(Integer, ForeignKey('sections.id'), nullable=False)
    faculty_id = Column(Integer, ForeignKey('faculty.id'), nullable=False, index=True)
    created_at = Column(DateTime, default=local_now_naive)

    subject = db.relationship('Subject', lazy='joined')
    section = db.relationship('Section', lazy='joined')
    faculty = db.relationship('Faculty', back_populates='subject_instances', lazy='joined')

    def __repr__(self):
        return f'<SubjectInstance {self.id}: subject={self.subject_id} section={self.section_id} faculty={self.faculty_id}>'

    def to_dict(self):
        return {
            'id': self.id,
            'subjectId': self.subject_id,
            'sectionId': self.section_id,
            'facultyId': self.faculty_id,
            'subject': self.subject.to_dict() if self.subject else None,
            'section': self.section.to_dict() if self.section else None,
            'faculty': self.faculty.to_summary() if self.faculty else None,
        }
