import enum
from extensions import db
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint, event
from exceptions import BadRequestError
from utils.schedule_parser import validate_slot
from utils.timezone import local_now_naive


class DayOfWeek(enum.Enum):
    MONDAY = 'MONDAY'
    TUESDAY = 'TUESDAY'
    WEDNESDAY = 'WEDNESDAY'
    THURSDAY = 'THURSDAY'
    FRIDAY = 'FRIDAY'
    SATURDAY = 'SATURDAY'
    SUNDAY = 'SUNDAY'


class ScheduledClass(db.Model):
    __tablename__ = 'scheduled_classes'
    __table_args__ = (
        UniqueConstraint('day_of_week', 'subject_id', 'section_id', 'start_time', 'end_time', name='uq_scheduled_classes_slot'),
    )

    id = Column(Integer, primary_key=True)
    day_of_week = Column(
        db.Enum(DayOfWeek, name='dayofweek', values_callable=lambda enum: [day.value for day in enum]),
        nullable=False,
    )
    start_time = Column(String(5), nullable=False)  # "HH:MM", local wall clock
    end_time = Column(String(5), nullable=False)
    subject_instance_id = Column(Integer, ForeignKey('subject_instances.id'), nullable=False)
    # Copied from the subject instance for the slot constraint and per-faculty lookups
    subject_id = Column(Integer, ForeignKey('subjects.id'), nullable=False)
    section_id = Column(Integer, ForeignKey('sections.id'), nullable=False)
    faculty_id = Column(Integer, ForeignKey('faculty.id'), nullable=False, index=True)
    created_at = Column(DateTime, default=local_now_naive)

    subject_instance = db.relationship('SubjectInstance')

    def __repr__(self):
        return f'<ScheduledClass {self.id}: {self.day_of_week.value if self.day_of_week else "?"} {self.start_time}-{self.end_time}>'

    def to_dict(self):
        return {
            'id': self.id,
            'dayOfWeek': self.day_of_week.value if self.day_of_week else None,
            'startTime': self.start_time,
            'endTime': self.end_time,
            'subjectInstanceId': self.subject_instance_id,
            'subjectId': self.subject_id,
            'sectionId': self.section_id,
            'facultyId': self.faculty_id,
        }


@event.listens_for(ScheduledClass, 'before_insert')
@event.listens_for(ScheduledClass, 'before_update')
def sync_scheduled_class_fields(mapper, connection, target):
    error = validate_slot(target.start_time, target.end_time)
    if error:
        raise BadRequestError(error)
    # No lazy loads mid-flush
    instance = target.__dict__.get('subject_instance')
    if instance is not None:
        target.subject_id = instance.subject_id
        target.section_id = instance.section_id
        if target.faculty_id is None:
            target.faculty_id = instance.faculty_id
