"""Initial RFID attendance schema

Revision ID: 20261016_initial_schema
Revises:
Create Date: 2026-10-16 09:00:00.000000
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261016_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


DAY_OF_WEEK = sa.Enum(
    "MONDAY", "TUESDAY", "WEDNESDAY", "THURSDAY", "FRIDAY", "SATURDAY", "SUNDAY",
    name="dayofweek",
)
ATTENDANCE_STATUS = sa.Enum("PRESENT", name="attendancestatus")


def upgrade():
    op.create_table(
        "sections",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )
    op.create_table(
        "subjects",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("code", sa.String(length=20), nullable=False, unique=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )
    op.create_table(
        "faculty",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("emp_id", sa.String(length=20), nullable=False, unique=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("email", sa.String(length=120), nullable=True, unique=True),
        sa.Column("rfid_uid", sa.String(length=64), nullable=True, unique=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )
    op.create_table(
        "students",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("enrollment_no", sa.String(length=30), nullable=False, unique=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("rfid_uid", sa.String(length=64), nullable=True, unique=True),
        sa.Column("section_id", sa.Integer(), sa.ForeignKey("sections.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_students_name", "students", ["name"])
    op.create_index("ix_students_section_id", "students", ["section_id"])

    op.create_table(
        "devices",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("mac_addr", sa.String(length=32), nullable=False, unique=True),
        sa.Column("secret_hash", sa.String(length=256), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=True),
        sa.Column("location", sa.String(length=100), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )
    op.create_table(
        "subject_instances",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("subject_id", sa.Integer(), sa.ForeignKey("subjects.id"), nullable=False),
        sa.Column("section_id", sa.Integer(), sa.ForeignKey("sections.id"), nullable=False),
        sa.Column("faculty_id", sa.Integer(), sa.ForeignKey("faculty.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.UniqueConstraint("subject_id", "section_id", "faculty_id", name="uq_subject_instances_assignment"),
    )
    op.create_index("ix_subject_instances_faculty_id", "subject_instances", ["faculty_id"])

    op.create_table(
        "scheduled_classes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("day_of_week", DAY_OF_WEEK, nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
        sa.Column("subject_instance_id", sa.Integer(), sa.ForeignKey("subject_instances.id"), nullable=False),
        sa.Column("subject_id", sa.Integer(), sa.ForeignKey("subjects.id"), nullable=False),
        sa.Column("section_id", sa.Integer(), sa.ForeignKey("sections.id"), nullable=False),
        sa.Column("faculty_id", sa.Integer(), sa.ForeignKey("faculty.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.UniqueConstraint(
            "day_of_week", "subject_id", "section_id", "start_time", "end_time",
            name="uq_scheduled_classes_slot",
        ),
    )
    op.create_index("ix_scheduled_classes_faculty_id", "scheduled_classes", ["faculty_id"])

    op.create_table(
        "class_sessions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("subject_instance_id", sa.Integer(), sa.ForeignKey("subject_instances.id"), nullable=False),
        sa.Column("teacher_id", sa.Integer(), sa.ForeignKey("faculty.id"), nullable=False),
        sa.Column("started_at", sa.DateTime(), nullable=False),
        sa.Column("closed_at", sa.DateTime(), nullable=True),
        sa.Column("is_closed", sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_index("ix_class_sessions_subject_instance_id", "class_sessions", ["subject_instance_id"])
    op.create_index("ix_class_sessions_teacher_id", "class_sessions", ["teacher_id"])
    op.create_index(
        "uq_class_sessions_open_per_instance",
        "class_sessions",
        ["subject_instance_id"],
        unique=True,
        postgresql_where=sa.text("is_closed = false"),
        sqlite_where=sa.text("is_closed = 0"),
    )

    op.create_table(
        "attendance_records",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("session_id", sa.Integer(), sa.ForeignKey("class_sessions.id"), nullable=False),
        sa.Column("student_id", sa.Integer(), sa.ForeignKey("students.id"), nullable=False),
        sa.Column("timestamp", sa.DateTime(), nullable=False),
        sa.Column("status", ATTENDANCE_STATUS, nullable=False),
        sa.Column("device_mac", sa.String(length=32), nullable=True),
        sa.Column("device_id", sa.Integer(), sa.ForeignKey("devices.id"), nullable=True),
        sa.UniqueConstraint("session_id", "student_id", name="uq_attendance_records_session_student"),
    )
    op.create_index("ix_attendance_records_session_id", "attendance_records", ["session_id"])


def downgrade():
    op.drop_index("ix_attendance_records_session_id", table_name="attendance_records")
    op.drop_table("attendance_records")
    op.drop_index("uq_class_sessions_open_per_instance", table_name="class_sessions")
    op.drop_index("ix_class_sessions_teacher_id", table_name="class_sessions")
    op.drop_index("ix_class_sessions_subject_instance_id", table_name="class_sessions")
    op.drop_table("class_sessions")
    op.drop_index("ix_scheduled_classes_faculty_id", table_name="scheduled_classes")
    op.drop_table("scheduled_classes")
    op.drop_index("ix_subject_instances_faculty_id", table_name="subject_instances")
    op.drop_table("subject_instances")
    op.drop_table("devices")
    op.drop_index("ix_students_section_id", table_name="students")
    op.drop_index("ix_students_name", table_name="students")
    op.drop_table("students")
    op.drop_table("faculty")
    op.drop_table("subjects")
    op.drop_table("sections")

    bind = op.get_bind()
    ATTENDANCE_STATUS.drop(bind, checkfirst=True)
    DAY_OF_WEEK.drop(bind, checkfirst=True)
