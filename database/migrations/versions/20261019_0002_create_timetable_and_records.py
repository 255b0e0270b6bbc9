"""create timetable, attendance, marks and activity logs

Revision ID: 20261019_0002
Revises: 20261019_0001
Create Date: 2026-10-19 00:10:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261019_0002"
down_revision = "20261019_0001"
branch_labels = None
depends_on = None


weekday_enum = sa.Enum(
    "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", name="weekday"
)


def upgrade() -> None:
    op.create_table(
        "timetable",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("section_id", sa.String(length=36), nullable=False),
        sa.Column("subject_id", sa.String(length=36), nullable=False),
        sa.Column("faculty_id", sa.String(length=36), nullable=False),
        sa.Column("day", weekday_enum, nullable=False),
        sa.Column("period", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    # Non-unique: slot conflicts are rejected by the API, not by the database.
    op.create_index("ix_timetable_section_day_period", "timetable", ["section_id", "day", "period"])
    op.create_index("ix_timetable_subject_id", "timetable", ["subject_id"])
    op.create_index("ix_timetable_faculty_id", "timetable", ["faculty_id"])

    op.create_table(
        "attendance",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("student_id", sa.String(length=36), nullable=False),
        sa.Column("subject_id", sa.String(length=36), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("present", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_attendance_student_id", "attendance", ["student_id"])
    op.create_index("ix_attendance_subject_id", "attendance", ["subject_id"])

    op.create_table(
        "marks",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("student_id", sa.String(length=36), nullable=False),
        sa.Column("subject_id", sa.String(length=36), nullable=False),
        sa.Column("internal1", sa.Integer(), nullable=True),
        sa.Column("internal2", sa.Integer(), nullable=True),
        sa.Column("external", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("student_id", "subject_id", name="uq_marks_student_subject"),
    )
    op.create_index("ix_marks_student_id", "marks", ["student_id"])
    op.create_index("ix_marks_subject_id", "marks", ["subject_id"])

    op.create_table(
        "activity_logs",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("actor_id", sa.String(length=36), nullable=True),
        sa.Column("action", sa.String(length=64), nullable=False),
        sa.Column("entity_type", sa.String(length=32), nullable=True),
        sa.Column("entity_id", sa.String(length=36), nullable=True),
        sa.Column("details", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_activity_logs_actor_id", "activity_logs", ["actor_id"])
    op.create_index("ix_activity_logs_entity", "activity_logs", ["entity_type", "entity_id"])
    op.create_index("ix_activity_logs_created_at", "activity_logs", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_activity_logs_created_at", table_name="activity_logs")
    op.drop_index("ix_activity_logs_entity", table_name="activity_logs")
    op.drop_index("ix_activity_logs_actor_id", table_name="activity_logs")
    op.drop_table("activity_logs")
    op.drop_index("ix_marks_subject_id", table_name="marks")
    op.drop_index("ix_marks_student_id", table_name="marks")
    op.drop_table("marks")
    op.drop_index("ix_attendance_subject_id", table_name="attendance")
    op.drop_index("ix_attendance_student_id", table_name="attendance")
    op.drop_table("attendance")
    op.drop_index("ix_timetable_faculty_id", table_name="timetable")
    op.drop_index("ix_timetable_subject_id", table_name="timetable")
    op.drop_index("ix_timetable_section_day_period", table_name="timetable")
    op.drop_table("timetable")
    weekday_enum.drop(op.get_bind(), checkfirst=True)
