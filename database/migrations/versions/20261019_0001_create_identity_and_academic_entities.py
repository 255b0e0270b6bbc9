"""create identity and academic entities

Revision ID: 20261019_0001
Revises: None
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


user_role_enum = sa.Enum("admin", "faculty", "student", name="user_role")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("role", user_role_enum, nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "departments",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("code", sa.String(length=20), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_departments_code", "departments", ["code"], unique=True)

    op.create_table(
        "sections",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("department_id", sa.String(length=36), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=50), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_sections_department_id", "sections", ["department_id"])

    op.create_table(
        "subjects",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("department_id", sa.String(length=36), nullable=False),
        sa.Column("semester", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("code", sa.String(length=50), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_subjects_department_id", "subjects", ["department_id"])
    op.create_index("ix_subjects_code", "subjects", ["code"])

    op.create_table(
        "students",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("roll_no", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("section_id", sa.String(length=36), nullable=True),
        sa.Column("admission_year", sa.Integer(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_students_user_id", "students", ["user_id"], unique=True)
    op.create_index("ix_students_roll_no", "students", ["roll_no"], unique=True)
    op.create_index("ix_students_section_id", "students", ["section_id"])

    op.create_table(
        "faculty",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("employee_id", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("department_id", sa.String(length=36), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_faculty_user_id", "faculty", ["user_id"], unique=True)
    op.create_index("ix_faculty_employee_id", "faculty", ["employee_id"], unique=True)
    op.create_index("ix_faculty_department_id", "faculty", ["department_id"])


def downgrade() -> None:
    op.drop_index("ix_faculty_department_id", table_name="faculty")
    op.drop_index("ix_faculty_employee_id", table_name="faculty")
    op.drop_index("ix_faculty_user_id", table_name="faculty")
    op.drop_table("faculty")
    op.drop_index("ix_students_section_id", table_name="students")
    op.drop_index("ix_students_roll_no", table_name="students")
    op.drop_index("ix_students_user_id", table_name="students")
    op.drop_table("students")
    op.drop_index("ix_subjects_code", table_name="subjects")
    op.drop_index("ix_subjects_department_id", table_name="subjects")
    op.drop_table("subjects")
    op.drop_index("ix_sections_department_id", table_name="sections")
    op.drop_table("sections")
    op.drop_index("ix_departments_code", table_name="departments")
    op.drop_table("departments")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
    user_role_enum.drop(op.get_bind(), checkfirst=True)
