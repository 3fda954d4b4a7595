"""initial schema: lessons, students, teachers, attendance, assignments, logs

Revision ID: 0001
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "teachers",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=10), nullable=False),
    )
    op.create_table(
        "students",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=10), nullable=False),
    )
    op.create_table(
        "lessons",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("title", sa.String(length=100), nullable=False),
        sa.Column("status", sa.SmallInteger(), nullable=False, server_default="0"),
    )
    op.create_index("ix_lessons_date", "lessons", ["date"])
    op.create_table(
        "lesson_students",
        sa.Column("lesson_id", sa.Integer(), sa.ForeignKey("lessons.id"), primary_key=True),
        sa.Column("student_id", sa.Integer(), sa.ForeignKey("students.id"), primary_key=True),
        sa.Column("visit", sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_table(
        "lesson_teachers",
        sa.Column("lesson_id", sa.Integer(), sa.ForeignKey("lessons.id"), primary_key=True),
        sa.Column("teacher_id", sa.Integer(), sa.ForeignKey("teachers.id"), primary_key=True),
    )
    op.create_table(
        "logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("timestamp", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("level", sa.String()),
        sa.Column("message", sa.String()),
    )
    op.create_index("ix_logs_id", "logs", ["id"])


def downgrade():
    op.drop_index("ix_logs_id", table_name="logs")
    op.drop_table("logs")
    op.drop_table("lesson_teachers")
    op.drop_table("lesson_students")
    op.drop_index("ix_lessons_date", table_name="lessons")
    op.drop_table("lessons")
    op.drop_table("students")
    op.drop_table("teachers")
