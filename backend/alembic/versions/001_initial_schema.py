"""Initial schema — accounts, content bank, institutes, exams, attempts, payments.

Revision ID: 001_initial
Revises: None
Create Date: 2026-09-01
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: str | None = None
branch_labels = None
depends_on = None


def _id() -> sa.Column:
    return sa.Column("id", UUID(as_uuid=True), primary_key=True)


def _timestamp(name: str = "created_at") -> sa.Column:
    return sa.Column(
        name, sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now(),
    )


def _question_columns() -> list[sa.Column]:
    return [
        sa.Column("question", sa.Text, nullable=False),
        sa.Column("option_a", sa.Text, nullable=False),
        sa.Column("option_b", sa.Text, nullable=False),
        sa.Column("option_c", sa.Text, nullable=False),
        sa.Column("option_d", sa.Text, nullable=False),
        sa.Column("correct_option", sa.String(1), nullable=False),
        sa.Column("explanation", sa.Text, nullable=True),
        _timestamp(),
        _timestamp("updated_at"),
    ]


def upgrade() -> None:
    # ── Accounts ──
    op.create_table(
        "profiles",
        _id(),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(200), nullable=True),
        sa.Column("mobile_number", sa.String(30), nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("premium_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("color_theme", sa.String(20), nullable=False, server_default="default"),
        sa.Column("bg_theme", sa.String(20), nullable=False, server_default="default"),
        _timestamp(),
        _timestamp("updated_at"),
    )

    op.create_table(
        "user_roles",
        _id(),
        sa.Column(
            "user_id", UUID(as_uuid=True),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("role", sa.String(20), nullable=False, server_default="student"),
        _timestamp(),
        sa.UniqueConstraint("user_id", "role", name="uq_user_roles_user_role"),
    )
    op.create_index("ix_user_roles_user_id", "user_roles", ["user_id"])

    op.create_table(
        "user_sessions",
        _id(),
        sa.Column(
            "user_id", UUID(as_uuid=True),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"),
            nullable=False, unique=True,
        ),
        sa.Column("session_token", sa.String(64), nullable=False),
        sa.Column("device_info", sa.String(100), nullable=True),
        _timestamp(),
        _timestamp("last_active_at"),
    )

    # ── Institutes ──
    op.create_table(
        "institutes",
        _id(),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("institute_code", sa.String(20), nullable=False, unique=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column(
            "created_by", UUID(as_uuid=True),
            sa.ForeignKey("profiles.id"), nullable=False,
        ),
        _timestamp(),
        _timestamp("updated_at"),
    )
    op.create_index("ix_institutes_created_by", "institutes", ["created_by"])

    op.create_table(
        "institute_students",
        _id(),
        sa.Column(
            "institute_id", UUID(as_uuid=True),
            sa.ForeignKey("institutes.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "student_id", UUID(as_uuid=True),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("is_approved", sa.Boolean, nullable=False, server_default=sa.false()),
        _timestamp("joined_at"),
        sa.UniqueConstraint(
            "institute_id", "student_id", name="uq_institute_students_member",
        ),
    )
    op.create_index(
        "ix_institute_students_institute_id", "institute_students", ["institute_id"],
    )
    op.create_index(
        "ix_institute_students_student_id", "institute_students", ["student_id"],
    )

    # ── Content bank ──
    op.create_table(
        "subjects",
        _id(),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column(
            "institute_id", UUID(as_uuid=True),
            sa.ForeignKey("institutes.id", ondelete="SET NULL"), nullable=True,
        ),
        sa.Column(
            "created_by", UUID(as_uuid=True),
            sa.ForeignKey("profiles.id"), nullable=False,
        ),
        _timestamp(),
        _timestamp("updated_at"),
    )

    op.create_table(
        "chapters",
        _id(),
        sa.Column(
            "subject_id", UUID(as_uuid=True),
            sa.ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("key_points", sa.JSON, nullable=False),
        sa.Column("order_index", sa.Integer, nullable=False, server_default="0"),
        sa.Column("is_premium", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column(
            "institute_id", UUID(as_uuid=True),
            sa.ForeignKey("institutes.id", ondelete="SET NULL"), nullable=True,
        ),
        sa.Column(
            "created_by", UUID(as_uuid=True),
            sa.ForeignKey("profiles.id"), nullable=False,
        ),
        _timestamp(),
        _timestamp("updated_at"),
    )
    op.create_index("ix_chapters_subject_id", "chapters", ["subject_id"])

    op.create_table(
        "mcqs",
        _id(),
        sa.Column(
            "chapter_id", UUID(as_uuid=True),
            sa.ForeignKey("chapters.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "institute_id", UUID(as_uuid=True),
            sa.ForeignKey("institutes.id", ondelete="SET NULL"), nullable=True,
        ),
        sa.Column(
            "created_by", UUID(as_uuid=True),
            sa.ForeignKey("profiles.id"), nullable=False,
        ),
        *_question_columns(),
    )
    op.create_index("ix_mcqs_chapter_id", "mcqs", ["chapter_id"])

    # ── Exams ──
    op.create_table(
        "institute_exams",
        _id(),
        sa.Column(
            "institute_id", UUID(as_uuid=True),
            sa.ForeignKey("institutes.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "subject_id", UUID(as_uuid=True),
            sa.ForeignKey("subjects.id", ondelete="SET NULL"), nullable=True,
        ),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("exam_code", sa.String(20), nullable=False, unique=True),
        sa.Column("exam_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("duration_minutes", sa.Integer, nullable=False, server_default="30"),
        sa.Column("opens_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("closes_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column(
            "created_by", UUID(as_uuid=True),
            sa.ForeignKey("profiles.id"), nullable=False,
        ),
        _timestamp(),
        _timestamp("updated_at"),
    )
    op.create_index("ix_institute_exams_institute_id", "institute_exams", ["institute_id"])

    op.create_table(
        "institute_mcqs",
        _id(),
        sa.Column(
            "institute_id", UUID(as_uuid=True),
            sa.ForeignKey("institutes.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "exam_id", UUID(as_uuid=True),
            sa.ForeignKey("institute_exams.id", ondelete="CASCADE"), nullable=True,
        ),
        sa.Column(
            "created_by", UUID(as_uuid=True),
            sa.ForeignKey("profiles.id"), nullable=False,
        ),
        *_question_columns(),
    )
    op.create_index("ix_institute_mcqs_exam_id", "institute_mcqs", ["exam_id"])

    op.create_table(
        "exam_mcqs",
        _id(),
        sa.Column(
            "exam_id", UUID(as_uuid=True),
            sa.ForeignKey("institute_exams.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "mcq_id", UUID(as_uuid=True),
            sa.ForeignKey("mcqs.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("order_index", sa.Integer, nullable=False, server_default="0"),
        _timestamp(),
        sa.UniqueConstraint("exam_id", "mcq_id", name="uq_exam_mcqs_link"),
    )
    op.create_index("ix_exam_mcqs_exam_id", "exam_mcqs", ["exam_id"])

    op.create_table(
        "exam_enrollments",
        _id(),
        sa.Column(
            "exam_id", UUID(as_uuid=True),
            sa.ForeignKey("institute_exams.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "student_id", UUID(as_uuid=True),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False,
        ),
        _timestamp("enrolled_at"),
        sa.UniqueConstraint("exam_id", "student_id", name="uq_exam_enrollments_student"),
    )
    op.create_index("ix_exam_enrollments_exam_id", "exam_enrollments", ["exam_id"])

    # ── Attempts ──
    op.create_table(
        "test_attempts",
        _id(),
        sa.Column(
            "student_id", UUID(as_uuid=True),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "chapter_id", UUID(as_uuid=True),
            sa.ForeignKey("chapters.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("score", sa.Integer, nullable=False, server_default="0"),
        sa.Column("total_questions", sa.Integer, nullable=False),
        sa.Column("percentage", sa.Float, nullable=False),
        _timestamp("started_at"),
        _timestamp("completed_at"),
    )
    op.create_index("ix_test_attempts_student_id", "test_attempts", ["student_id"])
    op.create_index("ix_test_attempts_chapter_id", "test_attempts", ["chapter_id"])

    op.create_table(
        "test_answers",
        _id(),
        sa.Column(
            "attempt_id", UUID(as_uuid=True),
            sa.ForeignKey("test_attempts.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "mcq_id", UUID(as_uuid=True),
            sa.ForeignKey("mcqs.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("selected_option", sa.String(1), nullable=False),
        sa.Column("is_correct", sa.Boolean, nullable=False),
        _timestamp("answered_at"),
    )
    op.create_index("ix_test_answers_attempt_id", "test_answers", ["attempt_id"])

    op.create_table(
        "exam_attempts",
        _id(),
        sa.Column(
            "exam_id", UUID(as_uuid=True),
            sa.ForeignKey("institute_exams.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "student_id", UUID(as_uuid=True),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("total_questions", sa.Integer, nullable=False),
        sa.Column("score", sa.Integer, nullable=True),
        sa.Column("percentage", sa.Float, nullable=True),
        sa.Column("is_submitted", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("auto_submitted", sa.Boolean, nullable=False, server_default=sa.false()),
        _timestamp("started_at"),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("exam_id", "student_id", name="uq_exam_attempts_student"),
    )
    op.create_index("ix_exam_attempts_exam_id", "exam_attempts", ["exam_id"])

    op.create_table(
        "exam_answers",
        _id(),
        sa.Column(
            "attempt_id", UUID(as_uuid=True),
            sa.ForeignKey("exam_attempts.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "mcq_id", UUID(as_uuid=True),
            sa.ForeignKey("mcqs.id", ondelete="CASCADE"), nullable=True,
        ),
        sa.Column(
            "institute_mcq_id", UUID(as_uuid=True),
            sa.ForeignKey("institute_mcqs.id", ondelete="CASCADE"), nullable=True,
        ),
        sa.Column("selected_option", sa.String(1), nullable=False),
        sa.Column("is_correct", sa.Boolean, nullable=False),
        _timestamp("answered_at"),
    )
    op.create_index("ix_exam_answers_attempt_id", "exam_answers", ["attempt_id"])

    # ── Payments & announcements ──
    op.create_table(
        "payment_requests",
        _id(),
        sa.Column(
            "user_id", UUID(as_uuid=True),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("transaction_id", sa.String(100), nullable=False),
        sa.Column("payment_method", sa.String(20), nullable=False),
        sa.Column("amount", sa.Float, nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column(
            "reviewed_by", UUID(as_uuid=True),
            sa.ForeignKey("profiles.id"), nullable=True,
        ),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        _timestamp(),
        _timestamp("updated_at"),
    )
    op.create_index("ix_payment_requests_user_id", "payment_requests", ["user_id"])

    op.create_table(
        "announcements",
        _id(),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("contact_info", sa.String(500), nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column(
            "created_by", UUID(as_uuid=True),
            sa.ForeignKey("profiles.id"), nullable=False,
        ),
        _timestamp(),
        _timestamp("updated_at"),
    )


def downgrade() -> None:
    op.drop_table("announcements")
    op.drop_table("payment_requests")
    op.drop_table("exam_answers")
    op.drop_table("exam_attempts")
    op.drop_table("test_answers")
    op.drop_table("test_attempts")
    op.drop_table("exam_enrollments")
    op.drop_table("exam_mcqs")
    op.drop_table("institute_mcqs")
    op.drop_table("institute_exams")
    op.drop_table("mcqs")
    op.drop_table("chapters")
    op.drop_table("subjects")
    op.drop_table("institute_students")
    op.drop_table("institutes")
    op.drop_table("user_sessions")
    op.drop_table("user_roles")
    op.drop_table("profiles")
