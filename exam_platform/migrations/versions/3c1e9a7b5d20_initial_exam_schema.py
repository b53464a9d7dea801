"""initial exam platform schema

Revision ID: 3c1e9a7b5d20
Revises:
Create Date: 2026-01-12 10:00:00.000000

"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "3c1e9a7b5d20"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps(*, updated: bool = False) -> list[sa.Column]:
    columns = [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        )
    ]
    if updated:
        columns.append(
            sa.Column(
                "updated_at",
                sa.DateTime(timezone=True),
                nullable=False,
                server_default=sa.text("CURRENT_TIMESTAMP"),
            )
        )
    return columns


def _past_paper_columns() -> list[sa.Column]:
    return [
        sa.Column("subject_id", sa.Integer(), sa.ForeignKey("subjects.id"), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("paper_number", sa.Integer(), nullable=True),
        sa.Column("question_number", sa.Integer(), nullable=True),
        sa.Column("question_parts", sa.JSON(), nullable=False),
        sa.Column("exam_type", sa.String(length=16), nullable=False, server_default="normal"),
        sa.Column("additional_info", sa.String(length=255), nullable=True),
        sa.Column("sort_key", sa.String(length=64), nullable=False, server_default=""),
        *_timestamps(updated=True),
    ]


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=32), nullable=False, server_default="student"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_root", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_email_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("password_reset_token", sa.String(length=255), nullable=True),
        sa.Column("password_reset_requested_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("password_reset_expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("stripe_customer_id", sa.String(length=255), nullable=True),
        sa.Column("subscription_id", sa.String(length=255), nullable=True),
        sa.Column("subscription_status", sa.String(length=32), nullable=False, server_default="none"),
        sa.Column("subscription_current_period_end", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "subscription_cancel_at_period_end", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("free_grind_credits", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)
    op.create_index(op.f("ix_users_stripe_customer_id"), "users", ["stripe_customer_id"], unique=True)

    op.create_table(
        "user_profiles",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False, unique=True),
        sa.Column("name", sa.String(length=100), nullable=True),
        sa.Column("onboarding_completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(updated=True),
    )

    op.create_table(
        "email_verification_tickets",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("purpose", sa.String(length=32), nullable=False, server_default="signup"),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("code", sa.String(length=12), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("resend_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("attempts", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_index(
        op.f("ix_email_verification_tickets_email"), "email_verification_tickets", ["email"], unique=True
    )

    op.create_table(
        "subjects",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("level", sa.String(length=16), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("name", "level", name="uq_subject_name_level"),
    )

    for table in ("topics", "audio_topics"):
        op.create_table(
            table,
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("name", sa.String(length=255), nullable=False),
            sa.Column("subject_id", sa.Integer(), sa.ForeignKey("subjects.id"), nullable=False),
            *_timestamps(),
        )
        op.create_index(op.f(f"ix_{table}_subject_id"), table, ["subject_id"])

    op.create_table(
        "user_subjects",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("subject_id", sa.Integer(), sa.ForeignKey("subjects.id"), nullable=False),
        sa.Column("grade", sa.String(length=16), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "subject_id", name="uq_user_subject"),
    )
    op.create_index(op.f("ix_user_subjects_user_id"), "user_subjects", ["user_id"])

    op.create_table(
        "questions",
        sa.Column("id", sa.Integer(), primary_key=True),
        *_past_paper_columns(),
        sa.Column("full_text", sa.Text(), nullable=True),
        sa.Column("question_image_url", sa.String(length=512), nullable=True),
        sa.Column("question_image_width", sa.Integer(), nullable=True),
        sa.Column("question_image_height", sa.Integer(), nullable=True),
        sa.Column("marking_scheme_image_url", sa.String(length=512), nullable=True),
        sa.Column("marking_scheme_image_width", sa.Integer(), nullable=True),
        sa.Column("marking_scheme_image_height", sa.Integer(), nullable=True),
    )
    op.create_table(
        "audio_questions",
        sa.Column("id", sa.Integer(), primary_key=True),
        *_past_paper_columns(),
        sa.Column("audio_url", sa.String(length=512), nullable=False),
        sa.Column("transcript_url", sa.String(length=512), nullable=True),
    )
    for table in ("questions", "audio_questions"):
        op.create_index(op.f(f"ix_{table}_subject_id"), table, ["subject_id"])
        op.create_index(op.f(f"ix_{table}_year"), table, ["year"])
        op.create_index(op.f(f"ix_{table}_sort_key"), table, ["sort_key"])

    op.create_table(
        "question_topics",
        sa.Column("question_id", sa.Integer(), sa.ForeignKey("questions.id"), primary_key=True),
        sa.Column("topic_id", sa.Integer(), sa.ForeignKey("topics.id"), primary_key=True),
    )
    op.create_table(
        "audio_question_topics",
        sa.Column(
            "audio_question_id", sa.Integer(), sa.ForeignKey("audio_questions.id"), primary_key=True
        ),
        sa.Column("audio_topic_id", sa.Integer(), sa.ForeignKey("audio_topics.id"), primary_key=True),
    )

    op.create_table(
        "question_completions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("question_type", sa.String(length=16), nullable=False, server_default="normal"),
        sa.Column("question_id", sa.Integer(), sa.ForeignKey("questions.id"), nullable=True),
        sa.Column("audio_question_id", sa.Integer(), sa.ForeignKey("audio_questions.id"), nullable=True),
        sa.Column(
            "completed_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.CheckConstraint(
            "(question_id IS NOT NULL AND audio_question_id IS NULL)"
            " OR (question_id IS NULL AND audio_question_id IS NOT NULL)",
            name="ck_completion_single_target",
        ),
    )
    for column in ("user_id", "question_id", "audio_question_id", "completed_at"):
        op.create_index(op.f(f"ix_question_completions_{column}"), "question_completions", [column])

    op.create_table(
        "grinds",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("scheduled_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False, server_default="60"),
        sa.Column("meeting_url", sa.String(length=512), nullable=True),
        sa.Column("max_participants", sa.Integer(), nullable=True),
        sa.Column("feedback_email_body", sa.Text(), nullable=True),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        *_timestamps(updated=True),
    )
    op.create_index(op.f("ix_grinds_scheduled_at"), "grinds", ["scheduled_at"])

    op.create_table(
        "grind_registrations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("grind_id", sa.Integer(), sa.ForeignKey("grinds.id"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column(
            "registered_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column("confirmation_email_sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reminder_email_sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("feedback_email_sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("grind_id", "user_id", name="uq_grind_registration"),
    )
    op.create_index(op.f("ix_grind_registrations_grind_id"), "grind_registrations", ["grind_id"])
    op.create_index(op.f("ix_grind_registrations_user_id"), "grind_registrations", ["user_id"])

    op.create_table(
        "question_reports",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("question_id", sa.Integer(), sa.ForeignKey("questions.id"), nullable=True),
        sa.Column("audio_question_id", sa.Integer(), sa.ForeignKey("audio_questions.id"), nullable=True),
        sa.Column("report_type", sa.String(length=32), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="pending"),
        sa.Column("resolved_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("admin_notes", sa.Text(), nullable=True),
        *_timestamps(updated=True),
    )
    for column in ("user_id", "question_id", "audio_question_id", "status"):
        op.create_index(op.f(f"ix_question_reports_{column}"), "question_reports", [column])

    op.create_table(
        "question_audit_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("question_id", sa.Integer(), sa.ForeignKey("questions.id"), nullable=True),
        sa.Column("audio_question_id", sa.Integer(), sa.ForeignKey("audio_questions.id"), nullable=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("action", sa.String(length=32), nullable=False),
        sa.Column("changes", sa.JSON(), nullable=False),
        *_timestamps(),
    )
    for column in ("question_id", "audio_question_id", "created_at"):
        op.create_index(op.f(f"ix_question_audit_logs_{column}"), "question_audit_logs", [column])

    op.create_table(
        "general_settings",
        sa.Column("key", sa.String(length=64), primary_key=True),
        sa.Column("value", sa.Text(), nullable=True),
        sa.Column("updated_by", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
    )


def downgrade():
    for table in (
        "general_settings",
        "question_audit_logs",
        "question_reports",
        "grind_registrations",
        "grinds",
        "question_completions",
        "audio_question_topics",
        "question_topics",
        "audio_questions",
        "questions",
        "user_subjects",
        "audio_topics",
        "topics",
        "subjects",
        "email_verification_tickets",
        "user_profiles",
        "users",
    ):
        op.drop_table(table)
