"""Initial schema - users, questions, answers, images.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

images carries the single-parent CHECK and ON DELETE CASCADE to both parents;
answers cascade from questions. Constraint names follow db/base.py NAMING_CONVENTION.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", UUID(as_uuid=True), nullable=False),
        sa.Column("username", sa.String(50), nullable=False),
        sa.Column("email", sa.String(256), nullable=False),
        sa.Column("password_hash", sa.String(256), nullable=False),
        sa.Column("role", sa.String(10), nullable=False, server_default="User"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("username", name="uq_users_username"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )

    op.create_table(
        "questions",
        sa.Column("id", UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(140), nullable=False),
        sa.Column("text", sa.Text, nullable=False),
        sa.Column("user_id", UUID(as_uuid=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_questions"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_questions_user_id_users"),
    )
    op.create_index("ix_questions_user_id", "questions", ["user_id"])

    op.create_table(
        "answers",
        sa.Column("id", UUID(as_uuid=True), nullable=False),
        sa.Column("text", sa.Text, nullable=False),
        sa.Column("question_id", UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", UUID(as_uuid=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_answers"),
        sa.ForeignKeyConstraint(
            ["question_id"], ["questions.id"],
            name="fk_answers_question_id_questions", ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_answers_user_id_users"),
    )
    op.create_index("ix_answers_question_id", "answers", ["question_id"])
    op.create_index("ix_answers_user_id", "answers", ["user_id"])

    op.create_table(
        "images",
        sa.Column("id", UUID(as_uuid=True), nullable=False),
        sa.Column("path", sa.String(260), nullable=False),
        sa.Column("question_id", UUID(as_uuid=True), nullable=True),
        sa.Column("answer_id", UUID(as_uuid=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_images"),
        sa.ForeignKeyConstraint(
            ["question_id"], ["questions.id"],
            name="fk_images_question_id_questions", ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["answer_id"], ["answers.id"],
            name="fk_images_answer_id_answers", ondelete="CASCADE",
        ),
        sa.CheckConstraint(
            "(question_id IS NOT NULL AND answer_id IS NULL) OR "
            "(question_id IS NULL AND answer_id IS NOT NULL)",
            name="ck_images_single_parent",
        ),
    )
    op.create_index("ix_images_question_id", "images", ["question_id"])
    op.create_index("ix_images_answer_id", "images", ["answer_id"])


def downgrade() -> None:
    op.drop_table("images")
    op.drop_table("answers")
    op.drop_table("questions")
    op.drop_table("users")
