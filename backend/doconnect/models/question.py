"""Question ORM - aggregate root for answers and question images.

Invariants:
    - user_id is NOT NULL: a question without an owner is rejected at commit
    - title <= 140 chars (column + API schema), text <= 4000 chars (API schema)
    - Deleting a question removes its answers and every image of the question
      or of those answers (services/cascade_delete.py; FK ON DELETE CASCADE as backstop)

Design Decisions:
    - passive_deletes=True on collections: the ORM never NULLs child FKs on delete,
      which would trip the images CHECK constraint
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Text, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from doconnect.db.base import Base


TITLE_MAX_LENGTH = 140
TEXT_MAX_LENGTH = 4000


class Question(Base):
    """Question posted by a user."""
    __tablename__ = "questions"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    title: Mapped[str] = mapped_column(String(TITLE_MAX_LENGTH), nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    user: Mapped["User"] = relationship("User")
    answers: Mapped[list["Answer"]] = relationship(
        "Answer", back_populates="question",
        cascade="all, delete-orphan", passive_deletes=True, lazy="selectin",
    )
    images: Mapped[list["ImageFile"]] = relationship(
        "ImageFile", back_populates="question",
        cascade="all, delete-orphan", passive_deletes=True, lazy="selectin",
    )
