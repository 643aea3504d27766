"""Answer ORM - reply to a question; owns its own images.

Invariants:
    - question_id and user_id are NOT NULL
    - question_id FK is ON DELETE CASCADE: an answer never outlives its question
    - Deleting an answer removes its images and nothing else
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Text, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from doconnect.db.base import Base


class Answer(Base):
    """Answer to a question."""
    __tablename__ = "answers"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    text: Mapped[str] = mapped_column(Text, nullable=False)
    question_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("questions.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    question: Mapped["Question"] = relationship(
        "Question", back_populates="answers",
    )
    user: Mapped["User"] = relationship("User")
    images: Mapped[list["ImageFile"]] = relationship(
        "ImageFile", back_populates="answer",
        cascade="all, delete-orphan", passive_deletes=True, lazy="selectin",
    )
