"""ImageFile ORM - one stored upload attached to exactly one question or answer.

Invariants:
    - Exactly one of question_id / answer_id is set (CHECK constraint "single_parent",
      rendered as ck_images_single_parent); violating flushes fail the commit
    - Both FKs are ON DELETE CASCADE: an image never outlives its parent
    - path starts with "uploads/" and is forward-slash separated
    - Rows are created from ImageDescriptor only, never from loose ids

Design Decisions:
    - The CHECK is the data-layer backstop; ImageParent makes the bad state
      unrepresentable before it gets here
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from doconnect.core.image_parent import ImageDescriptor
from doconnect.db.base import Base


PATH_MAX_LENGTH = 260


class ImageFile(Base):
    """Image attached to a question or an answer."""
    __tablename__ = "images"
    __table_args__ = (
        CheckConstraint(
            "(question_id IS NOT NULL AND answer_id IS NULL) OR "
            "(question_id IS NULL AND answer_id IS NOT NULL)",
            name="single_parent",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    path: Mapped[str] = mapped_column(String(PATH_MAX_LENGTH), nullable=False)
    question_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("questions.id", ondelete="CASCADE"),
        nullable=True, index=True,
    )
    answer_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("answers.id", ondelete="CASCADE"),
        nullable=True, index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    question: Mapped["Question"] = relationship(
        "Question", back_populates="images",
    )
    answer: Mapped["Answer"] = relationship(
        "Answer", back_populates="images",
    )

    @classmethod
    def from_descriptor(cls, descriptor: ImageDescriptor) -> "ImageFile":
        return cls(
            path=descriptor.path,
            question_id=descriptor.question_id,
            answer_id=descriptor.answer_id,
        )
