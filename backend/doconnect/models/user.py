"""User ORM - registered account; owner of questions and answers.

Invariants:
    - id is UUID primary key (client-side default)
    - username and email are unique and non-nullable
    - password_hash is opaque to this package (hashing lives elsewhere)
    - role is a RoleType value ("User" | "Admin")
    - Users are never hard-deleted by this package, so no cascade starts here
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from doconnect.core.domain_types import RoleType
from doconnect.db.base import Base


class User(Base):
    """Registered user."""
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    username: Mapped[str] = mapped_column(
        String(50), nullable=False, unique=True,
    )
    email: Mapped[str] = mapped_column(
        String(256), nullable=False, unique=True,
    )
    password_hash: Mapped[str] = mapped_column(String(256), nullable=False)
    role: Mapped[str] = mapped_column(
        String(10), nullable=False, default=RoleType.USER.value,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    @property
    def is_admin(self) -> bool:
        return self.role == RoleType.ADMIN.value
