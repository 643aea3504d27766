"""Registration - creates a User account from a validated RegisterRequest.

Invariants:
    - New accounts always get RoleType.USER; promotion to Admin happens elsewhere
    - Username and email are unique: a taken one raises AccountExistsError before insert,
      and the unique constraints reject a concurrent duplicate (ConstraintViolationError)
    - The plain password never reaches the row; only PasswordHasher output is stored
"""

import logging
import uuid

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from doconnect.core.domain_types import RoleType
from doconnect.core.errors import AccountExistsError
from doconnect.core.repository_protocols import PasswordHasher
from doconnect.infrastructure.database import commit_aggregate
from doconnect.models.user import User
from doconnect.schemas.auth import RegisterRequest

logger = logging.getLogger(__name__)


async def register(
    db: AsyncSession, request: RegisterRequest, hasher: PasswordHasher,
) -> User:
    taken = await db.scalar(
        select(User.id).where(or_(
            User.username == request.username, User.email == request.email,
        )),
    )
    if taken is not None:
        raise AccountExistsError()

    user = User(
        id=uuid.uuid4(),
        username=request.username,
        email=request.email,
        password_hash=hasher.hash(request.password),
        role=RoleType.USER.value,
    )
    await commit_aggregate(db, user)
    logger.info("User registered", extra={"user_id": user.id})
    return user
