"""Login - exchanges credentials for a session token.

Invariants:
    - Unknown user and wrong password are indistinguishable (InvalidCredentialsError)
    - Password checking is delegated to an injected PasswordVerifier
"""

import logging

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from doconnect.core.errors import InvalidCredentialsError
from doconnect.core.repository_protocols import PasswordVerifier
from doconnect.models.user import User
from doconnect.schemas.auth import LoginRequest
from doconnect.services.token_service import IssuedToken, TokenService

logger = logging.getLogger(__name__)


async def login(
    db: AsyncSession,
    credentials: LoginRequest,
    verifier: PasswordVerifier,
    tokens: TokenService,
) -> IssuedToken:
    login_name = credentials.username_or_email.strip()
    user = await db.scalar(
        select(User).where(or_(User.username == login_name, User.email == login_name)),
    )
    if user is None or not verifier.verify(credentials.password, user.password_hash):
        logger.warning("Login rejected")
        raise InvalidCredentialsError()
    return tokens.create(user)
