"""API Dependencies - FastAPI providers for services and the authenticated caller.

Invariants:
    - Every protected route resolves the caller from a Bearer token via TokenService.verify
    - Missing/invalid tokens raise InvalidTokenError (401), never a bare HTTPException
    - Only the owner or an Admin may delete a question or answer
"""

from dataclasses import dataclass
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from doconnect.config import get_settings
from doconnect.core.domain_types import RoleType, UserId
from doconnect.core.errors import AccessDeniedError, InvalidTokenError
from doconnect.infrastructure.upload_directory import LocalUploadDirectory
from doconnect.services.image_storage import ImageStorageService
from doconnect.services.token_service import TokenService, UNIQUE_NAME_CLAIM, ROLE_CLAIM

_bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    id: UserId
    username: str
    role: RoleType

    @property
    def is_admin(self) -> bool:
        return self.role == RoleType.ADMIN


def get_token_service() -> TokenService:
    return TokenService(get_settings().jwt_settings())


def get_image_storage() -> ImageStorageService:
    return ImageStorageService(LocalUploadDirectory(get_settings().storage_root))


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    tokens: TokenService = Depends(get_token_service),
) -> CurrentUser:
    if credentials is None:
        raise InvalidTokenError("missing")
    claims = tokens.verify(credentials.credentials)
    try:
        return CurrentUser(
            id=UserId(UUID(claims["sub"])),
            username=claims.get(UNIQUE_NAME_CLAIM, ""),
            role=RoleType(claims.get(ROLE_CLAIM)),
        )
    except ValueError:
        raise InvalidTokenError("malformed claims")


def ensure_can_modify(owner_id: UUID, user: CurrentUser, action: str) -> None:
    if owner_id != user.id and not user.is_admin:
        raise AccessDeniedError(action)
