"""Token Issuance Service - mints and verifies HS256 session tokens.

Invariants:
    - Custom claims are EXACTLY: sub, unique_name, email, role, nameid (nameid == sub)
    - Registered claims alongside: iss, aud, iat, nbf, exp, jti
    - expires_at == issued_at + expires_minutes, strictly after issued_at
    - Signing key must be >= MIN_KEY_BYTES (UTF-8) and the role a RoleType value,
      or ConfigurationError is raised at issuance/verification time; nothing is retried
    - Pure apart from the clock and jti randomness: no network, no storage

Design Decisions:
    - Times truncated to whole seconds so expires_at equals the encoded exp claim
    - jti makes two tokens for the same identity distinct even within one second
    - Clock injected for deterministic tests
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

import jwt

from doconnect.config import JwtSettings
from doconnect.core.domain_types import RoleType
from doconnect.core.errors import ConfigurationError, InvalidTokenError
from doconnect.core.repository_protocols import TokenIdentity

logger = logging.getLogger(__name__)


ALGORITHM: str = "HS256"
MIN_KEY_BYTES: int = 32  # RFC 7518 3.2: HS256 key >= hash output size

UNIQUE_NAME_CLAIM = "unique_name"
ROLE_CLAIM = "role"
NAME_ID_CLAIM = "nameid"

_REQUIRED_CLAIMS = ["exp", "iat", "iss", "aud", "sub"]


@dataclass(frozen=True)
class IssuedToken:
    token: str
    expires_at: datetime


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def validate_jwt_settings(settings: JwtSettings) -> None:
    """Raise ConfigurationError if settings cannot produce a trustworthy token."""
    if len(settings.key.encode("utf-8")) < MIN_KEY_BYTES:
        raise ConfigurationError(
            "jwt_key", f"signing key must be at least {MIN_KEY_BYTES} bytes for {ALGORITHM}",
        )
    if not settings.issuer.strip():
        raise ConfigurationError("jwt_issuer", "issuer must not be blank")
    if not settings.audience.strip():
        raise ConfigurationError("jwt_audience", "audience must not be blank")
    if settings.expires_minutes < 1:
        raise ConfigurationError("jwt_expires_minutes", "validity must be at least 1 minute")


class TokenService:
    """Converts an authenticated identity into a signed, time-bounded credential."""

    def __init__(
        self,
        settings: JwtSettings,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._settings = settings
        self._clock = clock

    def create(self, identity: TokenIdentity) -> IssuedToken:
        validate_jwt_settings(self._settings)
        try:
            role = RoleType(identity.role)
        except ValueError:
            raise ConfigurationError("role", f"unknown role {identity.role!r}")
        issued_at = self._clock().astimezone(timezone.utc).replace(microsecond=0)
        expires_at = issued_at + timedelta(minutes=self._settings.expires_minutes)
        subject = str(identity.id)

        payload = {
            "sub": subject,
            UNIQUE_NAME_CLAIM: identity.username,
            "email": identity.email,
            ROLE_CLAIM: role.value,
            NAME_ID_CLAIM: subject,
            "iss": self._settings.issuer,
            "aud": self._settings.audience,
            "iat": issued_at,
            "nbf": issued_at,
            "exp": expires_at,
            "jti": uuid.uuid4().hex,
        }
        token = jwt.encode(payload, self._settings.key, algorithm=ALGORITHM)
        logger.info("Issued session token", extra={"user_id": subject})
        return IssuedToken(token=token, expires_at=expires_at)

    def verify(self, token: str) -> dict:
        """Return the claims of a token this service could have issued.

        Raises InvalidTokenError on bad signature, wrong issuer/audience, expiry,
        or missing required claims.
        """
        validate_jwt_settings(self._settings)
        try:
            return jwt.decode(
                token,
                self._settings.key,
                algorithms=[ALGORITHM],
                audience=self._settings.audience,
                issuer=self._settings.issuer,
                options={"require": _REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError:
            raise InvalidTokenError("expired")
        except jwt.InvalidTokenError as e:
            logger.warning(f"Token rejected: {e}")
            raise InvalidTokenError("invalid")
