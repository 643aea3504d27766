"""Token Issuance Service - claims, expiry window, settings validation, verification.

Tests cover:
    - Token carries exactly sub, unique_name, email, role, nameid plus the
      registered iss, aud, iat, nbf, exp, jti
    - expires_at == issued_at + validity and matches the exp claim
    - Short keys, blank issuer/audience and zero validity raise ConfigurationError
    - Two tokens for the same identity differ; later issuance expires later
    - verify() accepts own tokens and rejects foreign key, audience, issuer and expired
"""

import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from doconnect.config import JwtSettings
from doconnect.core.errors import ConfigurationError, InvalidTokenError
from doconnect.services.token_service import TokenService

SETTINGS = JwtSettings(
    key="THIS_IS_A_DEMO_SECRET_KEY_FOR_TESTS_1234567890",
    issuer="DoConnect.Tests",
    audience="DoConnect.Tests",
    expires_minutes=30,
)


@dataclass
class Identity:
    id: uuid.UUID
    username: str
    email: str
    role: str


def _identity(role: str = "User") -> Identity:
    return Identity(uuid.uuid4(), "alice", "alice@example.com", role)


def _fixed_clock(at: datetime):
    return lambda: at


def _unverified(token: str) -> dict:
    return jwt.decode(token, options={"verify_signature": False})


# ─── claims ──────────────────────────────────────────────────────

def test_token_contains_identity_claims():
    identity = _identity(role="Admin")
    issued = TokenService(SETTINGS).create(identity)

    claims = _unverified(issued.token)

    assert set(claims) == {
        "sub", "unique_name", "email", "role", "nameid",
        "iss", "aud", "iat", "nbf", "exp", "jti",
    }
    assert claims["sub"] == str(identity.id)
    assert claims["nameid"] == str(identity.id)
    assert claims["unique_name"] == "alice"
    assert claims["email"] == "alice@example.com"
    assert claims["role"] == "Admin"
    assert claims["iss"] == "DoConnect.Tests"
    assert claims["aud"] == "DoConnect.Tests"
    assert jwt.get_unverified_header(issued.token)["alg"] == "HS256"


def test_expiry_window_matches_settings():
    now = datetime.now(timezone.utc)
    issued = TokenService(SETTINGS, clock=_fixed_clock(now)).create(_identity())

    claims = _unverified(issued.token)

    assert claims["exp"] - claims["iat"] == 30 * 60
    assert issued.expires_at == now.replace(microsecond=0) + timedelta(minutes=30)
    assert int(issued.expires_at.timestamp()) == claims["exp"]
    assert issued.expires_at > now


def test_unknown_role_is_rejected():
    with pytest.raises(ConfigurationError) as exc:
        TokenService(SETTINGS).create(_identity(role="Superuser"))
    assert exc.value.setting == "role"
    assert exc.value.http_status == 500


# ─── settings validation ─────────────────────────────────────────

@pytest.mark.parametrize("override, setting", [
    ({"key": "too-short"}, "jwt_key"),
    ({"key": "x" * 31}, "jwt_key"),
    ({"issuer": "  "}, "jwt_issuer"),
    ({"audience": ""}, "jwt_audience"),
    ({"expires_minutes": 0}, "jwt_expires_minutes"),
])
def test_unusable_settings_raise_configuration_error(override, setting):
    service = TokenService(replace(SETTINGS, **override))
    with pytest.raises(ConfigurationError) as exc:
        service.create(_identity())
    assert exc.value.setting == setting


def test_key_of_exactly_32_bytes_is_accepted():
    issued = TokenService(replace(SETTINGS, key="k" * 32)).create(_identity())
    assert issued.token


# ─── distinctness ────────────────────────────────────────────────

def test_same_identity_gets_distinct_tokens():
    service = TokenService(SETTINGS)
    identity = _identity()
    assert service.create(identity).token != service.create(identity).token


def test_later_issuance_expires_later():
    identity = _identity()
    t1 = datetime.now(timezone.utc)
    t2 = t1 + timedelta(seconds=5)

    first = TokenService(SETTINGS, clock=_fixed_clock(t1)).create(identity)
    second = TokenService(SETTINGS, clock=_fixed_clock(t2)).create(identity)

    assert first.token != second.token
    assert second.expires_at > first.expires_at


# ─── verify ──────────────────────────────────────────────────────

def test_verify_accepts_own_token():
    service = TokenService(SETTINGS)
    identity = _identity()
    claims = service.verify(service.create(identity).token)
    assert claims["sub"] == str(identity.id)


@pytest.mark.parametrize("override", [
    {"key": "ANOTHER_SECRET_KEY_THAT_IS_LONG_ENOUGH_123"},
    {"audience": "SomeoneElse"},
    {"issuer": "SomeoneElse"},
])
def test_verify_rejects_foreign_tokens(override):
    foreign = TokenService(replace(SETTINGS, **override)).create(_identity())
    with pytest.raises(InvalidTokenError) as exc:
        TokenService(SETTINGS).verify(foreign.token)
    assert exc.value.reason == "invalid"


def test_verify_rejects_expired_token():
    long_ago = datetime.now(timezone.utc) - timedelta(hours=2)
    expired = TokenService(SETTINGS, clock=_fixed_clock(long_ago)).create(_identity())

    with pytest.raises(InvalidTokenError) as exc:
        TokenService(SETTINGS).verify(expired.token)
    assert exc.value.reason == "expired"


def test_verify_rejects_garbage():
    with pytest.raises(InvalidTokenError):
        TokenService(SETTINGS).verify("not-a-jwt")
