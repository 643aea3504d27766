"""Login - credential check and token issuance.

Tests cover:
    - Login by username or by email returns a verifiable token for that user
    - Wrong password and unknown user fail identically
"""

import pytest

from doconnect.core.errors import InvalidCredentialsError
from doconnect.schemas.auth import LoginRequest
from doconnect.services.login import login


class FakeVerifier:
    """Accepts exactly one password for the stored hash "hash"."""

    def verify(self, plain: str, password_hash: str) -> bool:
        return plain == "s3cret" and password_hash == "hash"


def _credentials(name: str, password: str) -> LoginRequest:
    return LoginRequest(username_or_email=name, password=password)


@pytest.mark.parametrize("login_name", ["alice", "alice@example.com", "  alice  "])
async def test_login_returns_token(test_db, seed_user, token_service, login_name):
    issued = await login(
        test_db, _credentials(login_name, "s3cret"), FakeVerifier(), token_service,
    )

    claims = token_service.verify(issued.token)
    assert claims["sub"] == str(seed_user.id)
    assert claims["unique_name"] == "alice"
    assert claims["role"] == "User"


async def test_wrong_password(test_db, seed_user, token_service):
    with pytest.raises(InvalidCredentialsError) as exc:
        await login(test_db, _credentials("alice", "nope"), FakeVerifier(), token_service)
    assert exc.value.http_status == 401


async def test_unknown_user(test_db, seed_user, token_service):
    with pytest.raises(InvalidCredentialsError) as exc:
        await login(test_db, _credentials("bob", "s3cret"), FakeVerifier(), token_service)
    assert exc.value.message == "Invalid username/email or password"
