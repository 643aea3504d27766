"""Root conftest - shared test configuration and async DB fixtures.

Invariants:
    - Every test gets a fresh in-memory SQLite database with FK enforcement ON
    - Settings come from env defaults below; no real secrets, no real Postgres

Design Decisions:
    - SQLite in-memory: CHECK constraints, NOT NULL and ON DELETE CASCADE all enforced
      once PRAGMA foreign_keys=ON is set by enable_sqlite_foreign_keys
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_KEY", "THIS_IS_A_DEMO_SECRET_KEY_FOR_TESTS_1234567890")
os.environ.setdefault("JWT_ISSUER", "DoConnect.Tests")
os.environ.setdefault("JWT_AUDIENCE", "DoConnect.Tests")
os.environ.setdefault("LOG_FORMAT", "text")

import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession, create_async_engine, async_sessionmaker,
)

import doconnect.models  # noqa: E402,F401
from doconnect.core.domain_types import RoleType  # noqa: E402
from doconnect.db.base import Base  # noqa: E402
from doconnect.db.session import enable_sqlite_foreign_keys  # noqa: E402
from doconnect.models.user import User  # noqa: E402


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def make_user(test_db):
    """Factory: insert a user and return it."""
    counter = {"n": 0}

    async def _make(role: RoleType = RoleType.USER, username: str | None = None) -> User:
        counter["n"] += 1
        name = username or f"user{counter['n']}"
        user = User(
            username=name, email=f"{name}@example.com",
            password_hash="hash", role=role.value,
        )
        test_db.add(user)
        await test_db.commit()
        return user

    return _make


@pytest.fixture
async def seed_user(make_user):
    return await make_user(username="alice")
