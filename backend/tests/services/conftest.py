"""Service test fixtures - upload directory, services, and the FastAPI test client.

Invariants:
    - Uploads land in pytest's tmp_path, never in the real storage root
    - get_db, get_image_storage and get_token_service are overridden on the app
    - db_manager patched so the readiness check sees the test engine

Design Decisions:
    - Token service uses test-only settings: 32+ char key, issuer "DoConnect.Tests",
      30 minute validity
"""

import pytest
from httpx import ASGITransport, AsyncClient

import doconnect.infrastructure.database as db_module
from doconnect.api.dependencies import get_image_storage, get_token_service
from doconnect.config import JwtSettings
from doconnect.infrastructure.database import DatabaseSessionManager, get_db
from doconnect.infrastructure.upload_directory import LocalUploadDirectory
from doconnect.main import app
from doconnect.services.image_storage import ImageStorageService
from doconnect.services.token_service import TokenService

TEST_JWT = JwtSettings(
    key="THIS_IS_A_DEMO_SECRET_KEY_FOR_TESTS_1234567890",
    issuer="DoConnect.Tests",
    audience="DoConnect.Tests",
    expires_minutes=30,
)


@pytest.fixture
def upload_dir(tmp_path):
    return LocalUploadDirectory(tmp_path)


@pytest.fixture
def storage(upload_dir):
    return ImageStorageService(upload_dir)


@pytest.fixture
def token_service():
    return TokenService(TEST_JWT)


@pytest.fixture
def auth_headers(token_service):
    """Factory: Bearer header for a user row."""
    def _headers(user) -> dict[str, str]:
        issued = token_service.create(user)
        return {"Authorization": f"Bearer {issued.token}"}
    return _headers


@pytest.fixture
async def client(test_engine, test_session_factory, storage, token_service):
    """FastAPI test client with DB, storage and token dependencies overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_image_storage] = lambda: storage
    app.dependency_overrides[get_token_service] = lambda: token_service

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager
