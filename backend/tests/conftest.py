"""
Bus Admin Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets its own SQLite database and upload directory under
       tmp_path, wrapped in an app built by create_app(settings).

Fixture Hierarchy (all function-scoped):
    ├── settings: Settings pointing at tmp_path
    ├── app: FastAPI app with its AppContext and schema created
    ├── context: app.state.context
    ├── db_session: AsyncSession from the context's factory
    ├── upload_store: the context's UploadStore
    ├── mock_db_session: AsyncMock session for failure-path tests
    ├── admin / auth_headers: a stored admin and a valid bearer header
    ├── test_client: HTTPX AsyncClient over ASGITransport
    └── sample_image_bytes / make_image: fake JPEG payloads
"""

import os
import tempfile
from typing import AsyncGenerator, Callable
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Override settings BEFORE any app imports: busadmin.main builds a module-level
# app from the environment on import.
_TEST_ROOT = tempfile.mkdtemp(prefix="busadmin_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_ROOT}/module.db"
os.environ["UPLOAD_DIR"] = os.path.join(_TEST_ROOT, "uploads")
os.environ["JWT_SECRET"] = "test-secret-not-real-0123456789abcdef"
os.environ["LOG_LEVEL"] = "WARNING"

from busadmin.config import Settings  # noqa: E402
from busadmin.context import AppContext  # noqa: E402
from busadmin.main import create_app  # noqa: E402
from busadmin.schemas.auth import AdminCreate, AdminUser  # noqa: E402
from busadmin.services.upload_service import UploadStore  # noqa: E402

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "correct horse battery staple"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        upload_dir=str(tmp_path / "uploads"),
        jwt_secret="test-secret-not-real-0123456789abcdef",
        log_level="WARNING",
        auto_create_schema=False,
        placeholder_image_url="/static/bus-placeholder.png",
    )


@pytest_asyncio.fixture
async def app(settings):
    application = create_app(settings)
    ctx: AppContext = application.state.context
    await ctx.create_schema()
    yield application
    await ctx.dispose()


@pytest.fixture
def context(app) -> AppContext:
    return app.state.context


@pytest.fixture
def upload_store(context) -> UploadStore:
    return context.uploads


@pytest_asyncio.fixture
async def db_session(context):
    async with context.session_factory() as session:
        yield session


@pytest.fixture
def mock_db_session():
    """
    A mock async database session.

    Usage:
        mock_db_session.commit.side_effect = RuntimeError("db down")
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.delete = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest_asyncio.fixture
async def admin(context) -> AdminUser:
    async with context.session_factory() as session:
        return await context.auth_service.create_admin(
            session,
            AdminCreate(name="Root Admin", email=ADMIN_EMAIL, password=ADMIN_PASSWORD),
        )


@pytest.fixture
def auth_headers(context, admin) -> dict:
    token = context.tokens.issue(admin.id, admin.email)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def test_client(app) -> AsyncGenerator[AsyncClient, None]:
    """
    Async HTTP client talking to the app in-process.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def sample_image_bytes() -> bytes:
    """Minimal JPEG: Start of Image (FFD8) + JFIF marker + End of Image (FFD9)."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


@pytest.fixture
def make_image(sample_image_bytes) -> Callable[[int], bytes]:
    """Build a JPEG-looking payload of exactly `size` bytes."""

    def _make(size: int) -> bytes:
        head = sample_image_bytes[:-2]
        padding = max(size - len(head) - 2, 0)
        return head + b"\x00" * padding + b"\xff\xd9"

    return _make
