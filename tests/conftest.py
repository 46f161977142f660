"""Shared test fixtures for the CID checker."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import pytest
from httpx import ASGITransport, AsyncClient

from backend.config import Settings
from backend.database import create_engine
from backend.main import create_app, init_database
from tests.drive_fakes import FakeDriveService

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator
    from pathlib import Path

    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

TEST_CLIENT_ID = "test-client-id"
TEST_CLIENT_SECRET = "test-client-secret"
TEST_REFRESH_TOKEN = "test-refresh-token"


@asynccontextmanager
async def create_test_client(
    settings: Settings,
    drive: FakeDriveService | None = None,
    *,
    raise_app_exceptions: bool = True,
) -> AsyncGenerator[AsyncClient]:
    """Create an HTTP test client with a fully initialized app.

    Manually performs the work of the application lifespan (engine, schema,
    default config) because ASGITransport does not trigger it. When ``drive``
    is given, syncs read from it instead of Google Drive.
    """
    from backend.drive.client import DriveClient

    app = create_app(settings)
    settings.validate_runtime_config()

    engine, session_factory = create_engine(settings)
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.settings = settings
    if drive is not None:
        app.state.drive_client_factory = lambda s: DriveClient(
            drive, root_id=s.drive_root_id, page_size=s.drive_page_size
        )

    await init_database(engine, session_factory)

    async with AsyncClient(
        transport=ASGITransport(app=app, raise_app_exceptions=raise_app_exceptions),
        base_url="http://test",
    ) as ac:
        yield ac

    await engine.dispose()


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Create test settings with temporary paths and fake Drive credentials."""
    db_path = tmp_path / "test.db"
    return Settings(
        _env_file=None,
        debug=True,
        database_url=f"sqlite+aiosqlite:///{db_path}",
        frontend_dir=tmp_path / "frontend",
        google_client_id=TEST_CLIENT_ID,
        google_client_secret=TEST_CLIENT_SECRET,
        google_refresh_token=TEST_REFRESH_TOKEN,
        drive_root_id="shared-drive",
        drive_target_folder_path="/",
    )


@pytest.fixture
async def db(
    test_settings: Settings,
) -> AsyncGenerator[tuple[AsyncEngine, async_sessionmaker[AsyncSession]]]:
    """Create an initialized test database, returning (engine, session_factory)."""
    engine, session_factory = create_engine(test_settings)
    await init_database(engine, session_factory)
    yield engine, session_factory
    await engine.dispose()


@pytest.fixture
def db_engine(db: tuple[AsyncEngine, async_sessionmaker[AsyncSession]]) -> AsyncEngine:
    """Test database engine."""
    return db[0]


@pytest.fixture
def session_factory(
    db: tuple[AsyncEngine, async_sessionmaker[AsyncSession]],
) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test database."""
    return db[1]


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession]:
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def drive() -> FakeDriveService:
    """Empty in-memory Drive rooted at the shared drive used by test_settings."""
    return FakeDriveService(root_id="shared-drive")
