"""Pytest configuration and fixtures for Keepsake tests.

Database Handling:
- TEST_DATABASE_URL is used when set
- Otherwise, if testcontainers is installed and Docker is available, a PostgreSQL
  container is started
- Otherwise tests run against a local SQLite file through aiosqlite
"""

import asyncio
import os
import tempfile
from collections.abc import AsyncGenerator
from datetime import UTC, datetime, timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

# Set test environment variables before importing keepsake modules
TEST_PROJECT_TOKEN_SECRET = "test-project-token-secret-0123456789abcdef"
os.environ["PROJECT_TOKEN_SECRET"] = TEST_PROJECT_TOKEN_SECRET
os.environ.setdefault("LOG_LEVEL", "INFO")


# --- Database URL Resolution ---

_container = None
_db_available = None
_database_url = None


def _try_testcontainers() -> str | None:
    """Try to start PostgreSQL using testcontainers.

    Returns database URL if successful, None otherwise.
    """
    try:
        from testcontainers.postgres import PostgresContainer
    except ImportError:
        return None

    global _container
    try:
        _container = PostgresContainer(
            image="postgres:15-alpine",
            username="test",
            password="test",
            dbname="keepsake_test",
        )
        _container.start()

        url = _container.get_connection_url()
        async_url = url.replace("postgresql+psycopg2://", "postgresql+asyncpg://")
        return async_url.replace("postgresql://", "postgresql+asyncpg://")
    except Exception as e:
        import warnings

        warnings.warn(f"Testcontainers not available: {e}", stacklevel=2)
        if _container:
            try:
                _container.stop()
            except Exception:
                pass
            _container = None
        return None


def _get_database_url() -> str:
    """Get database URL, preferring an explicit URL, then a container, then SQLite."""
    global _database_url

    if _database_url is not None:
        return _database_url

    explicit_url = os.environ.get("TEST_DATABASE_URL")
    if explicit_url:
        _database_url = explicit_url
        return _database_url

    container_url = _try_testcontainers()
    if container_url:
        _database_url = container_url
        return _database_url

    db_path = os.path.join(tempfile.gettempdir(), f"keepsake_test_{os.getpid()}.db")
    _database_url = f"sqlite+aiosqlite:///{db_path}"
    return _database_url


# Set DATABASE_URL for app imports
os.environ["DATABASE_URL"] = _get_database_url()


def pytest_sessionfinish(session, exitstatus):
    """Clean up testcontainers when tests finish."""
    global _container
    if _container:
        try:
            _container.stop()
        except Exception:
            pass
        _container = None


def check_database_available() -> bool:
    """Check if the test database is reachable."""
    global _db_available
    if _db_available is not None:
        return _db_available

    from sqlalchemy import text

    async def _check():
        try:
            engine = create_async_engine(_get_database_url(), poolclass=NullPool)
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            await engine.dispose()
            return True
        except Exception as e:
            import warnings

            warnings.warn(f"Test database not available: {e}", stacklevel=2)
            return False

    _db_available = asyncio.run(_check())
    return _db_available


# Resolved at import time, outside any running event loop
requires_db = pytest.mark.skipif(
    not check_database_available(), reason="Test database not available"
)


# --- Rate Limiter Reset Fixture ---


def _reset_exchange_rate_limiter():
    """Clear failed-exchange counters tracked per client IP."""
    from keepsake.api import token

    token._exchange_failures.clear()
    token._last_sweep = 0.0


@pytest.fixture(autouse=True)
def reset_exchange_rate_limiter():
    """Reset the exchange rate limiter before and after each test."""
    _reset_exchange_rate_limiter()
    yield
    _reset_exchange_rate_limiter()


# --- Database Fixtures ---


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """Create a database engine with all tables for one test."""
    if not check_database_available():
        pytest.skip("Test database not available")

    from keepsake.models import BaseModel

    engine = create_async_engine(
        _get_database_url(),
        poolclass=NullPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(BaseModel.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(BaseModel.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for testing."""
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture(scope="function")
async def async_client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client with database override."""
    from keepsake.core.database import get_db
    from keepsake.main import app

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# --- Signer Fixtures ---


@pytest.fixture
def signer():
    """Session signer with the test secret and default lifetime."""
    from keepsake.services.session import SessionSigner

    return SessionSigner(TEST_PROJECT_TOKEN_SECRET, lifetime=timedelta(days=14))


@pytest.fixture
def session_cookie(signer):
    """Build a Cookie header carrying a session credential for a project."""
    from keepsake.core import settings

    def _cookie(project_id) -> dict[str, str]:
        return {"Cookie": f"{settings.session_cookie_name}={signer.mint(project_id)}"}

    return _cookie


# --- Test Factories ---


@pytest.fixture
def project_factory(db_session):
    """Factory for creating committed test Project rows."""
    from keepsake.models import PROJECT_STATUS_ACTIVE, Project
    from keepsake.services.access_token import generate_project_token

    async def _create_project(
        token: str | None = None,
        status: str = PROJECT_STATUS_ACTIVE,
        expires_at: datetime | None = None,
        **kwargs,
    ) -> Project:
        project = Project(
            token=token or generate_project_token(),
            status=status,
            expires_at=expires_at or datetime.now(UTC) + timedelta(days=365),
            **kwargs,
        )
        db_session.add(project)
        await db_session.commit()
        return project

    return _create_project


@pytest.fixture
def interview_session_factory(db_session):
    """Factory for creating InterviewSession rows."""
    from keepsake.models import InterviewSession

    async def _create_session(project, transcript_id: str | None = None, **kwargs):
        interview_session = InterviewSession(
            project_id=project.id,
            transcript_id=transcript_id,
            **kwargs,
        )
        db_session.add(interview_session)
        await db_session.commit()
        return interview_session

    return _create_session


# --- Pytest Hooks for Auto-Marking ---


def pytest_collection_modifyitems(config, items):
    """Mark tests that use database fixtures as 'integration', the rest as 'unit'."""
    integration_fixtures = {"db_session", "db_engine", "async_client"}

    for item in items:
        if any(mark.name in ("unit", "integration") for mark in item.iter_markers()):
            continue

        if hasattr(item, "fixturenames") and integration_fixtures & set(item.fixturenames):
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)
