import os

# Must be set before the application modules read their settings
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "testing")

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from trustbadges.main import app, API_PREFIX  # noqa: E402
from trustbadges.models import Base  # noqa: E402
from trustbadges.core.cache import InMemoryCache, get_settings_cache  # noqa: E402
from trustbadges.core.database import get_db  # noqa: E402
from trustbadges.core.rate_limiter import rate_limiter  # noqa: E402
from trustbadges.repositories.unit_of_work import SqlAlchemyUnitOfWork  # noqa: E402
from trustbadges.services.settings_store import SettingsStore  # noqa: E402


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "adminpassword123"


@pytest_asyncio.fixture(autouse=True)
async def reset_process_state():
    """The settings cache and the rate limiter are process-wide; start each test clean."""
    get_settings_cache().clear()
    await rate_limiter.reset()
    yield
    get_settings_cache().clear()
    await rate_limiter.reset()


@pytest_asyncio.fixture
async def async_engine():
    """Create an async engine for testing."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(async_engine):
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def async_session(session_factory):
    """Create an async session for testing."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def override_get_db(async_session):
    """Override the get_db dependency."""

    async def _override_get_db():
        try:
            yield async_session
            await async_session.commit()
        except Exception:
            await async_session.rollback()
            raise

    return _override_get_db


@pytest_asyncio.fixture
async def client(override_get_db):
    """Create test client with overridden database."""
    from httpx import ASGITransport

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def cache():
    return InMemoryCache(default_ttl=3600)


@pytest_asyncio.fixture
async def store(async_session, cache):
    """A settings store over the test database with its own cache."""
    return SettingsStore(SqlAlchemyUnitOfWork(async_session), cache)


@pytest_asyncio.fixture
async def seeded_store(store):
    await store.seed_defaults()
    return store


@pytest_asyncio.fixture
async def seeded_db(async_session):
    """Seed the default groups the way application startup does."""
    store = SettingsStore(SqlAlchemyUnitOfWork(async_session), get_settings_cache())
    await store.seed_defaults()
    return async_session


async def _create_user(async_session, email, password, is_admin):
    from trustbadges.core.auth import get_password_hash

    uow = SqlAlchemyUnitOfWork(async_session)
    user = await uow.users.create_user(email, get_password_hash(password), is_admin=is_admin)
    await uow.commit()
    return user


@pytest_asyncio.fixture
async def admin_user(async_session):
    return await _create_user(async_session, ADMIN_EMAIL, ADMIN_PASSWORD, is_admin=True)


@pytest_asyncio.fixture
async def regular_user(async_session):
    return await _create_user(async_session, "editor@example.com", "editorpassword123", is_admin=False)


@pytest_asyncio.fixture
async def admin_client(client: AsyncClient, admin_user, seeded_db):
    """A client logged in as admin that sends its CSRF token on every request."""
    response = await client.post(
        f"{API_PREFIX}/login",
        json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 200
    client.headers["X-CSRF-Token"] = response.json()["csrfToken"]
    return client
