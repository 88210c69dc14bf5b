"""
Test infrastructure for the Blog API.

Strategy
--------
- SQLite in-memory via aiosqlite eliminates the need for a running Postgres
  instance in CI, keeping the suite fast and self-contained.
- StaticPool forces all async tasks to share the same in-memory database
  connection, which is required because SQLite in-memory databases are
  connection-scoped; a new connection would see an empty database.
- The app's ``get_db`` and ``get_session_factory`` dependencies are
  overridden so both plain reads and unit-of-work transactions use the
  test session factory.
- All tables are created fresh before each test and dropped after.
- bcrypt runs with the minimum cost factor and every client gets a fresh
  session store.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

import blog.models  # noqa: F401
from blog.database import Base, get_db, get_session_factory
from blog.main import app
from blog.middleware import install_query_counter
from blog.sessions import SessionStore
from blog.uow import UnitOfWork

# ---------------------------------------------------------------------------
# Test database engine - SQLite in-memory with aiosqlite
# ---------------------------------------------------------------------------

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine_test = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

install_query_counter(engine_test)

async_session_test = async_sessionmaker(
    engine_test,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ---------------------------------------------------------------------------
# Dependency overrides
# ---------------------------------------------------------------------------

async def override_get_db():
    async with async_session_test() as session:
        yield session


app.dependency_overrides[get_db] = override_get_db
app.dependency_overrides[get_session_factory] = lambda: async_session_test


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create all tables before each test, drop after to guarantee isolation."""
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def db_session() -> AsyncSession:
    """
    Yield a live AsyncSession for tests that seed or inspect rows
    directly, outside any unit-of-work.
    """
    async with async_session_test() as session:
        yield session


@pytest.fixture
def session_factory() -> async_sessionmaker[AsyncSession]:
    """
    The test session factory.  Open a fresh session from it to observe
    committed state without identity-map leftovers.
    """
    return async_session_test


@pytest.fixture
def uow() -> UnitOfWork:
    return UnitOfWork(async_session_test)


@pytest.fixture
def sessions() -> SessionStore:
    return SessionStore(ttl=None)


@pytest_asyncio.fixture
async def async_client(sessions: SessionStore) -> AsyncClient:
    """
    Yield an httpx.AsyncClient wired to the FastAPI app via ASGITransport,
    with a fresh session store so tokens never leak between tests.
    """
    app.state.sessions = sessions
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def register_and_login(async_client: AsyncClient):
    """
    Return a coroutine that registers a user through the API, logs in and
    yields ``(user_id, headers)`` ready for authenticated requests.
    """

    async def _register_and_login(email: str, name: str = "Writer", password: str = "secret"):
        resp = await async_client.post(
            "/register", json={"name": name, "email": email, "password": password}
        )
        assert resp.status_code == 200, resp.text
        user_id = resp.json()["id"]
        resp = await async_client.post("/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.text
        return user_id, {"Authorization": f"Bearer {resp.json()['token']}"}

    return _register_and_login
