"""Shared test configuration and fixtures.

Every test gets a fresh database:
- ``TEST_DATABASE_URL`` selects it; the default is an in-memory SQLite
  database through aiosqlite, so the suite runs without a server.
- Point it at a PostgreSQL database (``postgresql+asyncpg://...``) to run
  the same tests with real row locks.
"""

import os
import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import date, timedelta

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

import rentwise.models  # noqa: F401  (registers tables on Base.metadata)
from rentwise.auth.jwt import create_token_pair
from rentwise.auth.passwords import hash_password
from rentwise.database import Base, get_db
from rentwise.main import app
from rentwise.models.user import Role, User

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")

# bcrypt is slow on purpose; hash the shared fixture password once.
_PASSWORD = "testpass123"
_PASSWORD_HASH = hash_password(_PASSWORD)


def _make_engine():
    if TEST_DATABASE_URL.startswith("sqlite"):
        # One shared connection so the in-memory database outlives each checkout.
        return create_async_engine(
            TEST_DATABASE_URL,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_async_engine(TEST_DATABASE_URL, pool_pre_ping=True)


def future_dates(offset_start: int = 30, nights: int = 5) -> tuple[str, str]:
    """Return a (start_date, end_date) pair safely in the future as ISO strings."""
    start = date.today() + timedelta(days=offset_start)
    end = start + timedelta(days=nights)
    return start.isoformat(), end.isoformat()


# ---------------------------------------------------------------------------
# Per-test database: create tables, wrap the test in a transaction, drop
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_engine():
    engine = _make_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async session wrapped in a transaction that always rolls back."""
    async with test_engine.connect() as connection:
        transaction = await connection.begin()
        session = AsyncSession(bind=connection, expire_on_commit=False)

        try:
            yield session
        finally:
            await session.close()
            await transaction.rollback()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient wired to use the test DB session."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Convenience fixtures: one user per role, plus a second host and guest
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def make_user(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    """Return a factory that inserts a user with the given role."""

    async def _make(role: Role, name: str | None = None, is_active: bool = True) -> User:
        unique = uuid.uuid4().hex[:8]
        user = User(
            email=f"{role.value}-{unique}@rentwise-tests.com",
            hashed_password=_PASSWORD_HASH,
            name=name or f"Test {role.value.title()}",
            role=role.value,
            is_active=is_active,
        )
        db_session.add(user)
        await db_session.flush()
        await db_session.refresh(user)
        return user

    return _make


def headers_for(user: User) -> dict[str, str]:
    """Return Authorization headers for ``user``."""
    tokens = create_token_pair(str(user.id), role=user.role)
    return {"Authorization": f"Bearer {tokens['access_token']}"}


@pytest_asyncio.fixture
async def admin_user(make_user) -> User:
    return await make_user(Role.ADMIN)


@pytest_asyncio.fixture
async def host_user(make_user) -> User:
    return await make_user(Role.HOST)


@pytest_asyncio.fixture
async def other_host(make_user) -> User:
    return await make_user(Role.HOST, name="Other Host")


@pytest_asyncio.fixture
async def guest_user(make_user) -> User:
    return await make_user(Role.GUEST)


@pytest_asyncio.fixture
async def other_guest(make_user) -> User:
    return await make_user(Role.GUEST, name="Other Guest")


@pytest_asyncio.fixture
async def admin_headers(admin_user: User) -> dict[str, str]:
    return headers_for(admin_user)


@pytest_asyncio.fixture
async def host_headers(host_user: User) -> dict[str, str]:
    return headers_for(host_user)


@pytest_asyncio.fixture
async def guest_headers(guest_user: User) -> dict[str, str]:
    return headers_for(guest_user)


# ---------------------------------------------------------------------------
# Convenience fixtures: property and booking helpers
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_property(client: AsyncClient, host_headers: dict) -> dict:
    """Create and return a test property via the API."""
    response = await client.post(
        "/api/properties",
        json={
            "title": "Test Apartment",
            "description": "An apartment for automated tests.",
            "price": 100.00,
            "location": "Paris, France",
            "amenities": ["WiFi", "Kitchen", "Washer"],
        },
        headers=host_headers,
    )
    assert response.status_code == 201, f"Failed to create test property: {response.text}"
    return response.json()


@pytest_asyncio.fixture
async def test_booking(client: AsyncClient, guest_headers: dict, test_property: dict) -> dict:
    """Create and return a pending two-night booking on ``test_property``."""
    start, end = future_dates(30, 2)
    response = await client.post(
        "/api/bookings",
        json={"property_id": test_property["id"], "start_date": start, "end_date": end},
        headers=guest_headers,
    )
    assert response.status_code == 201, f"Failed to create test booking: {response.text}"
    return response.json()
