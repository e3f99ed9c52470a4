"""Root conftest — shared test configuration and fixtures.

Invariants:
    - Environment set before any skillsharp import (get_settings is cached)
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use the test engine
    - db_manager patched so code reading it directly (readiness probe) sees the test engine

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
      (PostgreSQL-specific features are not exercised here)
    - bcrypt at 4 rounds keeps signup/login fast
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///test.db")
os.environ.setdefault("JWT_SECRET", "test-secret-not-for-production")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_FORMAT", "text")

from dataclasses import dataclass  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import select  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession, create_async_engine, async_sessionmaker,
)

from skillsharp.db.base import Base  # noqa: E402
from skillsharp.infrastructure.database import get_db, DatabaseSessionManager  # noqa: E402
from skillsharp.infrastructure.security import hash_password  # noqa: E402
import skillsharp.infrastructure.database as db_module  # noqa: E402
from skillsharp.main import app  # noqa: E402
from skillsharp.models.institute import Institute  # noqa: E402
from skillsharp.models.profile import Profile, UserRole  # noqa: E402

DEFAULT_PASSWORD = "secret123"
CHROME_UA = "Mozilla/5.0 (Windows NT 10.0) AppleWebKit/537.36 Chrome/120.0 Safari/537.36"
IPHONE_UA = "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0) AppleWebKit/605.1.15 Safari/604.1"


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
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
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    # Patch db_manager for code that reads it directly
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


# ─── Actors ──────────────────────────────────────────────────────

@dataclass
class Actor:
    profile: Profile
    headers: dict

    @property
    def id(self):
        return self.profile.id


@pytest.fixture
def make_user(test_db):
    """Factory: insert a profile holding the given roles (student by default)."""

    async def _make(
        email: str, *roles: str, password: str = DEFAULT_PASSWORD,
        full_name: str | None = None,
    ) -> Profile:
        profile = Profile(
            email=email,
            password_hash=hash_password(password),
            full_name=full_name or email.split("@")[0].title(),
            roles=[UserRole(role=r) for r in (roles or ("student",))],
        )
        test_db.add(profile)
        await test_db.commit()
        await test_db.refresh(profile)
        return profile

    return _make


@pytest.fixture
def login(client):
    """Factory: log in through the API and return bearer headers."""

    async def _login(
        email: str, password: str = DEFAULT_PASSWORD, user_agent: str = CHROME_UA,
    ) -> dict:
        res = await client.post(
            "/api/v1/auth/login",
            json={"email": email, "password": password},
            headers={"User-Agent": user_agent},
        )
        assert res.status_code == 200, res.text
        return {"Authorization": f"Bearer {res.json()['access_token']}"}

    return _login


@pytest.fixture
async def student(make_user, login):
    profile = await make_user("student@example.com", "student", full_name="Sara Student")
    return Actor(profile, await login(profile.email))


@pytest.fixture
async def admin(make_user, login):
    profile = await make_user("admin@example.com", "admin", full_name="Ada Admin")
    return Actor(profile, await login(profile.email))


@pytest.fixture
async def creator(make_user, login):
    profile = await make_user("creator@example.com", "content_creator")
    return Actor(profile, await login(profile.email))


@pytest.fixture
async def institute_owner(client, login, test_db):
    """Institute account registered through the signup endpoint."""
    res = await client.post(
        "/api/v1/auth/institute-signup",
        json={
            "name": "Bright Academy",
            "email": "owner@academy.example.com",
            "password": DEFAULT_PASSWORD,
        },
    )
    assert res.status_code == 201, res.text
    profile = (await test_db.execute(
        select(Profile).where(Profile.email == "owner@academy.example.com"),
    )).scalar_one()
    return Actor(profile, await login(profile.email))


@pytest.fixture
async def institute(institute_owner, test_db) -> Institute:
    result = await test_db.execute(
        select(Institute).where(Institute.created_by == institute_owner.id),
    )
    return result.scalar_one()
