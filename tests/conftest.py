"""Test infrastructure — database, session, httpx client and user fixtures.

The database is TEST_DATABASE_URL (in-memory SQLite by default). The schema
is created before and dropped after every test, so tests never share rows.
Photos are written to a per-test temporary directory.
"""

import os
from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import datetime, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from civic_reporter.database import Base, get_db
from civic_reporter.main import app
from civic_reporter.models import Issue, IssueStatusHistory, User, UserRole
from civic_reporter.services.storage_service import StorageService, storage_service
from civic_reporter.utils.jwt import create_access_token
from civic_reporter.utils.password import hash_password

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite://")


# ---------------------------------------------------------------------------
# Engine, session, client
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Test engine with a freshly created schema."""
    if TEST_DATABASE_URL.startswith("sqlite"):
        # One shared connection so the in-memory database survives across sessions
        eng = create_async_engine(
            TEST_DATABASE_URL,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        eng = create_async_engine(TEST_DATABASE_URL, pool_pre_ping=True)

    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield eng

    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await eng.dispose()


@pytest_asyncio.fixture
async def db(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI test client sharing the test session."""
    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    app.dependency_overrides[get_db] = _override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def uploads_dir(tmp_path, monkeypatch):
    """Force local photo storage into a temporary directory."""
    monkeypatch.setattr(StorageService, "is_local", property(lambda self: True))
    monkeypatch.setattr(storage_service, "uploads_dir", tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Users and tokens
# ---------------------------------------------------------------------------
async def _create_user(db: AsyncSession, name: str, email: str, password: str, role: UserRole) -> User:
    user = User(
        name=name,
        email=email,
        phone="555-0100",
        password_hash=hash_password(password),
        role=role.value,
    )
    db.add(user)
    await db.commit()
    return user


@pytest_asyncio.fixture
async def citizen_user(db: AsyncSession) -> User:
    return await _create_user(db, "Asha Citizen", "asha@citymail.com", "citizen123", UserRole.CITIZEN)


@pytest_asyncio.fixture
async def other_citizen(db: AsyncSession) -> User:
    return await _create_user(db, "Ravi Neighbour", "ravi@citymail.com", "citizen456", UserRole.CITIZEN)


@pytest_asyncio.fixture
async def admin_user(db: AsyncSession) -> User:
    return await _create_user(db, "City Admin", "admin@civic.com", "admin123", UserRole.ADMIN)


def make_token(user: User) -> str:
    return create_access_token({"sub": str(user.id), "role": user.role})


@pytest.fixture
def citizen_token(citizen_user) -> str:
    return make_token(citizen_user)


@pytest.fixture
def other_token(other_citizen) -> str:
    return make_token(other_citizen)


@pytest.fixture
def admin_token(admin_user) -> str:
    return make_token(admin_user)


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


# ---------------------------------------------------------------------------
# Issues
# ---------------------------------------------------------------------------
@pytest.fixture
def make_issue(db: AsyncSession) -> Callable[..., Awaitable[Issue]]:
    """Factory inserting an issue directly, bypassing the API."""
    async def _make(
        reporter: User,
        title: str = "Streetlight out",
        description: str = "The lamp at the corner has been dark for a week",
        category: str = "Street Lights",
        status: str = "Pending",
        created_at: datetime | None = None,
        admin_notes: str = "",
    ) -> Issue:
        created = created_at or datetime.now(timezone.utc)
        issue = Issue(
            title=title,
            description=description,
            category=category,
            latitude=12.97,
            longitude=77.59,
            address="MG Road",
            status=status,
            reporter_id=reporter.id,
            reporter_name=reporter.name,
            reporter_email=reporter.email,
            admin_notes=admin_notes,
            created_at=created,
            updated_at=created,
            status_history=[IssueStatusHistory(seq=0, status=status, updated_at=created, updated_by=None)],
        )
        db.add(issue)
        await db.commit()
        return issue

    return _make
