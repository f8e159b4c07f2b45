"""Pytest configuration and shared fixtures for all tests."""

import os
import sys
from pathlib import Path

# Minimal environment for Settings() before any app import
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("ADMIN_USER_IDS", "")
# Tests never reach the real AI provider
os.environ["ANTHROPIC_API_KEY"] = ""

# Add project root to PYTHONPATH
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.models import Base, StairStepConfig, User, Wallet


@pytest.fixture
def mock_session():
    """Mock AsyncSession for tests without a database."""
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.flush = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    session.delete = MagicMock()
    session.refresh = AsyncMock()
    return session


@pytest.fixture
def mock_redis_client():
    """Mock Redis client for lock tests."""
    client = AsyncMock()
    client.get = AsyncMock(return_value=None)
    client.set = AsyncMock(return_value=True)
    client.delete = AsyncMock()
    client.eval = AsyncMock(return_value=1)
    return client


@pytest_asyncio.fixture
async def session_maker():
    """Session factory over a fresh in-memory SQLite database."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_maker):
    """Async session bound to the in-memory database."""
    async with session_maker() as session:
        yield session


@pytest.fixture
def make_user(db_session):
    """Create a user (and an empty wallet) directly in the database."""
    counter = {"n": 0}

    async def _make(referred_by_id: int | None = None, **fields) -> User:
        counter["n"] += 1
        user = User(
            username=fields.pop("username", f"member{counter['n']}"),
            referred_by_id=referred_by_id,
            **fields,
        )
        db_session.add(user)
        await db_session.flush()
        db_session.add(Wallet(user_id=user.id))
        await db_session.commit()
        return user

    return _make


@pytest.fixture
def make_chain(make_user):
    """Create ``length`` users where each one sponsors the next."""

    async def _make(length: int) -> list[User]:
        users: list[User] = []
        for _ in range(length):
            sponsor_id = users[-1].id if users else None
            users.append(await make_user(referred_by_id=sponsor_id))
        return users

    return _make


@pytest.fixture
def make_steps(db_session):
    """Create a stair-step ladder from ``(rate, quota, breakaway)`` tuples."""

    async def _make(*steps: tuple) -> list[StairStepConfig]:
        rows = []
        for number, (rate, quota, breakaway) in enumerate(steps, start=1):
            row = StairStepConfig(
                step_number=number,
                step_name=f"Step {number}",
                commission_percentage=Decimal(rate),
                sales_quota=Decimal(quota),
                breakaway_percentage=Decimal(breakaway),
                months_to_qualify=3,
                qualification_type="personal",
                active=True,
            )
            db_session.add(row)
            rows.append(row)
        await db_session.commit()
        return rows

    return _make
