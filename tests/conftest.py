"""
Pytest configuration and fixtures.
"""

from decimal import Decimal
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from src.models import Base, SalesmanStage, User, UserRole

# Test database URL (use SQLite for tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def db_engine():
    """Create test database engine."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    """Create test database session."""
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session


@pytest.fixture
def make_user(db_session):
    """Factory inserting an enabled user; returns the flushed row."""
    counter = {"n": 0}

    async def _make(role: UserRole, referrer: User = None, **kwargs) -> User:
        counter["n"] += 1
        defaults = {
            "username": f"user{counter['n']}",
            "password_hash": "x",
            "name": f"{role.value} {counter['n']}",
            "role": role,
            "salesman_stage": SalesmanStage.BUSINESS_PROMOTER if role == UserRole.SALESMAN else None,
            "referrer_id": referrer.id if referrer else None,
            "total_income": Decimal("0"),
            "is_disabled": False,
        }
        defaults.update(kwargs)
        user = User(**defaults)
        db_session.add(user)
        await db_session.flush()
        return user

    return _make


@pytest_asyncio.fixture
async def client(db_session):
    """HTTP client against the app, sharing the test session."""
    from httpx import ASGITransport, AsyncClient

    from src.db import get_db
    from src.main import app

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http:
        yield http
    app.dependency_overrides.clear()
