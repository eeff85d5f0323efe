"""
Shared fixtures: in-memory SQLite database and an HTTP client bound to the app.
"""

import os

os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("JWT_SECRET", "test-secret-key-that-is-long-enough-for-hs256")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./unused.db")
os.environ.setdefault("CREATE_TABLES_ON_STARTUP", "false")

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from auth.jwt import sign_token
from database.models import Base, User
from database.session import get_db_session
from main import create_app


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def client(session_factory):
    app = create_app()

    async def _test_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = _test_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def make_user(session_factory):
    """Factory fixture: persist a user and return it."""

    async def _make(
        email: str = "jonas@example.com",
        password: str = "pass1234",
        role: str = "user",
        name: str = "Jonas",
    ) -> User:
        async with session_factory() as session:
            user = User(name=name, email=email, role=role)
            user.set_password(password)
            session.add(user)
            await session.commit()
            return user

    return _make


def bearer(user: User) -> dict:
    return {"Authorization": f"Bearer {sign_token(user.user_id)}"}
