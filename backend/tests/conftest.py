import os

# Settings must exist before crewboard modules read them at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import fakeredis
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from crewboard.db.database import Base, get_db
from crewboard.db.database_redis import RedisManager
from crewboard.db.models import user, post, game, chat_data  # noqa: F401
from crewboard.db.models.user import User, UserProfile
from crewboard.core.security import create_access_token, get_password_hash
from crewboard.main import app

TEST_PASSWORD = "password123"

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

@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)

@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session

@pytest.fixture(autouse=True)
def fake_redis(monkeypatch):
    """Pub/sub goes to an in-process fake instead of a Redis server."""
    client = fakeredis.FakeAsyncRedis(server=fakeredis.FakeServer(), decode_responses=True)
    monkeypatch.setattr(RedisManager, "get_client", staticmethod(lambda: client))
    return client

@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()

@pytest.fixture
def make_user(db):
    """Creates an account (and by default a profile) with a chosen id."""
    async def _make_user(user_id, email=None, name=None, is_admin=False, with_profile=True):
        db.add(User(
            id=user_id,
            email=email or f"{user_id}@example.com",
            password=get_password_hash(TEST_PASSWORD),
            is_admin=is_admin,
        ))
        if with_profile:
            db.add(UserProfile(user_id=user_id, display_name=name or user_id.capitalize(), platforms=[]))
        await db.commit()
        return user_id
    return _make_user

@pytest.fixture
def auth_headers():
    def _auth_headers(user_id):
        return {"Authorization": f"Bearer {create_access_token({'sub': user_id})}"}
    return _auth_headers
