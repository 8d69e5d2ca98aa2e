"""
Shared fixtures: in-memory SQLite database, sessions, identities and an
HTTP client bound to the FastAPI app.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import app.db.models  # noqa: F401
from app.core.db import Base, get_db
from app.core.security import create_identity_token
from app.domains.identity.entities import Identity
from app.main import app as fastapi_app


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def owner():
    return Identity(user_id="user_owner", tenant_id="org_acme", name="Ada Lovelace")


@pytest.fixture
def teammate():
    return Identity(user_id="user_teammate", tenant_id="org_acme", name="Grace Hopper")


@pytest.fixture
def outsider():
    return Identity(user_id="user_outsider", tenant_id="org_other", name="Eve")


@pytest.fixture
def auth_headers():
    def _headers(identity: Identity) -> dict:
        return {"Authorization": f"Bearer {create_identity_token(identity)}"}

    return _headers


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    fastapi_app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=fastapi_app), base_url="http://test") as client:
        yield client
    fastapi_app.dependency_overrides.clear()
