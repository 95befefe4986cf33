"""Shared fixtures: in-memory database, an account with a token, and an API client."""

import httpx
import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

import kinfit.models  # noqa: F401  registers the tables
from kinfit.db import session_dependency
from kinfit.main import app as api_app
from kinfit.models import User
from kinfit.services.auth import TokenPayload, create_access_token

JOURNAL = """\
Jan 5, 2025 (chest/back)
Bench Press
* 90a x 10 x 3
Lat PD
* 50a x 12 x 3
Duration: 60 minutes
Notes: good pump
______________________________
Jan 7, 2025 (legs)
Squat
* 100a x 5 x 5
Leg Ext
* 40a x 0 x 3
______________________________
Jan 9, 2025 (arms/abs)
Symbolized this one, no sets written down
Curl
* 12e x 10 x 3
"""


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def session(engine):
    async with AsyncSession(engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
async def user(session):
    user = User(email="lifter@example.com", username="lifter", display_name="Lifter")
    session.add(user)
    await session.commit()
    return user


@pytest.fixture
def token(user):
    return create_access_token(TokenPayload(user_id=user.id, email=user.email, username=user.username))


@pytest.fixture
def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def client(session):
    async def _session_override():
        yield session

    api_app.dependency_overrides[session_dependency] = _session_override
    transport = httpx.ASGITransport(app=api_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    api_app.dependency_overrides.clear()


@pytest.fixture
def journal_file(tmp_path):
    path = tmp_path / "journal.txt"
    path.write_text(JOURNAL, encoding="utf-8")
    return path
