"""Pytest configuration and fixtures."""
import os

# Set test env BEFORE any imports that use config
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ.pop("REDIS_URL", None)

from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from protectionpro.config import settings
from protectionpro.db import models  # noqa: F401
from protectionpro.db import session as db_session
from protectionpro.db.base import Base
from protectionpro.db.models.content import PostType
from protectionpro.main import app
from protectionpro.services.auth import form_token
from protectionpro.services.content import ContentService
from protectionpro.services.user import UserService

ADMIN_PASSWORD = "testpass123"


@pytest.fixture
async def session_maker(tmp_path, monkeypatch):
    """Fresh sqlite database per test, shared by the app and the test."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    monkeypatch.setattr(db_session, "async_session_maker", maker)
    yield maker
    await engine.dispose()


@pytest.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
async def client(session_maker):
    """Async HTTP client for the site."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
async def admin_user(db):
    return await UserService(db).create_user("admin", ADMIN_PASSWORD, is_admin=True)


@pytest.fixture
async def admin_client(client, admin_user):
    """Client logged in as admin."""
    r = await client.post(
        "/admin/login",
        data={"username": "admin", "password": ADMIN_PASSWORD},
    )
    assert r.status_code == 302, f"Login failed: {r.text}"
    token = r.cookies[settings.session_cookie_name]
    client.cookies.clear()
    client.cookies.set(settings.session_cookie_name, token)
    return client


@pytest.fixture
def admin_form_token(admin_client):
    """Hidden form token the settings page hands to the logged-in admin."""
    return form_token(admin_client.cookies[settings.session_cookie_name])


@pytest.fixture
def make_item(db):
    """Create published content; items get increasing publish dates."""
    counter = {"n": 0}
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)

    async def _make(post_type=PostType.PAGE, title="Item", **kwargs):
        counter["n"] += 1
        kwargs.setdefault("published_at", base + timedelta(days=counter["n"]))
        return await ContentService(db).create_item(post_type=post_type, title=title, **kwargs)

    return _make
