"""Test fixtures — a fresh SQLite database per test.

Learn: Settings are read at import time, so the environment is pointed at
a throwaway SQLite file (and a cheap bcrypt work factor) *before* laika is
imported. Each test that asks for `db` gets every table dropped and
recreated, and the engine's pool is disposed afterwards so no connection
outlives the test's event loop.

HTTP clients are httpx.AsyncClient over ASGITransport; their cookie jar
carries the session cookie between requests, like a browser would.
"""

import os
import tempfile

_DB_DIR = tempfile.mkdtemp(prefix="laika-tests-")
os.environ["LAIKA_DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR}/laika.db"
os.environ["LAIKA_BCRYPT_ROUNDS"] = "4"
os.environ["LAIKA_ENVIRONMENT"] = "test"

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from laika.db.engine import async_session_factory, engine  # noqa: E402
from laika.db.models import Base  # noqa: E402
from laika.main import app  # noqa: E402
from laika.services.user_service import UserService  # noqa: E402


def _client() -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest_asyncio.fixture()
async def db():
    """Empty schema for this test."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()


@pytest_asyncio.fixture()
async def db_session(db):
    """A session for arranging data / inspecting state outside HTTP."""
    async with async_session_factory() as session:
        yield session


@pytest_asyncio.fixture()
async def seed_user(db):
    """Create users straight through the service (no HTTP, no policy)."""
    async def _seed(username: str, email: str, password: str, admin: bool = False):
        async with async_session_factory() as session:
            return await UserService(session).create(
                username=username, email=email, password=password, admin=admin
            )
    return _seed


@pytest_asyncio.fixture()
async def client(db):
    """Anonymous HTTP client."""
    async with _client() as ac:
        yield ac


@pytest_asyncio.fixture()
async def user_client(seed_user):
    """Client logged in as the regular user 'apitea'."""
    await seed_user("apitea", "hello@laika.gallery", "elpasswordodeapitea")
    async with _client() as ac:
        r = await ac.post(
            "/login", json={"username": "apitea", "password": "elpasswordodeapitea"}
        )
        assert r.status_code == 200, r.text
        yield ac


@pytest_asyncio.fixture()
async def admin_client(seed_user):
    """Client logged in as the admin 'admin'."""
    await seed_user("admin", "admin@laika.gallery", "admin", admin=True)
    async with _client() as ac:
        r = await ac.post("/login", json={"username": "admin", "password": "admin"})
        assert r.status_code == 200, r.text
        yield ac
