"""Session auth tests — login, logout, /api/me, expiry."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select

from laika.config import settings
from laika.db.models import Session


@pytest.mark.asyncio
async def test_login_sets_session_cookie(client, seed_user):
    await seed_user("apitea", "hello@laika.gallery", "elpasswordodeapitea")

    r = await client.post(
        "/login", json={"username": "apitea", "password": "elpasswordodeapitea"}
    )
    assert r.status_code == 200
    assert r.json()["username"] == "apitea"
    assert "password" not in r.json()
    assert settings.session_cookie_name in r.cookies

    set_cookie = r.headers["set-cookie"].lower()
    assert "httponly" in set_cookie
    assert "samesite=lax" in set_cookie


@pytest.mark.asyncio
async def test_login_wrong_password(client, seed_user):
    await seed_user("apitea", "hello@laika.gallery", "elpasswordodeapitea")

    r = await client.post("/login", json={"username": "apitea", "password": "nope"})
    assert r.status_code == 401
    assert r.json()["error"] == "unauthenticated"
    assert settings.session_cookie_name not in r.cookies


@pytest.mark.asyncio
async def test_login_unknown_user(client):
    r = await client.post("/login", json={"username": "nobody", "password": "whatever"})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_login_missing_password(client):
    r = await client.post("/login", json={"username": "apitea"})
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_me(user_client):
    r = await user_client.get("/api/me")
    assert r.status_code == 200
    assert r.json()["username"] == "apitea"


@pytest.mark.asyncio
async def test_me_without_session(client):
    r = await client.get("/api/me")
    assert r.status_code == 401
    assert r.headers["WWW-Authenticate"] == "Session"


@pytest.mark.asyncio
async def test_logout_ends_session(user_client, db_session):
    token = user_client.cookies.get(settings.session_cookie_name)
    assert token

    r = await user_client.post("/logout")
    assert r.status_code == 200
    assert r.json()["logged_out"] is True

    # Even replaying the old cookie doesn't work any more
    user_client.cookies.set(settings.session_cookie_name, token)
    r = await user_client.get("/api/me")
    assert r.status_code == 401

    result = await db_session.execute(select(Session).where(Session.token == token))
    assert result.scalars().first() is None


@pytest.mark.asyncio
async def test_logout_without_session(client):
    r = await client.post("/logout")
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_expired_session_is_anonymous(client, seed_user, db_session):
    user = await seed_user("apitea", "hello@laika.gallery", "elpasswordodeapitea")
    db_session.add(Session(
        token="stale-token",
        user_id=user.id,
        expires_at=datetime.now(timezone.utc) - timedelta(minutes=5),
    ))
    await db_session.commit()

    client.cookies.set(settings.session_cookie_name, "stale-token")
    r = await client.get("/api/users/apitea")
    assert r.status_code == 401
    assert r.json()["error"] == "unauthenticated"

    # Lookup purged the stale row
    db_session.expire_all()
    result = await db_session.execute(select(Session).where(Session.token == "stale-token"))
    assert result.scalars().first() is None


@pytest.mark.asyncio
async def test_unknown_session_token(client):
    client.cookies.set(settings.session_cookie_name, "made-up")
    r = await client.get("/api/me")
    assert r.status_code == 401
