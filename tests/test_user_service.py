"""UserService tests — store invariants without going through HTTP."""

import pytest
from sqlalchemy import func, select

from laika.auth.password import verify_password
from laika.auth.sessions import SessionService
from laika.db.models import Session
from laika.errors import Unauthenticated, UserNotFound, ValidationFailed
from laika.services.user_service import UserService


@pytest.mark.asyncio
async def test_create_hashes_password(db_session):
    user = await UserService(db_session).create(
        username="dynamik", email="dynamik@laika.gallery", password="secret"
    )
    assert user.password_hash != "secret"
    assert user.password_hash.startswith("$2")
    assert verify_password("secret", user.password_hash)
    assert user.admin is False


@pytest.mark.asyncio
async def test_create_reports_every_duplicate_field(db_session):
    svc = UserService(db_session)
    await svc.create(username="dynamik", email="dynamik@laika.gallery", password="pw")

    with pytest.raises(ValidationFailed) as exc:
        await svc.create(username="dynamik", email="dynamik@laika.gallery", password="pw")
    assert set(exc.value.errors) == {"username", "email"}
    assert exc.value.to_dict()["_message"] == "Validation failed"


@pytest.mark.asyncio
async def test_create_requires_fields(db_session):
    with pytest.raises(ValidationFailed) as exc:
        await UserService(db_session).create(username="x", email="", password="")
    assert set(exc.value.errors) == {"email", "password"}
    assert exc.value.errors["email"]["kind"] == "required"


@pytest.mark.asyncio
async def test_update_duplicate_username(db_session):
    svc = UserService(db_session)
    await svc.create(username="a", email="a@laika.gallery", password="pw")
    await svc.create(username="b", email="b@laika.gallery", password="pw")

    with pytest.raises(ValidationFailed) as exc:
        await svc.update("b", {"username": "a"})
    assert list(exc.value.errors) == ["username"]


@pytest.mark.asyncio
async def test_get_unknown(db_session):
    with pytest.raises(UserNotFound):
        await UserService(db_session).get("ghost")


@pytest.mark.asyncio
async def test_authenticate(db_session):
    svc = UserService(db_session)
    await svc.create(username="a", email="a@laika.gallery", password="pw")

    user = await svc.authenticate("a", "pw")
    assert user.username == "a"
    with pytest.raises(Unauthenticated):
        await svc.authenticate("a", "wrong")
    with pytest.raises(Unauthenticated):
        await svc.authenticate("ghost", "pw")


@pytest.mark.asyncio
async def test_delete_removes_sessions(db_session):
    svc = UserService(db_session)
    user = await svc.create(username="a", email="a@laika.gallery", password="pw")
    sessions = SessionService(db_session)
    await sessions.issue(user)
    await sessions.issue(user)

    await svc.delete("a")

    count = await db_session.scalar(select(func.count()).select_from(Session))
    assert count == 0
    assert await svc.find("a") is None


@pytest.mark.asyncio
async def test_create_race_reported_as_duplicate(db_session, monkeypatch):
    """A duplicate that slips past the pre-check is caught by the unique constraint."""
    svc = UserService(db_session)
    await svc.create(username="a", email="a@laika.gallery", password="pw")

    real_conflicts = UserService._conflicts
    calls = []

    async def miss_first(self, values, exclude_id=None):
        calls.append(values)
        if len(calls) == 1:
            return []
        return await real_conflicts(self, values, exclude_id=exclude_id)

    monkeypatch.setattr(UserService, "_conflicts", miss_first)

    with pytest.raises(ValidationFailed) as exc:
        await svc.create(username="b", email="a@laika.gallery", password="pw")
    assert list(exc.value.errors) == ["email"]
    assert exc.value.errors["email"]["kind"] == "unique"
    assert len(calls) == 2

    assert await svc.find("b") is None
