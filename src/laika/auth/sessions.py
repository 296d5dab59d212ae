"""Server-side sessions.

Learn: The cookie only holds a random token; the sessions table maps it to
a user id and an expiry. Expiry is checked in SQL (`expires_at > now`) so
the comparison behaves the same on Postgres and SQLite. Expired rows are
deleted the first time someone presents them.
"""

import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import structlog
from fastapi import Response
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from laika.config import settings
from laika.db.models import Session, User

logger = structlog.get_logger()


class SessionService:
    """Issue, resolve and revoke login sessions."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def issue(self, user: User) -> str:
        token = secrets.token_urlsafe(32)
        ttl = max(60, settings.session_ttl_seconds)
        self.db.add(Session(
            token=token,
            user_id=user.id,
            expires_at=datetime.now(timezone.utc) + timedelta(seconds=ttl),
        ))
        await self.db.commit()
        logger.info("session.issued", user_id=str(user.id), username=user.username)
        return token

    async def resolve(self, token: str) -> Optional[User]:
        """Return the user behind a live session token, or None."""
        if not token:
            return None
        now = datetime.now(timezone.utc)
        result = await self.db.execute(
            select(User)
            .join(Session, Session.user_id == User.id)
            .where(Session.token == token, Session.expires_at > now)
        )
        user = result.scalars().first()
        if user is None:
            # Unknown or expired: drop the row if it's lingering
            await self.db.execute(
                delete(Session).where(Session.token == token, Session.expires_at <= now)
            )
            await self.db.commit()
        return user

    async def revoke(self, token: str) -> None:
        if not token:
            return
        await self.db.execute(delete(Session).where(Session.token == token))
        await self.db.commit()
        logger.info("session.revoked")

    async def revoke_all(self, user_id: uuid.UUID) -> None:
        """Remove every session of a user (no commit, part of a larger write)."""
        await self.db.execute(delete(Session).where(Session.user_id == user_id))


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        settings.session_cookie_name,
        token,
        httponly=True,
        secure=settings.secure_cookies,
        samesite="lax",
        max_age=settings.session_ttl_seconds,
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(settings.session_cookie_name, path="/")
