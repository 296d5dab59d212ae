"""FastAPI auth dependencies.

Learn: These are used as Depends() in route handlers to extract
and validate the current caller from the request's session cookie.
The resolved Caller is passed into handlers explicitly; nothing reads
identity from global state.
"""

import uuid
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from laika.auth.sessions import SessionService
from laika.config import settings
from laika.db.engine import get_db
from laika.errors import Unauthenticated


@dataclass(frozen=True)
class Caller:
    """The authenticated identity making the request."""

    user_id: uuid.UUID
    username: str
    admin: bool = False


async def get_caller_optional(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> Optional[Caller]:
    """Resolve the session cookie to a Caller (None when anonymous).

    Learn: This is the "soft" auth dependency, for routes like signup that
    work for anyone but behave differently for admins.
    """
    token = request.cookies.get(settings.session_cookie_name)
    if not token:
        return None
    user = await SessionService(db).resolve(token)
    if user is None:
        return None
    return Caller(user_id=user.id, username=user.username, admin=user.admin)


async def get_caller(
    caller: Optional[Caller] = Depends(get_caller_optional),
) -> Caller:
    """Resolve the current caller (required, 401 if no session)."""
    if caller is None:
        raise Unauthenticated()
    return caller


async def requested_fields(request: Request) -> set[str]:
    """Top-level keys of the JSON body, read before schema validation.

    Learn: FastAPI solves dependencies before validating the body model,
    so authorization decisions that depend on *which* fields were sent
    (the `admin` flag) run first: a non-admin touching `admin` gets 401
    even if the rest of the body is invalid.
    """
    if not await request.body():
        return set()
    try:
        payload = await request.json()
    except ValueError:
        return set()
    return set(payload) if isinstance(payload, dict) else set()
