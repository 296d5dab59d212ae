"""Session auth routes.

- POST /login  → username/password → session cookie + user JSON
- POST /logout → revoke the session, clear the cookie
- GET  /api/me → the current caller's account (mounted under /api)
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from laika.auth.dependencies import Caller, get_caller
from laika.auth.sessions import (
    SessionService,
    clear_session_cookie,
    set_session_cookie,
)
from laika.config import settings
from laika.db.engine import get_db
from laika.responses import UTF8JSONResponse
from laika.schemas.user import LoginRequest, UserRead
from laika.services.user_service import UserService

router = APIRouter()
me_router = APIRouter()


@router.post("/login", response_model=UserRead)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    """Check credentials and start a session."""
    user = await UserService(db).authenticate(body.username, body.password)
    token = await SessionService(db).issue(user)

    response = UTF8JSONResponse(UserRead.model_validate(user).model_dump(mode="json"))
    set_session_cookie(response, token)
    return response


@router.post("/logout")
async def logout(request: Request, db: AsyncSession = Depends(get_db)):
    token = request.cookies.get(settings.session_cookie_name)
    if token:
        await SessionService(db).revoke(token)
    response = UTF8JSONResponse({"logged_out": True})
    clear_session_cookie(response)
    return response


@me_router.get("/me", response_model=UserRead)
async def get_me(
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """Get the current authenticated user's account."""
    return await UserService(db).get(caller.username)
