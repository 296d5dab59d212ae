"""User resource API routes.

Learn: Routes handle HTTP concerns, the policy decides who may do what,
the service does the work. Each protected route depends on an
`authorize_*` dependency that resolves the caller and applies
laika.auth.policy before the handler body runs.

- POST   /api/users/{username} → sign up (anyone; admins may set `admin`)
- GET    /api/users            → list all users (admin)
- GET    /api/users/{username} → read (self or admin)
- PUT    /api/users/{username} → partial update (self or admin)
- DELETE /api/users/{username} → delete (self or admin)
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from laika.auth import policy
from laika.auth.dependencies import (
    Caller,
    get_caller,
    get_caller_optional,
    requested_fields,
)
from laika.auth.sessions import clear_session_cookie
from laika.db.engine import get_db
from laika.errors import Unauthorized, ValidationFailed
from laika.responses import UTF8JSONResponse
from laika.schemas.user import USERNAME_PATTERN, UserCreate, UserRead, UserUpdate
from laika.services.user_service import UserService

router = APIRouter(prefix="/users")


def _svc(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


async def authorize_target(
    username: str,
    caller: Caller = Depends(get_caller),
    fields: set[str] = Depends(requested_fields),
) -> Caller:
    if not policy.allow(caller, username, fields):
        if policy.ADMIN_FIELD in fields and caller.username == username:
            raise Unauthorized("Changing 'admin' requires admin privileges")
        raise Unauthorized(f"Not allowed to access user '{username}'")
    return caller


async def authorize_collection(caller: Caller = Depends(get_caller)) -> Caller:
    if not policy.allow(caller, None):
        raise Unauthorized("Listing users requires admin privileges")
    return caller


async def authorize_signup(
    caller: Optional[Caller] = Depends(get_caller_optional),
    fields: set[str] = Depends(requested_fields),
) -> Optional[Caller]:
    if policy.ADMIN_FIELD in fields and not policy.can_grant_admin(caller):
        raise Unauthorized("Setting 'admin' requires admin privileges")
    return caller


@router.post("/{username}", response_model=UserRead)
async def create_user(
    body: UserCreate,
    username: str = Path(..., min_length=1, max_length=64, pattern=USERNAME_PATTERN),
    caller: Optional[Caller] = Depends(authorize_signup),
    svc: UserService = Depends(_svc),
):
    """Create a user. The path segment names the account."""
    if body.username is not None and body.username != username:
        raise ValidationFailed({
            "username": {
                "kind": "mismatch",
                "path": "username",
                "message": "username in body does not match the URL",
            }
        })
    return await svc.create(
        username=username,
        email=body.email,
        password=body.password,
        admin=body.admin,
    )


@router.get("", response_model=list[UserRead])
async def list_users(
    caller: Caller = Depends(authorize_collection),
    svc: UserService = Depends(_svc),
):
    return await svc.list_users()


@router.get("/{username}", response_model=UserRead)
async def get_user(
    username: str,
    caller: Caller = Depends(authorize_target),
    svc: UserService = Depends(_svc),
):
    return await svc.get(username)


@router.put("/{username}", response_model=UserRead)
async def update_user(
    username: str,
    body: UserUpdate,
    caller: Caller = Depends(authorize_target),
    svc: UserService = Depends(_svc),
):
    return await svc.update(username, body.changes())


@router.delete("/{username}")
async def delete_user(
    username: str,
    caller: Caller = Depends(authorize_target),
    svc: UserService = Depends(_svc),
):
    """Delete a user. Deleting yourself also ends your session."""
    await svc.delete(username)
    response = UTF8JSONResponse({"deleted": True, "username": username})
    if caller.username == username:
        clear_session_cookie(response)
    return response
