"""User service — business logic for accounts.

Learn: Service layer separates business logic from HTTP routing.
API routes call services, services call the database. Authorization is
already decided by the time a service method runs; the service enforces
the store invariants (unique username/email, hashed passwords).
"""

import uuid
from typing import Any

import structlog
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from laika.auth.password import hash_password, verify_password
from laika.auth.sessions import SessionService
from laika.db.models import User
from laika.errors import Unauthenticated, UserNotFound, ValidationFailed

logger = structlog.get_logger()

UNIQUE_FIELDS = ("username", "email")


class UserService:
    """CRUD over user accounts."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.sessions = SessionService(db)

    # ─── Helpers ────────────────────────────────────────

    async def _conflicts(
        self, values: dict[str, Any], exclude_id: uuid.UUID | None = None
    ) -> list[str]:
        """Return which of the unique fields in `values` are already taken."""
        wanted = {f: values[f] for f in UNIQUE_FIELDS if values.get(f) is not None}
        if not wanted:
            return []
        q = select(User).where(or_(*(getattr(User, f) == v for f, v in wanted.items())))
        if exclude_id is not None:
            q = q.where(User.id != exclude_id)
        result = await self.db.execute(q)
        taken = set()
        for other in result.scalars().all():
            taken.update(f for f, v in wanted.items() if getattr(other, f) == v)
        return [f for f in UNIQUE_FIELDS if f in taken]

    async def _commit_unique(
        self, values: dict[str, Any], exclude_id: uuid.UUID | None = None
    ) -> None:
        """Commit, translating a unique-constraint race into ValidationFailed."""
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            taken = await self._conflicts(values, exclude_id=exclude_id)
            raise ValidationFailed.duplicate(*(taken or UNIQUE_FIELDS))

    # ─── Queries ────────────────────────────────────────

    async def list_users(self) -> list[User]:
        result = await self.db.execute(select(User).order_by(User.username))
        return list(result.scalars().all())

    async def find(self, username: str) -> User | None:
        result = await self.db.execute(select(User).where(User.username == username))
        return result.scalars().first()

    async def get(self, username: str) -> User:
        user = await self.find(username)
        if user is None:
            raise UserNotFound(username)
        return user

    # ─── Commands ───────────────────────────────────────

    async def create(
        self, username: str, email: str, password: str, admin: bool = False
    ) -> User:
        values = {"username": username, "email": email}
        missing = [
            f for f, v in (("username", username), ("email", email), ("password", password))
            if not v
        ]
        if missing:
            raise ValidationFailed.required(*missing)

        taken = await self._conflicts(values)
        if taken:
            logger.info("user.create_rejected", username=username, duplicate=taken)
            raise ValidationFailed.duplicate(*taken)

        user = User(
            username=username,
            email=email,
            password_hash=hash_password(password),
            admin=admin,
        )
        self.db.add(user)
        await self._commit_unique(values)
        await self.db.refresh(user)
        logger.info("user.created", username=username, admin=admin)
        return user

    async def update(self, username: str, changes: dict[str, Any]) -> User:
        """Apply a partial update. `changes` holds only the fields sent."""
        user = await self.get(username)
        user_id = user.id

        taken = await self._conflicts(changes, exclude_id=user_id)
        if taken:
            logger.info("user.update_rejected", username=username, duplicate=taken)
            raise ValidationFailed.duplicate(*taken)

        for field in ("username", "email", "admin"):
            if field in changes:
                setattr(user, field, changes[field])
        if changes.get("password"):
            user.password_hash = hash_password(changes["password"])

        await self._commit_unique(changes, exclude_id=user_id)
        await self.db.refresh(user)
        logger.info("user.updated", username=user.username, fields=sorted(changes))
        return user

    async def delete(self, username: str) -> None:
        """Hard-delete a user along with every session they hold."""
        user = await self.get(username)
        await self.sessions.revoke_all(user.id)
        await self.db.delete(user)
        await self.db.commit()
        logger.info("user.deleted", username=username)

    async def authenticate(self, username: str, password: str) -> User:
        user = await self.find(username)
        if user is None or not verify_password(password, user.password_hash):
            logger.info("auth.login_failed", username=username)
            raise Unauthenticated("Invalid credentials")
        return user
