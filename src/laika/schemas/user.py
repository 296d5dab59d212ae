"""Pydantic schemas for users and login.

Learn: Pydantic v2 models validate request/response data. Separate
"Create"/"Update" schemas (input) from the "Read" schema (output); the
Read schema simply has no password field, so a hash can never leak
into a response.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

USERNAME_PATTERN = r"^[A-Za-z0-9_.-]+$"
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+$"


class UserCreate(BaseModel):
    # Optional in the body: the path segment supplies it when absent
    username: Optional[str] = Field(None, min_length=1, max_length=64, pattern=USERNAME_PATTERN)
    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=1, max_length=128)
    admin: bool = False


class UserUpdate(BaseModel):
    """Partial update: only fields present in the body are applied."""
    username: Optional[str] = Field(None, min_length=1, max_length=64, pattern=USERNAME_PATTERN)
    email: Optional[str] = Field(None, max_length=255, pattern=EMAIL_PATTERN)
    password: Optional[str] = Field(None, min_length=1, max_length=128)
    admin: Optional[bool] = None

    def changes(self) -> dict:
        """Fields the client actually sent, minus explicit nulls."""
        return {
            k: v for k, v in self.model_dump(exclude_unset=True).items()
            if v is not None
        }


class UserRead(BaseModel):
    id: uuid.UUID
    username: str
    email: str
    admin: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class LoginRequest(BaseModel):
    username: str
    password: str
