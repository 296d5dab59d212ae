"""Domain errors and their HTTP translation.

Learn: Services raise these instead of HTTPException so the business
logic stays HTTP-agnostic (the CLI reuses the same services). The app
factory registers one handler per class that turns them into JSON.

Unauthenticated and Unauthorized share status 401, which existing
clients rely on, but the `error` field tells them apart.
"""

from typing import Optional


class LaikaError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code = 500
    error = "internal_error"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.error, "detail": self.message}


class Unauthenticated(LaikaError):
    """No (valid) session on a protected route, or bad login credentials."""

    status_code = 401
    error = "unauthenticated"

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class Unauthorized(LaikaError):
    """Caller is known but not allowed to touch this resource or field."""

    status_code = 401
    error = "unauthorized"

    def __init__(self, message: str = "Not allowed"):
        super().__init__(message)


class UserNotFound(LaikaError):
    status_code = 404
    error = "not_found"

    def __init__(self, username: str):
        super().__init__(f"User '{username}' not found")
        self.username = username


class ValidationFailed(LaikaError):
    """Missing, malformed or duplicate fields.

    The body keeps the `_message: "Validation failed"` shape existing
    clients check for, with one entry per offending field.
    """

    status_code = 400
    error = "validation_failed"

    def __init__(self, errors: dict[str, dict], message: Optional[str] = None):
        fields = ", ".join(sorted(errors)) or "request"
        super().__init__(message or f"Validation failed: {fields}")
        self.errors = errors

    @classmethod
    def duplicate(cls, *fields: str) -> "ValidationFailed":
        return cls({
            f: {"kind": "unique", "path": f, "message": f"{f} is already taken"}
            for f in fields
        })

    @classmethod
    def required(cls, *fields: str) -> "ValidationFailed":
        return cls({
            f: {"kind": "required", "path": f, "message": f"{f} is required"}
            for f in fields
        })

    def to_dict(self) -> dict:
        return {
            "error": self.error,
            "name": "ValidationError",
            "_message": "Validation failed",
            "message": self.message,
            "errors": self.errors,
        }
