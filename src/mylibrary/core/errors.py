"""Domain error taxonomy.

Every failure a service can report is a ``MyLibraryError`` subclass tagged
with an ``ErrorKind``. The HTTP layer maps kinds to status codes and
envelopes in one place (see ``STATUS_BY_KIND``).
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ValidationError


class ErrorKind(StrEnum):
    VALIDATION_FAILED = "validation_failed"
    CONFLICT = "conflict"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    INTERNAL = "internal"


STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION_FAILED: 400,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.INTERNAL: 500,
}

_unmapped = set(ErrorKind) - set(STATUS_BY_KIND)
if _unmapped:
    raise RuntimeError(f"ErrorKind without HTTP status: {sorted(_unmapped)}")


class FieldError(BaseModel):
    """A single field-level validation message."""

    field: str
    message: str


class MyLibraryError(Exception):
    """Base class for every error surfaced to API callers."""

    kind: ErrorKind = ErrorKind.INTERNAL
    public_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.public_message
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]

    def outward_message(self) -> str:
        """Message safe to show to the caller."""
        return self.message


class ConfigurationError(MyLibraryError):
    """Fatal misconfiguration detected at startup."""


class ValidationFailed(MyLibraryError):
    kind = ErrorKind.VALIDATION_FAILED
    public_message = "Invalid data"

    def __init__(self, errors: list[FieldError], message: str | None = None) -> None:
        super().__init__(message)
        self.errors = errors

    @classmethod
    def from_missing(cls, fields: Iterable[str]) -> ValidationFailed:
        return cls([FieldError(field=name, message="Field required") for name in fields])

    @classmethod
    def from_pydantic(cls, exc: ValidationError) -> ValidationFailed:
        return cls(field_errors(exc.errors()))


def field_errors(errors: list[dict[str, Any]] | Any) -> list[FieldError]:
    """Flatten pydantic/FastAPI error dicts into ``FieldError`` entries."""
    result = []
    for error in errors:
        loc = [
            str(part)
            for part in error.get("loc", ())
            if part not in ("body", "query", "path")
        ]
        message = str(error.get("msg", "Invalid value"))
        # pydantic prefixes messages raised from custom validators
        message = message.removeprefix("Value error, ")
        result.append(FieldError(field=".".join(loc), message=message))
    return result


class Conflict(MyLibraryError):
    kind = ErrorKind.CONFLICT
    public_message = "Resource already exists"


class DuplicateIdentity(Conflict):
    public_message = "A user with this username or email already exists"

    def __init__(self, field: str, message: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class NotFound(MyLibraryError):
    kind = ErrorKind.NOT_FOUND
    public_message = "Not found"


class AuthenticationError(MyLibraryError):
    """Session authentication failure.

    Subclasses keep the precise reason for logs; callers only ever see the
    generic message.
    """

    kind = ErrorKind.UNAUTHORIZED
    public_message = "Unauthorized"

    def outward_message(self) -> str:
        return AuthenticationError.public_message


class MissingCredentials(AuthenticationError):
    public_message = "Missing authorization header"


class MalformedCredentials(AuthenticationError):
    public_message = "Malformed bearer credentials"


class TokenInvalid(AuthenticationError):
    public_message = "Invalid token"


class TokenExpired(AuthenticationError):
    public_message = "Token expired"


class UnknownIdentity(AuthenticationError):
    public_message = "Token subject does not exist"


class InvalidCredentials(AuthenticationError):
    """Login failure; identical for an unknown account and a wrong password."""

    public_message = "Invalid credentials"

    def outward_message(self) -> str:
        return InvalidCredentials.public_message
