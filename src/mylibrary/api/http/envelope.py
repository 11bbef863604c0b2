"""Uniform response envelopes.

Success: ``{"success": true, "message": ..., "data": ...}``
Failure: ``{"success": false, "message": ..., "errors": [{field, message}]}``
"""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from starlette.responses import JSONResponse

from src.mylibrary.core.errors import FieldError, MyLibraryError, ValidationFailed
from src.mylibrary.entities.core.user.entity import User
from src.mylibrary.entities.service.book.entity import Book, BookPage, BookStats

DataT = TypeVar("DataT")


class SuccessEnvelope(BaseModel, Generic[DataT]):
    success: bool = True
    message: str | None = None
    data: DataT


class ErrorEnvelope(BaseModel):
    success: bool = False
    message: str
    errors: list[FieldError] | None = None
    error: str | None = None


class UserOut(BaseModel):
    """Outward user shape; never carries the password hash."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    username: str
    email: str
    first_name: str | None = None
    last_name: str | None = None

    @classmethod
    def from_user(cls, user: User) -> "UserOut":
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
        )


class AuthData(BaseModel):
    user: UserOut
    token: str


class ProfileData(BaseModel):
    user: UserOut


class BookListData(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    books: list[Book]
    total: int
    page: int
    limit: int
    total_pages: int

    @classmethod
    def from_page(cls, page: BookPage) -> "BookListData":
        return cls(
            books=page.items,
            total=page.total,
            page=page.page,
            limit=page.limit,
            total_pages=page.total_pages,
        )


class DeletedData(BaseModel):
    id: str


# Response models for the routers
AuthEnvelope = SuccessEnvelope[AuthData]
ProfileEnvelope = SuccessEnvelope[ProfileData]
BookListEnvelope = SuccessEnvelope[BookListData]
BookEnvelope = SuccessEnvelope[Book]
StatsEnvelope = SuccessEnvelope[BookStats]
DeletedEnvelope = SuccessEnvelope[DeletedData]


def error_response(
    status_code: int,
    message: str,
    errors: list[FieldError] | None = None,
    error: str | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    envelope = ErrorEnvelope(message=message, errors=errors, error=error)
    return JSONResponse(
        status_code=status_code,
        content=envelope.model_dump(exclude_none=True),
        headers=headers,
    )


def domain_error_response(exc: MyLibraryError) -> JSONResponse:
    """Map a domain error to its status code and failure envelope."""
    errors = exc.errors if isinstance(exc, ValidationFailed) else None
    return error_response(exc.status_code, exc.outward_message(), errors=errors)


def internal_error_response(
    exc: BaseException, expose_detail: bool, headers: dict[str, str] | None = None
) -> JSONResponse:
    return error_response(
        500,
        "Internal server error",
        error=str(exc) if expose_detail else None,
        headers=headers,
    )

