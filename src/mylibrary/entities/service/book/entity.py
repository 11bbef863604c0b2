"""Entity: Book.

``BookFields`` is the single source of truth for what a stored book may
contain. Both creation and update funnel through it, so bounds checks and
the rating rule (a rating only exists on a book that has been read) are
enforced here and nowhere else.
"""

from datetime import UTC, datetime
from enum import StrEnum
from math import ceil
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from src.mylibrary.entities._base import Entity

MIN_PUBLICATION_YEAR = 1000
MAX_PAGES = 10000
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
TOP_GENRES_LIMIT = 5


class BookStatus(StrEnum):
    TO_READ = "to_read"
    READING = "reading"
    READ = "read"


def max_publication_year() -> int:
    return datetime.now(UTC).year + 1


def blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class BookFields(BaseModel):
    """Validated, coerced book attributes as they will be stored."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    title: str = Field(min_length=1, max_length=255)
    author: str = Field(min_length=1, max_length=255)
    genre: str | None = Field(default=None, max_length=100)
    publication_year: int | None = Field(default=None, ge=MIN_PUBLICATION_YEAR)
    isbn: str | None = Field(default=None, max_length=20)
    pages: int | None = Field(default=None, ge=1, le=MAX_PAGES)
    status: BookStatus = BookStatus.TO_READ
    rating: int | None = Field(default=None, ge=1, le=5)
    notes: str | None = None

    @field_validator(
        "genre", "publication_year", "isbn", "pages", "rating", "notes", mode="before"
    )
    @classmethod
    def _optional_blank_is_absent(cls, value: Any) -> Any:
        return blank_to_none(value)

    @field_validator("status", mode="before")
    @classmethod
    def _status_default(cls, value: Any) -> Any:
        value = blank_to_none(value)
        return BookStatus.TO_READ if value is None else value

    @field_validator("publication_year")
    @classmethod
    def _year_not_in_far_future(cls, value: int | None) -> int | None:
        upper = max_publication_year()
        if value is not None and value > upper:
            raise ValueError(f"Input should be less than or equal to {upper}")
        return value

    @model_validator(mode="after")
    def _rating_requires_read(self) -> "BookFields":
        if self.status != BookStatus.READ:
            self.rating = None
        return self


BOOK_FIELD_NAMES = frozenset(BookFields.model_fields)


class Book(Entity):
    """A book in one user's library."""

    title: str = Field(description="Title")
    author: str = Field(description="Author")
    genre: str | None = Field(default=None, description="Genre")
    publication_year: int | None = Field(default=None, description="Publication year")
    isbn: str | None = Field(default=None, description="ISBN")
    pages: int | None = Field(default=None, description="Number of pages")
    status: BookStatus = Field(default=BookStatus.TO_READ, description="Reading status")
    rating: int | None = Field(default=None, description="Rating from 1 to 5, read books only")
    notes: str | None = Field(default=None, description="Free-form notes")
    owner_id: str = Field(description="Identifier of the owning user")

    def __eq__(self, other: Any) -> bool:
        """Compare books by business attributes, ignoring timestamps."""
        if not isinstance(other, Book):
            return False

        return self.id == other.id and self.fields() == other.fields() and (
            self.owner_id == other.owner_id
        )

    def __hash__(self) -> int:
        return hash((self.id, self.owner_id, self.title, self.author))

    def fields(self) -> dict[str, Any]:
        """The caller-controlled attributes of this book."""
        return self.model_dump(include=set(BOOK_FIELD_NAMES))


class BookQuery(BaseModel):
    """Filters and pagination for listing books."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    search: str | None = Field(default=None, max_length=255)
    status: BookStatus | None = None
    genre: str | None = Field(default=None, max_length=100)
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)

    @field_validator("search", "status", "genre", mode="before")
    @classmethod
    def _blank_filter_is_absent(cls, value: Any) -> Any:
        return blank_to_none(value)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class BookPage(BaseModel):
    """One page of a filtered listing."""

    items: list[Book]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return ceil(self.total / self.limit) if self.total else 0


class GenreCount(BaseModel):
    genre: str
    count: int


class BookStats(BaseModel):
    """Per-owner aggregate counts."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_books: int
    read_books: int
    reading_books: int
    to_read_books: int
    top_genres: list[GenreCount] = Field(default_factory=list)
