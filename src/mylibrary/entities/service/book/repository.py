"""Book repository.

Every query is scoped to the owner the repository was built for. A book
that belongs to somebody else is indistinguishable from a missing one.
"""

from collections.abc import Mapping
from typing import Any

from loguru import logger
from pydantic import ValidationError
from sqlalchemy import func
from sqlmodel import Session, col, or_, select

from src.mylibrary.core.errors import NotFound, ValidationFailed
from src.mylibrary.entities._base import utcnow
from src.mylibrary.entities.service.book.entity import (
    BOOK_FIELD_NAMES,
    TOP_GENRES_LIMIT,
    Book,
    BookFields,
    BookPage,
    BookQuery,
    BookStats,
    BookStatus,
    GenreCount,
    blank_to_none,
)
from src.mylibrary.entities.service.book.table import BookTable

_LIKE_ESCAPE = "\\"

# An update may change these but never clear them
_NON_NULLABLE_FIELDS = ("title", "author", "status")


def validate_book_fields(data: Mapping[str, Any]) -> BookFields:
    """Validate and coerce raw book attributes.

    Raises:
        ValidationFailed: With one entry per offending field.
    """
    try:
        return BookFields.model_validate(dict(data))
    except ValidationError as exc:
        raise ValidationFailed.from_pydantic(exc) from exc


def parse_book_query(params: Mapping[str, Any]) -> BookQuery:
    """Coerce raw (string) listing parameters into a ``BookQuery``."""
    try:
        return BookQuery.model_validate(
            {key: value for key, value in params.items() if blank_to_none(value) is not None}
        )
    except ValidationError as exc:
        raise ValidationFailed.from_pydantic(exc) from exc


def _like_pattern(term: str) -> str:
    escaped = (
        term.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", f"{_LIKE_ESCAPE}%")
        .replace("_", f"{_LIKE_ESCAPE}_")
    )
    return f"%{escaped}%"


class BookRepository:
    """Data-access layer for one owner's books."""

    def __init__(self, session: Session, owner_id: str) -> None:
        self._session = session
        self._owner_id = owner_id

    @property
    def owner_id(self) -> str:
        return self._owner_id

    def list(self, query: BookQuery | None = None) -> BookPage:
        """Filter, count and paginate the owner's books, newest first.

        Search is case-insensitive as far as the engine's ILIKE goes: SQLite
        folds ASCII letters only, PostgreSQL folds all of Unicode.
        """
        query = query or BookQuery()
        conditions = [col(BookTable.owner_id) == self._owner_id]
        if query.search:
            pattern = _like_pattern(query.search)
            conditions.append(
                or_(
                    col(BookTable.title).ilike(pattern, escape=_LIKE_ESCAPE),
                    col(BookTable.author).ilike(pattern, escape=_LIKE_ESCAPE),
                )
            )
        if query.status is not None:
            conditions.append(col(BookTable.status) == query.status)
        if query.genre:
            conditions.append(col(BookTable.genre) == query.genre)

        total = self._session.exec(
            select(func.count()).select_from(BookTable).where(*conditions)
        ).one()

        statement = (
            select(BookTable)
            .where(*conditions)
            .order_by(col(BookTable.created_at).desc(), col(BookTable.id).desc())
            .offset(query.offset)
            .limit(query.limit)
        )
        rows = self._session.exec(statement).all()
        return BookPage(
            items=[Book.model_validate(row, from_attributes=True) for row in rows],
            total=total,
            page=query.page,
            limit=query.limit,
        )

    def get(self, book_id: str) -> Book:
        """Return one of the owner's books.

        Raises:
            NotFound: If the book does not exist or belongs to another user.
        """
        return Book.model_validate(self._get_row(book_id), from_attributes=True)

    def create(self, data: Mapping[str, Any]) -> Book:
        """Validate ``data`` and store it as a new book of the owner."""
        fields = validate_book_fields(data)
        row = BookTable(**fields.model_dump(), owner_id=self._owner_id)
        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        logger.info("book.created", book_id=row.id, owner_id=self._owner_id)
        return Book.model_validate(row, from_attributes=True)

    def update(self, book_id: str, changes: Mapping[str, Any]) -> Book:
        """Apply a partial update.

        Only keys present in ``changes`` are replaced. The merged record is
        validated as a whole, so the rating rule follows the resulting status.

        Raises:
            NotFound: If the book does not exist or belongs to another user.
            ValidationFailed: If a required field is supplied as null or blank.
        """
        row = self._get_row(book_id)
        current = {name: getattr(row, name) for name in BOOK_FIELD_NAMES}
        supplied = {k: v for k, v in changes.items() if k in BOOK_FIELD_NAMES}
        cleared = [
            name
            for name in _NON_NULLABLE_FIELDS
            if name in supplied and blank_to_none(supplied[name]) is None
        ]
        if cleared:
            raise ValidationFailed.from_missing(cleared)
        fields = validate_book_fields(current | supplied)

        for name, value in fields.model_dump().items():
            setattr(row, name, value)
        row.updated_at = utcnow()
        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        logger.info(
            "book.updated",
            book_id=row.id,
            owner_id=self._owner_id,
            changed=sorted(supplied),
        )
        return Book.model_validate(row, from_attributes=True)

    def delete(self, book_id: str) -> None:
        """Permanently remove one of the owner's books."""
        row = self._get_row(book_id)
        self._session.delete(row)
        self._session.flush()
        logger.info("book.deleted", book_id=book_id, owner_id=self._owner_id)

    def stats(self) -> BookStats:
        """Counts by status plus the owner's most common genres."""
        status_counts = dict(
            self._session.exec(
                select(BookTable.status, func.count())
                .where(col(BookTable.owner_id) == self._owner_id)
                .group_by(col(BookTable.status))
            ).all()
        )
        read = status_counts.get(BookStatus.READ, 0)
        reading = status_counts.get(BookStatus.READING, 0)
        to_read = status_counts.get(BookStatus.TO_READ, 0)

        genre_count = func.count(col(BookTable.id))
        genre_rows = self._session.exec(
            select(BookTable.genre, genre_count)
            .where(
                col(BookTable.owner_id) == self._owner_id,
                col(BookTable.genre).is_not(None),
            )
            .group_by(col(BookTable.genre))
            .order_by(genre_count.desc(), col(BookTable.genre).asc())
            .limit(TOP_GENRES_LIMIT)
        ).all()

        return BookStats(
            total_books=read + reading + to_read,
            read_books=read,
            reading_books=reading,
            to_read_books=to_read,
            top_genres=[GenreCount(genre=genre, count=count) for genre, count in genre_rows],
        )

    def _get_row(self, book_id: str) -> BookTable:
        statement = select(BookTable).where(
            col(BookTable.id) == book_id,
            col(BookTable.owner_id) == self._owner_id,
        )
        row = self._session.exec(statement).first()
        if row is None:
            raise NotFound("Book not found")
        return row
