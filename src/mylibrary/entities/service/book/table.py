"""Book database table model."""

import sqlalchemy as sa
from sqlmodel import Field

from src.mylibrary.entities._base import EntityTable
from src.mylibrary.entities.service.book.entity import BookStatus


class BookTable(EntityTable, table=True):
    """Database persistence model for books.

    ``owner_id`` cascades on delete, so removing a user removes their books.
    """

    __tablename__ = "books"

    title: str = Field(max_length=255, index=True)
    author: str = Field(max_length=255, index=True)
    genre: str | None = Field(default=None, max_length=100, index=True)
    publication_year: int | None = None
    isbn: str | None = Field(default=None, max_length=20)
    pages: int | None = None
    status: BookStatus = Field(
        default=BookStatus.TO_READ,
        index=True,
        sa_type=sa.Enum(
            BookStatus,
            name="book_status",
            values_callable=lambda members: [m.value for m in members],
        ),
    )
    rating: int | None = None
    notes: str | None = None
    owner_id: str = Field(
        foreign_key="users.id", ondelete="CASCADE", nullable=False, index=True
    )
