"""Entity package: Book."""

from .entity import (
    Book,
    BookFields,
    BookPage,
    BookQuery,
    BookStats,
    BookStatus,
    GenreCount,
)
from .repository import BookRepository, parse_book_query, validate_book_fields
from .table import BookTable

__all__ = [
    "Book",
    "BookFields",
    "BookPage",
    "BookQuery",
    "BookStats",
    "BookStatus",
    "GenreCount",
    "BookRepository",
    "BookTable",
    "parse_book_query",
    "validate_book_fields",
]
