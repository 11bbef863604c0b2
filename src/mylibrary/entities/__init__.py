"""Entities organised by business concept.

Each entity package contains:
- entity.py: Domain model and validation rules
- table.py: Database persistence model
- repository.py: Data access layer
"""

from .core.user import User, UserRepository, UserTable
from .service.book import Book, BookRepository, BookTable

__all__ = [
    "User",
    "UserTable",
    "UserRepository",
    "Book",
    "BookTable",
    "BookRepository",
]
