"""User entity module.

This module contains all User-related classes organized by responsibility:
- User: Domain entity (never carries the password hash)
- UserRegistration: Validation rules for new accounts
- UserTable: Database persistence model
- UserRepository: Data access layer (the user directory)
"""

from .entity import User, UserRegistration
from .repository import UserCredentials, UserRepository
from .table import UserTable

__all__ = [
    "User",
    "UserRegistration",
    "UserTable",
    "UserRepository",
    "UserCredentials",
]
