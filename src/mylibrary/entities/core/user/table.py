"""User database table model."""

from sqlmodel import Field

from src.mylibrary.entities._base import EntityTable


class UserTable(EntityTable, table=True):
    """Database persistence model for users."""

    __tablename__ = "users"

    username: str = Field(max_length=50, unique=True, index=True)
    email: str = Field(max_length=255, unique=True, index=True)
    password_hash: str = Field(max_length=255)
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
