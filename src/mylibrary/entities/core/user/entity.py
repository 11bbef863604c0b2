"""User domain entity."""

from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from src.mylibrary.entities._base import Entity

USERNAME_PATTERN = r"^[A-Za-z0-9_]+$"

# bcrypt only looks at the first 72 bytes of its input
PASSWORD_MAX_BYTES = 72


class User(Entity):
    """User entity representing an account holder.

    This is the outward-facing shape of a user: the password hash lives only
    in ``UserTable`` and is never loaded into this model.
    """

    username: str = Field(description="Unique login name")
    email: str = Field(description="Unique email address")
    first_name: str | None = Field(default=None, description="User's first name")
    last_name: str | None = Field(default=None, description="User's last name")

    def __eq__(self, other: Any) -> bool:
        """Compare users by business attributes, ignoring timestamps."""
        if not isinstance(other, User):
            return False

        return (
            self.id == other.id
            and self.username == other.username
            and self.email == other.email
            and self.first_name == other.first_name
            and self.last_name == other.last_name
        )

    def __hash__(self) -> int:
        return hash((self.id, self.username, self.email))


class UserRegistration(BaseModel):
    """Validated input for creating an account.

    Names are accepted as ``first_name``/``last_name`` or ``firstName``/``lastName``.
    The password is taken exactly as typed; every other text field is stripped.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )

    username: str = Field(min_length=3, max_length=50, pattern=USERNAME_PATTERN)
    email: EmailStr
    password: str = Field(min_length=6)
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)

    @field_validator("username", "email", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        return value.lower()

    @field_validator("password")
    @classmethod
    def _password_fits_hash(cls, value: str) -> str:
        if len(value.encode("utf-8")) > PASSWORD_MAX_BYTES:
            raise ValueError(f"Password must be at most {PASSWORD_MAX_BYTES} bytes")
        return value

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def _blank_is_absent(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value
