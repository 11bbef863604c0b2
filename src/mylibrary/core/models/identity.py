"""Authenticated identity and session token models."""

from typing import Any

from pydantic import BaseModel, Field

from src.mylibrary.entities.core.user.entity import User


class Identity(BaseModel):
    """The caller a request acts on behalf of, resolved from a session token."""

    id: str = Field(description="User identifier")
    username: str = Field(description="Username")
    email: str = Field(description="Email address")
    first_name: str | None = Field(default=None, description="First name")
    last_name: str | None = Field(default=None, description="Last name")

    @classmethod
    def from_user(cls, user: User) -> "Identity":
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
        )


class TokenClaims(BaseModel):
    """Structured representation of session token claims."""

    issuer: str = Field(description="Issuer")
    subject: str = Field(description="Subject (user ID)")
    issued_at: int = Field(description="Issued at")
    expires_at: int = Field(description="Expiration time")
    username: str | None = Field(default=None, description="Username")
    email: str | None = Field(default=None, description="Email address")

    @classmethod
    def from_jwt_payload(cls, payload: dict[str, Any]) -> "TokenClaims":
        return cls(
            issuer=payload.get("iss", ""),
            subject=str(payload["sub"]),
            issued_at=int(payload.get("iat", 0)),
            expires_at=int(payload["exp"]),
            username=payload.get("username"),
            email=payload.get("email"),
        )
