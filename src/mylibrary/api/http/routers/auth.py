"""Account registration, login and profile endpoints."""

from typing import Any

from fastapi import APIRouter, Body, Depends
from pydantic import BaseModel, ConfigDict

from src.mylibrary.api.http.deps import get_current_identity, get_user_management_service
from src.mylibrary.api.http.envelope import (
    AuthData,
    AuthEnvelope,
    ProfileData,
    ProfileEnvelope,
    UserOut,
)
from src.mylibrary.core.models.identity import Identity
from src.mylibrary.core.services import AuthResult, UserManagementService

router = APIRouter(prefix="/auth", tags=["auth"])


class LoginRequest(BaseModel):
    """Login body: ``identifier`` is an email or a username.

    ``email`` and ``username`` are accepted as alternatives to ``identifier``.
    """

    model_config = ConfigDict(extra="ignore")

    identifier: str | None = None
    email: str | None = None
    username: str | None = None
    password: str | None = None

    @property
    def resolved_identifier(self) -> str | None:
        return self.identifier or self.email or self.username


def _auth_data(result: AuthResult) -> AuthData:
    return AuthData(user=UserOut.from_user(result.user), token=result.token)


@router.post("/register", response_model=AuthEnvelope, status_code=201)
def register(
    payload: dict[str, Any] = Body(...),
    users: UserManagementService = Depends(get_user_management_service),
) -> AuthEnvelope:
    result = users.register(payload)
    return AuthEnvelope(message="User created", data=_auth_data(result))


@router.post("/login", response_model=AuthEnvelope)
def login(
    body: LoginRequest,
    users: UserManagementService = Depends(get_user_management_service),
) -> AuthEnvelope:
    result = users.login(body.resolved_identifier, body.password)
    return AuthEnvelope(message="Login successful", data=_auth_data(result))


@router.get("/profile", response_model=ProfileEnvelope)
def profile(
    identity: Identity = Depends(get_current_identity),
    users: UserManagementService = Depends(get_user_management_service),
) -> ProfileEnvelope:
    """Return the authenticated caller's account."""
    user = users.get_profile(identity)
    return ProfileEnvelope(data=ProfileData(user=UserOut.from_user(user)))
