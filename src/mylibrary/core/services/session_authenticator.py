"""Per-request session authentication."""

from loguru import logger

from src.mylibrary.core.errors import (
    MalformedCredentials,
    MissingCredentials,
    UnknownIdentity,
)
from src.mylibrary.core.models.identity import Identity
from src.mylibrary.core.services.credential_service import CredentialService
from src.mylibrary.entities.core.user.repository import UserRepository

BEARER_SCHEME = "bearer"


def parse_bearer_token(authorization_header: str | None) -> str:
    """Extract the token from an ``Authorization: Bearer <token>`` value.

    Raises:
        MissingCredentials: If the header is absent or blank.
        MalformedCredentials: If the value is not exactly a bearer scheme and one token.
    """
    if authorization_header is None or not authorization_header.strip():
        raise MissingCredentials()

    parts = authorization_header.split()
    if len(parts) != 2 or parts[0].lower() != BEARER_SCHEME:
        raise MalformedCredentials()
    return parts[1]


class SessionAuthenticator:
    """Resolve the acting identity of a request from its bearer token."""

    def __init__(self, credential_service: CredentialService, user_repo: UserRepository):
        self._credential_service = credential_service
        self._user_repo = user_repo

    def authenticate(self, authorization_header: str | None) -> Identity:
        token = parse_bearer_token(authorization_header)
        claims = self._credential_service.verify_token(token)

        user = self._user_repo.get(claims.subject)
        if user is None:
            logger.warning("Session token refers to a user that no longer exists")
            raise UnknownIdentity()
        return Identity.from_user(user)
