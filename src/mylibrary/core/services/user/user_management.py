from collections.abc import Mapping
from typing import Any, NamedTuple

from loguru import logger
from pydantic import ValidationError
from sqlmodel import Session

from src.mylibrary.core.errors import InvalidCredentials, NotFound, ValidationFailed
from src.mylibrary.core.models.identity import Identity
from src.mylibrary.core.services.credential_service import CredentialService
from src.mylibrary.entities.core.user.entity import User, UserRegistration
from src.mylibrary.entities.core.user.repository import UserRepository


class AuthResult(NamedTuple):
    """A user together with a freshly issued session token."""

    user: User
    token: str


class UserManagementService:
    def __init__(self, credential_service: CredentialService, db_session: Session):
        self._credential_service = credential_service
        self._user_repo = UserRepository(db_session)
        self._db_session = db_session

    def register(self, data: Mapping[str, Any]) -> AuthResult:
        """Create an account and sign the new user in.

        Args:
            data: Raw registration fields (username, email, password, first/last name)

        Raises:
            ValidationFailed: If a field is missing or out of bounds
            DuplicateIdentity: If the username or email is taken
        """
        try:
            registration = UserRegistration.model_validate(dict(data))
        except ValidationError as e:
            raise ValidationFailed.from_pydantic(e) from e

        try:
            user = self._user_repo.create(
                username=registration.username,
                email=registration.email,
                password_hash=self._credential_service.hash_password(registration.password),
                first_name=registration.first_name,
                last_name=registration.last_name,
            )
            self._db_session.commit()
        except Exception:
            self._db_session.rollback()
            raise

        logger.info("user.registered", user_id=user.id, username=user.username)
        return AuthResult(user=user, token=self._issue(user))

    def login(self, identifier: str | None, password: str | None) -> AuthResult:
        """Authenticate by email or username.

        An unknown account and a wrong password fail identically.
        """
        identifier = (identifier or "").strip()
        if not identifier or not password:
            fields = [("identifier", identifier), ("password", password)]
            raise ValidationFailed.from_missing(name for name, value in fields if not value)

        if "@" in identifier:
            credentials = self._user_repo.find_credentials(email=identifier)
        else:
            credentials = self._user_repo.find_credentials(username=identifier)

        if credentials is None or not self._credential_service.verify_password(
            password, credentials.password_hash
        ):
            logger.warning("user.login_failed")
            raise InvalidCredentials()

        user = credentials.user
        logger.info("user.logged_in", user_id=user.id)
        return AuthResult(user=user, token=self._issue(user))

    def get_profile(self, identity: Identity) -> User:
        user = self._user_repo.get(identity.id)
        if user is None:
            raise NotFound("User not found")
        return user

    def _issue(self, user: User) -> str:
        return self._credential_service.issue_token(Identity.from_user(user))
