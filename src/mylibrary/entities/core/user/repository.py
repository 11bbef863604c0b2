"""User repository: the user directory."""

from typing import NamedTuple

from loguru import logger
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, or_, select

from src.mylibrary.core.errors import DuplicateIdentity
from src.mylibrary.entities.core.user.entity import User
from src.mylibrary.entities.core.user.table import UserTable

_DUPLICATE_MESSAGES = {
    "username": "Username is already taken",
    "email": "Email is already registered",
}


class UserCredentials(NamedTuple):
    """A user together with the stored password hash, for login only."""

    user: User
    password_hash: str


class UserRepository:
    """Data-access layer for users."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, user_id: str) -> User | None:
        row = self._session.get(UserTable, user_id)
        if row is None:
            return None
        return User.model_validate(row, from_attributes=True)

    def find_by_username_or_email(
        self, username: str | None = None, email: str | None = None
    ) -> User | None:
        row = self._find_row(username=username, email=email)
        if row is None:
            return None
        return User.model_validate(row, from_attributes=True)

    def find_credentials(
        self, username: str | None = None, email: str | None = None
    ) -> UserCredentials | None:
        row = self._find_row(username=username, email=email)
        if row is None:
            return None
        return UserCredentials(
            user=User.model_validate(row, from_attributes=True),
            password_hash=row.password_hash,
        )

    def create(
        self,
        username: str,
        email: str,
        password_hash: str,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> User:
        """Insert a new user.

        Raises:
            DuplicateIdentity: If the username or email is already registered.
        """
        taken = self._taken_field(username, email)
        if taken is not None:
            raise DuplicateIdentity(taken, _DUPLICATE_MESSAGES[taken])

        row = UserTable(
            username=username,
            email=email,
            password_hash=password_hash,
            first_name=first_name,
            last_name=last_name,
        )
        self._session.add(row)
        try:
            self._session.flush()
        except IntegrityError as exc:
            # Lost a race with a concurrent registration
            self._session.rollback()
            logger.warning("Unique constraint violated while creating user {}", username)
            taken = self._taken_field(username, email)
            if taken is None:
                raise DuplicateIdentity("username") from exc
            raise DuplicateIdentity(taken, _DUPLICATE_MESSAGES[taken]) from exc
        self._session.refresh(row)
        return User.model_validate(row, from_attributes=True)

    def delete(self, user_id: str) -> bool:
        """Delete a user; their books go with them through the foreign key cascade."""
        row = self._session.get(UserTable, user_id)
        if row is None:
            return False
        self._session.delete(row)
        self._session.flush()
        return True

    def list_with_book_counts(self) -> list[tuple[User, int]]:
        from src.mylibrary.entities.service.book.table import BookTable

        statement = (
            select(UserTable, func.count(col(BookTable.id)))
            .join(BookTable, col(BookTable.owner_id) == col(UserTable.id), isouter=True)
            .group_by(col(UserTable.id))
            .order_by(col(UserTable.username))
        )
        return [
            (User.model_validate(row, from_attributes=True), count)
            for row, count in self._session.exec(statement).all()
        ]

    def _taken_field(self, username: str, email: str) -> str | None:
        """Name of the unique field already held by another user, if any."""
        if self._find_row(username=username) is not None:
            return "username"
        if self._find_row(email=email) is not None:
            return "email"
        return None

    def _find_row(
        self, username: str | None = None, email: str | None = None
    ) -> UserTable | None:
        conditions = []
        if username:
            conditions.append(col(UserTable.username) == username)
        if email:
            conditions.append(col(UserTable.email) == email.lower())
        if not conditions:
            return None
        statement = select(UserTable).where(or_(*conditions))
        return self._session.exec(statement).first()
