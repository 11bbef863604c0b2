"""FastAPI dependency implementations."""

from __future__ import annotations

from collections.abc import Iterator

from fastapi import Depends, Request
from sqlmodel import Session

from src.mylibrary.api.http.app_data import ApplicationDependencies
from src.mylibrary.core.models.identity import Identity
from src.mylibrary.core.services import (
    CredentialService,
    SessionAuthenticator,
    UserManagementService,
)
from src.mylibrary.entities.core.user import UserRepository
from src.mylibrary.entities.service.book import BookRepository
from src.mylibrary.runtime.config.config_data import ConfigData


def get_app_dependencies(request: Request) -> ApplicationDependencies:
    return request.app.state.app_dependencies


def get_app_config(request: Request) -> ConfigData:
    """Get the configuration the running application was built with."""
    return get_app_dependencies(request).config


def get_db_session(request: Request) -> Iterator[Session]:
    """Yield a database session that is closed once the response is sent."""
    session = get_app_dependencies(request).database_service.get_session()
    try:
        yield session
    finally:
        session.close()


def get_credential_service(request: Request) -> CredentialService:
    """Get the credential service instance."""
    return get_app_dependencies(request).credential_service


def get_user_management_service(
    credential_service: CredentialService = Depends(get_credential_service),
    db_session: Session = Depends(get_db_session),
) -> UserManagementService:
    """Get the User Management service instance."""
    return UserManagementService(credential_service, db_session)


def get_current_identity(
    request: Request,
    db: Session = Depends(get_db_session),
    credential_service: CredentialService = Depends(get_credential_service),
) -> Identity:
    """Authenticate the request using its Bearer token."""
    authenticator = SessionAuthenticator(credential_service, UserRepository(db))
    return authenticator.authenticate(request.headers.get("Authorization"))


def get_book_repository(
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db_session),
) -> BookRepository:
    """Book repository scoped to the authenticated caller."""
    return BookRepository(db, identity.id)
