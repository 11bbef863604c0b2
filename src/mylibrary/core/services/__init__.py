"""Core services exports."""

from .credential_service import CredentialService

# Database Service
from .database.db_session import DbSessionService
from .session_authenticator import SessionAuthenticator

# User Services
from .user.user_management import AuthResult, UserManagementService

__all__ = [
    "CredentialService",
    "SessionAuthenticator",
    # User Services
    "AuthResult",
    "UserManagementService",
    # Database Service
    "DbSessionService",
]
