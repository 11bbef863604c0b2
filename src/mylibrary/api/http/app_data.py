from dataclasses import dataclass

from src.mylibrary.core.services import CredentialService, DbSessionService
from src.mylibrary.runtime.config.config_data import ConfigData


@dataclass
class ApplicationDependencies:
    """Process-wide collaborators, built once at startup and read-only after."""

    config: ConfigData
    database_service: DbSessionService
    credential_service: CredentialService
