"""Password hashing, JWT access tokens, and rotating refresh tokens."""

from tokensmith.bootstrap import create_credential_manager, create_postgres_credential_manager
from tokensmith.config import Settings, get_settings
from tokensmith.errors import (
    ConfigurationError,
    DuplicateRecordError,
    DuplicateTokenError,
    DuplicateUserError,
    TokensmithError,
)
from tokensmith.models import (
    AuthError,
    ErrorKind,
    RefreshToken,
    RegistrationResult,
    TokenPair,
    TokenResult,
    User,
)
from tokensmith.services import (
    AccessTokenIssuer,
    CredentialManager,
    PasswordHasher,
    RefreshTokenStore,
    TokenValidation,
)

__version__ = "0.1.0"

__all__ = [
    "AccessTokenIssuer",
    "AuthError",
    "ConfigurationError",
    "CredentialManager",
    "DuplicateRecordError",
    "DuplicateTokenError",
    "DuplicateUserError",
    "ErrorKind",
    "PasswordHasher",
    "RefreshToken",
    "RefreshTokenStore",
    "RegistrationResult",
    "Settings",
    "TokenPair",
    "TokenResult",
    "TokenValidation",
    "TokensmithError",
    "User",
    "create_credential_manager",
    "create_postgres_credential_manager",
    "get_settings",
]
