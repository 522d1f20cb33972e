"""Services package exports."""

from tokensmith.services.credential_manager import CredentialManager
from tokensmith.services.logging_service import configure_logging, get_logger
from tokensmith.services.password_hasher import PasswordHasher
from tokensmith.services.refresh_token_store import RefreshTokenStore, TokenValidation
from tokensmith.services.token_issuer import AccessTokenIssuer

__all__ = [
    "AccessTokenIssuer",
    "CredentialManager",
    "PasswordHasher",
    "RefreshTokenStore",
    "TokenValidation",
    "configure_logging",
    "get_logger",
]
