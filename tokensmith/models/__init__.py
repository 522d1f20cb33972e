"""Models package exports."""

from tokensmith.models.results import (
    AuthError,
    ErrorKind,
    RegistrationResult,
    Result,
    TokenPair,
    TokenResult,
)
from tokensmith.models.user import RefreshToken, User

__all__ = [
    "AuthError",
    "ErrorKind",
    "RefreshToken",
    "RegistrationResult",
    "Result",
    "TokenPair",
    "TokenResult",
    "User",
]
