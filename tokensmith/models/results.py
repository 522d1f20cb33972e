"""Outcome values returned by CredentialManager operations."""

from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator


class ErrorKind(str, Enum):
    """Failure categories reported to callers."""

    VALIDATION = "validation"
    CONFLICT = "conflict"
    AUTHENTICATION = "authentication"
    TOKEN = "token"


class AuthError(BaseModel):
    """Failure detail carried by an unsuccessful result."""

    kind: ErrorKind
    message: str


class TokenPair(BaseModel):
    """Access and refresh token issued together.

    Attributes:
        access_token: Short-lived signed JWT
        refresh_token: Opaque long-lived token for obtaining new pairs
        token_type: Always "bearer"
        expires_in: Access token lifetime in seconds
    """

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int = Field(ge=1, description="Access token lifetime in seconds")


class Result(BaseModel):
    """Tagged outcome: ``ok`` is True exactly when ``error`` is None."""

    ok: bool
    error: Optional[AuthError] = None

    @model_validator(mode="after")
    def check_discriminant(self) -> "Result":
        if self.ok and self.error is not None:
            raise ValueError("successful result cannot carry an error")
        if not self.ok and self.error is None:
            raise ValueError("failed result must carry an error")
        return self

    @classmethod
    def failure(cls, kind: ErrorKind, message: str):
        """Build a failed result of this type."""
        return cls(ok=False, error=AuthError(kind=kind, message=message))


class RegistrationResult(Result):
    """Outcome of CredentialManager.register."""

    user_id: Optional[UUID] = None

    @classmethod
    def success(cls, user_id: UUID) -> "RegistrationResult":
        return cls(ok=True, user_id=user_id)


class TokenResult(Result):
    """Outcome of CredentialManager.login and CredentialManager.refresh."""

    tokens: Optional[TokenPair] = None

    @classmethod
    def success(cls, tokens: TokenPair) -> "TokenResult":
        return cls(ok=True, tokens=tokens)
