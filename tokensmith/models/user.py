"""User and refresh token records."""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(BaseModel):
    """A registered principal.

    ``password_hash`` is an opaque record produced by PasswordHasher.
    Refresh tokens reference users by id only; there is no back-reference.
    """

    id: UUID = Field(default_factory=uuid4)
    username: str
    email: str
    password_hash: str
    display_name: Optional[str] = None
    email_confirmed: bool = False
    created_at: datetime = Field(default_factory=_utcnow)


class RefreshToken(BaseModel):
    """One outstanding or historical refresh credential."""

    id: UUID = Field(default_factory=uuid4)
    user_id: UUID
    token: str
    expires_at: datetime
    revoked: bool = False
    created_at: datetime = Field(default_factory=_utcnow)

    def is_usable(self, now: Optional[datetime] = None) -> bool:
        """Return True if the token is neither revoked nor expired."""
        now = now or _utcnow()
        return not self.revoked and self.expires_at > now
