"""Persistence contracts consumed by the credential core.

Implementations must enforce username, email and token uniqueness and
raise the matching DuplicateRecordError subclass on a violation.
"""

from datetime import datetime
from typing import Optional, Protocol
from uuid import UUID

from tokensmith.models.user import RefreshToken, User


class UserStore(Protocol):
    """Lookup and creation of users."""

    async def find_by_username(self, username: str) -> Optional[User]:
        """Return the user with this username, if any."""
        ...

    async def find_by_email(self, email: str) -> Optional[User]:
        """Return the user with this email, if any."""
        ...

    async def find_by_id(self, user_id: UUID) -> Optional[User]:
        """Return the user with this id, if any."""
        ...

    async def create(self, user: User) -> None:
        """Persist a new user.

        Raises:
            DuplicateUserError: If the username or email is taken
        """
        ...


class RefreshTokenPersistence(Protocol):
    """Storage of refresh token rows."""

    async def delete_stale(self, user_id: UUID, now: datetime) -> int:
        """Delete the user's rows that are revoked or expired before ``now``."""
        ...

    async def insert(self, record: RefreshToken) -> None:
        """Persist a new token row.

        Raises:
            DuplicateTokenError: If the token value already exists
        """
        ...

    async def find_by_token(self, token: str) -> Optional[RefreshToken]:
        """Return the row holding this token value, if any."""
        ...

    async def mark_revoked(self, token: str) -> int:
        """Revoke the token if it is not already revoked.

        Returns:
            Number of rows that changed (0 or 1)
        """
        ...

    async def revoke_all_for_user(self, user_id: UUID) -> int:
        """Revoke every non-revoked token of a user; return the count."""
        ...
