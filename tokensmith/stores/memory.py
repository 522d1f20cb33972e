"""Dict-backed persistence for tests and single-process hosts.

Every method completes without yielding to the event loop, so each call is
atomic with respect to other coroutines on the same loop.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

import structlog

from tokensmith.errors import DuplicateTokenError, DuplicateUserError
from tokensmith.models.user import RefreshToken, User

logger = structlog.get_logger(__name__)


class InMemoryDatabase:
    """Shared tables for the in-memory user and token stores."""

    def __init__(self):
        self.users: dict[UUID, User] = {}
        self.refresh_tokens: dict[str, RefreshToken] = {}

    def delete_user(self, user_id: UUID) -> bool:
        """Delete a user and, by cascade, all of its refresh tokens."""
        if self.users.pop(user_id, None) is None:
            return False

        owned = [t for t, row in self.refresh_tokens.items() if row.user_id == user_id]
        for token in owned:
            del self.refresh_tokens[token]

        logger.info("user_deleted", user_id=str(user_id), tokens_deleted=len(owned))
        return True


class InMemoryUserStore:
    """UserStore backed by an InMemoryDatabase."""

    def __init__(self, db: InMemoryDatabase):
        self.db = db

    async def find_by_username(self, username: str) -> Optional[User]:
        return next((u for u in self.db.users.values() if u.username == username), None)

    async def find_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self.db.users.values() if u.email == email), None)

    async def find_by_id(self, user_id: UUID) -> Optional[User]:
        return self.db.users.get(user_id)

    async def create(self, user: User) -> None:
        for existing in self.db.users.values():
            if existing.username == user.username or existing.email == user.email:
                raise DuplicateUserError("user already exists")
        if user.id in self.db.users:
            raise DuplicateUserError("user already exists")
        self.db.users[user.id] = user.model_copy()


class InMemoryRefreshTokenPersistence:
    """RefreshTokenPersistence backed by an InMemoryDatabase."""

    def __init__(self, db: InMemoryDatabase):
        self.db = db

    async def delete_stale(self, user_id: UUID, now: datetime) -> int:
        stale = [
            token
            for token, row in self.db.refresh_tokens.items()
            if row.user_id == user_id and (row.revoked or row.expires_at < now)
        ]
        for token in stale:
            del self.db.refresh_tokens[token]
        return len(stale)

    async def insert(self, record: RefreshToken) -> None:
        if record.token in self.db.refresh_tokens:
            raise DuplicateTokenError("refresh token already exists")
        self.db.refresh_tokens[record.token] = record.model_copy()

    async def find_by_token(self, token: str) -> Optional[RefreshToken]:
        row = self.db.refresh_tokens.get(token)
        return row.model_copy() if row is not None else None

    async def mark_revoked(self, token: str) -> int:
        row = self.db.refresh_tokens.get(token)
        if row is None or row.revoked:
            return 0
        row.revoked = True
        return 1

    async def revoke_all_for_user(self, user_id: UUID) -> int:
        count = 0
        for row in self.db.refresh_tokens.values():
            if row.user_id == user_id and not row.revoked:
                row.revoked = True
                count += 1
        return count
