"""Refresh token lifecycle: creation, validation, and revocation.

A token is usable while it is neither revoked nor expired. Tokens are never
revived; rotation always produces a new row. Revoked and expired rows are
reclaimed lazily the next time a token is created for the same user.
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import NamedTuple, Optional
from uuid import UUID

import structlog

from tokensmith.errors import DuplicateTokenError
from tokensmith.models.user import RefreshToken, User
from tokensmith.stores.base import RefreshTokenPersistence, UserStore

logger = structlog.get_logger(__name__)

# Constants
TOKEN_BYTES = 32
DEFAULT_REFRESH_TOKEN_LIFETIME = timedelta(days=7)
DEFAULT_MAX_ATTEMPTS = 3


class TokenValidation(NamedTuple):
    """Outcome of RefreshTokenStore.validate."""

    usable: bool
    user: Optional[User] = None


INVALID = TokenValidation(usable=False)


class RefreshTokenStore:
    """Create, validate, and revoke opaque refresh tokens."""

    def __init__(
        self,
        persistence: RefreshTokenPersistence,
        user_store: UserStore,
        lifetime: timedelta = DEFAULT_REFRESH_TOKEN_LIFETIME,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        if lifetime.total_seconds() <= 0:
            raise ValueError("refresh token lifetime must be positive")
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.persistence = persistence
        self.user_store = user_store
        self.lifetime = lifetime
        self.max_attempts = max_attempts

    async def create(self, user_id: UUID) -> str:
        """Issue a new refresh token for a user.

        Stale rows for the user are swept first. A token value collision is
        retried with a fresh value.

        Args:
            user_id: Owner of the new token

        Returns:
            The opaque token value

        Raises:
            DuplicateTokenError: If every attempt collided
        """
        now = datetime.now(timezone.utc)
        await self._sweep(user_id, now)

        for attempt in range(1, self.max_attempts + 1):
            record = RefreshToken(
                user_id=user_id,
                token=secrets.token_urlsafe(TOKEN_BYTES),
                expires_at=now + self.lifetime,
                created_at=now,
            )
            try:
                await self.persistence.insert(record)
            except DuplicateTokenError:
                logger.warning(
                    "refresh_token_collision",
                    user_id=str(user_id),
                    attempt=attempt,
                )
                continue

            logger.info(
                "refresh_token_created",
                user_id=str(user_id),
                token_id=str(record.id),
                expires_at=record.expires_at.isoformat(),
            )
            return record.token

        raise DuplicateTokenError(
            f"could not generate a unique refresh token after {self.max_attempts} attempts"
        )

    async def validate(self, token: str) -> TokenValidation:
        """Check whether a token is usable and resolve its owner.

        Read-only: never revokes or deletes anything.

        Returns:
            TokenValidation(usable=True, user=...) for a live token whose
            owner still exists; TokenValidation(usable=False) otherwise
        """
        record = await self.persistence.find_by_token(token)

        if record is None:
            logger.info("refresh_token_rejected", reason="not_found")
            return INVALID

        if record.revoked:
            logger.info("refresh_token_rejected", reason="revoked", user_id=str(record.user_id))
            return INVALID

        if not record.is_usable(datetime.now(timezone.utc)):
            logger.info("refresh_token_rejected", reason="expired", user_id=str(record.user_id))
            return INVALID

        user = await self.user_store.find_by_id(record.user_id)
        if user is None:
            logger.info("refresh_token_rejected", reason="owner_missing", user_id=str(record.user_id))
            return INVALID

        return TokenValidation(usable=True, user=user)

    async def revoke(self, token: str) -> bool:
        """Revoke a token if it exists and is not already revoked.

        Unknown tokens are ignored silently.

        Returns:
            True if this call revoked the token
        """
        revoked = await self.persistence.mark_revoked(token) > 0
        if revoked:
            logger.info("refresh_token_revoked")
        return revoked

    async def revoke_all(self, user_id: UUID) -> int:
        """Revoke every live token of a user.

        Returns:
            Number of tokens revoked
        """
        count = await self.persistence.revoke_all_for_user(user_id)
        logger.info("all_refresh_tokens_revoked", user_id=str(user_id), count=count)
        return count

    async def _sweep(self, user_id: UUID, now: datetime) -> None:
        # Best effort: a failed sweep must not block token creation.
        try:
            deleted = await self.persistence.delete_stale(user_id, now)
        except Exception as e:
            logger.warning("stale_refresh_token_sweep_failed", user_id=str(user_id), error=str(e))
            return
        if deleted:
            logger.debug("stale_refresh_tokens_deleted", user_id=str(user_id), count=deleted)
