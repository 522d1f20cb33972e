"""PostgreSQL persistence using an asyncpg connection pool."""

from datetime import datetime
from typing import Optional
from uuid import UUID

import asyncpg
import structlog

from tokensmith.errors import DuplicateTokenError, DuplicateUserError
from tokensmith.models.user import RefreshToken, User

logger = structlog.get_logger(__name__)

_USER_COLUMNS = "id, username, email, password_hash, display_name, email_confirmed, created_at"
_TOKEN_COLUMNS = "id, user_id, token, expires_at, revoked, created_at"


def _affected_rows(status: str) -> int:
    """Parse the row count out of an asyncpg command status like 'UPDATE 1'."""
    try:
        return int(status.rsplit(" ", 1)[-1])
    except (AttributeError, ValueError):
        return 0


def _user_from_row(row) -> User:
    return User(
        id=row["id"],
        username=row["username"],
        email=row["email"],
        password_hash=row["password_hash"],
        display_name=row["display_name"],
        email_confirmed=row["email_confirmed"],
        created_at=row["created_at"],
    )


def _token_from_row(row) -> RefreshToken:
    return RefreshToken(
        id=row["id"],
        user_id=row["user_id"],
        token=row["token"],
        expires_at=row["expires_at"],
        revoked=row["revoked"],
        created_at=row["created_at"],
    )


class PostgresUserStore:
    """UserStore backed by the ``users`` table."""

    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool

    async def find_by_username(self, username: str) -> Optional[User]:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                f"SELECT {_USER_COLUMNS} FROM users WHERE username = $1",
                username,
            )
        return _user_from_row(row) if row is not None else None

    async def find_by_email(self, email: str) -> Optional[User]:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                f"SELECT {_USER_COLUMNS} FROM users WHERE email = $1",
                email,
            )
        return _user_from_row(row) if row is not None else None

    async def find_by_id(self, user_id: UUID) -> Optional[User]:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                f"SELECT {_USER_COLUMNS} FROM users WHERE id = $1",
                user_id,
            )
        return _user_from_row(row) if row is not None else None

    async def create(self, user: User) -> None:
        """Insert a user row.

        Raises:
            DuplicateUserError: On a username, email or id collision
        """
        try:
            async with self.pool.acquire() as conn:
                await conn.execute(
                    """
                    INSERT INTO users (id, username, email, password_hash, display_name, email_confirmed, created_at)
                    VALUES ($1, $2, $3, $4, $5, $6, $7)
                    """,
                    user.id,
                    user.username,
                    user.email,
                    user.password_hash,
                    user.display_name,
                    user.email_confirmed,
                    user.created_at,
                )
        except asyncpg.UniqueViolationError as e:
            raise DuplicateUserError("user already exists") from e

    async def delete_user(self, user_id: UUID) -> bool:
        """Delete a user; its refresh tokens go with it via ON DELETE CASCADE."""
        async with self.pool.acquire() as conn:
            status = await conn.execute("DELETE FROM users WHERE id = $1", user_id)

        deleted = _affected_rows(status) > 0
        if deleted:
            logger.info("user_deleted", user_id=str(user_id))
        return deleted


class PostgresRefreshTokenPersistence:
    """RefreshTokenPersistence backed by the ``refresh_tokens`` table."""

    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool

    async def delete_stale(self, user_id: UUID, now: datetime) -> int:
        async with self.pool.acquire() as conn:
            status = await conn.execute(
                """
                DELETE FROM refresh_tokens
                WHERE user_id = $1 AND (revoked OR expires_at < $2)
                """,
                user_id,
                now,
            )
        return _affected_rows(status)

    async def insert(self, record: RefreshToken) -> None:
        """Insert a token row.

        Raises:
            DuplicateTokenError: If the token value already exists
        """
        try:
            async with self.pool.acquire() as conn:
                await conn.execute(
                    """
                    INSERT INTO refresh_tokens (id, user_id, token, expires_at, revoked, created_at)
                    VALUES ($1, $2, $3, $4, $5, $6)
                    """,
                    record.id,
                    record.user_id,
                    record.token,
                    record.expires_at,
                    record.revoked,
                    record.created_at,
                )
        except asyncpg.UniqueViolationError as e:
            raise DuplicateTokenError("refresh token already exists") from e

    async def find_by_token(self, token: str) -> Optional[RefreshToken]:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                f"SELECT {_TOKEN_COLUMNS} FROM refresh_tokens WHERE token = $1",
                token,
            )
        return _token_from_row(row) if row is not None else None

    async def mark_revoked(self, token: str) -> int:
        # Conditional update: concurrent callers see exactly one row affected.
        async with self.pool.acquire() as conn:
            status = await conn.execute(
                """
                UPDATE refresh_tokens
                SET revoked = TRUE
                WHERE token = $1 AND NOT revoked
                """,
                token,
            )
        return _affected_rows(status)

    async def revoke_all_for_user(self, user_id: UUID) -> int:
        async with self.pool.acquire() as conn:
            status = await conn.execute(
                """
                UPDATE refresh_tokens
                SET revoked = TRUE
                WHERE user_id = $1 AND NOT revoked
                """,
                user_id,
            )
        return _affected_rows(status)
