"""Database connection and migration management."""

from pathlib import Path
from typing import Optional

import asyncpg
import structlog

from tokensmith.config import get_settings

logger = structlog.get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent / "migrations"

# Global connection pool
_pool: Optional[asyncpg.Pool] = None
_pool_dsn: Optional[str] = None


async def get_pool() -> asyncpg.Pool:
    """Get the database connection pool.

    Returns:
        asyncpg connection pool

    Raises:
        RuntimeError: If pool is not initialized
    """
    if _pool is None:
        raise RuntimeError("Database pool not initialized. Call init_database() first.")
    return _pool


async def init_database(postgres_url: Optional[str] = None) -> asyncpg.Pool:
    """Initialize the database connection pool.

    The pool is process-wide: once created, later calls return it as is,
    and a different DSN is ignored with a warning.

    Args:
        postgres_url: DSN to connect to (defaults to the configured one)

    Returns:
        asyncpg connection pool
    """
    global _pool, _pool_dsn

    dsn = postgres_url or get_settings().postgres_url

    if _pool is not None:
        if dsn != _pool_dsn:
            logger.warning("database_pool_dsn_mismatch", note="Returning the existing pool")
        return _pool

    try:
        _pool = await asyncpg.create_pool(
            dsn,
            min_size=2,
            max_size=10,
            command_timeout=60,
        )
        _pool_dsn = dsn
        logger.info("database_pool_created", min_size=2, max_size=10)
        return _pool
    except Exception as e:
        logger.error("database_pool_creation_failed", error=str(e))
        raise


async def close_database() -> None:
    """Close the database connection pool."""
    global _pool, _pool_dsn

    if _pool is not None:
        await _pool.close()
        _pool = None
        _pool_dsn = None
        logger.info("database_pool_closed")


async def run_migrations(migrations_dir: Path = MIGRATIONS_DIR) -> None:
    """Run all SQL migrations in order.

    Migrations are idempotent (IF NOT EXISTS) and can be re-run safely.
    """
    pool = await get_pool()

    if not migrations_dir.exists():
        logger.warning("migrations_directory_not_found", path=str(migrations_dir))
        return

    migration_files = sorted(migrations_dir.glob("*.sql"))

    if not migration_files:
        logger.info("no_migrations_found")
        return

    async with pool.acquire() as conn:
        for migration_file in migration_files:
            try:
                await conn.execute(migration_file.read_text())
                logger.info("migration_applied", file=migration_file.name)
            except Exception as e:
                logger.error(
                    "migration_failed",
                    file=migration_file.name,
                    error=str(e),
                )
                raise

