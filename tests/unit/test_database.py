"""Unit tests for database pool and migration management."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from structlog.testing import capture_logs

from tokensmith import database


class _Acquire:
    def __init__(self, conn):
        self._conn = conn

    async def __aenter__(self):
        return self._conn

    async def __aexit__(self, *args):
        pass


@pytest.fixture
def pool():
    conn = AsyncMock()
    pool = MagicMock()
    pool.acquire.return_value = _Acquire(conn)
    pool.close = AsyncMock()
    return pool, conn


@pytest.fixture(autouse=True)
def reset_pool():
    database._pool = None
    database._pool_dsn = None
    yield
    database._pool = None
    database._pool_dsn = None


class TestPool:
    async def test_get_pool_requires_init(self):
        with pytest.raises(RuntimeError, match="not initialized"):
            await database.get_pool()

    async def test_init_and_close(self, pool):
        mock_pool, _ = pool
        with patch("tokensmith.database.asyncpg.create_pool", new_callable=AsyncMock) as create_pool:
            create_pool.return_value = mock_pool
            assert await database.init_database("postgresql://t:t@localhost/t") is mock_pool
            assert await database.init_database() is mock_pool

        create_pool.assert_awaited_once()
        assert create_pool.call_args[0][0] == "postgresql://t:t@localhost/t"
        assert await database.get_pool() is mock_pool

        await database.close_database()
        mock_pool.close.assert_awaited_once()
        with pytest.raises(RuntimeError):
            await database.get_pool()

    async def test_different_dsn_returns_existing_pool_with_warning(self, pool):
        mock_pool, _ = pool
        with patch("tokensmith.database.asyncpg.create_pool", new_callable=AsyncMock) as create_pool:
            create_pool.return_value = mock_pool
            await database.init_database("postgresql://a:a@localhost/a")
            with capture_logs() as logs:
                same = await database.init_database("postgresql://a:a@localhost/a")
                other = await database.init_database("postgresql://b:b@localhost/b")

        assert same is other is mock_pool
        create_pool.assert_awaited_once()
        events = [entry["event"] for entry in logs]
        assert events == ["database_pool_dsn_mismatch"]

    async def test_init_failure_propagates(self):
        with patch("tokensmith.database.asyncpg.create_pool", new_callable=AsyncMock) as create_pool:
            create_pool.side_effect = OSError("connection refused")
            with pytest.raises(OSError):
                await database.init_database("postgresql://t:t@localhost/t")


class TestMigrations:
    async def test_applies_sql_files_in_order(self, pool, tmp_path):
        mock_pool, conn = pool
        database._pool = mock_pool
        (tmp_path / "002_second.sql").write_text("SELECT 2;")
        (tmp_path / "001_first.sql").write_text("SELECT 1;")

        await database.run_migrations(tmp_path)

        executed = [call[0][0] for call in conn.execute.call_args_list]
        assert executed == ["SELECT 1;", "SELECT 2;"]

    async def test_bundled_schema(self, pool):
        mock_pool, conn = pool
        database._pool = mock_pool

        await database.run_migrations()

        sql = conn.execute.call_args_list[0][0][0]
        assert "CREATE TABLE IF NOT EXISTS users" in sql
        assert "ON DELETE CASCADE" in sql
        assert "token TEXT NOT NULL UNIQUE" in sql

    async def test_missing_directory_is_skipped(self, pool, tmp_path):
        mock_pool, conn = pool
        database._pool = mock_pool

        await database.run_migrations(tmp_path / "nope")

        conn.execute.assert_not_awaited()

