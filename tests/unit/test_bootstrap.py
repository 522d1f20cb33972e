"""Unit tests for component wiring."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from tokensmith.bootstrap import create_credential_manager, create_postgres_credential_manager
from tokensmith.config import Settings
from tokensmith.errors import ConfigurationError
from tokensmith.services.credential_manager import CredentialManager
from tokensmith.stores.postgres import PostgresRefreshTokenPersistence, PostgresUserStore


class TestCreateCredentialManager:
    def test_wires_components_from_settings(self, settings, user_store, token_persistence):
        manager = create_credential_manager(settings, user_store, token_persistence)

        assert isinstance(manager, CredentialManager)
        assert manager.user_store is user_store
        assert manager.password_hasher.iterations == settings.password_hash_iterations
        assert manager.token_issuer.issuer == settings.jwt_issuer
        assert manager.refresh_tokens.persistence is token_persistence
        assert manager.refresh_tokens.lifetime == settings.refresh_token_lifetime

    def test_missing_signing_key_is_fatal(self, user_store, token_persistence):
        settings = Settings(jwt_signing_key="", _env_file=None)
        with pytest.raises(ConfigurationError):
            create_credential_manager(settings, user_store, token_persistence)


class TestCreatePostgresCredentialManager:
    async def test_initializes_database_and_wires_postgres_stores(self, settings):
        pool = MagicMock()
        with patch("tokensmith.database.init_database", new_callable=AsyncMock) as init_db, \
                patch("tokensmith.database.run_migrations", new_callable=AsyncMock) as migrate, \
                patch("tokensmith.bootstrap.configure_logging") as configure:
            init_db.return_value = pool
            manager = await create_postgres_credential_manager(settings)

        init_db.assert_awaited_once_with(settings.postgres_url)
        configure.assert_called_once_with(settings.log_level)
        migrate.assert_awaited_once()
        assert isinstance(manager.user_store, PostgresUserStore)
        assert manager.user_store.pool is pool
        assert isinstance(manager.refresh_tokens.persistence, PostgresRefreshTokenPersistence)
