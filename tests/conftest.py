"""Pytest configuration and fixtures."""

from datetime import timedelta

import pytest

from tokensmith.config import Settings
from tokensmith.services.credential_manager import CredentialManager
from tokensmith.services.password_hasher import PasswordHasher
from tokensmith.services.refresh_token_store import RefreshTokenStore
from tokensmith.services.token_issuer import AccessTokenIssuer
from tokensmith.stores.memory import (
    InMemoryDatabase,
    InMemoryRefreshTokenPersistence,
    InMemoryUserStore,
)

SIGNING_KEY = "supersecret_signing_key_1234567890123456"
ISSUER = "test-issuer"
AUDIENCE = "test-audience"
# Low iteration count keeps the suite fast; the default is exercised separately.
TEST_ITERATIONS = 1_000


@pytest.fixture
def settings() -> Settings:
    """Deterministic settings independent of the environment."""
    return Settings(
        jwt_signing_key=SIGNING_KEY,
        jwt_issuer=ISSUER,
        jwt_audience=AUDIENCE,
        access_token_lifetime=timedelta(minutes=5),
        refresh_token_lifetime=timedelta(days=1),
        password_hash_iterations=TEST_ITERATIONS,
        _env_file=None,
    )


@pytest.fixture
def db() -> InMemoryDatabase:
    return InMemoryDatabase()


@pytest.fixture
def user_store(db) -> InMemoryUserStore:
    return InMemoryUserStore(db)


@pytest.fixture
def token_persistence(db) -> InMemoryRefreshTokenPersistence:
    return InMemoryRefreshTokenPersistence(db)


@pytest.fixture
def password_hasher() -> PasswordHasher:
    return PasswordHasher(iterations=TEST_ITERATIONS)


@pytest.fixture
def token_issuer(settings) -> AccessTokenIssuer:
    return AccessTokenIssuer(settings)


@pytest.fixture
def refresh_tokens(token_persistence, user_store, settings) -> RefreshTokenStore:
    return RefreshTokenStore(
        token_persistence,
        user_store,
        lifetime=settings.refresh_token_lifetime,
    )


@pytest.fixture
def manager(user_store, password_hasher, token_issuer, refresh_tokens) -> CredentialManager:
    """CredentialManager wired to in-memory stores."""
    return CredentialManager(
        user_store=user_store,
        password_hasher=password_hasher,
        token_issuer=token_issuer,
        refresh_tokens=refresh_tokens,
    )
