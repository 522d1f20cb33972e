"""Explicit construction of the credential components.

Build a CredentialManager once at process start and pass it to whatever
needs it.
"""

from typing import Optional

import structlog

from tokensmith.config import Settings, get_settings
from tokensmith.services.credential_manager import CredentialManager
from tokensmith.services.logging_service import configure_logging
from tokensmith.services.password_hasher import PasswordHasher
from tokensmith.services.refresh_token_store import RefreshTokenStore
from tokensmith.services.token_issuer import AccessTokenIssuer
from tokensmith.stores.base import RefreshTokenPersistence, UserStore

logger = structlog.get_logger(__name__)


def create_credential_manager(
    settings: Settings,
    user_store: UserStore,
    token_persistence: RefreshTokenPersistence,
) -> CredentialManager:
    """Wire a CredentialManager from settings and persistence collaborators.

    Raises:
        ConfigurationError: If the signing key, issuer or audience is missing
    """
    token_issuer = AccessTokenIssuer(settings)
    password_hasher = PasswordHasher(iterations=settings.password_hash_iterations)
    refresh_tokens = RefreshTokenStore(
        token_persistence,
        user_store,
        lifetime=settings.refresh_token_lifetime,
        max_attempts=settings.refresh_token_max_attempts,
    )

    logger.info(
        "credential_manager_created",
        issuer=settings.jwt_issuer,
        audience=settings.jwt_audience,
        password_hash_iterations=settings.password_hash_iterations,
    )
    return CredentialManager(
        user_store=user_store,
        password_hasher=password_hasher,
        token_issuer=token_issuer,
        refresh_tokens=refresh_tokens,
    )


async def create_postgres_credential_manager(
    settings: Optional[Settings] = None,
) -> CredentialManager:
    """Build a Postgres-backed CredentialManager.

    Configures logging, initializes the database pool, applies migrations,
    and wires the Postgres stores.

    Intended as the process entry point for hosts that do not set up
    structlog themselves.
    """
    from tokensmith.database import init_database, run_migrations
    from tokensmith.stores.postgres import (
        PostgresRefreshTokenPersistence,
        PostgresUserStore,
    )

    settings = settings or get_settings()
    configure_logging(settings.log_level)

    pool = await init_database(settings.postgres_url)
    await run_migrations()

    return create_credential_manager(
        settings,
        PostgresUserStore(pool),
        PostgresRefreshTokenPersistence(pool),
    )
