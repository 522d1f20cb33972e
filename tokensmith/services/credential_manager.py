"""Registration, login, and refresh-token rotation flows."""

import secrets
from typing import Any, Mapping, Optional

import structlog

from tokensmith.errors import DuplicateUserError
from tokensmith.models.results import (
    ErrorKind,
    RegistrationResult,
    TokenPair,
    TokenResult,
)
from tokensmith.models.user import User
from tokensmith.services.password_hasher import PasswordHasher
from tokensmith.services.refresh_token_store import RefreshTokenStore
from tokensmith.services.token_issuer import AccessTokenIssuer
from tokensmith.stores.base import UserStore

logger = structlog.get_logger(__name__)

# Caller-facing messages. Each failure kind has exactly one wording so that
# callers cannot tell which field collided or which check failed.
USER_EXISTS_MESSAGE = "User already exists"
INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"
INVALID_REFRESH_TOKEN_MESSAGE = "Invalid refresh token"


class CredentialManager:
    """Orchestrates user registration, login, and token refresh.

    The only component that combines password hashing, access token
    issuance, and refresh token lifecycle. Per-call failures are returned
    as result values, never raised.
    """

    def __init__(
        self,
        user_store: UserStore,
        password_hasher: PasswordHasher,
        token_issuer: AccessTokenIssuer,
        refresh_tokens: RefreshTokenStore,
    ):
        self.user_store = user_store
        self.password_hasher = password_hasher
        self.token_issuer = token_issuer
        self.refresh_tokens = refresh_tokens
        # Verified against when the login identifier is unknown.
        self._dummy_hash = password_hasher.hash(secrets.token_urlsafe(16))

    async def register(
        self,
        username: str,
        email: str,
        password: str,
        display_name: Optional[str] = None,
    ) -> RegistrationResult:
        """Create a new user with a hashed password.

        Args:
            username: Unique username
            email: Unique email address
            password: Plain-text password (will be hashed)
            display_name: Defaults to the username

        Returns:
            RegistrationResult carrying the new user id, or a CONFLICT error
        """
        existing = await self.user_store.find_by_username(username)
        if existing is None:
            existing = await self.user_store.find_by_email(email)
        if existing is not None:
            logger.info("registration_conflict")
            return RegistrationResult.failure(ErrorKind.CONFLICT, USER_EXISTS_MESSAGE)

        user = User(
            username=username,
            email=email,
            password_hash=self.password_hasher.hash(password),
            display_name=display_name or username,
        )

        try:
            await self.user_store.create(user)
        except DuplicateUserError:
            logger.info("registration_conflict", race=True)
            return RegistrationResult.failure(ErrorKind.CONFLICT, USER_EXISTS_MESSAGE)

        logger.info("user_registered", user_id=str(user.id))
        return RegistrationResult.success(user.id)

    async def login(
        self,
        username_or_email: str,
        password: str,
        extra_claims: Optional[Mapping[str, Any]] = None,
    ) -> TokenResult:
        """Authenticate a user and issue an access/refresh token pair.

        Args:
            username_or_email: Username or email address
            password: Plain-text password
            extra_claims: Additional access token claims

        Returns:
            TokenResult with a TokenPair, or an AUTHENTICATION error
        """
        user = await self.user_store.find_by_username(username_or_email)
        if user is None:
            user = await self.user_store.find_by_email(username_or_email)

        if user is None:
            self.password_hasher.verify(self._dummy_hash, password)
            logger.info("login_failed")
            return TokenResult.failure(ErrorKind.AUTHENTICATION, INVALID_CREDENTIALS_MESSAGE)

        if not self.password_hasher.verify(user.password_hash, password):
            logger.info("login_failed", user_id=str(user.id))
            return TokenResult.failure(ErrorKind.AUTHENTICATION, INVALID_CREDENTIALS_MESSAGE)

        tokens = await self._issue_pair(user, extra_claims)
        logger.info("user_logged_in", user_id=str(user.id))
        return TokenResult.success(tokens)

    async def refresh(
        self,
        refresh_token: str,
        extra_claims: Optional[Mapping[str, Any]] = None,
    ) -> TokenResult:
        """Exchange a refresh token for a new token pair.

        The presented token is revoked before the new pair is issued. If
        issuance then fails the caller is logged out, never left holding
        two live tokens.

        Args:
            refresh_token: Token returned by a previous login or refresh
            extra_claims: Additional access token claims

        Returns:
            TokenResult with a new TokenPair, or a TOKEN error
        """
        validation = await self.refresh_tokens.validate(refresh_token)
        if not validation.usable:
            return TokenResult.failure(ErrorKind.TOKEN, INVALID_REFRESH_TOKEN_MESSAGE)

        user = validation.user
        if not await self.refresh_tokens.revoke(refresh_token):
            # A concurrent refresh consumed the token between validate and revoke.
            logger.warning("refresh_token_reuse_detected", user_id=str(user.id))
            return TokenResult.failure(ErrorKind.TOKEN, INVALID_REFRESH_TOKEN_MESSAGE)

        tokens = await self._issue_pair(user, extra_claims)
        logger.info("refresh_token_rotated", user_id=str(user.id))
        return TokenResult.success(tokens)

    async def logout(self, refresh_token: str) -> None:
        """Revoke a refresh token. Unknown tokens are ignored."""
        await self.refresh_tokens.revoke(refresh_token)

    async def _issue_pair(
        self, user: User, extra_claims: Optional[Mapping[str, Any]]
    ) -> TokenPair:
        access_token = self.token_issuer.issue_for(user, extra_claims)
        refresh_token = await self.refresh_tokens.create(user.id)
        return TokenPair(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=self.token_issuer.expires_in,
        )
