"""Access token (JWT) issuance."""

import secrets
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

import jwt
import structlog

from tokensmith.config import Settings
from tokensmith.errors import ConfigurationError
from tokensmith.models.user import User

logger = structlog.get_logger(__name__)

# Constants
JWT_ALGORITHM = "HS256"
UNIQUE_NAME_CLAIM = "unique_name"


class AccessTokenIssuer:
    """Mint signed, time-bounded bearer tokens carrying user identity claims.

    Tokens verify with any standard JWT library given the signing key,
    issuer and audience. Verification itself is the resource server's job.
    """

    def __init__(self, settings: Settings):
        signing_key = settings.jwt_signing_key.get_secret_value()
        if not signing_key.strip():
            raise ConfigurationError("jwt_signing_key must be set")
        if not settings.jwt_issuer.strip():
            raise ConfigurationError("jwt_issuer must be set")
        if not settings.jwt_audience.strip():
            raise ConfigurationError("jwt_audience must be set")
        if settings.access_token_lifetime.total_seconds() <= 0:
            raise ConfigurationError("access_token_lifetime must be positive")

        self._signing_key = signing_key
        self.issuer = settings.jwt_issuer
        self.audience = settings.jwt_audience
        self.lifetime = settings.access_token_lifetime

    @property
    def expires_in(self) -> int:
        """Access token lifetime in whole seconds."""
        return max(1, int(self.lifetime.total_seconds()))

    def issue(
        self,
        user_id: str,
        unique_name: str,
        email: str,
        extra_claims: Optional[Mapping[str, Any]] = None,
    ) -> str:
        """Create a signed JWT access token.

        Args:
            user_id: User id (placed in the 'sub' claim)
            unique_name: Username, or email when the user has none
            email: Email address claim
            extra_claims: Additional claims; they cannot override the
                registered ones

        Returns:
            Encoded JWT string (header.payload.signature)
        """
        now = datetime.now(timezone.utc)
        payload: dict[str, Any] = dict(extra_claims or {})
        payload.update(
            {
                "sub": str(user_id),
                UNIQUE_NAME_CLAIM: unique_name,
                "email": email,
                "iss": self.issuer,
                "aud": self.audience,
                "iat": now,
                "nbf": now,
                "exp": now + self.lifetime,
                "jti": secrets.token_hex(16),
            }
        )
        token = jwt.encode(payload, self._signing_key, algorithm=JWT_ALGORITHM)
        logger.debug(
            "access_token_issued",
            user_id=str(user_id),
            expires_seconds=self.expires_in,
        )
        return token

    def issue_for(
        self, user: User, extra_claims: Optional[Mapping[str, Any]] = None
    ) -> str:
        """Create an access token for a stored user."""
        return self.issue(
            user_id=str(user.id),
            unique_name=user.username or user.email,
            email=user.email,
            extra_claims=extra_claims,
        )
