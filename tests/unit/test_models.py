"""Unit tests for Pydantic result models."""

from uuid import uuid4

import pytest
from pydantic import ValidationError

from tokensmith.models.results import (
    AuthError,
    ErrorKind,
    RegistrationResult,
    TokenPair,
    TokenResult,
)
from tokensmith.models.user import User


class TestResult:
    def test_success(self):
        user_id = uuid4()
        result = RegistrationResult.success(user_id)
        assert result.ok is True
        assert result.error is None
        assert result.user_id == user_id

    def test_failure(self):
        result = TokenResult.failure(ErrorKind.TOKEN, "Invalid refresh token")
        assert result.ok is False
        assert result.tokens is None
        assert result.error == AuthError(kind=ErrorKind.TOKEN, message="Invalid refresh token")

    def test_ok_with_error_rejected(self):
        with pytest.raises(ValidationError):
            TokenResult(ok=True, error=AuthError(kind=ErrorKind.TOKEN, message="x"))

    def test_failure_without_error_rejected(self):
        with pytest.raises(ValidationError):
            RegistrationResult(ok=False)

    def test_error_kind_values(self):
        assert {k.value for k in ErrorKind} == {"validation", "conflict", "authentication", "token"}


class TestTokenPair:
    def test_defaults_to_bearer(self):
        pair = TokenPair(access_token="a.b.c", refresh_token="r", expires_in=60)
        assert pair.token_type == "bearer"

    def test_expires_in_must_be_positive(self):
        with pytest.raises(ValidationError):
            TokenPair(access_token="a.b.c", refresh_token="r", expires_in=0)


class TestUser:
    def test_defaults(self):
        user = User(username="alice", email="alice@x.com", password_hash="h")
        assert user.email_confirmed is False
        assert user.display_name is None
        assert user.created_at.tzinfo is not None

    def test_ids_are_unique(self):
        a = User(username="a", email="a@x.com", password_hash="h")
        b = User(username="b", email="b@x.com", password_hash="h")
        assert a.id != b.id
