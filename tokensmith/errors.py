"""Exception types raised by tokensmith components."""


class TokensmithError(Exception):
    """Base class for all tokensmith exceptions."""


class ConfigurationError(TokensmithError):
    """Raised at construction time when required settings are missing or invalid."""


class DuplicateRecordError(TokensmithError):
    """Raised by a persistence adapter when a unique constraint is violated."""


class DuplicateUserError(DuplicateRecordError):
    """A user with the same username or email already exists."""


class DuplicateTokenError(DuplicateRecordError):
    """A refresh token with the same value already exists."""
