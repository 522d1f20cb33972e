"""PBKDF2-HMAC-SHA256 password hashing with self-describing records."""

import base64
import binascii
import hashlib
import hmac
import secrets
from typing import Optional

import structlog

logger = structlog.get_logger(__name__)

# Constants
HASH_ALGORITHM = "sha256"
SALT_BYTES = 16
KEY_BYTES = 32
DEFAULT_ITERATIONS = 100_000
MAX_ITERATIONS = 2**31 - 1
RECORD_DELIMITER = "."


class PasswordHasher:
    """Derive and verify salted password hashes.

    Records have the form ``{iterations}.{base64(salt)}.{base64(key)}``.
    Verification uses the iteration count stored in the record, so raising
    the default only affects new hashes.
    """

    def __init__(self, iterations: int = DEFAULT_ITERATIONS):
        if not 1 <= iterations <= MAX_ITERATIONS:
            raise ValueError(f"iterations must be between 1 and {MAX_ITERATIONS}")
        self.iterations = iterations

    def hash(self, password: str, iterations: Optional[int] = None) -> str:
        """Hash a password with a fresh random salt.

        Args:
            password: Plain-text password to hash
            iterations: PBKDF2 iteration count (defaults to the configured one)

        Returns:
            Serialized hash record
        """
        iterations = self.iterations if iterations is None else iterations
        if not 1 <= iterations <= MAX_ITERATIONS:
            raise ValueError(f"iterations must be between 1 and {MAX_ITERATIONS}")

        salt = secrets.token_bytes(SALT_BYTES)
        key = _derive(password, salt, iterations, KEY_BYTES)
        return RECORD_DELIMITER.join(
            (
                str(iterations),
                base64.b64encode(salt).decode("ascii"),
                base64.b64encode(key).decode("ascii"),
            )
        )

    def verify(self, hash_record: str, password: str) -> bool:
        """Verify a password against a stored hash record.

        A malformed record never raises; it simply does not match.

        Args:
            hash_record: Record produced by ``hash``
            password: Plain-text password to check

        Returns:
            True if the password matches, False otherwise
        """
        parsed = _parse(hash_record)
        if parsed is None:
            logger.warning("password_hash_malformed")
            return False

        iterations, salt, expected = parsed
        actual = _derive(password, salt, iterations, len(expected))
        return hmac.compare_digest(actual, expected)

    def needs_rehash(self, hash_record: str) -> bool:
        """Return True if the record should be replaced by a fresh hash.

        That is the case for malformed records and for records derived with
        fewer iterations than the current default.
        """
        parsed = _parse(hash_record)
        if parsed is None:
            return True
        return parsed[0] < self.iterations


def _derive(password: str, salt: bytes, iterations: int, length: int) -> bytes:
    return hashlib.pbkdf2_hmac(
        HASH_ALGORITHM,
        password.encode("utf-8", "surrogatepass"),
        salt,
        iterations,
        dklen=length,
    )


def _parse(hash_record: object) -> Optional[tuple[int, bytes, bytes]]:
    """Split a record into (iterations, salt, key), or None if malformed."""
    if not isinstance(hash_record, str):
        return None

    parts = hash_record.split(RECORD_DELIMITER)
    if len(parts) != 3:
        return None

    iterations_text, salt_text, key_text = parts
    if not (iterations_text.isascii() and iterations_text.isdigit()):
        return None
    iterations = int(iterations_text)
    if not 1 <= iterations <= MAX_ITERATIONS:
        return None

    try:
        salt = base64.b64decode(salt_text, validate=True)
        key = base64.b64decode(key_text, validate=True)
    except (binascii.Error, ValueError):
        return None

    if not salt or not key:
        return None

    return iterations, salt, key
