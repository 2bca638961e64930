"""
Password Utilities

This module provides secure password hashing and verification. Hashes are
bcrypt strings, so the salt and work factor travel inside the hash and
verification needs no out-of-band parameters.
"""

import asyncio
from typing import Optional

import bcrypt

from patient_dashboard.common.exceptions import ValidationFailedError
from patient_dashboard.common.logger import get_logger

logger = get_logger(__name__)

MIN_ROUNDS = 10
MAX_ROUNDS = 15
DEFAULT_ROUNDS = 12

# bcrypt only looks at the first 72 bytes of its input
MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """
    bcrypt-based password hasher with a configurable work factor.

    Examples:
        hasher = PasswordHasher(rounds=12)
        stored = hasher.hash("Secret123!")
        hasher.verify("Secret123!", stored)  # True
    """

    def __init__(self, rounds: int = DEFAULT_ROUNDS):
        """
        Initialize the hasher.

        Args:
            rounds: bcrypt cost factor, 10 to 15 inclusive

        Raises:
            ValueError: If rounds is out of range
        """
        if not MIN_ROUNDS <= rounds <= MAX_ROUNDS:
            raise ValueError(f"Password hash rounds must be between {MIN_ROUNDS} and {MAX_ROUNDS}, got {rounds}")
        self.rounds = rounds

    def hash(self, password: str) -> str:
        """
        Hash a password with a fresh random salt.

        Args:
            password: The plaintext password

        Returns:
            The bcrypt hash as a string

        Raises:
            ValidationFailedError: If the password exceeds bcrypt's input limit
        """
        encoded = password.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            raise ValidationFailedError(
                "Password is too long",
                errors=[{"field": "password", "message": f"Password must be at most {MAX_PASSWORD_BYTES} bytes"}],
            )
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(encoded, salt).decode("utf-8")

    def verify(self, password: str, hashed_password: str) -> bool:
        """
        Verify that a password matches a stored hash.

        Uses bcrypt's constant-time comparison. A wrong password or an
        unusable stored hash yields False rather than an error.

        Args:
            password: The password to verify
            hashed_password: The stored bcrypt hash

        Returns:
            True if the password matches, False otherwise
        """
        try:
            return bcrypt.checkpw(password.encode("utf-8"), hashed_password.encode("utf-8"))
        except ValueError as e:
            logger.warning(f"Password verification rejected input: {e}")
            return False

    async def hash_async(self, password: str) -> str:
        """Hash a password in a worker thread."""
        return await asyncio.to_thread(self.hash, password)

    async def verify_async(self, password: str, hashed_password: str) -> bool:
        """Verify a password in a worker thread."""
        return await asyncio.to_thread(self.verify, password, hashed_password)


_default_hasher: Optional[PasswordHasher] = None


def get_password_hasher() -> PasswordHasher:
    """Get the module-level hasher, creating it with the default work factor."""
    global _default_hasher
    if _default_hasher is None:
        _default_hasher = PasswordHasher()
    return _default_hasher


def hash_password(password: str) -> str:
    """Hash a password with the default hasher."""
    return get_password_hasher().hash(password)


def verify_password(password: str, hashed_password: str) -> bool:
    """Verify a password with the default hasher."""
    return get_password_hasher().verify(password, hashed_password)

