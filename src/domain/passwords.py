"""
Password hashing - bcrypt with an embedded random salt.

bcrypt.checkpw performs its own constant-time comparison, so
verification never needs a custom comparator.
"""

from dataclasses import dataclass

import bcrypt

# bcrypt only considers the first 72 bytes of input
MAX_PASSWORD_BYTES = 72


@dataclass(frozen=True)
class BcryptPasswordHasher:
    """One-way salted password hashing with a tunable cost factor."""

    rounds: int = 10

    def hash(self, plaintext: str) -> str:
        """
        Hash a password using bcrypt with the configured cost factor.

        Raises:
            ValueError: If the password exceeds bcrypt's 72-byte limit
        """
        encoded = plaintext.encode()
        if len(encoded) > MAX_PASSWORD_BYTES:
            raise ValueError("password exceeds 72 bytes")
        return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self.rounds)).decode()

    def verify(self, plaintext: str, digest: str) -> bool:
        """Return True if plaintext matches digest; malformed digests never match."""
        encoded = plaintext.encode()
        if len(encoded) > MAX_PASSWORD_BYTES:
            return False
        try:
            return bcrypt.checkpw(encoded, digest.encode())
        except ValueError:
            return False
