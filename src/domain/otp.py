"""
One-time passcode generation.

Codes are drawn uniformly from the zero-padded fixed-width space using
the secrets module, so "000123" is exactly as likely as "987654".
"""

import secrets
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class OTPGenerator:
    """Produces (code, expires_at) pairs for email verification."""

    ttl: timedelta = timedelta(minutes=10)
    length: int = 6
    clock: Callable[[], datetime] = field(default=utcnow)

    def __post_init__(self) -> None:
        if self.length < 1:
            raise ValueError("OTP length must be positive")
        if self.ttl <= timedelta(0):
            raise ValueError("OTP TTL must be positive")

    def generate(self, now: datetime | None = None) -> tuple[str, datetime]:
        """
        Generate a fresh code and its expiry.

        Args:
            now: Issue time; defaults to the generator's clock

        Returns:
            Tuple of (code, expires_at). The code is a string to
            preserve leading zeros.
        """
        issued_at = now or self.clock()
        code = str(secrets.randbelow(10**self.length)).zfill(self.length)
        return code, issued_at + self.ttl
