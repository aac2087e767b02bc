"""Bearer token issuance and verification (HS256 JWT)."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

import jwt

from .exceptions import InvalidToken
from .otp import utcnow

logger = logging.getLogger(__name__)

TOKEN_TTL = timedelta(days=7)


@dataclass(frozen=True)
class TokenIssuer:
    """
    Signs and verifies compact tokens carrying a subject and an expiry.

    The secret and lifetime are fields of the issuer; nothing is read
    from module state.
    """

    secret: str
    ttl: timedelta = TOKEN_TTL
    algorithm: str = "HS256"

    def __post_init__(self) -> None:
        if not self.secret:
            raise ValueError("token signing secret must not be empty")

    def issue(self, subject: str, now: datetime | None = None) -> str:
        """Create a signed token for subject, valid for the issuer's TTL."""
        issued_at = now or utcnow()
        payload = {
            "sub": subject,
            "iat": issued_at,
            "exp": issued_at + self.ttl,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> str:
        """
        Decode a token and return its subject.

        Raises:
            InvalidToken: If the token is malformed, fails the signature
                check, is expired, or lacks a subject
        """
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "sub"]},
            )
        except jwt.InvalidTokenError as e:
            logger.warning(f"Rejected token: {type(e).__name__}")
            raise InvalidToken() from e

        subject = payload["sub"]
        if not isinstance(subject, str) or not subject:
            raise InvalidToken()
        return subject
