"""Gate for protected operations: raw credential in, subject identity out."""

from dataclasses import dataclass

from .exceptions import InvalidToken, Unauthenticated
from .tokens import TokenIssuer


@dataclass(frozen=True)
class AuthGuard:
    """
    Resolves the caller of a protected operation from a bearer token.

    The credential is the raw header value with no scheme prefix. A
    structurally valid, unexpired token is trusted for its lifetime;
    no directory lookup is performed.
    """

    token_issuer: TokenIssuer

    def authenticate(self, credential: str | None) -> str:
        """
        Return the subject of a valid token.

        Raises:
            Unauthenticated: If the credential is missing or rejected
        """
        if credential is None or not credential.strip():
            raise Unauthenticated()
        try:
            return self.token_issuer.verify(credential.strip())
        except InvalidToken:
            raise Unauthenticated() from None
