"""
Domain exceptions - Semantic error types for account lifecycle.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
Each exception carries a stable user-facing message; the API layer
maps exception categories to HTTP status codes.
"""


class AccountError(Exception):
    """Base class for account domain errors."""

    message = "Request failed"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.message)


class ConflictError(AccountError):
    """The account is not in a state that allows the operation."""


class AlreadyRegistered(ConflictError):
    """Email belongs to a verified account."""

    message = "Email is already registered"


class AlreadyVerified(ConflictError):
    """Account has already completed OTP verification."""

    message = "Account is already verified"


class EmailAlreadyExists(ConflictError):
    """A record for the email exists at the moment of insertion."""

    message = "Email is already in use"


class NotFoundError(AccountError):
    """Base class for missing-resource errors."""


class AccountNotFound(NotFoundError):
    """No record exists for the email."""

    message = "Account not found"


class CredentialError(AccountError):
    """Supplied OTP or password was not accepted."""


class InvalidOTP(CredentialError):
    message = "Invalid OTP"


class OTPExpired(CredentialError):
    message = "OTP has expired, request a new one"


class InvalidCredentials(CredentialError):
    message = "Invalid email or password"


class NotVerified(CredentialError):
    message = "Account is not verified"


class Unauthenticated(AccountError):
    """Request carries no acceptable bearer token."""

    message = "Authentication required"


class InvalidToken(Unauthenticated):
    """Token is malformed, tampered with, or expired."""

    message = "Invalid or expired token"


class InternalError(AccountError):
    """Infrastructure failure surfaced to the caller."""

    message = "Internal server error"


class DeliveryFailure(InternalError):
    """OTP could not be delivered to the user's address."""

    message = "Failed to send OTP"


class StorageUnavailable(InternalError):
    """Backing store failed or timed out."""

    message = "Storage unavailable"
