"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from datetime import datetime
from typing import Protocol

from .models import Answer, Question, UserRecord


class UserDirectory(Protocol):
    """
    Port interface for user identity persistence.

    Implementations own the uniqueness and OTP-pairing invariants:
    every write sets otp_code and otp_expires_at together, and writes
    to pending records are conditional on the record still being pending.
    """

    def find_by_email(self, email: str) -> UserRecord | None:
        """Return the record for email, or None if absent."""
        ...

    def create_pending(
        self, email: str, password_hash: str, otp_code: str, otp_expires_at: datetime
    ) -> UserRecord:
        """
        Insert a new pending record.

        The uniqueness check and insert happen as one atomic step.

        Raises:
            EmailAlreadyExists: If any record exists for email
        """
        ...

    def update_pending_credentials(
        self, email: str, password_hash: str, otp_code: str, otp_expires_at: datetime
    ) -> UserRecord:
        """
        Overwrite password hash and OTP fields of a pending record.

        Raises:
            AccountNotFound: If no record exists
            AlreadyVerified: If the record is verified
        """
        ...

    def update_otp(self, email: str, otp_code: str, otp_expires_at: datetime) -> UserRecord:
        """
        Replace the OTP fields of a pending record, keeping the password.

        Raises:
            AccountNotFound: If no record exists
            AlreadyVerified: If the record is verified
        """
        ...

    def mark_verified(self, email: str) -> UserRecord:
        """
        Set is_verified and clear OTP fields.

        Raises:
            AccountNotFound: If no record exists
            AlreadyVerified: If the record is already verified
        """
        ...


class NotificationGateway(Protocol):
    """Port interface for OTP delivery."""

    def send_otp(self, address: str, code: str, timeout: float) -> None:
        """
        Deliver an OTP to a user-controlled address.

        Args:
            address: Recipient email address
            code: One-time passcode
            timeout: Upper bound in seconds for the delivery attempt

        Raises:
            DeliveryFailure: If delivery fails or times out
        """
        ...


class QuestionStore(Protocol):
    """Port interface for quiz question storage."""

    def add(self, question_text: str, answers: list[Answer]) -> Question:
        ...

    def list_all(self) -> list[Question]:
        ...
