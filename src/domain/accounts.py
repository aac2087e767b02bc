"""
Account lifecycle domain service - registration, OTP verification, login.

Account State Machine (Forward-Only Transitions)
================================================

States:
- UNREGISTERED: No record exists for the email
- PENDING: Record exists, OTP outstanding, cannot log in
- VERIFIED: OTP confirmed, terminal for this service

Transitions:
    UNREGISTERED -> PENDING   (register)
    PENDING -> PENDING        (register retry, resend OTP: new OTP, old one void)
    PENDING -> VERIFIED       (verify OTP with matching, unexpired code)

Register on a PENDING record always resets the OTP, even if the previous
one has not expired, so a lost email can be recovered without waiting
out the TTL.

Read-check-write sequences for one email run under a per-email lock.
The directory adapters additionally make each write conditional on the
record's state, so the OTP pairing holds across processes as well.

A delivery failure is raised to the caller after the record has been
written; the user recovers with resend_otp.
"""

import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from .exceptions import (
    AccountNotFound,
    AlreadyRegistered,
    AlreadyVerified,
    DeliveryFailure,
    EmailAlreadyExists,
    InvalidCredentials,
    InvalidOTP,
    NotVerified,
    OTPExpired,
)
from .locks import KeyedLock
from .models import OTPIssued, UserRecord
from .otp import OTPGenerator, utcnow
from .passwords import BcryptPasswordHasher
from .ports import NotificationGateway, UserDirectory
from .tokens import TokenIssuer

logger = logging.getLogger(__name__)


@dataclass
class AccountLifecycle:
    """
    Domain service orchestrating register, verify_otp, resend_otp and login.

    All collaborators are injected; the service holds no ambient state
    beyond its per-email lock registry.
    """

    directory: UserDirectory
    notifier: NotificationGateway
    hasher: BcryptPasswordHasher
    otp_generator: OTPGenerator
    token_issuer: TokenIssuer
    notification_timeout: float = 10.0
    clock: Callable[[], datetime] = field(default=utcnow)
    locks: KeyedLock = field(default_factory=KeyedLock)

    def register(self, email: str, password: str) -> OTPIssued:
        """
        Create or refresh a pending account and send it a new OTP.

        Args:
            email: User's email address (surrounding whitespace stripped)
            password: User's password (will be hashed)

        Returns:
            OTPIssued with the email and OTP expiry

        Raises:
            AlreadyRegistered: If the email belongs to a verified account
            DeliveryFailure: If the OTP could not be sent (record is kept)
        """
        email = self._normalize_email(email)
        password_hash = self.hasher.hash(password)

        with self.locks.hold(email):
            code, expires_at = self.otp_generator.generate(self.clock())
            existing = self.directory.find_by_email(email)

            if existing is None:
                try:
                    self.directory.create_pending(email, password_hash, code, expires_at)
                    logger.info(f"Registered pending account for {email}")
                except EmailAlreadyExists:
                    # Another process inserted first; treat as a pending retry
                    self._refresh_pending(email, password_hash, code, expires_at)
            elif existing.is_verified:
                raise AlreadyRegistered(email)
            else:
                self._refresh_pending(email, password_hash, code, expires_at)

        self._send(email, code)
        return OTPIssued(email=email, expires_at=expires_at)

    def verify_otp(self, email: str, code: str) -> UserRecord:
        """
        Confirm a pending account with its outstanding OTP.

        A wrong code is reported as InvalidOTP regardless of expiry; the
        correct code after expiry is OTPExpired.

        Raises:
            AccountNotFound: If no record exists
            AlreadyVerified: If the account is already verified
            InvalidOTP: If the code does not match
            OTPExpired: If the code matches but its TTL has elapsed
        """
        email = self._normalize_email(email)

        with self.locks.hold(email):
            record = self.directory.find_by_email(email)
            if record is None:
                raise AccountNotFound(email)
            if record.is_verified:
                raise AlreadyVerified(email)

            # Pending records always carry both OTP fields
            stored_code = record.otp_code or ""
            if not secrets.compare_digest(stored_code.encode(), code.strip().encode()):
                logger.warning(f"Invalid OTP submitted for {email}")
                raise InvalidOTP(email)
            if record.otp_expires_at is None or self.clock() >= record.otp_expires_at:
                logger.warning(f"Expired OTP submitted for {email}")
                raise OTPExpired(email)

            verified = self.directory.mark_verified(email)

        logger.info(f"Verified account {email}")
        return verified

    def resend_otp(self, email: str) -> OTPIssued:
        """
        Replace the outstanding OTP of a pending account and send it.

        Raises:
            AccountNotFound: If no record exists
            AlreadyVerified: If the account is already verified
            DeliveryFailure: If the OTP could not be sent (record is kept)
        """
        email = self._normalize_email(email)

        with self.locks.hold(email):
            record = self.directory.find_by_email(email)
            if record is None:
                raise AccountNotFound(email)
            if record.is_verified:
                raise AlreadyVerified(email)

            code, expires_at = self.otp_generator.generate(self.clock())
            self.directory.update_otp(email, code, expires_at)

        logger.info(f"Reissued OTP for {email}")
        self._send(email, code)
        return OTPIssued(email=email, expires_at=expires_at)

    def login(self, email: str, password: str) -> str:
        """
        Exchange credentials of a verified account for a bearer token.

        Raises:
            AccountNotFound: If no record exists
            NotVerified: If the account is pending, whatever the password
            InvalidCredentials: If the password does not match
        """
        email = self._normalize_email(email)

        record = self.directory.find_by_email(email)
        if record is None:
            raise AccountNotFound(email)
        if not record.is_verified:
            raise NotVerified(email)
        if not self.hasher.verify(password, record.password_hash):
            logger.warning(f"Failed login for {email}")
            raise InvalidCredentials(email)

        logger.info(f"Issued token for {email}")
        return self.token_issuer.issue(email)

    def _refresh_pending(
        self, email: str, password_hash: str, code: str, expires_at: datetime
    ) -> None:
        try:
            self.directory.update_pending_credentials(email, password_hash, code, expires_at)
        except AlreadyVerified:
            raise AlreadyRegistered(email) from None
        logger.info(f"Refreshed pending registration for {email}")

    def _send(self, email: str, code: str) -> None:
        try:
            self.notifier.send_otp(email, code, timeout=self.notification_timeout)
        except DeliveryFailure:
            logger.error(f"OTP delivery failed for {email}")
            raise

    def _normalize_email(self, email: str) -> str:
        """
        Normalize email address for storage and lookup.

        Only surrounding whitespace is removed; the identifier is
        otherwise case-sensitive as received.
        """
        return email.strip()
