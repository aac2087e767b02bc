"""
SMTP notification adapter - Implements NotificationGateway protocol.

Sends OTP codes as plain-text email through an SMTP relay. Each send
opens its own connection bounded by the caller's timeout, so a slow
relay cannot hold a request indefinitely.
"""

import logging
import smtplib
from email.message import EmailMessage

from src.domain.exceptions import DeliveryFailure

logger = logging.getLogger(__name__)

SUBJECT = "Your verification code"


class SmtpNotificationGateway:
    """Implements NotificationGateway protocol via smtplib."""

    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        username: str = "",
        password: str = "",
        use_tls: bool = True,
    ) -> None:
        self._host = host
        self._port = port
        self._sender = sender
        self._username = username
        self._password = password
        self._use_tls = use_tls

    def send_otp(self, address: str, code: str, timeout: float) -> None:
        """
        Email the OTP to address.

        Raises:
            DeliveryFailure: On connection, protocol, or timeout errors
        """
        message = self._build_message(address, code)
        try:
            with smtplib.SMTP(self._host, self._port, timeout=timeout) as server:
                if self._use_tls:
                    server.starttls()
                if self._username:
                    server.login(self._username, self._password)
                server.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            # OSError covers refused connections and socket timeouts
            logger.error(f"SMTP delivery to {address} failed: {type(e).__name__}")
            raise DeliveryFailure(address) from e

        logger.info(f"OTP email sent to {address}")

    def _build_message(self, address: str, code: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self._sender
        message["To"] = address
        message["Subject"] = SUBJECT
        message.set_content(
            f"Your verification code is {code}.\n\n"
            "If you did not request this code, you can ignore this email.\n"
        )
        return message
