"""
Log-only OTP delivery for development and tests.

Selected with NOTIFICATION_BACKEND=console (the default). Nothing
leaves the process; the code appears in the application log so a
developer can complete verification by hand.
"""

import logging

logger = logging.getLogger(__name__)


class ConsoleNotificationGateway:
    """NotificationGateway that writes each OTP as one INFO log record."""

    def send_otp(self, address: str, code: str, timeout: float = 0.0) -> None:
        # Logging does not block on the network, so timeout is unused
        logger.info("[OTP] Email: %s Code: %s", address, code)
